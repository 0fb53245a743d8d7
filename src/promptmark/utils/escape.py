#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/utils/escape.py
"""Escaping helpers for structured output."""

from __future__ import annotations

from typing import Any, Mapping


def escape_xml(text: Any, quote: bool = False) -> str:
    """Escape XML special characters in text content.

    Parameters
    ----------
    text : Any
        Value to escape. Non-strings are converted with ``str``.
    quote : bool, default False
        Also escape double quotes, for attribute values

    Returns
    -------
    str
        Escaped text

    Examples
    --------
        >>> escape_xml("a < b & c")
        'a &lt; b &amp; c'

    """
    escaped = str(text).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
    if quote:
        escaped = escaped.replace('"', "&quot;")
    return escaped


def unescape_xml(text: str) -> str:
    """Reverse the five predefined XML entities."""
    return (
        text.replace("&lt;", "<")
        .replace("&gt;", ">")
        .replace("&quot;", '"')
        .replace("&apos;", "'")
        .replace("&amp;", "&")
    )


def format_xml_attributes(attributes: Mapping[str, Any]) -> str:
    """Format a mapping as `` key="value"`` pairs.

    Booleans are written lower-case and None values are skipped.
    """
    parts = []
    for key, value in attributes.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        parts.append(f' {key}="{escape_xml(value, quote=True)}"')
    return "".join(parts)
