#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/utils/text.py
"""Small text helpers for attribute values."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from packaging import version

logger = logging.getLogger(__name__)

_SLICE_PATTERN = re.compile(r"^\s*(-?\d*)\s*(?::\s*(-?\d*)\s*)?$")
_WORD_BOUNDARY_PATTERN = re.compile(r"-(\w)")


def parse_slice(spec: str, length: int) -> Optional[tuple[int, int]]:
    """Parse Python-style slice notation against a sequence length.

    ``"1:3"``, ``":3"``, ``"3:"`` and ``":"`` behave like Python slices; a
    bare index ``"3"`` selects a single position.

    Parameters
    ----------
    spec : str
        Slice text
    length : int
        Length of the sequence being sliced

    Returns
    -------
    tuple of (int, int) or None
        ``(start, stop)`` bounds, or None if ``spec`` is not slice notation

    Examples
    --------
        >>> parse_slice("1:3", 10)
        (1, 3)
        >>> parse_slice("-2:", 10)
        (8, 10)
        >>> parse_slice("4", 10)
        (4, 5)

    """
    match = _SLICE_PATTERN.match(spec)
    if not match or (":" not in spec and not match.group(1)):
        return None

    if ":" not in spec:
        index = int(match.group(1))
        if index < 0:
            index += length
        return index, index + 1

    start = int(match.group(1)) if match.group(1) else None
    stop = int(match.group(2)) if match.group(2) else None
    start, stop, _ = slice(start, stop).indices(length)
    return start, max(start, stop)


def parse_json_attribute(value: Any, default: Any = None) -> Any:
    """Decode a JSON attribute value.

    Already-decoded values are returned unchanged. Malformed JSON yields
    ``default``.
    """
    if value is None:
        return default
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except ValueError:
        logger.debug("Attribute value is not valid JSON: %.60s", value)
        return default


def kebab_to_camel(name: str) -> str:
    """Convert ``kebab-case`` to ``camelCase``.

    Examples
    --------
        >>> kebab_to_camel("max-results")
        'maxResults'

    """
    return _WORD_BOUNDARY_PATTERN.sub(lambda m: m.group(1).upper(), name)


def compare_versions(left: str, right: str) -> int:
    """Compare two version strings.

    Returns a negative number, zero or a positive number when ``left`` is
    lower than, equal to or higher than ``right``. Pre-releases sort before
    their release.

    Raises
    ------
    packaging.version.InvalidVersion
        If either string is not a valid version

    """
    left_version, right_version = version.Version(left), version.Version(right)
    return (left_version > right_version) - (left_version < right_version)
