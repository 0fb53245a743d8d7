#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/renderers/__init__.py
"""Output renderers.

The :class:`PromptRenderer` turns rendered element trees into the result of
a render pass: raw text, a content/metadata dict, chat message lists or a
pydantic-friendly structure.

Examples
--------
    >>> from promptmark.context import RenderContext
    >>> from promptmark.options import RenderOptions
    >>> from promptmark.parsers import parse_markup
    >>> from promptmark.renderers import PromptRenderer
    >>> context = RenderContext()
    >>> result = PromptRenderer(RenderOptions(format="dict")).render(parse_markup("Hello", context), context)
    >>> sorted(result)
    ['content', 'metadata']

"""

from promptmark.renderers.base import BaseRenderer
from promptmark.renderers.prompt import (
    PromptRenderer,
    determine_message_type,
    format_tool_for_pydantic,
    make_schema_strict,
    parse_chat_messages,
)

__all__ = [
    "BaseRenderer",
    "PromptRenderer",
    "determine_message_type",
    "format_tool_for_pydantic",
    "make_schema_strict",
    "parse_chat_messages",
]
