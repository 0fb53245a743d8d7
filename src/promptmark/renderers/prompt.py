#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/renderers/prompt.py
"""Output renderer for prompt documents.

The :class:`PromptRenderer` renders the element trees of a document once and
shapes the result according to ``options.format``:

``raw``
    The rendered text. With chat enabled the text is framed by message
    headers such as ``===== system =====``.
``dict``
    ``{"content": <raw>, "metadata": {...}}``. The metadata holds the chat
    flag, stylesheet and variables, the document metadata, and the response
    schema, tools and runtime parameters when present.
``openai_chat``
    A list of ``{"role", "content"}`` messages.
``openaiResponse``
    A single assistant response with optional metadata.
``langchain``
    ``{"messages": <openai_chat>, "content": <raw>}``.
``pydantic``
    Content, variables and strict JSON schemas for the response schema and
    tool parameters.

Metadata is read from the context after the content has been rendered, since
components record schemas, tools and messages while they render.

"""

from __future__ import annotations

import copy
import logging
import re
from typing import TYPE_CHECKING, Any, Sequence

from promptmark.components.dispatch import render_elements
from promptmark.constants import RENDERER_FORMATS
from promptmark.exceptions import FormatError
from promptmark.options.base import RenderOptions
from promptmark.renderers.base import BaseRenderer

if TYPE_CHECKING:
    from promptmark.ast.nodes import Element
    from promptmark.context import RenderContext

logger = logging.getLogger(__name__)

_SECTION_SEPARATOR = re.compile(r"\n\n+")
_ASSISTANT_PREFIXES = ("**Output:**", "**Assistant:**", "Response:")
_ASSISTANT_PREFIX_PATTERN = re.compile(r"^(?:\*\*(?:Output|Assistant):\*\*\s*|Response:\s*)")
_QUESTION_PATTERN = re.compile(r"\b(what|how|why|when|where|please|can you)\b", re.IGNORECASE)

_SYSTEM_TAGS = frozenset({"role", "task", "hint", "text", "p"})
_DOCUMENT_TAGS = frozenset({"document", "file"})

PYDANTIC_METADATA = {
    "format": "pydantic",
    "version": "1.0",
    "python_compatible": True,
    "strict_json_schema": True,
}


def determine_message_type(elements: Sequence["Element"]) -> str:
    """Classify a document without message components as ``system`` or ``human``.

    A document with both a role and a task is a system prompt, as is one that
    only sets up a role with hints and plain text. Documents that import
    files or ask questions are human messages, and so is anything else.
    """
    tags = [element.name for element in elements]
    has_role = "role" in tags
    has_task = "task" in tags
    has_document = any(tag in _DOCUMENT_TAGS for tag in tags)
    has_question = any(_QUESTION_PATTERN.search(element.content or "") for element in elements)

    if has_role and has_task:
        return "system"
    if has_role and not has_document and not has_question and all(tag in _SYSTEM_TAGS for tag in tags):
        return "system"
    return "human"


def parse_chat_messages(content: str) -> list[dict[str, Any]]:
    """Split rendered text into chat messages.

    Sections are separated by blank lines. A section that starts with
    ``**Output:**``, ``**Assistant:**`` or ``Response:`` opens an assistant
    message; everything before it belongs to the user.

    Examples
    --------
        >>> parse_chat_messages("What is 2+2?\\n\\n**Output:** 4")
        [{'role': 'user', 'content': 'What is 2+2?'}, {'role': 'assistant', 'content': '4'}]

    """
    messages: list[dict[str, Any]] = []
    role = "user"
    current = ""
    for section in _SECTION_SEPARATOR.split(content):
        section = section.strip()
        if not section:
            continue
        if section.startswith(_ASSISTANT_PREFIXES):
            if current:
                messages.append({"role": role, "content": current.strip()})
            role = "assistant"
            current = _ASSISTANT_PREFIX_PATTERN.sub("", section)
        else:
            current = f"{current}\n\n{section}" if current else section

    if current:
        messages.append({"role": role, "content": current.strip()})
    return messages or [{"role": "user", "content": content}]


def make_schema_strict(schema: Any) -> Any:
    """Return a strict copy of a JSON schema.

    Objects get ``additionalProperties: false`` and, when they do not list
    ``required`` properties, require all of them. Nested object properties
    and array items are processed recursively, and ``null`` defaults are
    dropped.

    Examples
    --------
        >>> make_schema_strict({"type": "object", "properties": {"a": {"type": "string"}}})
        {'type': 'object', 'properties': {'a': {'type': 'string'}}, 'additionalProperties': False, 'required': ['a']}

    """
    if not isinstance(schema, dict):
        return schema

    strict = dict(schema)
    if strict.get("type") == "object":
        strict["additionalProperties"] = False
        properties = strict.get("properties")
        if isinstance(properties, dict):
            if "required" not in strict:
                strict["required"] = list(properties)
            strict["properties"] = {name: make_schema_strict(prop) for name, prop in properties.items()}
    elif strict.get("type") == "array" and strict.get("items"):
        strict["items"] = make_schema_strict(strict["items"])

    if "default" in strict and strict["default"] is None:
        del strict["default"]
    return strict


def format_tool_for_pydantic(tool: dict[str, Any]) -> dict[str, Any]:
    """Reduce a tool to its name, description and strict parameter schema."""
    formatted = {"name": tool.get("name"), "description": tool.get("description")}
    if tool.get("parameters"):
        formatted["parameters"] = make_schema_strict(tool["parameters"])
    return formatted


class PromptRenderer(BaseRenderer):
    """Render prompt documents to one of the renderer output formats.

    Parameters
    ----------
    options : RenderOptions or None, default = None
        Rendering options; ``options.format`` selects the output format

    Examples
    --------
        >>> from promptmark.context import RenderContext
        >>> from promptmark.parsers import parse_markup
        >>> context = RenderContext(chat=False)
        >>> elements = parse_markup("<role>Tester</role>", context)
        >>> PromptRenderer(RenderOptions(format="raw")).render(elements, context)
        '# Role\\n\\nTester\\n\\n'

    """

    def __init__(self, options: RenderOptions | None = None):
        """Initialize the renderer."""
        super().__init__(options)
        self._handlers = {
            "raw": self._render_raw,
            "dict": self._render_dict,
            "openai_chat": self._render_openai_chat,
            "openaiResponse": self._render_openai_response,
            "langchain": self._render_langchain,
            "pydantic": self._render_pydantic,
        }

    def render(self, elements: Sequence["Element"], context: "RenderContext") -> Any:
        """Render ``elements`` in the configured output format.

        Raises
        ------
        FormatError
            If ``options.format`` is not a known output format

        """
        handler = self._handlers.get(self.options.format)
        if handler is None:
            raise FormatError(self.options.format, list(RENDERER_FORMATS))

        elements = list(elements)
        content = render_elements(elements, context)
        logger.debug("Rendered %d top-level elements as %s", len(elements), self.options.format)
        return handler(elements, content, context)

    # ------------------------------------------------------------------
    # Formats
    # ------------------------------------------------------------------

    def _render_raw(self, elements: list["Element"], content: str, context: "RenderContext") -> str:
        if not context.chat:
            return content
        if context.chat_messages:
            return "".join(
                f"===== {message['role']} =====\n\n{message['content']}\n" for message in context.chat_messages
            )
        if not content.strip():
            return content
        return f"===== {determine_message_type(elements)} =====\n\n{content.strip()}\n"

    def _render_dict(self, elements: list["Element"], content: str, context: "RenderContext") -> dict[str, Any]:
        metadata: dict[str, Any] = {
            "chat": context.chat,
            "stylesheet": context.stylesheet,
            "variables": context.variables,
        }
        metadata.update(context.custom_metadata)
        if context.response_schema is not None:
            metadata["response_schema"] = context.response_schema
        if context.tools:
            metadata["tools"] = context.tools
        if context.runtime_parameters:
            metadata["runtime_parameters"] = context.runtime_parameters
        return {"content": self._render_raw(elements, content, context), "metadata": metadata}

    def _render_openai_chat(
        self, elements: list["Element"], content: str, context: "RenderContext"
    ) -> list[dict[str, Any]]:
        if context.chat_messages:
            return copy.deepcopy(context.chat_messages)
        if context.chat:
            return parse_chat_messages(content)
        return [{"role": "user", "content": content}]

    def _render_openai_response(
        self, elements: list["Element"], content: str, context: "RenderContext"
    ) -> dict[str, Any]:
        response: dict[str, Any] = {
            "content": self._render_raw(elements, content, context).strip(),
            "type": "assistant",
        }
        metadata: dict[str, Any] = {}
        if context.variables:
            metadata["variables"] = context.variables
        if context.response_schema is not None:
            metadata["response_schema"] = context.response_schema
        if context.tools:
            metadata["tools"] = context.tools
        if context.runtime_parameters:
            metadata["runtime_parameters"] = context.runtime_parameters
        metadata.update(context.custom_metadata)
        if metadata:
            response["metadata"] = metadata
        return response

    def _render_langchain(self, elements: list["Element"], content: str, context: "RenderContext") -> dict[str, Any]:
        return {
            "messages": self._render_openai_chat(elements, content, context),
            "content": self._render_raw(elements, content, context),
        }

    def _render_pydantic(self, elements: list["Element"], content: str, context: "RenderContext") -> dict[str, Any]:
        schemas = [] if context.response_schema is None else [make_schema_strict(context.response_schema)]
        return {
            "content": self._render_raw(elements, content, context),
            "variables": context.variables,
            "chat_enabled": context.chat,
            "metadata": dict(PYDANTIC_METADATA),
            "schemas": schemas,
            "tools": [format_tool_for_pydantic(tool) for tool in context.tools],
            "custom_metadata": dict(context.custom_metadata),
        }
