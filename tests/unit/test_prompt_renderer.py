#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for the prompt renderer and its output formats."""
import json
from pathlib import Path
from typing import Any

import pytest

from promptmark.context import RenderContext
from promptmark.exceptions import FormatError, InvalidOptionsError
from promptmark.options import RenderOptions
from promptmark.parsers import parse_markup
from promptmark.renderers import (
    PromptRenderer,
    determine_message_type,
    format_tool_for_pydantic,
    make_schema_strict,
    parse_chat_messages,
)


def render_as(markup: str, fmt: str, chat: bool = True, **context_kwargs: Any) -> Any:
    """Parse markup and render it in one output format."""
    context = RenderContext(chat=chat, **context_kwargs)
    elements = parse_markup(markup, context)
    return PromptRenderer(RenderOptions(format=fmt, chat=chat)).render(elements, context)


@pytest.mark.unit
class TestHelpers:
    """Test the module-level helpers."""

    @pytest.mark.parametrize(
        "markup,expected",
        [
            ("<role>r</role><task>t</task>", "system"),
            ("<role>r</role><hint>h</hint><p>More</p>", "system"),
            ('<role>r</role><document src="a.txt"/>', "human"),
            ("<role>r</role><p>What time is it?</p>", "human"),
            ("<p>Plain request</p>", "human"),
        ],
    )
    def test_determine_message_type(self, markup: str, expected: str, context: RenderContext) -> None:
        """Test classification of documents without message components."""
        assert determine_message_type(parse_markup(markup, context)) == expected

    def test_parse_chat_messages(self) -> None:
        """Test splitting text at assistant prefixes."""
        content = "Translate this.\n\nHello\n\n**Output:** Bonjour\n\nResponse: Salut"

        assert parse_chat_messages(content) == [
            {"role": "user", "content": "Translate this.\n\nHello"},
            {"role": "assistant", "content": "Bonjour"},
            {"role": "assistant", "content": "Salut"},
        ]

    def test_parse_chat_messages_empty(self) -> None:
        """Test that empty content is a single user message."""
        assert parse_chat_messages("") == [{"role": "user", "content": ""}]

    def test_make_schema_strict(self) -> None:
        """Test strict schema conversion of nested objects and arrays."""
        schema = {
            "type": "object",
            "properties": {
                "tags": {"type": "array", "items": {"type": "object", "properties": {"x": {"type": "string"}}}},
                "note": {"type": "string", "default": None},
            },
            "required": ["tags"],
        }

        strict = make_schema_strict(schema)

        assert strict["additionalProperties"] is False
        assert strict["required"] == ["tags"]
        assert strict["properties"]["tags"]["items"]["additionalProperties"] is False
        assert strict["properties"]["tags"]["items"]["required"] == ["x"]
        assert "default" not in strict["properties"]["note"]
        assert "additionalProperties" not in schema

    def test_format_tool_for_pydantic(self) -> None:
        """Test reducing a tool to its pydantic form."""
        tool = {"name": "f", "description": "d", "schema": "{}", "parameters": {"type": "object", "properties": {}}}

        assert format_tool_for_pydantic(tool) == {
            "name": "f",
            "description": "d",
            "parameters": {"type": "object", "properties": {}, "additionalProperties": False, "required": []},
        }


@pytest.mark.unit
class TestRawFormat:
    """Test the raw format."""

    def test_chat_disabled(self) -> None:
        """Test the plain rendered text."""
        assert render_as("<role>Tester</role>", "raw", chat=False) == "# Role\n\nTester\n\n"

    def test_system_prompt_header(self) -> None:
        """Test the message header for documents without messages."""
        result = render_as("<role>Tester</role><task>Test</task>", "raw")

        assert result == "===== system =====\n\n# Role\n\nTester\n\n# Task\n\nTest\n"

    def test_human_prompt_header(self) -> None:
        """Test a question classified as a human message."""
        assert render_as("<p>What is 2+2?</p>", "raw") == "===== human =====\n\nWhat is 2+2?\n"

    def test_chat_messages(self) -> None:
        """Test one framed section per chat message."""
        result = render_as("<system-msg>Be terse</system-msg><human-msg>Hi</human-msg>", "raw")

        assert result == "===== system =====\n\nBe terse\n===== user =====\n\nHi\n"

    def test_empty_document(self) -> None:
        """Test that an empty document stays empty."""
        assert render_as("", "raw") == ""


@pytest.mark.unit
class TestStructuredFormats:
    """Test dict, chat and structured formats."""

    def test_dict(self) -> None:
        """Test content and metadata."""
        result = render_as('<meta title="T"/><role>x</role>', "dict", chat=False, variables={"a": 1})

        assert result == {
            "content": "# Role\n\nx\n\n",
            "metadata": {"chat": False, "stylesheet": {}, "variables": {"a": 1}, "title": "T"},
        }

    def test_dict_side_channels(self) -> None:
        """Test schema, tools and runtime parameters in the metadata."""
        markup = (
            '<output-schema>{"type": "object"}</output-schema>'
            '<tool name="t">{"type": "object"}</tool>'
            '<meta type="runtime" temperature="0.2"/>'
            "<task>x</task>"
        )

        metadata = render_as(markup, "dict", chat=False)["metadata"]

        assert metadata["response_schema"] == {"type": "object"}
        assert metadata["tools"][0]["name"] == "t"
        assert metadata["runtime_parameters"] == {"temperature": 0.2}

    def test_openai_chat_from_messages(self) -> None:
        """Test messages collected from message components."""
        result = render_as("<human-msg>Hi</human-msg><ai-msg>Hello</ai-msg>", "openai_chat")

        assert result == [{"role": "user", "content": "Hi"}, {"role": "assistant", "content": "Hello"}]

    def test_openai_chat_from_sections(self) -> None:
        """Test messages parsed from example output captions."""
        result = render_as("<p>What is 2+2?</p><output>4</output>", "openai_chat")

        assert result == [{"role": "user", "content": "What is 2+2?"}, {"role": "assistant", "content": "4"}]

    def test_openai_chat_without_chat(self) -> None:
        """Test a single user message when chat is disabled."""
        result = render_as("<task>x</task>", "openai_chat", chat=False)

        assert result == [{"role": "user", "content": "# Task\n\nx\n\n"}]

    def test_openai_response(self) -> None:
        """Test the assistant response form."""
        result = render_as('<meta author="Ada"/><p>Done</p>', "openaiResponse", chat=False, variables={"v": 1})

        assert result == {"content": "Done", "type": "assistant", "metadata": {"variables": {"v": 1}, "author": "Ada"}}

    def test_openai_response_without_metadata(self) -> None:
        """Test that empty metadata is omitted."""
        assert render_as("<p>Done</p>", "openaiResponse", chat=False) == {"content": "Done", "type": "assistant"}

    def test_langchain(self) -> None:
        """Test messages plus content."""
        result = render_as("<human-msg>Hi</human-msg>", "langchain")

        assert result == {"messages": [{"role": "user", "content": "Hi"}], "content": "===== user =====\n\nHi\n"}

    def test_pydantic(self) -> None:
        """Test strict schemas and tools."""
        markup = (
            '<output-schema>{"type": "object", "properties": {"a": {"type": "string"}}}</output-schema>'
            "<task>x</task>"
        )

        result = render_as(markup, "pydantic", chat=False)

        assert result["content"] == "# Task\n\nx\n\n"
        assert result["chat_enabled"] is False
        assert result["metadata"]["format"] == "pydantic"
        assert result["schemas"] == [
            {
                "type": "object",
                "properties": {"a": {"type": "string"}},
                "additionalProperties": False,
                "required": ["a"],
            }
        ]
        assert result["tools"] == []


@pytest.mark.unit
class TestRendererBase:
    """Test the shared renderer behavior."""

    def test_invalid_options_type(self) -> None:
        """Test that options must be RenderOptions."""
        with pytest.raises(InvalidOptionsError):
            PromptRenderer("raw")  # type: ignore[arg-type]

    def test_unknown_format(self, context: RenderContext) -> None:
        """Test FormatError for a format without a handler."""
        options = RenderOptions()
        object.__setattr__(options, "format", "bogus")

        with pytest.raises(FormatError) as exc_info:
            PromptRenderer(options).render([], context)
        assert exc_info.value.format_type == "bogus"

    def test_render_to_string(self, context: RenderContext) -> None:
        """Test that structured results are serialized as JSON."""
        elements = parse_markup("<p>x</p>", context)

        text = PromptRenderer(RenderOptions(format="dict", chat=False)).render_to_string(elements, context)

        assert json.loads(text)["content"] == "x\n\n"

    def test_render_to_file(self, tmp_path: Path, context: RenderContext) -> None:
        """Test writing the text form of the result."""
        output = tmp_path / "out.md"
        elements = parse_markup("<p>x</p>", context)

        result = PromptRenderer(RenderOptions(format="raw", chat=False)).render_to_file(elements, context, output)

        assert result == "x\n\n"
        assert output.read_text(encoding="utf-8") == "x\n\n"
