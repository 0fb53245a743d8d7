#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for captioned instruction blocks, layout and inline formatting."""
from typing import get_args

import pytest
from utils import render

from promptmark.components import format_captioned
from promptmark.components.base import transform_text
from promptmark.constants import TextTransform


@pytest.mark.unit
class TestFormatCaptioned:
    """Test the caption styles."""

    @pytest.mark.parametrize(
        "style,expected",
        [
            ("header", "# Role\n\nExpert\n\n"),
            ("bold", "**Role:** Expert\n\n"),
            ("plain", "Role: Expert\n\n"),
            ("hidden", "Expert\n\n"),
            ("unknown", "# Role\n\nExpert\n\n"),
        ],
    )
    def test_styles(self, style: str, expected: str) -> None:
        """Test each caption style."""
        assert format_captioned("Role", style, "Expert") == expected

    def test_header_level(self) -> None:
        """Test deeper header levels."""
        assert format_captioned("Role", "header", "x", header_level=3) == "### Role\n\nx\n\n"

    def test_collapse_trailing(self) -> None:
        """Test that block content does not gain extra blank lines."""
        assert format_captioned("Task", "header", "- a\n", collapse_trailing=True) == "# Task\n\n- a\n\n"
        assert format_captioned("Task", "header", "x\n\n", collapse_trailing=True) == "# Task\n\nx\n\n"

    @pytest.mark.parametrize("style,expected", [("header", "# Task\n\n"), ("hidden", ""), ("bold", "**Task:** \n\n")])
    def test_blank_content(self, style: str, expected: str) -> None:
        """Test that blank content adds no empty body."""
        assert format_captioned("Task", style, "") == expected

    @pytest.mark.parametrize("transform", get_args(TextTransform))
    def test_every_transform_applies(self, transform: str) -> None:
        """Test that each declared caption transform changes the caption."""
        assert transform_text("mIxed caption", transform) != "mIxed caption"


@pytest.mark.unit
class TestCaptionedComponents:
    """Test role, task and the other captioned blocks."""

    @pytest.mark.parametrize(
        "markup,expected",
        [
            ("<role>Expert</role>", "# Role\n\nExpert\n\n"),
            ("<task>Summarize</task>", "# Task\n\nSummarize\n\n"),
            ("<hint>Be brief</hint>", "# Hint\n\nBe brief\n\n"),
            ("<output-format>JSON</output-format>", "# Output Format\n\nJSON\n\n"),
            ("<introducer>Here goes</introducer>", "Here goes\n\n"),
            ("<input>2+2</input>", "**Input:** 2+2\n\n"),
            ("<output>4</output>", "**Output:** 4\n\n"),
        ],
    )
    def test_default_captions(self, markup: str, expected: str) -> None:
        """Test default captions and caption styles."""
        assert render(markup) == expected

    def test_explicit_caption_and_style(self) -> None:
        """Test overriding the caption and its style."""
        assert render('<task caption="Job" captionStyle="plain">Sort</task>') == "Job: Sort\n\n"

    def test_empty_task(self) -> None:
        """Test an instruction block with no body."""
        assert render("<task></task>") == "# Task\n\n"

    def test_placeholders_in_body(self) -> None:
        """Test that body text is substituted."""
        assert render("<role>You are {{persona}}.</role>", {"persona": "a poet"}) == "# Role\n\nYou are a poet.\n\n"

    def test_task_with_list_keeps_block_spacing(self) -> None:
        """Test mixed content inside a task."""
        result = render("<task>Do this:<list><item>a</item><item>b</item></list></task>")

        assert result == "# Task\n\nDo this:\n\n- a\n- b\n\n"

    def test_nested_in_section(self) -> None:
        """Test that sections deepen caption headers."""
        assert render("<section><role>x</role></section>") == "## Role\n\nx\n\n"

    def test_xml_mode(self) -> None:
        """Test that XML syntax drops the caption."""
        assert render("<role>Expert</role>", syntax="xml") == "<role>Expert</role>\n"
        assert render('<task syntax="xml">Sort</task>') == "<task>Sort</task>\n"


@pytest.mark.unit
class TestStylesheet:
    """Test stylesheet defaults on captioned components."""

    def test_tag_selector(self) -> None:
        """Test rules for a tag."""
        assert render("<role>x</role>", stylesheet={"role": {"captionStyle": "bold"}}) == "**Role:** x\n\n"

    def test_explicit_attribute_wins(self) -> None:
        """Test that element attributes override stylesheet rules."""
        result = render('<role captionStyle="plain">x</role>', stylesheet={"role": {"captionStyle": "bold"}})

        assert result == "Role: x\n\n"

    def test_class_selector(self) -> None:
        """Test rules for a class name."""
        stylesheet = {".loud": {"captionStyle": "bold", "caption": "WHO"}}

        assert render('<role className="loud">x</role>', stylesheet=stylesheet) == "**WHO:** x\n\n"

    def test_caption_text_transform(self) -> None:
        """Test the caption text transform for a tag."""
        stylesheet = {"role": {"captionTextTransform": "upper"}}

        assert render("<role>x</role>", stylesheet=stylesheet) == "# ROLE\n\nx\n\n"

    def test_caption_text_transform_fallback(self) -> None:
        """Test the transform declared under the cp selector."""
        stylesheet = {"cp": {"captionTextTransform": "lower"}}

        assert render("<hint>x</hint>", stylesheet=stylesheet) == "# hint\n\nx\n\n"

    def test_inline_stylesheet_component(self) -> None:
        """Test rules declared in the document itself."""
        markup = '<stylesheet>{"role": {"captionStyle": "bold"}}</stylesheet><role>x</role>'

        assert render(markup) == "**Role:** x\n\n"


@pytest.mark.unit
class TestLayout:
    """Test paragraphs, captioned paragraphs and examples."""

    def test_paragraph(self) -> None:
        """Test that paragraphs end with a blank line."""
        assert render("<p>Hello</p><p>World</p>") == "Hello\n\nWorld\n\n"

    def test_text_before_block(self) -> None:
        """Test the blank line between text and a following block."""
        assert render("Intro<p>Body</p>") == "Intro\n\nBody\n\n"

    def test_captioned_paragraph(self) -> None:
        """Test cp with a caption."""
        assert render('<cp caption="Notes">Body</cp>') == "# Notes\n\nBody\n\n"
        assert render('<cp caption="Notes" captionStyle="bold">Body</cp>') == "**Notes:** Body\n\n"

    def test_captioned_paragraph_deepens_nested_captions(self) -> None:
        """Test that children of cp render one level deeper."""
        assert render('<cp caption="Outer"><role>x</role></cp>').startswith("# Outer\n\n## Role\n\nx\n\n")

    def test_captioned_paragraph_without_caption(self) -> None:
        """Test cp without any caption."""
        assert render("<cp>Body</cp>") == "Body\n\n"

    def test_captioned_paragraph_xml(self) -> None:
        """Test that captionSerialized names the XML tag."""
        markup = '<cp caption="My Notes" captionSerialized="notes">x</cp>'

        assert render(markup, syntax="xml") == "<notes>x</notes>\n"

    def test_example(self) -> None:
        """Test an example holding input and output."""
        result = render("<example><input>hi</input><output>hello</output></example>")

        assert result == "**Input:** hi\n\n**Output:** hello\n\n"


@pytest.mark.unit
class TestFormatting:
    """Test inline formatting, headers, line breaks and code."""

    def test_inline_emphasis(self) -> None:
        """Test the emphasis markers."""
        result = render("<p>a <b>b</b>, <i>i</i>, <u>u</u>, <s>s</s></p>")

        assert result == "a **b**, *i*, __u__, ~~s~~\n\n"

    def test_headers(self) -> None:
        """Test header levels from the tag, the attribute and the context."""
        assert render("<h>Title</h>") == "# Title\n\n"
        assert render("<h2>Sub</h2>") == "## Sub\n\n"
        assert render('<h level="3">Deep</h>') == "### Deep\n\n"
        assert render("<section><h>Nested</h></section>") == "## Nested\n\n"

    def test_line_breaks(self) -> None:
        """Test explicit line breaks."""
        assert render("<p>a<br/>b</p>") == "a\nb\n\n"
        assert render('<p>a<br newLineCount="2"/>b</p>') == "a\n\nb\n\n"

    def test_inline_code(self) -> None:
        """Test inline code inside prose."""
        assert render("<p>Run <code>ls -la</code> now</p>") == "Run `ls -la` now\n\n"

    def test_code_block(self) -> None:
        """Test fenced code blocks."""
        assert render('<code-block lang="python">print(1)</code-block>') == "```python\nprint(1)\n```\n\n"
        assert render('<code inline="false">x = 1</code>') == "```\nx = 1\n```\n\n"

    def test_code_keeps_placeholders(self) -> None:
        """Test that code is not substituted."""
        assert render("<code>{{x}}</code>", {"x": 1}) == "`{{x}}`"

    def test_unknown_tag(self) -> None:
        """Test the fallback for unregistered tags."""
        assert render("<mystery>hi</mystery>") == "mystery: hi"

    def test_tag_aliases_are_case_insensitive(self) -> None:
        """Test CamelCase and alias lookups."""
        assert render("<OutputFormat>JSON</OutputFormat>") == "# Output Format\n\nJSON\n\n"
        assert render("<p><strong>x</strong></p>") == "**x**\n\n"
