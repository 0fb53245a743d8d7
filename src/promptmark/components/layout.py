#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/components/layout.py
"""Paragraphs, sections and captioned paragraphs.

``<cp>`` and ``<section>`` render their children one header level deeper,
so nested captions come out as ``##``, ``###`` and so on.

"""

from __future__ import annotations

from promptmark.components.base import Component, format_captioned
from promptmark.components.registry import register_component


@register_component("cp", "captioned-paragraph")
class CaptionedParagraphComponent(Component):
    """Paragraph with a caption taken from the ``caption`` attribute.

    ``captionSerialized`` names the XML tag; without any caption the content
    is rendered as a plain paragraph.
    """

    xml_tag = "cp"

    def render(self) -> str:
        caption = str(self.get_attribute("caption", ""))
        caption_serialized = str(self.get_attribute("captionSerialized", "")) or caption
        header_level = self.context.header_level

        with self.context.increased_header_level():
            content = self.render_body()

        if self.xml_mode:
            if caption_serialized:
                return self.render_as_xml(caption_serialized, content)
            return f"{content.rstrip()}\n\n"

        display_caption = self.apply_text_transform(caption or caption_serialized)
        if not display_caption:
            return f"{content.rstrip()}\n\n"
        style = self.get_attribute("captionStyle", "header")
        return format_captioned(display_caption, style, content, header_level=header_level)


@register_component("p", "paragraph")
class ParagraphComponent(Component):
    """Paragraph followed by a blank line."""

    def render(self) -> str:
        return f"{self.render_body().rstrip()}\n\n"


@register_component("section", "sub-content")
class SectionComponent(Component):
    """Group whose children render one header level deeper."""

    xml_tag = "section"

    def render(self) -> str:
        with self.context.increased_header_level():
            content = self.render_children()
        if self.xml_mode:
            return self.render_as_xml(content=content)
        return content


@register_component("example")
class ExampleComponent(Component):
    """A single example, usually holding ``<input>`` and ``<output>``."""

    xml_tag = "example"

    def render(self) -> str:
        content = self.render_body()
        if self.xml_mode:
            return self.render_as_xml(content=content)
        return f"{content.rstrip()}\n\n"
