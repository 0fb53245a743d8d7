#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/components/formatting.py
"""Inline emphasis, headers, line breaks and code."""

from __future__ import annotations

import re

from promptmark.components.base import Component
from promptmark.components.registry import register_component
from promptmark.constants import MAX_HEADER_LEVEL

_HEADING_TAG_PATTERN = re.compile(r"^h([1-6])$")


class _WrappedInline(Component):
    """Inline text wrapped in a pair of markdown markers."""

    inline = True
    marker = ""

    def render(self) -> str:
        content = self.render_body()
        if self.xml_mode:
            return self.render_as_xml(content=content)
        return f"{self.marker}{content}{self.marker}"


@register_component("b", "bold", "strong")
class BoldComponent(_WrappedInline):
    xml_tag = "b"
    marker = "**"


@register_component("i", "italic", "em")
class ItalicComponent(_WrappedInline):
    xml_tag = "i"
    marker = "*"


@register_component("u", "underline")
class UnderlineComponent(_WrappedInline):
    xml_tag = "u"
    marker = "__"


@register_component("s", "strikethrough")
class StrikethroughComponent(_WrappedInline):
    xml_tag = "s"
    marker = "~~"


@register_component("span", "inline")
class InlineComponent(_WrappedInline):
    """Generic inline span with no markup of its own."""

    xml_tag = "span"


@register_component("h", "header", "h1", "h2", "h3", "h4", "h5", "h6")
class HeaderComponent(Component):
    """Heading.

    The level comes from an ``hN`` tag, then the ``level`` attribute, then
    the context header level, clamped to 1..6.
    """

    xml_tag = "h"

    def level(self) -> int:
        match = _HEADING_TAG_PATTERN.match(self.element.name)
        if match:
            level = int(match.group(1))
        else:
            level = self.get_int("level", self.context.header_level) or self.context.header_level
        return min(max(level, 1), MAX_HEADER_LEVEL)

    def render(self) -> str:
        content = self.render_body()
        level = self.level()
        if self.xml_mode:
            return self.render_as_xml(content=content, attributes={"level": level})
        if self.get_bool("inline"):
            return content
        return f"{'#' * level} {content}\n\n"


@register_component("br", "nl", "newline")
class NewlineComponent(Component):
    """Explicit line breaks; ``newLineCount`` sets how many."""

    xml_tag = "nl"
    inline = True

    def render(self) -> str:
        count = max(self.get_int("newLineCount", 1) or 0, 0)
        if self.xml_mode:
            return self.render_as_xml(content="", attributes={"count": count})
        return "\n" * count


@register_component("code", "code-block")
class CodeComponent(Component):
    """Code, inline by default. ``inline="false"`` gives a fenced block."""

    xml_tag = "code"
    inline = True

    def render(self) -> str:
        content = self.render_raw_code()
        default_inline = self.element.name != "code-block"
        is_inline = self.get_bool("inline", default_inline)
        lang = str(self.get_attribute("lang", ""))

        if self.xml_mode:
            attributes: dict[str, object] = {"inline": is_inline}
            if lang:
                attributes["lang"] = lang
            return self.render_as_xml(content=content, attributes=attributes)

        if is_inline:
            return f"`{content}`"
        return f"```{lang}\n{content}\n```\n\n"

    def render_raw_code(self) -> str:
        """Return the code text. Placeholders are left as written."""
        if self.element.element_children:
            return self.render_children().strip()
        return self.element.plain_text()
