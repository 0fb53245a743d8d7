#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/components/text.py
"""Text nodes and unknown tags."""

from __future__ import annotations

from promptmark.components.base import Component


class TextComponent(Component):
    """Render a text node, substituting ``{{expr}}`` placeholders.

    Text without placeholders is returned unchanged.
    """

    inline = True

    def render(self) -> str:
        """Return the text content."""
        return str(self.context.template_engine.substitute(self.element.content))


class UnknownComponent(Component):
    """Fallback for tags with no registered component.

    Markdown output is ``"{tag}: {content}"``; XML output keeps the tag.
    """

    def render(self) -> str:
        """Render the tag name with its content."""
        content = self.render_body()
        if self.xml_mode:
            return self.render_as_xml(self.element.tag, content)
        return f"{self.element.tag}: {content}"
