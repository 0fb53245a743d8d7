#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/components/lists.py
"""Lists and list items.

A ``<list>`` enters a list scope on the context (style and a counter reset to
zero) and restores the enclosing scope afterwards, so a nested list never
disturbs the numbering of its parent. Each ``<item>`` inside a list bumps the
counter and prefixes its content with the bullet for the list style.

"""

from __future__ import annotations

from promptmark.components.base import Component
from promptmark.components.registry import register_component
from promptmark.constants import DEFAULT_BULLET, DEFAULT_LIST_STYLE, LIST_BULLETS, NUMBERED_LIST_STYLES


def bullet_for(style: str | None, index: int) -> str:
    """Return the bullet token for a list style and 1-based item index.

    Examples
    --------
        >>> bullet_for("decimal", 3)
        '3. '
        >>> bullet_for("star", 1)
        '* '

    """
    if style in NUMBERED_LIST_STYLES:
        return f"{index}. "
    return LIST_BULLETS.get(style or "", DEFAULT_BULLET)


@register_component("list")
class ListComponent(Component):
    xml_tag = "list"

    def render(self) -> str:
        style = str(self.get_attribute("listStyle", DEFAULT_LIST_STYLE))
        with self.context.list_scope(style):
            children = [child for child in self.element.children if not child.is_text or child.content.strip()]
            items = self.render_children(children)
        if self.xml_mode:
            return self.render_as_xml(content=items, attributes={"style": style})
        return items


@register_component("item", "list-item")
class ItemComponent(Component):
    """List item. Outside a list it renders its content only."""

    xml_tag = "item"

    def render(self) -> str:
        content = self.render_body()
        if self.xml_mode:
            return self.render_as_xml(content=content)

        if self.context.list_style is None:
            return content

        self.context.list_index += 1
        bullet = bullet_for(self.context.list_style, self.context.list_index)
        lines = [line for line in content.rstrip().split("\n") if line.strip()]
        if not lines:
            return f"{bullet.rstrip()}\n"

        indent = " " * len(bullet)
        rest = "".join(f"\n{indent}{line}" for line in lines[1:])
        return f"{bullet}{lines[0]}{rest}\n"
