#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/components/dispatch.py
"""Render an element by dispatching on its tag.

Dispatch order for one element:

1. a tag listed in the context's disabled components renders as ``""``
2. with the ``html`` output format declared, HTML tags pass through as HTML
3. a registered tag renders with its component
4. a text node renders with :class:`~promptmark.components.text.TextComponent`
5. anything else renders with :class:`~promptmark.components.text.UnknownComponent`

Dispatch never raises for an unknown tag.

"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from promptmark.components.registry import normalize_tag, registry
from promptmark.constants import HTML_PASSTHROUGH_TAGS
from promptmark.utils.escape import format_xml_attributes

if TYPE_CHECKING:
    from promptmark.ast.nodes import Element
    from promptmark.context import RenderContext

logger = logging.getLogger(__name__)


def is_block_component(element: "Element") -> bool:
    """Whether an element is a registered, non-inline component."""
    if element.is_text:
        return False
    component_class = registry.get(element.tag)
    return component_class is not None and not component_class.inline


def render_html_passthrough(element: "Element", context: "RenderContext") -> str:
    """Render an HTML element as HTML, rendering its children normally."""
    children = "".join(render_element(child, context) for child in element.children)
    content = children or context.template_engine.substitute(element.content)
    attrs = format_xml_attributes(element.attributes)
    if not content:
        return f"<{element.tag}{attrs} />"
    return f"<{element.tag}{attrs}>{content}</{element.tag}>"


def render_element(element: "Element", context: "RenderContext") -> str:
    """Render one element.

    Parameters
    ----------
    element : Element
        Element or text node to render
    context : RenderContext
        Context of the current render pass

    Returns
    -------
    str
        Rendered text

    """
    from promptmark.components.text import TextComponent, UnknownComponent

    if element.is_text:
        return TextComponent(element, context).render()

    tag = normalize_tag(element.tag)
    if tag in context.disabled_components:
        logger.debug("Skipping disabled component <%s>", tag)
        return ""

    if context.output_format == "html" and tag in HTML_PASSTHROUGH_TAGS:
        return render_html_passthrough(element, context)

    component_class = registry.get(tag)
    if component_class is None:
        logger.debug("No component registered for <%s>", element.tag)
        component_class = UnknownComponent
    return component_class(element, context).render()


def render_elements(elements: Iterable["Element"], context: "RenderContext") -> str:
    """Render sibling elements and concatenate the results.

    A blank line is inserted between a text node and an immediately
    following block-level component. Two texts or two components are joined
    directly.
    """
    siblings = list(elements)
    parts: list[str] = []
    for index, element in enumerate(siblings):
        parts.append(render_element(element, context))
        if index + 1 < len(siblings) and element.is_text and is_block_component(siblings[index + 1]):
            parts.append("\n\n")
    return "".join(parts)
