#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/components/base.py
"""Base contract shared by every component.

A component renders one element to a string. It is created for a single
render call with the element and the current :class:`~promptmark.context.RenderContext`,
and exposes the helpers the concrete components build on:

- the effective attribute map, with stylesheet defaults merged under the
  element's explicit attributes (:func:`apply_stylesheet`)
- typed attribute access (:meth:`Component.get_attribute`,
  :meth:`Component.get_bool`, :meth:`Component.get_int`)
- syntax detection (:attr:`Component.xml_mode`)
- child rendering with the text-then-block spacing rule
  (:meth:`Component.render_children`)
- structured tag output (:func:`format_xml`)
- caption formatting (:func:`format_captioned`) and caption text transforms

"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Mapping, Optional, Sequence

from promptmark.constants import (
    CAPTION_TRANSFORM_FALLBACK_SELECTOR,
    CAPTION_TRANSFORM_KEY,
    DEFAULT_CAPTION_STYLE,
    TextTransform,
)
from promptmark.template import PLACEHOLDER_PATTERN, to_bool, unwrap_placeholder
from promptmark.utils.escape import format_xml_attributes
from promptmark.utils.text import parse_json_attribute

if TYPE_CHECKING:
    from promptmark.ast.nodes import Element
    from promptmark.context import RenderContext

logger = logging.getLogger(__name__)


# ============================================================================
# Pure helpers
# ============================================================================


def apply_stylesheet(element: "Element", stylesheet: Mapping[str, Mapping[str, Any]]) -> dict[str, Any]:
    """Compute the effective attributes of an element.

    Rules for the element's tag are applied first, then rules for each of its
    class names (``.className`` selectors), then the element's own attributes.
    Explicit attributes therefore always win, whatever order the stylesheet
    rules were declared in. The element itself is not modified.

    Parameters
    ----------
    element : Element
        Element being rendered
    stylesheet : mapping
        Selector to attribute rules

    Returns
    -------
    dict
        Lower-cased attribute name to value

    Examples
    --------
        >>> from promptmark.ast import Element
        >>> el = Element("role", {"captionStyle": "bold"})
        >>> apply_stylesheet(el, {"role": {"captionStyle": "plain", "caption": "Who"}})
        {'captionstyle': 'bold', 'caption': 'Who'}

    """
    effective: dict[str, Any] = {}
    if stylesheet:
        for selector, rules in stylesheet.items():
            if selector.lower() == element.name and isinstance(rules, Mapping):
                effective.update({str(key).lower(): value for key, value in rules.items()})

        class_names = element.get("classname") or element.get("class") or ""
        for class_name in str(class_names).split():
            rules = stylesheet.get(f".{class_name}")
            if isinstance(rules, Mapping):
                effective.update({str(key).lower(): value for key, value in rules.items()})

    # Explicit attributes override stylesheet defaults
    effective.update(element.attributes)
    return effective


def format_xml(tag: str, content: str, attributes: Optional[Mapping[str, Any]] = None, inline: bool = False) -> str:
    """Render content wrapped in a structured tag.

    - Empty content gives a self-closing tag.
    - Content containing ``<item>`` is re-indented by two spaces per line
      and placed between the open and close tags on separate lines.
    - Anything else is placed inline between the tags.

    Non-inline tags are followed by a newline.

    Examples
    --------
        >>> format_xml("task", "Do X")
        '<task>Do X</task>\\n'
        >>> format_xml("list", "<item>a</item>\\n<item>b</item>\\n")
        '<list>\\n  <item>a</item>\\n  <item>b</item>\\n</list>\\n'

    """
    attrs = format_xml_attributes(attributes or {})
    trailer = "" if inline else "\n"

    if not content.strip():
        return f"<{tag}{attrs}/>{trailer}"

    if "<item>" in content:
        indented = "\n".join(f"  {line}" if line.strip() else "" for line in content.split("\n")).strip()
        return f"<{tag}{attrs}>\n  {indented}\n</{tag}>{trailer}"

    return f"<{tag}{attrs}>{content}</{tag}>{trailer}"


def format_captioned(
    caption: str,
    style: Optional[str],
    content: str,
    header_level: int = 1,
    collapse_trailing: bool = False,
) -> str:
    """Join a caption and its content in one of the caption styles.

    ====== ========================================
    style  output
    ====== ========================================
    header ``"# {caption}\\n\\n{content}\\n\\n"``
    bold   ``"**{caption}:** {content}\\n\\n"``
    plain  ``"{caption}: {content}\\n\\n"``
    hidden ``"{content}\\n\\n"``
    ====== ========================================

    Any other style is treated as ``header``. Blank content gives the bare
    header, or nothing for ``hidden``.

    Parameters
    ----------
    caption : str
        Caption text, already transformed
    style : str or None
        Caption style
    content : str
        Rendered body
    header_level : int, default 1
        Number of ``#`` characters for the header style
    collapse_trailing : bool, default False
        For the header and hidden styles, do not append more blank lines
        than needed when the content already ends with newlines

    Examples
    --------
        >>> format_captioned("Role", "bold", "Do X")
        '**Role:** Do X\\n\\n'

    """
    if style == "bold":
        return f"**{caption}:** {content}\n\n"
    if style == "plain":
        return f"{caption}: {content}\n\n"

    if not content.strip():
        return "" if style == "hidden" else f"{'#' * max(header_level, 1)} {caption}\n\n"

    ending = _block_ending(content) if collapse_trailing else "\n\n"
    if style == "hidden":
        return f"{content}{ending}"
    return f"{'#' * max(header_level, 1)} {caption}\n\n{content}{ending}"


def _block_ending(content: str) -> str:
    if content.endswith("\n\n"):
        return ""
    if content.endswith("\n"):
        return "\n"
    return "\n\n"


def transform_text(text: str, transform: Optional[TextTransform]) -> str:
    """Apply a caption text transform (``upper``, ``lower`` or ``capitalize``)."""
    if not text or not transform:
        return text
    if transform == "upper":
        return text.upper()
    if transform == "lower":
        return text.lower()
    if transform == "capitalize":
        return " ".join(word.capitalize() for word in text.split(" "))
    return text


# ============================================================================
# Component base classes
# ============================================================================


class Component(ABC):
    """Base class for all components.

    Parameters
    ----------
    element : Element
        Element to render
    context : RenderContext
        Context of the current render pass

    Attributes
    ----------
    xml_tag : str or None
        Tag used when rendering in XML syntax
    inline : bool
        Whether the component renders inline. Inline components get no
        trailing newline in XML syntax and no blank line before them when
        they follow text.

    """

    xml_tag: ClassVar[Optional[str]] = None
    inline: ClassVar[bool] = False

    def __init__(self, element: "Element", context: "RenderContext"):
        """Bind the component to an element and context."""
        self.element = element
        self.context = context
        self.attributes = apply_stylesheet(element, context.stylesheet)

    @abstractmethod
    def render(self) -> str:
        """Render the element to a string."""

    # ------------------------------------------------------------------
    # Attribute access
    # ------------------------------------------------------------------

    def get_attribute(self, name: str, default: Any = None, substitute: bool = True) -> Any:
        """Return an effective attribute value.

        String values have their ``{{expr}}`` placeholders substituted unless
        ``substitute`` is False. Missing attributes return ``default``.
        """
        value = self.attributes.get(name.lower())
        if value is None:
            return default
        if substitute and isinstance(value, str):
            return self.context.template_engine.substitute(value)
        return value

    def get_data_attribute(self, name: str, default: Any = None) -> Any:
        """Return a structured attribute value.

        A value that is exactly one ``{{expr}}`` placeholder evaluates to the
        bound value itself (a list or mapping, for example). Other strings are
        substituted and decoded as JSON; malformed JSON yields ``default``.
        """
        raw = self.attributes.get(name.lower())
        if raw is None:
            return default
        if not isinstance(raw, str):
            return raw
        engine = self.context.template_engine
        if PLACEHOLDER_PATTERN.fullmatch(raw.strip()):
            value = engine.evaluate_attribute_expression(unwrap_placeholder(raw))
            if value is not None:
                return value
        return parse_json_attribute(engine.substitute(raw), default)

    def has_attribute(self, name: str) -> bool:
        """Whether the attribute is set explicitly or by the stylesheet."""
        return name.lower() in self.attributes

    def get_bool(self, name: str, default: bool = False) -> bool:
        """Return an attribute coerced to a boolean."""
        value = self.get_attribute(name)
        if value is None:
            return default
        if isinstance(value, str):
            return to_bool(value.strip().lower())
        return to_bool(value)

    def get_int(self, name: str, default: Optional[int] = None) -> Optional[int]:
        """Return an attribute coerced to an integer, or ``default`` if it is not one."""
        value = self.get_attribute(name)
        if value is None:
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.debug("Attribute %s=%r on <%s> is not an integer", name, value, self.element.tag)
            return default

    # ------------------------------------------------------------------
    # Syntax
    # ------------------------------------------------------------------

    @property
    def syntax(self) -> str:
        """Syntax in effect for this element."""
        element_syntax = self.get_attribute("syntax")
        if isinstance(element_syntax, str) and element_syntax:
            return element_syntax
        return self.context.determine_syntax()

    @property
    def xml_mode(self) -> bool:
        """Whether this element renders as structured tags."""
        return self.syntax == "xml"

    def render_as_xml(
        self,
        tag: Optional[str] = None,
        content: Optional[str] = None,
        attributes: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Render this component as a structured tag.

        ``tag`` defaults to :attr:`xml_tag` (then the element's tag) and
        ``content`` to the rendered children.
        """
        if content is None:
            content = self.render_children()
        return format_xml(tag or self.xml_tag or self.element.tag, content, attributes, inline=self.inline)

    # ------------------------------------------------------------------
    # Children
    # ------------------------------------------------------------------

    def render_children(self, children: Optional[Sequence["Element"]] = None) -> str:
        """Render child elements in order.

        A blank line is inserted between a text child and an immediately
        following block-level component. Two texts or two components are
        joined directly.
        """
        from promptmark.components.dispatch import render_elements

        return render_elements(self.element.children if children is None else children, self.context)

    def render_body(self) -> str:
        """Render the element's body.

        Elements holding only text return their substituted text, stripped.
        Elements with component children render their children.
        """
        if not self.element.element_children:
            text = self.element.plain_text()
            return str(self.context.template_engine.substitute(text)).strip()
        return self.render_children().lstrip().rstrip(" \t")

    def apply_text_transform(self, text: str) -> str:
        """Apply the stylesheet ``captionTextTransform`` for this tag.

        The rule for the component's own tag is used first, then the rule
        under the ``cp`` selector.
        """
        stylesheet = self.context.stylesheet
        transform = None
        for selector in (self.element.name, self.xml_tag, CAPTION_TRANSFORM_FALLBACK_SELECTOR):
            if not selector:
                continue
            rules = stylesheet.get(selector)
            if isinstance(rules, Mapping) and rules.get(CAPTION_TRANSFORM_KEY):
                transform = rules[CAPTION_TRANSFORM_KEY]
                break
        return transform_text(text, transform)


class CaptionedComponent(Component):
    """Component that joins a caption and its body in a caption style.

    Subclasses set :attr:`default_caption`, :attr:`default_caption_style`,
    :attr:`xml_tag` and :attr:`collapse_trailing`. In XML syntax the caption
    is dropped and the body is wrapped in :attr:`xml_tag`.
    """

    default_caption: ClassVar[str] = ""
    default_caption_style: ClassVar[str] = DEFAULT_CAPTION_STYLE
    collapse_trailing: ClassVar[bool] = False

    def render(self) -> str:
        """Render the captioned block."""
        content = self.render_body()
        if self.xml_mode:
            return self.render_as_xml(content=content)

        caption = self.apply_text_transform(str(self.get_attribute("caption", self.default_caption)))
        style = self.get_attribute("captionStyle", self.default_caption_style)
        return format_captioned(
            caption,
            style,
            content,
            header_level=self.context.header_level,
            collapse_trailing=self.collapse_trailing,
        )
