#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/parsers/markup.py
"""Prompt markup parser.

Converts markup text into a list of :class:`~promptmark.ast.Element` trees.
The markup is XML-like but forgiving, so the text is normalized before it is
handed to ``defusedxml``:

1. Special characters inside ``<code>`` and ``<code-block>`` bodies are
   escaped, so code may contain ``<``, ``>`` and ``&`` freely.
2. Markup escapes (``#lt;``, ``#lbrace;`` and friends) are replaced by the
   text they stand for.
3. ``\\"`` inside attribute values becomes ``&quot;`` and bare ``<`` or ``>``
   inside attribute values are escaped.
4. Comments are removed.
5. HTML void elements such as ``<br>`` become self-closing.

An outer ``<poml>`` element is unwrapped. Its ``syntax`` attribute sets the
default syntax of the context (``markdown`` or ``xml``) or declares the
document-wide output format (``html``, ``json``, ``yaml``, ``text``, ``csv``,
``tsv``).

Elements carrying a ``for="x in items"`` attribute are wrapped in a ``<for>``
element and elements carrying an ``if`` attribute in an ``<if>`` element, so
that loops and conditions are evaluated at render time. ``<include>`` handles
both attributes itself.

"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Optional

import defusedxml.ElementTree as ET
from defusedxml import DefusedXmlException

from promptmark.ast.nodes import Element
from promptmark.ast.transforms import wrap_element
from promptmark.constants import (
    DECLARED_OUTPUT_FORMATS,
    MARKUP_ESCAPES,
    MARKUP_SYNTAXES,
    ROOT_TAG,
    TEXT_TAG,
    VOID_ELEMENTS,
)
from promptmark.exceptions import ParsingError
from promptmark.template import parse_loop_spec
from promptmark.utils.escape import escape_xml

if TYPE_CHECKING:
    from xml.etree.ElementTree import Element as XmlElement

    from promptmark.context import RenderContext

logger = logging.getLogger(__name__)

_CODE_BLOCK_PATTERN = re.compile(r"(<(code(?:-block)?)\b[^>]*?(?<!/)>)(.*?)(</\2>)", re.DOTALL | re.IGNORECASE)
_COMMENT_PATTERN = re.compile(r"(\s*)<!--.*?-->(\s*)", re.DOTALL)
_ATTRIBUTE_VALUE_PATTERN = re.compile(r'([\w:-]+\s*=\s*)"([^"]*)"')
_VOID_ELEMENT_PATTERN = re.compile(
    r"<(" + "|".join(VOID_ELEMENTS) + r")(\s+[^>]*?)?\s*(?<!/)>",
    re.IGNORECASE,
)
_XML_DECLARATION_PATTERN = re.compile(r"^\s*<\?xml[^>]*\?>", re.IGNORECASE)
_NEWLINE_PATTERN = re.compile(r"\s*\n\s*")

# Elements whose text keeps its whitespace
_PREFORMATTED_TAGS = frozenset({"code", "code-block", "pre"})
# Elements that interpret ``for`` and ``if`` attributes themselves
_SELF_CONTROLLED_TAGS = frozenset({"include"})


# ============================================================================
# Preprocessing
# ============================================================================


def _escape_code_bodies(text: str) -> str:
    def _escape(match: re.Match[str]) -> str:
        return f"{match.group(1)}{escape_xml(match.group(3))}{match.group(4)}"

    return _CODE_BLOCK_PATTERN.sub(_escape, text)


def _replace_escapes(text: str) -> str:
    for escape, replacement in MARKUP_ESCAPES.items():
        text = text.replace(escape, replacement)
    return text


def _escape_attribute_values(text: str) -> str:
    text = text.replace('\\"', "&quot;")

    def _escape(match: re.Match[str]) -> str:
        value = match.group(2).replace("<", "&lt;").replace(">", "&gt;")
        return f'{match.group(1)}"{value}"'

    return _ATTRIBUTE_VALUE_PATTERN.sub(_escape, text)


def _remove_comments(text: str) -> str:
    def _replace(match: re.Match[str]) -> str:
        return " " if match.group(1) or match.group(2) else ""

    return _COMMENT_PATTERN.sub(_replace, text)


def _close_void_elements(text: str) -> str:
    return _VOID_ELEMENT_PATTERN.sub(lambda m: f"<{m.group(1)}{m.group(2) or ''}/>", text)


def preprocess_markup(text: str) -> str:
    """Normalize markup text so that it parses as XML."""
    text = _XML_DECLARATION_PATTERN.sub("", text)
    text = _escape_code_bodies(text)
    text = _replace_escapes(text)
    text = _escape_attribute_values(text)
    text = _remove_comments(text)
    return _close_void_elements(text)


# ============================================================================
# Tree conversion
# ============================================================================


def _text_node(text: Optional[str], preformatted: bool) -> Optional[Element]:
    if not text or not text.strip():
        return None
    if preformatted:
        return Element.text(text)
    return Element.text(_NEWLINE_PATTERN.sub(" ", text))


def _convert_children(xml_element: "XmlElement", preformatted: bool) -> list[Element]:
    children: list[Element] = []
    leading = _text_node(xml_element.text, preformatted)
    if leading is not None:
        children.append(leading)
    for xml_child in xml_element:
        children.append(_convert_element(xml_child))
        tail = _text_node(xml_child.tail, preformatted)
        if tail is not None:
            children.append(tail)
    return children


def _direct_text(xml_element: "XmlElement") -> str:
    parts = [xml_element.text or ""]
    parts.extend(child.tail or "" for child in xml_element)
    return "".join(parts).strip()


def _convert_element(xml_element: "XmlElement") -> Element:
    tag = str(xml_element.tag)
    preformatted = tag.lower() in _PREFORMATTED_TAGS
    attributes = {str(key).lower(): value for key, value in xml_element.attrib.items()}

    loop_spec = None
    condition = None
    if tag.lower() not in _SELF_CONTROLLED_TAGS:
        if "for" in attributes:
            loop_spec = parse_loop_spec(attributes["for"])
            if loop_spec is None:
                logger.warning("Ignoring malformed for attribute on <%s>: %r", tag, attributes["for"])
            else:
                del attributes["for"]
        condition = attributes.pop("if", None)

    if tag.lower() == TEXT_TAG:
        # An explicit <text> element is a text node holding all nested text
        element = Element.text("".join(xml_element.itertext()))
    else:
        element = Element(
            tag=tag,
            attributes=attributes,
            children=tuple(_convert_children(xml_element, preformatted)),
            content=_direct_text(xml_element),
        )

    # Conditions are evaluated inside the loop, once per item
    if condition is not None:
        element = wrap_element("if", element, condition=condition)
    if loop_spec is not None:
        variable, items = loop_spec
        element = wrap_element("for", element, variable=variable, items=items)
    return element


def _apply_root_attributes(root: "XmlElement", context: "RenderContext") -> None:
    syntax = root.attrib.get("syntax")
    if not syntax:
        return
    syntax = syntax.strip().lower()
    if syntax in MARKUP_SYNTAXES:
        context.syntax = syntax
    elif syntax in DECLARED_OUTPUT_FORMATS:
        context.declare_output_format(syntax)
    else:
        logger.warning("Unknown document syntax: %s", syntax)


def _unwrap_root(wrapper: "XmlElement") -> Optional["XmlElement"]:
    """Return the single top-level ``<poml>`` element, if the document has one."""
    children = list(wrapper)
    if len(children) != 1 or str(children[0].tag).lower() != ROOT_TAG:
        return None
    if (wrapper.text or "").strip() or (children[0].tail or "").strip():
        return None
    return children[0]


def parse_markup(text: str, context: "RenderContext", strict: bool = False) -> list[Element]:
    """Parse markup text into element trees.

    Parameters
    ----------
    text : str
        Markup source
    context : RenderContext
        Context that receives the document syntax or declared output format
        from an outer ``<poml>`` element
    strict : bool, default False
        Raise on malformed markup instead of returning it as text

    Returns
    -------
    list of Element
        Top-level elements and text nodes. Malformed markup yields a single
        text node holding the source when ``strict`` is False.

    Raises
    ------
    ParsingError
        If the markup is malformed and ``strict`` is True

    Examples
    --------
        >>> from promptmark.context import RenderContext
        >>> [e.tag for e in parse_markup("<role>Expert</role><task>Help</task>", RenderContext())]
        ['role', 'task']

    """
    source = preprocess_markup(text)
    try:
        wrapper = ET.fromstring(f"<promptmark-document>{source}</promptmark-document>")
    except (ET.ParseError, DefusedXmlException) as e:
        if strict:
            raise ParsingError(f"Malformed markup: {e}", source=text[:80], original_error=e) from e
        logger.debug("Markup is not well-formed, treating it as text: %s", e)
        return [Element.text(text.strip())]

    root = _unwrap_root(wrapper)
    if root is not None:
        _apply_root_attributes(root, context)
        return _convert_children(root, preformatted=False)
    return _convert_children(wrapper, preformatted=False)
