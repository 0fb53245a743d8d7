#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/ast/nodes.py
"""Element tree produced by the markup parser.

A parsed document is a list of :class:`Element` nodes. Each node is either a
text node (tag ``"text"``, content only, no children) or an element node whose
children may mix text and element nodes.

Elements are frozen. Components read them but never change them; anything
that needs a modified tree (for example loop variable substitution) builds a
new one with :meth:`Element.replace` or the helpers in
:mod:`promptmark.ast.transforms`.

"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional

from promptmark.constants import TEXT_TAG


def _normalize_attributes(attributes: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    if not attributes:
        return MappingProxyType({})
    return MappingProxyType({str(key).lower(): value for key, value in attributes.items()})


@dataclass(frozen=True)
class Element:
    """A node of the parsed markup tree.

    Parameters
    ----------
    tag : str
        Tag name of the element, or ``"text"`` for text nodes
    attributes : mapping, default = empty mapping
        Attribute values keyed by name. Keys are stored lower-case so that
        lookups are case-insensitive.
    children : tuple of Element, default = empty tuple
        Ordered child nodes
    content : str, default = ""
        For text nodes the text itself; for element nodes the element's own
        direct text, stripped

    """

    tag: str
    attributes: Mapping[str, Any] = field(default_factory=dict)
    children: tuple[Element, ...] = ()
    content: str = ""

    def __post_init__(self) -> None:
        """Normalize attribute keys and children containers."""
        object.__setattr__(self, "tag", str(self.tag))
        object.__setattr__(self, "attributes", _normalize_attributes(self.attributes))
        object.__setattr__(self, "children", tuple(self.children))
        if self.tag == TEXT_TAG and self.children:
            raise ValueError("Text nodes cannot have children")

    @classmethod
    def text(cls, content: str) -> Element:
        """Create a text node.

        Parameters
        ----------
        content : str
            Text content of the node

        Returns
        -------
        Element
            New text node

        """
        return cls(tag=TEXT_TAG, content=content)

    @property
    def is_text(self) -> bool:
        """Whether this node is a text node."""
        return self.tag == TEXT_TAG

    @property
    def is_component(self) -> bool:
        """Whether this node is an element node."""
        return self.tag != TEXT_TAG

    @property
    def name(self) -> str:
        """Lower-cased tag name used for registry lookups."""
        return self.tag.lower()

    @property
    def element_children(self) -> list[Element]:
        """Children that are element nodes."""
        return [child for child in self.children if child.is_component]

    @property
    def text_children(self) -> list[Element]:
        """Children that are text nodes."""
        return [child for child in self.children if child.is_text]

    def get(self, name: str, default: Any = None) -> Any:
        """Look up an attribute case-insensitively."""
        return self.attributes.get(name.lower(), default)

    def has_attribute(self, name: str) -> bool:
        """Return True when the attribute is present, whatever its value."""
        return name.lower() in self.attributes

    def replace(self, **changes: Any) -> Element:
        """Return a copy of this element with the given fields replaced."""
        return replace(self, **changes)

    def with_attributes(self, **overrides: Any) -> Element:
        """Return a copy with the given attributes added or replaced."""
        merged = dict(self.attributes)
        merged.update({key.lower(): value for key, value in overrides.items()})
        return replace(self, attributes=merged)

    def find_child(self, tag: str) -> Optional[Element]:
        """Return the first element child with the given tag, if any."""
        tag = tag.lower()
        for child in self.children:
            if child.is_component and child.name == tag:
                return child
        return None

    def find_children(self, tag: str) -> list[Element]:
        """Return every element child with the given tag."""
        tag = tag.lower()
        return [child for child in self.children if child.is_component and child.name == tag]

    def iter_text(self) -> Iterator[str]:
        """Yield the text of every text node in document order."""
        if self.is_text:
            yield self.content
            return
        for child in self.children:
            yield from child.iter_text()

    def plain_text(self) -> str:
        """Concatenate all descendant text, stripped."""
        if self.is_text:
            return self.content.strip()
        if not self.children:
            return self.content.strip()
        return "".join(self.iter_text()).strip()
