#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/ast/transforms.py
"""Pure transformations over element trees.

Every function in this module returns a new tree and leaves its input
untouched, so the same parsed subtree can be rendered any number of times
(once per loop iteration, for example) without carrying state between uses.

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from promptmark.ast.nodes import Element

if TYPE_CHECKING:
    from promptmark.template import TemplateEngine


def _needs_substitution(element: Element) -> bool:
    if "{{" in element.content:
        return True
    return any(_needs_substitution(child) for child in element.children)


def substitute_tree(element: Element, engine: "TemplateEngine") -> Element:
    """Substitute ``{{expr}}`` placeholders in the text content of a tree.

    ``<for>`` elements are returned unchanged wherever they occur; their
    bodies are substituted by the loop that binds their names.

    Parameters
    ----------
    element : Element
        Root of the subtree to substitute
    engine : TemplateEngine
        Engine bound to the variable scope to substitute against

    Returns
    -------
    Element
        A new tree with substituted text. Subtrees without placeholders are
        shared with the input rather than copied.

    """
    if element.name == "for" or not _needs_substitution(element):
        return element

    content = engine.substitute(element.content) if "{{" in element.content else element.content
    children = tuple(substitute_tree(child, engine) for child in element.children)
    return element.replace(content=content, children=children)


def substitute_forest(elements: Iterable[Element], engine: "TemplateEngine") -> list[Element]:
    """Apply :func:`substitute_tree` to each element of a list."""
    return [substitute_tree(element, engine) for element in elements]


def wrap_element(tag: str, child: Element, **attributes: str) -> Element:
    """Wrap an element in a new parent element with the given attributes."""
    return Element(tag=tag, attributes=attributes, children=(child,))
