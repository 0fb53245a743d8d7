#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/ast/__init__.py
"""Element tree used by the promptmark rendering engine.

The parser produces a list of immutable :class:`Element` nodes which the
component dispatcher walks depth-first.

Examples
--------
Building a tree by hand:

    >>> from promptmark.ast import Element
    >>> role = Element(tag="role", children=(Element.text("You are a poet."),))
    >>> role.get("captionStyle", "header")
    'header'

"""

from promptmark.ast.nodes import Element
from promptmark.ast.transforms import substitute_forest, substitute_tree, wrap_element

__all__ = ["Element", "substitute_forest", "substitute_tree", "wrap_element"]
