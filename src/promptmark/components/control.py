#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/components/control.py
"""Control-flow components: ``<if>``, ``<for>`` and ``<include>``.

``<for>`` renders its children once per iteration in a derived context, so
loop bindings never reach sibling elements and the parsed tree is never
modified. Placeholders are substituted as each node renders, against the
bindings of the innermost enclosing loop. ``<include>`` parses another markup
file with a derived context whose source path is the included file; metadata
collected in the included document (chat messages, tools, the response
schema) flows back through the shared state.

"""

from __future__ import annotations

import logging
from typing import Any

from promptmark.components.base import Component
from promptmark.components.dispatch import render_elements
from promptmark.components.registry import register_component
from promptmark.template import parse_loop_spec
from promptmark.utils.io_utils import read_file

logger = logging.getLogger(__name__)


@register_component("if")
class IfComponent(Component):
    """Render children when ``condition`` holds.

    A missing condition renders nothing. The condition is evaluated by
    :meth:`~promptmark.template.TemplateEngine.evaluate_condition`.
    """

    def render(self) -> str:
        condition = self.get_attribute("condition", substitute=False)
        if condition is None:
            return ""
        if not self.context.template_engine.evaluate_condition(condition):
            return ""
        return self.render_children()


@register_component("for")
class ForComponent(Component):
    """Render children once per item of a list.

    Attributes
    ----------
    variable
        Name bound to the current item
    items
        List expression, ``{{expr}}`` or bare. Anything that is not a list
        renders nothing.

    Each iteration binds the loop variable and ``loop`` (``index`` counted
    from 1, ``length``, ``first``, ``last``) in a derived context.
    """

    def render(self) -> str:
        variable = self.get_attribute("variable")
        items_expression = self.get_attribute("items", substitute=False)
        if not variable or items_expression is None:
            return ""

        items = self.context.template_engine.evaluate_items(items_expression)
        if items is None:
            logger.debug("<for items=%r> does not evaluate to a list", items_expression)
            return ""

        parts = []
        for index, item in enumerate(items):
            loop = {"index": index + 1, "length": len(items), "first": index == 0, "last": index == len(items) - 1}
            scope = self.context.child_context(variables={str(variable): item, "loop": loop})
            parts.append(render_elements(self.element.children, scope))
            # Items inside the loop keep numbering the enclosing list
            self.context.list_index = scope.list_index
        return "".join(parts)


@register_component("include")
class IncludeComponent(Component):
    """Render another markup file in place.

    Attributes
    ----------
    src
        Path of the file, relative to the including document
    if
        Optional condition; a false condition suppresses the include
    for
        Optional ``"<var> in <expr>"`` loop. Each iteration binds ``<var>``
        and ``loop`` (``index`` counted from 0, ``length``, ``first``,
        ``last``) in the current context for the duration of that include.

    Failures to find, read or nest the file render inline placeholders.
    """

    def render(self) -> str:
        if not self.has_attribute("src"):
            return "[Include: no src specified]"

        if self.has_attribute("if"):
            condition = self.get_attribute("if", substitute=False)
            if not self.context.template_engine.evaluate_condition(condition):
                return ""

        loop_spec = self.get_attribute("for", substitute=False)
        if loop_spec:
            return self.render_loop(str(loop_spec))
        return self.include_file()

    def render_loop(self, loop_spec: str) -> str:
        parsed = parse_loop_spec(loop_spec)
        if parsed is None:
            return f"[Include: invalid for syntax: {loop_spec}]"

        variable, expression = parsed
        items = self.context.template_engine.evaluate_items(expression) or []
        parts = []
        for index, item in enumerate(items):
            loop: dict[str, Any] = {
                "index": index,
                "length": len(items),
                "first": index == 0,
                "last": index == len(items) - 1,
            }
            bindings: dict[str, Any] = {variable: item, "loop": loop}
            with self.context.bound_variables(**bindings):
                parts.append(self.include_file())
        return "".join(parts)

    def include_file(self) -> str:
        from promptmark.parsers.markup import parse_markup

        src = str(self.get_attribute("src"))
        if self.context.include_depth >= self.context.max_include_depth:
            logger.warning("Include depth limit of %d reached at %s", self.context.max_include_depth, src)
            return f"[Include: {src} (maximum include depth exceeded)]"

        path = self.context.resolve_path(src)
        try:
            text = read_file(path)
        except OSError as e:
            logger.warning("Could not read include %s: %s", path, e)
            return f"[Include: {src} (error: {e})]"
        if text is None:
            logger.debug("Include not found: %s", path)
            return f"[Include: {src} (not found)]"

        scope = self.context.child_context(source_path=path)
        with scope.nested_include():
            elements = parse_markup(text, scope)
            rendered = render_elements(elements, scope)
        return rendered
