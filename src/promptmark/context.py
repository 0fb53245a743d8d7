#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/context.py
"""Render context shared across one render pass.

A :class:`RenderContext` carries two kinds of state:

- scoped state that belongs to one document or loop iteration: variable
  bindings, the source path, the default syntax, the header level, the
  current list style and index, and the include depth
- shared state held in a single :class:`SharedState` object that every
  derived context points at: the stylesheet, the declared output format,
  chat messages, registered tools, the response schema, custom metadata,
  runtime parameters and the set of disabled components

Derived contexts (:meth:`RenderContext.child_context`) copy the variables and
reuse the shared state, so metadata collected inside an included document
flows back to the parent while loop and include bindings stay local.

A context is not safe for concurrent renders. Two renders must each create
their own context.

"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterator, Mapping, Optional, Union

from promptmark.constants import DEFAULT_HEADER_LEVEL, DEFAULT_MAX_INCLUDE_DEPTH
from promptmark.exceptions import DuplicateSchemaError
from promptmark.template import TemplateEngine

if TYPE_CHECKING:
    from promptmark.ast.nodes import Element

logger = logging.getLogger(__name__)

_UNBOUND = object()


def parse_stylesheet(stylesheet: Union[Mapping[str, Any], str, None]) -> dict[str, dict[str, Any]]:
    """Normalize a stylesheet argument into a selector to rules mapping.

    Parameters
    ----------
    stylesheet : mapping, str or None
        A mapping, a JSON object string, or None

    Returns
    -------
    dict
        Selector to attribute rules. Invalid input yields an empty stylesheet.

    """
    if stylesheet is None:
        return {}
    if isinstance(stylesheet, str):
        try:
            stylesheet = json.loads(stylesheet)
        except ValueError:
            logger.warning("Ignoring stylesheet that is not valid JSON")
            return {}
    if not isinstance(stylesheet, Mapping):
        logger.warning("Ignoring stylesheet of type %s", type(stylesheet).__name__)
        return {}
    return {str(selector): dict(rules) for selector, rules in stylesheet.items() if isinstance(rules, Mapping)}


@dataclass
class SharedState:
    """State shared by reference between a context and all contexts derived from it.

    Parameters
    ----------
    stylesheet : dict
        Selector (tag name or ``.className``) to attribute rules
    output_format : str or None
        Declared document-wide output format, None until declared
    chat : bool
        Whether message components feed ``chat_messages``
    chat_messages : list of dict
        Ordered ``{"role", "content"}`` records
    tools : list of dict
        Ordered tool definitions
    response_schema : Any
        Response schema, set at most once
    response_schema_metadata : dict or None
        Name and description accompanying the response schema
    custom_metadata : dict
        Document metadata such as title and author
    runtime_parameters : dict
        Model runtime parameters declared with ``<meta type="runtime">``
    disabled_components : set of str
        Tags rendered as no-ops

    """

    stylesheet: dict[str, dict[str, Any]] = field(default_factory=dict)
    output_format: Optional[str] = None
    chat: bool = True
    chat_messages: list[dict[str, Any]] = field(default_factory=list)
    tools: list[dict[str, Any]] = field(default_factory=list)
    response_schema: Any = None
    response_schema_metadata: Optional[dict[str, Any]] = None
    custom_metadata: dict[str, Any] = field(default_factory=dict)
    runtime_parameters: dict[str, Any] = field(default_factory=dict)
    disabled_components: set[str] = field(default_factory=set)
    max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH


class RenderContext:
    """Mutable state threaded through one render pass.

    Parameters
    ----------
    variables : mapping, optional
        Initial variable bindings. The mapping is copied.
    stylesheet : mapping or str, optional
        Initial stylesheet, as a mapping or a JSON string
    chat : bool, default = True
        Whether message components collect structured chat messages
    syntax : str, optional
        Default syntax for components (``markdown`` or ``xml``)
    source_path : str or Path, optional
        Path of the document being rendered, used to resolve relative paths
    max_include_depth : int, default = 16
        Nesting limit for ``<include>``

    Examples
    --------
        >>> ctx = RenderContext(variables={"name": "Ada"})
        >>> ctx.template_engine.substitute("Hi {{name}}")
        'Hi Ada'
        >>> with ctx.bound_variables(name="Grace"):
        ...     inner = ctx.variables["name"]
        >>> inner, ctx.variables["name"]
        ('Grace', 'Ada')
        >>> ctx.variables["name"]
        'Ada'

    """

    def __init__(
        self,
        variables: Optional[Mapping[str, Any]] = None,
        stylesheet: Union[Mapping[str, Any], str, None] = None,
        chat: bool = True,
        syntax: Optional[str] = None,
        source_path: Union[str, Path, None] = None,
        max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH,
        shared: Optional[SharedState] = None,
    ):
        """Initialize a top-level context or, with ``shared``, a derived one."""
        self.variables: dict[str, Any] = dict(variables or {})
        self.shared = shared or SharedState(
            stylesheet=parse_stylesheet(stylesheet),
            chat=chat,
            max_include_depth=max_include_depth,
        )
        self.syntax = syntax
        self.source_path: Optional[Path] = Path(source_path) if source_path is not None else None
        self.header_level: int = DEFAULT_HEADER_LEVEL
        self.list_style: Optional[str] = None
        self.list_index: int = 0
        self.include_depth: int = 0

    # ------------------------------------------------------------------
    # Shared state accessors
    # ------------------------------------------------------------------

    @property
    def stylesheet(self) -> dict[str, dict[str, Any]]:
        """Selector to attribute rules."""
        return self.shared.stylesheet

    @property
    def output_format(self) -> Optional[str]:
        """Declared output format, or None for the default markdown output."""
        return self.shared.output_format

    @property
    def chat(self) -> bool:
        """Whether message components feed ``chat_messages``."""
        return self.shared.chat

    @property
    def chat_messages(self) -> list[dict[str, Any]]:
        """Collected chat messages."""
        return self.shared.chat_messages

    @property
    def tools(self) -> list[dict[str, Any]]:
        """Registered tool definitions."""
        return self.shared.tools

    @property
    def response_schema(self) -> Any:
        """Response schema, or None if none was defined."""
        return self.shared.response_schema

    @property
    def custom_metadata(self) -> dict[str, Any]:
        """Document metadata collected from ``<meta>``."""
        return self.shared.custom_metadata

    @property
    def runtime_parameters(self) -> dict[str, Any]:
        """Runtime parameters collected from ``<meta type="runtime">``."""
        return self.shared.runtime_parameters

    @property
    def disabled_components(self) -> set[str]:
        """Tags that dispatch renders as no-ops."""
        return self.shared.disabled_components

    @property
    def template_engine(self) -> TemplateEngine:
        """Template engine bound to this context's variables."""
        return TemplateEngine(self.variables)

    # ------------------------------------------------------------------
    # Syntax
    # ------------------------------------------------------------------

    def determine_syntax(self, element: Optional["Element"] = None) -> str:
        """Return the syntax in effect for ``element``.

        The element's own ``syntax`` attribute wins, then the context syntax,
        then ``markdown``.
        """
        if element is not None:
            element_syntax = element.get("syntax")
            if isinstance(element_syntax, str) and element_syntax:
                return element_syntax
        return self.syntax or "markdown"

    def xml_mode(self, element: Optional["Element"] = None) -> bool:
        """Whether ``element`` renders as structured XML tags."""
        return self.determine_syntax(element) == "xml"

    def declare_output_format(self, output_format: str) -> bool:
        """Declare the document-wide output format.

        The first declaration wins. A later, different declaration is ignored
        and logged.

        Returns
        -------
        bool
            True if the declaration took effect

        """
        current = self.shared.output_format
        if current is None:
            self.shared.output_format = output_format
            return True
        if current != output_format:
            logger.warning("Output format already declared as %r; ignoring %r", current, output_format)
        return False

    # ------------------------------------------------------------------
    # Side channels
    # ------------------------------------------------------------------

    def set_response_schema(
        self, schema: Any, metadata: Optional[dict[str, Any]] = None, tag: str | None = None
    ) -> None:
        """Store the response schema.

        Raises
        ------
        DuplicateSchemaError
            If a response schema was already defined in this render pass

        """
        if self.shared.response_schema is not None:
            raise DuplicateSchemaError(tag=tag)
        self.shared.response_schema = schema
        self.shared.response_schema_metadata = metadata

    def register_tool(self, tool: dict[str, Any]) -> None:
        """Append a tool definition."""
        self.shared.tools.append(tool)

    def add_chat_message(self, role: str, content: str) -> None:
        """Append a chat message."""
        self.shared.chat_messages.append({"role": role, "content": content})

    def merge_stylesheet(self, rules: Mapping[str, Any]) -> None:
        """Merge stylesheet rules, selector by selector."""
        for selector, selector_rules in parse_stylesheet(rules).items():
            self.shared.stylesheet.setdefault(selector, {}).update(selector_rules)

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------

    def child_context(
        self,
        source_path: Union[str, Path, None] = None,
        variables: Optional[Mapping[str, Any]] = None,
    ) -> RenderContext:
        """Create a derived context.

        The derived context receives a copy of the variables (updated with
        ``variables``), the same shared state, and the current header level
        and list state.
        """
        child = RenderContext(
            variables=self.variables,
            syntax=self.syntax,
            source_path=source_path if source_path is not None else self.source_path,
            shared=self.shared,
        )
        if variables:
            child.variables.update(variables)
        child.header_level = self.header_level
        child.list_style = self.list_style
        child.list_index = self.list_index
        child.include_depth = self.include_depth
        return child

    @contextmanager
    def increased_header_level(self) -> Iterator[int]:
        """Increase the header level for the duration of the block."""
        saved = self.header_level
        self.header_level += 1
        try:
            yield self.header_level
        finally:
            self.header_level = saved

    @contextmanager
    def list_scope(self, style: str) -> Iterator[None]:
        """Enter a list with ``style``, restoring the enclosing list state on exit."""
        saved_style, saved_index = self.list_style, self.list_index
        self.list_style = style
        self.list_index = 0
        try:
            yield
        finally:
            self.list_style = saved_style
            self.list_index = saved_index

    @contextmanager
    def bound_variables(self, **bindings: Any) -> Iterator[None]:
        """Bind variables for the duration of the block.

        Prior values are restored afterwards; names that were unbound before
        are removed.
        """
        saved = {name: self.variables.get(name, _UNBOUND) for name in bindings}
        self.variables.update(bindings)
        try:
            yield
        finally:
            for name, value in saved.items():
                if value is _UNBOUND:
                    self.variables.pop(name, None)
                else:
                    self.variables[name] = value

    @contextmanager
    def nested_include(self) -> Iterator[int]:
        """Track include nesting depth for the duration of the block."""
        self.include_depth += 1
        try:
            yield self.include_depth
        finally:
            self.include_depth -= 1

    @property
    def max_include_depth(self) -> int:
        """Configured include nesting limit."""
        return self.shared.max_include_depth

    def resolve_path(self, path: Union[str, Path]) -> Path:
        """Resolve ``path`` against the directory of the current source."""
        from promptmark.utils.io_utils import resolve_path

        base = self.source_path.parent if self.source_path is not None else None
        return resolve_path(base, path)
