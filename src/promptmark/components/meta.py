#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/components/meta.py
"""Components that configure the render pass instead of producing text.

- ``<let>`` binds a variable
- ``<stylesheet>`` merges stylesheet rules
- ``<meta>`` records document metadata, variables, version constraints,
  component toggles, runtime parameters, tools and the response schema

"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from packaging.version import InvalidVersion

from promptmark.components.base import Component
from promptmark.components.registry import normalize_tag, register_component
from promptmark.components.schema import parse_schema_body, register_tool_schema
from promptmark.constants import FLOAT_RUNTIME_PARAMETERS, INT_RUNTIME_PARAMETERS
from promptmark.exceptions import VersionMismatchError
from promptmark.utils.io_utils import read_file
from promptmark.utils.text import compare_versions, parse_json_attribute

logger = logging.getLogger(__name__)

_METADATA_ATTRIBUTES = ("title", "description", "author", "keywords")


def _decode_value(text: str) -> Any:
    stripped = text.strip()
    if stripped[:1] in ("{", "[") or stripped in ("true", "false", "null"):
        try:
            return json.loads(stripped)
        except ValueError:
            logger.debug("Value is not valid JSON, keeping it as text")
    return text


@register_component("let")
class LetComponent(Component):
    """Bind a variable in the current scope.

    The value comes from the ``value`` attribute (decoded as JSON when
    possible), a ``src`` file (JSON for ``.json`` files, text otherwise) or
    the element body. Without a ``name``, a mapping value is merged into the
    variables.
    """

    def render(self) -> str:
        name = self.get_attribute("name")
        value = self.resolve_value()
        if value is None:
            return ""

        if name:
            self.context.variables[str(name)] = value
        elif isinstance(value, Mapping):
            self.context.variables.update(value)
        else:
            logger.warning("<let> without a name needs a mapping value, got %s", type(value).__name__)
        return ""

    def resolve_value(self) -> Any:
        if self.has_attribute("value"):
            raw = self.get_attribute("value", substitute=False)
            if isinstance(raw, str):
                evaluated = self.context.template_engine.evaluate_attribute_expression(raw)
                if evaluated is not None:
                    return evaluated
                return _decode_value(self.context.template_engine.substitute(raw))
            return raw

        src = self.get_attribute("src")
        if src:
            return self.load_source(str(src))

        if not self.element.children and not self.element.content:
            return None
        return _decode_value(self.render_body())

    def load_source(self, src: str) -> Any:
        path = self.context.resolve_path(src)
        try:
            text = read_file(path)
        except OSError as e:
            logger.warning("Could not read <let> source %s: %s", src, e)
            return None
        if text is None:
            logger.warning("<let> source not found: %s", src)
            return None
        if Path(path).suffix.lower() == ".json":
            return parse_json_attribute(text)
        return text


@register_component("stylesheet")
class StylesheetComponent(Component):
    """Merge a JSON stylesheet body into the context. Invalid JSON is ignored."""

    def render(self) -> str:
        body = self.element.plain_text()
        rules = parse_json_attribute(body)
        if isinstance(rules, Mapping):
            self.context.merge_stylesheet(rules)
        else:
            logger.warning("Ignoring <stylesheet> whose body is not a JSON object")
        return ""


@register_component("meta")
class MetaComponent(Component):
    """Document metadata and configuration.

    Without a ``type`` attribute the element may carry ``variables`` (a JSON
    object), ``title``/``description``/``author``/``keywords``,
    ``minVersion``/``maxVersion`` and ``components`` (``"+tag,-tag"``
    toggles). ``type="responseSchema"``, ``type="tool"`` and
    ``type="runtime"`` declare a response schema, a tool or model runtime
    parameters.

    Children, if any, are rendered; otherwise the element produces no text.
    """

    def render(self) -> str:
        meta_type = self.get_attribute("type")
        if meta_type:
            self.handle_typed(str(meta_type).lower())
        else:
            self.handle_general()

        if self.element.element_children:
            return self.render_children()
        return ""

    # ------------------------------------------------------------------
    # Typed metadata
    # ------------------------------------------------------------------

    def handle_typed(self, meta_type: str) -> None:
        if meta_type in ("responseschema", "response_schema", "response-schema"):
            schema = parse_schema_body(self.element.plain_text(), self.lang(), self.context, tag="meta")
            metadata = {key: self.get_attribute(key) for key in ("name", "description") if self.has_attribute(key)}
            self.context.set_response_schema(schema, metadata or None, tag="meta")
        elif meta_type == "tool":
            name = self.get_attribute("name")
            if not name:
                logger.warning('<meta type="tool"> without a name is ignored')
                return
            schema = parse_schema_body(self.element.plain_text(), self.lang(), self.context, tag="meta")
            register_tool_schema(self.context, str(name), self.get_attribute("description"), schema)
        elif meta_type == "runtime":
            self.context.runtime_parameters.update(self.runtime_parameters())
        else:
            logger.warning("Unknown <meta> type: %s", meta_type)

    def lang(self) -> str:
        return str(self.get_attribute("parser") or self.get_attribute("lang", "auto")).lower()

    def runtime_parameters(self) -> dict[str, Any]:
        parameters: dict[str, Any] = {}
        for key, value in self.element.attributes.items():
            if key == "type":
                continue
            value = self.context.template_engine.substitute(value)
            try:
                if key in FLOAT_RUNTIME_PARAMETERS:
                    value = float(value)
                elif key in INT_RUNTIME_PARAMETERS:
                    value = int(value)
            except (TypeError, ValueError):
                logger.warning("Runtime parameter %s=%r is not numeric", key, value)
            parameters[key] = value
        return parameters

    # ------------------------------------------------------------------
    # General metadata
    # ------------------------------------------------------------------

    def handle_general(self) -> None:
        variables = self.get_data_attribute("variables")
        if isinstance(variables, Mapping):
            self.context.variables.update(variables)
        elif variables is not None:
            logger.warning("Ignoring <meta variables> that is not a JSON object")

        for key in _METADATA_ATTRIBUTES:
            value = self.get_attribute(key)
            if value is not None:
                self.context.custom_metadata[key] = value

        min_version = self.get_attribute("minVersion")
        max_version = self.get_attribute("maxVersion")
        if min_version or max_version:
            self.check_version(min_version, max_version)

        components = self.get_attribute("components")
        if components:
            self.toggle_components(str(components))

    def check_version(self, min_version: Any, max_version: Any) -> None:
        from promptmark import __version__

        try:
            too_old = bool(min_version) and compare_versions(__version__, str(min_version)) < 0
            too_new = bool(max_version) and compare_versions(__version__, str(max_version)) > 0
        except InvalidVersion as e:
            logger.warning("Ignoring <meta> version constraint: %s", e)
            return

        if too_old:
            raise VersionMismatchError(str(min_version), __version__)
        if too_new:
            logger.warning(
                "promptmark %s may not be compatible with documents requiring version %s or lower",
                __version__,
                max_version,
            )

    def toggle_components(self, spec: str) -> None:
        for entry in spec.split(","):
            entry = entry.strip()
            if len(entry) < 2 or entry[0] not in "+-":
                continue
            tag = normalize_tag(entry[1:])
            if entry[0] == "-":
                self.context.disabled_components.add(tag)
            else:
                self.context.disabled_components.discard(tag)
