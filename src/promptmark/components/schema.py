#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/components/schema.py
"""Response schema and tool definition components.

These components register structured data on the render context and produce
no text:

- ``<output-schema>`` sets the single response schema of the document
- ``<tool-definition>`` (``<tool>``, ``<tool-def>``) appends a tool, either
  from a JSON body or from declarative ``<description>``/``<parameter>``
  children
- ``<tools>`` groups tool definitions

Schema bodies are read with a parser chosen by the ``parser`` (or legacy
``lang``) attribute: ``json``, ``eval`` or ``auto``. ``auto`` picks ``json``
when the body starts with ``{``. An ``eval`` body that is not JSON is stored
as ``{"expression": <text>}``.

"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Optional

from promptmark.components.base import Component
from promptmark.components.registry import register_component
from promptmark.exceptions import InvalidSchemaError
from promptmark.utils.text import kebab_to_camel

if TYPE_CHECKING:
    from promptmark.ast.nodes import Element
    from promptmark.context import RenderContext

logger = logging.getLogger(__name__)

_TOOL_METADATA_FIELDS = ("version", "category", "requires_auth", "deprecated")
_BOOLEAN_METADATA_FIELDS = frozenset({"requires_auth", "deprecated"})


# ============================================================================
# Schema helpers
# ============================================================================


def convert_schema_keys(value: Any) -> Any:
    """Recursively convert ``kebab-case`` mapping keys to ``camelCase``.

    Entries of a ``required`` list are converted as well, so they keep naming
    the converted property keys.

    Examples
    --------
        >>> convert_schema_keys({"max-results": {"type": "integer"}, "required": ["max-results"]})
        {'maxResults': {'type': 'integer'}, 'required': ['maxResults']}

    """
    if isinstance(value, dict):
        converted = {}
        for key, item in value.items():
            if key == "required" and isinstance(item, list):
                converted[key] = [kebab_to_camel(str(entry)) for entry in item]
            else:
                converted[kebab_to_camel(str(key))] = convert_schema_keys(item)
        return converted
    if isinstance(value, list):
        return [convert_schema_keys(item) for item in value]
    return value


def parse_schema_body(body: str, lang: str, context: "RenderContext", tag: Optional[str] = None) -> Any:
    """Decode a schema body.

    Parameters
    ----------
    body : str
        Raw element text
    lang : str
        ``json``, ``eval`` (``expr``) or ``auto``
    context : RenderContext
        Context used to substitute ``{{expr}}`` placeholders in the body
    tag : str, optional
        Tag reported in errors

    Returns
    -------
    Any
        Decoded schema, or None for an empty body or unknown parser

    Raises
    ------
    InvalidSchemaError
        If a ``json`` body is not valid JSON

    """
    content = body.strip()
    if not content:
        return None

    lang = lang.lower()
    if lang == "auto":
        lang = "json" if content.startswith("{") else "eval"

    substituted = str(context.template_engine.substitute(content)).strip()
    if lang == "json":
        try:
            return json.loads(substituted)
        except ValueError as e:
            raise InvalidSchemaError(f"Invalid JSON schema: {e}", tag=tag, original_error=e) from e

    if lang in ("eval", "expr"):
        if substituted.startswith(("{", "[")):
            try:
                return json.loads(substituted)
            except ValueError:
                logger.debug("Schema expression is not JSON, storing it as an expression")
        return {"expression": substituted}

    logger.warning("Unknown schema parser %r on <%s>", lang, tag)
    return None


def register_tool_schema(context: "RenderContext", name: str, description: Optional[str], schema: Any) -> None:
    """Register a tool whose parameters come from a decoded schema.

    The tool description is the explicit ``description`` when given, else the
    schema's own ``description``. A schema with a ``parameters`` key
    contributes that value as the parameters; otherwise the schema minus its
    description is used.
    """
    if schema is None:
        return
    if isinstance(schema, dict):
        schema = convert_schema_keys(schema)

    tool: dict[str, Any] = {
        "name": name,
        "description": description or (schema.get("description") if isinstance(schema, dict) else None),
        "schema": schema if isinstance(schema, str) else json.dumps(schema),
    }
    if isinstance(schema, dict):
        parameters = {key: value for key, value in schema.items() if key != "description"}
        tool["parameters"] = parameters.get("parameters", parameters)
    context.register_tool(tool)


# ============================================================================
# Components
# ============================================================================


@register_component("output-schema")
class OutputSchemaComponent(Component):
    """Declare the response schema for the document.

    A second schema in the same render pass raises
    :class:`~promptmark.exceptions.DuplicateSchemaError`.
    """

    def render(self) -> str:
        lang = str(self.get_attribute("parser") or self.get_attribute("lang", "auto"))
        schema = parse_schema_body(self.element.plain_text(), lang, self.context, tag="output-schema")
        if schema is None:
            return ""

        metadata: dict[str, Any] = {"schema": schema}
        for key in ("name", "description"):
            value = self.get_attribute(key)
            if value is not None:
                metadata[key] = value
        self.context.set_response_schema(schema, metadata, tag="output-schema")
        return ""


@register_component("tool-definition", "tool", "tool-def")
class ToolDefinitionComponent(Component):
    """Register a tool the model may call.

    Requires a ``name``. With ``<description>`` or ``<parameter>`` children
    the tool is built declaratively; otherwise the body is a schema read with
    :func:`parse_schema_body`.
    """

    def render(self) -> str:
        name = self.get_attribute("name")
        if not name:
            logger.warning("<%s> without a name is ignored", self.element.tag)
            return ""

        description = self.get_attribute("description")
        if self.element.find_child("description") or self.element.find_child("parameter"):
            self.context.register_tool(self.declarative_tool(str(name), description))
        else:
            lang = str(self.get_attribute("parser") or self.get_attribute("lang", "auto"))
            schema = parse_schema_body(self.element.plain_text(), lang, self.context, tag=self.element.tag)
            register_tool_schema(self.context, str(name), description, schema)
        return ""

    # ------------------------------------------------------------------
    # Declarative tools
    # ------------------------------------------------------------------

    def declarative_tool(self, name: str, description: Optional[str]) -> dict[str, Any]:
        description_element = self.element.find_child("description")
        tool: dict[str, Any] = {
            "name": name,
            "description": description_element.plain_text().strip() if description_element else (description or ""),
        }

        for field_name in _TOOL_METADATA_FIELDS:
            child = self.element.find_child(field_name)
            if child is None:
                continue
            text = child.plain_text().strip()
            tool[field_name] = text == "true" if field_name in _BOOLEAN_METADATA_FIELDS else text

        tool["parameters"] = {
            str(parameter.get("name")): self.parameter_definition(parameter)
            for parameter in self.element.find_children("parameter")
            if parameter.get("name")
        }

        examples = [self.example_definition(example) for example in self.element.find_children("example")]
        if len(examples) == 1:
            tool["example"] = examples[0]
        elif examples:
            tool["examples"] = examples
        return tool

    def parameter_definition(self, parameter: "Element") -> dict[str, Any]:
        param_type = parameter.get("type", "string")
        definition: dict[str, Any] = {
            "type": param_type,
            "required": str(parameter.get("required", "")).lower() == "true",
        }
        description = _description_of(parameter)
        if description:
            definition["description"] = description

        enum = parameter.find_child("enum")
        if enum is not None:
            values = [value.plain_text().strip() for value in enum.find_children("value")]
            if values:
                definition["enum"] = values

        items = parameter.find_child("items")
        if items is not None and param_type == "array":
            items_definition: dict[str, Any] = {"type": items.get("type", "string")}
            items_description = _description_of(items)
            if items_description:
                items_definition["description"] = items_description
            items_example = items.find_child("example")
            if items_example is not None:
                items_definition["example"] = items_example.plain_text().strip()
            definition["items"] = items_definition

        example = parameter.find_child("example")
        if example is not None:
            definition["example"] = example.plain_text().strip()

        properties = parameter.find_child("properties")
        if properties is not None and param_type == "object":
            property_definitions = {}
            for prop in properties.find_children("property"):
                if not prop.get("name"):
                    continue
                prop_definition: dict[str, Any] = {"type": prop.get("type", "string")}
                prop_description = _description_of(prop)
                if prop_description:
                    prop_definition["description"] = prop_description
                property_definitions[str(prop.get("name"))] = prop_definition
            if property_definitions:
                definition["properties"] = property_definitions

        schema = parameter.find_child("schema")
        if schema is not None:
            schema_text = schema.plain_text().strip()
            try:
                definition["schema"] = json.loads(schema_text)
            except ValueError:
                definition["schema"] = schema_text
        return definition

    @staticmethod
    def example_definition(example: "Element") -> dict[str, Any]:
        definition: dict[str, Any] = {}
        for key in ("title", "description"):
            child = example.find_child(key)
            if child is not None:
                definition[key] = child.plain_text().strip()

        parameters = example.find_child("parameters")
        if parameters is not None:
            text = parameters.plain_text().strip()
            try:
                definition["parameters"] = json.loads(text)
            except ValueError:
                definition["parameters"] = text
        return definition


def _description_of(element: "Element") -> str:
    child = element.find_child("description")
    if child is not None:
        return child.plain_text().strip()
    return element.content.strip()


@register_component("tools")
class ToolsComponent(Component):
    """Render tool definitions for their side effects and produce no text."""

    def render(self) -> str:
        self.render_children()
        return ""
