#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/components/data.py
"""Data display components: ``<table>`` and ``<object>``.

Both delegate the wire format to :mod:`promptmark.utils.serialization`.
Malformed JSON and unreadable table files produce an empty dataset, which
renders as an empty string.

"""

from __future__ import annotations

import csv
import io
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from promptmark.components.base import Component
from promptmark.components.registry import register_component
from promptmark.constants import TABLE_FORMATS
from promptmark.utils.io_utils import read_file
from promptmark.utils.serialization import infer_columns, serialize, serialize_value
from promptmark.utils.text import parse_json_attribute, parse_slice

logger = logging.getLogger(__name__)

_PARSERS_BY_SUFFIX = {".csv": "csv", ".tsv": "tsv", ".json": "json", ".jsonl": "jsonl"}


@dataclass
class TableData:
    """Records and column descriptors of a table."""

    records: list[Any] = field(default_factory=list)
    columns: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_records(cls, records: Any) -> TableData:
        """Build a table from decoded records, inferring the columns."""
        if records is None:
            return cls()
        if not isinstance(records, list):
            records = [records]
        return cls(records, infer_columns(records))

    def project(self, columns: list[dict[str, Any]]) -> TableData:
        """Keep only ``columns`` in every record."""
        fields = [column["field"] for column in columns]
        records = [
            {name: record.get(name) for name in fields} if isinstance(record, Mapping) else record
            for record in self.records
        ]
        return TableData(records, columns)


def parse_table_text(text: str, parser: str) -> TableData:
    """Decode table file contents with the ``csv``, ``tsv``, ``json`` or ``jsonl`` parser.

    Raises
    ------
    ValueError
        If JSON content is malformed or the parser is unknown

    """
    if parser in ("csv", "tsv"):
        reader = csv.DictReader(io.StringIO(text), delimiter="\t" if parser == "tsv" else ",")
        records = [dict(row) for row in reader]
        columns = [{"field": name, "header": name} for name in reader.fieldnames or []]
        return TableData(records, columns)
    if parser == "json":
        return TableData.from_records(json.loads(text))
    if parser == "jsonl":
        return TableData.from_records([json.loads(line) for line in text.splitlines() if line.strip()])
    raise ValueError(f"Unknown table parser: {parser}")


@register_component("table")
class TableComponent(Component):
    """Render records as a table.

    Data comes from, in order: a ``src`` file, a ``records`` attribute, or
    ``<tr>``/``<td>`` children. ``selectedColumns`` and ``selectedRecords``
    take a JSON list or slice notation; ``maxRecords`` truncates the rows and
    appends a row of ``...``; ``maxColumns`` truncates the columns.

    The output format is the ``syntax`` attribute when it names a table
    format, then ``xml`` in XML mode, then the declared output format when it
    names a table format, else ``markdown``.
    """

    def render(self) -> str:
        data = self.load_data()
        data = self.apply_selection(data)
        return serialize(data.records, data.columns, self.output_format())

    def output_format(self) -> str:
        syntax = self.get_attribute("syntax")
        if isinstance(syntax, str) and syntax.lower() in TABLE_FORMATS:
            return syntax.lower()
        if self.xml_mode:
            return "xml"
        declared = self.context.output_format
        if declared in TABLE_FORMATS:
            return str(declared)
        return "markdown"

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_data(self) -> TableData:
        src = self.get_attribute("src")
        if src:
            return self.load_file(str(src))
        if self.has_attribute("records"):
            return TableData.from_records(self.get_data_attribute("records"))
        if self.element.find_child("tr") is not None:
            return self.load_rows()
        return TableData()

    def load_file(self, src: str) -> TableData:
        path = self.context.resolve_path(src)
        parser = str(self.get_attribute("parser", "auto")).lower()
        if parser == "auto":
            parser = _PARSERS_BY_SUFFIX.get(Path(path).suffix.lower(), "csv")
        try:
            text = read_file(path)
            if text is None:
                logger.warning("Table source not found: %s", path)
                return TableData()
            return parse_table_text(text, parser)
        except (OSError, ValueError, csv.Error) as e:
            logger.warning("Could not load table source %s: %s", path, e)
            return TableData()

    def load_rows(self) -> TableData:
        from promptmark.components.dispatch import render_elements

        records = []
        columns: list[dict[str, Any]] = []
        for row in self.element.find_children("tr"):
            cells = [child for child in row.element_children if child.name in ("td", "th")]
            record = {}
            for index, cell in enumerate(cells):
                key = f"col_{index}"
                record[key] = render_elements(cell.children, self.context).strip()
                if index >= len(columns):
                    columns.append({"field": key, "header": f"Column {index + 1}"})
            if record:
                records.append(record)
        return TableData(records, columns)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def apply_selection(self, data: TableData) -> TableData:
        selected_columns = self.selection_attribute("selectedColumns")
        if isinstance(selected_columns, list):
            known = {column["field"]: column for column in data.columns}
            columns = [known.get(name, {"field": name, "header": name}) for name in selected_columns]
            data = data.project(columns)
        elif isinstance(selected_columns, str):
            bounds = parse_slice(selected_columns, len(data.columns))
            if bounds is not None:
                data = data.project(data.columns[bounds[0] : bounds[1]])

        selected_records = self.selection_attribute("selectedRecords")
        if isinstance(selected_records, list):
            records = [
                data.records[index]
                for index in selected_records
                if isinstance(index, int) and -len(data.records) <= index < len(data.records)
            ]
            data = TableData(records, data.columns)
        elif isinstance(selected_records, str):
            bounds = parse_slice(selected_records, len(data.records))
            if bounds is not None:
                data = TableData(data.records[bounds[0] : bounds[1]], data.columns)

        max_records = self.get_int("maxRecords")
        if max_records and 0 < max_records < len(data.records):
            columns = data.columns or infer_columns(data.records)
            ellipsis = {column["field"]: "..." for column in columns}
            data = TableData(data.records[:max_records] + [ellipsis], columns)

        max_columns = self.get_int("maxColumns")
        if max_columns and 0 < max_columns < len(data.columns):
            data = data.project(data.columns[:max_columns])
        return data

    def selection_attribute(self, name: str) -> Optional[Any]:
        """Return a JSON list, a slice string, or None."""
        value = self.get_attribute(name)
        if value is None or isinstance(value, list):
            return value
        decoded = parse_json_attribute(value)
        if isinstance(decoded, list):
            return decoded
        if isinstance(decoded, int):
            return str(decoded)
        return str(value) if ":" in str(value) else None


@register_component("object", "obj")
class ObjectComponent(Component):
    """Serialize the ``data`` attribute as ``json`` (default), ``yaml``, ``xml`` or ``text``.

    ``syntax`` names the serialization here, so only the document syntax
    decides whether the value is wrapped in ``<obj>``.
    """

    xml_tag = "obj"

    def render(self) -> str:
        data = self.get_data_attribute("data")
        if data is None:
            return ""
        syntax = str(self.get_attribute("syntax", "json"))
        serialized = serialize_value(data, syntax)
        if self.context.xml_mode():
            return self.render_as_xml(content=serialized)
        return serialized
