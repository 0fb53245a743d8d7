#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/utils/serialization.py
"""Serializers used by the data components.

Two entry points are provided:

- :func:`serialize` renders tabular records for ``<table>``
- :func:`serialize_value` renders an arbitrary value for ``<object>``

Columns are described by ``{"field": ..., "header": ...}`` mappings. When no
columns are given they are inferred from the keys of the first record.

"""

from __future__ import annotations

import csv
import io
import json
import logging
from typing import Any, Mapping, Optional, Sequence

import yaml

from promptmark.utils.escape import escape_xml

logger = logging.getLogger(__name__)

Column = Mapping[str, Any]


def infer_columns(records: Sequence[Any]) -> list[dict[str, Any]]:
    """Derive column descriptors from the keys of the first record."""
    if not records or not isinstance(records[0], Mapping):
        return []
    return [{"field": key, "header": key} for key in records[0].keys()]


def _cell(record: Any, column: Column) -> str:
    if not isinstance(record, Mapping):
        return ""
    value = record.get(column["field"])
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def _header(column: Column) -> str:
    return str(column.get("header") or column["field"])


def _project(records: Sequence[Any], columns: Sequence[Column]) -> list[dict[str, Any]]:
    fields = [column["field"] for column in columns]
    return [{field: record.get(field) for field in fields} for record in records if isinstance(record, Mapping)]


def _serialize_markdown(records: Sequence[Any], columns: Sequence[Column]) -> str:
    headers = [_header(column) for column in columns]
    lines = [
        "| " + " | ".join(headers) + " |",
        "| " + " | ".join("---" for _ in headers) + " |",
    ]
    for record in records:
        lines.append("| " + " | ".join(_cell(record, column).replace("|", "\\|") for column in columns) + " |")
    return "\n".join(lines)


def _serialize_delimited(records: Sequence[Any], columns: Sequence[Column], delimiter: str) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=delimiter, lineterminator="\n")
    writer.writerow([_header(column) for column in columns])
    for record in records:
        writer.writerow([_cell(record, column) for column in columns])
    return buffer.getvalue().rstrip("\n")


def _serialize_xml_table(records: Sequence[Any], columns: Sequence[Column]) -> str:
    lines = ["<table>", "  <thead>", "    <trow>"]
    lines.extend(f"      <tcell>{escape_xml(_header(column))}</tcell>" for column in columns)
    lines.extend(["    </trow>", "  </thead>", "  <tbody>"])
    for record in records:
        lines.append("    <trow>")
        lines.extend(f"      <tcell>{escape_xml(_cell(record, column))}</tcell>" for column in columns)
        lines.append("    </trow>")
    lines.extend(["  </tbody>", "</table>"])
    return "\n".join(lines)


def serialize(records: Sequence[Any], columns: Optional[Sequence[Column]], fmt: str) -> str:
    """Serialize tabular records.

    Parameters
    ----------
    records : sequence of mapping
        Rows to serialize
    columns : sequence of mapping, optional
        Column descriptors. Inferred from the first record when empty.
    fmt : str
        One of ``markdown``, ``csv``, ``tsv``, ``xml``, ``json`` or ``yaml``.
        Unknown formats fall back to ``markdown``.

    Returns
    -------
    str
        Serialized table, or an empty string when there is nothing to show

    Examples
    --------
        >>> print(serialize([{"a": 1, "b": 2}], None, "csv"))
        a,b
        1,2

    """
    if not records:
        return ""
    columns = list(columns) if columns else infer_columns(records)
    if not columns:
        return ""

    fmt = fmt.lower()
    if fmt == "csv":
        return _serialize_delimited(records, columns, ",")
    if fmt == "tsv":
        return _serialize_delimited(records, columns, "\t")
    if fmt == "xml":
        return _serialize_xml_table(records, columns)
    if fmt == "json":
        return json.dumps(_project(records, columns), indent=2, ensure_ascii=False)
    if fmt in ("yaml", "yml"):
        return yaml.safe_dump(_project(records, columns), sort_keys=False, allow_unicode=True).rstrip("\n")
    if fmt != "markdown":
        logger.debug("Unknown table format %r, using markdown", fmt)
    return _serialize_markdown(records, columns)


def value_to_xml(data: Any, root_name: str = "data", indent: int = 0) -> str:
    """Serialize nested mappings and lists as indented XML elements.

    List entries are written as ``<item>`` elements.
    """
    spaces = "  " * indent
    if isinstance(data, Mapping):
        lines = [f"{spaces}<{root_name}>"]
        lines.extend(value_to_xml(value, str(key), indent + 1) for key, value in data.items())
        lines.append(f"{spaces}</{root_name}>")
        return "\n".join(lines)
    if isinstance(data, (list, tuple)):
        lines = [f"{spaces}<{root_name}>"]
        lines.extend(value_to_xml(value, "item", indent + 1) for value in data)
        lines.append(f"{spaces}</{root_name}>")
        return "\n".join(lines)
    if isinstance(data, bool):
        data = "true" if data else "false"
    elif data is None:
        data = ""
    return f"{spaces}<{root_name}>{escape_xml(data)}</{root_name}>"


def serialize_value(data: Any, fmt: str = "json") -> str:
    """Serialize an arbitrary value.

    Parameters
    ----------
    data : Any
        Value to serialize
    fmt : str, default "json"
        One of ``json``, ``yaml`` (or ``yml``), ``xml`` or ``text``

    Returns
    -------
    str
        Serialized value

    """
    fmt = fmt.lower()
    if fmt == "json":
        return json.dumps(data, indent=2, ensure_ascii=False)
    if fmt in ("yaml", "yml"):
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True).rstrip("\n")
    if fmt == "xml":
        return value_to_xml(data)
    if isinstance(data, str):
        return data
    return json.dumps(data, ensure_ascii=False)
