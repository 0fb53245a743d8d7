#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for serializers and small text, escaping and file helpers."""
from io import StringIO
from pathlib import Path

import pytest

from promptmark.utils.escape import escape_xml, format_xml_attributes, unescape_xml
from promptmark.utils.io_utils import decode_text, read_file, resolve_path, write_content
from promptmark.utils.serialization import infer_columns, serialize, serialize_value
from promptmark.utils.text import compare_versions, kebab_to_camel, parse_json_attribute, parse_slice

RECORDS = [{"name": "Ada", "active": True}, {"name": "Alan", "active": False}]


@pytest.mark.unit
class TestSerialize:
    """Test tabular serialization."""

    def test_markdown(self) -> None:
        """Test markdown tables with boolean cells."""
        assert serialize(RECORDS, None, "markdown") == (
            "| name | active |\n| --- | --- |\n| Ada | true |\n| Alan | false |"
        )

    def test_markdown_escapes_pipes(self) -> None:
        """Test that cell pipes are escaped."""
        assert serialize([{"a": "x|y"}], None, "markdown").endswith("| x\\|y |")

    def test_csv_quotes_delimiters(self) -> None:
        """Test CSV quoting."""
        assert serialize([{"a": "x,y", "b": None}], None, "csv") == 'a,b\n"x,y",'

    def test_tsv(self) -> None:
        """Test tab separated output."""
        assert serialize(RECORDS, None, "tsv") == "name\tactive\nAda\ttrue\nAlan\tfalse"

    def test_json_projects_columns(self) -> None:
        """Test that JSON output keeps only the selected columns."""
        assert serialize(RECORDS, [{"field": "name", "header": "Name"}], "json") == (
            '[\n  {\n    "name": "Ada"\n  },\n  {\n    "name": "Alan"\n  }\n]'
        )

    def test_yaml(self) -> None:
        """Test YAML output."""
        assert serialize([{"a": 1}], None, "yaml") == "- a: 1"

    def test_xml(self) -> None:
        """Test XML output with escaping."""
        result = serialize([{"a": "<x>"}], None, "xml")

        assert "<tcell>a</tcell>" in result
        assert "<tcell>&lt;x&gt;</tcell>" in result

    def test_headers(self) -> None:
        """Test custom column headers."""
        assert serialize([{"a": 1}], [{"field": "a", "header": "Alpha"}], "csv") == "Alpha\n1"

    def test_empty(self) -> None:
        """Test that nothing to show gives an empty string."""
        assert serialize([], None, "markdown") == ""
        assert serialize(["scalar"], None, "markdown") == ""

    def test_infer_columns(self) -> None:
        """Test column inference from the first record."""
        assert infer_columns(RECORDS) == [
            {"field": "name", "header": "name"},
            {"field": "active", "header": "active"},
        ]


@pytest.mark.unit
class TestSerializeValue:
    """Test value serialization."""

    def test_text(self) -> None:
        """Test the text form of strings and other values."""
        assert serialize_value("plain", "text") == "plain"
        assert serialize_value([1, 2], "text") == "[1, 2]"

    def test_xml_scalars(self) -> None:
        """Test XML scalars."""
        assert serialize_value({"ok": True, "none": None}, "xml") == "<data>\n  <ok>true</ok>\n  <none></none>\n</data>"


@pytest.mark.unit
class TestTextHelpers:
    """Test attribute value helpers."""

    @pytest.mark.parametrize(
        "spec,length,expected",
        [
            ("1:3", 10, (1, 3)),
            (":3", 10, (0, 3)),
            ("3:", 10, (3, 10)),
            (":", 4, (0, 4)),
            ("-2:", 10, (8, 10)),
            ("4", 10, (4, 5)),
            ("-1", 10, (9, 10)),
            ("5:2", 10, (5, 5)),
            ("abc", 10, None),
            ("", 10, None),
        ],
    )
    def test_parse_slice(self, spec: str, length: int, expected: object) -> None:
        """Test slice notation."""
        assert parse_slice(spec, length) == expected

    def test_parse_json_attribute(self) -> None:
        """Test JSON attribute decoding."""
        assert parse_json_attribute('{"a": 1}') == {"a": 1}
        assert parse_json_attribute("{bad", default="x") == "x"
        assert parse_json_attribute([1]) == [1]
        assert parse_json_attribute(None, default=0) == 0

    def test_kebab_to_camel(self) -> None:
        """Test case conversion."""
        assert kebab_to_camel("max-output-tokens") == "maxOutputTokens"
        assert kebab_to_camel("plain") == "plain"

    @pytest.mark.parametrize(
        "left,right,sign",
        [("1.0.0", "1.0", 0), ("1.2.0", "1.10.0", -1), ("2.0", "1.9.9", 1), ("1.0.0", "1.0.0-beta", 1)],
    )
    def test_compare_versions(self, left: str, right: str, sign: int) -> None:
        """Test numeric version comparison."""
        result = compare_versions(left, right)

        assert (result > 0) - (result < 0) == sign


@pytest.mark.unit
class TestEscaping:
    """Test XML escaping helpers."""

    def test_escape_roundtrip(self) -> None:
        """Test escaping and unescaping text."""
        text = 'a < b & "c" > d'

        assert escape_xml(text) == 'a &lt; b &amp; "c" &gt; d'
        assert unescape_xml(escape_xml(text, quote=True)) == text

    def test_format_xml_attributes(self) -> None:
        """Test attribute formatting."""
        assert format_xml_attributes({"a": 1, "b": None, "c": True, "d": 'say "hi"'}) == (
            ' a="1" c="true" d="say &quot;hi&quot;"'
        )


@pytest.mark.unit
class TestFileHelpers:
    """Test file access helpers."""

    def test_resolve_path(self, tmp_path: Path) -> None:
        """Test relative and absolute resolution."""
        assert resolve_path(tmp_path, "a/b.txt") == tmp_path / "a" / "b.txt"
        assert resolve_path(tmp_path, tmp_path / "c.txt") == tmp_path / "c.txt"

    def test_read_file(self, tmp_path: Path) -> None:
        """Test reading text and missing files."""
        path = tmp_path / "x.txt"
        path.write_text("héllo", encoding="utf-8")

        assert read_file(path) == "héllo"
        assert read_file(tmp_path / "missing.txt") is None

    def test_decode_text_fallback(self) -> None:
        """Test decoding non UTF-8 bytes."""
        assert decode_text("café".encode("latin-1"), use_chardet=False) == "café"
        assert decode_text("\ufeffplain".encode("utf-8")) == "plain"

    def test_write_content(self, tmp_path: Path) -> None:
        """Test writing to paths and streams."""
        buffer = write_content("text", None)
        assert isinstance(buffer, StringIO)
        assert buffer.getvalue() == "text"

        target = tmp_path / "out.txt"
        assert write_content("text", target) is None
        assert target.read_text(encoding="utf-8") == "text"

        stream = StringIO()
        write_content("streamed", stream)
        assert stream.getvalue() == "streamed"

    def test_write_content_rejects_unknown_targets(self) -> None:
        """Test unsupported destinations."""
        with pytest.raises(TypeError):
            write_content("text", 42)  # type: ignore[arg-type]
