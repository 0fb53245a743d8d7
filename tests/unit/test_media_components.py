#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for documents, images, audio, folders and trees."""
from pathlib import Path

import pytest
from utils import render


@pytest.fixture
def source(prompt_dir: Path) -> Path:
    """Path of the document that sources are resolved against."""
    return prompt_dir / "main.poml"


@pytest.mark.unit
class TestDocument:
    """Test the document component."""

    def test_text_file(self, source: Path) -> None:
        """Test inserting a text file."""
        assert render('<document src="notes.txt"/>', source_path=source) == "Remember the milk."

    def test_file_alias(self, source: Path) -> None:
        """Test the file alias."""
        assert render('<file src="notes.txt"/>', source_path=source) == "Remember the milk."

    def test_no_src(self) -> None:
        """Test a document without a source."""
        assert render("<document/>") == "[Document: no src specified]"

    def test_not_found(self, source: Path) -> None:
        """Test a missing document."""
        assert render('<document src="nope.txt"/>', source_path=source) == "[Document: nope.txt (not found)]"

    def test_binary_file(self, tmp_path: Path) -> None:
        """Test that binary data is reported instead of inserted."""
        (tmp_path / "blob.bin").write_bytes(b"\x00\x01\x02")

        result = render('<document src="blob.bin"/>', source_path=tmp_path / "main.poml")

        assert result == "[Document: blob.bin (error reading: unsupported binary format .bin)]"

    def test_src_from_variable(self, source: Path) -> None:
        """Test a source path built from a variable."""
        result = render('<document src="{{name}}.txt"/>', {"name": "notes"}, source_path=source)

        assert result == "Remember the milk."


@pytest.mark.unit
class TestImageAndAudio:
    """Test image and audio descriptions."""

    def test_image_alt(self) -> None:
        """Test that alt text describes the image."""
        assert render('<img src="cat.png" alt="A cat"/>') == "A cat"

    def test_image_without_alt(self) -> None:
        """Test the image placeholder."""
        assert render('<img src="cat.png"/>') == "[Image: cat.png]"

    def test_image_multimedia(self) -> None:
        """Test the multimedia syntax."""
        assert render('<image src="cat.png" alt="A cat" syntax="multimedia"/>') == "[Image: cat.png] (A cat)"

    def test_audio(self) -> None:
        """Test the audio reference."""
        assert render('<audio src="clip.mp3"/>') == "[Audio: clip.mp3]"
        assert render('<audio src="clip.mp3" alt="Birdsong"/>') == "[Audio: clip.mp3] (Birdsong)"

    def test_audio_xml(self) -> None:
        """Test the XML form of audio."""
        assert render('<audio src="clip.mp3"/>', syntax="xml") == '<audio src="clip.mp3" position="here"/>'


@pytest.mark.unit
class TestFolder:
    """Test directory listings."""

    def test_text_listing(self, source: Path) -> None:
        """Test the default text listing."""
        result = render('<folder src="."/>', source_path=source)

        assert result == "data/\n  users.csv\n  users.json\nmain.poml\nnotes.txt\nparts/\n  intro.poml"

    def test_markdown_listing(self, source: Path) -> None:
        """Test the markdown listing."""
        assert render('<folder src="data" syntax="markdown"/>', source_path=source) == "- users.csv\n- users.json"

    def test_filter(self, source: Path) -> None:
        """Test filtering entries by name."""
        assert render('<folder src="data" filter="csv$"/>', source_path=source) == "users.csv"

    def test_max_depth(self, source: Path) -> None:
        """Test limiting the listing depth."""
        assert render('<folder src="." maxDepth="1"/>', source_path=source) == "main.poml\nnotes.txt"

    def test_show_content(self, source: Path) -> None:
        """Test including file contents."""
        result = render('<folder src="parts" showContent="true"/>', source_path=source)

        assert result == "intro.poml\n  <role>Librarian</role>\n"

    def test_hidden_entries_are_skipped(self, tmp_path: Path) -> None:
        """Test that dot files are not listed."""
        (tmp_path / ".secret").write_text("x", encoding="utf-8")
        (tmp_path / "visible.txt").write_text("x", encoding="utf-8")

        assert render('<folder src="."/>', source_path=tmp_path / "main.poml") == "visible.txt"

    def test_no_src(self) -> None:
        """Test a folder without a source."""
        assert render("<folder/>") == "[Folder: no src specified]"

    def test_not_found(self, tmp_path: Path) -> None:
        """Test a missing directory."""
        result = render('<folder src="missing"/>', source_path=tmp_path / "main.poml")

        assert result == "[Folder: directory not found]"


@pytest.mark.unit
class TestTree:
    """Test the tree component."""

    def test_text_tree(self) -> None:
        """Test nested items."""
        markup = "<tree items='[{\"name\": \"root\", \"children\": [{\"name\": \"leaf\"}]}]'/>"

        assert render(markup) == "root\n  leaf"

    def test_content_is_hidden_by_default(self) -> None:
        """Test that item contents need showContent."""
        items = "items='[{\"name\": \"a.txt\", \"content\": \"hello\"}]'"

        assert render(f"<tree {items}/>") == "a.txt"
        assert render(f'<tree {items} showContent="true"/>') == "a.txt\n  hello\n"
