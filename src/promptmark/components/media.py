#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/components/media.py
"""Components that reference external files: documents, images, audio and folders.

File access goes through :mod:`promptmark.utils.io_utils` and
:mod:`promptmark.utils.documents`. A file that cannot be found or read
renders an inline placeholder such as ``[Document: notes.txt (not found)]``;
the render pass continues.

"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Optional

from promptmark.components.base import Component
from promptmark.components.registry import register_component
from promptmark.constants import DEFAULT_FOLDER_MAX_DEPTH
from promptmark.exceptions import DependencyError
from promptmark.utils.documents import extract_docx_text, extract_pdf_text
from promptmark.utils.escape import escape_xml
from promptmark.utils.io_utils import read_file

logger = logging.getLogger(__name__)


@register_component("document", "file")
class DocumentComponent(Component):
    """Insert the text of a file.

    PDF files are read with PyMuPDF (``selectedPages`` takes a slice of
    zero-based page numbers) and DOCX files with python-docx. Any other file
    is read as text unless it holds binary data.
    """

    def render(self) -> str:
        src = self.get_attribute("src")
        if not src:
            return "[Document: no src specified]"

        path = self.context.resolve_path(str(src))
        if not path.is_file():
            logger.debug("Document not found: %s", path)
            return f"[Document: {src} (not found)]"

        try:
            return self.read_document(path)
        except DependencyError as e:
            logger.warning("Cannot extract %s: %s", path, e.message)
            return f"[Document: {src} (error reading: {e.message.splitlines()[0]})]"
        except (OSError, ValueError, RuntimeError) as e:
            logger.warning("Error reading document %s: %s", path, e)
            return f"[Document: {src} (error reading: {e})]"

    def read_document(self, path: Path) -> str:
        suffix = path.suffix.lower()
        if suffix == ".pdf":
            return extract_pdf_text(path, self.get_attribute("selectedPages"))
        if suffix == ".docx":
            return extract_docx_text(path)

        text = read_file(path) or ""
        if "\x00" in text:
            raise ValueError(f"unsupported binary format {suffix or 'without extension'}")
        return text


@register_component("img", "image")
class ImageComponent(Component):
    """Describe an image by its alt text.

    Without alt text the image renders as ``[Image: src]``. With
    ``syntax="multimedia"`` both are shown: ``[Image: src] (alt)``.
    """

    inline = True

    def render(self) -> str:
        src = self.get_attribute("src", "")
        alt = str(self.get_attribute("alt", ""))
        if self.get_attribute("syntax") == "multimedia":
            return f"[Image: {src}]" + (f" ({alt})" if alt else "")
        return alt or f"[Image: {src}]"


@register_component("audio")
class AudioComponent(Component):
    """Reference an audio clip.

    In XML mode the clip renders as a self-closing ``<audio>`` tag carrying
    ``src``, ``base64``, ``alt``, ``type`` and ``position``.
    """

    inline = True

    def render(self) -> str:
        src = self.get_attribute("src")
        alt = str(self.get_attribute("alt", ""))

        if self.xml_mode:
            attributes = {
                "src": src,
                "base64": self.get_attribute("base64"),
                "alt": alt or None,
                "type": self.get_attribute("type") or None,
                "position": self.get_attribute("position", "here"),
            }
            return self.render_as_xml("audio", content="", attributes=attributes)

        if self.get_attribute("syntax", "multimedia") == "multimedia":
            return f"[Audio: {src or '[embedded audio]'}]" + (f" ({alt})" if alt else "")
        return alt or "[Audio]"


# ============================================================================
# Trees
# ============================================================================


def tree_to_text(items: list[dict[str, Any]], indent: int = 0) -> str:
    """Render tree items as an indented name listing."""
    prefix = "  " * indent
    lines = []
    for item in items:
        lines.append(f"{prefix}{item.get('name', '')}")
        if item.get("content") is not None:
            lines.extend(f"{prefix}  {line}" for line in str(item["content"]).split("\n"))
            lines.append("")
        if item.get("children"):
            lines.append(tree_to_text(item["children"], indent + 1))
    return "\n".join(lines)


def tree_to_markdown(items: list[dict[str, Any]], indent: int = 0) -> str:
    """Render tree items as a nested markdown list with fenced file contents."""
    prefix = "  " * indent
    lines = []
    for item in items:
        name = item.get("name", "")
        lines.append(f"{prefix}- **{name}**" if item.get("type") == "directory" else f"{prefix}- {name}")
        if item.get("content") is not None:
            lines.append(f"{prefix}  ```")
            lines.extend(f"{prefix}  {line}" for line in str(item["content"]).split("\n"))
            lines.append(f"{prefix}  ```")
            lines.append("")
        if item.get("children"):
            lines.append(tree_to_markdown(item["children"], indent + 1))
    return "\n".join(lines)


def tree_to_xml(items: list[dict[str, Any]], root: str, indent: int = 1) -> str:
    """Render tree items as nested XML under ``root``.

    Directories become ``<directory>`` elements and files ``<file>``
    elements; items without a type become ``<item>``.
    """
    lines = [f"<{root}>"]
    _tree_xml_lines(items, lines, indent)
    lines.append(f"</{root}>")
    return "\n".join(lines)


def _tree_xml_lines(items: list[dict[str, Any]], lines: list[str], indent: int) -> None:
    spaces = "  " * indent
    for item in items:
        tag = {"directory": "directory", "file": "file"}.get(item.get("type", ""), "item")
        name = escape_xml(item.get("name", ""), quote=True)
        content = item.get("content")
        children = item.get("children")
        if content is None and not children:
            lines.append(f'{spaces}<{tag} name="{name}"/>')
            continue
        lines.append(f'{spaces}<{tag} name="{name}">')
        if content is not None:
            lines.append(f"{spaces}  <content>{escape_xml(content)}</content>")
        if children:
            _tree_xml_lines(children, lines, indent + 1)
        lines.append(f"{spaces}</{tag}>")


class _TreeComponent(Component):
    """Shared rendering for tree-shaped listings."""

    xml_root = "tree"

    def render_tree(self, items: list[dict[str, Any]]) -> str:
        if self.xml_mode:
            return tree_to_xml(items, self.xml_root)
        syntax = self.get_attribute("syntax", "text")
        if syntax == "markdown":
            return tree_to_markdown(items)
        if syntax == "json":
            return json.dumps(items, indent=2, ensure_ascii=False)
        return tree_to_text(items)


@register_component("folder")
class FolderComponent(_TreeComponent):
    """List a directory tree.

    Attributes
    ----------
    src
        Directory to list, relative to the current document
    filter
        Regular expression that file and directory names must match
    maxDepth
        Number of directory levels to descend, default 3
    showContent
        Include file contents
    syntax
        ``text`` (default), ``markdown`` or ``json``

    Hidden entries (names starting with ``.``) are skipped, as are
    directories with nothing to show.
    """

    xml_root = "folder"

    def render(self) -> str:
        src = self.get_attribute("src")
        if not src:
            return "[Folder: no src specified]"

        root = self.context.resolve_path(str(src))
        if not root.is_dir():
            return "[Folder: directory not found]"

        pattern = self.get_attribute("filter")
        try:
            name_filter = re.compile(str(pattern)) if pattern else None
        except re.error as e:
            logger.warning("Ignoring invalid folder filter %r: %s", pattern, e)
            name_filter = None

        items = self.walk(
            root,
            name_filter,
            self.get_int("maxDepth", DEFAULT_FOLDER_MAX_DEPTH) or DEFAULT_FOLDER_MAX_DEPTH,
            self.get_bool("showContent"),
        )
        return self.render_tree(items)

    def walk(
        self,
        directory: Path,
        name_filter: Optional[re.Pattern[str]],
        max_depth: int,
        show_content: bool,
        depth: int = 0,
    ) -> list[dict[str, Any]]:
        if depth >= max_depth:
            return []
        try:
            entries = sorted(directory.iterdir(), key=lambda entry: entry.name)
        except OSError as e:
            logger.warning("Cannot list %s: %s", directory, e)
            return [{"name": f"[Error: {e}]", "type": "error"}]

        items: list[dict[str, Any]] = []
        for entry in entries:
            if entry.name.startswith("."):
                continue
            if name_filter is not None and not name_filter.search(entry.name):
                continue
            if entry.is_dir():
                children = self.walk(entry, name_filter, max_depth, show_content, depth + 1)
                if children:
                    items.append({"name": f"{entry.name}/", "type": "directory", "children": children})
                continue

            item: dict[str, Any] = {"name": entry.name, "type": "file"}
            if show_content:
                try:
                    item["content"] = read_file(entry)
                except OSError:
                    item["content"] = "[Binary file or read error]"
            items.append(item)
        return items


@register_component("tree")
class TreeComponent(_TreeComponent):
    """Render an ``items`` JSON tree of ``{name, content, children}`` nodes.

    Contents are shown only with ``showContent``.
    """

    def render(self) -> str:
        items = self.get_data_attribute("items", [])
        if not isinstance(items, list):
            return ""
        return self.render_tree(_normalize_tree(items, self.get_bool("showContent")))


def _normalize_tree(items: list[Any], show_content: bool) -> list[dict[str, Any]]:
    nodes = []
    for item in items:
        if not isinstance(item, dict):
            continue
        node = {key: value for key, value in item.items() if show_content or key != "content"}
        if isinstance(node.get("children"), list):
            node["children"] = _normalize_tree(node["children"], show_content)
        nodes.append(node)
    return nodes
