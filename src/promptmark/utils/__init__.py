#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/utils/__init__.py
"""Utility helpers for file access, escaping and serialization."""

from promptmark.utils.escape import escape_xml
from promptmark.utils.io_utils import read_file, resolve_path
from promptmark.utils.serialization import serialize, serialize_value

__all__ = ["escape_xml", "read_file", "resolve_path", "serialize", "serialize_value"]
