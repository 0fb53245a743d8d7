#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/parsers/__init__.py
"""Parsers package initialization.

The markup parser turns prompt markup text into element trees for the
rendering engine.
"""

from promptmark.parsers.markup import parse_markup, preprocess_markup

__all__ = ["parse_markup", "preprocess_markup"]
