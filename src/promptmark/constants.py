#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Constants and default values for the promptmark library.

This module centralizes the hardcoded values used across the rendering
engine so that components, the parser and the output renderer agree on
them.

Constants are organized by category:
1. Type Definitions - Literal types and type aliases
2. Rendering Defaults - caption styles, list bullets, header levels
3. Tag Classification - text and HTML passthrough tags
4. Parser Constants - escapes and void elements
5. Output Formats - renderer formats and declared syntaxes
6. Optional Dependencies - packages behind document extraction
7. Input Detection - markup file suffixes
"""

from __future__ import annotations

from typing import Literal

# =============================================================================
# Type Definitions
# =============================================================================

CaptionStyle = Literal["header", "bold", "plain", "hidden"]
ListStyle = Literal["dash", "bullet", "unordered", "star", "plus", "decimal", "number", "numbered"]
RendererFormat = Literal["raw", "dict", "openai_chat", "openaiResponse", "langchain", "pydantic"]
TextTransform = Literal["upper", "lower", "capitalize"]

# =============================================================================
# Rendering Defaults
# =============================================================================

DEFAULT_CAPTION_STYLE: CaptionStyle = "header"

DEFAULT_LIST_STYLE: ListStyle = "dash"
NUMBERED_LIST_STYLES = frozenset({"decimal", "number", "numbered"})
LIST_BULLETS: dict[str, str] = {
    "star": "* ",
    "plus": "+ ",
    "dash": "- ",
    "bullet": "- ",
    "unordered": "- ",
}
DEFAULT_BULLET = "- "

DEFAULT_HEADER_LEVEL = 1
MAX_HEADER_LEVEL = 6

# Stylesheet key consulted when a component has no caption transform of its own
CAPTION_TRANSFORM_KEY = "captionTextTransform"
CAPTION_TRANSFORM_FALLBACK_SELECTOR = "cp"

DEFAULT_MAX_INCLUDE_DEPTH = 16
DEFAULT_FOLDER_MAX_DEPTH = 3

# =============================================================================
# Tag Classification
# =============================================================================

TEXT_TAG = "text"

# Elements emitted verbatim when the declared output format is html
HTML_PASSTHROUGH_TAGS = frozenset(
    {
        "b",
        "i",
        "u",
        "strong",
        "em",
        "span",
        "div",
        "p",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "table",
        "thead",
        "tbody",
        "tfoot",
        "tr",
        "th",
        "td",
        "ul",
        "ol",
        "li",
        "a",
        "img",
        "code",
    }
)

# =============================================================================
# Parser Constants
# =============================================================================

# Markup escapes and the XML text they stand for before parsing
MARKUP_ESCAPES: dict[str, str] = {
    "#quot;": "&quot;",
    "#apos;": "&apos;",
    "#amp;": "&amp;",
    "#lt;": "&lt;",
    "#gt;": "&gt;",
    "#hash;": "#",
    "#lbrace;": "{",
    "#rbrace;": "}",
}

# HTML void elements rewritten as self-closing before XML parsing. ``meta`` and
# ``input`` are absent because the markup language gives them content.
VOID_ELEMENTS: tuple[str, ...] = (
    "br",
    "hr",
    "img",
    "area",
    "base",
    "col",
    "embed",
    "link",
    "param",
    "source",
    "track",
    "wbr",
)

ROOT_TAG = "poml"

# =============================================================================
# Output Formats
# =============================================================================

RENDERER_FORMATS: tuple[str, ...] = ("raw", "dict", "openai_chat", "openaiResponse", "langchain", "pydantic")
DEFAULT_RENDERER_FORMAT: RendererFormat = "dict"

# Syntaxes that switch components between markdown and structured tags
MARKUP_SYNTAXES = frozenset({"markdown", "xml"})
# Syntaxes that declare a document-wide output format
DECLARED_OUTPUT_FORMATS = frozenset({"html", "json", "yaml", "text", "csv", "tsv"})

TABLE_FORMATS = frozenset({"markdown", "csv", "tsv", "xml", "json", "yaml"})

CHAT_ROLES: dict[str, str] = {
    "human-message": "user",
    "ai-message": "assistant",
    "system-message": "system",
}

# Runtime parameters coerced to numbers by <meta type="runtime">
FLOAT_RUNTIME_PARAMETERS = frozenset({"temperature", "topp", "frequencypenalty", "presencepenalty"})
INT_RUNTIME_PARAMETERS = frozenset({"maxoutputtokens", "seed"})

# =============================================================================
# Optional Dependencies
# =============================================================================

# (install_name, import_name, version_spec)
DEPS_PDF = [("pymupdf", "fitz", ">=1.26.4")]
DEPS_DOCX = [("python-docx", "docx", "")]

# =============================================================================
# Input Detection
# =============================================================================

# Suffixes that mark a string argument as a markup file path
MARKUP_FILE_SUFFIXES = frozenset({".poml", ".pml", ".promptmark"})
