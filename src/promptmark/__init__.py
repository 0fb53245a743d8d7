"""promptmark - render prompt markup into LLM-ready prompts.

promptmark renders documents written in an XML-like prompt markup language.
Each element is dispatched to a component that formats it as Markdown,
structured XML or a serialized data format, consulting a shared render
context for variables, stylesheet rules and the declared output format.
The result of a render pass is plain text or a structure holding the
content together with collected chat messages, tools, a response schema and
document metadata.

Key Features
------------
- Captioned instruction components (role, task, hint, example and more)
- Lists, tables, objects, folders and document imports
- ``{{expression}}`` templating with loops, conditions and ``<let>``
- Includes of other markup files with a nesting guard
- Chat messages, tool definitions and response schemas as side outputs
- Output as raw text, dicts, OpenAI chat messages, LangChain or pydantic
  friendly structures

Requirements
------------
- Python 3.10+
- Optional dependencies for document imports (PyMuPDF, python-docx)

Examples
--------
Render a prompt as text:

    >>> from promptmark import render_markup
    >>> print(render_markup("<role>Reviewer</role>"))
    # Role
    <BLANKLINE>
    Reviewer
    <BLANKLINE>
    <BLANKLINE>

Collect chat messages:

    >>> from promptmark import process
    >>> process("<system-msg>Be terse.</system-msg><human-msg>Hi</human-msg>", format="openai_chat")
    [{'role': 'system', 'content': 'Be terse.'}, {'role': 'user', 'content': 'Hi'}]

See Also
--------
promptmark.components : Component implementations and the tag registry
promptmark.renderers : Output formats of a render pass

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

# Check Python version before any imports
import sys

if sys.version_info < (3, 10):
    raise ImportError(
        "promptmark requires Python 3.10 or later. "
        f"You are using Python {sys.version_info.major}.{sys.version_info.minor}."
    )

__version__ = "1.0.0"

from promptmark.api import process, render_markup
from promptmark.ast import Element
from promptmark.components import Component, register_component, registry, render_element, render_elements
from promptmark.context import RenderContext
from promptmark.exceptions import (
    DocumentError,
    DuplicateSchemaError,
    FormatError,
    InvalidSchemaError,
    MarkupFileNotFoundError,
    ParsingError,
    PromptMarkError,
    VersionMismatchError,
)
from promptmark.options import RenderOptions
from promptmark.parsers import parse_markup
from promptmark.renderers import PromptRenderer
from promptmark.template import TemplateEngine

__all__ = [
    "__version__",
    "process",
    "render_markup",
    "parse_markup",
    "render_element",
    "render_elements",
    "register_component",
    "registry",
    "Component",
    "Element",
    "PromptRenderer",
    "RenderContext",
    "RenderOptions",
    "TemplateEngine",
    # Exceptions
    "PromptMarkError",
    "DocumentError",
    "DuplicateSchemaError",
    "FormatError",
    "InvalidSchemaError",
    "MarkupFileNotFoundError",
    "ParsingError",
    "VersionMismatchError",
]
