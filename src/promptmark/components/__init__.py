#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/components/__init__.py
"""Components package initialization.

Each module in this package registers its components with the global
:data:`~promptmark.components.registry.registry` through the
:func:`~promptmark.components.registry.register_component` decorator when it
is imported. Importing this package therefore makes every built-in tag
available to :func:`render_element`.
"""

from promptmark.components import (  # noqa: F401
    control,
    data,
    formatting,
    instructions,
    layout,
    lists,
    media,
    messages,
    meta,
    schema,
    text,
)
from promptmark.components.base import CaptionedComponent, Component, format_captioned, format_xml
from promptmark.components.dispatch import render_element, render_elements
from promptmark.components.registry import ComponentRegistry, register_component, registry

__all__ = [
    "CaptionedComponent",
    "Component",
    "ComponentRegistry",
    "format_captioned",
    "format_xml",
    "register_component",
    "registry",
    "render_element",
    "render_elements",
]
