#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/renderers/base.py
"""Base classes for output renderers.

This module defines the abstract base class that output renderers inherit
from. A renderer takes the parsed element trees of a document together with
the render context and produces the final result of a render pass, either a
string or a JSON-compatible structure.

"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any, Sequence, Union

from promptmark.exceptions import InvalidOptionsError
from promptmark.options.base import RenderOptions
from promptmark.utils.io_utils import write_content

if TYPE_CHECKING:
    from promptmark.ast.nodes import Element
    from promptmark.context import RenderContext


class BaseRenderer(ABC):
    """Abstract base class for output renderers.

    Parameters
    ----------
    options : RenderOptions or None, default = None
        Rendering options. If None, default options are used.

    Examples
    --------
    Creating a custom renderer:

        >>> from promptmark.components import render_elements
        >>> class PlainRenderer(BaseRenderer):
        ...     def render(self, elements, context):
        ...         return render_elements(elements, context)

    """

    def __init__(self, options: RenderOptions | None = None):
        """Initialize the renderer with optional configuration."""
        self._validate_options_type(options, RenderOptions, self.__class__.__name__)
        self.options = options or RenderOptions()

    @abstractmethod
    def render(self, elements: Sequence["Element"], context: "RenderContext") -> Any:
        """Render element trees to the renderer's output.

        Parameters
        ----------
        elements : sequence of Element
            Top-level elements and text nodes of the document
        context : RenderContext
            Context of the render pass. Components record chat messages,
            tools and metadata on it while rendering.

        Returns
        -------
        Any
            A string or a JSON-compatible structure, depending on the format

        Raises
        ------
        RenderingError
            If rendering fails

        """

    def render_to_string(self, elements: Sequence["Element"], context: "RenderContext") -> str:
        """Render element trees to text.

        Structured results are serialized as indented JSON.
        """
        result = self.render(elements, context)
        if isinstance(result, str):
            return result
        return json.dumps(result, indent=2, ensure_ascii=False, default=str)

    def render_to_file(
        self,
        elements: Sequence["Element"],
        context: "RenderContext",
        output: Union[str, Path, IO[bytes], IO[str]],
    ) -> Any:
        """Render element trees and write the text form to ``output``.

        Returns
        -------
        Any
            The result of :meth:`render`

        """
        result = self.render(elements, context)
        text = result if isinstance(result, str) else json.dumps(result, indent=2, ensure_ascii=False, default=str)
        write_content(text, output)
        return result

    @staticmethod
    def _validate_options_type(options: Any, expected_type: type, renderer_name: str) -> None:
        """Validate that options are of the correct type.

        Raises
        ------
        InvalidOptionsError
            If options are not None and not an instance of expected_type

        """
        if options is not None and not isinstance(options, expected_type):
            raise InvalidOptionsError(
                renderer_name=renderer_name,
                expected_type=expected_type,
                received_type=type(options),
            )
