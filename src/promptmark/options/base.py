"""Base classes for renderer options.

This module defines the frozen option dataclasses used to configure a
render pass.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, replace
from typing import Any

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from promptmark.constants import (
    DEFAULT_MAX_INCLUDE_DEPTH,
    DEFAULT_RENDERER_FORMAT,
    MARKUP_SYNTAXES,
    RENDERER_FORMATS,
    RendererFormat,
)


@dataclass(frozen=True)
class CloneFrozenMixin:
    """Mixin providing frozen dataclass cloning capabilities.

    This mixin adds the ability to create modified copies of frozen dataclass
    instances, which is useful for immutable configuration objects.
    """

    def create_updated(self, **kwargs: Any) -> Self:
        """Create a new instance with updated field values.

        Parameters
        ----------
        **kwargs : Any
            Field names and their new values

        Returns
        -------
        Self
            New instance with specified fields updated

        """
        return replace(self, **kwargs)


@dataclass(frozen=True)
class RenderOptions(CloneFrozenMixin):
    """Options controlling a single render pass.

    Parameters
    ----------
    format : str, default="dict"
        Output format produced by the prompt renderer. One of ``raw``, ``dict``,
        ``openai_chat``, ``openaiResponse``, ``langchain`` or ``pydantic``.
    chat : bool, default=True
        Whether message components feed the structured chat message list.
    syntax : str or None, default=None
        Default markup syntax (``markdown`` or ``xml``). None means markdown.
    max_include_depth : int, default=16
        Maximum nesting of ``<include>`` components before a placeholder is
        rendered instead of the included file.
    strict_parsing : bool, default=False
        Raise ParsingError on malformed markup instead of rendering it as text.

    """

    format: RendererFormat = field(
        default=DEFAULT_RENDERER_FORMAT,
        metadata={"help": "Output format of the render pass", "choices": list(RENDERER_FORMATS), "importance": "core"},
    )
    chat: bool = field(
        default=True,
        metadata={"help": "Collect message components into structured chat messages", "importance": "core"},
    )
    syntax: str | None = field(
        default=None,
        metadata={"help": "Default markup syntax (markdown or xml)", "importance": "core"},
    )
    max_include_depth: int = field(
        default=DEFAULT_MAX_INCLUDE_DEPTH,
        metadata={"help": "Maximum nesting depth of <include> components", "type": int, "importance": "security"},
    )
    strict_parsing: bool = field(
        default=False,
        metadata={"help": "Raise on malformed markup instead of rendering it as plain text", "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate option values.

        Raises
        ------
        ValueError
            If any field value is outside its valid range.

        """
        if self.format not in RENDERER_FORMATS:
            raise ValueError(f"format must be one of {', '.join(RENDERER_FORMATS)}, got {self.format!r}")
        if self.syntax is not None and self.syntax not in MARKUP_SYNTAXES:
            raise ValueError(f"syntax must be one of {', '.join(sorted(MARKUP_SYNTAXES))}, got {self.syntax!r}")
        if self.max_include_depth <= 0:
            raise ValueError(f"max_include_depth must be positive, got {self.max_include_depth}")
