"""Test utilities for the promptmark test suite."""

from pathlib import Path
from typing import Any, Optional, Union

from promptmark.components import render_elements
from promptmark.context import RenderContext
from promptmark.parsers import parse_markup


def render(
    markup: str,
    variables: Optional[dict[str, Any]] = None,
    context: Optional[RenderContext] = None,
    **context_kwargs: Any,
) -> str:
    """Parse and render markup with chat collection disabled unless a context is given."""
    if context is None:
        context_kwargs.setdefault("chat", False)
        context = RenderContext(variables=variables, **context_kwargs)
    return render_elements(parse_markup(markup, context), context)


def render_file(path: Union[str, Path], **context_kwargs: Any) -> str:
    """Render a markup file with its path as the source path."""
    path = Path(path)
    context_kwargs.setdefault("chat", False)
    context = RenderContext(source_path=path, **context_kwargs)
    return render_elements(parse_markup(path.read_text(encoding="utf-8"), context), context)
