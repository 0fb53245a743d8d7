"""The major exported API functions for rendering prompt markup."""

#  Copyright (c) 2025 Tom Villani, Ph.D.
# src/promptmark/api.py
import logging
from pathlib import Path
from typing import IO, Any, Mapping, Optional, Union

from promptmark.components.dispatch import render_elements
from promptmark.constants import DEFAULT_RENDERER_FORMAT, MARKUP_FILE_SUFFIXES
from promptmark.context import RenderContext
from promptmark.exceptions import FileError, MarkupFileNotFoundError
from promptmark.options.base import RenderOptions
from promptmark.parsers.markup import parse_markup
from promptmark.renderers.prompt import PromptRenderer
from promptmark.utils.decorators import debug_timer
from promptmark.utils.io_utils import read_file

logger = logging.getLogger(__name__)

MarkupSource = Union[str, Path]


def _looks_like_path(value: str) -> bool:
    """Whether a string argument names a file rather than holding markup."""
    if "\n" in value or "<" in value:
        return False
    return Path(value).suffix.lower() in MARKUP_FILE_SUFFIXES


def _load_markup(markup: MarkupSource) -> tuple[str, Optional[Path]]:
    """Return the markup text and, for file input, the file path.

    Parameters
    ----------
    markup : str or Path
        A path to a markup file, or the markup itself

    Returns
    -------
    tuple[str, Path or None]
        Markup text and source path

    Raises
    ------
    MarkupFileNotFoundError
        If ``markup`` is a Path, or a string that looks like a markup file
        path, and the file does not exist
    FileError
        If the file exists but cannot be read

    """
    if isinstance(markup, Path) or (isinstance(markup, str) and "\n" not in markup and "<" not in markup):
        path = Path(markup)
        try:
            is_file = path.is_file()
        except OSError:
            is_file = False
        if is_file:
            try:
                text = read_file(path)
            except OSError as e:
                raise FileError(f"Could not read markup file: {e}", file_path=str(path), original_error=e) from e
            if text is None:
                raise MarkupFileNotFoundError(str(path))
            return text, path.resolve()
        if isinstance(markup, Path) or _looks_like_path(markup):
            raise MarkupFileNotFoundError(str(markup))
    return str(markup), None


def process(
    markup: MarkupSource,
    context: Optional[Mapping[str, Any]] = None,
    stylesheet: Union[Mapping[str, Any], str, None] = None,
    chat: bool = True,
    output_file: Union[str, Path, IO[str], IO[bytes], None] = None,
    format: str = DEFAULT_RENDERER_FORMAT,
    options: Optional[RenderOptions] = None,
) -> Any:
    """Render prompt markup in one of the renderer output formats.

    Parameters
    ----------
    markup : str or Path
        Path to a markup file, or markup text. File input sets the source
        path used to resolve relative ``src`` attributes.
    context : mapping, optional
        Initial template variables
    stylesheet : mapping or str, optional
        Stylesheet as a mapping or a JSON string
    chat : bool, default True
        Whether message components feed the structured chat messages.
        Ignored when ``options`` is given.
    output_file : str, Path or IO, optional
        Destination for the text form of the result. Structured results are
        written as indented JSON.
    format : str, default "dict"
        Output format: ``raw``, ``dict``, ``openai_chat``,
        ``openaiResponse``, ``langchain`` or ``pydantic``. Ignored when
        ``options`` is given.
    options : RenderOptions, optional
        Complete rendering options

    Returns
    -------
    Any
        A string for ``raw``, a list for ``openai_chat`` and a dict otherwise

    Raises
    ------
    MarkupFileNotFoundError
        If a markup file path does not exist
    DocumentError
        If the document is malformed, e.g. defines two response schemas
    FormatError
        If the output format is unknown
    ParsingError
        If strict parsing is enabled and the markup is malformed

    Examples
    --------
    Render a prompt as a content/metadata dict:

        >>> result = process("<role>Analyst</role><task>Summarize {{topic}}</task>", context={"topic": "sales"})
        >>> result["metadata"]["variables"]
        {'topic': 'sales'}

    Collect chat messages:

        >>> process("<human-msg>Hi</human-msg><ai-msg>Hello!</ai-msg>", format="openai_chat")
        [{'role': 'user', 'content': 'Hi'}, {'role': 'assistant', 'content': 'Hello!'}]

    """
    if options is None:
        options = RenderOptions(format=format, chat=chat)

    text, source_path = _load_markup(markup)
    render_context = RenderContext(
        variables=context,
        stylesheet=stylesheet,
        chat=options.chat,
        syntax=options.syntax,
        source_path=source_path,
        max_include_depth=options.max_include_depth,
    )

    with debug_timer(logger, "Parsing"):
        elements = parse_markup(text, render_context, strict=options.strict_parsing)

    renderer = PromptRenderer(options)
    with debug_timer(logger, f"Rendering ({options.format})"):
        if output_file is not None:
            return renderer.render_to_file(elements, render_context, output_file)
        return renderer.render(elements, render_context)


def render_markup(
    markup: MarkupSource,
    context: Optional[Mapping[str, Any]] = None,
    stylesheet: Union[Mapping[str, Any], str, None] = None,
    syntax: Optional[str] = None,
) -> str:
    """Render prompt markup to plain text.

    Unlike :func:`process`, the result is the rendered content only: message
    components render in place instead of being collected, and no message
    headers are added.

    Examples
    --------
        >>> render_markup("<task>Count to {{n}}</task>", context={"n": 3})
        '# Task\\n\\nCount to 3\\n\\n'

    """
    text, source_path = _load_markup(markup)
    render_context = RenderContext(
        variables=context,
        stylesheet=stylesheet,
        chat=False,
        syntax=syntax,
        source_path=source_path,
    )
    elements = parse_markup(text, render_context)
    with debug_timer(logger, "Rendering"):
        return render_elements(elements, render_context)
