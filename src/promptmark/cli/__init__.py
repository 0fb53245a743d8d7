"""Command-line interface for the promptmark library.

Renders a markup file (or markup read from standard input) and prints the
result. String results are printed as they are; structured results are
printed as indented JSON.

Defaults for the options can be stored in a configuration file (see
:mod:`promptmark.cli.config`). Command line arguments override the
configuration file.

Examples
--------
Render a prompt as a content/metadata dict::

    $ promptmark prompt.poml

Render chat messages with variables::

    $ promptmark prompt.poml --format openai_chat --context '{"topic": "tides"}'

Read variables from a file and write the result::

    $ promptmark prompt.poml --context @vars.json --output prompt.json

Render markup from standard input as plain text::

    $ echo '<task>Say hi</task>' | promptmark - --format raw --no-chat

"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional

import yaml

from promptmark.cli.config import CONFIG_ENV_VAR, load_config_with_priority, merge_configs
from promptmark.constants import MARKUP_SYNTAXES, RENDERER_FORMATS
from promptmark.exceptions import FileError, PromptMarkError
from promptmark.logging_utils import configure_logging

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_DOCUMENT_ERROR = 1
EXIT_USAGE_ERROR = 2

STDIN_INPUT = "-"


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the ``promptmark`` command."""
    from promptmark import __version__

    parser = argparse.ArgumentParser(
        prog="promptmark",
        description="Render prompt markup into text, chat messages or structured prompts.",
    )
    parser.add_argument("input", help="Markup file to render, or '-' to read markup from standard input")
    parser.add_argument(
        "-f",
        "--format",
        choices=list(RENDERER_FORMATS),
        default=None,
        help="Output format (default: dict)",
    )
    parser.add_argument("--context", default=None, help="Template variables as JSON, or @FILE (JSON or YAML)")
    parser.add_argument("--stylesheet", default=None, help="Stylesheet as JSON, or @FILE (JSON or YAML)")
    parser.add_argument("--syntax", choices=sorted(MARKUP_SYNTAXES), default=None, help="Default markup syntax")
    parser.add_argument(
        "--no-chat",
        dest="chat",
        action="store_false",
        default=None,
        help="Render message components in place instead of collecting chat messages",
    )
    parser.add_argument("--max-include-depth", type=int, default=None, help="Maximum nesting of <include>")
    parser.add_argument(
        "--strict",
        dest="strict_parsing",
        action="store_true",
        default=None,
        help="Fail on malformed markup instead of rendering it as text",
    )
    parser.add_argument("-o", "--output", default=None, help="Write the result to this file instead of stdout")

    config_group = parser.add_argument_group("configuration")
    config_group.add_argument(
        "--config", default=None, help=f"Configuration file (default: ${CONFIG_ENV_VAR} or discovery)"
    )
    config_group.add_argument("--no-config", action="store_true", help="Do not load any configuration file")

    logging_group = parser.add_argument_group("logging")
    logging_group.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING)",
    )
    logging_group.add_argument("--log-file", default=None, help="Also write log output to this file")
    logging_group.add_argument("--trace", action="store_true", help="Debug logging with timestamps and logger names")

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def parse_data_argument(value: str, name: str) -> Any:
    """Decode a JSON argument, or the JSON or YAML file named by ``@FILE``.

    Raises
    ------
    argparse.ArgumentTypeError
        If the file cannot be read or the data cannot be decoded

    """
    if value.startswith("@"):
        path = Path(value[1:])
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise argparse.ArgumentTypeError(f"Cannot read {name} file {path}: {e}") from e
        if path.suffix.lower() in (".yaml", ".yml"):
            try:
                return yaml.safe_load(text)
            except yaml.YAMLError as e:
                raise argparse.ArgumentTypeError(f"Invalid YAML in {name} file {path}: {e}") from e
        value = text

    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"Invalid JSON for {name}: {e}") from e


def _setup_logging(parsed_args: argparse.Namespace, config: dict[str, Any]) -> None:
    # --trace takes precedence over --log-level, which overrides the config file
    if parsed_args.trace:
        log_level: int | str = logging.DEBUG
    else:
        log_level = parsed_args.log_level or config.get("log_level", "WARNING")
    configure_logging(log_level, log_file=parsed_args.log_file, trace_mode=parsed_args.trace)


def _collect_settings(parsed_args: argparse.Namespace) -> dict[str, Any]:
    """Merge the configuration file with the command line arguments."""
    config: dict[str, Any] = {}
    if not parsed_args.no_config:
        config = load_config_with_priority(parsed_args.config, os.environ.get(CONFIG_ENV_VAR))

    overrides: dict[str, Any] = {
        key: getattr(parsed_args, key)
        for key in ("format", "chat", "syntax", "max_include_depth", "strict_parsing")
        if getattr(parsed_args, key) is not None
    }
    if parsed_args.context is not None:
        overrides["context"] = parse_data_argument(parsed_args.context, "context")
    if parsed_args.stylesheet is not None:
        overrides["stylesheet"] = parse_data_argument(parsed_args.stylesheet, "stylesheet")
    return merge_configs(config, overrides)


def _read_input(source: str) -> str | Path:
    if source == STDIN_INPUT:
        return sys.stdin.read()
    return Path(source)


def _format_result(result: Any) -> str:
    if isinstance(result, str):
        return result
    return json.dumps(result, indent=2, ensure_ascii=False, default=str)


def main(args: Optional[list[str]] = None) -> int:
    """Execute the ``promptmark`` command.

    Returns
    -------
    int
        0 on success, 1 when the document cannot be rendered, 2 for usage and
        file errors

    """
    from promptmark.api import process
    from promptmark.options import RenderOptions

    parser = create_parser()
    parsed_args = parser.parse_args(args)

    try:
        settings = _collect_settings(parsed_args)
    except argparse.ArgumentTypeError as e:
        configure_logging(parsed_args.log_level or "WARNING", trace_mode=parsed_args.trace)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR

    _setup_logging(parsed_args, settings)

    context = settings.get("context")
    if context is not None and not isinstance(context, dict):
        print("Error: context must be a JSON object", file=sys.stderr)
        return EXIT_USAGE_ERROR

    try:
        options = RenderOptions(
            **{
                key: settings[key]
                for key in ("format", "chat", "syntax", "max_include_depth", "strict_parsing")
                if key in settings
            }
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR

    try:
        markup = _read_input(parsed_args.input)
        result = process(
            markup,
            context=context,
            stylesheet=settings.get("stylesheet"),
            output_file=parsed_args.output,
            options=options,
        )
    except FileError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR
    except PromptMarkError as e:
        logger.debug("Render failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_DOCUMENT_ERROR
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR

    if parsed_args.output:
        logger.info("Wrote %s output to %s", options.format, parsed_args.output)
    else:
        text = _format_result(result)
        sys.stdout.write(text if text.endswith("\n") else f"{text}\n")
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
