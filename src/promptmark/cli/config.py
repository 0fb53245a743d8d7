#  Copyright (c) 2025 Tom Villani, Ph.D.

"""Configuration file discovery and loading for the promptmark CLI.

A configuration file holds defaults for the command line options, e.g.::

    # .promptmark.toml
    format = "openai_chat"
    chat = true
    max_include_depth = 8

    [context]
    audience = "engineers"

Files are discovered by walking from the working directory up to the
filesystem root, then in the home directory. ``pyproject.toml`` counts only
when it has a ``[tool.promptmark]`` table.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found,unused-ignore]
from typing import Any, Callable, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = (".promptmark.toml", ".promptmark.yaml", ".promptmark.yml", ".promptmark.json")
PYPROJECT_FILENAME = "pyproject.toml"
CONFIG_ENV_VAR = "PROMPTMARK_CONFIG"

# Keys a configuration file may set, with the types they accept
CONFIG_KEYS: Dict[str, tuple[type, ...]] = {
    "format": (str,),
    "chat": (bool,),
    "syntax": (str,),
    "max_include_depth": (int,),
    "strict_parsing": (bool,),
    "context": (dict,),
    "stylesheet": (dict, str),
    "log_level": (str,),
}


def _load_pyproject_section(pyproject_path: Path) -> Dict[str, Any]:
    """Return the ``[tool.promptmark]`` table of a pyproject file, or an empty dict.

    Raises
    ------
    argparse.ArgumentTypeError
        If the file is not valid TOML or the section is not a table

    """
    data = _load_toml(pyproject_path)
    config = data.get("tool", {}).get("promptmark", {})
    if not isinstance(config, dict):
        raise argparse.ArgumentTypeError(
            f"[tool.promptmark] section in {pyproject_path} must be a table, got {type(config).__name__}"
        )
    return config


def _load_toml(config_path: Path) -> Dict[str, Any]:
    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise argparse.ArgumentTypeError(f"Invalid TOML in config file {config_path}: {e}") from e


def _load_yaml(config_path: Path) -> Any:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise argparse.ArgumentTypeError(f"Invalid YAML in config file {config_path}: {e}") from e


def _load_json(config_path: Path) -> Any:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"Invalid JSON in config file {config_path}: {e}") from e


_LOADERS: Dict[str, Callable[[Path], Any]] = {
    ".toml": _load_toml,
    ".yaml": _load_yaml,
    ".yml": _load_yaml,
    ".json": _load_json,
}


def find_config_in_parents(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Find the nearest configuration file at or above ``start_dir``.

    In each directory the dedicated files are checked in the order of
    :data:`CONFIG_FILENAMES`, then ``pyproject.toml`` with a
    ``[tool.promptmark]`` table. Unreadable pyproject files are skipped.

    Parameters
    ----------
    start_dir : Path, optional
        Starting directory, defaults to the current working directory

    Returns
    -------
    Path or None
        Path to the first config file found

    """
    current = (start_dir or Path.cwd()).resolve()
    while True:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        pyproject_path = current / PYPROJECT_FILENAME
        if pyproject_path.is_file():
            try:
                if _load_pyproject_section(pyproject_path):
                    return pyproject_path
            except (argparse.ArgumentTypeError, OSError) as e:
                logger.debug("Skipping unreadable %s: %s", pyproject_path, e)

        if current.parent == current:
            return None
        current = current.parent


def discover_config_file(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Discover a configuration file in the parent directories, then the home directory.

    Examples
    --------
    >>> config_path = discover_config_file()
    >>> if config_path:
    ...     print(f"Found config at: {config_path}")

    """
    found = find_config_in_parents(start_dir)
    if found:
        return found

    home = Path.home()
    for filename in CONFIG_FILENAMES:
        config_path = home / filename
        if config_path.is_file():
            return config_path
    return None


def validate_config(config: Dict[str, Any], source: Path | str) -> Dict[str, Any]:
    """Check the keys and value types of a loaded configuration.

    Unknown keys are logged and dropped.

    Raises
    ------
    argparse.ArgumentTypeError
        If a known key has a value of the wrong type

    """
    validated = {}
    for key, value in config.items():
        normalized = str(key).replace("-", "_")
        expected = CONFIG_KEYS.get(normalized)
        if expected is None:
            logger.warning("Ignoring unknown configuration key %r in %s", key, source)
            continue
        # bool is an int subclass and is not a valid depth
        if not isinstance(value, expected) or (expected == (int,) and isinstance(value, bool)):
            names = " or ".join(t.__name__ for t in expected)
            raise argparse.ArgumentTypeError(
                f"Configuration key {key!r} in {source} must be {names}, got {type(value).__name__}"
            )
        validated[normalized] = value
    return validated


def load_config_file(config_path: Path | str) -> Dict[str, Any]:
    """Load and validate a TOML, YAML, JSON or pyproject configuration file.

    Parameters
    ----------
    config_path : Path or str
        Path to the configuration file

    Returns
    -------
    dict
        Validated configuration

    Raises
    ------
    argparse.ArgumentTypeError
        If the file is missing, cannot be parsed, or holds invalid values

    Examples
    --------
    >>> config = load_config_file(".promptmark.toml")
    >>> config.get("format")
    'openai_chat'

    """
    config_path = Path(config_path)
    if not config_path.is_file():
        raise argparse.ArgumentTypeError(f"Configuration file does not exist: {config_path}")

    try:
        if config_path.name.lower() == PYPROJECT_FILENAME:
            config = _load_pyproject_section(config_path)
        else:
            loader = _LOADERS.get(config_path.suffix.lower())
            if loader is None:
                raise argparse.ArgumentTypeError(
                    f"Unsupported config file format: {config_path.suffix}. Use .toml, .yaml or .json"
                )
            config = loader(config_path)
    except OSError as e:
        raise argparse.ArgumentTypeError(f"Error reading config file {config_path}: {e}") from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise argparse.ArgumentTypeError(
            f"Config file {config_path} must contain a mapping, got {type(config).__name__}"
        )
    logger.debug("Loaded configuration from %s", config_path)
    return validate_config(config, config_path)


def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge two configurations; ``override`` wins and nested dicts merge recursively.

    Examples
    --------
    >>> merge_configs({"context": {"a": 1}, "chat": True}, {"context": {"b": 2}, "chat": False})
    {'context': {'a': 1, 'b': 2}, 'chat': False}

    """
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value
    return result


def load_config_with_priority(
    explicit_path: Optional[str] = None, env_var_path: Optional[str] = None
) -> Dict[str, Any]:
    """Load the configuration that applies to this invocation.

    Priority order (highest to lowest):

    1. Explicit config file path (``--config``)
    2. ``PROMPTMARK_CONFIG`` environment variable
    3. Auto-discovered config file

    Returns
    -------
    dict
        Loaded configuration (empty if no file applies)

    """
    for path in (explicit_path, env_var_path):
        if path:
            return load_config_file(path)

    discovered = discover_config_file()
    if discovered:
        return load_config_file(discovered)
    return {}
