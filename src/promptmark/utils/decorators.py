#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/utils/decorators.py
"""Dependency checks for the optional document readers, and stage timing."""

from __future__ import annotations

import importlib
import logging
import time
from contextlib import contextmanager
from functools import wraps
from importlib import metadata
from typing import Any, Callable, Iterator, Optional, Sequence

from packaging import version
from packaging.specifiers import SpecifierSet

from promptmark.exceptions import DependencyError

Requirement = tuple[str, str, str]


def check_version_requirement(package_name: str, version_spec: str) -> tuple[bool, Optional[str]]:
    """Check whether an installed distribution satisfies a version specifier.

    Parameters
    ----------
    package_name : str
        Distribution name, e.g. ``"pymupdf"``
    version_spec : str
        Specifier such as ``">=1.26.4"``

    Returns
    -------
    tuple
        ``(meets_requirement, installed_version)``; the version is None when
        the distribution is not installed

    """
    try:
        installed = metadata.version(package_name)
    except metadata.PackageNotFoundError:
        return False, None
    return SpecifierSet(version_spec).contains(version.parse(installed), prereleases=True), installed


def find_unmet_requirements(
    packages: Sequence[Requirement],
) -> tuple[list[tuple[str, str]], list[tuple[str, str, str]], Optional[ImportError]]:
    """Return the requirements in ``packages`` that are not satisfied.

    Parameters
    ----------
    packages : sequence of tuple
        ``(install_name, import_name, version_spec)`` triples. An empty
        ``version_spec`` accepts any installed version.

    Returns
    -------
    tuple
        Missing ``(install_name, version_spec)`` pairs, mismatched
        ``(install_name, version_spec, installed)`` triples, and the first
        import error

    """
    missing: list[tuple[str, str]] = []
    mismatched: list[tuple[str, str, str]] = []
    first_error: Optional[ImportError] = None

    for install_name, import_name, version_spec in packages:
        try:
            importlib.import_module(import_name)
        except ImportError as e:
            missing.append((install_name, version_spec))
            first_error = first_error or e
            continue
        if version_spec:
            ok, installed = check_version_requirement(install_name, version_spec)
            if not ok:
                mismatched.append((install_name, version_spec, installed or "unknown"))

    return missing, mismatched, first_error


def requires_dependencies(feature_name: str, packages: Sequence[Requirement]) -> Callable:
    """Raise :class:`DependencyError` instead of calling a reader whose packages are unavailable.

    Parameters
    ----------
    feature_name : str
        Extra that installs the packages, e.g. ``"pdf"``
    packages : sequence of tuple
        ``(install_name, import_name, version_spec)`` triples

    Examples
    --------
        >>> @requires_dependencies("pdf", [("pymupdf", "fitz", ">=1.26.4")])
        ... def page_count(path):
        ...     import fitz
        ...     return fitz.open(path).page_count

    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            missing, mismatched, first_error = find_unmet_requirements(packages)
            if missing or mismatched:
                raise DependencyError(feature_name, missing, mismatched, first_error) from first_error
            return func(*args, **kwargs)

        return wrapper

    return decorator


@contextmanager
def debug_timer(logger: logging.Logger, operation: str) -> Iterator[None]:
    """Log the duration of a block at DEBUG level.

    Nothing is measured when DEBUG is disabled for ``logger``.

    Examples
    --------
        >>> with debug_timer(logger, "Parsing"):
        ...     elements = parse_markup(text, context)

    """
    if not logger.isEnabledFor(logging.DEBUG):
        yield
        return
    start = time.perf_counter()
    try:
        yield
    finally:
        logger.debug("%s took %.3fs", operation, time.perf_counter() - start)
