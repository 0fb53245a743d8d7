#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/utils/io_utils.py
"""File access used by I/O components and the public API.

Components that read from disk (``include``, ``document``, ``table``,
``let src``, ``folder``) go through the narrow interface in this module:

- :func:`resolve_path` joins a relative path onto a base directory
- :func:`read_file` returns file text, or None when the file does not exist

Errors other than a missing file propagate as ``OSError`` so the calling
component can turn them into a placeholder.

"""

from __future__ import annotations

import logging
from io import StringIO
from pathlib import Path
from typing import IO, Optional, Union

import chardet

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_ENCODINGS = ("cp1252", "latin-1")


def resolve_path(base: Union[str, Path, None], relative: Union[str, Path]) -> Path:
    """Resolve ``relative`` against ``base``.

    Parameters
    ----------
    base : str, Path or None
        Base directory. None means the current working directory.
    relative : str or Path
        Path to resolve. Absolute paths are returned unchanged.

    Returns
    -------
    Path
        Resolved path

    Examples
    --------
        >>> resolve_path("/docs", "parts/intro.poml")
        PosixPath('/docs/parts/intro.poml')
        >>> resolve_path("/docs", "/abs/file.poml")
        PosixPath('/abs/file.poml')

    """
    path = Path(relative).expanduser()
    if path.is_absolute():
        return path
    base_dir = Path(base) if base is not None else Path.cwd()
    return base_dir / path


def detect_encoding(data: bytes, sample_size: int = 8192, confidence_threshold: float = 0.7) -> Optional[str]:
    """Detect the encoding of ``data`` with chardet.

    Returns None when chardet finds no encoding or is not confident enough.
    """
    result = chardet.detect(data[:sample_size])
    encoding = result.get("encoding")
    confidence = result.get("confidence") or 0.0
    if not encoding or confidence < confidence_threshold:
        logger.debug("chardet: no confident encoding (%s, %.2f)", encoding, confidence)
        return None
    logger.debug("chardet detected encoding: %s (confidence: %.2f)", encoding, confidence)
    return encoding


def decode_text(
    data: bytes,
    fallback_encodings: tuple[str, ...] = DEFAULT_FALLBACK_ENCODINGS,
    use_chardet: bool = True,
) -> str:
    """Decode bytes as text.

    UTF-8 (with or without a byte order mark) is tried first, then the
    chardet-detected encoding, then each fallback encoding in order.

    Parameters
    ----------
    data : bytes
        Raw file content
    fallback_encodings : tuple of str
        Encodings to try, in order
    use_chardet : bool, default True
        Whether to try chardet detection before the fallbacks

    Returns
    -------
    str
        Decoded text

    """
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        pass

    if use_chardet:
        detected = detect_encoding(data)
        if detected:
            try:
                return data.decode(detected)
            except (UnicodeDecodeError, LookupError) as e:
                logger.debug("Failed to decode with detected encoding %s: %s", detected, e)

    for encoding in fallback_encodings:
        try:
            text = data.decode(encoding)
            logger.debug("Decoded file content with encoding: %s", encoding)
            return text
        except UnicodeDecodeError as e:
            logger.debug("Failed to decode with %s: %s", encoding, e)
        except LookupError as e:
            logger.debug("Unknown encoding %s: %s", encoding, e)

    logger.warning("All encoding attempts failed, using utf-8 with error replacement")
    return data.decode("utf-8", errors="replace")


def read_file(path: Union[str, Path]) -> Optional[str]:
    """Read a text file.

    Parameters
    ----------
    path : str or Path
        File to read

    Returns
    -------
    str or None
        File text, or None if the file does not exist

    Raises
    ------
    OSError
        If the file exists but cannot be read

    """
    file_path = Path(path)
    if not file_path.is_file():
        logger.debug("File not found: %s", file_path)
        return None
    return decode_text(file_path.read_bytes())


def write_content(content: str, output: Union[str, Path, IO[str], IO[bytes], None]) -> Optional[StringIO]:
    """Write text to a path or stream, or return it as a StringIO.

    Parameters
    ----------
    content : str
        Text to write
    output : str, Path, IO or None
        Destination. None returns a StringIO holding the content.

    Returns
    -------
    StringIO or None
        StringIO when ``output`` is None, otherwise None

    Raises
    ------
    TypeError
        If the destination type is not supported

    """
    if output is None:
        return StringIO(content)

    if isinstance(output, (str, Path)):
        Path(output).write_text(content, encoding="utf-8")
        return None

    if hasattr(output, "write"):
        mode = getattr(output, "mode", "")
        if isinstance(mode, str) and "b" in mode:
            output.write(content.encode("utf-8"))  # type: ignore[arg-type]
        else:
            try:
                output.write(content)  # type: ignore[arg-type]
            except TypeError:
                output.write(content.encode("utf-8"))  # type: ignore[arg-type]
        return None

    raise TypeError(f"Unsupported output type: {type(output).__name__}")
