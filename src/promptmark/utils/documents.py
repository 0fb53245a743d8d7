#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/utils/documents.py
"""Text extraction from binary documents.

PDF text comes from PyMuPDF and DOCX text from python-docx. Both packages
are optional; the extractors raise :class:`~promptmark.exceptions.DependencyError`
when the package is not installed.

"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from promptmark.constants import DEPS_DOCX, DEPS_PDF
from promptmark.utils.decorators import requires_dependencies
from promptmark.utils.text import parse_slice

logger = logging.getLogger(__name__)


@requires_dependencies("pdf", DEPS_PDF)
def extract_pdf_text(path: Union[str, Path], selected_pages: Optional[str] = None) -> str:
    """Extract the plain text of a PDF.

    Parameters
    ----------
    path : str or Path
        PDF file
    selected_pages : str, optional
        Python-style slice of zero-based page numbers, e.g. ``"1:3"``

    Returns
    -------
    str
        Text of the selected pages, separated by blank lines

    """
    import fitz

    doc = fitz.open(filename=str(path))
    try:
        start, stop = 0, doc.page_count
        if selected_pages:
            bounds = parse_slice(selected_pages, doc.page_count)
            if bounds is None:
                logger.warning("Ignoring invalid page selection: %s", selected_pages)
            else:
                start, stop = bounds
                stop = min(stop, doc.page_count)
        logger.debug("Extracting pages %d-%d of %s", start, stop, path)
        return "\n\n".join(doc[index].get_text().strip() for index in range(start, stop))
    finally:
        doc.close()


@requires_dependencies("docx", DEPS_DOCX)
def extract_docx_text(path: Union[str, Path]) -> str:
    """Extract paragraph text from a Word document."""
    import docx

    document = docx.Document(str(path))
    paragraphs = [paragraph.text for paragraph in document.paragraphs if paragraph.text.strip()]
    return "\n\n".join(paragraphs)
