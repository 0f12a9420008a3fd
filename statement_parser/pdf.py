"""PDF to text-line extraction.

The default text extractor for statement parsers. Decoding is delegated to
``pdfplumber``; this module only turns each page into an ordered list of
lines.
"""

from __future__ import annotations

from os import PathLike
from pathlib import Path

from .logging_setup import get_logger

_logger = get_logger("statement_parser.pdf")


def check_pdf_exists(file_path: str | PathLike[str]) -> Path:
    """Return ``file_path`` as a ``Path``, raising ``FileNotFoundError`` if missing."""

    path = Path(file_path)
    if not path.is_file():
        raise FileNotFoundError(f'PDF file "{file_path}" does not exist')
    return path


def read_pdf(file_path: str | PathLike[str]) -> list[list[str]]:
    """Read a PDF and return one list of text lines per page.

    Pages without a text layer yield an empty list rather than failing; a
    statement parser fed nothing will report that it never reached its end
    state.
    """

    path = check_pdf_exists(file_path)

    # Deferred import keeps text-only use free of the PDF stack.
    import pdfplumber

    pages: list[list[str]] = []
    with pdfplumber.open(path) as pdf:
        for page in pdf.pages:
            text = page.extract_text() or ""
            pages.append(text.splitlines())
    _logger.debug("read %d page(s) from %s", len(pages), path)
    return pages


__all__ = ["check_pdf_exists", "read_pdf"]
