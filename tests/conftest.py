"""Pytest configuration for test isolation.

Sanitized fixtures are written under ``STATEMENT_PARSER_SAMPLE_DIR`` (default
``./files/sample-files``). To keep tests hermetic, every test gets its own
sample directory under ``tmp_path`` via an autouse fixture.

PDF decoding is replaced by :func:`fake_pdfs`, which serves canned text pages
keyed by file path, so no test depends on real statement PDFs.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

import statement_parser.pdf

CHASE_STATEMENT_LINES = [
    "CHASE PRIME VISA",
    "Account Number: XXXX XXXX XXXX 1234",
    "Opening/Closing Date 12/28/20 - 01/27/21",
    "ACCOUNT ACTIVITY",
    "PAYMENTS AND OTHER CREDITS",
    "01/05      Payment Thank You-Mobile      -250.00",
    "PURCHASE",
    "12/30      AMAZON MKTP US*AB12CD     19.99",
    "01/10      WHOLE FOODS #10234     45.67",
    "    AUSTIN TX",
    "Totals Year-to-Date",
]

EXAMPLE_STATEMENT_LINES = [
    "Example Bank account number: 9876",
    "01/15/21 Paycheck $1,234.56",
    "02/01/21 Refund $20.00",
    "end inner state",
]


@pytest.fixture(autouse=True)
def _isolate_sample_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Force a per-test sample directory and clear worker overrides."""

    sample_root = tmp_path / "sample-files"
    sample_root.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("STATEMENT_PARSER_SAMPLE_DIR", os.fspath(sample_root))
    monkeypatch.delenv("STATEMENT_PARSER_MAX_WORKERS", raising=False)


@pytest.fixture
def fake_pdfs(
    monkeypatch: pytest.MonkeyPatch,
) -> Callable[[dict[str, Sequence[str]]], None]:
    """Install canned PDF text: ``fake_pdfs({"a.pdf": [...lines]})``.

    Each file is served as two pages split at the midpoint so page flattening
    is exercised too.
    """

    def install(files: dict[str, Sequence[str]]) -> None:
        def read_pdf(file_path) -> list[list[str]]:
            lines = list(files[os.fspath(file_path)])
            middle = len(lines) // 2
            return [lines[:middle], lines[middle:]]

        monkeypatch.setattr(statement_parser.pdf, "read_pdf", read_pdf)

    return install


@pytest.fixture
def chase_lines() -> list[str]:
    return list(CHASE_STATEMENT_LINES)


@pytest.fixture
def example_lines() -> list[str]:
    return list(EXAMPLE_STATEMENT_LINES)
