import sys
import types
from pathlib import Path

import pytest

from statement_parser.pdf import check_pdf_exists, read_pdf


class _FakePage:
    def __init__(self, text):
        self._text = text

    def extract_text(self):
        return self._text


class _FakeDocument:
    def __init__(self, pages):
        self.pages = pages

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


def test_check_pdf_exists(tmp_path: Path):
    pdf = tmp_path / "a.pdf"
    pdf.write_bytes(b"%PDF-1.4\n")
    assert check_pdf_exists(str(pdf)) == pdf

    with pytest.raises(FileNotFoundError, match='PDF file ".*missing.pdf" does not exist'):
        check_pdf_exists(tmp_path / "missing.pdf")


def test_read_pdf_returns_lines_per_page(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    pdf = tmp_path / "statement.pdf"
    pdf.write_bytes(b"%PDF-1.4\n")

    opened = []

    def fake_open(path):
        opened.append(path)
        return _FakeDocument([_FakePage("first line\nsecond line"), _FakePage(None)])

    monkeypatch.setitem(sys.modules, "pdfplumber", types.SimpleNamespace(open=fake_open))

    assert read_pdf(pdf) == [["first line", "second line"], []]
    assert opened == [pdf]
