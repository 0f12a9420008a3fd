"""High-level entry point: parse many statement PDFs at once."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .logging_setup import get_logger
from .models import ParsedOutput
from .parsers import ParserType, get_parser
from .pmap import p_map

_logger = get_logger("statement_parser.api")

_MAX_WORKERS_CAP = 32
_DEFAULT_MAX_WORKERS = 8


@dataclass(frozen=True, slots=True)
class StatementPdf:
    """One PDF to parse and the format it is in."""

    parser_type: ParserType | str
    file_path: str
    name: str | None = None
    options: Mapping[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class ParsedPdf:
    statement: StatementPdf
    data: ParsedOutput


def _resolve_max_workers(total: int, concurrency: int | None = None) -> int:
    """Pick a worker count for ``total`` PDFs.

    An explicit ``concurrency`` wins, then ``STATEMENT_PARSER_MAX_WORKERS``
    (capped at 32); otherwise ``min(8, total)``. Always at least 1.
    """

    if concurrency is not None:
        return max(1, concurrency)

    env_value = os.getenv("STATEMENT_PARSER_MAX_WORKERS")
    if env_value:
        try:
            parsed = int(env_value)
        except ValueError:
            _logger.warning(
                "ignoring non-integer STATEMENT_PARSER_MAX_WORKERS=%r", env_value
            )
        else:
            if parsed > 0:
                return min(parsed, _MAX_WORKERS_CAP)

    return max(1, min(_DEFAULT_MAX_WORKERS, total))


def parse_pdfs(
    pdfs: Sequence[StatementPdf],
    *,
    debug: bool = False,
    concurrency: int | None = None,
) -> list[ParsedPdf]:
    """Parse each PDF with its parser, returning results in input order.

    Unknown parser types fail before any PDF is read. The first parse error
    propagates to the caller.
    """

    if not pdfs:
        return []

    parsers = {pdf.parser_type: get_parser(pdf.parser_type) for pdf in pdfs}

    def _parse_one(pdf: StatementPdf) -> ParsedPdf:
        data = parsers[pdf.parser_type].parse_pdf(
            pdf.file_path, name=pdf.name, options=pdf.options, debug=debug
        )
        return ParsedPdf(statement=pdf, data=data)

    workers = _resolve_max_workers(len(pdfs), concurrency)
    _logger.info("parsing %d statement(s) with %d worker(s)", len(pdfs), workers)
    return p_map(pdfs, _parse_one, concurrency=workers)


__all__ = ["ParsedPdf", "StatementPdf", "parse_pdfs"]
