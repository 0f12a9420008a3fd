"""State-machine parsing of financial statement text.

Public API highlights:

- :func:`run_state_machine` and :class:`StateMachineConfiguration`: the
  configuration-driven line-by-line engine.
- :func:`sanitize_statement_text`: anonymize statement lines while keeping
  parser keywords legible.
- :func:`date_within_range`, :func:`create_utc_date`: date reconciliation
  helpers for configurations.
- :func:`parse_pdfs` and :data:`PARSERS`: parse statement PDFs with the
  bundled formats.
"""

from __future__ import annotations

from .api import ParsedPdf, StatementPdf, parse_pdfs
from .dates import (
    create_utc_date,
    date_from_named_comma_format,
    date_from_slash_format,
    date_within_range,
)
from .errors import (
    DateOutOfRangeError,
    FixtureMismatchError,
    IncompleteParseError,
    InvalidDateError,
    KeywordOverlapError,
    SanitizedParseMismatchError,
    StatementParserError,
    UnreachedEndStateError,
)
from .models import (
    BASE_PARSER_OPTIONS,
    ParsedOutput,
    ParsedTransaction,
    output_to_dict,
)
from .parsers import PARSERS, ParserType, get_parser, is_parser_type
from .sanitizer import sanitize_statement_text
from .state_machine import StateMachineConfiguration, run_state_machine
from .statement import StatementParser

__all__ = [
    "BASE_PARSER_OPTIONS",
    "DateOutOfRangeError",
    "FixtureMismatchError",
    "IncompleteParseError",
    "InvalidDateError",
    "KeywordOverlapError",
    "PARSERS",
    "ParsedOutput",
    "ParsedPdf",
    "ParsedTransaction",
    "ParserType",
    "SanitizedParseMismatchError",
    "StateMachineConfiguration",
    "StatementParser",
    "StatementParserError",
    "StatementPdf",
    "UnreachedEndStateError",
    "create_utc_date",
    "date_from_named_comma_format",
    "date_from_slash_format",
    "date_within_range",
    "get_parser",
    "is_parser_type",
    "output_to_dict",
    "parse_pdfs",
    "run_state_machine",
    "sanitize_statement_text",
]
