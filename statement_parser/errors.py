"""Exception types raised by ``statement_parser``.

Every library error derives from :class:`StatementParserError` so callers can
recover at document granularity with a single ``except`` clause. Errors raised
by a configuration's own ``action`` function keep their original type; the
state machine only annotates their message with the source label.
"""

from __future__ import annotations


class StatementParserError(Exception):
    """Base class for all errors raised by this package."""


class InvalidDateError(StatementParserError, ValueError):
    """A date string or month/day pair does not form a real calendar date."""


class DateOutOfRangeError(StatementParserError):
    """Strict date reconciliation found no candidate inside the statement window."""


class UnreachedEndStateError(StatementParserError):
    """The input lines ran out before the state machine reached its end state."""

    def __init__(self, message: str, *, source: str) -> None:
        super().__init__(message)
        self.source = source


class IncompleteParseError(StatementParserError):
    """The end state was reached but the account suffix was never filled in."""

    def __init__(self, message: str, *, source: str) -> None:
        super().__init__(message)
        self.source = source


class KeywordOverlapError(StatementParserError):
    """Two preserved keywords matched overlapping spans of the same line."""


class SanitizedParseMismatchError(StatementParserError):
    """Parsing sanitized text disagreed with parsing the original text."""


class FixtureMismatchError(StatementParserError):
    """A stored sanitized fixture no longer parses to its recorded result."""


__all__ = [
    "DateOutOfRangeError",
    "FixtureMismatchError",
    "IncompleteParseError",
    "InvalidDateError",
    "KeywordOverlapError",
    "SanitizedParseMismatchError",
    "StatementParserError",
    "UnreachedEndStateError",
]
