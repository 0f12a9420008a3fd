"""Data models and type aliases for ``statement_parser``.

Parsed results are frozen dataclasses. A configuration's ``action`` returns an
updated copy of the output it received (``with_income``/``with_expense`` or
``dataclasses.replace``), so no parse can mutate output that belongs to
another in-flight parse.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, fields, is_dataclass, replace
from datetime import datetime
from types import MappingProxyType
from typing import Any, Self

from .dates import to_iso_timestamp

# ---------------------------------------------------------------------------
# Parser options and keywords
# ---------------------------------------------------------------------------

type ParserOptions = Mapping[str, Any]
"""Merged, read-only options handed to every ``action`` call.

Always contains the keys of :data:`BASE_PARSER_OPTIONS`; configurations add
their own defaults on top.
"""

BASE_PARSER_OPTIONS: ParserOptions = MappingProxyType(
    {
        # Most statements print two-digit years; this supplies the century.
        "year_prefix": 20,
        # Lenient date reconciliation is only used for sanitized fixture text.
        "strict_dates": True,
    }
)

type Keyword = str | re.Pattern[str]
"""A phrase that sanitization must leave legible.

Plain strings match case-insensitively; compiled patterns use their own flags.
"""


# ---------------------------------------------------------------------------
# Parsed output
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ParsedTransaction:
    """A single statement transaction.

    ``original_text`` holds the statement line(s) the transaction was read
    from, which keeps multi-line descriptions traceable.
    """

    date: datetime
    amount: float
    description: str
    original_text: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ParsedOutput:
    """The structured result of parsing one statement.

    Attributes
    ----------
    incomes:
        For credit cards, payments on the card. For bank accounts, deposits.
    expenses:
        For credit cards, purchases and charges. For bank accounts,
        withdrawals and debits.
    account_suffix:
        The trailing digits of the account number. Must be non-empty once the
        state machine reaches its end state.
    name:
        The source label (file path or caller-supplied name).
    year_prefix:
        The century digits used for two-digit years.
    start_date, end_date:
        The statement window, when the configuration found one.
    """

    incomes: tuple[ParsedTransaction, ...] = ()
    expenses: tuple[ParsedTransaction, ...] = ()
    account_suffix: str = ""
    name: str | None = None
    year_prefix: int = 20
    start_date: datetime | None = None
    end_date: datetime | None = None

    def with_income(self, transaction: ParsedTransaction) -> Self:
        return replace(self, incomes=(*self.incomes, transaction))

    def with_expense(self, transaction: ParsedTransaction) -> Self:
        return replace(self, expenses=(*self.expenses, transaction))


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return to_iso_timestamp(value)
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, tuple | list):
        return [_jsonable(v) for v in value]
    if isinstance(value, Mapping):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return value


def output_to_dict(output: ParsedOutput) -> dict[str, Any]:
    """Return the JSON-compatible form of a parsed output.

    Dates become ISO-8601 UTC timestamps and tuples become lists, so the result
    compares equal to itself after a ``json.dumps``/``json.loads`` round trip.
    Fields added by ``ParsedOutput`` subclasses are included.
    """

    return _jsonable(output)


__all__ = [
    "BASE_PARSER_OPTIONS",
    "Keyword",
    "ParsedOutput",
    "ParsedTransaction",
    "ParserOptions",
    "output_to_dict",
]
