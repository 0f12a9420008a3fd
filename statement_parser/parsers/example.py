"""Minimal statement format used in docs and tests.

The first line is a header (optionally ``account number: NNNN``); every
following ``MM/DD/YY description $amount`` line is an income until a line
reading ``end inner state``.
"""

from __future__ import annotations

import re
from dataclasses import replace
from enum import StrEnum

from ..dates import date_from_slash_format
from ..models import ParsedOutput, ParsedTransaction, ParserOptions
from ..state_machine import StateMachineConfiguration
from ..statement import StatementParser


class State(StrEnum):
    HEADER = "header"
    INNER = "inner-state"
    END = "end"


END_TRIGGER = "end inner state"

_ACCOUNT_NUMBER_RE = re.compile(r"account number:\s*.*?(\d{1,4})\s*$", re.IGNORECASE)
_PAYMENT_RE = re.compile(r"(\d{1,2}/\d{1,2}/\d{1,2})\s+(.+?)\s*\$([-,.\d]+)")


def _read_payment(line: str, year_prefix: int) -> ParsedTransaction | None:
    match = _PAYMENT_RE.search(line)
    if not match:
        return None
    date_text, description, amount = match.groups()
    return ParsedTransaction(
        date=date_from_slash_format(date_text, year_prefix),
        amount=float(amount.replace(",", "")),
        description=description,
        original_text=(line,),
    )


def _perform_state_action(
    state: State, line: str, output: ParsedOutput, options: ParserOptions
) -> ParsedOutput:
    if state is State.HEADER:
        if account := _ACCOUNT_NUMBER_RE.search(line):
            return replace(output, account_suffix=account.group(1))
    elif state is State.INNER:
        if payment := _read_payment(line, options["year_prefix"]):
            return output.with_income(payment)
    return output


def _next_state(state: State, line: str) -> State:
    if state is State.HEADER:
        return State.INNER
    if state is State.INNER and line.strip().lower() == END_TRIGGER:
        return State.END
    return state


example_parser: StatementParser[State, ParsedOutput] = StatementParser(
    configuration=StateMachineConfiguration(
        initial_state=State.HEADER,
        end_state=State.END,
        action=_perform_state_action,
        next_state=_next_state,
    ),
    keywords=("account number:", END_TRIGGER),
)


__all__ = ["State", "example_parser"]
