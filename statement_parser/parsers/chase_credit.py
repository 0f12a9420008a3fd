"""Chase Prime Visa credit card statements.

Layout, top to bottom: a header carrying the account number and the
opening/closing dates, a "payments and other credits" section (incomes), a
"purchase(s)" section (expenses), and a "totals year-to-date" block that ends
the parse.
"""

from __future__ import annotations

import re
from dataclasses import replace
from datetime import datetime, timedelta
from enum import StrEnum

from ..dates import date_from_slash_format, date_within_range
from ..models import ParsedOutput, ParsedTransaction, ParserOptions
from ..state_machine import StateMachineConfiguration
from ..statement import StatementParser


class State(StrEnum):
    HEADER = "header"
    PAYMENT = "payment"
    PURCHASE = "purchase"
    END = "end"


PAYMENTS_TRIGGER = "payments and other credits"
PURCHASE_TRIGGER = re.compile(r"^\s*purchase\s*$", re.IGNORECASE)
PURCHASES_TRIGGER = re.compile(r"^\s*purchases\s*$", re.IGNORECASE)
TOTALS_TRIGGER = "totals year-to-date"
ACCOUNT_NUMBER_TRIGGER = "account number:"
OPENING_CLOSING_DATE_TRIGGER = "opening/closing date"

_ACCOUNT_NUMBER_RE = re.compile(
    rf"{re.escape(ACCOUNT_NUMBER_TRIGGER)}\s+.*?(\d{{1,4}})\s*$", re.IGNORECASE
)
_CLOSING_DATE_RE = re.compile(
    rf"{re.escape(OPENING_CLOSING_DATE_TRIGGER)}\s+"
    r"(\d{1,2}/\d{1,2}/\d{1,2})\s+-\s+(\d{1,2}/\d{1,2}/\d{1,2})",
    re.IGNORECASE,
)
_TRANSACTION_RE = re.compile(r"^\s*(\d{1,2})/(\d{1,2})\s+(\S.*?)\s+([.\d,\-]+)\s*$")
_CONTINUATION_RE = re.compile(r"^\s{2,}\S")

# Chase lists transactions a few days outside the printed statement period.
_PERIOD_SLACK = timedelta(days=3)

DEFAULT_OPTIONS = {
    "include_multi_line_descriptions": True,
}


def _is_purchase_heading(line: str) -> bool:
    return bool(PURCHASE_TRIGGER.search(line) or PURCHASES_TRIGGER.search(line))


def _is_trigger(line: str) -> bool:
    lowered = line.strip().lower()
    return (
        lowered == PAYMENTS_TRIGGER
        or _is_purchase_heading(line)
        or TOTALS_TRIGGER in lowered
    )


def _read_transaction(
    line: str, start_date: datetime, end_date: datetime, *, strict: bool
) -> ParsedTransaction | None:
    match = _TRANSACTION_RE.match(line)
    if not match:
        return None
    month, day, description, amount = match.groups()
    return ParsedTransaction(
        date=date_within_range(start_date, end_date, int(month), int(day), strict=strict),
        amount=float(amount.replace(",", "")),
        description=description,
        original_text=(line,),
    )


def _append_continuation(
    transactions: tuple[ParsedTransaction, ...], line: str
) -> tuple[ParsedTransaction, ...]:
    if not transactions:
        return transactions
    previous = transactions[-1]
    extended = replace(
        previous,
        description=f"{previous.description}\n{line.strip()}",
        original_text=(*previous.original_text, line),
    )
    return (*transactions[:-1], extended)


def _perform_state_action(
    state: State, line: str, output: ParsedOutput, options: ParserOptions
) -> ParsedOutput:
    if state is State.HEADER:
        if dates := _CLOSING_DATE_RE.search(line):
            start_date = date_from_slash_format(dates.group(1), options["year_prefix"])
            end_date = date_from_slash_format(dates.group(2), options["year_prefix"])
            return replace(
                output,
                start_date=start_date - _PERIOD_SLACK,
                end_date=end_date + _PERIOD_SLACK,
            )
        if (account := _ACCOUNT_NUMBER_RE.search(line)) and not output.account_suffix:
            return replace(output, account_suffix=account.group(1))
        return output

    if state in (State.PAYMENT, State.PURCHASE):
        if output.start_date is None or output.end_date is None:
            raise ValueError("Started reading transactions but got no start or end dates.")

        transaction = _read_transaction(
            line, output.start_date, output.end_date, strict=options["strict_dates"]
        )
        if transaction is not None:
            if state is State.PAYMENT:
                return output.with_income(transaction)
            return output.with_expense(transaction)

        if (
            options["include_multi_line_descriptions"]
            and _CONTINUATION_RE.match(line)
            and not _is_trigger(line)
        ):
            if state is State.PAYMENT:
                return replace(output, incomes=_append_continuation(output.incomes, line))
            return replace(output, expenses=_append_continuation(output.expenses, line))

    return output


def _next_state(state: State, line: str) -> State:
    lowered = line.strip().lower()

    if state is State.HEADER:
        if lowered == PAYMENTS_TRIGGER:
            return State.PAYMENT
        if _is_purchase_heading(line):
            return State.PURCHASE
    elif state is State.PAYMENT:
        if _is_purchase_heading(line):
            return State.PURCHASE
    elif state is State.PURCHASE:
        if TOTALS_TRIGGER in lowered:
            return State.END

    return state


chase_prime_visa_credit_parser: StatementParser[State, ParsedOutput] = StatementParser(
    configuration=StateMachineConfiguration(
        initial_state=State.HEADER,
        end_state=State.END,
        action=_perform_state_action,
        next_state=_next_state,
        default_options=DEFAULT_OPTIONS,
    ),
    keywords=(
        PAYMENTS_TRIGGER,
        PURCHASE_TRIGGER,
        PURCHASES_TRIGGER,
        TOTALS_TRIGGER,
        ACCOUNT_NUMBER_TRIGGER,
        OPENING_CLOSING_DATE_TRIGGER,
    ),
)


__all__ = ["State", "chase_prime_visa_credit_parser"]
