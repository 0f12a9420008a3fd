import logging
import re
from dataclasses import dataclass, replace
from enum import StrEnum

import pytest

from statement_parser.dates import create_utc_date, date_within_range
from statement_parser.errors import IncompleteParseError, UnreachedEndStateError
from statement_parser.models import ParsedOutput, ParsedTransaction
from statement_parser.state_machine import (
    StateMachineConfiguration,
    merge_parser_options,
    run_state_machine,
)


class State(StrEnum):
    HEADER = "header"
    PAYMENT = "payment"
    END = "end"


_TRANSACTION_RE = re.compile(r"^(\d{2})/(\d{2})\s+(.+?)\s+([\d.]+)$")


def _action(state, line, output, options):
    if state is State.PAYMENT:
        match = _TRANSACTION_RE.match(line)
        if match:
            month, day, description, amount = match.groups()
            return output.with_income(
                ParsedTransaction(
                    date=date_within_range(None, output.end_date, int(month), int(day)),
                    amount=float(amount),
                    description=description,
                    original_text=(line,),
                )
            )
    return output


def _next_state(state, line):
    if state is State.HEADER and line == "payments and other credits":
        return State.PAYMENT
    if state is State.PAYMENT and line == "purchases":
        return State.END
    return state


def _configuration(**overrides) -> StateMachineConfiguration:
    fields = {
        "initial_state": State.HEADER,
        "end_state": State.END,
        "action": _action,
        "next_state": _next_state,
        "seed_output": {
            "account_suffix": "1234",
            "end_date": create_utc_date("2021-01-31"),
        },
    }
    fields.update(overrides)
    return StateMachineConfiguration(**fields)


LINES = [
    "header line",
    "payments and other credits",
    "01/02 Some Store 12.34",
    "purchases",
    "",
]


def test_accumulates_single_income():
    output = run_state_machine(LINES, _configuration(), name="fixture")

    assert len(output.incomes) == 1
    assert output.incomes[0].amount == 12.34
    assert output.incomes[0].description == "Some Store"
    assert output.expenses == ()
    assert output.account_suffix == "1234"
    assert output.name == "fixture"
    assert output.year_prefix == 20


def test_lines_after_end_state_are_ignored():
    lines = [*LINES[:4], "01/03 Never Read 99.99"]
    output = run_state_machine(lines, _configuration())
    assert [t.amount for t in output.incomes] == [12.34]


def test_runs_are_independent():
    configuration = _configuration()
    first = run_state_machine(LINES, configuration)
    second = run_state_machine(LINES, configuration)
    assert first == second
    assert first is not second


def test_unreached_end_state_raises():
    with pytest.raises(UnreachedEndStateError) as excinfo:
        run_state_machine(LINES[:3], _configuration(), name="short.pdf")

    assert str(excinfo.value) == 'Reached end of input before hitting end state on "short.pdf"'
    assert excinfo.value.source == "short.pdf"


def test_empty_input_raises_unreached_end_state():
    with pytest.raises(UnreachedEndStateError, match="<empty input>"):
        run_state_machine([], _configuration())


def test_unnamed_source_uses_first_line_prefix():
    with pytest.raises(UnreachedEndStateError, match=r'on "header lin\.\.\."'):
        run_state_machine(["header line"], _configuration())


def test_missing_account_suffix_raises_incomplete_parse():
    configuration = _configuration(seed_output=None)
    with pytest.raises(IncompleteParseError, match="without filling in account suffix"):
        run_state_machine(["payments and other credits", "purchases"], configuration)


def test_action_errors_keep_type_and_gain_source_label():
    def exploding_action(state, line, output, options):
        if line.startswith("01/"):
            raise ValueError("bad transaction line")
        return output

    configuration = _configuration(action=exploding_action)
    with pytest.raises(ValueError) as excinfo:
        run_state_machine(LINES, configuration, name="broken.pdf")

    assert str(excinfo.value) == 'bad transaction line in: "broken.pdf"'


def test_options_are_merged_and_visible_to_action():
    seen = []

    def recording_action(state, line, output, options):
        seen.append(dict(options))
        return output

    configuration = _configuration(
        action=recording_action, default_options={"flavor": "default", "year_prefix": 19}
    )
    output = run_state_machine(LINES, configuration, options={"flavor": "custom"})

    assert seen[0] == {"year_prefix": 19, "strict_dates": True, "flavor": "custom"}
    assert output.year_prefix == 19


def test_merged_options_are_read_only():
    merged = merge_parser_options({"a": 1}, {"a": 2})
    assert merged["a"] == 2
    assert merged["strict_dates"] is True
    with pytest.raises(TypeError):
        merged["a"] = 3  # type: ignore[index]


def test_seed_output_wins_over_engine_fields():
    configuration = _configuration(
        seed_output={"account_suffix": "1234", "name": "seeded", "end_date": None}
    )
    output = run_state_machine(["payments and other credits", "purchases"], configuration)
    assert output.name == "seeded"


@dataclass(frozen=True, slots=True)
class _TaggedOutput(ParsedOutput):
    tag: str = ""


def test_custom_output_type():
    def tagging_action(state, line, output, options):
        return replace(output, tag=state.value)

    configuration = _configuration(action=tagging_action, output_type=_TaggedOutput)
    output = run_state_machine(LINES, configuration)

    assert isinstance(output, _TaggedOutput)
    assert output.tag == "payment"


def test_debug_logs_each_state(caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch):
    # The CLI may have configured the package logger to stop propagating.
    monkeypatch.setattr(logging.getLogger("statement_parser"), "propagate", True)
    caplog.set_level("DEBUG", logger="statement_parser")
    run_state_machine(LINES, _configuration(), debug=True)
    messages = [r.getMessage() for r in caplog.records]
    assert 'state: "header", input: "header line"' in messages
