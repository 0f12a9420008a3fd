"""Configuration-driven, line-by-line state machine.

The machine is a Mealy machine whose outputs are computed independently of
the transition: ``action`` produces the next output, ``next_state`` produces
the next state, both from the current state and the current line. A
configuration is free to ignore the state in ``action`` and behave like a
Moore machine instead.

Each statement format is a :class:`StateMachineConfiguration` value; the
engine (:func:`run_state_machine`) owns control flow, option merging and
error reporting.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Generic, TypeVar

from .errors import IncompleteParseError, UnreachedEndStateError
from .logging_setup import get_logger
from .models import BASE_PARSER_OPTIONS, ParsedOutput, ParserOptions

_logger = get_logger("statement_parser.state_machine")

StateT = TypeVar("StateT")
OutputT = TypeVar("OutputT", bound=ParsedOutput)

type ActionFunction[StateT, OutputT: ParsedOutput] = Callable[
    [StateT, str, OutputT, ParserOptions], OutputT
]
"""``action(state, line, output, options) -> output``.

Must not mutate anything other than what it returns; returning an updated copy
of ``output`` is the expected style.
"""

type NextStateFunction[StateT] = Callable[[StateT, str], StateT]
"""``next_state(state, line) -> state``."""


@dataclass(frozen=True)
class StateMachineConfiguration(Generic[StateT, OutputT]):
    """Everything a statement format plugs into the engine.

    Attributes
    ----------
    initial_state, end_state:
        Where the machine starts, and the state whose occurrence ends the
        line-consumption loop successfully.
    action:
        Produces the next output for each line.
    next_state:
        Produces the next state for each line.
    default_options:
        Format-specific option defaults, merged over
        :data:`~statement_parser.models.BASE_PARSER_OPTIONS`.
    seed_output:
        Partial field values for the starting output. They win over the
        engine-provided ``name`` and ``year_prefix``.
    output_type:
        The ``ParsedOutput`` (sub)class to instantiate.
    """

    initial_state: StateT
    end_state: StateT
    action: ActionFunction[StateT, OutputT]
    next_state: NextStateFunction[StateT]
    default_options: Mapping[str, Any] = field(default_factory=dict)
    seed_output: Mapping[str, Any] | None = None
    output_type: type[OutputT] = ParsedOutput  # type: ignore[assignment]


def merge_parser_options(
    default_options: Mapping[str, Any] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> ParserOptions:
    """Layer base options, configuration defaults and caller overrides.

    Later layers win on conflicting keys. The result is read-only.
    """

    merged: dict[str, Any] = {**BASE_PARSER_OPTIONS, **(default_options or {})}
    merged.update(overrides or {})
    return MappingProxyType(merged)


def _source_label(lines: Sequence[str], name: str | None) -> str:
    if name:
        return name
    if lines:
        return f"{lines[0][:10]}..."
    return "<empty input>"


def _annotate(exc: Exception, label: str) -> None:
    """Append the source label to an exception's message in place."""

    suffix = f' in: "{label}"'
    if exc.args and isinstance(exc.args[0], str):
        exc.args = (exc.args[0] + suffix, *exc.args[1:])
    else:
        exc.add_note(suffix.strip())


def run_state_machine(
    lines: Sequence[str],
    configuration: StateMachineConfiguration[StateT, OutputT],
    *,
    name: str | None = None,
    options: Mapping[str, Any] | None = None,
    debug: bool = False,
) -> OutputT:
    """Drive ``configuration`` over ``lines`` and return the final output.

    Parameters
    ----------
    lines:
        Ordered statement lines.
    configuration:
        The statement format.
    name:
        Source label used in error messages and stored on the output.
    options:
        Partial option overrides (e.g. ``{"year_prefix": 19}``).
    debug:
        Log every ``(state, line)`` pair at DEBUG level.

    Raises
    ------
    UnreachedEndStateError
        The lines ran out before ``end_state`` was reached.
    IncompleteParseError
        ``end_state`` was reached without an ``account_suffix``.
    Exception
        Anything raised by ``action``/``next_state``, re-raised with the source
        label appended to its message.
    """

    label = _source_label(lines, name)
    parser_options = merge_parser_options(configuration.default_options, options)

    output: OutputT = configuration.output_type(
        **{
            "name": name,
            "year_prefix": parser_options["year_prefix"],
            **(configuration.seed_output or {}),
        }
    )
    state = configuration.initial_state

    line_iter = iter(lines)
    while state != configuration.end_state:
        line = next(line_iter, None)
        if line is None:
            if debug:
                _logger.debug("output at end of input: %r", output)
            raise UnreachedEndStateError(
                f'Reached end of input before hitting end state on "{label}"', source=label
            )

        if debug:
            _logger.debug('state: "%s", input: "%s"', state, line)

        try:
            output = configuration.action(state, line, output, parser_options)
            state = configuration.next_state(state, line)
        except Exception as exc:
            _annotate(exc, label)
            raise

    if not output.account_suffix:
        message = f'Parse completed without filling in account suffix on "{label}"'
        if debug:
            _logger.debug("incomplete output: %r", output)
        _logger.error(message)
        raise IncompleteParseError(message, source=label)

    return output


__all__ = [
    "ActionFunction",
    "NextStateFunction",
    "StateMachineConfiguration",
    "merge_parser_options",
    "run_state_machine",
]
