"""Sanitized regression fixtures.

A fixture is a JSON file holding a statement's sanitized text together with
what parsing that text produced (or the error it raised). Fixtures are safe to
commit, and re-parsing them catches regressions in a parser configuration
without the original PDF.

Sanitized text is always parsed leniently (``strict_dates=False``) because
synthetic digits can place dates outside the statement window.

Layout on disk: ``<sample_dir>/<parser_type>/<file>.json`` where
``sample_dir`` is ``STATEMENT_PARSER_SAMPLE_DIR`` or ``./files/sample-files``.
"""

from __future__ import annotations

import contextlib
import json
import os
from collections.abc import Mapping, Sequence
from os import PathLike
from pathlib import Path
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, model_validator

from .api import StatementPdf
from .errors import FixtureMismatchError, SanitizedParseMismatchError
from .logging_setup import get_logger
from .models import output_to_dict
from .parsers import ParserType, get_parser
from .sanitizer import sanitize_statement_text
from .statement import StatementParser

_logger = get_logger("statement_parser.fixtures")

_SAMPLE_DIR_ENV_VAR = "STATEMENT_PARSER_SAMPLE_DIR"


class SanitizedTestFile(BaseModel):
    """On-disk schema of a sanitized fixture.

    Exactly one of ``output`` and ``error_message`` is set.
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    parser_type: ParserType
    text: list[str]
    parser_options: dict[str, Any] | None = None
    output: dict[str, Any] | None = None
    error_message: str | None = None
    error_type: str | None = None

    @model_validator(mode="after")
    def _exactly_one_result(self) -> Self:
        if (self.output is None) == (self.error_message is None):
            raise ValueError("exactly one of output or error_message must be set")
        return self


def sample_file_dir() -> Path:
    env_value = os.getenv(_SAMPLE_DIR_ENV_VAR)
    if env_value:
        return Path(env_value)
    return Path.cwd() / "files" / "sample-files"


def _lenient(options: Mapping[str, Any] | None) -> dict[str, Any]:
    return {**(options or {}), "strict_dates": False}


def _error_message(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


def sanitize_pdf(
    file_path: str | PathLike[str],
    parser_type: ParserType | str,
    *,
    debug: bool = False,
) -> list[str]:
    """Extract a PDF with the parser's reader and sanitize it with its keywords."""

    parser = get_parser(parser_type)
    lines = parser.convert_pdf_to_text(file_path)
    return sanitize_statement_text(lines, parser.keywords, debug=debug)


def create_sanitized_test_file(
    statement: StatementPdf,
    *,
    name: str,
    debug: bool = False,
) -> SanitizedTestFile:
    """Sanitize ``statement`` and record what parsing the sanitized text yields.

    Parse failures are recorded in the fixture rather than raised.
    """

    parser = get_parser(statement.parser_type)
    text = sanitize_pdf(statement.file_path, statement.parser_type, debug=debug)
    parser_options = dict(statement.options) if statement.options else None

    try:
        output = parser.parse_text(
            text, name=name, options=_lenient(parser_options), debug=debug
        )
    except Exception as exc:  # noqa: BLE001
        _logger.info("sanitized text of %s failed to parse: %s", statement.file_path, exc)
        return SanitizedTestFile(
            name=name,
            parser_type=ParserType(statement.parser_type),
            text=text,
            parser_options=parser_options,
            error_message=_error_message(exc),
            error_type=type(exc).__name__,
        )

    return SanitizedTestFile(
        name=name,
        parser_type=ParserType(statement.parser_type),
        text=text,
        parser_options=parser_options,
        output=output_to_dict(output),
    )


def validate_round_trip(
    parser: StatementParser[Any, Any],
    original_lines: Sequence[str],
    fixture: SanitizedTestFile,
    *,
    options: Mapping[str, Any] | None = None,
) -> None:
    """Check that the sanitized fixture still tells the same story as the original.

    The original text is parsed strictly. Both parses must succeed with the
    same number of incomes and expenses, or both must fail with the same
    error class.

    Raises
    ------
    SanitizedParseMismatchError
        When the two parses disagree.
    """

    try:
        original = parser.parse_text(original_lines, name=fixture.name, options=options)
    except Exception as exc:
        if fixture.error_type == type(exc).__name__:
            return
        raise SanitizedParseMismatchError(
            f'Original statement failed to parse but its sanitized text did not in "{fixture.name}"'
        ) from exc

    if fixture.output is None:
        raise SanitizedParseMismatchError(
            f"Sanitized text failed to parse ({fixture.error_message}) "
            f'but the original did not in "{fixture.name}"'
        )

    for key in ("incomes", "expenses"):
        if len(fixture.output[key]) != len(getattr(original, key)):
            raise SanitizedParseMismatchError(
                f'Sanitized {key} count did not match the original in "{fixture.name}"'
            )


def _display_path(path: Path) -> str:
    try:
        return path.resolve().relative_to(Path.cwd().resolve()).as_posix()
    except ValueError:
        return path.as_posix()


def write_sanitized_test_file(
    statement: StatementPdf,
    output_file_name: str,
    *,
    sample_dir: str | PathLike[str] | None = None,
    debug: bool = False,
) -> Path:
    """Create, validate and write a fixture; return the path written.

    The fixture lands at ``<sample_dir>/<parser_type>/<output_file_name>``.
    """

    root = Path(sample_dir) if sample_dir is not None else sample_file_dir()
    path = root / str(ParserType(statement.parser_type)) / output_file_name
    name = statement.name or f"Sanitized {_display_path(path)}"

    fixture = create_sanitized_test_file(statement, name=name, debug=debug)

    parser = get_parser(statement.parser_type)
    original_lines = parser.convert_pdf_to_text(statement.file_path)
    validate_round_trip(parser, original_lines, fixture, options=statement.options)

    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp.write_text(
            json.dumps(fixture.model_dump(mode="json"), indent=4, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )
        os.replace(tmp, path)
    except Exception:
        with contextlib.suppress(FileNotFoundError):
            tmp.unlink()
        raise

    _logger.info("wrote sanitized fixture %s", path)
    return path


def load_sanitized_test_file(path: str | PathLike[str]) -> SanitizedTestFile:
    return SanitizedTestFile.model_validate_json(Path(path).read_text(encoding="utf-8"))


def find_sanitized_test_files(sample_dir: str | PathLike[str] | None = None) -> list[Path]:
    """Return every ``<parser_type>/*.json`` fixture under ``sample_dir``, sorted."""

    root = Path(sample_dir) if sample_dir is not None else sample_file_dir()
    return sorted(root.glob("*/*.json"))


def check_sanitized_test_file(
    path: str | PathLike[str],
    *,
    debug: bool = False,
) -> SanitizedTestFile:
    """Re-parse a stored fixture and compare with what it recorded.

    Raises
    ------
    FixtureMismatchError
        When the re-parse output differs from the recorded output, or the
        recorded error no longer happens (or happens with another message).
    """

    fixture = load_sanitized_test_file(path)
    parser = get_parser(fixture.parser_type)

    try:
        output = parser.parse_text(
            fixture.text,
            name=fixture.name,
            options=_lenient(fixture.parser_options),
            debug=debug,
        )
    except Exception as exc:
        message = _error_message(exc)
        if fixture.error_message is None:
            raise FixtureMismatchError(
                f'Fixture "{path}" recorded output but re-parsing failed: {message}'
            ) from exc
        if message != fixture.error_message:
            raise FixtureMismatchError(
                f'Fixture "{path}" expected error "{fixture.error_message}" but got "{message}"'
            ) from exc
        return fixture

    if fixture.output is None:
        raise FixtureMismatchError(
            f'Fixture "{path}" expected error "{fixture.error_message}" but parsing succeeded'
        )
    if output_to_dict(output) != fixture.output:
        raise FixtureMismatchError(f'Fixture "{path}" no longer matches its recorded output')
    return fixture


__all__ = [
    "SanitizedTestFile",
    "check_sanitized_test_file",
    "create_sanitized_test_file",
    "find_sanitized_test_files",
    "load_sanitized_test_file",
    "sample_file_dir",
    "sanitize_pdf",
    "validate_round_trip",
    "write_sanitized_test_file",
]
