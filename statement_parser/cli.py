"""CLI for the ``statement_parser`` package.

Command handlers (``cmd_parse``, ``cmd_sanitize``, ``cmd_check_fixtures``)
return a process exit code and print ``Error: ...`` lines to stderr; the Typer
commands below are thin wrappers. Environment variables are loaded from a local
``.env`` using ``python-dotenv`` before any command runs.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import ArgumentInfo, OptionInfo

from .logging_setup import configure_logging, set_log_level
from .parsers import ParserType, is_parser_type

_PARSER_CHOICES = "Expected one of the following: " + ", ".join(t.value for t in ParserType)


class CliArgumentError(ValueError):
    """A command-line argument failed validation."""


def missing_parser_type() -> str:
    return f"Missing parser type arg. {_PARSER_CHOICES}"


def invalid_parser_type(value: str) -> str:
    return f'Invalid parser type "{value}". {_PARSER_CHOICES}'


def validate_sanitize_args(
    parser_type: str | None,
    input_pdf: str | None,
    output_file_name: str | None,
) -> tuple[ParserType, Path, str]:
    """Validate ``sanitize`` arguments in order, failing on the first problem."""

    if not parser_type:
        raise CliArgumentError(missing_parser_type())
    if not is_parser_type(parser_type):
        raise CliArgumentError(invalid_parser_type(parser_type))

    if not input_pdf:
        raise CliArgumentError("Missing input PDF file path.")
    if Path(input_pdf).suffix != ".pdf":
        raise CliArgumentError(f'Invalid PDF file path "{input_pdf}". Missing .pdf extension.')
    if not Path(input_pdf).exists():
        raise CliArgumentError(f'Given PDF file "{input_pdf}" does not exist!')

    if not output_file_name:
        raise CliArgumentError("Missing output file name")
    if Path(output_file_name).suffix != ".json":
        raise CliArgumentError(
            f'Invalid output file name "{output_file_name}". Missing .json extension.'
        )

    return ParserType(parser_type), Path(input_pdf), output_file_name


# ---- Command handlers ---------------------------------------------------------


def cmd_parse(
    pdf_paths: Sequence[str | Path],
    *,
    parser_type: str,
    year_prefix: int | None = None,
    debug: bool = False,
    summary: bool = False,
) -> int:
    """Parse one or more PDFs and print JSON (or a summary table) to stdout."""

    # Deferred imports keep `--help` fast
    from .api import StatementPdf, parse_pdfs
    from .models import output_to_dict
    from .pdf import check_pdf_exists

    if not is_parser_type(parser_type):
        print(f"Error: {invalid_parser_type(parser_type)}", file=sys.stderr)
        return 1

    try:
        for path in pdf_paths:
            check_pdf_exists(path)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    options = {"year_prefix": year_prefix} if year_prefix is not None else None
    statements = [
        StatementPdf(parser_type=parser_type, file_path=str(path), options=options)
        for path in pdf_paths
    ]

    try:
        results = parse_pdfs(statements, debug=debug)
    except Exception as e:
        print(f"Error: parsing failed: {e}", file=sys.stderr)
        return 1

    if summary:
        _print_summary(results)
        return 0

    payload = [
        {
            "file": result.statement.file_path,
            "parser_type": str(result.statement.parser_type),
            "data": output_to_dict(result.data),
        }
        for result in results
    ]
    typer.echo(json.dumps(payload, indent=4 if debug else None, ensure_ascii=False))
    return 0


def _print_summary(results: Sequence) -> None:
    from rich.console import Console
    from rich.table import Table

    table = Table(title="Parsed statements")
    table.add_column("File")
    table.add_column("Account", justify="right")
    table.add_column("Incomes", justify="right")
    table.add_column("Expenses", justify="right")
    table.add_column("Income total", justify="right")
    table.add_column("Expense total", justify="right")

    for result in results:
        data = result.data
        table.add_row(
            result.statement.file_path,
            data.account_suffix,
            str(len(data.incomes)),
            str(len(data.expenses)),
            f"{sum(t.amount for t in data.incomes):,.2f}",
            f"{sum(t.amount for t in data.expenses):,.2f}",
        )

    Console().print(table)


def cmd_sanitize(
    parser_type: str | None,
    input_pdf: str | None,
    output_file_name: str | None,
    *,
    debug: bool = False,
) -> int:
    """Write a sanitized fixture for one PDF after validating the arguments."""

    from .api import StatementPdf
    from .fixtures import write_sanitized_test_file

    try:
        validated_type, pdf_path, output_name = validate_sanitize_args(
            parser_type, input_pdf, output_file_name
        )
    except CliArgumentError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(
            "Usage: statement-parser sanitize PARSER_TYPE INPUT_PDF_FILE.pdf "
            "OUTPUT_SANITIZED_FILE.json",
            file=sys.stderr,
        )
        return 1

    try:
        written = write_sanitized_test_file(
            StatementPdf(parser_type=validated_type, file_path=str(pdf_path)),
            output_name,
            debug=debug,
        )
    except Exception as e:
        print(f"Error: sanitization failed: {e}", file=sys.stderr)
        return 1

    typer.echo(f"Sanitized fixture written to {written}")
    return 0


def cmd_check_fixtures(paths: Sequence[str | Path] = (), *, debug: bool = False) -> int:
    """Re-parse stored fixtures; every fixture under the sample dir when none given."""

    from .errors import StatementParserError
    from .fixtures import check_sanitized_test_file, find_sanitized_test_files, sample_file_dir

    targets = [Path(p) for p in paths] or find_sanitized_test_files()
    if not targets:
        print(f"Error: no sanitized fixtures found under {sample_file_dir()}", file=sys.stderr)
        return 1

    failures = 0
    for target in targets:
        try:
            check_sanitized_test_file(target, debug=debug)
        except (StatementParserError, OSError, ValueError) as e:
            failures += 1
            print(f"FAIL {target}: {e}", file=sys.stderr)
        else:
            typer.echo(f"ok   {target}")

    if failures:
        print(f"Error: {failures} of {len(targets)} fixture(s) failed", file=sys.stderr)
        return 1
    return 0


# ---- Typer-based console interface ----------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Parse financial statement PDFs with per-format state machines and "
        "maintain sanitized regression fixtures."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults).
PARSER_TYPE_OPTION: OptionInfo = typer.Option(
    ...,
    "--parser-type",
    "-t",
    help=f"Statement format. {_PARSER_CHOICES}",
)
DEBUG_OPTION: OptionInfo = typer.Option(
    False, "--debug", help="Trace every state transition at DEBUG level."
)
PDF_PATHS_ARGUMENT: ArgumentInfo = typer.Argument(..., help="Statement PDF file(s) to parse.")


@app.command("parse")
def parse_cmd(
    pdf_paths: Annotated[list[Path], PDF_PATHS_ARGUMENT],
    parser_type: Annotated[str, PARSER_TYPE_OPTION],
    *,
    year_prefix: int | None = typer.Option(
        None, help="Century digits for two-digit years (default 20)."
    ),
    debug: bool = DEBUG_OPTION,
    summary: bool = typer.Option(False, help="Print a summary table instead of JSON."),
) -> None:
    """Parse statement PDFs and print the parsed output."""

    if debug:
        set_log_level("DEBUG")
    code = cmd_parse(
        pdf_paths,
        parser_type=parser_type,
        year_prefix=year_prefix,
        debug=debug,
        summary=summary,
    )
    if code:
        raise typer.Exit(code)


@app.command("sanitize")
def sanitize_cmd(
    parser_type: Annotated[str | None, typer.Argument(help="Statement format.")] = None,
    input_pdf: Annotated[str | None, typer.Argument(help="PDF to sanitize.")] = None,
    output_file_name: Annotated[
        str | None, typer.Argument(help="Fixture file name (must end in .json).")
    ] = None,
    *,
    debug: bool = DEBUG_OPTION,
) -> None:
    """Sanitize a statement PDF into a committed regression fixture."""

    if debug:
        set_log_level("DEBUG")
    code = cmd_sanitize(parser_type, input_pdf, output_file_name, debug=debug)
    if code:
        raise typer.Exit(code)


@app.command("check-fixture")
def check_fixture_cmd(
    paths: Annotated[
        list[Path] | None, typer.Argument(help="Fixture files (default: all under the sample dir).")
    ] = None,
    *,
    debug: bool = DEBUG_OPTION,
) -> None:
    """Re-parse sanitized fixtures and report drift."""

    code = cmd_check_fixtures(paths or (), debug=debug)
    if code:
        raise typer.Exit(code)


@app.callback()
def _root(
    log_level: str | None = typer.Option(
        None, help="Log level (falls back to STATEMENT_PARSER_LOG_LEVEL, then INFO)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)


if __name__ == "__main__":  # pragma: no cover
    app()
