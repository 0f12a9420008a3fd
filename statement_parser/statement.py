"""Statement parsers: a state-machine configuration plus its text source.

A :class:`StatementParser` bundles what one statement format needs end to
end: the configuration driving the engine, the keywords sanitization must
preserve, how to turn a PDF into lines, and an optional validation hook run on
the final output.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from os import PathLike
from typing import Any, Generic, TypeVar

from . import pdf
from .models import Keyword, ParsedOutput
from .state_machine import StateMachineConfiguration, run_state_machine

StateT = TypeVar("StateT")
OutputT = TypeVar("OutputT", bound=ParsedOutput)

type PdfProcessing = Callable[[str | PathLike[str]], Sequence[Sequence[str]]]
"""Turns a PDF path into pages of text lines."""


@dataclass(frozen=True)
class StatementParser(Generic[StateT, OutputT]):
    """One statement format, ready to parse text or PDFs.

    Attributes
    ----------
    configuration:
        The state-machine configuration for this format.
    keywords:
        Trigger phrases sanitization must keep legible so sanitized fixtures
        still drive the state machine.
    pdf_processing:
        Optional custom extractor; defaults to :func:`statement_parser.pdf.read_pdf`.
    output_validation:
        Optional hook that raises when a finished output is unacceptable.
    """

    configuration: StateMachineConfiguration[StateT, OutputT]
    keywords: tuple[Keyword, ...] = ()
    pdf_processing: PdfProcessing | None = None
    output_validation: Callable[[OutputT], None] | None = None

    def parse_text(
        self,
        lines: Sequence[str],
        *,
        name: str | None = None,
        options: Mapping[str, Any] | None = None,
        debug: bool = False,
    ) -> OutputT:
        output = run_state_machine(
            lines,
            self.configuration,
            name=name,
            options=options,
            debug=debug,
        )
        if self.output_validation is not None:
            self.output_validation(output)
        return output

    def convert_pdf_to_text(self, file_path: str | PathLike[str]) -> list[str]:
        """Extract a PDF and flatten its pages into one ordered list of lines."""

        # Resolved at call time so tests can swap the module-level reader.
        processing = self.pdf_processing or pdf.read_pdf
        return [line for page in processing(file_path) for line in page]

    def parse_pdf(
        self,
        file_path: str | PathLike[str],
        *,
        name: str | None = None,
        options: Mapping[str, Any] | None = None,
        debug: bool = False,
    ) -> OutputT:
        lines = self.convert_pdf_to_text(file_path)
        return self.parse_text(
            lines,
            name=name if name is not None else str(file_path),
            options=options,
            debug=debug,
        )


__all__ = ["PdfProcessing", "StatementParser"]
