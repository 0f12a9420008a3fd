"""Anonymize statement text while keeping it parseable.

Every digit run and word run of a line is replaced by a synthetic token drawn
from rotating counters (digits ``1..9``, letters ``a..z``), whitespace and
punctuation are kept, and any caller-supplied keyword is written back verbatim
where it originally appeared. The result keeps the visual shape of the
statement, so a parser configuration still finds its trigger phrases, dates
and amounts, while account numbers, names and values are gone.

Keyword re-insertion needs to know where each original character ended up in
the rewritten line. That is tracked per line in an index mapping (one entry
per original character) which is updated after every replacement.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from .errors import KeywordOverlapError
from .logging_setup import get_logger
from .models import Keyword

_logger = get_logger("statement_parser.sanitizer")

# Every Nth amount becomes a thousands-sized synthetic amount so fixtures keep
# some multi-group values. Realism only; nothing depends on the exact value.
AMOUNT_EXPANSION_CADENCE = 4

# Alternation order matters: symbols are tried first so financial punctuation
# ($ / - . , parentheses) stays visible even between digits.
_TOKEN_RE = re.compile(
    r"(?P<symbol>[^\w\s])"
    r"|(?P<digits>\d+(?:[.,]\d+)*)"
    r"|(?P<space>\s+)"
    r"|(?P<word>[^\W\d]+(?:'[^\W\d]+)*)"
)

_SYNTHETIC_RUN_RE = re.compile(r"\b[a-z](?: [a-z])+\b")
_WIDE_SPACE_RE = re.compile(r" {2,}")

type Span = tuple[int, int]


class _TokenRotation:
    """Rotating synthetic tokens shared by every line of one document."""

    __slots__ = ("_amounts", "_digit", "_letter")

    def __init__(self) -> None:
        self._letter = -1
        self._digit = 0
        self._amounts = 0

    def _next_letter(self) -> str:
        self._letter = (self._letter + 1) % 26
        return chr(ord("a") + self._letter)

    def _next_digit(self) -> str:
        # 1..9 then wrap; 0 would produce impossible months, days and amounts.
        self._digit = self._digit % 9 + 1
        return str(self._digit)

    def word(self, run: str) -> str:
        letter = self._next_letter()
        if letter == run:
            letter = self._next_letter()
        return letter

    def digits(self, run: str) -> str:
        if "." not in run:
            digit = self._next_digit()
            if digit == run:
                digit = self._next_digit()
            return digit

        self._amounts += 1
        expand = self._amounts % AMOUNT_EXPANSION_CADENCE == 0
        fraction_width = len(run.rsplit(".", 1)[1])
        replacement = run
        while replacement == run:
            d = self._next_digit()
            whole = f"{d},{d * 3}" if expand else d
            replacement = f"{whole}.{d * fraction_width}"
        return replacement


def find_keyword_spans(
    line: str,
    keywords: Iterable[Keyword],
    *,
    case_sensitive: bool = False,
) -> list[Span]:
    """Return the sorted ``(start, end)`` spans of every keyword match in ``line``.

    String keywords match literally (case-insensitively unless
    ``case_sensitive``); compiled patterns match with their own flags.
    Zero-width matches are ignored and identical spans are reported once.

    Raises :class:`KeywordOverlapError` when two different spans overlap, since
    there is no single correct way to preserve both.
    """

    found: set[Span] = set()
    for keyword in keywords:
        if isinstance(keyword, re.Pattern):
            pattern = keyword
        else:
            pattern = re.compile(re.escape(keyword), 0 if case_sensitive else re.IGNORECASE)
        for match in pattern.finditer(line):
            if match.end() > match.start():
                found.add((match.start(), match.end()))

    spans = sorted(found)
    for previous, current in zip(spans, spans[1:], strict=False):
        if current[0] < previous[1]:
            raise KeywordOverlapError(
                f"Keywords overlap at {previous} and {current} in line {line!r}: "
                f"{line[previous[0]:previous[1]]!r} vs {line[current[0]:current[1]]!r}"
            )
    return spans


def _remap(mapping: list[int], start: int, end: int, replacement_length: int) -> None:
    """Re-point original offsets after ``line[start:end]`` became a new string.

    Offsets inside the run point into the replacement (clamped to its last
    character when the replacement is shorter); every later offset shifts by
    the length difference. Works for shorter, equal and longer replacements and
    keeps the mapping non-decreasing.
    """

    new_start = mapping[start]
    for offset in range(end - start):
        mapping[start + offset] = new_start + min(offset, replacement_length - 1)
    delta = replacement_length - (end - start)
    if delta:
        for i in range(end, len(mapping)):
            mapping[i] += delta


def collapse_synthetic_runs(line: str) -> str:
    """Collapse single-space separated synthetic letters to the last one.

    ``"a b c d"`` becomes ``"d"``. Only meaningful on sanitized lines without
    preserved keywords, where every letter is a synthetic token.
    """

    return _SYNTHETIC_RUN_RE.sub(lambda m: m.group()[-1], line)


def _sanitize_line(
    line: str,
    keywords: Sequence[Keyword],
    rotation: _TokenRotation,
    *,
    case_sensitive: bool,
    debug: bool,
) -> str:
    spans = find_keyword_spans(line, keywords, case_sensitive=case_sensitive)
    mapping = list(range(len(line)))

    pieces: list[str] = []
    replaced_any = False
    for match in _TOKEN_RE.finditer(line):
        run = match.group()
        kind = match.lastgroup
        if kind == "digits":
            replacement = rotation.digits(run)
        elif kind == "word":
            replacement = rotation.word(run)
        else:
            replacement = run
        pieces.append(replacement)
        if kind in ("digits", "word"):
            replaced_any = True
            _remap(mapping, match.start(), match.end(), len(replacement))

    if not replaced_any:
        return line

    sanitized = "".join(pieces)

    # Right to left so earlier target offsets stay valid.
    for start, end in reversed(spans):
        target_start = mapping[start]
        target_end = mapping[end] if end < len(mapping) else len(sanitized)
        sanitized = sanitized[:target_start] + line[start:end] + sanitized[target_end:]

    if not spans:
        sanitized = collapse_synthetic_runs(sanitized)

    sanitized = _WIDE_SPACE_RE.sub("  ", sanitized)

    if debug:
        _logger.debug("sanitized %r -> %r (keyword spans: %s)", line, sanitized, spans)
    return sanitized


def sanitize_statement_text(
    lines: Sequence[str],
    keywords: Sequence[Keyword] = (),
    *,
    debug: bool = False,
    case_sensitive: bool = False,
) -> list[str]:
    """Return an anonymized copy of ``lines`` with ``keywords`` kept verbatim.

    The output has exactly one line per input line. The transformation is a
    deterministic function of ``(lines, keywords)``: counters start fresh on
    every call and carry across lines, so regenerating a fixture from the same
    text gives the same result. ``debug`` only enables tracing.

    Raises :class:`KeywordOverlapError` if two keyword matches overlap on a line.
    """

    rotation = _TokenRotation()
    return [
        _sanitize_line(line, keywords, rotation, case_sensitive=case_sensitive, debug=debug)
        for line in lines
    ]


__all__ = [
    "AMOUNT_EXPANSION_CADENCE",
    "collapse_synthetic_runs",
    "find_keyword_spans",
    "sanitize_statement_text",
]
