import re

import pytest

from statement_parser.errors import KeywordOverlapError
from statement_parser.sanitizer import (
    _remap,
    collapse_synthetic_runs,
    find_keyword_spans,
    sanitize_statement_text,
)

SECRET_LINES = [
    "secret account number: 123-456-789",
    "$30     super secret purchase don't tell anyone about it",
    "$100    another secret thing 456677",
]


def test_keyword_is_preserved_verbatim():
    assert sanitize_statement_text(
        ["secret account number: 123-456-789"], ["account number"]
    ) == ["a account number: 1-2-3"]


def test_without_keywords_every_run_is_replaced():
    assert sanitize_statement_text(["secret account number: 123-456-789"]) == ["c: 1-2-3"]


def test_counters_carry_across_lines():
    assert sanitize_statement_text(SECRET_LINES, ["account number"]) == [
        "a account number: 1-2-3",
        "$4  k",
        "$5  n 6",
    ]


def test_regex_keyword_keeps_whole_match():
    sanitized = sanitize_statement_text(
        SECRET_LINES, ["account number", re.compile(r"super \S+ purchase")]
    )
    assert sanitized == [
        "a account number: 1-2-3",
        "$4  super secret purchase g h i j k",
        "$5  n 6",
    ]


def test_keyword_with_leading_whitespace():
    sanitized = sanitize_statement_text(
        [" super duper thing", " secret stuff delete  "], [re.compile(r"\s+super duper thing")]
    )
    assert sanitized == [" super duper thing", " f  "]


def test_keyword_inside_punctuated_word():
    sanitized = sanitize_statement_text(
        ["lorem ipsum dolor sit amet, consectetur-cow adipiscing"], ["cow"]
    )
    assert sanitized == ["a b c d e, f-cow h"]


def test_punctuation_is_kept_around_digit_runs():
    line = (
        "(555)555-555 (555) 555 555 (555)-555-555 5 (555)555-ABCDEF hoops - 7 "
        "ABCDEF (HACK), 555 FA FunTimes"
    )
    assert sanitize_statement_text([line]) == [
        "(1)2-3 (4) 5 6 (7)-8-9 1 (2)3-b - 4 c (d), 5 f"
    ]


def test_amounts_keep_their_shape():
    lines = [
        "  5678 one thing 9876 9999" + " " * 32 + "10.63 95632 cow 789",
        "  Van 9876" + " " * 32 + "11.11 cow",
    ]
    assert sanitize_statement_text(lines, ["cow"]) == [
        "  1 a b 2 3  4.44 5 cow 6",
        "  d 7  8.88 cow",
    ]


def test_every_fourth_amount_is_expanded():
    assert sanitize_statement_text(["1.00 2.00 3.00 4.00"]) == ["1.11 2.22 3.33 4,444.44"]


def test_output_is_deterministic_and_line_aligned():
    first = sanitize_statement_text(SECRET_LINES, ["account number"])
    second = sanitize_statement_text(SECRET_LINES, ["account number"])
    assert first == second
    assert len(first) == len(SECRET_LINES)


def test_lines_without_letters_or_digits_are_unchanged():
    assert sanitize_statement_text(["", "   ", "--- $ ---"]) == ["", "   ", "--- $ ---"]


def test_case_sensitive_keywords():
    lines = ["Account Number: 42"]
    assert sanitize_statement_text(lines, ["account number"], case_sensitive=True) == ["b: 1"]
    assert sanitize_statement_text(lines, ["account number"]) == ["Account Number: 1"]


def test_overlapping_keywords_raise():
    with pytest.raises(KeywordOverlapError):
        sanitize_statement_text(["payments and other credits"], ["payments and", "and other"])


def test_identical_keyword_spans_are_deduplicated():
    assert find_keyword_spans("Totals here", ["totals", re.compile("Totals")]) == [(0, 6)]


def test_zero_width_matches_are_ignored():
    assert find_keyword_spans("abc", [re.compile(r"x*")]) == []


def test_remap_handles_shorter_equal_and_longer_replacements():
    mapping = list(range(10))
    _remap(mapping, 2, 5, 1)
    assert mapping == [0, 1, 2, 2, 2, 3, 4, 5, 6, 7]

    mapping = list(range(6))
    _remap(mapping, 1, 3, 2)
    assert mapping == [0, 1, 2, 3, 4, 5]

    mapping = list(range(6))
    _remap(mapping, 1, 2, 3)
    assert mapping == [0, 1, 4, 5, 6, 7]


def test_collapse_synthetic_runs():
    assert collapse_synthetic_runs("a b c d: 1 e f") == "d: 1 f"
    assert collapse_synthetic_runs("a") == "a"
