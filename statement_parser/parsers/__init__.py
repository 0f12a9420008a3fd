"""Registry of bundled statement formats."""

from __future__ import annotations

from enum import StrEnum
from types import MappingProxyType
from typing import Any

from ..statement import StatementParser
from .chase_credit import chase_prime_visa_credit_parser
from .example import example_parser


class ParserType(StrEnum):
    EXAMPLE = "example"
    CHASE_PRIME_VISA_CREDIT = "chase-prime-visa-credit"


PARSERS: MappingProxyType[ParserType, StatementParser[Any, Any]] = MappingProxyType(
    {
        ParserType.EXAMPLE: example_parser,
        ParserType.CHASE_PRIME_VISA_CREDIT: chase_prime_visa_credit_parser,
    }
)


def is_parser_type(value: object) -> bool:
    """Return True when ``value`` names a registered parser."""

    return isinstance(value, str) and value in ParserType


def get_parser(parser_type: ParserType | str) -> StatementParser[Any, Any]:
    """Look up a parser by type, raising ``ValueError`` for unknown names."""

    if not is_parser_type(parser_type):
        choices = ", ".join(member.value for member in ParserType)
        raise ValueError(f'Unknown parser type "{parser_type}". Expected one of: {choices}')
    return PARSERS[ParserType(parser_type)]


__all__ = ["PARSERS", "ParserType", "get_parser", "is_parser_type"]
