"""Optional strict-semicolon check.

The grammar tolerates a missing semicolon after ``RAW``. Projects that opt
into ``strictSemicolons`` reject a file whose statement count exceeds the
number of terminating semicolons.
"""

from __future__ import annotations

from collections.abc import Iterable

from lark import Token

from icbincss.parser.errors import ParseError

SEMICOLON = "SEMICOLON"


def count_semicolons(tokens: Iterable[Token]) -> int:
    """Count ``;`` terminals among lexed tokens.

    Comments are ignored by the lexer and quoted text arrives as one
    ``STRING`` token, so neither contributes.
    """
    return sum(1 for token in tokens if token.type == SEMICOLON)


def check_semicolons(semicolons: int, statement_count: int) -> None:
    if statement_count > semicolons:
        raise ParseError(
            f"Strict semicolons: {statement_count} statement(s) but only "
            f"{semicolons} terminating semicolon(s)"
        )
