"""ICBINCSS source parser."""

from icbincss.parser.errors import ParseError
from icbincss.parser.pseudo import validate_pseudo_selector
from icbincss.parser.strict import check_semicolons
from icbincss.parser.transformer import parse_file, parse_source

__all__ = [
    "ParseError",
    "check_semicolons",
    "parse_file",
    "parse_source",
    "validate_pseudo_selector",
]
