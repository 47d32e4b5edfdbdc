"""Validation of functional pseudo-class arguments.

Only the argument shapes of :is(), :where(), :not(), :has() and the
:nth-*() family are checked. Any other pseudo-class is accepted as-is.
"""

from __future__ import annotations

import re

_FUNCTIONAL = re.compile(r"^([a-z-]+)\((.*)\)$", re.IGNORECASE | re.DOTALL)
_PSEUDO_ELEMENT = re.compile(
    r"::?(?:before|after|first-line|first-letter|marker|backdrop|placeholder|file-selector-button)"
)
_RELATIVE_START = re.compile(r"^[>+~]?\s*[.#\[\w*:]")
_LEADING_COMBINATOR = re.compile(r"^[>+~]\s*")
_NTH_OF = re.compile(r"^(.+?)\s+of\s+(.+)$", re.IGNORECASE)
_INTEGER = re.compile(r"^-?\d+$")
_AN_PLUS_B = re.compile(r"^([+-]?\d*n)?\s*([+-]?\s*\d+)?$", re.IGNORECASE)
_DOUBLE_COMBINATOR = re.compile(r"[>+~]{2,}")

_SELECTOR_LIST = frozenset({"is", "where", "not"})
_NTH = frozenset({"nth-child", "nth-last-child", "nth-of-type", "nth-last-of-type"})


def validate_pseudo_selector(value: str) -> str | None:
    """Return an error message for an invalid pseudo-class, else None."""
    match = _FUNCTIONAL.match(value.strip())
    if match is None:
        return None
    name, args = match.group(1).lower(), match.group(2)
    if name in _SELECTOR_LIST:
        return _check_selector_list(args, name)
    if name == "has":
        return _check_relative_list(args)
    if name in _NTH:
        return _check_nth(args, name)
    return None


def _split(args: str) -> list[str]:
    return [part.strip() for part in args.split(",") if part.strip()]


def _check_selector_list(args: str, name: str) -> str | None:
    selectors = _split(args)
    if not selectors:
        return f":{name}() requires at least one selector"
    for sel in selectors:
        if _PSEUDO_ELEMENT.search(sel):
            return f':{name}() cannot contain pseudo-elements (found in "{sel}")'
        error = check_basic_selector(sel)
        if error:
            return f':{name}() has invalid selector "{sel}": {error}'
    return None


def _check_relative_list(args: str) -> str | None:
    selectors = _split(args)
    if not selectors:
        return ":has() requires at least one selector"
    for sel in selectors:
        if not _RELATIVE_START.match(sel):
            return f':has() has invalid relative selector "{sel}"'
        error = check_basic_selector(_LEADING_COMBINATOR.sub("", sel))
        if error:
            return f':has() has invalid selector "{sel}": {error}'
    return None


def _check_nth(args: str, name: str) -> str | None:
    pattern = args.strip()
    of_match = _NTH_OF.match(pattern)
    if of_match:
        pattern = of_match.group(1).strip()
        of_selector = of_match.group(2).strip()
        error = check_basic_selector(of_selector)
        if error:
            return f':{name}() has invalid "of" selector "{of_selector}": {error}'

    if pattern.lower() in ("odd", "even"):
        return None
    if _INTEGER.match(pattern) or _AN_PLUS_B.match(pattern):
        return None
    return (
        f':{name}() has invalid pattern "{pattern}". '
        'Expected "odd", "even", a number, or an+b notation like "2n+1"'
    )


def check_basic_selector(selector: str) -> str | None:
    """Catch obvious syntax errors in a selector fragment."""
    text = selector.strip()
    if not text:
        return "Empty selector"
    if text.count("[") != text.count("]"):
        return "Unmatched square brackets"
    if text.count("(") != text.count(")"):
        return "Unmatched parentheses"
    if text[0].isdigit():
        return "Selector cannot start with a number"
    if _DOUBLE_COMBINATOR.search(text):
        return "Invalid combinator sequence"
    return None
