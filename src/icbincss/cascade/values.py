"""Value helpers: normalisation, token references and the spacing macro."""

from __future__ import annotations

import re

SPACING_SIZES = {
    "thin_spread": "4px",
    "medium_spread": "12px",
    "thick_smear": "24px",
}
DEFAULT_SPACING_SIZE = "8px"

_TRAILING_SEMICOLONS = re.compile(r";+\s*$")
_SPACING_MACRO = re.compile(r"BUTTER\(\s*\)", re.IGNORECASE)
_TOKEN_REF = re.compile(r"""token\(\s*(['"])(.+?)\1\s*\)""")
_TOKEN_NAME_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")


def normalize_value(raw: str | None) -> str:
    """Strip surrounding whitespace and any trailing semicolons."""
    if raw is None:
        return ""
    return _TRAILING_SEMICOLONS.sub("", raw.strip()).strip()


def canonical_property(name: str) -> str:
    """Property names are kept with underscores internally."""
    return name.replace("-", "_")


def css_property(name: str) -> str:
    return name.replace("_", "-")


def token_var_name(name: str, prefix: str = "") -> str:
    """``brand/500`` -> ``--brand-500`` (with optional prefix)."""
    return f"--{prefix}{_TOKEN_NAME_UNSAFE.sub('-', name)}"


def substitute_tokens(value: str, prefix: str = "") -> str:
    """Replace every ``token('name')`` with the matching ``var(--name)``."""
    return _TOKEN_REF.sub(lambda m: f"var({token_var_name(m.group(2), prefix)})", value)


def token_references(value: str) -> list[str]:
    return [m.group(2) for m in _TOKEN_REF.finditer(value)]


def spacing_size(mode: str | None) -> str:
    return SPACING_SIZES.get((mode or "").lower(), DEFAULT_SPACING_SIZE)


def expand_spacing(value: str, mode: str | None) -> str:
    if "(" not in value:
        return value
    return _SPACING_MACRO.sub(spacing_size(mode), value)
