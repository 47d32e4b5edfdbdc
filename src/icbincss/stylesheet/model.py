"""Stylesheet model: the emission plan produced from a cascade state."""

from __future__ import annotations

from dataclasses import dataclass

from icbincss.cascade.responsive import Descriptor


@dataclass(frozen=True)
class RuleDeclaration:
    """A CSS-ready declaration (hyphenated name, fully resolved value)."""

    name: str
    value: str
    origin_file: str | None = None


@dataclass(frozen=True)
class AtRuleBlock:
    """A brace block such as ``@page :first { ... }``; may nest children."""

    header: str
    declarations: tuple[RuleDeclaration, ...] = ()
    children: tuple[AtRuleBlock, ...] = ()


@dataclass(frozen=True)
class CssImport:
    path: str
    media: str | None = None


@dataclass(frozen=True)
class StyleRule:
    """One bucket, resolved against the final selector table."""

    selector: str
    declarations: tuple[RuleDeclaration, ...]
    selector_name: str = ""
    layer: str | None = None
    scope_root: str | None = None
    scope_limit: str | None = None
    descriptor: Descriptor | None = None


@dataclass(frozen=True)
class Stylesheet:
    """Every section of the output, already in emission order."""

    imports: tuple[CssImport, ...] = ()
    root: tuple[RuleDeclaration, ...] = ()
    preamble: tuple[AtRuleBlock, ...] = ()
    rules: tuple[StyleRule, ...] = ()
    layer_order: tuple[str, ...] = ()
    keyframes: tuple[AtRuleBlock, ...] = ()
    raw: tuple[str, ...] = ()

    def rules_in_layer(self, layer: str | None) -> list[StyleRule]:
        return [r for r in self.rules if r.layer == layer]
