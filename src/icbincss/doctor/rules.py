"""Conflict checks over a planned stylesheet.

Each rule is a function taking a Stylesheet and returning a list of
Diagnostic objects. Rules only report; they never change the plan.
"""

from __future__ import annotations

import re
from collections import Counter

from icbincss.introspect import rule_summary
from icbincss.model.diagnostic import Diagnostic, Severity
from icbincss.stylesheet import StyleRule, Stylesheet

# Shorthand -> longhands that it resets.
SHORTHANDS: dict[str, tuple[str, ...]] = {
    "margin": ("margin-top", "margin-right", "margin-bottom", "margin-left"),
    "padding": ("padding-top", "padding-right", "padding-bottom", "padding-left"),
    "border": (
        "border-top",
        "border-right",
        "border-bottom",
        "border-left",
        "border-width",
        "border-style",
        "border-color",
    ),
    "border-top": ("border-top-width", "border-top-style", "border-top-color"),
    "border-right": ("border-right-width", "border-right-style", "border-right-color"),
    "border-bottom": ("border-bottom-width", "border-bottom-style", "border-bottom-color"),
    "border-left": ("border-left-width", "border-left-style", "border-left-color"),
    "background": (
        "background-color",
        "background-image",
        "background-size",
        "background-position",
        "background-repeat",
        "background-attachment",
        "background-origin",
        "background-clip",
    ),
    "font": (
        "font-size",
        "font-family",
        "font-weight",
        "font-style",
        "line-height",
        "font-stretch",
        "font-variant",
    ),
    "animation": (
        "animation-name",
        "animation-duration",
        "animation-timing-function",
        "animation-delay",
        "animation-iteration-count",
        "animation-direction",
        "animation-fill-mode",
        "animation-play-state",
    ),
    "transition": (
        "transition-property",
        "transition-duration",
        "transition-timing-function",
        "transition-delay",
    ),
}

_ATTR = re.compile(r"\[[^\]]*\]")
_PSEUDO_ELEMENT = re.compile(r"::[A-Za-z0-9_-]+")
_PSEUDO_CLASS = re.compile(r":[A-Za-z0-9_-]+(?:\([^)]*\))?")
_ID = re.compile(r"#[A-Za-z0-9_-]+")
_CLASS = re.compile(r"\.[A-Za-z0-9_-]+")
_ELEMENT = re.compile(r"(?:^|[\s>+~,(])([A-Za-z][A-Za-z0-9_-]*)")


def specificity(selector: str) -> tuple[int, int, int]:
    """Approximate ``(ids, classes, elements)`` specificity of *selector*.

    Pseudo-class arguments are not looked into.
    """
    attrs = len(_ATTR.findall(selector))
    rest = _ATTR.sub("", selector)
    pseudo_elements = len(_PSEUDO_ELEMENT.findall(rest))
    rest = _PSEUDO_ELEMENT.sub("", rest)
    pseudo_classes = len(_PSEUDO_CLASS.findall(rest))
    rest = _PSEUDO_CLASS.sub("", rest)
    return (
        len(_ID.findall(rest)),
        len(_CLASS.findall(rest)) + attrs + pseudo_classes,
        len(_ELEMENT.findall(rest)) + pseudo_elements,
    )


def _label(selector: str) -> str:
    return f"{selector} (specificity {','.join(str(n) for n in specificity(selector))})"


def _buckets(sheet: Stylesheet) -> dict[tuple[object, ...], list[StyleRule]]:
    """Planned rules grouped by selector, layer, scope and wrapper."""
    groups: dict[tuple[object, ...], list[StyleRule]] = {}
    for rule in sheet.rules:
        key = (rule.selector, rule.layer, rule.scope_root, rule.scope_limit, rule.descriptor)
        groups.setdefault(key, []).append(rule)
    return groups


# ---------------------------------------------------------------------------
# Same-bucket rules (WARNING severity)
# ---------------------------------------------------------------------------


def check_repeated_properties(sheet: Stylesheet) -> list[Diagnostic]:
    """A property written by more than one rule of the same bucket.

    Happens when several named selectors resolve to the same CSS.
    """
    diagnostics: list[Diagnostic] = []
    for rules in _buckets(sheet).values():
        counts = Counter(decl.name for rule in rules for decl in rule.declarations)
        for name, count in counts.items():
            if count > 1:
                diagnostics.append(
                    Diagnostic(
                        rule="check_repeated_properties",
                        severity=Severity.WARNING,
                        message=(
                            f"'{name}' is defined {count} times for {_label(rules[0].selector)} "
                            f"in {rule_summary(rules[0])}"
                        ),
                        fix="Keep a single selector name per CSS selector",
                    )
                )
    return diagnostics


def check_shorthand_conflicts(sheet: Stylesheet) -> list[Diagnostic]:
    """A shorthand and one of its longhands set in the same bucket."""
    diagnostics: list[Diagnostic] = []
    for rules in _buckets(sheet).values():
        present = {decl.name for rule in rules for decl in rule.declarations}
        for shorthand, longhands in SHORTHANDS.items():
            if shorthand not in present:
                continue
            clashing = [name for name in longhands if name in present]
            if clashing:
                diagnostics.append(
                    Diagnostic(
                        rule="check_shorthand_conflicts",
                        severity=Severity.WARNING,
                        message=(
                            f"Shorthand/longhand conflict for {_label(rules[0].selector)} "
                            f"in {rule_summary(rules[0])}: {shorthand} with {', '.join(clashing)}"
                        ),
                        fix=f"Set either {shorthand} or its longhands",
                    )
                )
    return diagnostics


# ---------------------------------------------------------------------------
# Cross-bucket rules (INFO severity)
# ---------------------------------------------------------------------------


def check_cross_context_overrides(sheet: Stylesheet) -> list[Diagnostic]:
    """A property a selector sets under more than one layer, scope or wrapper."""
    contexts: dict[str, dict[str, list[str]]] = {}
    for rule in sheet.rules:
        per_prop = contexts.setdefault(rule.selector, {})
        summary = rule_summary(rule)
        for decl in rule.declarations:
            seen = per_prop.setdefault(decl.name, [])
            if summary not in seen:
                seen.append(summary)

    diagnostics: list[Diagnostic] = []
    for selector, per_prop in contexts.items():
        for name, seen in per_prop.items():
            if len(seen) > 1:
                diagnostics.append(
                    Diagnostic(
                        rule="check_cross_context_overrides",
                        severity=Severity.INFO,
                        message=(
                            f"Cross-context overrides for {_label(selector)} -> {name}: "
                            + "; ".join(seen)
                        ),
                    )
                )
    return diagnostics


# ---------------------------------------------------------------------------
# Rule registry
# ---------------------------------------------------------------------------

ALL_RULES = [
    check_repeated_properties,
    check_shorthand_conflicts,
    check_cross_context_overrides,
]
