"""Advisory cascade checks: conflicts in the plan and overridden history."""

from __future__ import annotations

from typing import Callable

from icbincss.doctor.history import StyleWrite, WriteTracker, analyze_history
from icbincss.doctor.rules import ALL_RULES, specificity
from icbincss.model.diagnostic import Diagnostic
from icbincss.stylesheet import Stylesheet

DoctorRule = Callable[[Stylesheet], list[Diagnostic]]


def diagnose(sheet: Stylesheet, extra_rules: list[DoctorRule] | None = None) -> list[Diagnostic]:
    """Run every conflict rule against a planned stylesheet."""
    rules: list[DoctorRule] = list(ALL_RULES)
    if extra_rules:
        rules.extend(extra_rules)
    diagnostics: list[Diagnostic] = []
    for rule in rules:
        diagnostics.extend(rule(sheet))
    return diagnostics


__all__ = [
    "ALL_RULES",
    "DoctorRule",
    "StyleWrite",
    "WriteTracker",
    "analyze_history",
    "diagnose",
    "specificity",
]
