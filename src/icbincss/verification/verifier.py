"""Store verifier: runs all integrity rules and reports diagnostics."""

from __future__ import annotations

from typing import Callable

from icbincss.model.diagnostic import Diagnostic
from icbincss.store.rows import Snapshot
from icbincss.verification.rules import ALL_RULES


RuleFunc = Callable[[Snapshot], list[Diagnostic]]


def verify(
    snapshot: Snapshot, extra_rules: list[RuleFunc] | None = None
) -> list[Diagnostic]:
    """Run all integrity rules against *snapshot*.

    Returns the full list of diagnostics (errors, warnings, info).
    """
    rules: list[RuleFunc] = list(ALL_RULES)
    if extra_rules:
        rules.extend(extra_rules)
    diagnostics: list[Diagnostic] = []
    for rule in rules:
        diagnostics.extend(rule(snapshot))
    return diagnostics
