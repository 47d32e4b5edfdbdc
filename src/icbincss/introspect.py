"""Read-only introspection over a built cascade: inspect, SELECT and DESCRIBE."""

from __future__ import annotations

from icbincss.cascade.responsive import normalize_where
from icbincss.cascade.state import CascadeState
from icbincss.config import CompilerConfig
from icbincss.model.ast import DescribeSelector, SelectStyleProps
from icbincss.stylesheet import StyleRule, build_stylesheet
from icbincss.stylesheet.emitter import describe_descriptor
from icbincss.stylesheet.plan import selector_css


def rules_for_selector(
    state: CascadeState, name: str, config: CompilerConfig | None = None
) -> tuple[str, list[StyleRule]]:
    """Planned rules whose resolved selector matches *name*.

    *name* may be a selector name or literal CSS. Returns the resolved CSS
    together with the matching rules in emission order.
    """
    target = selector_css(state, name) if name in state.selectors else name
    sheet = build_stylesheet(state, config)
    return target, [r for r in sheet.rules if r.selector == target]


def final_properties(rules: list[StyleRule]) -> list[tuple[str, str]]:
    """Last value wins per property, sorted by name."""
    merged: dict[str, str] = {}
    for rule in rules:
        for decl in rule.declarations:
            merged[decl.name] = decl.value
    return sorted(merged.items())


def rule_summary(rule: StyleRule) -> str:
    """Layer, scope and wrapper summary for one rule."""
    parts = []
    if rule.layer:
        parts.append(f"@layer {rule.layer}")
    if rule.scope_root:
        scope = f"@scope ({rule.scope_root})"
        if rule.scope_limit:
            scope += f" to ({rule.scope_limit})"
        parts.append(scope)
    parts.append(describe_descriptor(rule.descriptor))
    return " ".join(parts)


def select_rules(
    state: CascadeState, query: SelectStyleProps, config: CompilerConfig | None = None
) -> tuple[str, list[StyleRule]]:
    """Rules for the queried selector, narrowed to the WHERE descriptors."""
    target, rules = rules_for_selector(state, query.selector, config)
    if query.where is None:
        return target, rules
    wanted = normalize_where(query.where)
    return target, [r for r in rules if r.descriptor in wanted]


def describe_selector(state: CascadeState, query: DescribeSelector) -> str | None:
    """Resolved CSS for a named selector, or None when it is unknown."""
    if query.name not in state.selectors:
        return None
    return selector_css(state, query.name)
