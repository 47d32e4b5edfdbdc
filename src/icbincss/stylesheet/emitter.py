"""Serialise a :class:`Stylesheet` to CSS text.

Section order is fixed: imports, ``:root`` tokens, the at-rule preamble,
unlayered rules, ``@layer`` blocks, ``@keyframes`` and finally RAW blocks.
Top-level blocks are each followed by one blank line.
"""

from __future__ import annotations

from icbincss.cascade.responsive import (
    CONTAINER,
    CONTAINER_STYLE,
    MEDIA,
    SUPPORTS,
    Descriptor,
)
from icbincss.stylesheet.model import AtRuleBlock, StyleRule, Stylesheet

INDENT = "  "


def wrapper_headers(descriptor: Descriptor | None) -> list[str]:
    """Opening lines for the wrappers of one rule, outermost first."""
    if descriptor is None:
        return []
    headers: list[str] = []
    if descriptor.supports:
        headers.append(f"@supports {descriptor.supports} {{")

    if descriptor.kind == MEDIA:
        parts = []
        if descriptor.min:
            parts.append(f"(min-width: {descriptor.min})")
        if descriptor.max:
            parts.append(f"(max-width: {descriptor.max})")
        parts.extend(descriptor.features)
        if parts:
            headers.append(f"@media {' and '.join(parts)} {{")
    elif descriptor.kind == CONTAINER:
        axis = "inline-size" if descriptor.axis == "inline" else "width"
        parts = []
        if descriptor.min:
            parts.append(f"(min-{axis}: {descriptor.min})")
        if descriptor.max:
            parts.append(f"(max-{axis}: {descriptor.max})")
        cond = f" {' and '.join(parts)}" if parts else ""
        headers.append(f"@container {descriptor.name}{cond} {{")
    elif descriptor.kind == CONTAINER_STYLE:
        condition = descriptor.condition or ""
        if condition.startswith("(") and condition.endswith(")"):
            condition = condition[1:-1]
        headers.append(f"@container {descriptor.name} style({condition}) {{")
    elif descriptor.kind == SUPPORTS:
        headers.append(f"@supports {descriptor.condition} {{")
    return headers


def describe_descriptor(descriptor: Descriptor | None) -> str:
    """One-line summary of a rule's wrappers, for introspection output."""
    headers = [h[:-2] for h in wrapper_headers(descriptor)]
    return " ".join(headers) if headers else "(no condition)"


def _emit_block(block: AtRuleBlock, out: list[str], indent: str = "") -> None:
    out.append(f"{indent}{block.header} {{")
    for decl in block.declarations:
        out.append(f"{indent}{INDENT}{decl.name}: {decl.value};")
    for child in block.children:
        _emit_block(child, out, indent + INDENT)
    out.append(f"{indent}}}")


def _emit_rule(rule: StyleRule, out: list[str], indent: str, scoped: bool) -> None:
    headers = wrapper_headers(rule.descriptor)
    level = indent
    for header in headers:
        out.append(f"{level}{header}")
        level += INDENT

    out.append(f"{level}{rule.selector} {{")
    for decl in rule.declarations:
        out.append(f"{level}{INDENT}{decl.name}: {decl.value};")
    out.append(f"{level}}}")
    if not scoped:
        out.append("")

    for _ in headers:
        level = level[: -len(INDENT)]
        out.append(f"{level}}}")
        if not scoped:
            out.append("")


def _emit_rules(rules: list[StyleRule], out: list[str]) -> None:
    groups: dict[tuple[str | None, str | None], list[StyleRule]] = {}
    for rule in rules:
        groups.setdefault((rule.scope_root, rule.scope_limit), []).append(rule)

    for (root, limit), group in groups.items():
        if root is None and limit is None:
            for rule in group:
                _emit_rule(rule, out, "", scoped=False)
            continue
        header = f"@scope ({root or ''})"
        if limit:
            header += f" to ({limit})"
        out.append(f"{header} {{")
        for rule in group:
            _emit_rule(rule, out, INDENT, scoped=True)
        out.append("}")
        out.append("")


def render_lines(sheet: Stylesheet) -> list[str]:
    out: list[str] = []

    for imp in sheet.imports:
        media = f" {imp.media}" if imp.media else ""
        out.append(f"@import url('{imp.path}'){media};")
    if sheet.imports:
        out.append("")

    if sheet.root:
        out.append(":root {")
        for decl in sheet.root:
            out.append(f"{INDENT}{decl.name}: {decl.value};")
        out.append("}")
        out.append("")

    for block in sheet.preamble:
        _emit_block(block, out)
        out.append("")

    unlayered = sheet.rules_in_layer(None)
    if unlayered:
        _emit_rules(unlayered, out)

    for layer in sheet.layer_order:
        rules = sheet.rules_in_layer(layer)
        if not rules:
            continue
        out.append(f"@layer {layer} {{")
        _emit_rules(rules, out)
        out.append("}")
        out.append("")

    for block in sheet.keyframes:
        _emit_block(block, out)
        out.append("")

    for css in sheet.raw:
        out.append(css)
        out.append("")
    return out


def render(sheet: Stylesheet) -> str:
    """Render *sheet* as newline-joined CSS text."""
    return "\n".join(render_lines(sheet))
