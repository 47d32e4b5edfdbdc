"""Integrity rules for a persisted snapshot.

Each rule is a function taking a Snapshot and returning a list of Diagnostic
objects describing any issues found. Rules never modify the store.
"""

from __future__ import annotations

import json
from collections import Counter

from icbincss.cascade.values import token_references
from icbincss.model.diagnostic import Diagnostic, Severity
from icbincss.store.rows import Snapshot

# JSON blob columns per table.
_JSON_COLUMNS: tuple[tuple[str, str], ...] = (
    ("selectors", "def_json"),
    ("font_faces", "props_json"),
    ("keyframes", "frames_json"),
    ("pages", "props_json"),
    ("counter_styles", "props_json"),
    ("font_feature_values", "features_json"),
    ("font_palette_values", "props_json"),
    ("starting_styles", "props_json"),
)

# Natural-key columns per table.
_NATURAL_KEYS: tuple[tuple[str, str], ...] = (
    ("tokens", "name"),
    ("selectors", "name"),
    ("layers", "name"),
    ("properties", "name"),
    ("keyframes", "name"),
    ("counter_styles", "name"),
    ("font_feature_values", "family"),
    ("font_palette_values", "name"),
    ("starting_styles", "selector_id"),
)


# ---------------------------------------------------------------------------
# Reference rules (ERROR severity)
# ---------------------------------------------------------------------------


def check_style_references(snapshot: Snapshot) -> list[Diagnostic]:
    """Every style row must point at known selector, layer and scope rows."""
    selector_ids = {s.id for s in snapshot.selectors}
    layer_ids = {layer.id for layer in snapshot.layers}
    diagnostics: list[Diagnostic] = []
    for row in snapshot.styles:
        refs = [("selector", row.selector_id, selector_ids)]
        if row.layer_id:
            refs.append(("layer", row.layer_id, layer_ids))
        if row.scope_root_id:
            refs.append(("scope root", row.scope_root_id, selector_ids))
        if row.scope_limit_id:
            refs.append(("scope limit", row.scope_limit_id, selector_ids))
        for label, ref, known in refs:
            if ref not in known:
                diagnostics.append(
                    Diagnostic(
                        rule="check_style_references",
                        severity=Severity.ERROR,
                        message=f"Style '{row.prop}' references unknown {label} id '{ref}'.",
                        table="styles",
                        row_id=row.id,
                        fix="Rebuild the store from migrations.",
                    )
                )
    for row in snapshot.starting_styles:
        if row.selector_id not in selector_ids:
            diagnostics.append(
                Diagnostic(
                    rule="check_style_references",
                    severity=Severity.ERROR,
                    message=f"Starting style references unknown selector id '{row.selector_id}'.",
                    table="starting_styles",
                    row_id=row.id,
                )
            )
    return diagnostics


def check_token_references(snapshot: Snapshot) -> list[Diagnostic]:
    """``token('x')`` in a value must name a live token."""
    live = {t.name for t in snapshot.tokens if not t.deleted}
    deleted = {t.name for t in snapshot.tokens if t.deleted}
    diagnostics: list[Diagnostic] = []
    for row in snapshot.styles:
        for name in token_references(row.value):
            if name in live:
                continue
            state = "deleted" if name in deleted else "unknown"
            diagnostics.append(
                Diagnostic(
                    rule="check_token_references",
                    severity=Severity.ERROR,
                    message=f"Style '{row.prop}' references {state} token '{name}'.",
                    table="styles",
                    row_id=row.id,
                    fix=f"CREATE TOKEN '{name}' VALUE ...;",
                )
            )
    return diagnostics


# ---------------------------------------------------------------------------
# Data rules
# ---------------------------------------------------------------------------


def check_json_blobs(snapshot: Snapshot) -> list[Diagnostic]:
    """Serialized columns must hold valid JSON."""
    diagnostics: list[Diagnostic] = []
    for table, column in _JSON_COLUMNS:
        for row in getattr(snapshot, table):
            raw = getattr(row, column)
            if raw is None:
                continue
            try:
                json.loads(raw)
            except ValueError as exc:
                diagnostics.append(
                    Diagnostic(
                        rule="check_json_blobs",
                        severity=Severity.ERROR,
                        message=f"Column '{column}' holds invalid JSON: {exc}",
                        table=table,
                        row_id=row.id,
                    )
                )
    return diagnostics


def check_duplicate_names(snapshot: Snapshot) -> list[Diagnostic]:
    """Natural keys are unique within a table."""
    diagnostics: list[Diagnostic] = []
    for table, column in _NATURAL_KEYS:
        counts = Counter(getattr(row, column) for row in getattr(snapshot, table))
        for name, count in counts.items():
            if count > 1:
                diagnostics.append(
                    Diagnostic(
                        rule="check_duplicate_names",
                        severity=Severity.ERROR,
                        message=f"'{name}' appears {count} times in {table}.",
                        table=table,
                    )
                )
    return diagnostics


# ---------------------------------------------------------------------------
# Orphan rules (WARNING severity)
# ---------------------------------------------------------------------------


def check_orphan_selectors(snapshot: Snapshot) -> list[Diagnostic]:
    """Live selectors that no style or scope uses."""
    used: set[str] = set()
    for row in snapshot.styles:
        used.update(x for x in (row.selector_id, row.scope_root_id, row.scope_limit_id) if x)
    used.update(row.selector_id for row in snapshot.starting_styles)
    return [
        Diagnostic(
            rule="check_orphan_selectors",
            severity=Severity.WARNING,
            message=f"Selector '{s.name}' is not used by any style.",
            table="selectors",
            row_id=s.id,
        )
        for s in snapshot.selectors
        if not s.deleted and s.id not in used
    ]


def check_orphan_layers(snapshot: Snapshot) -> list[Diagnostic]:
    """Layers that are neither declared nor used by a style."""
    used = {row.layer_id for row in snapshot.styles if row.layer_id}
    return [
        Diagnostic(
            rule="check_orphan_layers",
            severity=Severity.WARNING,
            message=f"Layer '{layer.name}' has no styles and is not declared.",
            table="layers",
            row_id=layer.id,
        )
        for layer in snapshot.layers
        if layer.order_index is None and layer.id not in used
    ]


def check_orphan_tokens(snapshot: Snapshot) -> list[Diagnostic]:
    """Live tokens never referenced through ``token('...')``."""
    referenced: set[str] = set()
    for row in snapshot.styles:
        referenced.update(token_references(row.value))
    for row in snapshot.tokens:
        referenced.update(token_references(row.value))
    return [
        Diagnostic(
            rule="check_orphan_tokens",
            severity=Severity.WARNING,
            message=f"Token '{t.name}' is not referenced via token().",
            table="tokens",
            row_id=t.id,
        )
        for t in snapshot.tokens
        if not t.deleted and t.name not in referenced
    ]


# ---------------------------------------------------------------------------
# Rule registry
# ---------------------------------------------------------------------------

ALL_RULES = [
    check_style_references,
    check_token_references,
    check_json_blobs,
    check_duplicate_names,
    check_orphan_selectors,
    check_orphan_layers,
    check_orphan_tokens,
]
