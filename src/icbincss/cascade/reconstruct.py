"""Lossless conversion between :class:`CascadeState` and store rows.

This is what keeps the direct and persisted paths equivalent: the
persisted path loads a snapshot into a state, runs the same builder over
it and writes the resulting state back.
"""

from __future__ import annotations

import json
import re
from typing import Any

from icbincss.cascade.buckets import Bucket, BucketKey, StyleProperty
from icbincss.cascade.context import ADHOC_MIGRATION_ID
from icbincss.cascade.responsive import (
    CONTAINER,
    CONTAINER_STYLE,
    MEDIA,
    SUPPORTS,
    Descriptor,
)
from icbincss.cascade.state import (
    CascadeState,
    FontFaceEntry,
    ImportEntry,
    KeyframesEntry,
    LayerEntry,
    PropertyEntry,
    Provenance,
    RawEntry,
    RuleBlockEntry,
    SelectorEntry,
    TokenEntry,
)
from icbincss.identity import (
    EntityKind,
    entity_id,
    font_face_key,
    import_key,
    page_key,
    raw_key,
)
from icbincss.model.ast import Declaration, ImportKind, Keyframe
from icbincss.selectors import selector_from_json, selector_to_json
from icbincss.store.rows import (
    CounterStyleRow,
    FontFaceRow,
    FontFeatureValuesRow,
    FontPaletteValuesRow,
    ImportRow,
    KeyframesRow,
    LayerRow,
    MigrationRecord,
    PageRow,
    PropertyRow,
    RawBlockRow,
    SelectorRow,
    Snapshot,
    StartingStyleRow,
    StyleRow,
    TokenRow,
)

_FEATURE_SEPARATOR = re.compile(r"\s+and\s+", re.IGNORECASE)


# ---------------------------------------------------------------------------
# JSON blobs
# ---------------------------------------------------------------------------


def declarations_to_json(decls: tuple[Declaration, ...]) -> str:
    return json.dumps([{"name": d.name, "value": d.value} for d in decls])


def declarations_from_json(raw: str) -> tuple[Declaration, ...]:
    return tuple(Declaration(d["name"], d["value"]) for d in json.loads(raw or "[]"))


def frames_to_json(frames: tuple[Keyframe, ...]) -> str:
    return json.dumps([
        {"offset": f.offset, "props": [{"name": d.name, "value": d.value} for d in f.declarations]}
        for f in frames
    ])


def frames_from_json(raw: str) -> tuple[Keyframe, ...]:
    return tuple(
        Keyframe(
            f["offset"],
            tuple(Declaration(d["name"], d["value"]) for d in f.get("props", [])),
        )
        for f in json.loads(raw or "[]")
    )


# ---------------------------------------------------------------------------
# Descriptor columns
# ---------------------------------------------------------------------------


def descriptor_columns(descriptor: Descriptor | None) -> dict[str, Any]:
    cols: dict[str, Any] = {
        "resp_kind": None,
        "resp_min": None,
        "resp_max": None,
        "resp_axis": None,
        "container_name": None,
        "condition": None,
        "supports": None,
    }
    if descriptor is None:
        return cols
    cols["resp_kind"] = descriptor.kind
    cols["supports"] = descriptor.supports
    if descriptor.kind == MEDIA:
        cols["resp_min"] = descriptor.min
        cols["resp_max"] = descriptor.max
        cols["condition"] = " and ".join(descriptor.features) or None
    elif descriptor.kind == CONTAINER:
        cols["container_name"] = descriptor.name
        cols["resp_min"] = descriptor.min
        cols["resp_max"] = descriptor.max
        cols["resp_axis"] = descriptor.axis
    elif descriptor.kind in (CONTAINER_STYLE, SUPPORTS):
        cols["container_name"] = descriptor.name
        cols["condition"] = descriptor.condition
    return cols


def descriptor_from_row(row: StyleRow) -> Descriptor | None:
    kind = row.resp_kind
    if not kind:
        return None
    if kind == MEDIA:
        features = tuple(_FEATURE_SEPARATOR.split(row.condition)) if row.condition else ()
        return Descriptor(
            kind=MEDIA,
            min=row.resp_min,
            max=row.resp_max,
            features=features,
            supports=row.supports,
        )
    if kind == CONTAINER:
        return Descriptor(
            kind=CONTAINER,
            name=row.container_name,
            min=row.resp_min,
            max=row.resp_max,
            axis=row.resp_axis,
            supports=row.supports,
        )
    if kind == CONTAINER_STYLE:
        return Descriptor(
            kind=CONTAINER_STYLE,
            name=row.container_name,
            condition=row.condition,
            supports=row.supports,
        )
    return Descriptor(kind=SUPPORTS, condition=row.condition)


# ---------------------------------------------------------------------------
# State -> snapshot
# ---------------------------------------------------------------------------


def _sel_id(name: str) -> str:
    return entity_id(EntityKind.SELECTOR, name)


def _layer_id(name: str) -> str:
    return entity_id(EntityKind.LAYER, name)


def snapshot_from_state(
    state: CascadeState, migrations: tuple[MigrationRecord, ...] = ()
) -> Snapshot:
    styles: list[StyleRow] = []
    for bucket in state.buckets:
        key = bucket.key
        resp = descriptor_columns(key.descriptor)
        for prop in bucket.properties.values():
            styles.append(
                StyleRow(
                    id=prop.row_id,
                    selector_id=_sel_id(key.selector),
                    prop=prop.name,
                    value=prop.value,
                    layer_id=_layer_id(key.layer) if key.layer else None,
                    scope_root_id=_sel_id(key.scope_root) if key.scope_root else None,
                    scope_limit_id=_sel_id(key.scope_limit) if key.scope_limit else None,
                    spacing_mode=prop.spacing_mode,
                    sequence=prop.sequence,
                    touched=bucket.touched,
                    origin_file=prop.origin_file,
                    migration_id=prop.migration_id,
                    **resp,
                )
            )

    return Snapshot(
        tokens=tuple(
            TokenRow(
                id=entity_id(EntityKind.TOKEN, t.name),
                name=t.name,
                value=t.value,
                origin_file=t.provenance.origin_file,
                migration_id=t.provenance.migration_id,
                deleted=t.deleted,
                created_at=t.created_at,
                updated_at=t.updated_at,
            )
            for t in state.tokens.values()
        ),
        selectors=tuple(
            SelectorRow(
                id=_sel_id(s.name),
                name=s.name,
                def_json=selector_to_json(s.definition) if s.definition is not None else None,
                origin_file=s.provenance.origin_file,
                migration_id=s.provenance.migration_id,
                deleted=s.deleted,
                created_at=s.created_at,
                updated_at=s.updated_at,
            )
            for s in state.selectors.values()
        ),
        layers=tuple(
            LayerRow(
                id=_layer_id(layer.name),
                name=layer.name,
                order_index=state.layers.order_index(layer.name),
                origin_file=layer.provenance.origin_file,
                migration_id=layer.provenance.migration_id,
            )
            for layer in state.layers.entries.values()
        ),
        styles=tuple(styles),
        properties=tuple(
            PropertyRow(
                id=entity_id(EntityKind.PROPERTY, p.name),
                name=p.name,
                syntax=p.syntax,
                inherits=p.inherits,
                initial_value=p.initial_value,
                origin_file=p.provenance.origin_file,
                migration_id=p.provenance.migration_id,
            )
            for p in state.properties.values()
        ),
        font_faces=tuple(
            FontFaceRow(
                id=entity_id(EntityKind.FONT_FACE, key),
                family=f.family,
                src=f.src,
                props_json=declarations_to_json(f.declarations),
                origin_file=f.provenance.origin_file,
                migration_id=f.provenance.migration_id,
            )
            for key, f in state.font_faces.items()
        ),
        keyframes=tuple(
            KeyframesRow(
                id=entity_id(EntityKind.KEYFRAMES, k.name),
                name=k.name,
                frames_json=frames_to_json(k.frames),
                origin_file=k.provenance.origin_file,
                migration_id=k.provenance.migration_id,
            )
            for k in state.keyframes.values()
        ),
        raw_blocks=tuple(
            RawBlockRow(
                id=entity_id(
                    EntityKind.RAW,
                    raw_key(r.provenance.migration_id or ADHOC_MIGRATION_ID, r.sequence),
                ),
                css=r.css,
                sequence=r.sequence,
                origin_file=r.provenance.origin_file,
                migration_id=r.provenance.migration_id,
            )
            for r in state.raw
        ),
        imports=tuple(
            ImportRow(
                id=entity_id(
                    EntityKind.IMPORT,
                    import_key(i.provenance.migration_id or ADHOC_MIGRATION_ID, i.sequence),
                ),
                import_type=i.kind.value,
                path=i.path,
                media=i.media,
                sequence=i.sequence,
                origin_file=i.provenance.origin_file,
                migration_id=i.provenance.migration_id,
            )
            for i in state.imports
        ),
        pages=tuple(
            PageRow(
                id=entity_id(EntityKind.PAGE, page_key(p.key)),
                pseudo=p.key or None,
                props_json=declarations_to_json(p.declarations),
                origin_file=p.provenance.origin_file,
                migration_id=p.provenance.migration_id,
            )
            for p in state.pages.values()
        ),
        counter_styles=tuple(
            CounterStyleRow(
                id=entity_id(EntityKind.COUNTER_STYLE, c.key),
                name=c.key,
                props_json=declarations_to_json(c.declarations),
                origin_file=c.provenance.origin_file,
                migration_id=c.provenance.migration_id,
            )
            for c in state.counter_styles.values()
        ),
        font_feature_values=tuple(
            FontFeatureValuesRow(
                id=entity_id(EntityKind.FONT_FEATURE_VALUES, f.key),
                family=f.key,
                features_json=declarations_to_json(f.declarations),
                origin_file=f.provenance.origin_file,
                migration_id=f.provenance.migration_id,
            )
            for f in state.font_feature_values.values()
        ),
        font_palette_values=tuple(
            FontPaletteValuesRow(
                id=entity_id(EntityKind.FONT_PALETTE_VALUES, p.key),
                name=p.key,
                props_json=declarations_to_json(p.declarations),
                origin_file=p.provenance.origin_file,
                migration_id=p.provenance.migration_id,
            )
            for p in state.font_palette_values.values()
        ),
        starting_styles=tuple(
            StartingStyleRow(
                id=entity_id(EntityKind.STARTING_STYLE, s.key),
                selector_id=_sel_id(s.key),
                props_json=declarations_to_json(s.declarations),
                origin_file=s.provenance.origin_file,
                migration_id=s.provenance.migration_id,
            )
            for s in state.starting_styles.values()
        ),
        migrations=migrations,
    )


# ---------------------------------------------------------------------------
# Snapshot -> state
# ---------------------------------------------------------------------------


def _prov(row: Any) -> Provenance:
    return Provenance(origin_file=row.origin_file, migration_id=row.migration_id)


def state_from_snapshot(snapshot: Snapshot) -> CascadeState:
    """Rebuild the in-memory state a snapshot was saved from.

    Style rows whose selector id no longer resolves are skipped; dangling
    layer or scope ids fall back to unlayered / unscoped.
    """
    state = CascadeState()

    for t in snapshot.tokens:
        state.tokens[t.name] = TokenEntry(
            name=t.name,
            value=t.value,
            provenance=_prov(t),
            created_at=t.created_at,
            updated_at=t.updated_at,
            deleted=t.deleted,
        )

    selector_names: dict[str, str] = {}
    for s in snapshot.selectors:
        selector_names[s.id] = s.name
        state.selectors[s.name] = SelectorEntry(
            name=s.name,
            definition=selector_from_json(s.def_json) if s.def_json else None,
            provenance=_prov(s),
            created_at=s.created_at,
            updated_at=s.updated_at,
            deleted=s.deleted,
        )

    layer_names: dict[str, str] = {}
    for layer in snapshot.layers:
        layer_names[layer.id] = layer.name
        state.layers.entries[layer.name] = LayerEntry(name=layer.name, provenance=_prov(layer))
    declared = sorted(
        (layer for layer in snapshot.layers if layer.order_index is not None),
        key=lambda layer: layer.order_index,
    )
    state.layers.declared = [layer.name for layer in declared]

    buckets: dict[BucketKey, Bucket] = {}
    for row in snapshot.styles:
        selector = selector_names.get(row.selector_id)
        if selector is None:
            continue
        key = BucketKey(
            selector=selector,
            layer=layer_names.get(row.layer_id) if row.layer_id else None,
            scope_root=selector_names.get(row.scope_root_id) if row.scope_root_id else None,
            scope_limit=selector_names.get(row.scope_limit_id) if row.scope_limit_id else None,
            descriptor=descriptor_from_row(row),
        )
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = Bucket(key=key, touched=row.touched)
        bucket.properties[row.prop] = StyleProperty(
            name=row.prop,
            value=row.value,
            row_id=row.id,
            sequence=row.sequence,
            spacing_mode=row.spacing_mode,
            origin_file=row.origin_file,
            migration_id=row.migration_id,
        )
    for bucket in buckets.values():
        state.buckets.restore(bucket)

    for p in snapshot.properties:
        state.properties[p.name] = PropertyEntry(
            name=p.name,
            syntax=p.syntax,
            inherits=p.inherits,
            initial_value=p.initial_value,
            provenance=_prov(p),
        )
    for f in snapshot.font_faces:
        state.font_faces[font_face_key(f.family, f.src)] = FontFaceEntry(
            family=f.family,
            src=f.src,
            declarations=declarations_from_json(f.props_json),
            provenance=_prov(f),
        )
    for k in snapshot.keyframes:
        state.keyframes[k.name] = KeyframesEntry(
            name=k.name, frames=frames_from_json(k.frames_json), provenance=_prov(k)
        )
    for r in sorted(snapshot.raw_blocks, key=lambda r: r.sequence):
        state.raw.append(RawEntry(css=r.css, sequence=r.sequence, provenance=_prov(r)))
    for i in sorted(snapshot.imports, key=lambda i: i.sequence):
        state.imports.append(
            ImportEntry(
                kind=ImportKind(i.import_type),
                path=i.path,
                media=i.media,
                sequence=i.sequence,
                provenance=_prov(i),
            )
        )
    for p in snapshot.pages:
        key = p.pseudo or ""
        state.pages[key] = RuleBlockEntry(key, declarations_from_json(p.props_json), _prov(p))
    for c in snapshot.counter_styles:
        state.counter_styles[c.name] = RuleBlockEntry(
            c.name, declarations_from_json(c.props_json), _prov(c)
        )
    for f in snapshot.font_feature_values:
        state.font_feature_values[f.family] = RuleBlockEntry(
            f.family, declarations_from_json(f.features_json), _prov(f)
        )
    for p in snapshot.font_palette_values:
        state.font_palette_values[p.name] = RuleBlockEntry(
            p.name, declarations_from_json(p.props_json), _prov(p)
        )
    for s in snapshot.starting_styles:
        selector = selector_names.get(s.selector_id)
        if selector is None:
            continue
        state.starting_styles[selector] = RuleBlockEntry(
            selector, declarations_from_json(s.props_json), _prov(s)
        )
    return state
