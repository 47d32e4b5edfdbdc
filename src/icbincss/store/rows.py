"""Row types for every store table, and the whole-store :class:`Snapshot`."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TokenRow:
    id: str
    name: str
    value: str
    origin_file: str | None = None
    migration_id: str | None = None
    deleted: bool = False
    created_at: str = ""
    updated_at: str = ""


@dataclass(frozen=True)
class SelectorRow:
    id: str
    name: str
    def_json: str | None = None
    origin_file: str | None = None
    migration_id: str | None = None
    deleted: bool = False
    created_at: str = ""
    updated_at: str = ""


@dataclass(frozen=True)
class LayerRow:
    id: str
    name: str
    order_index: int | None = None
    origin_file: str | None = None
    migration_id: str | None = None


@dataclass(frozen=True)
class StyleRow:
    id: str
    selector_id: str
    prop: str
    value: str
    layer_id: str | None = None
    scope_root_id: str | None = None
    scope_limit_id: str | None = None
    resp_kind: str | None = None
    resp_min: str | None = None
    resp_max: str | None = None
    resp_axis: str | None = None
    container_name: str | None = None
    condition: str | None = None
    supports: str | None = None
    spacing_mode: str | None = None
    sequence: int = 0
    touched: int = 0
    origin_file: str | None = None
    migration_id: str | None = None


@dataclass(frozen=True)
class PropertyRow:
    id: str
    name: str
    syntax: str | None = None
    inherits: str | None = None
    initial_value: str | None = None
    origin_file: str | None = None
    migration_id: str | None = None


@dataclass(frozen=True)
class FontFaceRow:
    id: str
    family: str
    src: str | None = None
    props_json: str = "[]"
    origin_file: str | None = None
    migration_id: str | None = None


@dataclass(frozen=True)
class KeyframesRow:
    id: str
    name: str
    frames_json: str = "[]"
    origin_file: str | None = None
    migration_id: str | None = None


@dataclass(frozen=True)
class RawBlockRow:
    id: str
    css: str
    sequence: int = 0
    origin_file: str | None = None
    migration_id: str | None = None


@dataclass(frozen=True)
class ImportRow:
    id: str
    import_type: str
    path: str
    media: str | None = None
    sequence: int = 0
    origin_file: str | None = None
    migration_id: str | None = None


@dataclass(frozen=True)
class PageRow:
    id: str
    pseudo: str | None = None
    props_json: str = "[]"
    origin_file: str | None = None
    migration_id: str | None = None


@dataclass(frozen=True)
class CounterStyleRow:
    id: str
    name: str
    props_json: str = "[]"
    origin_file: str | None = None
    migration_id: str | None = None


@dataclass(frozen=True)
class FontFeatureValuesRow:
    id: str
    family: str
    features_json: str = "[]"
    origin_file: str | None = None
    migration_id: str | None = None


@dataclass(frozen=True)
class FontPaletteValuesRow:
    id: str
    name: str
    props_json: str = "[]"
    origin_file: str | None = None
    migration_id: str | None = None


@dataclass(frozen=True)
class StartingStyleRow:
    id: str
    selector_id: str
    props_json: str = "[]"
    origin_file: str | None = None
    migration_id: str | None = None


@dataclass(frozen=True)
class MigrationRecord:
    """One append-only log entry."""

    migration_id: str
    filename: str
    direction: str
    checksum: str
    applied_at: str
    duration_ms: int = 0
    status: str = "ok"
    seq: int | None = None


@dataclass(frozen=True)
class Snapshot:
    tokens: tuple[TokenRow, ...] = ()
    selectors: tuple[SelectorRow, ...] = ()
    layers: tuple[LayerRow, ...] = ()
    styles: tuple[StyleRow, ...] = ()
    properties: tuple[PropertyRow, ...] = ()
    font_faces: tuple[FontFaceRow, ...] = ()
    keyframes: tuple[KeyframesRow, ...] = ()
    raw_blocks: tuple[RawBlockRow, ...] = ()
    imports: tuple[ImportRow, ...] = ()
    pages: tuple[PageRow, ...] = ()
    counter_styles: tuple[CounterStyleRow, ...] = ()
    font_feature_values: tuple[FontFeatureValuesRow, ...] = ()
    font_palette_values: tuple[FontPaletteValuesRow, ...] = ()
    starting_styles: tuple[StartingStyleRow, ...] = ()
    migrations: tuple[MigrationRecord, ...] = ()
