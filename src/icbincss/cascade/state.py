"""In-memory cascade state shared by the direct and persisted paths."""

from __future__ import annotations

from dataclasses import dataclass, field

from icbincss.cascade.buckets import BucketIndex
from icbincss.cascade.context import InterpreterContext
from icbincss.model.ast import Declaration, ImportKind, Keyframe
from icbincss.model.selector import SelectorDef


@dataclass
class Provenance:
    origin_file: str | None = None
    migration_id: str | None = None

    @classmethod
    def of(cls, ctx: InterpreterContext) -> Provenance:
        return cls(origin_file=ctx.origin_file, migration_id=ctx.migration_id)


@dataclass
class TokenEntry:
    name: str
    value: str
    provenance: Provenance
    created_at: str
    updated_at: str
    deleted: bool = False


@dataclass
class SelectorEntry:
    """A named selector. ``definition`` is None when only referenced."""

    name: str
    definition: SelectorDef | None
    provenance: Provenance
    created_at: str
    updated_at: str
    deleted: bool = False


@dataclass
class LayerEntry:
    name: str
    provenance: Provenance


class LayerRegistry:
    """Known layers (in encounter order) plus the declared order."""

    def __init__(self) -> None:
        self.entries: dict[str, LayerEntry] = {}
        self.declared: list[str] = []

    def encounter(self, name: str, provenance: Provenance) -> None:
        if name not in self.entries:
            self.entries[name] = LayerEntry(name=name, provenance=provenance)

    def declare(self, names: tuple[str, ...] | list[str], provenance: Provenance) -> None:
        for name in names:
            self.encounter(name, provenance)
            if name not in self.declared:
                self.declared.append(name)

    def order_index(self, name: str) -> int | None:
        return self.declared.index(name) if name in self.declared else None


@dataclass
class RuleBlockEntry:
    """Natural-keyed at-rule with a declaration list.

    Used for @page (key = pseudo or ''), @counter-style, @font-feature-values
    (key = family), @font-palette-values and @starting-style (key = selector).
    """

    key: str
    declarations: tuple[Declaration, ...]
    provenance: Provenance


@dataclass
class PropertyEntry:
    name: str
    syntax: str | None
    inherits: str | None
    initial_value: str | None
    provenance: Provenance


@dataclass
class FontFaceEntry:
    family: str
    src: str | None
    declarations: tuple[Declaration, ...]
    provenance: Provenance


@dataclass
class KeyframesEntry:
    name: str
    frames: tuple[Keyframe, ...]
    provenance: Provenance


@dataclass
class RawEntry:
    css: str
    sequence: int
    provenance: Provenance


@dataclass
class ImportEntry:
    kind: ImportKind
    path: str
    media: str | None
    sequence: int
    provenance: Provenance


@dataclass
class CascadeState:
    tokens: dict[str, TokenEntry] = field(default_factory=dict)
    selectors: dict[str, SelectorEntry] = field(default_factory=dict)
    layers: LayerRegistry = field(default_factory=LayerRegistry)
    buckets: BucketIndex = field(default_factory=BucketIndex)
    properties: dict[str, PropertyEntry] = field(default_factory=dict)
    font_faces: dict[str, FontFaceEntry] = field(default_factory=dict)
    keyframes: dict[str, KeyframesEntry] = field(default_factory=dict)
    pages: dict[str, RuleBlockEntry] = field(default_factory=dict)
    counter_styles: dict[str, RuleBlockEntry] = field(default_factory=dict)
    font_feature_values: dict[str, RuleBlockEntry] = field(default_factory=dict)
    font_palette_values: dict[str, RuleBlockEntry] = field(default_factory=dict)
    starting_styles: dict[str, RuleBlockEntry] = field(default_factory=dict)
    raw: list[RawEntry] = field(default_factory=list)
    imports: list[ImportEntry] = field(default_factory=list)

    # ---- tokens ----

    def put_token(self, name: str, value: str, ctx: InterpreterContext) -> None:
        now = ctx.now()
        entry = self.tokens.get(name)
        if entry is not None and not entry.deleted:
            entry.value = value
            entry.provenance = Provenance.of(ctx)
            entry.updated_at = now
            return
        created_at = entry.created_at if entry is not None else now
        # A revived token moves to the end of the :root block.
        self.tokens.pop(name, None)
        self.tokens[name] = TokenEntry(
            name=name,
            value=value,
            provenance=Provenance.of(ctx),
            created_at=created_at,
            updated_at=now,
        )

    def delete_token(self, name: str, ctx: InterpreterContext) -> bool:
        entry = self.tokens.get(name)
        if entry is None or entry.deleted:
            return False
        entry.deleted = True
        entry.updated_at = ctx.now()
        return True

    def live_tokens(self) -> list[TokenEntry]:
        return [t for t in self.tokens.values() if not t.deleted]

    # ---- selectors ----

    def put_selector(self, name: str, definition: SelectorDef, ctx: InterpreterContext) -> None:
        now = ctx.now()
        entry = self.selectors.get(name)
        if entry is None:
            self.selectors[name] = SelectorEntry(
                name=name,
                definition=definition,
                provenance=Provenance.of(ctx),
                created_at=now,
                updated_at=now,
            )
            return
        entry.definition = definition
        entry.deleted = False
        entry.provenance = Provenance.of(ctx)
        entry.updated_at = now

    def reference_selector(self, name: str, ctx: InterpreterContext) -> None:
        """Make sure *name* exists so style rows can point at it."""
        if name not in self.selectors:
            now = ctx.now()
            self.selectors[name] = SelectorEntry(
                name=name,
                definition=None,
                provenance=Provenance.of(ctx),
                created_at=now,
                updated_at=now,
            )

    def delete_selector(self, name: str, ctx: InterpreterContext) -> bool:
        entry = self.selectors.get(name)
        if entry is None or entry.deleted:
            return False
        entry.deleted = True
        entry.updated_at = ctx.now()
        return True

    def selector_definition(self, name: str) -> SelectorDef | None:
        entry = self.selectors.get(name)
        return entry.definition if entry is not None else None
