"""The cascade builder: interprets statements into a :class:`CascadeState`.

Statements are processed left to right. Later statements may mutate or
remove buckets created by earlier ones, so order is significant.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Callable

from icbincss.cascade.buckets import BucketKey, StyleProperty
from icbincss.cascade.context import InterpreterContext
from icbincss.cascade.responsive import normalize_where
from icbincss.cascade.state import (
    CascadeState,
    FontFaceEntry,
    ImportEntry,
    KeyframesEntry,
    PropertyEntry,
    Provenance,
    RawEntry,
    RuleBlockEntry,
)
from icbincss.cascade.values import canonical_property, normalize_value
from icbincss.identity import EntityKind, entity_id, font_face_key, style_key
from icbincss.model import ast


def _clean(declarations: tuple[ast.Declaration, ...]) -> tuple[ast.Declaration, ...]:
    return tuple(
        ast.Declaration(canonical_property(d.name), normalize_value(d.value))
        for d in declarations
    )


def _find(declarations: tuple[ast.Declaration, ...], name: str) -> str | None:
    for decl in declarations:
        if decl.name == name:
            return decl.value
    return None


class CascadeBuilder:
    """Apply statements to a cascade state.

    The same builder runs in both paths: over a fresh state (direct
    compilation) or over a state reconstructed from the store.
    """

    def __init__(self, state: CascadeState | None = None) -> None:
        self.state = state if state is not None else CascadeState()
        self._handlers: dict[type, Callable[[object, InterpreterContext], None]] = {
            ast.CreateToken: self._create_token,
            ast.DropToken: self._drop_token,
            ast.DeleteToken: self._drop_token,
            ast.CreateSelector: self._create_selector,
            ast.DropSelector: self._drop_selector,
            ast.CreateStyle: self._create_style,
            ast.AlterStyle: self._alter_style,
            ast.DeleteStyle: self._delete_style,
            ast.DropStyle: self._drop_style,
            ast.CreateLayers: self._create_layers,
            ast.SetLayer: self._set_layer,
            ast.SetSpacing: self._set_spacing,
            ast.Raw: self._raw,
            ast.Import: self._import,
            ast.CreateFontFace: self._create_font_face,
            ast.DropFontFace: self._drop_font_face,
            ast.CreateKeyframes: self._create_keyframes,
            ast.DropKeyframes: self._drop_keyframes,
            ast.CreateProperty: self._create_property,
            ast.DropProperty: self._drop_property,
            ast.CreatePage: self._create_page,
            ast.DropPage: self._drop_page,
            ast.CreateCounterStyle: self._create_counter_style,
            ast.DropCounterStyle: self._drop_counter_style,
            ast.CreateFontFeatureValues: self._create_font_feature_values,
            ast.DropFontFeatureValues: self._drop_font_feature_values,
            ast.CreateFontPaletteValues: self._create_font_palette_values,
            ast.DropFontPaletteValues: self._drop_font_palette_values,
            ast.CreateStartingStyle: self._create_starting_style,
            ast.DropStartingStyle: self._drop_starting_style,
        }

    def apply(
        self,
        statements: Iterable[ast.Statement],
        ctx: InterpreterContext | None = None,
    ) -> CascadeState:
        ctx = ctx if ctx is not None else InterpreterContext()
        for stmt in statements:
            if isinstance(stmt, ast.NO_OP_STATEMENTS):
                continue
            handler = self._handlers.get(type(stmt))
            if handler is None:
                raise TypeError(f"Unsupported statement: {type(stmt).__name__}")
            handler(stmt, ctx)
        return self.state

    # ---- tokens and selectors ----

    def _create_token(self, stmt: ast.CreateToken, ctx: InterpreterContext) -> None:
        self.state.put_token(stmt.name, normalize_value(stmt.value), ctx)

    def _drop_token(self, stmt: ast.DropToken | ast.DeleteToken, ctx: InterpreterContext) -> None:
        self.state.delete_token(stmt.name, ctx)

    def _create_selector(self, stmt: ast.CreateSelector, ctx: InterpreterContext) -> None:
        self.state.put_selector(stmt.name, stmt.definition, ctx)

    def _drop_selector(self, stmt: ast.DropSelector, ctx: InterpreterContext) -> None:
        self.state.delete_selector(stmt.name, ctx)

    # ---- styles ----

    def _bucket_keys(
        self,
        selector: str,
        where: object,
        scope_root: str | None,
        scope_limit: str | None,
        ctx: InterpreterContext,
    ) -> list[BucketKey]:
        descriptors = normalize_where(where)  # type: ignore[arg-type]
        for name in (selector, scope_root, scope_limit):
            if name:
                self.state.reference_selector(name, ctx)
        return [
            BucketKey(
                selector=selector,
                layer=ctx.active_layer,
                scope_root=scope_root,
                scope_limit=scope_limit,
                descriptor=d,
            )
            for d in descriptors
        ]

    def _property(self, decl: ast.Declaration, ctx: InterpreterContext) -> StyleProperty:
        sequence = self.state.buckets.next_sequence()
        return StyleProperty(
            name=canonical_property(decl.name),
            value=normalize_value(decl.value),
            row_id=entity_id(EntityKind.STYLE, style_key(ctx.migration_id, sequence)),
            sequence=sequence,
            spacing_mode=ctx.spacing_mode,
            origin_file=ctx.origin_file,
            migration_id=ctx.migration_id,
        )

    def _write(
        self,
        keys: list[BucketKey],
        declarations: tuple[ast.Declaration, ...],
        action: ast.AlterAction,
        ctx: InterpreterContext,
    ) -> None:
        index = self.state.buckets
        for key in keys:
            if not declarations:
                index.touch(key)
                continue
            for decl in declarations:
                prop = self._property(decl, ctx)
                if action is ast.AlterAction.ADD:
                    index.add_property(key, prop)
                else:
                    index.set_property(key, prop)

    def _create_style(self, stmt: ast.CreateStyle, ctx: InterpreterContext) -> None:
        keys = self._bucket_keys(stmt.selector, stmt.where, stmt.scope_root, stmt.scope_limit, ctx)
        self._write(keys, stmt.declarations, ast.AlterAction.SET, ctx)

    def _alter_style(self, stmt: ast.AlterStyle, ctx: InterpreterContext) -> None:
        keys = self._bucket_keys(stmt.selector, stmt.where, stmt.scope_root, stmt.scope_limit, ctx)
        self._write(keys, stmt.declarations, stmt.action, ctx)

    def _delete_style(self, stmt: ast.DeleteStyle, ctx: InterpreterContext) -> None:
        prop = canonical_property(stmt.prop) if stmt.prop is not None else None
        self.state.buckets.delete_property(stmt.selector, ctx.active_layer, prop)

    def _drop_style(self, stmt: ast.DropStyle, ctx: InterpreterContext) -> None:
        self.state.buckets.drop(stmt.selector, ctx.active_layer)

    # ---- interpreter state ----

    def _create_layers(self, stmt: ast.CreateLayers, ctx: InterpreterContext) -> None:
        self.state.layers.declare(stmt.names, Provenance.of(ctx))

    def _set_layer(self, stmt: ast.SetLayer, ctx: InterpreterContext) -> None:
        ctx.active_layer = stmt.name
        self.state.layers.encounter(stmt.name, Provenance.of(ctx))

    def _set_spacing(self, stmt: ast.SetSpacing, ctx: InterpreterContext) -> None:
        ctx.spacing_mode = stmt.mode

    def _raw(self, stmt: ast.Raw, ctx: InterpreterContext) -> None:
        self.state.raw.append(
            RawEntry(css=stmt.css, sequence=len(self.state.raw), provenance=Provenance.of(ctx))
        )

    def _import(self, stmt: ast.Import, ctx: InterpreterContext) -> None:
        self.state.imports.append(
            ImportEntry(
                kind=stmt.kind,
                path=stmt.path,
                media=stmt.media,
                sequence=len(self.state.imports),
                provenance=Provenance.of(ctx),
            )
        )

    # ---- at-rules ----

    def _create_font_face(self, stmt: ast.CreateFontFace, ctx: InterpreterContext) -> None:
        declarations = _clean(stmt.declarations)
        src = _find(declarations, "src")
        self.state.font_faces[font_face_key(stmt.family, src)] = FontFaceEntry(
            family=stmt.family,
            src=src,
            declarations=declarations,
            provenance=Provenance.of(ctx),
        )

    def _drop_font_face(self, stmt: ast.DropFontFace, ctx: InterpreterContext) -> None:
        for key in [k for k, v in self.state.font_faces.items() if v.family == stmt.family]:
            del self.state.font_faces[key]

    def _create_keyframes(self, stmt: ast.CreateKeyframes, ctx: InterpreterContext) -> None:
        frames = tuple(ast.Keyframe(f.offset, _clean(f.declarations)) for f in stmt.frames)
        self.state.keyframes[stmt.name] = KeyframesEntry(
            name=stmt.name, frames=frames, provenance=Provenance.of(ctx)
        )

    def _drop_keyframes(self, stmt: ast.DropKeyframes, ctx: InterpreterContext) -> None:
        self.state.keyframes.pop(stmt.name, None)

    def _create_property(self, stmt: ast.CreateProperty, ctx: InterpreterContext) -> None:
        declarations = _clean(stmt.declarations)
        self.state.properties[stmt.name] = PropertyEntry(
            name=stmt.name,
            syntax=_find(declarations, "syntax"),
            inherits=_find(declarations, "inherits"),
            initial_value=_find(declarations, "initial_value"),
            provenance=Provenance.of(ctx),
        )

    def _drop_property(self, stmt: ast.DropProperty, ctx: InterpreterContext) -> None:
        self.state.properties.pop(stmt.name, None)

    def _put_block(
        self,
        table: dict[str, RuleBlockEntry],
        key: str,
        declarations: tuple[ast.Declaration, ...],
        ctx: InterpreterContext,
    ) -> None:
        table[key] = RuleBlockEntry(key=key, declarations=declarations, provenance=Provenance.of(ctx))

    def _create_page(self, stmt: ast.CreatePage, ctx: InterpreterContext) -> None:
        self._put_block(self.state.pages, stmt.pseudo or "", _clean(stmt.declarations), ctx)

    def _drop_page(self, stmt: ast.DropPage, ctx: InterpreterContext) -> None:
        self.state.pages.pop(stmt.pseudo or "", None)

    def _create_counter_style(self, stmt: ast.CreateCounterStyle, ctx: InterpreterContext) -> None:
        self._put_block(self.state.counter_styles, stmt.name, _clean(stmt.declarations), ctx)

    def _drop_counter_style(self, stmt: ast.DropCounterStyle, ctx: InterpreterContext) -> None:
        self.state.counter_styles.pop(stmt.name, None)

    def _create_font_feature_values(
        self, stmt: ast.CreateFontFeatureValues, ctx: InterpreterContext
    ) -> None:
        # Feature names are case-sensitive identifiers, so they are not canonicalised.
        declarations = tuple(
            ast.Declaration(d.name, normalize_value(d.value)) for d in stmt.declarations
        )
        self._put_block(self.state.font_feature_values, stmt.family, declarations, ctx)

    def _drop_font_feature_values(
        self, stmt: ast.DropFontFeatureValues, ctx: InterpreterContext
    ) -> None:
        self.state.font_feature_values.pop(stmt.family, None)

    def _create_font_palette_values(
        self, stmt: ast.CreateFontPaletteValues, ctx: InterpreterContext
    ) -> None:
        self._put_block(self.state.font_palette_values, stmt.name, _clean(stmt.declarations), ctx)

    def _drop_font_palette_values(
        self, stmt: ast.DropFontPaletteValues, ctx: InterpreterContext
    ) -> None:
        self.state.font_palette_values.pop(stmt.name, None)

    def _create_starting_style(self, stmt: ast.CreateStartingStyle, ctx: InterpreterContext) -> None:
        self.state.reference_selector(stmt.selector, ctx)
        self._put_block(self.state.starting_styles, stmt.selector, _clean(stmt.declarations), ctx)

    def _drop_starting_style(self, stmt: ast.DropStartingStyle, ctx: InterpreterContext) -> None:
        self.state.starting_styles.pop(stmt.selector, None)


def build_state(
    statements: Iterable[ast.Statement],
    ctx: InterpreterContext | None = None,
    state: CascadeState | None = None,
) -> CascadeState:
    """Convenience wrapper: run one statement list through a builder."""
    return CascadeBuilder(state).apply(statements, ctx)
