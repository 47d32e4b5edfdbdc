"""Lark Transformer that converts an ICBINCSS parse tree into statements."""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path

from lark import Lark, Token, Transformer, Tree
from lark.exceptions import LarkError, VisitError

from icbincss.model import ast
from icbincss.model.condition import (
    AllOf,
    AnyOf,
    Condition,
    ContainerQuery,
    ContainerStyle,
    MediaFeature,
    Supports,
    WidthRange,
)
from icbincss.model.selector import (
    ATTR_FLAGS,
    ATTR_OPERATORS,
    And,
    Attr,
    Child,
    Class,
    Descendant,
    Element,
    Id,
    Join,
    JoinType,
    Or,
    Pseudo,
    PseudoElement,
    Ref,
    SelectorDef,
)
from icbincss.parser.errors import ParseError
from icbincss.parser.pseudo import validate_pseudo_selector
from icbincss.parser.strict import check_semicolons, count_semicolons

GRAMMAR_PATH = Path(__file__).parent / "grammar.lark"

_ESCAPE = re.compile(r"\\(.)", re.DOTALL)
_FN_SUFFIX = re.compile(r"\s*\($")

# Selector functions taking exactly one quoted argument.
_SIMPLE_SELECTORS: dict[str, type] = {
    "E": Element,
    "C": Class,
    "ID": Id,
    "P": Pseudo,
    "PE": PseudoElement,
}


def _unquote(token: Token) -> str:
    """Strip surrounding quotes and process backslash escapes."""
    return _ESCAPE.sub(r"\1", str(token)[1:-1])


def _text(token: Token) -> str:
    """Quoted strings are unquoted; bare identifiers are taken verbatim."""
    return _unquote(token) if token.type == "STRING" else str(token)


def _error(message: str, token: Token) -> ParseError:
    return ParseError(message, line=token.line, column=token.column)


class StatementTransformer(Transformer):  # type: ignore[type-arg]
    """Transform a Lark parse tree into a flat list of statement nodes."""

    # ---- tokens ----

    def create_token(self, items: list[Token]) -> ast.CreateToken:
        return ast.CreateToken(_unquote(items[0]), str(items[1]))

    def drop_token(self, items: list[Token]) -> ast.DropToken:
        return ast.DropToken(_unquote(items[0]))

    def delete_token(self, items: list[Token]) -> ast.DeleteToken:
        return ast.DeleteToken(_unquote(items[0]))

    def insert_token(self, items: list[Token]) -> ast.CreateToken:
        return ast.CreateToken(_unquote(items[0]), str(items[1]))

    def update_token(self, items: list[Token]) -> ast.CreateToken:
        return ast.CreateToken(_unquote(items[1]), str(items[0]))

    # ---- selectors ----

    def create_selector(self, items: list[object]) -> ast.CreateSelector:
        return ast.CreateSelector(str(items[0]), items[1])  # type: ignore[arg-type]

    def drop_selector(self, items: list[Token]) -> ast.DropSelector:
        return ast.DropSelector(str(items[0]))

    def sel_ref(self, items: list[Token]) -> Ref:
        return Ref(str(items[0]))

    def join_type(self, items: list[Token]) -> JoinType:
        return JoinType(str(items[0]).upper())

    def sel_join(self, items: list[object]) -> Join:
        return Join(items[0], items[1], items[2])  # type: ignore[arg-type]

    def sel_call(self, items: list[object]) -> SelectorDef:
        fn: Token = items[0]  # type: ignore[assignment]
        name = _FN_SUFFIX.sub("", str(fn)).upper()
        args = [a for a in items[1:] if a is not None]
        strings = [_unquote(a) for a in args if isinstance(a, Token)]
        selectors = [a for a in args if not isinstance(a, Token)]

        if name in _SIMPLE_SELECTORS:
            if len(args) != 1 or len(strings) != 1:
                raise _error(f"{name}() takes exactly one quoted argument", fn)
            value = strings[0]
            if name in ("P", "PE"):
                value = value.lstrip(":")
            if name == "P":
                problem = validate_pseudo_selector(value)
                if problem:
                    raise _error(f"Invalid pseudo-selector '{value}': {problem}", fn)
            return _SIMPLE_SELECTORS[name](value)

        if name == "ATTR":
            if selectors or not 1 <= len(strings) <= 4:
                raise _error("ATTR() takes one to four quoted arguments", fn)
            attr = Attr(*strings)
            if attr.operator is not None and attr.operator not in ATTR_OPERATORS:
                raise _error(f"Unknown attribute operator '{attr.operator}'", fn)
            if attr.flag is not None and attr.flag.lower() not in ATTR_FLAGS:
                raise _error(f"Unknown attribute flag '{attr.flag}'", fn)
            return attr

        if strings:
            raise _error(f"{name}() takes selectors, not strings", fn)
        if name in ("AND", "OR"):
            if not selectors:
                raise _error(f"{name}() requires at least one selector", fn)
            return (And if name == "AND" else Or)(tuple(selectors))
        if len(selectors) != 2:
            raise _error(f"{name}() takes exactly two selectors", fn)
        if name == "CHILD":
            return Child(selectors[0], selectors[1])
        return Descendant(selectors[0], selectors[1])

    # ---- styles ----

    def scope(self, items: list[Token | None]) -> tuple[str, str | None]:
        limit = items[1] if len(items) > 1 else None
        return str(items[0]), str(limit) if limit is not None else None

    def decl_block(self, items: list[object]) -> tuple[ast.Declaration, ...]:
        return items[0] if items and items[0] is not None else ()  # type: ignore[return-value]

    def decl_list(self, items: list[ast.Declaration]) -> tuple[ast.Declaration, ...]:
        return tuple(items)

    def declaration(self, items: list[Token]) -> ast.Declaration:
        return ast.Declaration(str(items[0]), str(items[1]))

    def alter_action(self, items: list[Token]) -> ast.AlterAction:
        return ast.AlterAction(str(items[0]).upper())

    def create_style(self, items: list[object]) -> ast.CreateStyle:
        selector, scope, declarations, where = items
        root, limit = scope if scope is not None else (None, None)
        return ast.CreateStyle(
            selector=str(selector),
            declarations=declarations,  # type: ignore[arg-type]
            where=where,  # type: ignore[arg-type]
            scope_root=root,
            scope_limit=limit,
        )

    def alter_style(self, items: list[object]) -> ast.AlterStyle:
        selector, scope, where, action, declarations = items
        root, limit = scope if scope is not None else (None, None)
        return ast.AlterStyle(
            selector=str(selector),
            action=action,  # type: ignore[arg-type]
            declarations=declarations,  # type: ignore[arg-type]
            where=where,  # type: ignore[arg-type]
            scope_root=root,
            scope_limit=limit,
        )

    def delete_style(self, items: list[Token]) -> ast.DeleteStyle:
        prop = _text(items[1]) if len(items) > 1 else None
        return ast.DeleteStyle(str(items[0]), prop)

    def drop_style(self, items: list[Token]) -> ast.DropStyle:
        return ast.DropStyle(str(items[0]))

    def insert_style(self, items: list[Token]) -> ast.AlterStyle:
        selector, prop, value = items
        return ast.AlterStyle(
            selector=str(selector),
            action=ast.AlterAction.SET,
            declarations=(ast.Declaration(_text(prop), str(value)),),
        )

    def update_style(self, items: list[object]) -> ast.AlterStyle:
        declarations, (selector, where) = items  # type: ignore[misc]
        return ast.AlterStyle(
            selector=selector,
            action=ast.AlterAction.SET,
            declarations=declarations,  # type: ignore[arg-type]
            where=where,
        )

    def selector_filter(self, items: list[object]) -> tuple[str, Condition | None]:
        where = items[1] if len(items) > 1 else None
        return str(items[0]), where  # type: ignore[return-value]

    # ---- conditions ----

    def where(self, items: list[Condition]) -> Condition:
        return items[0]

    def or_cond(self, items: list[Condition]) -> AnyOf:
        left, right = items
        parts = left.parts if isinstance(left, AnyOf) else (left,)
        return AnyOf((*parts, right))

    def and_cond(self, items: list[Condition]) -> AllOf:
        left, right = items
        parts = left.parts if isinstance(left, AllOf) else (left,)
        return AllOf((*parts, right))

    def width_between(self, items: list[Token]) -> WidthRange:
        return WidthRange(min=str(items[0]), max=str(items[1]))

    def width_cmp(self, items: list[Token]) -> WidthRange:
        op, value = str(items[0]), str(items[1])
        if op.startswith(">"):
            return WidthRange(min=value)
        return WidthRange(max=value)

    def media_feature(self, items: list[Token]) -> MediaFeature:
        return MediaFeature(str(items[0]), str(items[1]))

    def container_cmp(self, items: list[Token | None]) -> ContainerQuery:
        name, inline, op, value = items
        axis = "inline" if inline is not None else None
        if str(op).startswith(">"):
            return ContainerQuery(str(name), min=str(value), axis=axis)
        return ContainerQuery(str(name), max=str(value), axis=axis)

    def container_style(self, items: list[Token]) -> ContainerStyle:
        return ContainerStyle(str(items[0]), str(items[1]))

    def supports(self, items: list[Token]) -> Supports:
        return Supports(str(items[0]))

    # ---- interpreter state ----

    def create_layers(self, items: list[Token]) -> ast.CreateLayers:
        return ast.CreateLayers(tuple(str(t) for t in items))

    def set_layer(self, items: list[Token]) -> ast.SetLayer:
        return ast.SetLayer(str(items[0]))

    def set_spacing(self, items: list[Token]) -> ast.SetSpacing:
        return ast.SetSpacing(_unquote(items[0]))

    def raw(self, items: list[Token]) -> ast.Raw:
        return ast.Raw(_unquote(items[0]))

    def import_css(self, items: list[Token]) -> ast.Import:
        media = str(items[1]).strip() if len(items) > 1 else ""
        return ast.Import(ast.ImportKind.CSS, _unquote(items[0]), media or None)

    def import_sql(self, items: list[Token]) -> ast.Import:
        return ast.Import(ast.ImportKind.SQL, _unquote(items[-1]))

    # ---- at-rules ----

    def create_font_face(self, items: list[object]) -> ast.CreateFontFace:
        return ast.CreateFontFace(_unquote(items[0]), items[1])  # type: ignore[arg-type]

    def drop_font_face(self, items: list[Token]) -> ast.DropFontFace:
        return ast.DropFontFace(_unquote(items[0]))

    def frame_offset(self, items: list[Token]) -> str:
        token = items[0]
        if token.type == "STRING":
            return _unquote(token)
        if token.type == "PERCENTAGE":
            return str(token)
        return str(token).lower()

    def keyframe(self, items: list[object]) -> ast.Keyframe:
        return ast.Keyframe(items[0], items[1])  # type: ignore[arg-type]

    def create_keyframes(self, items: list[object]) -> ast.CreateKeyframes:
        return ast.CreateKeyframes(str(items[0]), tuple(items[1:]))  # type: ignore[arg-type]

    def drop_keyframes(self, items: list[Token]) -> ast.DropKeyframes:
        return ast.DropKeyframes(str(items[0]))

    def create_property(self, items: list[object]) -> ast.CreateProperty:
        return ast.CreateProperty(_unquote(items[0]), items[1])  # type: ignore[arg-type]

    def drop_property(self, items: list[Token]) -> ast.DropProperty:
        return ast.DropProperty(_unquote(items[0]))

    def create_page(self, items: list[object]) -> ast.CreatePage:
        pseudo, declarations = items
        return ast.CreatePage(
            declarations,  # type: ignore[arg-type]
            _unquote(pseudo) if pseudo is not None else None,  # type: ignore[arg-type]
        )

    def drop_page(self, items: list[Token | None]) -> ast.DropPage:
        pseudo = items[0] if items else None
        return ast.DropPage(_unquote(pseudo) if pseudo is not None else None)

    def create_counter_style(self, items: list[object]) -> ast.CreateCounterStyle:
        return ast.CreateCounterStyle(str(items[0]), items[1])  # type: ignore[arg-type]

    def drop_counter_style(self, items: list[Token]) -> ast.DropCounterStyle:
        return ast.DropCounterStyle(str(items[0]))

    def create_font_feature_values(self, items: list[object]) -> ast.CreateFontFeatureValues:
        return ast.CreateFontFeatureValues(_unquote(items[0]), items[1])  # type: ignore[arg-type]

    def drop_font_feature_values(self, items: list[Token]) -> ast.DropFontFeatureValues:
        return ast.DropFontFeatureValues(_unquote(items[0]))

    def create_font_palette_values(self, items: list[object]) -> ast.CreateFontPaletteValues:
        return ast.CreateFontPaletteValues(_unquote(items[0]), items[1])  # type: ignore[arg-type]

    def drop_font_palette_values(self, items: list[Token]) -> ast.DropFontPaletteValues:
        return ast.DropFontPaletteValues(_unquote(items[0]))

    def create_starting_style(self, items: list[object]) -> ast.CreateStartingStyle:
        return ast.CreateStartingStyle(str(items[0]), items[1])  # type: ignore[arg-type]

    def drop_starting_style(self, items: list[Token]) -> ast.DropStartingStyle:
        return ast.DropStartingStyle(str(items[0]))

    # ---- introspection and transactions ----

    def select_props(self, items: list[object]) -> ast.SelectStyleProps:
        selector, where = items[0]  # type: ignore[misc]
        return ast.SelectStyleProps(selector, where)

    def describe_selector(self, items: list[Token]) -> ast.DescribeSelector:
        return ast.DescribeSelector(str(items[0]))

    def begin(self, items: list[Token]) -> ast.Begin:
        return ast.Begin()

    def commit(self, items: list[Token]) -> ast.Commit:
        return ast.Commit()

    def rollback(self, items: list[Token]) -> ast.Rollback:
        return ast.Rollback()

    def start(self, items: list[ast.Statement]) -> list[ast.Statement]:
        return list(items)


@lru_cache(maxsize=1)
def _parser() -> Lark:
    return Lark(
        GRAMMAR_PATH.read_text(encoding="utf-8"),
        parser="lalr",
        start="start",
        maybe_placeholders=True,
    )


def _parse_tree(source: str) -> tuple[Tree, int]:
    """Parse *source*, also counting the ``;`` terminals the lexer produced."""
    interactive = _parser().parse_interactive(source)
    tokens = list(interactive.iter_parse())
    tree = interactive.feed_eof(tokens[-1] if tokens else None)
    return tree, count_semicolons(tokens)


def parse_source(source: str, strict_semicolons: bool = False) -> list[ast.Statement]:
    """Parse ICBINCSS source text into an ordered list of statements."""
    try:
        tree, semicolons = _parse_tree(source)
    except LarkError as e:
        line = getattr(e, "line", None)
        column = getattr(e, "column", None)
        raise ParseError(str(e), line=line, column=column) from e
    try:
        statements = StatementTransformer().transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, ParseError):
            raise e.orig_exc from None
        raise ParseError(str(e.orig_exc)) from e
    if strict_semicolons:
        check_semicolons(semicolons, len(statements))
    return statements


def parse_file(path: Path, strict_semicolons: bool = False) -> list[ast.Statement]:
    """Read *path* as UTF-8 and parse it."""
    try:
        source = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(f"{path.name}: not valid UTF-8 ({e.reason} at byte {e.start})") from e
    except OSError as e:
        raise ParseError(f"Cannot read {path.name}: {e}") from e
    return parse_source(source, strict_semicolons=strict_semicolons)
