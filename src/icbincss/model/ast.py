"""Statement nodes produced by the parser and consumed by the cascade builder.

A migration file parses to a flat, ordered ``list[Statement]``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from icbincss.model.condition import Condition
from icbincss.model.selector import SelectorDef


class AlterAction(Enum):
    ADD = "ADD"
    SET = "SET"


class ImportKind(Enum):
    CSS = "css"
    SQL = "sql"


@dataclass(frozen=True)
class Declaration:
    """One ``name = value`` pair. Names keep the DSL's underscores."""

    name: str
    value: str


# ---------------------------------------------------------------------------
# Tokens and selectors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CreateToken:
    name: str
    value: str


@dataclass(frozen=True)
class DropToken:
    name: str


@dataclass(frozen=True)
class DeleteToken:
    name: str


@dataclass(frozen=True)
class CreateSelector:
    name: str
    definition: SelectorDef


@dataclass(frozen=True)
class DropSelector:
    name: str


# ---------------------------------------------------------------------------
# Styles
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CreateStyle:
    selector: str
    declarations: tuple[Declaration, ...]
    where: Condition | None = None
    scope_root: str | None = None
    scope_limit: str | None = None


@dataclass(frozen=True)
class AlterStyle:
    selector: str
    action: AlterAction
    declarations: tuple[Declaration, ...]
    where: Condition | None = None
    scope_root: str | None = None
    scope_limit: str | None = None


@dataclass(frozen=True)
class DeleteStyle:
    """Delete one property (or every property when *prop* is None)."""

    selector: str
    prop: str | None = None


@dataclass(frozen=True)
class DropStyle:
    selector: str


# ---------------------------------------------------------------------------
# Interpreter state
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CreateLayers:
    names: tuple[str, ...]


@dataclass(frozen=True)
class SetLayer:
    name: str


@dataclass(frozen=True)
class SetSpacing:
    mode: str


@dataclass(frozen=True)
class Raw:
    css: str


@dataclass(frozen=True)
class Import:
    kind: ImportKind
    path: str
    media: str | None = None


# ---------------------------------------------------------------------------
# At-rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CreateFontFace:
    family: str
    declarations: tuple[Declaration, ...]


@dataclass(frozen=True)
class DropFontFace:
    family: str


@dataclass(frozen=True)
class Keyframe:
    offset: str
    declarations: tuple[Declaration, ...]


@dataclass(frozen=True)
class CreateKeyframes:
    name: str
    frames: tuple[Keyframe, ...]


@dataclass(frozen=True)
class DropKeyframes:
    name: str


@dataclass(frozen=True)
class CreateProperty:
    name: str
    declarations: tuple[Declaration, ...]


@dataclass(frozen=True)
class DropProperty:
    name: str


@dataclass(frozen=True)
class CreatePage:
    declarations: tuple[Declaration, ...]
    pseudo: str | None = None


@dataclass(frozen=True)
class DropPage:
    pseudo: str | None = None


@dataclass(frozen=True)
class CreateCounterStyle:
    name: str
    declarations: tuple[Declaration, ...]


@dataclass(frozen=True)
class DropCounterStyle:
    name: str


@dataclass(frozen=True)
class CreateFontFeatureValues:
    family: str
    declarations: tuple[Declaration, ...]


@dataclass(frozen=True)
class DropFontFeatureValues:
    family: str


@dataclass(frozen=True)
class CreateFontPaletteValues:
    name: str
    declarations: tuple[Declaration, ...]


@dataclass(frozen=True)
class DropFontPaletteValues:
    name: str


@dataclass(frozen=True)
class CreateStartingStyle:
    selector: str
    declarations: tuple[Declaration, ...]


@dataclass(frozen=True)
class DropStartingStyle:
    selector: str


# ---------------------------------------------------------------------------
# Introspection and transaction markers (no effect on compilation)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SelectStyleProps:
    selector: str
    where: Condition | None = None


@dataclass(frozen=True)
class DescribeSelector:
    name: str


@dataclass(frozen=True)
class Begin:
    pass


@dataclass(frozen=True)
class Commit:
    pass


@dataclass(frozen=True)
class Rollback:
    pass


Statement = Union[
    CreateToken, DropToken, DeleteToken,
    CreateSelector, DropSelector,
    CreateStyle, AlterStyle, DeleteStyle, DropStyle,
    CreateLayers, SetLayer, SetSpacing, Raw, Import,
    CreateFontFace, DropFontFace, CreateKeyframes, DropKeyframes,
    CreateProperty, DropProperty, CreatePage, DropPage,
    CreateCounterStyle, DropCounterStyle,
    CreateFontFeatureValues, DropFontFeatureValues,
    CreateFontPaletteValues, DropFontPaletteValues,
    CreateStartingStyle, DropStartingStyle,
    SelectStyleProps, DescribeSelector, Begin, Commit, Rollback,
]

NO_OP_STATEMENTS = (SelectStyleProps, DescribeSelector, Begin, Commit, Rollback)
