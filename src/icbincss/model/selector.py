"""Selector definition trees, as produced by ``CREATE SELECTOR``."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

ATTR_OPERATORS = frozenset({"=", "^=", "$=", "*=", "~=", "|="})
ATTR_FLAGS = frozenset({"i", "s"})


class JoinType(Enum):
    AND = "AND"
    DESC = "DESC"
    CHILD = "CHILD"
    ADJ = "ADJ"
    SIB = "SIB"


@dataclass(frozen=True)
class Element:
    value: str


@dataclass(frozen=True)
class Class:
    value: str


@dataclass(frozen=True)
class Id:
    value: str


@dataclass(frozen=True)
class Pseudo:
    value: str


@dataclass(frozen=True)
class PseudoElement:
    value: str


@dataclass(frozen=True)
class Attr:
    """Attribute selector; presence-only when *value* is None."""

    name: str
    value: str | None = None
    operator: str | None = None
    flag: str | None = None


@dataclass(frozen=True)
class Ref:
    """Reference to another named selector."""

    name: str


@dataclass(frozen=True)
class And:
    parts: tuple[SelectorDef, ...]


@dataclass(frozen=True)
class Or:
    parts: tuple[SelectorDef, ...]


@dataclass(frozen=True)
class Child:
    parent: SelectorDef
    child: SelectorDef


@dataclass(frozen=True)
class Descendant:
    ancestor: SelectorDef
    descendant: SelectorDef


@dataclass(frozen=True)
class Join:
    join_type: JoinType
    left: SelectorDef
    right: SelectorDef


SelectorDef = Union[
    Element, Class, Id, Pseudo, PseudoElement, Attr, Ref, And, Or, Child, Descendant, Join
]
