"""WHERE condition trees attached to style statements.

The parser keeps the condition exactly as written; normalisation into a
responsive descriptor happens in :mod:`icbincss.cascade.responsive`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class WidthRange:
    min: str | None = None
    max: str | None = None


@dataclass(frozen=True)
class MediaFeature:
    feature: str
    value: str


@dataclass(frozen=True)
class ContainerQuery:
    name: str
    min: str | None = None
    max: str | None = None
    axis: str | None = None  # "inline" or None


@dataclass(frozen=True)
class ContainerStyle:
    name: str
    condition: str


@dataclass(frozen=True)
class Supports:
    condition: str


@dataclass(frozen=True)
class AllOf:
    parts: tuple[Condition, ...]


@dataclass(frozen=True)
class AnyOf:
    parts: tuple[Condition, ...]


Condition = Union[WidthRange, MediaFeature, ContainerQuery, ContainerStyle, Supports, AllOf, AnyOf]


def describe_condition(cond: Condition) -> str:
    """Render a condition back to DSL-like text for introspection output."""
    if isinstance(cond, WidthRange):
        if cond.min is not None and cond.max is not None:
            return f"width BETWEEN {cond.min} AND {cond.max}"
        if cond.min is not None:
            return f"width >= {cond.min}"
        return f"width <= {cond.max}"
    if isinstance(cond, MediaFeature):
        return f"{cond.feature} = {cond.value}"
    if isinstance(cond, ContainerQuery):
        axis = " inline" if cond.axis else ""
        bounds = []
        if cond.min is not None:
            bounds.append(f"container {cond.name}{axis} >= {cond.min}")
        if cond.max is not None:
            bounds.append(f"container {cond.name}{axis} <= {cond.max}")
        return " AND ".join(bounds) or f"container {cond.name}"
    if isinstance(cond, ContainerStyle):
        return f"container {cond.name} style{cond.condition}"
    if isinstance(cond, Supports):
        return f"supports{cond.condition}"
    if isinstance(cond, AllOf):
        return " AND ".join(_wrap(p) for p in cond.parts)
    return " OR ".join(_wrap(p) for p in cond.parts)


def _wrap(cond: Condition) -> str:
    text = describe_condition(cond)
    if isinstance(cond, (AllOf, AnyOf)):
        return f"({text})"
    return text
