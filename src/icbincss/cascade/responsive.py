"""Normalisation of WHERE conditions into responsive descriptors.

A condition tree is first expanded into disjunctive normal form. Each
conjunction then collapses into exactly one :class:`Descriptor` (or
``None`` for "no wrapper"). Alternatives only ever expand media
conditions; container alternatives are rejected.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass

from icbincss.errors import CompositionError
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

MEDIA = "media"
CONTAINER = "container"
CONTAINER_STYLE = "container-style"
SUPPORTS = "supports"

RESPONSIVE_KINDS = (MEDIA, CONTAINER, CONTAINER_STYLE, SUPPORTS)


@dataclass(frozen=True)
class Descriptor:
    """A normalised responsive wrapper attached to a bucket.

    ``condition`` carries the free-form text of ``container-style`` and
    ``supports`` descriptors. ``supports`` is an extra ``@supports`` wrapper
    emitted around a media or container descriptor.
    """

    kind: str
    min: str | None = None
    max: str | None = None
    axis: str | None = None
    name: str | None = None
    condition: str | None = None
    features: tuple[str, ...] = ()
    supports: str | None = None


def normalize_where(where: Condition | None) -> list[Descriptor | None]:
    """Return one descriptor per bucket the condition addresses."""
    if where is None:
        return [None]
    alternatives = _dnf(where)
    if len(alternatives) > 1 and any(
        isinstance(atom, (ContainerQuery, ContainerStyle))
        for conj in alternatives
        for atom in conj
    ):
        raise CompositionError("OR composition not supported for container WHERE")
    return [_merge(conj) for conj in alternatives]


def _dnf(cond: Condition) -> list[list[Condition]]:
    if isinstance(cond, AnyOf):
        out: list[list[Condition]] = []
        for part in cond.parts:
            out.extend(_dnf(part))
        return out
    if isinstance(cond, AllOf):
        expanded = [_dnf(part) for part in cond.parts]
        return [
            [atom for conj in combo for atom in conj]
            for combo in itertools.product(*expanded)
        ]
    return [[cond]]


def _bound(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value or value.upper() == "INF":
        return None
    return value


def _merge(atoms: list[Condition]) -> Descriptor | None:
    width_min: str | None = None
    width_max: str | None = None
    features: list[str] = []
    supports: list[str] = []
    container: ContainerQuery | ContainerStyle | None = None

    for atom in atoms:
        if isinstance(atom, WidthRange):
            if atom.min is not None:
                width_min = _bound(atom.min)
            if atom.max is not None:
                width_max = _bound(atom.max)
        elif isinstance(atom, MediaFeature):
            features.append(f"({atom.feature.replace('_', '-')}: {atom.value.strip()})")
        elif isinstance(atom, Supports):
            supports.append(atom.condition.strip())
        elif isinstance(atom, ContainerQuery):
            container = _merge_container(container, atom)
        elif isinstance(atom, ContainerStyle):
            if container is not None:
                raise CompositionError("Cannot combine multiple containers")
            container = atom

    supports_cond = " and ".join(supports) or None
    has_media = width_min is not None or width_max is not None or bool(features)

    if container is not None:
        if has_media:
            raise CompositionError("Cannot combine media and container conditions")
        if isinstance(container, ContainerStyle):
            return Descriptor(
                kind=CONTAINER_STYLE,
                name=container.name,
                condition=container.condition,
                supports=supports_cond,
            )
        return Descriptor(
            kind=CONTAINER,
            name=container.name,
            min=_bound(container.min),
            max=_bound(container.max),
            axis=container.axis,
            supports=supports_cond,
        )
    if has_media:
        return Descriptor(
            kind=MEDIA,
            min=width_min,
            max=width_max,
            features=tuple(features),
            supports=supports_cond,
        )
    if supports_cond is not None:
        return Descriptor(kind=SUPPORTS, condition=supports_cond)
    return None


def _merge_container(
    current: ContainerQuery | ContainerStyle | None, atom: ContainerQuery
) -> ContainerQuery:
    if current is None:
        return atom
    if isinstance(current, ContainerStyle) or current.name != atom.name:
        raise CompositionError("Cannot combine multiple containers")
    return ContainerQuery(
        name=current.name,
        min=atom.min if atom.min is not None else current.min,
        max=atom.max if atom.max is not None else current.max,
        axis=atom.axis or current.axis,
    )
