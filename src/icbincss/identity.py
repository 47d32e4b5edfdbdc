"""Deterministic, content-addressed identifiers.

Every entity id is ``uuid5(namespace(kind), natural_key)``, so the same
natural key always maps to the same id regardless of creation order.
"""

from __future__ import annotations

import uuid
from enum import Enum

BASE_NAMESPACE = uuid.NAMESPACE_DNS


class EntityKind(Enum):
    TOKEN = "token"
    SELECTOR = "selector"
    LAYER = "layer"
    STYLE = "style"
    PROPERTY = "property"
    FONT_FACE = "font_face"
    KEYFRAMES = "keyframes"
    RAW = "raw"
    IMPORT = "import"
    PAGE = "page"
    COUNTER_STYLE = "counter_style"
    FONT_FEATURE_VALUES = "font_feature_values"
    FONT_PALETTE_VALUES = "font_palette_values"
    STARTING_STYLE = "starting_style"


def namespace_for(kind: EntityKind) -> uuid.UUID:
    return uuid.uuid5(BASE_NAMESPACE, kind.value)


def entity_id(kind: EntityKind, natural_key: str) -> str:
    """Return the stable id for *natural_key* within *kind*."""
    return str(uuid.uuid5(namespace_for(kind), natural_key))


# ---------------------------------------------------------------------------
# Natural-key helpers for row-like entities
# ---------------------------------------------------------------------------


def style_key(migration_id: str, sequence: int) -> str:
    return f"{migration_id}:{sequence}"


def raw_key(migration_id: str, sequence: int) -> str:
    return f"{migration_id}:raw:{sequence}"


def import_key(migration_id: str, sequence: int) -> str:
    return f"{migration_id}:import:{sequence}"


def font_face_key(family: str, src: str | None) -> str:
    return f"{family}:{src or family}"


def page_key(pseudo: str | None) -> str:
    return pseudo or "default"
