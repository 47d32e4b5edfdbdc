"""Interpreter context threaded through one pass of the cascade builder."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

ADHOC_MIGRATION_ID = "adhoc"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class InterpreterContext:
    """Ambient state for a single statement file.

    ``active_layer`` and ``spacing_mode`` are sticky until changed by
    ``SET LAYER`` / ``SET BUTTER`` and start empty for every file.
    """

    migration_id: str = ADHOC_MIGRATION_ID
    origin_file: str | None = None
    active_layer: str | None = None
    spacing_mode: str | None = None
    clock: Callable[[], str] = field(default=utc_now, repr=False)

    def now(self) -> str:
        return self.clock()
