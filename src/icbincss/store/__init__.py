from __future__ import annotations

from icbincss.store.db import Database
from icbincss.store.rows import MigrationRecord, Snapshot
from icbincss.store.schema import run_migrations
from icbincss.store.snapshot import SnapshotStore

__all__ = [
    "Database",
    "MigrationRecord",
    "Snapshot",
    "SnapshotStore",
    "run_migrations",
]
