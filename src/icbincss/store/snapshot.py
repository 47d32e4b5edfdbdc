"""Whole-snapshot persistence.

``load`` reads every table into a :class:`Snapshot`. ``save`` rewrites every
entity table inside a single transaction. The migration log is never
rewritten, only appended to.
"""

from __future__ import annotations

import sqlite3
from dataclasses import fields, replace
from typing import Any

from icbincss.store.db import Database
from icbincss.store.rows import (
    CounterStyleRow,
    FontFaceRow,
    FontFeatureValuesRow,
    FontPaletteValuesRow,
    ImportRow,
    KeyframesRow,
    LayerRow,
    MigrationRecord,
    PageRow,
    PropertyRow,
    RawBlockRow,
    SelectorRow,
    Snapshot,
    StartingStyleRow,
    StyleRow,
    TokenRow,
)
from icbincss.store.schema import ENTITY_TABLES

# (snapshot attribute == table name, row type), parents before children.
TABLE_ROWS: tuple[tuple[str, type], ...] = (
    ("tokens", TokenRow),
    ("selectors", SelectorRow),
    ("layers", LayerRow),
    ("styles", StyleRow),
    ("properties", PropertyRow),
    ("font_faces", FontFaceRow),
    ("keyframes", KeyframesRow),
    ("raw_blocks", RawBlockRow),
    ("imports", ImportRow),
    ("pages", PageRow),
    ("counter_styles", CounterStyleRow),
    ("font_feature_values", FontFeatureValuesRow),
    ("font_palette_values", FontPaletteValuesRow),
    ("starting_styles", StartingStyleRow),
)

_BOOL_COLUMNS = frozenset({"deleted"})


def _columns(row_type: type) -> list[str]:
    return [f.name for f in fields(row_type)]


def _from_sqlite(row_type: type, row: sqlite3.Row) -> Any:
    kwargs = {}
    for col in _columns(row_type):
        value = row[col]
        kwargs[col] = bool(value) if col in _BOOL_COLUMNS else value
    return row_type(**kwargs)


def _to_params(row: Any) -> tuple:
    return tuple(getattr(row, col) for col in _columns(type(row)))


class SnapshotStore:
    """Loads and saves the full relational snapshot."""

    def __init__(self, db: Database) -> None:
        self._db = db

    @property
    def db(self) -> Database:
        return self._db

    def load(self) -> Snapshot:
        tables: dict[str, tuple] = {}
        for table, row_type in TABLE_ROWS:
            rows = self._db.fetch_all(f"SELECT * FROM {table} ORDER BY rowid")
            tables[table] = tuple(_from_sqlite(row_type, r) for r in rows)
        return Snapshot(**tables, migrations=self.migrations())

    def save(self, snapshot: Snapshot) -> None:
        """Replace every entity table with the rows in *snapshot*."""
        with self._db.transaction() as db:
            self._replace_rows(db, snapshot)

    def save_with_record(self, snapshot: Snapshot, record: MigrationRecord) -> MigrationRecord:
        """Replace the entity tables and append *record* to the log.

        Both happen in one transaction, so a failure leaves the tables and
        the log as they were.
        """
        with self._db.transaction() as db:
            self._replace_rows(db, snapshot)
            return self._insert_migration(db, record)

    @staticmethod
    def _replace_rows(db: Database, snapshot: Snapshot) -> None:
        for table in ENTITY_TABLES:
            db.execute(f"DELETE FROM {table}")
        for table, row_type in TABLE_ROWS:
            rows = getattr(snapshot, table)
            if not rows:
                continue
            cols = _columns(row_type)
            db.executemany(
                f"INSERT INTO {table} ({', '.join(cols)}) "
                f"VALUES ({', '.join('?' for _ in cols)})",
                [_to_params(r) for r in rows],
            )

    # ---- migration log ----

    def migrations(self) -> tuple[MigrationRecord, ...]:
        rows = self._db.fetch_all("SELECT * FROM migrations ORDER BY seq")
        return tuple(_from_sqlite(MigrationRecord, r) for r in rows)

    def append_migration(self, record: MigrationRecord) -> MigrationRecord:
        """Append one log entry and return it with its sequence number."""
        with self._db.transaction() as db:
            return self._insert_migration(db, record)

    @staticmethod
    def _insert_migration(db: Database, record: MigrationRecord) -> MigrationRecord:
        cursor = db.execute(
            """INSERT INTO migrations
               (migration_id, filename, direction, checksum, applied_at, duration_ms, status)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                record.migration_id,
                record.filename,
                record.direction,
                record.checksum,
                record.applied_at,
                record.duration_ms,
                record.status,
            ),
        )
        return replace(record, seq=cursor.lastrowid)
