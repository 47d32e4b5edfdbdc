"""Migration engine: apply, revert, status and rebuild.

Every path goes through :meth:`MigrationEngine.apply_to_snapshot`, which
reconstructs a cascade from a snapshot, runs one file's statements through
the shared builder and flattens the result back into rows. Live application
and rebuild therefore produce the same store for the same history.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable

from icbincss.cascade.builder import build_state
from icbincss.cascade.context import InterpreterContext, utc_now
from icbincss.cascade.reconstruct import snapshot_from_state, state_from_snapshot
from icbincss.config import ProjectConfig
from icbincss.errors import MigrationError
from icbincss.migrate.files import (
    checksum,
    list_down_migrations,
    list_up_migrations,
    migration_id_from_filename,
)
from icbincss.model.diagnostic import Diagnostic, Severity
from icbincss.parser import parse_source
from icbincss.project import Project
from icbincss.store.rows import MigrationRecord, Snapshot
from icbincss.store.snapshot import SnapshotStore

logger = logging.getLogger(__name__)

BOOTSTRAP_ID = "bootstrap"


class Direction(Enum):
    UP = "up"
    DOWN = "down"


# ---------------------------------------------------------------------------
# Log replay
# ---------------------------------------------------------------------------


def compute_applied_stack(records: tuple[MigrationRecord, ...] | list[MigrationRecord]) -> list[str]:
    """Replay the log: ``up`` pushes, ``down`` pops. Last element is the top."""
    stack: list[str] = []
    for record in records:
        if record.direction == Direction.UP.value:
            stack.append(record.migration_id)
        elif record.direction == Direction.DOWN.value and stack:
            stack.pop()
    return stack


def pending_migrations(up_files: list[Path], applied: list[str]) -> list[Path]:
    applied_ids = set(applied)
    return [p for p in up_files if migration_id_from_filename(p.name) not in applied_ids]


def matching_down(project: Project, migration_id: str) -> Path | None:
    for path in list_down_migrations(project):
        if migration_id_from_filename(path.name) == migration_id:
            return path
    return None


# ---------------------------------------------------------------------------
# Drift detection
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DriftWarning:
    """An applied up-migration whose file is gone or has changed."""

    filename: str
    applied_at: str
    expected: str
    current: str | None = None

    @property
    def missing(self) -> bool:
        return self.current is None


def find_drift(project: Project, records: tuple[MigrationRecord, ...]) -> list[DriftWarning]:
    """Compare the latest ``up`` row of every applied id against the disk."""
    applied = set(compute_applied_stack(records))
    latest: dict[str, MigrationRecord] = {}
    for record in records:
        if record.direction == Direction.UP.value and record.migration_id in applied:
            latest[record.migration_id] = record

    warnings: list[DriftWarning] = []
    for record in latest.values():
        path = project.up_dir / record.filename
        if not path.exists():
            warnings.append(DriftWarning(record.filename, record.applied_at, record.checksum))
            continue
        current = checksum(path)
        if current != record.checksum:
            warnings.append(
                DriftWarning(record.filename, record.applied_at, record.checksum, current)
            )
    return warnings


def check_migration_files(project: Project) -> Callable[[Snapshot], list[Diagnostic]]:
    """Build a verification rule reporting drift as warnings."""

    def check(snapshot: Snapshot) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        for warning in find_drift(project, snapshot.migrations):
            if warning.missing:
                message = (
                    f"Migration file '{warning.filename}' is missing on disk "
                    f"(applied {warning.applied_at})"
                )
            else:
                message = (
                    f"Migration file '{warning.filename}' checksum changed: "
                    f"expected {warning.expected}, found {warning.current}"
                )
            diagnostics.append(
                Diagnostic(
                    rule="migration_checksum",
                    severity=Severity.WARNING,
                    message=message,
                    table="migrations",
                    fix="Restore the original file or rebuild from a fresh history",
                )
            )
        return diagnostics

    return check


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


@dataclass
class MigrationStatus:
    applied: list[str] = field(default_factory=list)  # top first
    pending: list[Path] = field(default_factory=list)
    warnings: list[DriftWarning] = field(default_factory=list)


class MigrationEngine:
    """Applies migration files against a project's store."""

    def __init__(
        self,
        project: Project,
        store: SnapshotStore,
        config: ProjectConfig | None = None,
        clock: Callable[[], str] = utc_now,
    ) -> None:
        self.project = project
        self.store = store
        self.config = config or ProjectConfig()
        self._clock = clock

    def _read(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise MigrationError(f"Cannot read migration {path.name}: {exc}") from exc

    def apply_to_snapshot(self, snapshot: Snapshot, path: Path, migration_id: str) -> Snapshot:
        """Run one statement file against *snapshot* and return the new rows."""
        statements = parse_source(
            self._read(path), strict_semicolons=self.config.strict_semicolons
        )
        ctx = InterpreterContext(
            migration_id=migration_id,
            origin_file=self.project.relative(path),
            clock=self._clock,
        )
        state = build_state(statements, ctx, state_from_snapshot(snapshot))
        return snapshot_from_state(state, snapshot.migrations)

    def seed_catalogs(self, snapshot: Snapshot) -> Snapshot:
        for path in self.project.catalogs:
            logger.info("Seeding catalog %s", path.name)
            snapshot = self.apply_to_snapshot(snapshot, path, BOOTSTRAP_ID)
        return snapshot

    def apply_file(self, path: Path, direction: Direction) -> MigrationRecord:
        """Apply *path* and append its log row in the same transaction.

        The first migration against an empty log also seeds the catalogs,
        matching what :meth:`rebuild` does.
        """
        started = time.perf_counter()
        migration_id = migration_id_from_filename(path.name)
        snapshot = self.store.load()
        if not snapshot.migrations:
            snapshot = self.seed_catalogs(snapshot)
        snapshot = self.apply_to_snapshot(snapshot, path, migration_id)
        record = MigrationRecord(
            migration_id=migration_id,
            filename=path.name,
            direction=direction.value,
            checksum=checksum(path),
            applied_at=self._clock(),
            duration_ms=int((time.perf_counter() - started) * 1000),
        )
        saved = self.store.save_with_record(snapshot, record)
        logger.info("Applied %s: %s", direction.value, path.name)
        return saved

    def applied_stack(self) -> list[str]:
        return compute_applied_stack(self.store.migrations())

    def pending(self) -> list[Path]:
        return pending_migrations(list_up_migrations(self.project), self.applied_stack())

    def up(self) -> MigrationRecord | None:
        """Apply the next pending up file; None when nothing is pending."""
        pending = self.pending()
        if not pending:
            return None
        return self.apply_file(pending[0], Direction.UP)

    def down(self) -> MigrationRecord | None:
        """Revert the top of the applied stack; None when nothing is applied."""
        stack = self.applied_stack()
        if not stack:
            return None
        top = stack[-1]
        path = matching_down(self.project, top)
        if path is None:
            raise MigrationError(f"Missing DOWN migration for {top}")
        return self.apply_file(path, Direction.DOWN)

    def status(self) -> MigrationStatus:
        records = self.store.migrations()
        stack = compute_applied_stack(records)
        return MigrationStatus(
            applied=list(reversed(stack)),
            pending=pending_migrations(list_up_migrations(self.project), stack),
            warnings=find_drift(self.project, records),
        )

    def rebuild(self) -> Snapshot:
        """Recreate every entity table by replaying the log from the files.

        The log itself is kept as is. Logged files missing on disk are
        skipped with a warning.
        """
        records = self.store.migrations()
        snapshot = self.seed_catalogs(Snapshot(migrations=records))
        for record in records:
            directory = (
                self.project.down_dir
                if record.direction == Direction.DOWN.value
                else self.project.up_dir
            )
            path = directory / record.filename
            if not path.exists():
                logger.warning("Skipping missing migration file %s", path)
                continue
            snapshot = self.apply_to_snapshot(snapshot, path, record.migration_id)
        self.store.save(snapshot)
        logger.info("Rebuilt store from %d logged migration(s)", len(records))
        return snapshot
