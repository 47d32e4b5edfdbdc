"""On-disk project layout.

A project root holds ``icbincss.config.json`` and an ``icbincss/`` directory::

    icbincss/
        db/icbincss.sqlite3
        migrations/up/<timestamp>__<slug>.sql
        migrations/down/<timestamp>__<slug>.sql
        tokens.sql       (optional catalog)
        selectors.sql    (optional catalog)
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from icbincss.config import CONFIG_FILENAME, ProjectConfig
from icbincss.store.db import Database
from icbincss.store.schema import run_migrations
from icbincss.store.snapshot import SnapshotStore

PROJECT_DIR = "icbincss"
DB_FILENAME = "icbincss.sqlite3"
CATALOG_FILES = ("tokens.sql", "selectors.sql")


@dataclass(frozen=True)
class Project:
    root: Path

    @property
    def icbincss_dir(self) -> Path:
        return self.root / PROJECT_DIR

    @property
    def db_path(self) -> Path:
        return self.icbincss_dir / "db" / DB_FILENAME

    @property
    def up_dir(self) -> Path:
        return self.icbincss_dir / "migrations" / "up"

    @property
    def down_dir(self) -> Path:
        return self.icbincss_dir / "migrations" / "down"

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILENAME

    @property
    def catalogs(self) -> list[Path]:
        """Catalog files that exist, tokens before selectors."""
        return [self.icbincss_dir / name for name in CATALOG_FILES if (self.icbincss_dir / name).exists()]

    def exists(self) -> bool:
        return self.icbincss_dir.is_dir()

    def relative(self, path: Path) -> str:
        """Project-relative posix path, used as the origin file of rows."""
        try:
            return path.resolve().relative_to(self.root.resolve()).as_posix()
        except ValueError:
            return path.as_posix()

    def ensure_layout(self) -> None:
        for directory in (self.db_path.parent, self.up_dir, self.down_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def load_config(self) -> ProjectConfig:
        return ProjectConfig.load(self.root)

    @contextmanager
    def open_store(self) -> Iterator[SnapshotStore]:
        """Connect to the project database, creating tables as needed."""
        self.ensure_layout()
        db = Database(str(self.db_path))
        db.connect()
        try:
            run_migrations(db)
            yield SnapshotStore(db)
        finally:
            db.close()
