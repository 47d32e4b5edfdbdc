"""Migration file discovery, naming and checksums."""

from __future__ import annotations

import hashlib
import re
from datetime import datetime
from pathlib import Path

from icbincss.errors import MigrationError
from icbincss.project import Project

_MIGRATION_NAME = re.compile(r"^(\d{8,}__[^.]+)\.sql$")
_UNSAFE_SLUG = re.compile(r"[^a-zA-Z0-9_-]+")

UP_SCAFFOLD = """\
-- UP migration: {slug} @ {timestamp} (UTC)
-- Add forward style changes below
-- Example:
-- ALTER STYLE SELECTOR btn SET color = #fff;
"""

DOWN_SCAFFOLD = """\
-- DOWN migration: {slug} @ {timestamp} (UTC)
-- Revert the changes from the UP migration
-- Example:
-- DELETE FROM style_props WHERE selector = btn AND prop = 'color';
"""


def migration_id_from_filename(name: str) -> str:
    """``20240101120000__add_card.sql`` -> ``20240101120000__add_card``."""
    match = _MIGRATION_NAME.match(name)
    if match:
        return match.group(1)
    return name[:-4] if name.endswith(".sql") else name


def _list_sql(directory: Path) -> list[Path]:
    if not directory.is_dir():
        return []
    return sorted(
        (p for p in directory.iterdir() if p.is_file() and p.name.lower().endswith(".sql")),
        key=lambda p: p.name,
    )


def list_up_migrations(project: Project) -> list[Path]:
    return _list_sql(project.up_dir)


def list_down_migrations(project: Project) -> list[Path]:
    return _list_sql(project.down_dir)


def checksum(path: Path) -> str:
    """SHA-1 hex digest of the raw file bytes."""
    return hashlib.sha1(path.read_bytes()).hexdigest()


def timestamp(now: datetime) -> str:
    return now.strftime("%Y%m%d%H%M%S")


def slugify(name: str) -> str:
    base = name.strip()
    if base.endswith(".sql"):
        base = base[:-4]
    return _UNSAFE_SLUG.sub("_", base)


def create_migration(project: Project, name: str, now: datetime) -> tuple[Path, Path]:
    """Write a paired up/down scaffold; refuses to overwrite."""
    slug = slugify(name)
    if not slug:
        raise MigrationError("Missing migration name")
    ts = timestamp(now)
    project.ensure_layout()
    up_path = project.up_dir / f"{ts}__{slug}.sql"
    down_path = project.down_dir / f"{ts}__{slug}.sql"
    if up_path.exists() or down_path.exists():
        raise MigrationError(f"Migration already exists with timestamp {ts}")
    up_path.write_text(UP_SCAFFOLD.format(slug=slug, timestamp=ts), encoding="utf-8")
    down_path.write_text(DOWN_SCAFFOLD.format(slug=slug, timestamp=ts), encoding="utf-8")
    return up_path, down_path
