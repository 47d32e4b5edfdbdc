"""Migration files, log replay and the migration engine."""

from icbincss.migrate.engine import (
    BOOTSTRAP_ID,
    Direction,
    DriftWarning,
    MigrationEngine,
    MigrationStatus,
    check_migration_files,
    compute_applied_stack,
    find_drift,
    matching_down,
    pending_migrations,
)
from icbincss.migrate.files import (
    checksum,
    create_migration,
    list_down_migrations,
    list_up_migrations,
    migration_id_from_filename,
)

__all__ = [
    "BOOTSTRAP_ID",
    "Direction",
    "DriftWarning",
    "MigrationEngine",
    "MigrationStatus",
    "check_migration_files",
    "checksum",
    "compute_applied_stack",
    "create_migration",
    "find_drift",
    "list_down_migrations",
    "list_up_migrations",
    "matching_down",
    "migration_id_from_filename",
    "pending_migrations",
]
