from __future__ import annotations

from icbincss.store.db import Database

SCHEMA = """
CREATE TABLE IF NOT EXISTS tokens (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    value TEXT NOT NULL,
    origin_file TEXT,
    migration_id TEXT,
    deleted INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL DEFAULT '',
    updated_at TEXT NOT NULL DEFAULT ''
);

CREATE TABLE IF NOT EXISTS selectors (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    def_json TEXT,
    origin_file TEXT,
    migration_id TEXT,
    deleted INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL DEFAULT '',
    updated_at TEXT NOT NULL DEFAULT ''
);

CREATE TABLE IF NOT EXISTS layers (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    order_index INTEGER,
    origin_file TEXT,
    migration_id TEXT
);

CREATE TABLE IF NOT EXISTS styles (
    id TEXT PRIMARY KEY,
    selector_id TEXT NOT NULL,
    layer_id TEXT,
    scope_root_id TEXT,
    scope_limit_id TEXT,
    prop TEXT NOT NULL,
    value TEXT NOT NULL,
    resp_kind TEXT,
    resp_min TEXT,
    resp_max TEXT,
    resp_axis TEXT,
    container_name TEXT,
    condition TEXT,
    supports TEXT,
    spacing_mode TEXT,
    sequence INTEGER NOT NULL DEFAULT 0,
    touched INTEGER NOT NULL DEFAULT 0,
    origin_file TEXT,
    migration_id TEXT,
    FOREIGN KEY (selector_id) REFERENCES selectors(id),
    FOREIGN KEY (layer_id) REFERENCES layers(id),
    FOREIGN KEY (scope_root_id) REFERENCES selectors(id),
    FOREIGN KEY (scope_limit_id) REFERENCES selectors(id)
);

CREATE TABLE IF NOT EXISTS properties (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    syntax TEXT,
    inherits TEXT,
    initial_value TEXT,
    origin_file TEXT,
    migration_id TEXT
);

CREATE TABLE IF NOT EXISTS font_faces (
    id TEXT PRIMARY KEY,
    family TEXT NOT NULL,
    src TEXT,
    props_json TEXT NOT NULL DEFAULT '[]',
    origin_file TEXT,
    migration_id TEXT
);

CREATE TABLE IF NOT EXISTS keyframes (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    frames_json TEXT NOT NULL DEFAULT '[]',
    origin_file TEXT,
    migration_id TEXT
);

CREATE TABLE IF NOT EXISTS raw_blocks (
    id TEXT PRIMARY KEY,
    css TEXT NOT NULL,
    sequence INTEGER NOT NULL DEFAULT 0,
    origin_file TEXT,
    migration_id TEXT
);

CREATE TABLE IF NOT EXISTS imports (
    id TEXT PRIMARY KEY,
    import_type TEXT NOT NULL,
    path TEXT NOT NULL,
    media TEXT,
    sequence INTEGER NOT NULL DEFAULT 0,
    origin_file TEXT,
    migration_id TEXT
);

CREATE TABLE IF NOT EXISTS pages (
    id TEXT PRIMARY KEY,
    pseudo TEXT,
    props_json TEXT NOT NULL DEFAULT '[]',
    origin_file TEXT,
    migration_id TEXT
);

CREATE TABLE IF NOT EXISTS counter_styles (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    props_json TEXT NOT NULL DEFAULT '[]',
    origin_file TEXT,
    migration_id TEXT
);

CREATE TABLE IF NOT EXISTS font_feature_values (
    id TEXT PRIMARY KEY,
    family TEXT NOT NULL,
    features_json TEXT NOT NULL DEFAULT '[]',
    origin_file TEXT,
    migration_id TEXT
);

CREATE TABLE IF NOT EXISTS font_palette_values (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    props_json TEXT NOT NULL DEFAULT '[]',
    origin_file TEXT,
    migration_id TEXT
);

CREATE TABLE IF NOT EXISTS starting_styles (
    id TEXT PRIMARY KEY,
    selector_id TEXT NOT NULL,
    props_json TEXT NOT NULL DEFAULT '[]',
    origin_file TEXT,
    migration_id TEXT,
    FOREIGN KEY (selector_id) REFERENCES selectors(id)
);

CREATE TABLE IF NOT EXISTS migrations (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    migration_id TEXT NOT NULL,
    filename TEXT NOT NULL,
    direction TEXT NOT NULL,
    checksum TEXT NOT NULL,
    applied_at TEXT NOT NULL,
    duration_ms INTEGER NOT NULL DEFAULT 0,
    status TEXT NOT NULL DEFAULT 'ok'
);

CREATE INDEX IF NOT EXISTS idx_styles_selector_id ON styles(selector_id);
CREATE INDEX IF NOT EXISTS idx_styles_layer_id ON styles(layer_id);
CREATE INDEX IF NOT EXISTS idx_styles_migration_id ON styles(migration_id);
"""

# Child tables come first so deletes never violate a foreign key.
ENTITY_TABLES = (
    "styles",
    "starting_styles",
    "tokens",
    "selectors",
    "layers",
    "properties",
    "font_faces",
    "keyframes",
    "raw_blocks",
    "imports",
    "pages",
    "counter_styles",
    "font_feature_values",
    "font_palette_values",
)


def run_migrations(db: Database) -> None:
    """Create all tables."""
    db.connection.executescript(SCHEMA)
