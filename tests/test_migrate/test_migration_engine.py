"""Tests for applying, reverting and rebuilding migrations."""

import logging

import pytest

from icbincss.cascade.builder import build_state
from icbincss.cascade.context import InterpreterContext
from icbincss.compiler import compile_state, compile_store
from icbincss.errors import MigrationError
from icbincss.migrate import (
    BOOTSTRAP_ID,
    MigrationEngine,
    check_migration_files,
    compute_applied_stack,
    pending_migrations,
)
from icbincss.parser import ParseError, parse_source
from icbincss.project import Project
from icbincss.store.rows import MigrationRecord, Snapshot

FIXED_NOW = "2024-01-01T00:00:00+00:00"

FIRST_UP = """
CREATE TOKEN 'brand/500' VALUE #2266ee;
CREATE SELECTOR card AS C('card');
CREATE STYLE SELECTOR card (color = token('brand/500'), padding = 4px);
"""
FIRST_DOWN = """
DROP STYLE SELECTOR card;
DROP SELECTOR card;
DROP TOKEN 'brand/500';
"""
SECOND_UP = """
ALTER STYLE SELECTOR card WHERE width >= 600px SET padding = 8px;
SET LAYER = base;
CREATE STYLE SELECTOR btn (margin = 0);
"""
SECOND_DOWN = """
DELETE FROM style_props WHERE selector = card AND prop = 'padding';
SET LAYER = base;
DROP STYLE SELECTOR btn;
"""


@pytest.fixture
def project(tmp_path):
    project = Project(tmp_path)
    project.ensure_layout()
    return project


@pytest.fixture
def store(project):
    with project.open_store() as store:
        yield store


@pytest.fixture
def engine(project, store):
    return MigrationEngine(project, store, clock=lambda: FIXED_NOW)


def write_pair(project, mid, up, down=None):
    (project.up_dir / f"{mid}.sql").write_text(up, encoding="utf-8")
    if down is not None:
        (project.down_dir / f"{mid}.sql").write_text(down, encoding="utf-8")


def _record(mid, direction="up"):
    return MigrationRecord(mid, f"{mid}.sql", direction, "x", FIXED_NOW)


# ---------------------------------------------------------------------------
# Log replay
# ---------------------------------------------------------------------------


class TestLogReplay:
    def test_up_pushes_down_pops(self):
        records = [_record("a"), _record("b"), _record("b", "down"), _record("c")]
        assert compute_applied_stack(records) == ["a", "c"]

    def test_down_on_empty_stack_is_ignored(self):
        assert compute_applied_stack([_record("a", "down"), _record("b")]) == ["b"]

    def test_pending_excludes_applied_ids(self, tmp_path):
        files = [tmp_path / "20240101000000__a.sql", tmp_path / "20240102000000__b.sql"]
        assert pending_migrations(files, ["20240101000000__a"]) == [files[1]]


# ---------------------------------------------------------------------------
# Up / down
# ---------------------------------------------------------------------------


class TestUpDown:
    def test_up_applies_first_pending(self, project, store, engine):
        write_pair(project, "20240101000000__first", FIRST_UP, FIRST_DOWN)
        write_pair(project, "20240102000000__second", SECOND_UP, SECOND_DOWN)
        record = engine.up()
        assert record.migration_id == "20240101000000__first"
        assert record.direction == "up"
        assert record.applied_at == FIXED_NOW
        assert record.seq == 1
        assert [p.name for p in engine.pending()] == ["20240102000000__second.sql"]
        assert compile_store(store) == (
            ":root {\n  --brand-500: #2266ee;\n}\n\n"
            ".card {\n  color: var(--brand-500);\n  padding: 4px;\n}\n"
        )

    def test_up_with_nothing_pending(self, engine):
        assert engine.up() is None

    def test_rows_carry_provenance(self, project, store, engine):
        write_pair(project, "20240101000000__first", FIRST_UP)
        engine.up()
        styles = store.load().styles
        assert {s.migration_id for s in styles} == {"20240101000000__first"}
        assert {s.origin_file for s in styles} == {
            "icbincss/migrations/up/20240101000000__first.sql"
        }

    def test_down_reverts_top(self, project, store, engine):
        write_pair(project, "20240101000000__first", FIRST_UP, FIRST_DOWN)
        write_pair(project, "20240102000000__second", SECOND_UP, SECOND_DOWN)
        engine.up()
        after_first = compile_store(store)
        engine.up()
        assert engine.applied_stack() == ["20240101000000__first", "20240102000000__second"]

        record = engine.down()
        assert record.direction == "down"
        assert record.migration_id == "20240102000000__second"
        assert compile_store(store) == after_first
        assert engine.applied_stack() == ["20240101000000__first"]

        engine.down()
        assert compile_store(store) == ""
        assert engine.applied_stack() == []
        assert len(engine.pending()) == 2

    def test_down_with_empty_stack(self, engine):
        assert engine.down() is None

    def test_missing_down_file(self, project, engine):
        write_pair(project, "20240101000000__first", FIRST_UP)
        engine.up()
        with pytest.raises(MigrationError, match="Missing DOWN migration for 20240101000000__first"):
            engine.down()

    def test_undecodable_file(self, project, store, engine):
        (project.up_dir / "20240101000000__latin1.sql").write_bytes(b"RAW '\xe9';")
        with pytest.raises(MigrationError, match="Cannot read migration 20240101000000__latin1.sql"):
            engine.up()
        assert store.migrations() == ()

    def test_parse_error_leaves_store_untouched(self, project, store, engine):
        write_pair(project, "20240101000000__first", FIRST_UP)
        write_pair(project, "20240102000000__bad", "CREATE NONSENSE;")
        engine.up()
        before = store.load()
        with pytest.raises(ParseError):
            engine.up()
        assert store.load() == before

    def test_status(self, project, engine):
        write_pair(project, "20240101000000__first", FIRST_UP)
        write_pair(project, "20240102000000__second", SECOND_UP)
        engine.up()
        engine.up()
        status = engine.status()
        assert status.applied == ["20240102000000__second", "20240101000000__first"]
        assert status.pending == []
        assert status.warnings == []


# ---------------------------------------------------------------------------
# Catalogs
# ---------------------------------------------------------------------------


class TestCatalogs:
    def test_first_migration_seeds_catalogs(self, project, store, engine):
        (project.icbincss_dir / "tokens.sql").write_text("CREATE TOKEN 'ink' VALUE #111;")
        (project.icbincss_dir / "selectors.sql").write_text("CREATE SELECTOR title AS E('h1');")
        write_pair(project, "20240101000000__first", "CREATE STYLE SELECTOR title (color = token('ink'));")
        engine.up()
        assert compile_store(store) == ":root {\n  --ink: #111;\n}\n\nh1 {\n  color: var(--ink);\n}\n"
        token = store.load().tokens[0]
        assert token.migration_id == BOOTSTRAP_ID
        assert token.origin_file == "icbincss/tokens.sql"

    def test_later_migrations_do_not_reseed(self, project, store, engine):
        write_pair(project, "20240101000000__first", "RAW 'a';")
        engine.up()
        (project.icbincss_dir / "tokens.sql").write_text("CREATE TOKEN 'late' VALUE 1px;")
        write_pair(project, "20240102000000__second", "RAW 'b';")
        engine.up()
        assert store.load().tokens == ()


# ---------------------------------------------------------------------------
# Rebuild and path equivalence
# ---------------------------------------------------------------------------


class TestRebuild:
    def _apply_all(self, project, engine):
        (project.icbincss_dir / "tokens.sql").write_text("CREATE TOKEN 'gap' VALUE 2px;")
        write_pair(project, "20240101000000__first", FIRST_UP, FIRST_DOWN)
        write_pair(project, "20240102000000__second", SECOND_UP, SECOND_DOWN)
        write_pair(project, "20240103000000__third", "RAW '.x { y: z; }';")
        engine.up()
        engine.up()
        engine.down()
        engine.up()
        engine.up()

    def test_rebuild_reproduces_live_store(self, project, store, engine):
        self._apply_all(project, engine)
        live = store.load()
        store.save(Snapshot())
        assert compile_store(store) == ""
        rebuilt = engine.rebuild()
        assert rebuilt == live
        assert store.load() == live

    def test_rebuild_keeps_log(self, project, store, engine):
        self._apply_all(project, engine)
        log = store.migrations()
        engine.rebuild()
        assert store.migrations() == log

    def test_live_matches_direct_compilation(self, project, store, engine):
        self._apply_all(project, engine)
        state = None
        for path in [
            project.icbincss_dir / "tokens.sql",
            project.up_dir / "20240101000000__first.sql",
            project.up_dir / "20240102000000__second.sql",
            project.up_dir / "20240103000000__third.sql",
        ]:
            state = build_state(parse_source(path.read_text()), InterpreterContext(), state)
        assert compile_store(store) == compile_state(state)

    def test_rebuild_skips_missing_files(self, project, store, engine, caplog):
        write_pair(project, "20240101000000__first", FIRST_UP)
        write_pair(project, "20240102000000__second", "RAW 'b';")
        engine.up()
        engine.up()
        (project.up_dir / "20240102000000__second.sql").unlink()
        with caplog.at_level(logging.WARNING, logger="icbincss.migrate.engine"):
            engine.rebuild()
        assert "Skipping missing migration file" in caplog.text
        assert store.load().raw_blocks == ()
        assert len(store.load().styles) == 2


# ---------------------------------------------------------------------------
# Drift
# ---------------------------------------------------------------------------


class TestDrift:
    def test_changed_file(self, project, engine):
        write_pair(project, "20240101000000__first", FIRST_UP)
        record = engine.up()
        (project.up_dir / "20240101000000__first.sql").write_text(FIRST_UP + "\nRAW 'x';")
        (warning,) = engine.status().warnings
        assert warning.filename == "20240101000000__first.sql"
        assert warning.expected == record.checksum
        assert warning.current not in (None, record.checksum)
        assert not warning.missing

    def test_missing_file(self, project, engine):
        write_pair(project, "20240101000000__first", FIRST_UP)
        engine.up()
        (project.up_dir / "20240101000000__first.sql").unlink()
        (warning,) = engine.status().warnings
        assert warning.missing

    def test_reverted_migration_is_not_checked(self, project, engine):
        write_pair(project, "20240101000000__first", FIRST_UP, FIRST_DOWN)
        engine.up()
        engine.down()
        (project.up_dir / "20240101000000__first.sql").write_text("RAW 'changed';")
        assert engine.status().warnings == []

    def test_verification_rule(self, project, store, engine):
        write_pair(project, "20240101000000__first", FIRST_UP)
        engine.up()
        (project.up_dir / "20240101000000__first.sql").write_text("RAW 'changed';")
        (diag,) = check_migration_files(project)(store.load())
        assert diag.is_warning
        assert diag.rule == "migration_checksum"
        assert "checksum changed" in diag.message
