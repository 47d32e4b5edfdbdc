"""Tests for the SQLite snapshot store."""

import pytest

from icbincss.store import Database, MigrationRecord, Snapshot, SnapshotStore, run_migrations
from icbincss.store.rows import SelectorRow, StyleRow, TokenRow


@pytest.fixture
def store():
    db = Database(":memory:")
    db.connect()
    run_migrations(db)
    yield SnapshotStore(db)
    db.close()


def _record(mid: str = "20240101000000__a", direction: str = "up") -> MigrationRecord:
    return MigrationRecord(
        migration_id=mid,
        filename=f"{mid}.sql",
        direction=direction,
        checksum="abc",
        applied_at="2024-01-01T00:00:00+00:00",
    )


# ---------------------------------------------------------------------------
# Snapshot persistence
# ---------------------------------------------------------------------------


class TestSnapshotStore:
    def test_empty_store_loads_empty_snapshot(self, store):
        assert store.load() == Snapshot()

    def test_schema_can_be_applied_twice(self, tmp_path):
        db = Database(str(tmp_path / "store.sqlite3"))
        db.connect()
        run_migrations(db)
        run_migrations(db)
        store = SnapshotStore(db)
        store.save(Snapshot(tokens=(TokenRow(id="t1", name="a", value="1px"),)))
        db.close()

        reopened = Database(str(tmp_path / "store.sqlite3"))
        reopened.connect()
        assert [t.name for t in SnapshotStore(reopened).load().tokens] == ["a"]
        reopened.close()

    def test_save_and_load(self, store):
        snapshot = Snapshot(
            tokens=(TokenRow(id="t1", name="ink", value="#111", deleted=True),),
            selectors=(SelectorRow(id="s1", name="card"),),
            styles=(StyleRow(id="r1", selector_id="s1", prop="color", value="red", sequence=1),),
        )
        store.save(snapshot)
        loaded = store.load()
        assert loaded.tokens == snapshot.tokens
        assert loaded.tokens[0].deleted is True
        assert loaded.styles == snapshot.styles

    def test_save_replaces_previous_rows(self, store):
        store.save(Snapshot(tokens=(TokenRow(id="t1", name="a", value="1px"),)))
        store.save(Snapshot(tokens=(TokenRow(id="t2", name="b", value="2px"),)))
        assert [t.name for t in store.load().tokens] == ["b"]

    def test_rows_keep_insertion_order(self, store):
        tokens = tuple(TokenRow(id=f"t{i}", name=n, value="0") for i, n in enumerate("zay"))
        store.save(Snapshot(tokens=tokens))
        assert [t.name for t in store.load().tokens] == ["z", "a", "y"]


# ---------------------------------------------------------------------------
# Migration log
# ---------------------------------------------------------------------------


class TestMigrationLog:
    def test_save_with_record_appends_log(self, store):
        saved = store.save_with_record(Snapshot(), _record())
        assert saved.seq == 1
        assert store.migrations() == (saved,)

    def test_save_with_record_replaces_tables(self, store):
        store.save(Snapshot(tokens=(TokenRow(id="t1", name="a", value="1px"),)))
        store.save_with_record(
            Snapshot(tokens=(TokenRow(id="t2", name="b", value="2px"),)), _record()
        )
        assert [t.name for t in store.load().tokens] == ["b"]

    def test_save_without_record_keeps_log(self, store):
        store.append_migration(_record())
        store.save(Snapshot())
        assert len(store.migrations()) == 1

    def test_log_order(self, store):
        store.append_migration(_record("20240101000000__a"))
        store.append_migration(_record("20240101000000__a", "down"))
        assert [m.direction for m in store.migrations()] == ["up", "down"]
        assert [m.seq for m in store.migrations()] == [1, 2]

    def test_failed_save_rolls_back(self, store):
        store.save(Snapshot(tokens=(TokenRow(id="t1", name="keep", value="1px"),)))
        bad = Snapshot(
            styles=(StyleRow(id="r1", selector_id="missing", prop="color", value="red"),)
        )
        with pytest.raises(Exception):
            store.save_with_record(bad, _record())
        assert [t.name for t in store.load().tokens] == ["keep"]
        assert store.migrations() == ()
