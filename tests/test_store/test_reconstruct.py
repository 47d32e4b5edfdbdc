"""Tests for lossless state <-> snapshot conversion."""

import pytest

from icbincss.cascade.builder import build_state
from icbincss.cascade.context import InterpreterContext
from icbincss.cascade.reconstruct import snapshot_from_state, state_from_snapshot
from icbincss.compiler import compile_state, compile_store
from icbincss.identity import EntityKind, entity_id
from icbincss.parser import parse_source
from icbincss.store import Database, SnapshotStore, run_migrations

RICH_SOURCE = """
IMPORT CSS 'reset.css' MEDIA screen;
CREATE TOKEN 'brand/500' VALUE #2266ee;
CREATE TOKEN 'gone' VALUE 1px;
DROP TOKEN 'gone';
CREATE SELECTOR btn AS AND(E('button'), C('primary'));
CREATE SELECTOR card AS C('card');
CREATE LAYERS (base, components);
CREATE STYLE SELECTOR btn (color = token('brand/500'), padding = 4px 8px);
ALTER STYLE SELECTOR btn WHERE width BETWEEN 600px AND 900px AND orientation = landscape SET margin = 0;
ALTER STYLE SELECTOR card WHERE supports(display: grid) AND container main inline > 400px SET display = grid;
ALTER STYLE SELECTOR card WHERE container card style(--compact: 1) SET gap = 0;
SET BUTTER = 'thick_smear';
SET LAYER = components;
CREATE STYLE SELECTOR title SCOPED TO card LIMIT btn (margin = BUTTER());
CREATE PROPERTY '--angle' (inherits = false, initial_value = 0deg);
CREATE FONT_FACE FAMILY 'Inter' (src = url(inter.woff2), font_weight = 400);
CREATE KEYFRAMES fade (from (opacity = 0), 50% (opacity = 0.5), to (opacity = 1));
CREATE PAGE ':first' (margin = 1in);
CREATE COUNTER_STYLE thumbs (system = cyclic);
CREATE FONT_FEATURE_VALUES 'Font One' (styleset_nice = 12);
CREATE FONT_PALETTE_VALUES '--brand' (font_family = Bixa);
CREATE STARTING_STYLE SELECTOR dialog (opacity = 0);
RAW '.legacy { zoom: 1; }';
"""

FIXED_NOW = "2024-01-01T00:00:00+00:00"


def _state(source: str = RICH_SOURCE, mid: str = "20240101000000__a"):
    ctx = InterpreterContext(
        migration_id=mid,
        origin_file="icbincss/migrations/up/a.sql",
        clock=lambda: FIXED_NOW,
    )
    return build_state(parse_source(source), ctx)


@pytest.fixture
def store():
    db = Database(":memory:")
    db.connect()
    run_migrations(db)
    yield SnapshotStore(db)
    db.close()


class TestRoundTrip:
    def test_state_round_trip_emits_same_css(self):
        state = _state()
        rebuilt = state_from_snapshot(snapshot_from_state(state))
        assert compile_state(rebuilt) == compile_state(state)

    def test_snapshot_is_stable(self):
        snapshot = snapshot_from_state(_state())
        assert snapshot_from_state(state_from_snapshot(snapshot)) == snapshot

    def test_through_sqlite(self, store):
        state = _state()
        store.save(snapshot_from_state(state))
        assert compile_store(store) == compile_state(state)

    def test_deleted_token_is_kept_as_row(self):
        snapshot = snapshot_from_state(_state())
        gone = [t for t in snapshot.tokens if t.name == "gone"]
        assert len(gone) == 1
        assert gone[0].deleted

    def test_ids_are_deterministic(self):
        snapshot = snapshot_from_state(_state())
        btn = next(s for s in snapshot.selectors if s.name == "btn")
        assert btn.id == entity_id(EntityKind.SELECTOR, "btn")
        assert snapshot_from_state(_state()) == snapshot

    def test_provenance_is_persisted(self):
        snapshot = snapshot_from_state(_state())
        assert all(row.migration_id == "20240101000000__a" for row in snapshot.styles)
        assert all(row.origin_file == "icbincss/migrations/up/a.sql" for row in snapshot.styles)


class TestIncrementalApplication:
    def test_second_file_over_reconstructed_state(self):
        first = "CREATE STYLE SELECTOR card (color = red); ALTER STYLE SELECTOR card WHERE width >= 600px SET color = blue;"
        second = "DELETE FROM style_props WHERE selector = card AND prop = 'color'; RAW 'x';"

        direct = build_state(parse_source(first), InterpreterContext(migration_id="m1"))
        direct = build_state(parse_source(second), InterpreterContext(migration_id="m2"), direct)

        persisted = build_state(parse_source(first), InterpreterContext(migration_id="m1"))
        persisted = state_from_snapshot(snapshot_from_state(persisted))
        persisted = build_state(parse_source(second), InterpreterContext(migration_id="m2"), persisted)

        assert compile_state(persisted) == compile_state(direct)
        assert compile_state(persisted) == ".card {\n  color: red;\n}\n\nx\n"
