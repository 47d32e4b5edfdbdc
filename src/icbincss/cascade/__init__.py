"""The cascade: statement interpretation, in-memory state and its persistence."""

from icbincss.cascade.builder import CascadeBuilder, build_state
from icbincss.cascade.context import ADHOC_MIGRATION_ID, InterpreterContext
from icbincss.cascade.reconstruct import snapshot_from_state, state_from_snapshot
from icbincss.cascade.state import CascadeState

__all__ = [
    "ADHOC_MIGRATION_ID",
    "CascadeBuilder",
    "CascadeState",
    "InterpreterContext",
    "build_state",
    "snapshot_from_state",
    "state_from_snapshot",
]
