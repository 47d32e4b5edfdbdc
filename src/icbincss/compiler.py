"""Compiler entry points for the direct and persisted paths."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from icbincss.cascade.builder import build_state
from icbincss.cascade.context import InterpreterContext
from icbincss.cascade.reconstruct import state_from_snapshot
from icbincss.cascade.state import CascadeState
from icbincss.config import CompilerConfig
from icbincss.model.ast import Statement
from icbincss.parser import parse_source
from icbincss.store.snapshot import SnapshotStore
from icbincss.stylesheet import build_stylesheet, render

logger = logging.getLogger(__name__)


def compile_state(state: CascadeState, config: CompilerConfig | None = None) -> str:
    """Emit CSS for an already-built cascade state."""
    return render(build_stylesheet(state, config or CompilerConfig()))


def compile_statements(
    statements: Iterable[Statement],
    config: CompilerConfig | None = None,
    ctx: InterpreterContext | None = None,
) -> str:
    """Direct path: run statements through a fresh cascade and emit CSS."""
    return compile_state(build_state(statements, ctx), config)


def compile_source(
    text: str,
    config: CompilerConfig | None = None,
    origin_file: str | None = None,
) -> str:
    """Parse *text* and compile it on the direct path."""
    statements = parse_source(text)
    logger.debug("Compiling %d statement(s) from %s", len(statements), origin_file or "<string>")
    return compile_statements(statements, config, InterpreterContext(origin_file=origin_file))


def compile_store(store: SnapshotStore, config: CompilerConfig | None = None) -> str:
    """Persisted path: reconstruct the state from the store and emit CSS."""
    return compile_state(state_from_snapshot(store.load()), config)
