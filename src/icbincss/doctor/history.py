"""History-aware analysis: style writes that never reach the output.

Applied up migrations are replayed in order. A ``SET``-style write hides the
write it replaces; an ``ADD`` of a property the bucket already holds is
ignored. ``DELETE`` and ``DROP`` forget the selector's properties in every
wrapper of the active layer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from icbincss.cascade.responsive import Descriptor, normalize_where
from icbincss.cascade.values import css_property
from icbincss.errors import IcbincssError
from icbincss.migrate.engine import compute_applied_stack
from icbincss.model import ast
from icbincss.model.diagnostic import Diagnostic, Severity
from icbincss.parser import parse_file
from icbincss.project import Project
from icbincss.store.rows import MigrationRecord
from icbincss.stylesheet.emitter import describe_descriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StyleWrite:
    """One property written by a style statement."""

    filename: str
    selector: str
    prop: str
    layer: str | None = None
    scope_root: str | None = None
    scope_limit: str | None = None
    descriptor: Descriptor | None = None
    additive: bool = False

    @property
    def key(self) -> tuple[object, ...]:
        return (
            self.selector,
            self.layer,
            self.scope_root,
            self.scope_limit,
            self.descriptor,
            self.prop,
        )

    def context(self) -> str:
        parts = []
        if self.layer:
            parts.append(f"@layer {self.layer}")
        if self.descriptor is not None:
            parts.append(describe_descriptor(self.descriptor))
        if self.scope_root:
            scope = f"SCOPED TO {self.scope_root}"
            if self.scope_limit:
                scope += f" LIMIT {self.scope_limit}"
            parts.append(scope)
        return " ".join(parts)


def _diagnostic(kind: str, write: StyleWrite, fix: str) -> Diagnostic:
    context = write.context()
    where = f" ({context})" if context else ""
    return Diagnostic(
        rule="check_overridden_writes",
        severity=Severity.WARNING,
        message=f"{kind}: {write.selector} -> {write.prop} in {write.filename}{where}",
        table="migrations",
        fix=fix,
    )


class WriteTracker:
    """Replays style statements, keeping the live write per bucket property."""

    def __init__(self) -> None:
        self.live: dict[tuple[object, ...], StyleWrite] = {}
        self.diagnostics: list[Diagnostic] = []

    def feed(self, filename: str, statements: list[ast.Statement]) -> None:
        layer: str | None = None
        for stmt in statements:
            if isinstance(stmt, ast.SetLayer):
                layer = stmt.name
            elif isinstance(stmt, (ast.CreateStyle, ast.AlterStyle)):
                additive = (
                    isinstance(stmt, ast.AlterStyle) and stmt.action is ast.AlterAction.ADD
                )
                for descriptor in normalize_where(stmt.where):
                    for decl in stmt.declarations:
                        self._write(
                            StyleWrite(
                                filename=filename,
                                selector=stmt.selector,
                                prop=css_property(decl.name),
                                layer=layer,
                                scope_root=stmt.scope_root,
                                scope_limit=stmt.scope_limit,
                                descriptor=descriptor,
                                additive=additive,
                            )
                        )
            elif isinstance(stmt, ast.DeleteStyle):
                prop = css_property(stmt.prop) if stmt.prop is not None else None
                self._forget(stmt.selector, layer, prop)
            elif isinstance(stmt, ast.DropStyle):
                self._forget(stmt.selector, layer, None)

    def _write(self, write: StyleWrite) -> None:
        previous = self.live.get(write.key)
        if previous is None:
            self.live[write.key] = write
        elif write.additive:
            self.diagnostics.append(
                _diagnostic("Ignored ADD", write, "Use SET to replace an existing value")
            )
        else:
            self.diagnostics.append(
                _diagnostic(
                    "Overridden write", previous, f"Later written again in {write.filename}"
                )
            )
            self.live[write.key] = write

    def _forget(self, selector: str, layer: str | None, prop: str | None) -> None:
        for key, write in list(self.live.items()):
            if write.selector != selector or write.layer != layer:
                continue
            if prop is None or write.prop == prop:
                del self.live[key]


def analyze_history(
    project: Project, records: tuple[MigrationRecord, ...], strict_semicolons: bool = False
) -> list[Diagnostic]:
    """Replay every applied up migration and report unreachable writes.

    Files missing on disk or no longer parseable are skipped with a warning.
    """
    by_id = {r.migration_id: r for r in records if r.direction == "up"}
    tracker = WriteTracker()
    for migration_id in compute_applied_stack(records):
        record = by_id[migration_id]
        path = project.up_dir / record.filename
        if not path.exists():
            logger.warning("Skipping missing migration file %s", path)
            continue
        try:
            statements = parse_file(path, strict_semicolons=strict_semicolons)
        except IcbincssError as exc:
            logger.warning("Skipping %s: %s", record.filename, exc)
            continue
        tracker.feed(record.filename, statements)
    return tracker.diagnostics
