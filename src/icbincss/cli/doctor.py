"""CLI command: icbincss doctor -- advisory conflict checks."""

from __future__ import annotations

import click

from icbincss.cascade import state_from_snapshot
from icbincss.cli.common import BUTTER_CHOICE, fail, load_config
from icbincss.doctor import analyze_history, diagnose
from icbincss.errors import IcbincssError
from icbincss.model.diagnostic import Diagnostic, Severity
from icbincss.project import Project
from icbincss.stylesheet import build_stylesheet

_MARKS = {Severity.ERROR: "✗", Severity.WARNING: "⚠", Severity.INFO: "ℹ"}


def _report(diagnostics: list[Diagnostic]) -> None:
    for diag in diagnostics:
        click.echo(f"{_MARKS[diag.severity]} {diag.severity.value}: {diag.message}")


@click.command()
@click.option("--history", is_flag=True, help="Flag writes overridden across applied migrations")
@click.option("--butter", type=BUTTER_CHOICE, default=None, help="Override the spacing mode")
@click.pass_obj
def doctor(project: Project, history: bool, butter: str | None) -> None:
    """Report repeated properties, shorthand clashes and cross-context overrides.

    Findings are advisory; the exit code is 0 unless the store cannot be read.
    """
    config = load_config(project, butter)
    with project.open_store() as store:
        snapshot = store.load()
    sheet = build_stylesheet(state_from_snapshot(snapshot), config.compiler)

    click.echo("Doctor report:")
    findings = diagnose(sheet)
    _report(findings)
    if not findings:
        click.echo("No obvious conflicts detected.")

    if not history:
        return
    click.echo()
    click.echo("History-aware analysis:")
    try:
        overridden = analyze_history(
            project, snapshot.migrations, strict_semicolons=config.strict_semicolons
        )
    except IcbincssError as exc:
        fail(exc)
    _report(overridden)
    if not overridden:
        click.echo("No unreachable rules detected across applied migrations.")
