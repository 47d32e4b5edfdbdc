"""CLI commands: icbincss db rebuild|verify."""

from __future__ import annotations

import sys

import click

from icbincss.cli.common import fail, load_config
from icbincss.errors import IcbincssError
from icbincss.migrate import MigrationEngine, check_migration_files
from icbincss.project import Project
from icbincss.verification import verify as run_verify


@click.group()
def db() -> None:
    """Database maintenance."""


@db.command()
@click.pass_obj
def rebuild(project: Project) -> None:
    """Recreate every table from the catalogs and the logged migration files."""
    config = load_config(project)
    try:
        with project.open_store() as store:
            MigrationEngine(project, store, config).rebuild()
    except IcbincssError as exc:
        fail(exc, prefix="DB rebuild failed:")
    click.echo("DB rebuilt from source files.")


@db.command()
@click.pass_obj
def verify(project: Project) -> None:
    """Check references, JSON blobs, duplicate names and checksum drift.

    Exits with code 1 when any ERROR is found.
    """
    with project.open_store() as store:
        diagnostics = run_verify(store.load(), extra_rules=[check_migration_files(project)])

    errors = [d for d in diagnostics if d.is_error]
    warnings = [d for d in diagnostics if d.is_warning]

    for diag in errors:
        click.echo(f"✗ ERROR: {diag.message}")
    for diag in warnings:
        click.echo(f"⚠ WARNING: {diag.message}")

    if not errors and not warnings:
        click.echo("\n✓ Database verification passed with no issues.")
        return
    click.echo(f"\nVerification finished with {len(errors)} error(s), {len(warnings)} warning(s).")
    if errors:
        sys.exit(1)
