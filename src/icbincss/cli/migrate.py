"""CLI commands: icbincss migrate create|up|down|status."""

from __future__ import annotations

import os
import sys
from datetime import datetime, timezone

import click

from icbincss.cli.common import fail, load_config
from icbincss.errors import IcbincssError
from icbincss.migrate import MigrationEngine, create_migration, migration_id_from_filename
from icbincss.project import Project


@click.group()
def migrate() -> None:
    """Create, apply, revert and inspect migrations."""


@migrate.command()
@click.option("--name", required=True, help="Base name, e.g. add_button_color or style.sql")
@click.pass_obj
def create(project: Project, name: str) -> None:
    """Create a timestamped up/down migration pair."""
    try:
        up_path, down_path = create_migration(project, name, datetime.now(timezone.utc))
    except IcbincssError as exc:
        fail(exc)
    click.echo("Created:")
    for path in (up_path, down_path):
        click.echo(" - " + os.path.relpath(path, project.root))


@migrate.command()
@click.pass_obj
def up(project: Project) -> None:
    """Apply the next pending up migration and log it."""
    config = load_config(project)
    try:
        with project.open_store() as store:
            record = MigrationEngine(project, store, config).up()
    except IcbincssError as exc:
        fail(exc)
    if record is None:
        click.echo("No pending up migrations.")
        return
    click.echo(f"Applied up: {record.filename}")


@migrate.command()
@click.pass_obj
def down(project: Project) -> None:
    """Revert the last applied migration with its down file and log it."""
    config = load_config(project)
    try:
        with project.open_store() as store:
            record = MigrationEngine(project, store, config).down()
    except IcbincssError as exc:
        fail(exc)
    if record is None:
        click.echo("No applied migrations to revert.")
        return
    click.echo(f"Applied down: {record.filename}")


@migrate.command()
@click.option("--strict", is_flag=True, help="Exit with code 1 when checksum drift is found")
@click.pass_obj
def status(project: Project, strict: bool) -> None:
    """Show the applied stack, pending files and checksum drift."""
    with project.open_store() as store:
        report = MigrationEngine(project, store, load_config(project)).status()

    click.echo("Applied (top → bottom):")
    if not report.applied:
        click.echo("  (none)")
    for migration_id in report.applied:
        click.echo(f"  {migration_id}")
    click.echo()
    click.echo("Pending:")
    if not report.pending:
        click.echo("  (none)")
    for path in report.pending:
        click.echo(f"  {migration_id_from_filename(path.name)}")

    if not report.applied:
        return
    click.echo()
    click.echo("Warnings:")
    if not report.warnings:
        click.echo("  (none)")
    for warning in report.warnings:
        if warning.missing:
            click.echo(f"  {warning.filename} is missing on disk (applied {warning.applied_at})")
            continue
        click.echo(f"  {warning.filename} (applied {warning.applied_at}) ⚠ CHECKSUM MISMATCH")
        click.echo(f"    Current:  {warning.current}")
        click.echo(f"    Expected: {warning.expected}")
    if report.warnings and strict:
        sys.exit(1)
