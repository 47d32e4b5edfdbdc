"""CLI command: icbincss build -- compile the database to the output file."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from icbincss.cli.common import BUTTER_CHOICE, fail, load_config
from icbincss.compiler import compile_store
from icbincss.errors import IcbincssError
from icbincss.project import Project


@click.command()
@click.option("--butter", type=BUTTER_CHOICE, default=None, help="Override the spacing mode")
@click.option("--out", "out_file", default=None, help="Override the configured outFile")
@click.pass_obj
def build(project: Project, butter: str | None, out_file: str | None) -> None:
    """Compile the persisted store to CSS (outFile, default dist/icbincss.css)."""
    if not project.exists():
        click.echo("Missing ./icbincss. Run `icbincss init` first.", err=True)
        sys.exit(1)

    config = load_config(project, butter)
    out_path = Path(out_file or config.out_file)
    if not out_path.is_absolute():
        out_path = project.root / out_path

    click.echo("Loading DB and compiling to CSS...")
    try:
        with project.open_store() as store:
            css = compile_store(store, config.compiler)
    except IcbincssError as exc:
        fail(exc, prefix="Build failed during compile:")

    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(css, encoding="utf-8")
    click.echo(f"Wrote {out_path}")
