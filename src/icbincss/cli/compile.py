"""CLI command: icbincss compile -- compile source files straight to CSS."""

from __future__ import annotations

from pathlib import Path

import click

from icbincss.cascade import InterpreterContext, build_state
from icbincss.cascade.state import CascadeState
from icbincss.cli.common import BUTTER_CHOICE, fail, load_config
from icbincss.compiler import compile_state
from icbincss.errors import IcbincssError
from icbincss.parser import parse_file
from icbincss.project import Project


@click.command("compile")
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--butter", type=BUTTER_CHOICE, default=None, help="Override the spacing mode")
@click.option("--out", "out_file", default=None, help="Write CSS here instead of stdout")
@click.pass_obj
def compile_files(
    project: Project, files: tuple[str, ...], butter: str | None, out_file: str | None
) -> None:
    """Compile FILES in order, without touching the database.

    Layer and spacing settings reset at the start of every file.
    """
    config = load_config(project, butter)
    state: CascadeState | None = None
    try:
        for name in files:
            path = Path(name)
            statements = parse_file(path, strict_semicolons=config.strict_semicolons)
            ctx = InterpreterContext(origin_file=project.relative(path))
            state = build_state(statements, ctx, state)
        css = compile_state(state or CascadeState(), config.compiler)
    except IcbincssError as exc:
        fail(exc)

    if out_file is None:
        click.echo(css, nl=False)
        return
    out_path = Path(out_file)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(css, encoding="utf-8")
    click.echo(f"Wrote {out_path}")
