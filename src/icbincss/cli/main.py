"""ICBINCSS CLI entry point: Click group with subcommands."""

import logging
from pathlib import Path

import click

from icbincss import __version__
from icbincss.project import Project


@click.group()
@click.version_option(version=__version__, prog_name="icbincss")
@click.option(
    "--root",
    default=".",
    type=click.Path(file_okay=False),
    help="Project root (defaults to the current directory)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, root: str, verbose: bool) -> None:
    """ICBINCSS - SQL-flavoured stylesheets compiled to CSS."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = Project(Path(root))


# Import and register subcommands
from icbincss.cli.init import init  # noqa: E402
from icbincss.cli.compile import compile_files  # noqa: E402
from icbincss.cli.build import build  # noqa: E402
from icbincss.cli.migrate import migrate  # noqa: E402
from icbincss.cli.db import db  # noqa: E402
from icbincss.cli.inspect import inspect  # noqa: E402
from icbincss.cli.query import query  # noqa: E402
from icbincss.cli.doctor import doctor  # noqa: E402

cli.add_command(init)
cli.add_command(compile_files)
cli.add_command(build)
cli.add_command(migrate)
cli.add_command(db)
cli.add_command(inspect)
cli.add_command(query)
cli.add_command(doctor)
