"""CLI command: icbincss query -- SELECT / DESCRIBE against the store."""

from __future__ import annotations

import sys

import click

from icbincss.cascade import state_from_snapshot
from icbincss.cli.common import BUTTER_CHOICE, fail, load_config
from icbincss.errors import IcbincssError
from icbincss.introspect import describe_selector, select_rules
from icbincss.model.ast import DescribeSelector, SelectStyleProps
from icbincss.parser import ParseError, parse_source
from icbincss.project import Project
from icbincss.stylesheet.emitter import wrapper_headers


@click.command()
@click.argument("sql")
@click.option("--butter", type=BUTTER_CHOICE, default=None, help="Override the spacing mode")
@click.pass_obj
def query(project: Project, sql: str, butter: str | None) -> None:
    """Run SELECT style_props ... or DESCRIBE SELECTOR ... against the store."""
    try:
        statements = parse_source(sql)
    except ParseError as exc:
        fail(exc, prefix="Query parse error:")
    if not statements:
        click.echo("No query found")
        return
    stmt = statements[0]

    config = load_config(project, butter)
    with project.open_store() as store:
        state = state_from_snapshot(store.load())

    if isinstance(stmt, DescribeSelector):
        css = describe_selector(state, stmt)
        if css is None:
            click.echo(f"Selector not found: {stmt.name}")
            return
        click.echo(css)
        return

    if isinstance(stmt, SelectStyleProps):
        try:
            target, rules = select_rules(state, stmt, config.compiler)
        except IcbincssError as exc:
            fail(exc)
        if not rules:
            click.echo(f"No rules for {target}")
            return
        for rule in rules:
            wrappers = "".join(f" {h[:-2]}" for h in wrapper_headers(rule.descriptor))
            click.echo(f"{target}{wrappers} {{")
            for decl in rule.declarations:
                click.echo(f"  {decl.name}: {decl.value};")
            click.echo("}")
        return

    click.echo("Unsupported query type", err=True)
    sys.exit(1)
