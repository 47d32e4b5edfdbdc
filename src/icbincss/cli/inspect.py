"""CLI command: icbincss inspect -- show the planned rules for a selector."""

from __future__ import annotations

import click

from icbincss.cascade import state_from_snapshot
from icbincss.cli.common import BUTTER_CHOICE, load_config
from icbincss.introspect import final_properties, rule_summary, rules_for_selector
from icbincss.project import Project


@click.command()
@click.argument("selector")
@click.option("--final", "-f", "show_final", is_flag=True, help="Show the final cascaded props")
@click.option("--butter", type=BUTTER_CHOICE, default=None, help="Override the spacing mode")
@click.pass_obj
def inspect(project: Project, selector: str, show_final: bool, butter: str | None) -> None:
    """Show every rule emitted for SELECTOR (a selector name or CSS).

    Each property is followed by the file that last wrote it.
    """
    config = load_config(project, butter)
    with project.open_store() as store:
        state = state_from_snapshot(store.load())
    target, rules = rules_for_selector(state, selector, config.compiler)

    if not rules:
        click.echo(f"No rules found for {selector}")
        return

    click.echo(f"Rules for {target}:")
    for rule in rules:
        click.echo(f"- {rule_summary(rule)}")
        for decl in rule.declarations:
            origin = f"  // {decl.origin_file}" if decl.origin_file else ""
            click.echo(f"  {decl.name}: {decl.value}{origin}")

    if show_final:
        click.echo()
        click.echo("Final cascaded props:")
        for name, value in final_properties(rules):
            click.echo(f"  {name}: {value};")
