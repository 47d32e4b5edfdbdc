"""CLI command: icbincss init -- scaffold a project."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import click

from icbincss.migrate.files import timestamp
from icbincss.project import Project

BOOTSTRAP_SQL = """\
-- Bootstrap migration: tokens, selectors, and styles
CREATE TOKEN 'brand/500' VALUE #2266ee;
CREATE TOKEN 'space/4' VALUE 16px;

CREATE SELECTOR card AS C('card');
CREATE SELECTOR btn AS AND(E('button'), C('primary'));

CREATE STYLE SELECTOR card (
  background = #fff,
  padding = token('space/4')
);

CREATE STYLE SELECTOR btn (
  background = token('brand/500'),
  color = #fff
);
"""


@click.command()
@click.pass_obj
def init(project: Project) -> None:
    """Scaffold the icbincss/ directory, database and config file.

    Existing files are left untouched.
    """
    project.ensure_layout()
    with project.open_store():
        pass
    (project.root / "dist").mkdir(parents=True, exist_ok=True)

    if not any(p.name.endswith("__bootstrap.sql") for p in project.up_dir.iterdir()):
        ts = timestamp(datetime.now(timezone.utc))
        (project.up_dir / f"{ts}__bootstrap.sql").write_text(BOOTSTRAP_SQL, encoding="utf-8")
    if not project.config_path.exists():
        project.config_path.write_text(
            json.dumps({"outFile": "dist/icbincss.css"}, indent=2) + "\n", encoding="utf-8"
        )

    click.echo("Scaffolded icbincss project.")
    click.echo("- icbincss/migrations/<timestamp>__bootstrap.sql")
    click.echo("- icbincss.config.json")
