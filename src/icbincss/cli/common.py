"""Helpers shared by the CLI commands."""

from __future__ import annotations

import sys
from typing import NoReturn

import click

from icbincss.cascade.values import SPACING_SIZES
from icbincss.config import ProjectConfig
from icbincss.errors import CompositionError, ConfigError, MigrationError
from icbincss.parser import ParseError
from icbincss.project import Project

BUTTER_CHOICE = click.Choice(sorted(SPACING_SIZES), case_sensitive=False)

_ERROR_KINDS: tuple[tuple[type[Exception], str], ...] = (
    (ParseError, "Parse"),
    (CompositionError, "Composition"),
    (MigrationError, "Migration"),
    (ConfigError, "Config"),
)


def error_kind(exc: Exception) -> str:
    for exc_type, kind in _ERROR_KINDS:
        if isinstance(exc, exc_type):
            return kind
    return "Error"


def fail(exc: Exception, prefix: str | None = None) -> NoReturn:
    """Report *exc* on stderr and exit with status 1."""
    label = prefix or f"{error_kind(exc)} error:"
    click.echo(f"{label} {exc}", err=True)
    sys.exit(1)


def load_config(project: Project, butter: str | None = None) -> ProjectConfig:
    """Project config with env overrides, then the ``--butter`` override."""
    try:
        config = project.load_config()
    except ConfigError as exc:
        fail(exc)
    if butter:
        config = config.with_spacing_mode(butter.lower())
    return config
