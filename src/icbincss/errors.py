"""Exception hierarchy shared by the compiler, store and migration engine."""

from __future__ import annotations


class IcbincssError(Exception):
    """Base class for every error raised by icbincss."""


class CompositionError(IcbincssError):
    """Raised when WHERE conditions cannot be composed into one descriptor."""


class MigrationError(IcbincssError):
    """Raised when a migration file cannot be located or applied."""


class ConfigError(IcbincssError):
    """Raised when the project configuration file is malformed."""
