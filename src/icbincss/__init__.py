"""ICBINCSS: a SQL-flavoured stylesheet language with replayable migrations."""

__version__ = "0.1.0"

from icbincss.config import CompilerConfig, ProjectConfig  # noqa: E402
from icbincss.errors import (  # noqa: E402
    CompositionError,
    ConfigError,
    IcbincssError,
    MigrationError,
)

__all__ = [
    "__version__",
    "CompilerConfig",
    "ProjectConfig",
    "IcbincssError",
    "CompositionError",
    "ConfigError",
    "MigrationError",
]
