"""Compiler and project configuration.

Configuration is always passed explicitly into the compiler. Environment
variables and the project config file are only read here, by the loaders.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from icbincss.errors import ConfigError

CONFIG_FILENAME = "icbincss.config.json"
DEFAULT_OUT_FILE = "dist/icbincss.css"

ENV_DEFAULT_LAYERS = "ICBINCSS_DEFAULT_LAYERS"
ENV_TOKEN_PREFIX = "ICBINCSS_TOKEN_PREFIX"
ENV_SPACING_MODE = "ICBINCSS_BUTTER"


def _split_layers(raw: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class CompilerConfig:
    """Options that influence how a cascade is emitted as CSS.

    Attributes:
        default_layer_order: Layers seeded into the declared order before
            any ``CREATE LAYERS`` statement.
        token_var_prefix: Prepended to every token's custom-property name.
        forced_spacing_mode: When set, overrides every recorded spacing mode.
    """

    default_layer_order: tuple[str, ...] = ()
    token_var_prefix: str = ""
    forced_spacing_mode: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> CompilerConfig:
        env = os.environ if environ is None else environ
        return cls(
            default_layer_order=_split_layers(env.get(ENV_DEFAULT_LAYERS, "")),
            token_var_prefix=env.get(ENV_TOKEN_PREFIX, ""),
            forced_spacing_mode=env.get(ENV_SPACING_MODE) or None,
        )

    def merged_with_env(self, environ: Mapping[str, str] | None = None) -> CompilerConfig:
        """Return a copy where any variable present in *environ* wins."""
        env = os.environ if environ is None else environ
        updated = self
        if env.get(ENV_DEFAULT_LAYERS):
            updated = replace(updated, default_layer_order=_split_layers(env[ENV_DEFAULT_LAYERS]))
        if ENV_TOKEN_PREFIX in env:
            updated = replace(updated, token_var_prefix=env[ENV_TOKEN_PREFIX])
        if env.get(ENV_SPACING_MODE):
            updated = replace(updated, forced_spacing_mode=env[ENV_SPACING_MODE])
        return updated


@dataclass(frozen=True)
class ProjectConfig:
    out_file: str = DEFAULT_OUT_FILE
    strict_semicolons: bool = False
    compiler: CompilerConfig = field(default_factory=CompilerConfig)

    @classmethod
    def load(
        cls, root: Path, environ: Mapping[str, str] | None = None
    ) -> ProjectConfig:
        """Load ``icbincss.config.json`` from *root*, then apply env overrides."""
        path = root / CONFIG_FILENAME
        data: dict[str, object] = {}
        if path.exists():
            try:
                loaded = json.loads(path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as exc:
                raise ConfigError(f"{path.name}: {exc}") from exc
            if not isinstance(loaded, dict):
                raise ConfigError(f"{path.name}: expected a JSON object")
            data = loaded

        layers = data.get("defaultLayers", [])
        if not isinstance(layers, list) or not all(isinstance(x, str) for x in layers):
            raise ConfigError(f"{path.name}: defaultLayers must be a list of strings")

        compiler = CompilerConfig(
            default_layer_order=tuple(layers),
            token_var_prefix=str(data.get("tokenVarPrefix", "")),
        ).merged_with_env(environ)
        return cls(
            out_file=str(data.get("outFile", DEFAULT_OUT_FILE)),
            strict_semicolons=bool(data.get("strictSemicolons", False)),
            compiler=compiler,
        )

    def with_spacing_mode(self, mode: str) -> ProjectConfig:
        return replace(self, compiler=replace(self.compiler, forced_spacing_mode=mode))

    def to_json(self) -> str:
        payload = {
            "outFile": self.out_file,
            "strictSemicolons": self.strict_semicolons,
            "defaultLayers": list(self.compiler.default_layer_order),
            "tokenVarPrefix": self.compiler.token_var_prefix,
        }
        return json.dumps(payload, indent=2) + "\n"
