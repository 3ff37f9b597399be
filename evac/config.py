"""Centralized configuration with validation and defaults.

Options can come from the environment or a YAML file. Applications should
build an EvacConfig and pass it to EvacBuilder.from_config() rather than
reading os.environ themselves.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .errors import ConfigError

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}

ENV_VARS = {
    "preserve_default": "EVAC_PRESERVE_DEFAULT",
    "include_threads": "EVAC_INCLUDE_THREADS",
    "synchronize_context": "EVAC_SYNCHRONIZE_CONTEXT",
}


def _parse_bool(raw: str, label: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigError(f"{label} must be a boolean, got {raw!r}", key=label)


@dataclass(frozen=True)
class EvacConfig:
    """Validated hook options."""

    preserve_default: bool = False
    include_threads: bool = True
    synchronize_context: bool = False

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> EvacConfig:
        """Load config from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        defaults = cls()
        values = {}
        for name, var in ENV_VARS.items():
            raw = env.get(var)
            values[name] = getattr(defaults, name) if raw is None else _parse_bool(raw, var)
        return cls(**values)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> EvacConfig:
        """Load config from a YAML mapping. Missing keys keep their defaults."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except OSError as exc:
            raise ConfigError(f"Cannot read config file {path}: {exc}", path=str(path)) from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}", path=str(path)) from exc
        return cls.from_mapping(data or {}, source=str(path))

    @classmethod
    def from_mapping(cls, data: Any, *, source: str = "<mapping>") -> EvacConfig:
        if not isinstance(data, dict):
            raise ConfigError(f"{source}: expected a mapping, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"{source}: unknown option(s) {unknown}", unknown=unknown)
        for key, value in data.items():
            if not isinstance(value, bool):
                raise ConfigError(
                    f"{source}: {key} must be a boolean, got {value!r}", key=key
                )
        return cls(**data)
