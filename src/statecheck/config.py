from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

from statecheck.constants import (
    DEFAULT_CONCURRENCY,
    DEFAULT_NUM_RUNS,
    DEFAULT_SHRINK_MAX_ITERATIONS,
    DEFAULT_SHRINK_MAX_SECONDS,
    SEED_ENV_VAR,
)
from statecheck.driver import DriverSettings
from statecheck.errors import ConfigError

_KNOWN_KEYS = {"target", "num_runs", "seed", "max_commands", "concurrency", "verbose", "shrink"}
_KNOWN_SHRINK_KEYS = {"max_seconds", "max_iterations"}


@dataclass(slots=True)
class StatecheckConfig:
    target: str | None = None
    num_runs: int = DEFAULT_NUM_RUNS
    seed: int | None = None
    max_commands: int | None = None
    concurrency: int = DEFAULT_CONCURRENCY
    verbose: bool = False
    shrink_max_seconds: float = DEFAULT_SHRINK_MAX_SECONDS
    shrink_max_iterations: int = DEFAULT_SHRINK_MAX_ITERATIONS
    source_path: Path | None = None

    def to_settings(self) -> DriverSettings:
        return DriverSettings(
            num_runs=self.num_runs,
            seed=self.seed,
            max_commands=self.max_commands,
            concurrency=self.concurrency,
            shrink_max_seconds=self.shrink_max_seconds,
            shrink_max_iterations=self.shrink_max_iterations,
            verbose=self.verbose,
        )


def _load_yaml(path: Path) -> dict[str, Any]:
    loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file must be a mapping: {path}")
    return loaded


def _parse_int(raw: Any, *, field_name: str, minimum: int) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ConfigError(f"{field_name} must be an integer")
    if raw < minimum:
        raise ConfigError(f"{field_name} must be >= {minimum}")
    return raw


def _parse_optional_int(raw: Any, *, field_name: str, minimum: int) -> int | None:
    if raw is None:
        return None
    return _parse_int(raw, field_name=field_name, minimum=minimum)


def _parse_shrink(raw: Any) -> tuple[float, int]:
    if raw is None:
        return DEFAULT_SHRINK_MAX_SECONDS, DEFAULT_SHRINK_MAX_ITERATIONS
    if not isinstance(raw, dict):
        raise ConfigError("shrink must be a mapping")
    unknown = sorted(set(raw) - _KNOWN_SHRINK_KEYS)
    if unknown:
        raise ConfigError(f"Unknown shrink key(s): {', '.join(unknown)}")

    max_seconds_raw = raw.get("max_seconds", DEFAULT_SHRINK_MAX_SECONDS)
    if isinstance(max_seconds_raw, bool) or not isinstance(max_seconds_raw, int | float):
        raise ConfigError("shrink.max_seconds must be a number")
    if max_seconds_raw <= 0:
        raise ConfigError("shrink.max_seconds must be > 0")
    max_iterations = _parse_int(
        raw.get("max_iterations", DEFAULT_SHRINK_MAX_ITERATIONS),
        field_name="shrink.max_iterations",
        minimum=1,
    )
    return float(max_seconds_raw), max_iterations


def parse_config(data: Mapping[str, Any], source_path: Path | None = None) -> StatecheckConfig:
    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"Unknown config key(s): {', '.join(unknown)}")

    target = data.get("target")
    if target is not None and (not isinstance(target, str) or ":" not in target):
        raise ConfigError("target must be a 'module:attribute' string")

    verbose = data.get("verbose", False)
    if not isinstance(verbose, bool):
        raise ConfigError("verbose must be a boolean")

    shrink_max_seconds, shrink_max_iterations = _parse_shrink(data.get("shrink"))
    return StatecheckConfig(
        target=target,
        num_runs=_parse_int(data.get("num_runs", DEFAULT_NUM_RUNS), field_name="num_runs", minimum=0),
        seed=_parse_optional_int(data.get("seed"), field_name="seed", minimum=0),
        max_commands=_parse_optional_int(data.get("max_commands"), field_name="max_commands", minimum=0),
        concurrency=_parse_int(data.get("concurrency", DEFAULT_CONCURRENCY), field_name="concurrency", minimum=1),
        verbose=verbose,
        shrink_max_seconds=shrink_max_seconds,
        shrink_max_iterations=shrink_max_iterations,
        source_path=source_path,
    )


def apply_env_overrides(config: StatecheckConfig, env: Mapping[str, str] | None = None) -> StatecheckConfig:
    environ = os.environ if env is None else env
    raw_seed = environ.get(SEED_ENV_VAR)
    if raw_seed is None or not raw_seed.strip():
        return config
    try:
        seed = int(raw_seed)
    except ValueError as exc:
        raise ConfigError(f"{SEED_ENV_VAR} must be an integer, got {raw_seed!r}") from exc
    return replace(config, seed=seed)


def load_config(path: Path | None, env: Mapping[str, str] | None = None) -> StatecheckConfig:
    """Load a config file; a missing default file yields defaults."""
    if path is None or not path.exists():
        config = StatecheckConfig()
    else:
        config = parse_config(_load_yaml(path), source_path=path.resolve())
    return apply_env_overrides(config, env)


__all__ = [
    "StatecheckConfig",
    "apply_env_overrides",
    "load_config",
    "parse_config",
]
