"""Engine limits and TOML configuration loading."""
from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("dicey.toml")


@dataclass(frozen=True)
class Limits:
    """Bounds that keep parsing and rolling cheap on hostile input."""

    max_input_length: int = 1000
    max_dice: int = 5000
    max_iterations: int = 100  # rerolls or explosions for a single die
    max_repeat: int = 100
    max_depth: int = 100  # nesting of operators, parentheses and variables


DEFAULT_LIMITS = Limits()


def load_config(path: Path | str | None = None) -> dict[str, Any]:
    """Load a TOML config file, or ``{}`` if it does not exist."""
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        if path is not None:
            logger.warning("Config file %s not found, using defaults.", config_path)
        return {}
    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    logger.info("Loaded config from %s", config_path)
    return data


def limits_from_config(config: dict[str, Any]) -> Limits:
    """Build ``Limits`` from the ``[engine]`` table, falling back to defaults."""
    engine_cfg = config.get("engine", {})
    known = {f.name for f in fields(Limits)}
    for key in engine_cfg:
        if key not in known:
            logger.warning("Ignoring unknown engine setting: %s", key)
    values = {key: value for key, value in engine_cfg.items() if key in known}
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"engine.{key} must be an integer, got {value!r}")
        if value < 1:
            raise ValueError(f"engine.{key} must be positive, got {value}")
    return Limits(**values)
