"""
Configuration for the multijack service.

Configuration is a nested dictionary. Callers pass only the keys they want to
change; everything else comes from DEFAULT_CONFIG. Environment variables are
applied on top of the defaults and below explicit overrides.
"""

import copy
import math
import os
from typing import Any, Dict, Mapping, Optional

from multijack.blackjack.errors import BlackjackError


class ConfigError(BlackjackError):
    """A configuration value is missing or invalid."""


DEFAULT_CONFIG: Dict[str, Any] = {
    "deck": {"shuffle": True, "timeout": 2.0},
    "game": {"timeout": 2.0, "register_dealer": True},
    "agent": {"interval": 5.0, "max_fetch_failures": 3},
    "events": {"log_path": None},
    "logging": {"level": "INFO"},
}

# Environment variable -> (section, key, converter)
ENVIRONMENT_OVERRIDES = {
    "MULTIJACK_AGENT_INTERVAL": ("agent", "interval", float),
    "MULTIJACK_AGENT_MAX_FETCH_FAILURES": ("agent", "max_fetch_failures", int),
    "MULTIJACK_DECK_TIMEOUT": ("deck", "timeout", float),
    "MULTIJACK_GAME_TIMEOUT": ("game", "timeout", float),
    "MULTIJACK_EVENT_LOG": ("events", "log_path", str),
    "MULTIJACK_LOG_LEVEL": ("logging", "level", str),
}


def merge_config(base: Dict[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Deep merge overrides into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    Build the effective configuration.

    Args:
        overrides: Explicit settings, highest precedence
        environ: Environment to read MULTIJACK_* variables from (defaults
            to os.environ)

    Raises:
        ConfigError: If an environment value cannot be converted or a
            setting is out of range.
    """
    environ = os.environ if environ is None else environ
    config = copy.deepcopy(DEFAULT_CONFIG)

    for variable, (section, key, convert) in ENVIRONMENT_OVERRIDES.items():
        raw = environ.get(variable)
        if raw is None or raw == "":
            continue
        try:
            config[section][key] = convert(raw)
        except ValueError as exc:
            raise ConfigError(f"Invalid value for {variable}: {raw!r}") from exc

    if overrides:
        config = merge_config(config, overrides)

    validate_config(config)
    return config


def validate_config(config: Mapping[str, Any]) -> None:
    for section, key in (("deck", "timeout"), ("game", "timeout"), ("agent", "interval")):
        value = config[section][key]
        if not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
            raise ConfigError(f"{section}.{key} must be a positive number, got {value!r}")
    failures = config["agent"]["max_fetch_failures"]
    if not isinstance(failures, int) or failures < 1:
        raise ConfigError(
            f"agent.max_fetch_failures must be a positive integer, got {failures!r}"
        )
