"""
Server configuration.

Settings are layered, later sources winning:
  1. ServerConfig defaults
  2. YAML config file (--config or API_SERVER_CONFIG)
  3. Environment variables (API_SERVER_*)
  4. Command line flags (applied by the CLI)

With nothing set the server behaves exactly like the bare loop: the default
banner, the default request line and an interval drawn from 1-3 seconds.
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_BANNER = "Starting API Server..."
DEFAULT_REQUEST_MESSAGE = "Handling API request"

ENV_CONFIG_PATH = "API_SERVER_CONFIG"

# Environment variable -> (config field, converter)
ENV_OVERRIDES = {
    "API_SERVER_SEED": ("seed", int),
    "API_SERVER_INTERVAL_MIN": ("interval_min_seconds", int),
    "API_SERVER_INTERVAL_MAX": ("interval_max_seconds", int),
    "API_SERVER_MAX_ITERATIONS": ("max_iterations", int),
    "API_SERVER_LOG_LEVEL": ("log_level", str),
}

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass
class ServerConfig:
    banner: str = DEFAULT_BANNER
    request_message: str = DEFAULT_REQUEST_MESSAGE
    interval_min_seconds: int = 1
    interval_max_seconds: int = 3
    # None seeds from the clock at startup
    seed: Optional[int] = None
    # None runs until stopped from outside
    max_iterations: Optional[int] = None
    log_level: str = "INFO"

    def validate(self) -> "ServerConfig":
        """Raise ValueError on an unusable configuration, return self otherwise"""
        for name in ("banner", "request_message", "log_level"):
            value = getattr(self, name)
            if not isinstance(value, str):
                raise ValueError(f"{name} must be a string (got {value!r})")

        for name in ("seed", "max_iterations"):
            value = getattr(self, name)
            if value is not None and not _is_int(value):
                raise ValueError(f"{name} must be an integer or unset (got {value!r})")

        for name in ("interval_min_seconds", "interval_max_seconds"):
            value = getattr(self, name)
            if not _is_int(value):
                raise ValueError(f"{name} must be an integer number of seconds (got {value!r})")
            if value < 0:
                raise ValueError(f"{name} must be non-negative (got {value})")

        if self.interval_max_seconds < self.interval_min_seconds:
            raise ValueError(
                f"interval_max_seconds ({self.interval_max_seconds}) is below "
                f"interval_min_seconds ({self.interval_min_seconds})"
            )

        if self.max_iterations is not None and self.max_iterations < 0:
            raise ValueError(f"max_iterations must be non-negative (got {self.max_iterations})")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")

        return self


def _is_int(value) -> bool:
    # bool is an int subclass but never a valid count or seed
    return isinstance(value, int) and not isinstance(value, bool)


def load_config_file(path: str) -> Dict:
    """Load a YAML config file, returning {} if it does not exist"""
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning(f"Config file not found at {path}, using defaults")
        return {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def env_overrides(environ: Optional[Dict[str, str]] = None) -> Dict:
    """Collect config values from API_SERVER_* environment variables"""
    if environ is None:
        environ = os.environ

    overrides = {}
    for var, (field_name, convert) in ENV_OVERRIDES.items():
        raw = environ.get(var)
        if raw is None or raw == "":
            continue
        try:
            overrides[field_name] = convert(raw)
        except ValueError:
            raise ValueError(f"Invalid value for {var}: {raw!r}")
    return overrides


def load_config(
    config_path: Optional[str] = None,
    environ: Optional[Dict[str, str]] = None,
    **cli_overrides,
) -> ServerConfig:
    """
    Build a validated ServerConfig from file, environment and CLI overrides.

    CLI overrides whose value is None are treated as "not given".
    """
    if environ is None:
        environ = os.environ

    config_dict = {}

    path = config_path or environ.get(ENV_CONFIG_PATH)
    if path:
        known = {f.name for f in fields(ServerConfig)}
        for key, value in load_config_file(path).items():
            if key in known:
                config_dict[key] = value
            else:
                logger.warning(f"Ignoring unknown config key {key!r} in {path}")

    config_dict.update(env_overrides(environ))
    config_dict.update({k: v for k, v in cli_overrides.items() if v is not None})

    config = ServerConfig(**config_dict).validate()
    config = replace(config, log_level=config.log_level.upper())

    logger.debug(f"Configuration loaded{f' from {path}' if path else ''}")
    logger.debug(f"  Interval range: {config.interval_min_seconds}-{config.interval_max_seconds}s")
    logger.debug(f"  Seed: {config.seed if config.seed is not None else 'clock'}")
    logger.debug(f"  Max iterations: {config.max_iterations if config.max_iterations is not None else 'unbounded'}")

    return config
