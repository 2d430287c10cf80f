"""Configuration loading for the CLI.

Settings come from, highest precedence first: CLI flags, environment
variables, the YAML/JSON config file, and defaults in ``Constants``.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

import yaml

from constants import Constants
from depgraph.ports import Settings

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


class ConfigError(ValueError):
    """Raised when the configuration file cannot be used."""


def load_config_file(path: Optional[str]) -> Dict[str, Any]:
    """Load a YAML or JSON configuration file; an empty path yields an empty config.

    Raises:
        ConfigError: the file is missing, unparsable or not a mapping.
    """
    if not path:
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            if path.lower().endswith(".json"):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except (json.JSONDecodeError, yaml.YAMLError, UnicodeDecodeError) as e:
        raise ConfigError(f"Failed to parse config file {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _parse_bool(value: Any, source: str) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    logger.warning("Ignoring non-boolean value %r for %s", value, source)
    return None


def build_settings(args=None, config: Optional[Dict[str, Any]] = None) -> Settings:
    """Merge defaults, config file, environment and CLI flags into ``Settings``."""
    enable_lockfile = Constants.ENABLE_LOCKFILE
    lockfile_path = Constants.LOCKFILE_NAME

    config = config or {}
    if "enable_lockfile" in config:
        parsed = _parse_bool(config["enable_lockfile"], "enable_lockfile")
        if parsed is not None:
            enable_lockfile = parsed
    if config.get("lockfile_path"):
        lockfile_path = str(config["lockfile_path"])

    env_value = os.environ.get(Constants.ENV_ENABLE_LOCKFILE)
    if env_value is not None and env_value.strip():
        parsed = _parse_bool(env_value, Constants.ENV_ENABLE_LOCKFILE)
        if parsed is not None:
            enable_lockfile = parsed

    if getattr(args, "ENABLE_LOCKFILE", None) is not None:
        enable_lockfile = bool(args.ENABLE_LOCKFILE)
    if getattr(args, "LOCKFILE_PATH", None):
        lockfile_path = args.LOCKFILE_PATH

    return Settings(enable_lockfile=enable_lockfile, lockfile_path=lockfile_path)
