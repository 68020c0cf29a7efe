"""
Tracker configuration.

Settings are layered, later layers winning:
    built-in defaults < YAML/JSON config file < STACKTRACKER_* environment

Nested keys in the environment use a double underscore, so
STACKTRACKER_SPOT__TIMEOUT=5 sets ``spot.timeout``. Environment values
arrive as strings; the typed accessors below convert them.

    config = Config(config_file="~/.stacktracker/config.yaml")
    config.spot_timeout()        # 10.0
    config.get_storage_dir()     # ~/.stacktracker-data/storage, expanded
"""

import json
import os
import urllib.parse
from typing import Any

import yaml

from .exceptions import ConfigurationError

ENV_PREFIX = "STACKTRACKER_"
DEFAULT_DATA_DIR = os.path.join("~", ".stacktracker-data")

DEFAULT_SPOT_API_BASE = "https://stack-tracker-pro-production.up.railway.app"
DEFAULT_SPOT_TIMEOUT = 10.0
DEFAULT_SILVER_KEY = "stack_silver_holdings"
DEFAULT_GOLD_KEY = "stack_gold_holdings"

# Subdirectories of data_dir that follow it when only data_dir is overridden.
_DATA_SUBDIRS = {"storage_dir": "storage", "log_dir": "logs"}


def _deep_merge(target: dict, source: dict) -> None:
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_merge(target[key], value)
        else:
            target[key] = value


def _read_config_file(path: str) -> dict[str, Any]:
    ext = os.path.splitext(path)[1].lower()
    if ext not in (".yaml", ".yml", ".json"):
        raise ConfigurationError(f"Unsupported config file type: {path}")
    try:
        with open(path) as f:
            data = json.load(f) if ext == ".json" else yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
    except (yaml.YAMLError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Cannot parse config file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return data


class Config:
    """Merged settings for one run of the tracker."""

    def __init__(self, config_file: str | None = None, data_dir: str | None = None, env_prefix: str = ENV_PREFIX):
        """
        Args:
            config_file: YAML or JSON file. A path that doesn't exist is ignored.
            data_dir: Base directory for stored holdings and logs.
            env_prefix: Environment variable prefix; empty disables env overrides.
        """
        self.config_file = os.path.expanduser(config_file) if config_file else None
        self.env_prefix = env_prefix or ""
        self._default_data_dir = os.path.expanduser(data_dir or DEFAULT_DATA_DIR)
        self.config_data = self._defaults()

        if self.config_file and os.path.exists(self.config_file):
            _deep_merge(self.config_data, _read_config_file(self.config_file))
        self._apply_env()
        self._follow_data_dir()

    def _defaults(self) -> dict[str, Any]:
        paths = {"data_dir": self._default_data_dir}
        for key, name in _DATA_SUBDIRS.items():
            paths[key] = os.path.join(self._default_data_dir, name)
        return {
            "paths": paths,
            "spot": {"api_base": DEFAULT_SPOT_API_BASE, "timeout": DEFAULT_SPOT_TIMEOUT},
            "storage": {"silver_key": DEFAULT_SILVER_KEY, "gold_key": DEFAULT_GOLD_KEY},
            "logging": {"level": "WARNING", "log_file": ""},
        }

    def _apply_env(self) -> None:
        if not self.env_prefix:
            return
        for name, value in os.environ.items():
            if name.startswith(self.env_prefix):
                self.set(name[len(self.env_prefix) :].lower().replace("__", "."), value)

    def _follow_data_dir(self) -> None:
        paths = self.config_data.setdefault("paths", {})
        data_dir = os.path.expanduser(paths.get("data_dir") or self._default_data_dir)
        if data_dir == self._default_data_dir:
            return
        for key, name in _DATA_SUBDIRS.items():
            if paths.get(key) == os.path.join(self._default_data_dir, name):
                paths[key] = os.path.join(data_dir, name)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Look up a dotted key such as ``"spot.api_base"``."""
        current: Any = self.config_data
        for part in key_path.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def set(self, key_path: str, value: Any) -> None:
        *parents, leaf = key_path.split(".")
        current = self.config_data
        for part in parents:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]
        current[leaf] = value

    def get_float(self, key_path: str, default: float) -> float:
        value = self.get(key_path, default)
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"{key_path} must be a number, got {value!r}") from e

    def get_data_dir(self) -> str:
        return os.path.expanduser(self.get("paths.data_dir") or self._default_data_dir)

    def get_storage_dir(self) -> str:
        return os.path.expanduser(self.get("paths.storage_dir") or os.path.join(self.get_data_dir(), "storage"))

    def spot_api_base(self) -> str:
        """Base URL of the spot price API. Must be an absolute http(s) URL."""
        api_base = str(self.get("spot.api_base") or DEFAULT_SPOT_API_BASE)
        parts = urllib.parse.urlsplit(api_base)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ConfigurationError(f"spot.api_base must be an http(s) URL, got {api_base!r}")
        return api_base

    def spot_timeout(self) -> float:
        timeout = self.get_float("spot.timeout", DEFAULT_SPOT_TIMEOUT)
        if timeout <= 0:
            raise ConfigurationError(f"spot.timeout must be positive, got {timeout}")
        return timeout

    def storage_keys(self) -> tuple[str, str]:
        """(silver_key, gold_key). The two keys must differ."""
        silver = str(self.get("storage.silver_key") or DEFAULT_SILVER_KEY)
        gold = str(self.get("storage.gold_key") or DEFAULT_GOLD_KEY)
        if silver == gold:
            raise ConfigurationError(f"storage.silver_key and storage.gold_key must differ (both {silver!r})")
        return silver, gold

    def log_file(self) -> str | None:
        return os.path.expanduser(self.get("logging.log_file")) if self.get("logging.log_file") else None
