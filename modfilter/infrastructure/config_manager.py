#!/usr/bin/env python3
"""Hierarchical configuration manager for modfilter.

This module provides configuration management with:
- 6-level precedence hierarchy
- YAML configuration files
- Environment variable overrides (MODFILTER_SECTION_KEY=value)
- Dot-path lookups and deep merging
- Thread-safe operations

Example:
    >>> config = ConfigManager()
    >>> config.load_file("modfilter.yaml")
    >>> config.get("modfilter.layers.layers_path", default="layers")
"""

import copy
import os
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from modfilter.core.constants import DEFAULT_CONFIG, ConfigKey, ErrorCode
from modfilter.core.validators import ValidationError, validate_config

ENV_PREFIX = "MODFILTER_"


class ConfigSource(Enum):
    """Configuration source precedence levels."""

    COMPILED_DEFAULTS = 1  # Lowest precedence
    SYSTEM_CONFIG = 2
    USER_CONFIG = 3
    ENVIRONMENT = 4
    CLI_ARGS = 5
    RUNTIME = 6  # Highest precedence


@dataclass
class ConfigValue:
    """Configuration value with the source that supplied it."""

    value: Any
    source: ConfigSource
    timestamp: float = field(default_factory=time.time)


class ConfigError(Exception):
    """Configuration error."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class ConfigManager:
    """Thread-safe hierarchical configuration manager.

    Manages configuration from multiple sources with precedence:
    1. Compiled defaults (lowest)
    2. System config file
    3. User config file
    4. Environment variables (MODFILTER_*)
    5. CLI arguments
    6. Runtime updates (highest)
    """

    def __init__(self, config_file: Optional[str] = None, environ: Optional[Mapping[str, str]] = None):
        """Initialize configuration manager.

        Args:
            config_file: Optional user config file to load
            environ: Environment mapping to read overrides from (default: os.environ)
        """
        self._config: Dict[ConfigSource, Dict[str, Any]] = {}
        self._lock = threading.RLock()

        self._config[ConfigSource.COMPILED_DEFAULTS] = copy.deepcopy(DEFAULT_CONFIG)

        if config_file:
            self.load_file(config_file)

        self._load_environment(os.environ if environ is None else environ)

    def load_file(self, file_path: str, source: ConfigSource = ConfigSource.USER_CONFIG) -> None:
        """Load configuration from a YAML file.

        Args:
            file_path: Path to YAML config file
            source: Configuration source level

        Raises:
            ConfigError: If file cannot be read, parsed or validated
        """
        path = Path(file_path).expanduser()

        if not path.exists():
            raise ConfigError(f"Config file not found: {file_path}", ErrorCode.NOT_FOUND)

        try:
            with open(path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"YAML parse error in {file_path}: {e}") from e
        except OSError as e:
            raise ConfigError(
                f"Error reading config {file_path}: {e}", ErrorCode.PERMISSION_DENIED
            ) from e

        if not isinstance(config_data, dict):
            raise ConfigError(f"Invalid config format in {file_path}")

        self._validate(config_data, file_path)

        with self._lock:
            self._config[source] = self._wrap(config_data)

    def load_dict(self, config_data: Dict[str, Any], source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Load configuration from a dictionary.

        Args:
            config_data: Configuration dictionary
            source: Configuration source level

        Raises:
            ConfigError: If the data fails validation
        """
        self._validate(config_data, source.name.lower())
        with self._lock:
            self._config[source] = self._wrap(copy.deepcopy(config_data))

    @staticmethod
    def _wrap(config_data: Dict[str, Any]) -> Dict[str, Any]:
        if ConfigKey.ROOT in config_data:
            return config_data
        return {ConfigKey.ROOT: config_data}

    @staticmethod
    def _validate(config_data: Dict[str, Any], origin: str) -> None:
        try:
            validate_config(config_data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {origin}: {e}", e.error_code) from e

    def _load_environment(self, environ: Mapping[str, str]) -> None:
        """Load configuration from environment variables.

        The first segment after the prefix names the section and the
        remainder names the key: ``MODFILTER_CACHE_MAX_PATTERNS=64`` sets
        ``modfilter.cache.max_patterns``.
        """
        env_config: Dict[str, Any] = {}

        for key, value in environ.items():
            if not key.startswith(ENV_PREFIX):
                continue

            section, _, name = key[len(ENV_PREFIX):].lower().partition("_")
            if not section or not name:
                continue

            env_config.setdefault(section, {})[name] = self._parse_env_value(value)

        if env_config:
            with self._lock:
                self._config[ConfigSource.ENVIRONMENT] = {ConfigKey.ROOT: env_config}

    @staticmethod
    def _parse_env_value(value: str) -> Any:
        """Parse environment variable value into bool, int, float or str."""
        lowered = value.lower()
        if lowered in ("true", "yes"):
            return True
        if lowered in ("false", "no"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        Args:
            key: Dot-separated key path (e.g., "modfilter.cache.max_patterns")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        with self._lock:
            for source in sorted(self._config.keys(), key=lambda s: s.value, reverse=True):
                value = self._get_nested(self._config[source], key)
                if value is not None:
                    return value

            return default

    def get_with_source(self, key: str) -> Optional[ConfigValue]:
        """Get a value together with the source that supplied it."""
        with self._lock:
            for source in sorted(self._config.keys(), key=lambda s: s.value, reverse=True):
                value = self._get_nested(self._config[source], key)
                if value is not None:
                    return ConfigValue(value=value, source=source)
            return None

    @staticmethod
    def _get_nested(config: Dict[str, Any], key: str) -> Optional[Any]:
        current: Any = config
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]
        return current

    def set(self, key: str, value: Any, source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Set configuration value.

        Args:
            key: Dot-separated key path
            value: Value to set
            source: Configuration source level
        """
        with self._lock:
            current = self._config.setdefault(source, {})
            parts = key.split(".")
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = value

    def get_all(self) -> Dict[str, Any]:
        """Get merged configuration from all sources.

        Returns:
            Merged configuration dictionary
        """
        with self._lock:
            merged: Dict[str, Any] = {}
            for source in sorted(self._config.keys(), key=lambda s: s.value):
                merged = self._deep_merge(merged, self._config[source])
            return merged

    def get_section(self, name: str) -> Dict[str, Any]:
        """Get one merged section under the ``modfilter`` root."""
        return dict(self.get_all().get(ConfigKey.ROOT, {}).get(name, {}))

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        result = copy.deepcopy(base)
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = copy.deepcopy(value)
        return result

    def validate(self) -> bool:
        """Validate the merged configuration.

        Raises:
            ConfigError: If validation fails
        """
        self._validate(self.get_all(), "merged configuration")
        return True

    def clear(self, source: Optional[ConfigSource] = None) -> None:
        """Clear configuration.

        Args:
            source: Specific source to clear, or None for all except defaults
        """
        with self._lock:
            if source:
                if source in self._config and source != ConfigSource.COMPILED_DEFAULTS:
                    del self._config[source]
            else:
                for s in [s for s in self._config if s != ConfigSource.COMPILED_DEFAULTS]:
                    del self._config[s]


_global_config: Optional[ConfigManager] = None


def get_config_manager(config_file: Optional[str] = None) -> ConfigManager:
    """Get or create global configuration manager.

    Args:
        config_file: Optional config file to load on first creation

    Returns:
        Global configuration manager
    """
    global _global_config
    if _global_config is None:
        _global_config = ConfigManager(config_file)
    return _global_config


def set_global_config(config: Optional[ConfigManager]) -> None:
    """Set (or reset with None) the global configuration manager."""
    global _global_config
    _global_config = config
