"""
modfilter Core: Input Validators.

This module provides validation functions for configuration, descriptor rule
paths and layer names.
"""
from typing import Any, Dict

from modfilter.core.constants import ConfigKey, ErrorCode, Limits


class ValidationError(Exception):
    """Base exception for validation errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        """Initialize ValidationError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        super().__init__(message)
        self.error_code = error_code


def validate_config(config: Dict[str, Any]) -> bool:
    """Validate the merged modfilter configuration.

    Args:
        config: Configuration dictionary (with or without the ``modfilter`` root key)

    Returns:
        True if valid

    Raises:
        ValidationError: If configuration is invalid
    """
    if not isinstance(config, dict):
        raise ValidationError("Configuration must be a dictionary")

    section = config.get(ConfigKey.ROOT, config)
    if not isinstance(section, dict):
        raise ValidationError(f"'{ConfigKey.ROOT}' section must be a dictionary")

    if ConfigKey.LAYERS in section:
        validate_layers_config(section[ConfigKey.LAYERS])

    if ConfigKey.CACHE in section:
        validate_cache_config(section[ConfigKey.CACHE])

    if ConfigKey.LOGGING in section:
        validate_logging_config(section[ConfigKey.LOGGING])

    return True


def validate_layers_config(layers: Dict[str, Any]) -> bool:
    """Validate the layered module path layout section.

    Args:
        layers: Layers configuration dictionary

    Returns:
        True if valid

    Raises:
        ValidationError: If a layout entry is invalid
    """
    if not isinstance(layers, dict):
        raise ValidationError("Layers configuration must be a dictionary")

    valid_fields = {
        ConfigKey.LAYERS_CONFIG_FILE,
        ConfigKey.LAYERS_PATH,
        ConfigKey.ADD_ONS_PATH,
        ConfigKey.OVERLAYS_DIR,
    }
    unknown_fields = set(layers.keys()) - valid_fields
    if unknown_fields:
        raise ValidationError(
            f"Unknown layers configuration fields: {', '.join(sorted(unknown_fields))}"
        )

    for key in (ConfigKey.LAYERS_PATH, ConfigKey.ADD_ONS_PATH):
        if key in layers:
            try:
                validate_relative_path(layers[key])
            except ValidationError as e:
                raise ValidationError(f"Invalid layers {key}: {e}")

    for key in (ConfigKey.LAYERS_CONFIG_FILE, ConfigKey.OVERLAYS_DIR):
        if key in layers:
            try:
                validate_layer_name(layers[key])
            except ValidationError as e:
                raise ValidationError(f"Invalid layers {key}: {e}")

    return True


def validate_cache_config(cache: Dict[str, Any]) -> bool:
    """Validate pattern cache configuration.

    Args:
        cache: Cache configuration dictionary

    Returns:
        True if valid

    Raises:
        ValidationError: If cache config is invalid
    """
    if not isinstance(cache, dict):
        raise ValidationError("Cache configuration must be a dictionary")

    valid_fields = {ConfigKey.CACHE_ENABLED, ConfigKey.CACHE_MAX_PATTERNS}
    unknown_fields = set(cache.keys()) - valid_fields
    if unknown_fields:
        raise ValidationError(
            f"Unknown cache configuration fields: {', '.join(sorted(unknown_fields))}"
        )

    if ConfigKey.CACHE_ENABLED in cache:
        enabled = cache[ConfigKey.CACHE_ENABLED]
        if not isinstance(enabled, bool):
            raise ValidationError(f"Cache enabled must be boolean: {enabled}")

    if ConfigKey.CACHE_MAX_PATTERNS in cache:
        max_patterns = cache[ConfigKey.CACHE_MAX_PATTERNS]
        if isinstance(max_patterns, bool) or not isinstance(max_patterns, int) or max_patterns <= 0:
            raise ValidationError(f"Cache max_patterns must be positive integer: {max_patterns}")

    return True


def validate_logging_config(logging_config: Dict[str, Any]) -> bool:
    """Validate logging configuration.

    Raises:
        ValidationError: If the level is unknown
    """
    if not isinstance(logging_config, dict):
        raise ValidationError("Logging configuration must be a dictionary")

    level = logging_config.get(ConfigKey.LOG_LEVEL)
    if level is not None:
        if not isinstance(level, str) or level.upper() not in (
            "DEBUG",
            "INFO",
            "WARNING",
            "ERROR",
            "CRITICAL",
        ):
            raise ValidationError(f"Invalid log level: {level}")

    log_file = logging_config.get(ConfigKey.LOG_FILE)
    if log_file is not None and not isinstance(log_file, str):
        raise ValidationError(f"Log file must be a string: {log_file}")

    return True


def validate_rule_path(path: str) -> bool:
    """Validate a descriptor rule path (literal, glob or set member).

    Rule paths are resource paths relative to a module root, so they are
    checked for emptiness, length and embedded control characters only.

    Args:
        path: Path to validate

    Returns:
        True if valid

    Raises:
        ValidationError: If path is invalid
    """
    if not isinstance(path, str):
        raise ValidationError(f"Path must be string, got {type(path).__name__}")

    if not path:
        raise ValidationError("Path cannot be empty")

    if len(path) > Limits.MAX_PATH_LENGTH:
        raise ValidationError(f"Path exceeds maximum length ({Limits.MAX_PATH_LENGTH})")

    if "\0" in path:
        raise ValidationError("Path contains null bytes")

    if any(ord(c) < 32 for c in path):
        raise ValidationError("Path contains control characters")

    return True


def validate_relative_path(path: str) -> bool:
    """Validate a relative directory path used inside a module root.

    Raises:
        ValidationError: If path is absolute or escapes its root
    """
    validate_rule_path(path)

    if path.startswith("/"):
        raise ValidationError(f"Path must be relative: {path}")

    if ".." in path.split("/"):
        raise ValidationError("Path traversal not allowed")

    return True


def validate_layer_name(name: str) -> bool:
    """Validate a single directory name (layer, overlay or add-on).

    Args:
        name: Name to validate

    Returns:
        True if valid

    Raises:
        ValidationError: If name is invalid
    """
    if not isinstance(name, str):
        raise ValidationError(f"Name must be string, got {type(name).__name__}")

    if not name:
        raise ValidationError("Name cannot be empty")

    if len(name) > Limits.MAX_LAYER_NAME_LENGTH:
        raise ValidationError(f"Name exceeds maximum length ({Limits.MAX_LAYER_NAME_LENGTH})")

    if name in (".", ".."):
        raise ValidationError(f"Name cannot be '{name}'")

    if "/" in name or "\\" in name or "\0" in name:
        raise ValidationError(f"Name contains a path separator or null byte: {name!r}")

    return True
