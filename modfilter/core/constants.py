"""
modfilter Core: Constants

This module provides system-wide constants, error codes and enums
shared by the filter algebra, the dependency resolver and the layered path
resolver.
"""
from enum import Enum, IntEnum

# Version information
MODFILTER_VERSION = "1.0.0"


class ErrorCode(IntEnum):
    """Standardized error codes for modfilter operations."""

    SUCCESS = 0  # Operation completed successfully
    INVALID_INPUT = 1  # Bad path, rule or configuration
    NOT_FOUND = 2  # Directory, file or layer doesn't exist
    PERMISSION_DENIED = 3  # Directory or file not readable


class ServicesMode(Enum):
    """How a dependency treats ``META-INF/services`` content."""

    NONE = "none"  # Services are neither imported nor re-exported
    IMPORT = "import"  # Services are visible to the importing module
    EXPORT = "export"  # Services are imported and re-exported

    @classmethod
    def parse(cls, value: str) -> "ServicesMode":
        """Look up a mode by its descriptor spelling.

        Raises:
            ValueError: If the value names no mode
        """
        for mode in cls:
            if mode.value == value:
                return mode
        raise ValueError(f"Unknown services mode: {value!r}")


class RuleType(Enum):
    """Descriptor rule element kinds."""

    INCLUDE = "include"
    EXCLUDE = "exclude"
    INCLUDE_SET = "include-set"
    EXCLUDE_SET = "exclude-set"


# Well-known resource paths
META_INF = "META-INF"
META_INF_SERVICES = "META-INF/services"
PATH_SEPARATOR = "/"

# Layered module path layout
LAYERS_CONF = "layers.conf"
LAYERS_PROPERTY = "layers"
LAYERS_PATH_PROPERTY = "layers.path"
ADD_ONS_PATH_PROPERTY = "add-ons.path"
DEFAULT_LAYERS_PATH = "layers"
DEFAULT_ADD_ONS_PATH = "add-ons"
BASE_LAYER = "base"
OVERLAYS = ".overlays"


class Limits:
    """Resource limits and default values."""

    MAX_PATH_LENGTH = 4096
    MAX_LAYER_NAME_LENGTH = 255

    # Compiled glob cache
    DEFAULT_PATTERN_CACHE_SIZE = 1024


class ConfigKey:
    """Configuration key constants."""

    # Top-level keys
    ROOT = "modfilter"
    LAYERS = "layers"
    CACHE = "cache"
    LOGGING = "logging"

    # Layer layout configuration
    LAYERS_CONFIG_FILE = "config_file"
    LAYERS_PATH = "layers_path"
    ADD_ONS_PATH = "add_ons_path"
    OVERLAYS_DIR = "overlays_dir"

    # Cache configuration
    CACHE_ENABLED = "enabled"
    CACHE_MAX_PATTERNS = "max_patterns"

    # Logging configuration
    LOG_LEVEL = "level"
    LOG_FILE = "file"


DEFAULT_CONFIG = {
    ConfigKey.ROOT: {
        ConfigKey.LAYERS: {
            ConfigKey.LAYERS_CONFIG_FILE: LAYERS_CONF,
            ConfigKey.LAYERS_PATH: DEFAULT_LAYERS_PATH,
            ConfigKey.ADD_ONS_PATH: DEFAULT_ADD_ONS_PATH,
            ConfigKey.OVERLAYS_DIR: OVERLAYS,
        },
        ConfigKey.CACHE: {
            ConfigKey.CACHE_ENABLED: True,
            ConfigKey.CACHE_MAX_PATTERNS: Limits.DEFAULT_PATTERN_CACHE_SIZE,
        },
        ConfigKey.LOGGING: {
            ConfigKey.LOG_LEVEL: "INFO",
            ConfigKey.LOG_FILE: None,
        },
    }
}
