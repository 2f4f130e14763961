"""modfilter Infrastructure Layer.

This layer provides services used by the filter, dependency and layer packages:
- ConfigManager: Hierarchical YAML/environment configuration
- PatternCache: LRU cache of compiled glob patterns
- Logger: Structured logging system
"""

from .cache_manager import (
    CacheConfig,
    PatternCache,
    get_pattern_cache,
    set_global_cache,
)
from .config_manager import ConfigError
from .config_manager import ConfigManager as Config
from .config_manager import ConfigSource, ConfigValue, get_config_manager, set_global_config
from .logger import Logger, LogLevel, configure_logging, get_logger, set_global_logger

__all__ = [
    # Logger exports
    "Logger",
    "LogLevel",
    "get_logger",
    "set_global_logger",
    "configure_logging",
    # PatternCache exports
    "CacheConfig",
    "PatternCache",
    "get_pattern_cache",
    "set_global_cache",
    # ConfigManager exports
    "ConfigSource",
    "ConfigValue",
    "ConfigError",
    "Config",
    "get_config_manager",
    "set_global_config",
]
