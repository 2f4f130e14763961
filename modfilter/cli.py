#!/usr/bin/env python3
"""Command-line interface for modfilter.

This module provides the ``modfilter`` command:
- ``path``: print the layered module path of one or more module roots
- ``describe``: print the filters derived from a module descriptor
- ``check``: print which paths cross each dependency edge of a module

Example:
    >>> from modfilter.cli import parse_arguments
    >>> args = parse_arguments(["path", "/opt/modules"])
"""

import argparse
import sys
from typing import List, Optional

from modfilter.core.constants import MODFILTER_VERSION, ConfigKey
from modfilter.dependencies.declaration import DescriptorError, load_module_descriptor
from modfilter.dependencies.resolver import DependencyFilterResolver
from modfilter.infrastructure.cache_manager import CacheConfig, PatternCache, set_global_cache
from modfilter.infrastructure.config_manager import (
    ConfigError,
    ConfigManager,
    ConfigSource,
    set_global_config,
)
from modfilter.infrastructure.logger import configure_logging, get_logger
from modfilter.layers.config import LayerSettings
from modfilter.layers.errors import LayeredPathError
from modfilter.layers.resolver import LayeredPathResolver
from modfilter.report import render_check, render_edges, render_module_path

DESCRIPTION = "modfilter - module path filters and layered module paths"

logger = get_logger("modfilter.cli")


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


def parse_arguments(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        args: Argument list to parse (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace

    Raises:
        SystemExit: On invalid arguments or --help/--version
    """
    parser = argparse.ArgumentParser(
        prog="modfilter",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show the search path of a layered module root
  modfilter path /opt/modules

  # Show the filters derived from a module descriptor
  modfilter describe module.yaml

  # Check which paths cross each dependency edge
  modfilter check module.yaml com/acme/Foo.class META-INF/services/com.acme.Spi
        """,
    )

    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {MODFILTER_VERSION}",
    )

    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        type=str,
        help="Configuration file path (YAML format)",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    path_parser = subparsers.add_parser("path", help="Print the layered module path")
    path_parser.add_argument("roots", metavar="ROOT", nargs="+", help="Module root directories")

    describe_parser = subparsers.add_parser("describe", help="Print derived dependency filters")
    describe_parser.add_argument("descriptor", metavar="DESCRIPTOR", help="Module descriptor (YAML)")

    check_parser = subparsers.add_parser("check", help="Check paths against dependency filters")
    check_parser.add_argument("descriptor", metavar="DESCRIPTOR", help="Module descriptor (YAML)")
    check_parser.add_argument("paths", metavar="PATH", nargs="+", help="Resource paths to check")

    return parser.parse_args(args)


def load_config(args: argparse.Namespace) -> ConfigManager:
    """
    Build the configuration manager for this run.

    Args:
        args: Parsed arguments namespace

    Returns:
        Configuration manager, also installed as the global one

    Raises:
        CLIError: If the configuration file or an environment override is invalid
    """
    try:
        config = ConfigManager(args.config)
        if args.debug:
            config.set(
                f"{ConfigKey.ROOT}.{ConfigKey.LOGGING}.{ConfigKey.LOG_LEVEL}", "DEBUG", ConfigSource.CLI_ARGS
            )
        config.validate()
    except ConfigError as e:
        raise CLIError(e.message) from e

    set_global_config(config)
    return config


def setup_logging(config: ConfigManager) -> None:
    """Apply the configured log level and file to all modfilter loggers."""
    section = config.get_section(ConfigKey.LOGGING)
    configure_logging(section.get(ConfigKey.LOG_LEVEL, "INFO"), section.get(ConfigKey.LOG_FILE))


def setup_cache(config: ConfigManager) -> None:
    """Install a pattern cache sized from configuration."""
    cache_config = CacheConfig.from_section(config.get_section(ConfigKey.CACHE))
    try:
        cache_config.validate()
    except ValueError as e:
        raise CLIError(f"Invalid cache configuration: {e}") from e
    set_global_cache(PatternCache(cache_config))


def cmd_path(args: argparse.Namespace, config: ConfigManager) -> int:
    resolver = LayeredPathResolver(settings=LayerSettings.from_config(config))
    print(render_module_path(resolver.resolve_layered_module_path(args.roots)), end="")
    return 0


def cmd_describe(args: argparse.Namespace, config: ConfigManager) -> int:
    descriptor = load_module_descriptor(args.descriptor)
    edges = DependencyFilterResolver().resolve_module(descriptor)
    print(render_edges(descriptor.name, edges), end="")
    return 0


def cmd_check(args: argparse.Namespace, config: ConfigManager) -> int:
    descriptor = load_module_descriptor(args.descriptor)
    edges = DependencyFilterResolver().resolve_module(descriptor)
    print(render_check(descriptor.name, edges, args.paths), end="")
    return 0


COMMANDS = {
    "path": cmd_path,
    "describe": cmd_describe,
    "check": cmd_check,
}


def main(args: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        args: Argument list (defaults to sys.argv[1:])

    Returns:
        Process exit status
    """
    parsed = parse_arguments(args)

    try:
        config = load_config(parsed)
        setup_logging(config)
        setup_cache(config)
        logger.debug("Running command", command=parsed.command)

        return COMMANDS[parsed.command](parsed, config)

    except (CLIError, DescriptorError, LayeredPathError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
