#!/usr/bin/env python3
"""Layout settings and ``layers.conf`` parsing.

``layers.conf`` is a properties file at a module root:

    # layers searched before base, highest precedence first
    layers=product,mid
    layers.path=layers
    add-ons.path=add-ons

``base`` is always the last layer; it is appended when not listed.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from modfilter.core.constants import (
    ADD_ONS_PATH_PROPERTY,
    BASE_LAYER,
    DEFAULT_ADD_ONS_PATH,
    DEFAULT_LAYERS_PATH,
    LAYERS_CONF,
    LAYERS_PATH_PROPERTY,
    LAYERS_PROPERTY,
    OVERLAYS,
    ConfigKey,
)
from modfilter.core.validators import validate_layer_name, validate_relative_path
from modfilter.infrastructure.config_manager import get_config_manager
from modfilter.infrastructure.logger import get_logger

logger = get_logger("modfilter.layers")

_PROPERTY_LINE = re.compile(r"([^=:\s]*)\s*[=:]?\s*(.*)", re.DOTALL)


@dataclass(frozen=True)
class LayerSettings:
    """Where the layering structure lives under a module root."""

    config_file: str = LAYERS_CONF
    layers_path: str = DEFAULT_LAYERS_PATH
    add_ons_path: str = DEFAULT_ADD_ONS_PATH
    overlays_dir: str = OVERLAYS

    @classmethod
    def from_config(cls, config: Optional[Any] = None) -> "LayerSettings":
        """Build settings from the ``modfilter.layers`` configuration section.

        Args:
            config: A ConfigManager, or None for the global one
        """
        if config is None:
            config = get_config_manager()
        section = config.get_section(ConfigKey.LAYERS)
        return cls(
            config_file=section.get(ConfigKey.LAYERS_CONFIG_FILE, LAYERS_CONF),
            layers_path=section.get(ConfigKey.LAYERS_PATH, DEFAULT_LAYERS_PATH),
            add_ons_path=section.get(ConfigKey.ADD_ONS_PATH, DEFAULT_ADD_ONS_PATH),
            overlays_dir=section.get(ConfigKey.OVERLAYS_DIR, OVERLAYS),
        )


@dataclass(frozen=True)
class LayersConf:
    """Parsed contents of a ``layers.conf`` file."""

    layers: List[str]
    layers_path: Optional[str] = None
    add_ons_path: Optional[str] = None


def parse_properties(text: str) -> Dict[str, str]:
    """Parse properties lines, skipping blanks and ``#``/``!`` comments.

    The key ends at the first ``=``, ``:`` or whitespace, so ``layers=a``,
    ``layers: a`` and ``layers a`` are equivalent. A later occurrence of a
    key replaces an earlier one.
    """
    properties: Dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line[0] in "#!":
            continue
        key, value = _PROPERTY_LINE.fullmatch(line).groups()
        properties[key] = value
    return properties


def parse_layer_names(value: Optional[str]) -> List[str]:
    """Split a comma separated layer list and make ``base`` the last layer.

    Empty entries are skipped. A name listed twice keeps its first position.

    Raises:
        ValidationError: If a name is not a valid directory name
    """
    names: List[str] = []
    for part in (value or "").split(","):
        name = part.strip()
        if not name:
            continue
        validate_layer_name(name)
        if name in names:
            logger.warning("Ignoring duplicate layer", layer=name)
            continue
        names.append(name)

    if BASE_LAYER not in names:
        names.append(BASE_LAYER)
    return names


def parse_layers_conf(text: str) -> LayersConf:
    """Parse the text of a ``layers.conf`` file.

    Raises:
        ValidationError: If a layer name or layout path is invalid
    """
    properties = parse_properties(text)
    layers_path = properties.get(LAYERS_PATH_PROPERTY) or None
    add_ons_path = properties.get(ADD_ONS_PATH_PROPERTY) or None
    for path in (layers_path, add_ons_path):
        if path is not None:
            validate_relative_path(path)

    return LayersConf(
        layers=parse_layer_names(properties.get(LAYERS_PROPERTY)),
        layers_path=layers_path,
        add_ons_path=add_ons_path,
    )
