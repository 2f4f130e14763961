"""
modfilter Layers: layered module path resolution.

Linearizes module roots with layers, overlays and add-ons into one
precedence-ordered list of directories to search.
"""

from modfilter.layers.config import LayersConf, LayerSettings, parse_layer_names, parse_layers_conf
from modfilter.layers.errors import (
    AddOnsDirectoryError,
    LayeredPathError,
    LayersConfigError,
    LayersDirectoryError,
    MissingLayerError,
    OverlayRootError,
    OverlaysDirectoryError,
    OverlaysMetadataError,
)
from modfilter.layers.filesystem import Filesystem, LocalFilesystem
from modfilter.layers.resolver import LayeredPathResolver, resolve_layered_module_path

__all__ = [
    "LayeredPathResolver",
    "resolve_layered_module_path",
    "Filesystem",
    "LocalFilesystem",
    "LayerSettings",
    "LayersConf",
    "parse_layer_names",
    "parse_layers_conf",
    "LayeredPathError",
    "LayersConfigError",
    "LayersDirectoryError",
    "MissingLayerError",
    "OverlaysDirectoryError",
    "OverlaysMetadataError",
    "OverlayRootError",
    "AddOnsDirectoryError",
]
