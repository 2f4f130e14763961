#!/usr/bin/env python3
"""Layered module path resolution.

A module root may carry a layering structure:

    root/
      layers.conf              layers=top,mid (base is implied last)
      layers/
        top/
          .overlays/
            .overlays          one overlay name per line, highest first
            patch-2/
            patch-1/
        mid/
        base/
      add-ons/
        metrics/
          .overlays/...

Resolution linearizes every root into a search path, highest precedence
first: the root itself, then each layer preceded by its overlays, then each
add-on preceded by its overlays.

Example:
    >>> resolve_layered_module_path(["/opt/modules"])
    [PosixPath('/opt/modules'), PosixPath('/opt/modules/layers/top'), ...]
"""

from pathlib import Path
from typing import Iterable, List, Optional, Union

from modfilter.core.constants import BASE_LAYER, ErrorCode
from modfilter.core.validators import ValidationError, validate_layer_name
from modfilter.infrastructure.logger import get_logger
from modfilter.layers.config import LayerSettings, parse_layers_conf
from modfilter.layers.errors import (
    AddOnsDirectoryError,
    LayersConfigError,
    LayersDirectoryError,
    MissingLayerError,
    OverlayRootError,
    OverlaysDirectoryError,
    OverlaysMetadataError,
)
from modfilter.layers.filesystem import Filesystem, LocalFilesystem

logger = get_logger("modfilter.layers")


class LayeredPathResolver:
    """Builds the ordered module search path of one or more module roots.

    The filesystem is read once per call and nothing is cached between
    calls, so a resolver can be reused after the tree changes.
    """

    def __init__(self, filesystem: Optional[Filesystem] = None, settings: Optional[LayerSettings] = None):
        """Initialize resolver.

        Args:
            filesystem: Filesystem to inspect (default: LocalFilesystem)
            settings: Layout settings (default: LayerSettings())
        """
        self.filesystem = filesystem or LocalFilesystem()
        self.settings = settings or LayerSettings()

    def resolve_layered_module_path(self, base_roots: Iterable[Union[str, Path]]) -> List[Path]:
        """Resolve the search path of several roots, in root order.

        Args:
            base_roots: Module roots, highest precedence first

        Returns:
            Directories to search, highest precedence first

        Raises:
            LayeredPathError: If any root's layering structure is broken
        """
        result: List[Path] = []
        for root in base_roots:
            result.extend(self.resolve_root(Path(root)))

        logger.info("Resolved layered module path", entries=len(result))
        return result

    def resolve_root(self, root: Path) -> List[Path]:
        """Resolve the search path contributed by a single root."""
        with logger.add_context(root=root):
            path = [root]
            logger.debug("Added module root", directory=root)

            layers = self._layer_order(root)
            if layers is None:
                return path
            layers_dir, layer_names, add_ons_dir = layers

            for name in layer_names:
                layer_dir = layers_dir / name
                if not self.filesystem.is_dir(layer_dir):
                    raise MissingLayerError(name, layer_dir)
                self._add_with_overlays(path, layer_dir, "layer")

            if self.filesystem.is_dir(add_ons_dir):
                for add_on_dir in self._add_ons(add_ons_dir):
                    self._add_with_overlays(path, add_on_dir, "add-on")

            return path

    def _layer_order(self, root: Path):
        """Determine the layers of a root.

        Returns:
            ``(layers_dir, layer_names, add_ons_dir)``, or None when the root
            has no layering structure
        """
        settings = self.settings
        conf_path = root / settings.config_file

        if self.filesystem.exists(conf_path):
            try:
                conf = parse_layers_conf(self.filesystem.read_text(conf_path))
            except OSError as e:
                raise LayersConfigError(conf_path, e.strerror or str(e), ErrorCode.PERMISSION_DENIED) from e
            except ValidationError as e:
                raise LayersConfigError(conf_path, str(e), e.error_code) from e

            layers_dir = root / (conf.layers_path or settings.layers_path)
            add_ons_dir = root / (conf.add_ons_path or settings.add_ons_path)
            if not self.filesystem.is_dir(layers_dir):
                raise LayersDirectoryError(layers_dir)
            logger.debug("Read layer configuration", file=conf_path, layers=",".join(conf.layers))
            return layers_dir, conf.layers, add_ons_dir

        layers_dir = root / settings.layers_path
        if not self.filesystem.is_dir(layers_dir):
            return None

        names = self._discover(layers_dir)
        if not names:
            return None
        return layers_dir, names, root / settings.add_ons_path

    def _discover(self, layers_dir: Path) -> List[str]:
        try:
            names = sorted(self.filesystem.list_dirs(layers_dir))
        except OSError as e:
            raise LayersDirectoryError(layers_dir) from e

        # base always has the lowest precedence
        if BASE_LAYER in names:
            names.remove(BASE_LAYER)
            names.append(BASE_LAYER)
        return names

    def _add_ons(self, add_ons_dir: Path) -> List[Path]:
        try:
            names = sorted(self.filesystem.list_dirs(add_ons_dir))
        except OSError as e:
            raise AddOnsDirectoryError(add_ons_dir) from e
        return [add_ons_dir / name for name in names]

    def _add_with_overlays(self, path: List[Path], directory: Path, kind: str) -> None:
        for overlay in self.overlays(directory):
            path.append(overlay)
            logger.debug("Added overlay", directory=overlay, kind=kind)
        path.append(directory)
        logger.debug(f"Added {kind}", directory=directory)

    def overlays(self, directory: Path) -> List[Path]:
        """List the overlay directories of a layer or add-on, highest precedence first.

        Args:
            directory: Layer or add-on directory

        Returns:
            Overlay directories; empty when none are registered

        Raises:
            OverlaysDirectoryError: If the overlays directory is unreadable
            OverlaysMetadataError: If the registration file is unreadable or
                names an invalid overlay
            OverlayRootError: If a registered overlay is missing or unreadable
        """
        fs = self.filesystem
        overlays_dir = directory / self.settings.overlays_dir
        if not fs.exists(overlays_dir):
            return []
        if not fs.is_dir(overlays_dir) or not fs.is_readable(overlays_dir):
            raise OverlaysDirectoryError(overlays_dir)

        refs = overlays_dir / self.settings.overlays_dir
        if not fs.exists(refs):
            return []
        if not fs.is_readable(refs):
            raise OverlaysMetadataError(refs)
        try:
            text = fs.read_text(refs)
        except OSError as e:
            raise OverlaysMetadataError(refs, e.strerror or str(e)) from e

        result = []
        for line in text.splitlines():
            name = line.replace("\t", "").replace("\r", "").strip()
            if not name:
                continue
            try:
                validate_layer_name(name)
            except ValidationError as e:
                raise OverlaysMetadataError(refs, str(e), e.error_code) from e
            overlay = overlays_dir / name
            if not fs.is_dir(overlay):
                raise OverlayRootError(name, overlay, missing=True)
            if not fs.is_readable(overlay):
                raise OverlayRootError(name, overlay, missing=False)
            result.append(overlay)
        return result


def resolve_layered_module_path(
    base_roots: Iterable[Union[str, Path]],
    filesystem: Optional[Filesystem] = None,
    settings: Optional[LayerSettings] = None,
) -> List[Path]:
    """Resolve the layered module path of the given roots.

    See LayeredPathResolver.resolve_layered_module_path.
    """
    return LayeredPathResolver(filesystem, settings).resolve_layered_module_path(base_roots)
