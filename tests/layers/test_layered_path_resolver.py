#!/usr/bin/env python3
"""Tests for layered module path resolution."""

import logging
import os
from pathlib import Path

import pytest

from modfilter.core.constants import ErrorCode
from modfilter.infrastructure.logger import get_logger
from modfilter.layers import (
    AddOnsDirectoryError,
    LayeredPathError,
    LayeredPathResolver,
    LayerSettings,
    LayersConfigError,
    LayersDirectoryError,
    MissingLayerError,
    OverlayRootError,
    OverlaysDirectoryError,
    OverlaysMetadataError,
    resolve_layered_module_path,
)

ROOT = Path("/r")


def resolve(fs, *roots, settings=None):
    return LayeredPathResolver(fs, settings).resolve_layered_module_path(roots or [ROOT])


class TestWithoutLayers:
    """Tests for roots without a layering structure."""

    def test_plain_root(self, fake_fs):
        """Test a root without layers is returned alone."""
        fake_fs.mkdir("/r")
        assert resolve(fake_fs) == [ROOT]

    def test_add_ons_ignored_without_layers(self, fake_fs):
        """Test add-ons need a layers structure."""
        fake_fs.mkdir("/r/add-ons/extra")
        assert resolve(fake_fs) == [ROOT]

    def test_empty_layers_directory(self, fake_fs):
        """Test an empty layers directory counts as no structure."""
        fake_fs.mkdir("/r/layers").mkdir("/r/add-ons/extra")
        assert resolve(fake_fs) == [ROOT]

    def test_root_order_kept(self, fake_fs):
        """Test several roots keep their order."""
        fake_fs.mkdir("/a").mkdir("/b")
        assert resolve(fake_fs, Path("/b"), Path("/a")) == [Path("/b"), Path("/a")]

    def test_empty_input(self, fake_fs):
        """Test no roots give an empty path."""
        assert LayeredPathResolver(fake_fs).resolve_layered_module_path([]) == []


class TestLayerOrder:
    """Tests for layer ordering."""

    def test_configured_order(self, fake_fs):
        """Test the layers.conf order with base last."""
        fake_fs.write("/r/layers.conf", "layers=top\n").mkdir("/r/layers/top").mkdir("/r/layers/base")
        assert resolve(fake_fs) == [ROOT, ROOT / "layers/top", ROOT / "layers/base"]

    def test_configured_order_with_explicit_base(self, fake_fs):
        """Test an explicit top,base order."""
        fake_fs.write("/r/layers.conf", "layers=top,base\n")
        fake_fs.mkdir("/r/layers/top").mkdir("/r/layers/base")
        assert resolve(fake_fs) == [ROOT, ROOT / "layers/top", ROOT / "layers/base"]

    def test_configured_order_is_not_sorted(self, fake_fs):
        """Test configured order is kept as written."""
        fake_fs.write("/r/layers.conf", "layers=zeta,alpha\n")
        for name in ("zeta", "alpha", "base"):
            fake_fs.mkdir(f"/r/layers/{name}")
        assert resolve(fake_fs)[1:] == [ROOT / "layers/zeta", ROOT / "layers/alpha", ROOT / "layers/base"]

    def test_unlisted_layers_ignored(self, fake_fs):
        """Test directories missing from layers.conf are not searched."""
        fake_fs.write("/r/layers.conf", "layers=\n").mkdir("/r/layers/base").mkdir("/r/layers/stray")
        assert resolve(fake_fs) == [ROOT, ROOT / "layers/base"]

    def test_discovered_order(self, fake_fs):
        """Test discovery sorts names and puts base last."""
        for name in ("base", "b-layer", "a-layer"):
            fake_fs.mkdir(f"/r/layers/{name}")
        assert resolve(fake_fs) == [
            ROOT,
            ROOT / "layers/a-layer",
            ROOT / "layers/b-layer",
            ROOT / "layers/base",
        ]

    def test_missing_layer(self, fake_fs):
        """Test a configured layer without a directory is fatal."""
        fake_fs.write("/r/layers.conf", "layers=top\n").mkdir("/r/layers/base")
        with pytest.raises(MissingLayerError) as exc_info:
            resolve(fake_fs)
        assert exc_info.value.layer == "top"
        assert exc_info.value.error_code == ErrorCode.NOT_FOUND
        assert isinstance(exc_info.value, LayeredPathError)

    def test_missing_base(self, fake_fs):
        """Test the implied base layer must exist."""
        fake_fs.write("/r/layers.conf", "layers=top\n").mkdir("/r/layers/top")
        with pytest.raises(MissingLayerError):
            resolve(fake_fs)

    def test_missing_layer_in_later_root(self, fake_fs):
        """Test no partial result is returned."""
        fake_fs.mkdir("/a")
        fake_fs.write("/b/layers.conf", "layers=gone\n").mkdir("/b/layers/base")
        with pytest.raises(MissingLayerError):
            resolve(fake_fs, Path("/a"), Path("/b"))

    def test_conf_without_layers_directory(self, fake_fs):
        """Test layers.conf needs a layers directory."""
        fake_fs.write("/r/layers.conf", "layers=top\n")
        with pytest.raises(LayersDirectoryError):
            resolve(fake_fs)

    def test_unreadable_conf(self, fake_fs):
        """Test an unreadable layers.conf is fatal."""
        fake_fs.write("/r/layers.conf", "layers=top\n").deny("/r/layers.conf")
        with pytest.raises(LayersConfigError) as exc_info:
            resolve(fake_fs)
        assert exc_info.value.error_code == ErrorCode.PERMISSION_DENIED

    def test_invalid_conf(self, fake_fs):
        """Test invalid layer names are fatal."""
        fake_fs.write("/r/layers.conf", "layers=a/b\n").mkdir("/r/layers/base")
        with pytest.raises(LayersConfigError):
            resolve(fake_fs)

    def test_conf_path_overrides(self, fake_fs):
        """Test layers.conf can move the layers and add-ons directories."""
        fake_fs.write("/r/layers.conf", "layers=top\nlayers.path=system/layers\nadd-ons.path=system/add-ons\n")
        fake_fs.mkdir("/r/system/layers/top").mkdir("/r/system/layers/base")
        fake_fs.mkdir("/r/system/add-ons/extra")
        assert resolve(fake_fs) == [
            ROOT,
            ROOT / "system/layers/top",
            ROOT / "system/layers/base",
            ROOT / "system/add-ons/extra",
        ]

    def test_settings_layout(self, fake_fs):
        """Test resolver settings change the default layout."""
        fake_fs.mkdir("/r/modules/layers/base")
        settings = LayerSettings(layers_path="modules/layers")
        assert resolve(fake_fs, settings=settings) == [ROOT, ROOT / "modules/layers/base"]

    def test_reads_conf_once(self, fake_fs):
        """Test the filesystem is read once per call."""
        fake_fs.write("/r/layers.conf", "layers=\n").mkdir("/r/layers/base")
        resolve(fake_fs)
        assert fake_fs.reads == ["/r/layers.conf"]


class TestOverlays:
    """Tests for overlays."""

    def test_overlays_precede_layer(self, fake_fs):
        """Test overlays come before their layer in registration order."""
        fake_fs.write("/r/layers.conf", "layers=top\n").mkdir("/r/layers/base")
        fake_fs.write("/r/layers/top/.overlays/.overlays", "patch-2\npatch-1\n")
        fake_fs.mkdir("/r/layers/top/.overlays/patch-1").mkdir("/r/layers/top/.overlays/patch-2")
        overlays = ROOT / "layers/top/.overlays"
        assert resolve(fake_fs) == [
            ROOT,
            overlays / "patch-2",
            overlays / "patch-1",
            ROOT / "layers/top",
            ROOT / "layers/base",
        ]

    def test_registration_file_cleanup(self, fake_fs):
        """Test tabs, carriage returns and blank lines are ignored."""
        fake_fs.mkdir("/r/layers/base/.overlays/one").mkdir("/r/layers/base/.overlays/two")
        fake_fs.write("/r/layers/base/.overlays/.overlays", "\tone\r\n\n  two  \r\n")
        overlays = ROOT / "layers/base/.overlays"
        assert resolve(fake_fs) == [ROOT, overlays / "one", overlays / "two", ROOT / "layers/base"]

    def test_unregistered_overlays_ignored(self, fake_fs):
        """Test only registered overlays are searched."""
        fake_fs.mkdir("/r/layers/base/.overlays/stale")
        assert resolve(fake_fs) == [ROOT, ROOT / "layers/base"]

    def test_unreadable_overlays_directory(self, fake_fs):
        """Test an unreadable overlays directory is fatal."""
        fake_fs.mkdir("/r/layers/base/.overlays").deny("/r/layers/base/.overlays")
        with pytest.raises(OverlaysDirectoryError):
            resolve(fake_fs)

    def test_overlays_not_a_directory(self, fake_fs):
        """Test an overlays file in place of the directory is fatal."""
        fake_fs.mkdir("/r/layers/base").write("/r/layers/base/.overlays", "x")
        with pytest.raises(OverlaysDirectoryError):
            resolve(fake_fs)

    def test_unreadable_metadata(self, fake_fs):
        """Test an unreadable registration file is fatal."""
        fake_fs.write("/r/layers/base/.overlays/.overlays", "one\n")
        fake_fs.deny("/r/layers/base/.overlays/.overlays")
        with pytest.raises(OverlaysMetadataError):
            resolve(fake_fs)

    def test_missing_overlay(self, fake_fs):
        """Test a registered overlay without a directory is fatal."""
        fake_fs.write("/r/layers/base/.overlays/.overlays", "gone\n")
        with pytest.raises(OverlayRootError) as exc_info:
            resolve(fake_fs)
        assert exc_info.value.overlay == "gone"
        assert exc_info.value.error_code == ErrorCode.NOT_FOUND

    def test_unreadable_overlay(self, fake_fs):
        """Test a registered overlay that cannot be read is fatal."""
        fake_fs.write("/r/layers/base/.overlays/.overlays", "locked\n")
        fake_fs.mkdir("/r/layers/base/.overlays/locked").deny("/r/layers/base/.overlays/locked")
        with pytest.raises(OverlayRootError) as exc_info:
            resolve(fake_fs)
        assert exc_info.value.error_code == ErrorCode.PERMISSION_DENIED

    @pytest.mark.parametrize("name", ["/etc", "..", ".", "../base", "sub/dir"])
    def test_overlay_outside_overlays_directory(self, fake_fs, name):
        """Test registered names must stay inside the overlays directory."""
        fake_fs.mkdir("/etc").mkdir("/r/layers/base/.overlays/sub/dir")
        fake_fs.write("/r/layers/base/.overlays/.overlays", f"{name}\n")
        with pytest.raises(OverlaysMetadataError) as exc_info:
            resolve(fake_fs)
        assert exc_info.value.error_code == ErrorCode.INVALID_INPUT
        assert exc_info.value.path == ROOT / "layers/base/.overlays/.overlays"


class TestAddOns:
    """Tests for add-ons."""

    def test_add_ons_after_layers(self, fake_fs):
        """Test add-ons follow all layers, sorted by name, each after its overlays."""
        fake_fs.write("/r/layers.conf", "layers=top\n")
        fake_fs.mkdir("/r/layers/top").mkdir("/r/layers/base")
        fake_fs.mkdir("/r/add-ons/zeta").mkdir("/r/add-ons/alpha")
        fake_fs.write("/r/add-ons/zeta/.overlays/.overlays", "fix\n").mkdir("/r/add-ons/zeta/.overlays/fix")
        assert resolve(fake_fs) == [
            ROOT,
            ROOT / "layers/top",
            ROOT / "layers/base",
            ROOT / "add-ons/alpha",
            ROOT / "add-ons/zeta/.overlays/fix",
            ROOT / "add-ons/zeta",
        ]

    def test_unlistable_add_ons(self, fake_fs):
        """Test an add-ons directory that cannot be listed is fatal."""
        fake_fs.mkdir("/r/layers/base").mkdir("/r/add-ons").deny("/r/add-ons")
        with pytest.raises(AddOnsDirectoryError):
            resolve(fake_fs)


class TestLocalFilesystem:
    """Tests against real directories."""

    def test_reference_layout(self, make_layered_root):
        """Test the top,base layout on disk."""
        root = make_layered_root(layers=["top", "base"], conf="top,base")
        assert resolve_layered_module_path([root]) == [root, root / "layers/top", root / "layers/base"]

    def test_string_roots(self, make_layered_root):
        """Test string roots are accepted."""
        root = make_layered_root(layers=["base"])
        assert resolve_layered_module_path([str(root)]) == [root, root / "layers/base"]

    def test_complete_layout(self, make_layered_root):
        """Test layers, overlays and add-ons together."""
        root = make_layered_root(
            layers=["top", "mid", "base"],
            conf="top,mid",
            overlays={"top": ["top-2", "top-1"], "base": ["base-1"]},
            add_ons=["extra"],
            add_on_overlays={"extra": ["extra-1"]},
        )
        assert resolve_layered_module_path([root]) == [
            root,
            root / "layers/top/.overlays/top-2",
            root / "layers/top/.overlays/top-1",
            root / "layers/top",
            root / "layers/mid",
            root / "layers/base/.overlays/base-1",
            root / "layers/base",
            root / "add-ons/extra/.overlays/extra-1",
            root / "add-ons/extra",
        ]

    def test_two_roots(self, make_layered_root):
        """Test each root contributes its own layers in order."""
        first = make_layered_root("a", layers=["base"])
        second = make_layered_root("b", layers=["top", "base"], conf="top")
        assert resolve_layered_module_path([first, second]) == [
            first,
            first / "layers/base",
            second,
            second / "layers/top",
            second / "layers/base",
        ]

    def test_missing_layer_on_disk(self, make_layered_root):
        """Test a configured layer absent from disk is fatal."""
        root = make_layered_root(layers=["base"], conf="top")
        with pytest.raises(MissingLayerError):
            resolve_layered_module_path([root])

    @pytest.mark.skipif(os.geteuid() == 0, reason="root can read anything")
    def test_unreadable_overlays_on_disk(self, make_layered_root):
        """Test permissions are checked on disk."""
        root = make_layered_root(layers=["base"], overlays={"base": ["one"]})
        overlays = root / "layers/base/.overlays"
        overlays.chmod(0)
        try:
            with pytest.raises(OverlaysDirectoryError):
                resolve_layered_module_path([root])
        finally:
            overlays.chmod(0o755)


class TestLogging:
    """Tests for resolver logging."""

    def test_logs_entries(self, fake_fs):
        """Test each directory is logged at DEBUG and the total at INFO."""
        fake_fs.mkdir("/r/layers/base")
        logger = get_logger("modfilter.layers")
        records = []

        class Collect(logging.Handler):
            def emit(self, record):
                records.append(record)

        handler = Collect()
        logger.add_handler(handler)
        logger.set_level("DEBUG")
        try:
            resolve(fake_fs)
        finally:
            logger.remove_handler(handler)
            logger.set_level("INFO")

        debug = [r for r in records if r.levelno == logging.DEBUG]
        info = [r for r in records if r.levelno == logging.INFO]
        assert [r.context["directory"] for r in debug] == [ROOT, ROOT / "layers/base"]
        assert info[-1].context["entries"] == 2
