#!/usr/bin/env python3
"""Tests for text reports."""

from pathlib import Path

import pytest

from modfilter.core.constants import ServicesMode
from modfilter.dependencies.declaration import parse_module_descriptor
from modfilter.dependencies.resolver import DependencyFilterResolver, SystemDependencyEdge
from modfilter.filters.path_filters import accept_all, reject_all
from modfilter.report import edge_view, render_check, render_edges, render_module_path


@pytest.fixture
def edges(sample_descriptor):
    descriptor = parse_module_descriptor(sample_descriptor)
    return DependencyFilterResolver().resolve_module(descriptor)


class TestModulePath:
    """Tests for render_module_path."""

    def test_single_entry(self):
        """Test the singular heading."""
        text = render_module_path([Path("/opt/modules")])
        assert text == "Layered module path (1 entry):\n  1  /opt/modules\n"

    def test_numbered_entries(self):
        """Test entries are numbered in order."""
        text = render_module_path([Path("/r"), Path("/r/layers/base")])
        assert text.splitlines() == [
            "Layered module path (2 entries):",
            "  1  /r",
            "  2  /r/layers/base",
        ]

    def test_empty(self):
        """Test an empty path."""
        assert render_module_path([]) == "Layered module path (0 entries):\n"


class TestEdgeView:
    """Tests for edge_view."""

    def test_kinds(self, edges):
        """Test each edge kind is labelled."""
        views = [edge_view(e) for e in edges]
        assert [v["kind"] for v in views] == ["local", "module", "module", "system"]
        assert views[0]["target"] == "com.acme.app"
        assert views[2]["optional"] is True
        assert views[3]["target"] == "(2 paths)"

    def test_services(self, edges):
        """Test services are shown only when carried."""
        views = [edge_view(e) for e in edges]
        assert views[0]["services"] is None
        assert views[1]["services"] == ServicesMode.IMPORT.value
        assert views[2]["services"] == ServicesMode.EXPORT.value

    def test_filters_are_strings(self):
        """Test filters are rendered with their descriptions."""
        edge = SystemDependencyEdge(import_filter=accept_all(), export_filter=reject_all(), paths=frozenset())
        view = edge_view(edge)
        assert view["import_filter"] == "Accept"
        assert view["export_filter"] == "Reject"

    def test_not_an_edge(self):
        """Test other objects are rejected."""
        with pytest.raises(TypeError):
            edge_view("com.acme.lib")


class TestEdges:
    """Tests for render_edges."""

    def test_render(self, edges):
        """Test edges are listed with their filters."""
        text = render_edges("com.acme.app", edges)
        lines = text.splitlines()
        assert lines[0] == "Module com.acme.app"
        assert lines[1] == "  [1] local com.acme.app"
        assert "      import:   Accept" in lines
        assert (
            '      export:   multi-path filter {exclude children of "com/acme/app/internal/", default accept}'
            in lines
        )
        assert "  [2] module com.acme.lib" in lines
        assert "  [3] module com.acme.spi (optional)" in lines
        assert "  [4] system (2 paths)" in lines
        assert "      services: import" in lines
        assert "      services: export" in lines

    def test_no_edges(self):
        """Test a module without edges."""
        assert render_edges("empty", []) == "Module empty\n"


class TestCheck:
    """Tests for render_check."""

    def test_local_edge(self, edges):
        """Test a module's own export rules."""
        text = render_check("com.acme.app", edges[:1], ["com/acme/app/Main.class", "com/acme/app/internal/Impl.class"])
        assert text.splitlines() == [
            "Module com.acme.app",
            "  [1] local com.acme.app",
            "      com/acme/app/Main.class: imported, exported",
            "      com/acme/app/internal/Impl.class: imported, not exported",
        ]

    def test_module_edge(self, edges):
        """Test import rules and META-INF hiding."""
        text = render_check(
            "com.acme.app",
            [edges[1]],
            ["com/acme/lib/api/Api.class", "com/acme/lib/impl", "META-INF/MANIFEST.MF", "META-INF/services/x.Spi"],
        )
        lines = text.splitlines()
        assert "      com/acme/lib/api/Api.class: imported, exported" in lines
        assert "      com/acme/lib/impl: hidden, not exported" in lines
        assert "      META-INF/MANIFEST.MF: hidden, not exported" in lines
        assert "      META-INF/services/x.Spi: imported, not exported" in lines

    def test_services_export(self, edges):
        """Test services are re-exported in export mode."""
        text = render_check("com.acme.app", [edges[2]], ["META-INF/services/x.Spi", "com/acme/spi/Spi.class"])
        lines = text.splitlines()
        assert "      META-INF/services/x.Spi: imported, exported" in lines
        assert "      com/acme/spi/Spi.class: imported, not exported" in lines

    def test_system_edge(self, edges):
        """Test only listed platform paths are imported."""
        text = render_check("com.acme.app", [edges[3]], ["javax/sql", "javax/naming", "javax/swing"])
        lines = text.splitlines()
        assert "      javax/sql: imported, exported" in lines
        assert "      javax/naming: imported, not exported" in lines
        assert "      javax/swing: hidden, not exported" in lines
