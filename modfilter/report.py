#!/usr/bin/env python3
"""Text reports rendered with Jinja2.

This module renders human-readable reports of:
- Layered module paths
- Resolved dependency edges and their filters
- Path visibility checks across dependency edges

Example:
    >>> print(render_module_path([Path("/opt/modules")]))
    Layered module path (1 entry):
      1  /opt/modules
"""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

import jinja2

from modfilter.dependencies.resolver import (
    DependencyEdge,
    Edge,
    LocalDependencyEdge,
    SystemDependencyEdge,
)

MODULE_PATH_TEMPLATE = """\
Layered module path ({{ entries|length }} {{ "entry" if entries|length == 1 else "entries" }}):
{% for entry in entries %}
{{ "%3d"|format(loop.index) }}  {{ entry }}
{% endfor %}
"""

EDGES_TEMPLATE = """\
Module {{ module }}
{% for edge in edges %}
  [{{ loop.index }}] {{ edge.kind }} {{ edge.target }}{% if edge.optional %} (optional){% endif %}

      import:   {{ edge.import_filter }}
      export:   {{ edge.export_filter }}
{% if edge.services %}
      services: {{ edge.services }}
{% endif %}
{% endfor %}
"""

CHECK_TEMPLATE = """\
Module {{ module }}
{% for edge in edges %}
  [{{ loop.index }}] {{ edge.kind }} {{ edge.target }}
{% for row in edge.rows %}
      {{ row.path }}: {{ "imported" if row.imported else "hidden" }}, {{ "exported" if row.exported else "not exported" }}
{% endfor %}
{% endfor %}
"""

TEMPLATES = {
    "module_path.txt": MODULE_PATH_TEMPLATE,
    "edges.txt": EDGES_TEMPLATE,
    "check.txt": CHECK_TEMPLATE,
}

_environment: Optional[jinja2.Environment] = None


def get_environment() -> jinja2.Environment:
    """Get or create the Jinja2 environment holding the report templates."""
    global _environment
    if _environment is None:
        _environment = jinja2.Environment(
            loader=jinja2.DictLoader(TEMPLATES),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=jinja2.StrictUndefined,
            autoescape=False,
        )
    return _environment


def edge_view(edge: Edge) -> Dict[str, Any]:
    """Flatten an edge into the fields the templates display."""
    if isinstance(edge, LocalDependencyEdge):
        kind, target, optional, services = "local", edge.target, False, None
    elif isinstance(edge, SystemDependencyEdge):
        kind, target, optional, services = "system", f"({len(edge.paths)} paths)", False, None
    elif isinstance(edge, DependencyEdge):
        kind, target, optional, services = "module", edge.target, edge.optional, edge.services.value
    else:
        raise TypeError(f"Not a dependency edge: {type(edge).__name__}")

    return {
        "kind": kind,
        "target": target,
        "optional": optional,
        "services": services if services != "none" else None,
        "import_filter": str(edge.import_filter),
        "export_filter": str(edge.export_filter),
    }


def _imports(edge: Edge, path: str) -> bool:
    # The platform only offers the paths it lists
    if isinstance(edge, SystemDependencyEdge) and path not in edge.paths:
        return False
    return edge.import_filter.accept(path)


def render_module_path(entries: Sequence[Path]) -> str:
    """Render a layered module path, one numbered directory per line."""
    return get_environment().get_template("module_path.txt").render(entries=[str(e) for e in entries])


def render_edges(module: str, edges: Iterable[Edge]) -> str:
    """Render the resolved edges of a module with their filters."""
    return get_environment().get_template("edges.txt").render(
        module=module, edges=[edge_view(e) for e in edges]
    )


def render_check(module: str, edges: Iterable[Edge], paths: Sequence[str]) -> str:
    """Render whether each path crosses each edge.

    A path is exported only when it is also imported.
    """
    views: List[Dict[str, Any]] = []
    for edge in edges:
        view = edge_view(edge)
        rows = []
        for path in paths:
            imported = _imports(edge, path)
            rows.append(
                {
                    "path": path,
                    "imported": imported,
                    "exported": imported and edge.export_filter.accept(path),
                }
            )
        view["rows"] = rows
        views.append(view)
    return get_environment().get_template("check.txt").render(module=module, edges=views)
