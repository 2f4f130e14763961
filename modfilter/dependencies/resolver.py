#!/usr/bin/env python3
"""Derivation of import/export path filters for dependency edges.

Every declared dependency becomes an immutable edge carrying two filters:
- the import filter decides which of the target's paths the declaring
  module sees
- the export filter decides which of those paths the declaring module
  passes on to its own dependents

``META-INF`` is hidden in both directions unless the declaration's services
mode asks for ``META-INF/services`` to be carried across the edge.

Example:
    >>> edge = DependencyFilterResolver().resolve(
    ...     DependencyDeclaration(target="com.acme.lib", export=True))
    >>> edge.export_filter.accept("META-INF/MANIFEST.MF")
    False
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Union

from modfilter.core.constants import ServicesMode
from modfilter.dependencies.declaration import (
    Declaration,
    DependencyDeclaration,
    ModuleDescriptor,
    PathRule,
    SystemDependencyDeclaration,
)
from modfilter.filters.path_filters import (
    META_INF_CHILDREN_FILTER,
    META_INF_FILTER,
    META_INF_SERVICES_FILTER,
    MultiplePathFilterBuilder,
    PathFilter,
    accept_all,
    get_default_import_filter,
    get_default_import_filter_with_services,
    multi_path_filter_builder,
)
from modfilter.infrastructure.logger import get_logger

logger = get_logger("modfilter.dependencies")


@dataclass(frozen=True)
class DependencyEdge:
    """Resolved dependency on another module."""

    import_filter: PathFilter
    export_filter: PathFilter
    services: ServicesMode
    optional: bool
    target: str


@dataclass(frozen=True)
class SystemDependencyEdge:
    """Resolved dependency on the platform's fixed path set."""

    import_filter: PathFilter
    export_filter: PathFilter
    paths: FrozenSet[str]


@dataclass(frozen=True)
class LocalDependencyEdge:
    """A module's dependency on its own content."""

    import_filter: PathFilter
    export_filter: PathFilter
    target: str


Edge = Union[DependencyEdge, SystemDependencyEdge, LocalDependencyEdge]


def _add_rules(builder: MultiplePathFilterBuilder, rules: Iterable[PathRule]) -> None:
    for rule in rules:
        builder.add_filter(rule.to_filter(), rule.include)


def _hide_meta_inf(builder: MultiplePathFilterBuilder) -> None:
    builder.add_filter(META_INF_CHILDREN_FILTER, False)
    builder.add_filter(META_INF_FILTER, False)


class DependencyFilterResolver:
    """Turns dependency declarations into edges with import/export filters.

    The resolver holds no state; one instance can serve any number of
    threads.
    """

    def build_import_filter(self, decl: DependencyDeclaration) -> PathFilter:
        """Build the import filter of a module dependency.

        Without explicit rules the shared default filter is returned. With
        rules, services come first, then the rules in declaration order,
        then ``META-INF`` is hidden.
        """
        if not decl.import_rules:
            if decl.services is ServicesMode.NONE:
                return get_default_import_filter()
            return get_default_import_filter_with_services()

        builder = multi_path_filter_builder(True)
        if decl.services is not ServicesMode.NONE:
            builder.add_filter(META_INF_SERVICES_FILTER, True)
        _add_rules(builder, decl.import_rules)
        _hide_meta_inf(builder)
        return builder.create()

    def build_export_filter(
        self,
        export: bool,
        export_rules: Iterable[PathRule],
        services: ServicesMode = ServicesMode.NONE,
    ) -> PathFilter:
        """Build an export filter.

        Args:
            export: Whether paths not matched by any rule are re-exported
            export_rules: Explicit rules, applied in order
            services: Services mode; EXPORT re-exports ``META-INF/services``

        Returns:
            Export filter
        """
        builder = multi_path_filter_builder(export)
        _add_rules(builder, export_rules)
        if services is ServicesMode.EXPORT:
            builder.add_filter(META_INF_SERVICES_FILTER, True)
        if export:
            _hide_meta_inf(builder)
        return builder.create()

    def resolve(self, decl: Declaration) -> Union[DependencyEdge, SystemDependencyEdge]:
        """Resolve one declaration into an edge.

        Args:
            decl: Module or system dependency declaration

        Returns:
            DependencyEdge or SystemDependencyEdge

        Raises:
            TypeError: If decl is not a declaration
        """
        if isinstance(decl, SystemDependencyDeclaration):
            return self._resolve_system(decl)
        if not isinstance(decl, DependencyDeclaration):
            raise TypeError(f"Not a dependency declaration: {type(decl).__name__}")

        edge = DependencyEdge(
            import_filter=self.build_import_filter(decl),
            export_filter=self.build_export_filter(decl.export, decl.export_rules, decl.services),
            services=decl.services,
            optional=decl.optional,
            target=decl.target,
        )
        logger.debug(
            "Resolved dependency",
            target=decl.target,
            import_filter=edge.import_filter,
            export_filter=edge.export_filter,
        )
        return edge

    def _resolve_system(self, decl: SystemDependencyDeclaration) -> SystemDependencyEdge:
        edge = SystemDependencyEdge(
            import_filter=accept_all(),
            export_filter=self.build_export_filter(decl.export, decl.export_rules),
            paths=decl.paths,
        )
        logger.debug("Resolved system dependency", paths=len(decl.paths), export_filter=edge.export_filter)
        return edge

    def resolve_local(self, descriptor: ModuleDescriptor) -> LocalDependencyEdge:
        """Build the edge through which a module sees its own content.

        Everything is imported; the module's own export rules decide what
        it exports, with unmatched paths exported.
        """
        builder = multi_path_filter_builder(True)
        _add_rules(builder, descriptor.export_rules)
        return LocalDependencyEdge(
            import_filter=accept_all(),
            export_filter=builder.create(),
            target=descriptor.name,
        )

    def resolve_module(self, descriptor: ModuleDescriptor) -> List[Edge]:
        """Resolve all edges of a module: the local edge first, then each dependency in order."""
        with logger.add_context(module=descriptor.name):
            edges: List[Edge] = [self.resolve_local(descriptor)]
            edges.extend(self.resolve(decl) for decl in descriptor.dependencies)
            logger.debug("Resolved module", edges=len(edges))
        return edges


_default_resolver: Optional[DependencyFilterResolver] = None


def resolve(decl: Declaration) -> Union[DependencyEdge, SystemDependencyEdge]:
    """Resolve a declaration with a shared resolver."""
    global _default_resolver
    if _default_resolver is None:
        _default_resolver = DependencyFilterResolver()
    return _default_resolver.resolve(decl)
