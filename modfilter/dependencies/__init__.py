"""modfilter Dependencies - declarations and import/export filter derivation."""

from .declaration import (
    Declaration,
    DependencyDeclaration,
    DescriptorError,
    ModuleDescriptor,
    PathRule,
    SystemDependencyDeclaration,
    exclude,
    exclude_set,
    include,
    include_set,
    load_module_descriptor,
    parse_dependency,
    parse_module_descriptor,
    parse_path_rule,
    parse_rule_list,
    parse_system_dependency,
)
from .resolver import (
    DependencyEdge,
    DependencyFilterResolver,
    Edge,
    LocalDependencyEdge,
    SystemDependencyEdge,
    resolve,
)

__all__ = [
    # Declarations
    "Declaration",
    "DependencyDeclaration",
    "SystemDependencyDeclaration",
    "ModuleDescriptor",
    "PathRule",
    "DescriptorError",
    "include",
    "exclude",
    "include_set",
    "exclude_set",
    # Descriptor parsing
    "parse_path_rule",
    "parse_rule_list",
    "parse_dependency",
    "parse_system_dependency",
    "parse_module_descriptor",
    "load_module_descriptor",
    # Resolution
    "DependencyEdge",
    "SystemDependencyEdge",
    "LocalDependencyEdge",
    "Edge",
    "DependencyFilterResolver",
    "resolve",
]
