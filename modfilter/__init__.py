"""
modfilter - module path filters and layered module paths.

Decides which resource paths are visible across module dependency edges
and in which order layered content roots are searched.
"""

from modfilter.core.constants import MODFILTER_VERSION, ServicesMode
from modfilter.dependencies import (
    DependencyDeclaration,
    DependencyEdge,
    DependencyFilterResolver,
    DescriptorError,
    ModuleDescriptor,
    PathRule,
    SystemDependencyDeclaration,
    SystemDependencyEdge,
    load_module_descriptor,
)
from modfilter.filters import (
    PathFilter,
    accept_all,
    all_,
    any_,
    in_,
    is_,
    is_child_of,
    is_or_is_child_of,
    match,
    multi_path_filter_builder,
    none_,
    not_,
    reject_all,
)
from modfilter.layers import LayeredPathError, LayeredPathResolver, resolve_layered_module_path

__version__ = MODFILTER_VERSION

__all__ = [
    "__version__",
    "ServicesMode",
    # Filters
    "PathFilter",
    "accept_all",
    "reject_all",
    "is_",
    "is_child_of",
    "is_or_is_child_of",
    "in_",
    "match",
    "not_",
    "any_",
    "all_",
    "none_",
    "multi_path_filter_builder",
    # Dependencies
    "PathRule",
    "DependencyDeclaration",
    "SystemDependencyDeclaration",
    "ModuleDescriptor",
    "DescriptorError",
    "DependencyEdge",
    "SystemDependencyEdge",
    "DependencyFilterResolver",
    "load_module_descriptor",
    # Layers
    "LayeredPathResolver",
    "LayeredPathError",
    "resolve_layered_module_path",
]
