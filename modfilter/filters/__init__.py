"""modfilter Filters - path filter algebra and glob compilation.

Filters are immutable, compare by value and are safe to share between
threads. Build them with the factory functions exported here.
"""

from .glob import compile_glob, glob_to_regex, is_glob
from .path_filters import (
    ACCEPT_ALL,
    DEFAULT_IMPORT_FILTER,
    DEFAULT_IMPORT_FILTER_WITH_SERVICES,
    META_INF_CHILDREN_FILTER,
    META_INF_FILTER,
    META_INF_SERVICES_FILTER,
    REJECT_ALL,
    AggregateMode,
    AggregatePathFilter,
    BooleanPathFilter,
    ChildPathFilter,
    EqualsPathFilter,
    GlobPathFilter,
    InvertingPathFilter,
    MultiplePathFilter,
    MultiplePathFilterBuilder,
    PathFilter,
    SetPathFilter,
    accept_all,
    all_,
    any_,
    get_default_import_filter,
    get_default_import_filter_with_services,
    get_meta_inf_filter,
    get_meta_inf_services_filter,
    get_meta_inf_subdirectories_filter,
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
from .resources import (
    ClassFilter,
    class_accept_all,
    class_reject_all,
    class_resource_path,
    filtered,
    from_resource_path_filter,
    get_meta_inf_subdirectories_without_meta_inf_filter,
)

__all__ = [
    # Glob compilation
    "compile_glob",
    "glob_to_regex",
    "is_glob",
    # Filter types
    "PathFilter",
    "BooleanPathFilter",
    "EqualsPathFilter",
    "ChildPathFilter",
    "SetPathFilter",
    "GlobPathFilter",
    "InvertingPathFilter",
    "AggregateMode",
    "AggregatePathFilter",
    "MultiplePathFilter",
    "MultiplePathFilterBuilder",
    # Factories
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
    # Well-known filters
    "ACCEPT_ALL",
    "REJECT_ALL",
    "META_INF_FILTER",
    "META_INF_CHILDREN_FILTER",
    "META_INF_SERVICES_FILTER",
    "DEFAULT_IMPORT_FILTER",
    "DEFAULT_IMPORT_FILTER_WITH_SERVICES",
    "get_default_import_filter",
    "get_default_import_filter_with_services",
    "get_meta_inf_filter",
    "get_meta_inf_subdirectories_filter",
    "get_meta_inf_services_filter",
    # Resources and classes
    "ClassFilter",
    "class_accept_all",
    "class_reject_all",
    "class_resource_path",
    "filtered",
    "from_resource_path_filter",
    "get_meta_inf_subdirectories_without_meta_inf_filter",
]
