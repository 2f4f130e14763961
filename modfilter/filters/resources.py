#!/usr/bin/env python3
"""Applying path filters to resources and class names.

Resources are anything with a ``/``-delimited name: plain strings, or
objects exposing a ``name`` attribute. Class filters decide visibility of
dotted class names by testing the resource path the class is loaded from.

Example:
    >>> names = ["META-INF/MANIFEST.MF", "com/acme/Foo.class"]
    >>> list(filtered(get_default_import_filter(), names))
    ['com/acme/Foo.class']
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, Optional, TypeVar

from modfilter.core.constants import PATH_SEPARATOR
from modfilter.filters.path_filters import (
    ACCEPT_ALL,
    META_INF_CHILDREN_FILTER,
    META_INF_FILTER,
    PathFilter,
    multi_path_filter_builder,
)

CLASS_SUFFIX = ".class"

R = TypeVar("R")


def resource_name(resource: Any) -> str:
    """Get the path of a resource: the string itself or its ``name`` attribute."""
    if isinstance(resource, str):
        return resource
    return resource.name


def filtered(
    path_filter: PathFilter,
    resources: Iterable[R],
    name: Optional[Callable[[R], str]] = None,
) -> Iterator[R]:
    """Lazily yield the resources whose path the filter accepts.

    Args:
        path_filter: Filter applied to each resource path
        resources: Resources to filter, consumed on demand
        name: Function extracting a resource path (default: resource_name)

    Yields:
        Accepted resources in their original order
    """
    if path_filter is None:
        raise ValueError("filter is None")
    get_name = name or resource_name
    for resource in resources:
        if path_filter.accept(get_name(resource)):
            yield resource


def class_resource_path(class_name: str) -> str:
    """Map a dotted class name to its resource path (``a.b.C`` to ``a/b/C.class``)."""
    return class_name.replace(".", PATH_SEPARATOR) + CLASS_SUFFIX


class ClassFilter:
    """Predicate over dotted class names."""

    __slots__ = ()

    def accept(self, class_name: str) -> bool:
        raise NotImplementedError

    def __call__(self, class_name: str) -> bool:
        return self.accept(class_name)


@dataclass(frozen=True)
class BooleanClassFilter(ClassFilter):
    result: bool

    def accept(self, class_name: str) -> bool:
        return self.result

    def __str__(self) -> str:
        return "Accept" if self.result else "Reject"


@dataclass(frozen=True)
class PathClassFilter(ClassFilter):
    """Accepts classes whose resource path the wrapped path filter accepts."""

    path_filter: PathFilter

    def accept(self, class_name: str) -> bool:
        return self.path_filter.accept(class_resource_path(class_name))

    def __str__(self) -> str:
        return f"classes of {self.path_filter}"


CLASS_ACCEPT_ALL = BooleanClassFilter(True)
CLASS_REJECT_ALL = BooleanClassFilter(False)


def class_accept_all() -> ClassFilter:
    return CLASS_ACCEPT_ALL


def class_reject_all() -> ClassFilter:
    return CLASS_REJECT_ALL


def from_resource_path_filter(path_filter: PathFilter) -> ClassFilter:
    """Get a class filter backed by a resource path filter.

    Args:
        path_filter: Filter over resource paths

    Returns:
        class_accept_all() when the path filter accepts everything,
        otherwise a PathClassFilter
    """
    if path_filter is None:
        raise ValueError("filter is None")
    if path_filter == ACCEPT_ALL:
        return CLASS_ACCEPT_ALL
    return PathClassFilter(path_filter)


META_INF_SUBDIRECTORIES_WITHOUT_META_INF_FILTER = (
    multi_path_filter_builder(True)
    .add_filter(META_INF_CHILDREN_FILTER, True)
    .add_filter(META_INF_FILTER, False)
    .create()
)


def get_meta_inf_subdirectories_without_meta_inf_filter() -> PathFilter:
    """Get a filter matching everything except META-INF itself.

    Subdirectories of META-INF stay visible.
    """
    return META_INF_SUBDIRECTORIES_WITHOUT_META_INF_FILTER
