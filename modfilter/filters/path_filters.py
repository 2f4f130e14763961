#!/usr/bin/env python3
"""Path filter algebra.

Path filters are immutable predicates over ``/``-delimited resource paths.
Every filter compares and hashes by value, so equal configurations can be
deduplicated or used as cache keys, and may be shared across threads.

Filters are built with the factory functions of this module rather than by
instantiating the classes directly:

Example:
    >>> builder = multi_path_filter_builder(True)
    >>> builder.add_filter(match("foo/*"), False)
    >>> builder.add_filter(match("**/bar/**"), False)
    >>> f = builder.create()
    >>> f.accept("foo"), f.accept("foo/bar")
    (True, False)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import AbstractSet, Iterable, List, Pattern, Tuple, Union

from modfilter.core.constants import META_INF, META_INF_SERVICES, PATH_SEPARATOR
from modfilter.filters.glob import compile_glob


class PathFilter:
    """Base class of all path filters."""

    __slots__ = ()

    def accept(self, path: str) -> bool:
        """Determine whether a path should be accepted."""
        raise NotImplementedError

    def __call__(self, path: str) -> bool:
        return self.accept(path)


def _require_path(path: str, what: str = "path") -> str:
    if path is None:
        raise ValueError(f"{what} is None")
    if not isinstance(path, str):
        raise TypeError(f"{what} must be a string, got {type(path).__name__}")
    return path


def _require_filter(candidate: PathFilter, what: str = "filter") -> PathFilter:
    if candidate is None:
        raise ValueError(f"{what} is None")
    if not isinstance(candidate, PathFilter):
        raise TypeError(f"{what} must be a PathFilter, got {type(candidate).__name__}")
    return candidate


@dataclass(frozen=True)
class BooleanPathFilter(PathFilter):
    """Constant filter; use accept_all() / reject_all()."""

    result: bool

    def accept(self, path: str) -> bool:
        return self.result

    def __str__(self) -> str:
        return "Accept" if self.result else "Reject"


@dataclass(frozen=True)
class EqualsPathFilter(PathFilter):
    """Accepts exactly one path."""

    path: str

    def __post_init__(self):
        _require_path(self.path)

    def accept(self, path: str) -> bool:
        return path == self.path

    def __str__(self) -> str:
        return f'is "{self.path}"'


@dataclass(frozen=True)
class ChildPathFilter(PathFilter):
    """Accepts strict descendants of a path; ``prefix`` always ends in ``/``."""

    prefix: str

    def __post_init__(self):
        _require_path(self.prefix, "prefix")
        if not self.prefix.endswith(PATH_SEPARATOR):
            raise ValueError(f"prefix must end with '{PATH_SEPARATOR}': {self.prefix!r}")

    def accept(self, path: str) -> bool:
        return len(path) > len(self.prefix) and path.startswith(self.prefix)

    def __str__(self) -> str:
        return f'children of "{self.prefix}"'


@dataclass(frozen=True)
class SetPathFilter(PathFilter):
    """Accepts members of a fixed path set."""

    paths: AbstractSet[str]

    def __post_init__(self):
        if self.paths is None:
            raise ValueError("paths is None")
        frozen = frozenset(self.paths)
        for member in frozen:
            _require_path(member, "path set member")
        object.__setattr__(self, "paths", frozen)

    def accept(self, path: str) -> bool:
        return path in self.paths

    def __str__(self) -> str:
        return "in {" + ", ".join(sorted(self.paths)) + "}"


@dataclass(frozen=True)
class GlobPathFilter(PathFilter):
    """Accepts paths matching a compiled glob.

    Equality follows the compiled expression, so two spellings that compile
    to the same expression compare equal.
    """

    glob: str = field(compare=False)
    regex: str = field(init=False)
    pattern: Pattern[str] = field(init=False, compare=False, repr=False)

    def __post_init__(self):
        _require_path(self.glob, "glob")
        compiled = compile_glob(self.glob)
        object.__setattr__(self, "pattern", compiled)
        object.__setattr__(self, "regex", compiled.pattern)

    def accept(self, path: str) -> bool:
        return self.pattern.fullmatch(path) is not None

    def __str__(self) -> str:
        return f'match "{self.glob}"'


@dataclass(frozen=True)
class InvertingPathFilter(PathFilter):
    """Accepts exactly what its delegate rejects; use not_()."""

    delegate: PathFilter

    def __post_init__(self):
        _require_filter(self.delegate, "delegate")

    def accept(self, path: str) -> bool:
        return not self.delegate.accept(path)

    def __str__(self) -> str:
        return f"not {self.delegate}"


class AggregateMode(Enum):
    """Combination mode of an AggregatePathFilter.

    The value is the dominant result: the first delegate returning it
    decides the outcome.
    """

    ANY = True
    ALL = False

    @property
    def dominant(self) -> bool:
        return self.value


@dataclass(frozen=True)
class AggregatePathFilter(PathFilter):
    """Short-circuiting ``any`` / ``all`` over an ordered tuple of filters."""

    mode: AggregateMode
    delegates: Tuple[PathFilter, ...]

    def __post_init__(self):
        delegates = tuple(self.delegates)
        for delegate in delegates:
            _require_filter(delegate, "delegate")
        object.__setattr__(self, "delegates", delegates)

    def accept(self, path: str) -> bool:
        dominant = self.mode.dominant
        for delegate in self.delegates:
            if delegate.accept(path) == dominant:
                return dominant
        return not dominant

    def __str__(self) -> str:
        label = "Any" if self.mode is AggregateMode.ANY else "All"
        return f"{label} of (" + ",".join(str(d) for d in self.delegates) + ")"


@dataclass(frozen=True)
class MultiplePathFilter(PathFilter):
    """Ordered include/exclude rules; the first accepting rule decides.

    Rule order is significant and is never changed after construction.
    """

    rules: Tuple[Tuple[PathFilter, bool], ...]
    default: bool

    def accept(self, path: str) -> bool:
        for rule_filter, include in self.rules:
            if rule_filter.accept(path):
                return include
        return self.default

    def __str__(self) -> str:
        parts = [f"{'include' if include else 'exclude'} {rule_filter}, " for rule_filter, include in self.rules]
        return (
            "multi-path filter {"
            + "".join(parts)
            + f"default {'accept' if self.default else 'reject'}"
            + "}"
        )


ACCEPT_ALL = BooleanPathFilter(True)
REJECT_ALL = BooleanPathFilter(False)


class MultiplePathFilterBuilder:
    """Collects ordered ``(filter, include)`` rules for a MultiplePathFilter."""

    def __init__(self, default: bool):
        """Initialize builder.

        Args:
            default: Result for paths that no rule accepts
        """
        self._default = bool(default)
        self._rules: List[Tuple[PathFilter, bool]] = []

    @property
    def default(self) -> bool:
        return self._default

    def add_filter(self, path_filter: PathFilter, include: bool) -> "MultiplePathFilterBuilder":
        """Append a rule.

        Args:
            path_filter: Filter deciding whether the rule applies
            include: True to include matching paths, False to exclude them

        Returns:
            This builder
        """
        _require_filter(path_filter)
        self._rules.append((path_filter, bool(include)))
        return self

    def create(self) -> PathFilter:
        """Create the filter from the rules added so far.

        Returns:
            A MultiplePathFilter, or the constant filter for the default
            when no rules were added
        """
        if not self._rules:
            return ACCEPT_ALL if self._default else REJECT_ALL
        return MultiplePathFilter(tuple(self._rules), self._default)

    def is_empty(self) -> bool:
        return not self._rules

    def __len__(self) -> int:
        return len(self._rules)


FilterArgs = Union[PathFilter, Iterable[PathFilter]]


def _collect(filters: Tuple[FilterArgs, ...]) -> Tuple[PathFilter, ...]:
    # any_(a, b) and any_([a, b]) are equivalent
    if len(filters) == 1 and not isinstance(filters[0], PathFilter) and filters[0] is not None:
        return tuple(filters[0])
    return tuple(filters)


def accept_all() -> PathFilter:
    """Get the filter which always returns True."""
    return ACCEPT_ALL


def reject_all() -> PathFilter:
    """Get the filter which always returns False."""
    return REJECT_ALL


def is_(path: str) -> PathFilter:
    """Get a filter which matches an exact path name."""
    return EqualsPathFilter(path)


def is_child_of(path: str) -> PathFilter:
    """Get a filter which matches any strict descendant of path.

    The path itself is not matched; a trailing ``/`` on the argument is not
    doubled.
    """
    _require_path(path)
    return ChildPathFilter(path if path.endswith(PATH_SEPARATOR) else path + PATH_SEPARATOR)


def is_or_is_child_of(path: str) -> PathFilter:
    """Get a filter which matches a path and all of its descendants."""
    return any_(is_(path), is_child_of(path))


def in_(paths: Iterable[str]) -> PathFilter:
    """Get a filter which matches members of a fixed path set.

    The set is copied; None members are rejected.
    """
    if paths is None:
        raise ValueError("paths is None")
    return SetPathFilter(frozenset(paths))


def match(glob: str) -> PathFilter:
    """Get a filter which matches a glob; see modfilter.filters.glob."""
    return GlobPathFilter(glob)


def not_(path_filter: PathFilter) -> PathFilter:
    """Get the inverse of a filter.

    Inverting an inverting filter returns its delegate, and inverting a
    constant returns the opposite constant.
    """
    _require_filter(path_filter)
    if isinstance(path_filter, InvertingPathFilter):
        return path_filter.delegate
    if isinstance(path_filter, BooleanPathFilter):
        return REJECT_ALL if path_filter.result else ACCEPT_ALL
    return InvertingPathFilter(path_filter)


def any_(*filters: FilterArgs) -> PathFilter:
    """Get a filter which returns True if any of the given filters does."""
    return AggregatePathFilter(AggregateMode.ANY, _collect(filters))


def all_(*filters: FilterArgs) -> PathFilter:
    """Get a filter which returns True if all of the given filters do."""
    return AggregatePathFilter(AggregateMode.ALL, _collect(filters))


def none_(*filters: FilterArgs) -> PathFilter:
    """Get a filter which returns True if none of the given filters does."""
    return not_(any_(*filters))


def multi_path_filter_builder(default: bool) -> MultiplePathFilterBuilder:
    """Get a builder for a first-match-wins include/exclude filter.

    Args:
        default: Result for paths that no rule accepts
    """
    return MultiplePathFilterBuilder(default)


# Well-known filters, built once at import.
META_INF_FILTER = is_(META_INF)
META_INF_CHILDREN_FILTER = is_child_of(META_INF)
META_INF_SERVICES_FILTER = any_(is_(META_INF_SERVICES), is_child_of(META_INF_SERVICES))

DEFAULT_IMPORT_FILTER = (
    multi_path_filter_builder(True)
    .add_filter(META_INF_CHILDREN_FILTER, False)
    .add_filter(META_INF_FILTER, False)
    .create()
)

DEFAULT_IMPORT_FILTER_WITH_SERVICES = (
    multi_path_filter_builder(True)
    .add_filter(is_(META_INF_SERVICES), True)
    .add_filter(is_child_of(META_INF_SERVICES), True)
    .add_filter(META_INF_CHILDREN_FILTER, False)
    .add_filter(META_INF_FILTER, False)
    .create()
)


def get_default_import_filter() -> PathFilter:
    """Get the default import filter, which excludes META-INF and everything under it."""
    return DEFAULT_IMPORT_FILTER


def get_default_import_filter_with_services() -> PathFilter:
    """Get the default import filter which keeps only META-INF/services visible under META-INF."""
    return DEFAULT_IMPORT_FILTER_WITH_SERVICES


def get_meta_inf_filter() -> PathFilter:
    return META_INF_FILTER


def get_meta_inf_subdirectories_filter() -> PathFilter:
    return META_INF_CHILDREN_FILTER


def get_meta_inf_services_filter() -> PathFilter:
    return META_INF_SERVICES_FILTER
