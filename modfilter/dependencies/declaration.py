#!/usr/bin/env python3
"""Dependency declarations and the YAML module descriptor surface.

A module descriptor names a module, its own export rules and an ordered list
of dependencies on other modules or on the platform:

    name: com.acme.app
    exports:
      - exclude: com/acme/internal/
    dependencies:
      - module: com.acme.lib
        export: true
        services: import
        imports:
          - include: com/acme/lib/api/
      - system:
          paths: [javax/sql]

Parsing validates everything up front, so a declaration handed to the
dependency resolver is always well formed.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple, Union

import yaml

from modfilter.core.constants import ErrorCode, RuleType, ServicesMode
from modfilter.core.validators import ValidationError, validate_rule_path
from modfilter.filters.glob import is_glob
from modfilter.filters.path_filters import PathFilter, in_, is_, is_child_of, match


class DescriptorError(Exception):
    """Malformed module descriptor or dependency declaration."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


@dataclass(frozen=True)
class PathRule:
    """One include/exclude rule of a dependency declaration.

    Exactly one of ``path`` and ``paths`` is set. A single path is a glob
    when it contains ``*`` or ``?``, names a directory's descendants when
    it ends in ``/``, and is an exact path otherwise.
    """

    include: bool
    path: Optional[str] = None
    paths: Optional[FrozenSet[str]] = None

    def __post_init__(self):
        if (self.path is None) == (self.paths is None):
            raise ValueError("PathRule needs exactly one of path or paths")
        if self.paths is not None:
            object.__setattr__(self, "paths", frozenset(self.paths))

    @property
    def is_set(self) -> bool:
        return self.paths is not None

    def to_filter(self) -> PathFilter:
        """Build the path filter selecting the paths this rule applies to."""
        if self.paths is not None:
            return in_(self.paths)
        if is_glob(self.path):
            return match(self.path)
        if self.path.endswith("/"):
            return is_child_of(self.path)
        return is_(self.path)

    @property
    def rule_type(self) -> RuleType:
        if self.is_set:
            return RuleType.INCLUDE_SET if self.include else RuleType.EXCLUDE_SET
        return RuleType.INCLUDE if self.include else RuleType.EXCLUDE

    def __str__(self) -> str:
        if self.paths is not None:
            return f"{self.rule_type.value} [{', '.join(sorted(self.paths))}]"
        return f"{self.rule_type.value} {self.path}"


def include(path: str) -> PathRule:
    return PathRule(include=True, path=path)


def exclude(path: str) -> PathRule:
    return PathRule(include=False, path=path)


def include_set(paths: Iterable[str]) -> PathRule:
    return PathRule(include=True, paths=frozenset(paths))


def exclude_set(paths: Iterable[str]) -> PathRule:
    return PathRule(include=False, paths=frozenset(paths))


@dataclass(frozen=True)
class DependencyDeclaration:
    """Declared dependency of one module on another."""

    target: str
    export: bool = False
    optional: bool = False
    services: ServicesMode = ServicesMode.NONE
    import_rules: Tuple[PathRule, ...] = ()
    export_rules: Tuple[PathRule, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "import_rules", tuple(self.import_rules))
        object.__setattr__(self, "export_rules", tuple(self.export_rules))


@dataclass(frozen=True)
class SystemDependencyDeclaration:
    """Dependency on the platform, which exposes a fixed set of paths."""

    paths: FrozenSet[str] = frozenset()
    export: bool = False
    export_rules: Tuple[PathRule, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "paths", frozenset(self.paths))
        object.__setattr__(self, "export_rules", tuple(self.export_rules))


Declaration = Union[DependencyDeclaration, SystemDependencyDeclaration]


@dataclass(frozen=True)
class ModuleDescriptor:
    """A module's name, its own export rules and its ordered dependencies."""

    name: str
    export_rules: Tuple[PathRule, ...] = ()
    dependencies: Tuple[Declaration, ...] = field(default=())

    def __post_init__(self):
        object.__setattr__(self, "export_rules", tuple(self.export_rules))
        object.__setattr__(self, "dependencies", tuple(self.dependencies))


DEPENDENCY_KEYS = frozenset({"module", "export", "optional", "services", "imports", "exports"})
SYSTEM_DEPENDENCY_KEYS = frozenset({"export", "paths", "exports"})
DESCRIPTOR_KEYS = frozenset({"name", "exports", "dependencies"})


def _check_keys(data: Mapping[str, Any], allowed: FrozenSet[str], where: str) -> None:
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise DescriptorError(f"Unknown {where} attribute(s): {', '.join(map(str, unknown))}")


def _parse_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise DescriptorError(f"'{key}' must be a boolean, got {value!r}")


def _parse_path(value: Any) -> str:
    try:
        validate_rule_path(value)
    except ValidationError as e:
        raise DescriptorError(f"Invalid rule path {value!r}: {e}", e.error_code) from e
    return value


def _parse_paths(value: Any, key: str) -> FrozenSet[str]:
    if isinstance(value, str) or not isinstance(value, (list, tuple, set, frozenset)):
        raise DescriptorError(f"'{key}' must be a list of paths, got {value!r}")
    return frozenset(_parse_path(item) for item in value)


def parse_path_rule(data: Mapping[str, Any]) -> PathRule:
    """Parse one rule element.

    Accepts ``{include: PATH}``, ``{exclude: PATH}``,
    ``{include-set: [PATH, ...]}`` and ``{exclude-set: [PATH, ...]}``.
    The long form ``{include: {path: PATH}}`` and
    ``{include-set: {paths: [...]}}`` is accepted too.

    Raises:
        DescriptorError: If the element is not exactly one known rule
    """
    if not isinstance(data, Mapping) or len(data) != 1:
        raise DescriptorError(f"Rule must be a mapping with exactly one key, got {data!r}")

    key, value = next(iter(data.items()))
    try:
        rule_type = RuleType(key)
    except ValueError:
        raise DescriptorError(f"Unknown rule type: {key!r}") from None

    is_include = rule_type in (RuleType.INCLUDE, RuleType.INCLUDE_SET)
    if rule_type in (RuleType.INCLUDE_SET, RuleType.EXCLUDE_SET):
        if isinstance(value, Mapping):
            _check_keys(value, frozenset({"paths"}), key)
            if "paths" not in value:
                raise DescriptorError(f"'{key}' requires a 'paths' attribute")
            value = value["paths"]
        return PathRule(include=is_include, paths=_parse_paths(value, key))

    if isinstance(value, Mapping):
        _check_keys(value, frozenset({"path"}), key)
        if "path" not in value:
            raise DescriptorError(f"'{key}' requires a 'path' attribute")
        value = value["path"]
    if value is None:
        raise DescriptorError(f"'{key}' requires a path")
    return PathRule(include=is_include, path=_parse_path(value))


def parse_rule_list(data: Any) -> Tuple[PathRule, ...]:
    """Parse an ordered list of rule elements; None means no rules."""
    if data is None:
        return ()
    if not isinstance(data, (list, tuple)):
        raise DescriptorError(f"Rules must be a list, got {data!r}")
    return tuple(parse_path_rule(item) for item in data)


def parse_dependency(data: Mapping[str, Any]) -> DependencyDeclaration:
    """Parse a module dependency element.

    Raises:
        DescriptorError: On a missing module name, unknown attribute, bad
            boolean or unknown services value
    """
    if not isinstance(data, Mapping):
        raise DescriptorError(f"Dependency must be a mapping, got {data!r}")
    _check_keys(data, DEPENDENCY_KEYS, "dependency")

    target = data.get("module")
    if not isinstance(target, str) or not target:
        raise DescriptorError("Dependency requires a 'module' name")

    services = data.get("services", ServicesMode.NONE.value)
    try:
        services_mode = ServicesMode.parse(services)
    except ValueError as e:
        raise DescriptorError(str(e)) from e

    return DependencyDeclaration(
        target=target,
        export=_parse_bool(data.get("export", False), "export"),
        optional=_parse_bool(data.get("optional", False), "optional"),
        services=services_mode,
        import_rules=parse_rule_list(data.get("imports")),
        export_rules=parse_rule_list(data.get("exports")),
    )


def parse_system_dependency(data: Optional[Mapping[str, Any]]) -> SystemDependencyDeclaration:
    """Parse a platform dependency element (the value under ``system``)."""
    if data is None:
        return SystemDependencyDeclaration()
    if not isinstance(data, Mapping):
        raise DescriptorError(f"System dependency must be a mapping, got {data!r}")
    _check_keys(data, SYSTEM_DEPENDENCY_KEYS, "system dependency")

    paths = data.get("paths")
    return SystemDependencyDeclaration(
        paths=frozenset() if paths is None else _parse_paths(paths, "paths"),
        export=_parse_bool(data.get("export", False), "export"),
        export_rules=parse_rule_list(data.get("exports")),
    )


def _parse_dependency_element(data: Any) -> Declaration:
    if isinstance(data, Mapping) and "system" in data:
        if len(data) != 1:
            raise DescriptorError("A 'system' dependency takes no sibling attributes")
        return parse_system_dependency(data["system"])
    return parse_dependency(data)


def parse_module_descriptor(data: Mapping[str, Any]) -> ModuleDescriptor:
    """Parse a whole module descriptor mapping.

    Raises:
        DescriptorError: If the descriptor is malformed
    """
    if not isinstance(data, Mapping):
        raise DescriptorError("Module descriptor must be a mapping")
    _check_keys(data, DESCRIPTOR_KEYS, "descriptor")

    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise DescriptorError("Module descriptor requires a 'name'")

    dependencies = data.get("dependencies") or []
    if not isinstance(dependencies, list):
        raise DescriptorError("'dependencies' must be a list")

    parsed: List[Declaration] = [_parse_dependency_element(item) for item in dependencies]
    return ModuleDescriptor(
        name=name,
        export_rules=parse_rule_list(data.get("exports")),
        dependencies=tuple(parsed),
    )


def load_module_descriptor(file_path: Union[str, Path]) -> ModuleDescriptor:
    """Load and parse a YAML module descriptor file.

    Raises:
        DescriptorError: If the file cannot be read or parsed, or is malformed
    """
    path = Path(file_path)
    if not path.exists():
        raise DescriptorError(f"Descriptor not found: {file_path}", ErrorCode.NOT_FOUND)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data: Dict[str, Any] = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise DescriptorError(f"YAML parse error in {file_path}: {e}") from e
    except OSError as e:
        raise DescriptorError(
            f"Error reading descriptor {file_path}: {e}", ErrorCode.PERMISSION_DENIED
        ) from e

    try:
        return parse_module_descriptor(data)
    except DescriptorError as e:
        raise DescriptorError(f"{file_path}: {e.message}", e.error_code) from e
