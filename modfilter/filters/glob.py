#!/usr/bin/env python3
r"""Glob compilation for ``/``-delimited resource paths.

Valid metacharacters:
- ``**`` matches zero or more characters, including ``/``
- ``*`` matches zero or more non-``/`` characters
- ``?`` matches exactly one non-``/`` character
- ``\X`` matches ``X`` literally, even if it is a metacharacter
- ``/`` matches one or more ``/``; consecutive slashes collapse into one

Every glob also matches all descendants of what it names. A glob ending in
``/`` matches descendants only, never the named directory itself.

Example:
    >>> pattern = compile_glob("foo/**")
    >>> bool(pattern.fullmatch("foo/bar")), bool(pattern.fullmatch("foo"))
    (True, False)
"""

import re
from typing import Pattern

from modfilter.infrastructure.cache_manager import get_pattern_cache

# Alternation order is token priority.
_GLOB_TOKEN = re.compile(r"(\*\*?)|(\?)|\\(.)|(/+)|([^*?\\/]+)|(\\)", re.DOTALL)

ANYTHING = ".*"
OPTIONAL_DESCENDANTS = "(?:/.*)?"


def glob_to_regex(glob: str) -> str:
    """Translate a glob into regular expression source.

    Args:
        glob: Glob pattern

    Returns:
        Regular expression source meant for ``fullmatch``

    Raises:
        ValueError: If glob is None
    """
    if glob is None:
        raise ValueError("glob is None")

    parts = []
    last_was_separator = False
    for token in _GLOB_TOKEN.finditer(glob):
        stars, question, escaped, separators, literal, backslash = token.groups()
        last_was_separator = False
        if stars is not None:
            parts.append(ANYTHING if len(stars) == 2 else "[^/]*")
        elif question is not None:
            parts.append("[^/]")
        elif escaped is not None:
            parts.append(re.escape(escaped))
        elif separators is not None:
            parts.append("/+")
            last_was_separator = True
        elif literal is not None:
            parts.append(re.escape(literal))
        else:
            # a trailing lone backslash
            parts.append(re.escape(backslash))

    parts.append(ANYTHING if last_was_separator else OPTIONAL_DESCENDANTS)
    return "".join(parts)


def _compile(glob: str) -> Pattern[str]:
    return re.compile(glob_to_regex(glob), re.DOTALL)


def compile_glob(glob: str) -> Pattern[str]:
    """Compile a glob, reusing a cached pattern for previously seen text.

    Args:
        glob: Glob pattern

    Returns:
        Compiled pattern; use ``fullmatch`` to test a path
    """
    if glob is None:
        raise ValueError("glob is None")
    return get_pattern_cache().get_or_compute(glob, lambda: _compile(glob))


def is_glob(path: str) -> bool:
    """Check whether a descriptor path needs glob compilation."""
    return "*" in path or "?" in path
