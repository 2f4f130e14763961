#!/usr/bin/env python3
"""Filesystem access for layered module path resolution.

The resolver only needs a handful of read-only queries; keeping them behind
the Filesystem interface lets resolution run against synthetic trees.
"""

import os
from pathlib import Path
from typing import List


class Filesystem:
    """Read-only directory queries used by the layered path resolver."""

    def exists(self, path: Path) -> bool:
        raise NotImplementedError

    def is_dir(self, path: Path) -> bool:
        raise NotImplementedError

    def is_readable(self, path: Path) -> bool:
        raise NotImplementedError

    def list_dirs(self, path: Path) -> List[str]:
        """List the names of the subdirectories of a directory.

        Raises:
            OSError: If the directory cannot be listed
        """
        raise NotImplementedError

    def read_text(self, path: Path) -> str:
        """Read a whole text file.

        Raises:
            OSError: If the file cannot be read
        """
        raise NotImplementedError


class LocalFilesystem(Filesystem):
    """Filesystem backed by the local disk."""

    def exists(self, path: Path) -> bool:
        return os.path.exists(path)

    def is_dir(self, path: Path) -> bool:
        return os.path.isdir(path)

    def is_readable(self, path: Path) -> bool:
        if os.path.isdir(path):
            return os.access(path, os.R_OK | os.X_OK)
        return os.access(path, os.R_OK)

    def list_dirs(self, path: Path) -> List[str]:
        with os.scandir(path) as entries:
            return [entry.name for entry in entries if entry.is_dir()]

    def read_text(self, path: Path) -> str:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
