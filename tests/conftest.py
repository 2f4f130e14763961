"""Shared pytest fixtures for modfilter tests."""
import tempfile
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Dict, Generator, Iterable, List, Optional, Set

import pytest
import yaml

from modfilter.infrastructure.cache_manager import set_global_cache
from modfilter.infrastructure.config_manager import set_global_config
from modfilter.layers.filesystem import Filesystem


class FakeFilesystem(Filesystem):
    """In-memory directory tree for layered path tests.

    Directories and files are registered by absolute POSIX path; parents of
    every registered entry are created implicitly.
    """

    def __init__(self):
        self.dirs: Set[str] = {"/"}
        self.files: Dict[str, str] = {}
        self.unreadable: Set[str] = set()
        self.reads: List[str] = []

    def mkdir(self, path: str) -> "FakeFilesystem":
        current = PurePosixPath(path)
        for parent in [current, *current.parents]:
            self.dirs.add(str(parent))
        return self

    def write(self, path: str, text: str) -> "FakeFilesystem":
        self.mkdir(str(PurePosixPath(path).parent))
        self.files[path] = text
        return self

    def deny(self, path: str) -> "FakeFilesystem":
        self.unreadable.add(path)
        return self

    def exists(self, path: Path) -> bool:
        return str(path) in self.dirs or str(path) in self.files

    def is_dir(self, path: Path) -> bool:
        return str(path) in self.dirs

    def is_readable(self, path: Path) -> bool:
        return self.exists(path) and str(path) not in self.unreadable

    def list_dirs(self, path: Path) -> List[str]:
        key = str(path)
        if key in self.unreadable:
            raise PermissionError(13, "Permission denied", key)
        return [
            PurePosixPath(d).name
            for d in self.dirs
            if d != key and str(PurePosixPath(d).parent) == key
        ]

    def read_text(self, path: Path) -> str:
        key = str(path)
        self.reads.append(key)
        if key in self.unreadable:
            raise PermissionError(13, "Permission denied", key)
        if key not in self.files:
            raise FileNotFoundError(2, "No such file", key)
        return self.files[key]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fake_fs() -> FakeFilesystem:
    """Provide an empty in-memory filesystem."""
    return FakeFilesystem()


@pytest.fixture
def make_layered_root(temp_dir: Path) -> Callable[..., Path]:
    """Build a layered module root on disk.

    Usage: ``make_layered_root("root", layers=["top", "base"], conf="top",
    overlays={"top": ["patch"]}, add_ons=["extra"])``.
    """

    def _make(
        name: str = "root",
        layers: Iterable[str] = ("base",),
        conf: Optional[str] = None,
        overlays: Optional[Dict[str, List[str]]] = None,
        add_ons: Iterable[str] = (),
        add_on_overlays: Optional[Dict[str, List[str]]] = None,
    ) -> Path:
        root = temp_dir / name
        root.mkdir()
        if conf is not None:
            (root / "layers.conf").write_text(f"layers={conf}\n")

        def _with_overlays(directory: Path, names: List[str]) -> None:
            directory.mkdir(parents=True, exist_ok=True)
            if not names:
                return
            overlays_dir = directory / ".overlays"
            overlays_dir.mkdir()
            for overlay in names:
                (overlays_dir / overlay).mkdir()
            (overlays_dir / ".overlays").write_text("\n".join(names) + "\n")

        for layer in layers:
            _with_overlays(root / "layers" / layer, (overlays or {}).get(layer, []))
        for add_on in add_ons:
            _with_overlays(root / "add-ons" / add_on, (add_on_overlays or {}).get(add_on, []))
        return root

    return _make


@pytest.fixture
def sample_descriptor() -> Dict[str, Any]:
    """Provide a sample module descriptor."""
    return {
        "name": "com.acme.app",
        "exports": [
            {"exclude": "com/acme/app/internal/"},
        ],
        "dependencies": [
            {
                "module": "com.acme.lib",
                "export": True,
                "services": "import",
                "imports": [
                    {"include": "com/acme/lib/api/"},
                    {"exclude-set": ["com/acme/lib/impl"]},
                ],
                "exports": [
                    {"include": "com/acme/**"},
                ],
            },
            {
                "module": "com.acme.spi",
                "optional": True,
                "services": "export",
            },
            {
                "system": {
                    "paths": ["javax/sql", "javax/naming"],
                    "exports": [{"include": "javax/sql"}],
                },
            },
        ],
    }


@pytest.fixture
def descriptor_file(temp_dir: Path, sample_descriptor: Dict[str, Any]) -> Path:
    """Write the sample descriptor as YAML."""
    path = temp_dir / "module.yaml"
    with open(path, "w") as f:
        yaml.dump(sample_descriptor, f)
    return path


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset global cache and configuration between tests."""
    set_global_cache(None)
    set_global_config(None)
    yield
    set_global_cache(None)
    set_global_config(None)
