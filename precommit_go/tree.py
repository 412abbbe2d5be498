"""Source tree discovery.

Usage:
    tree = SourceTree.scan(Path("."))
    tree.test_dirs                    # directories holding *_test.go files
    tree.source_dirs                  # directories holding other *.go files
    tree.import_path(tree.root)       # e.g. "github.com/user/project"

The scan happens once per invocation; the resulting value is handed to every
check so that no check walks the tree on its own.
"""

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

_MODULE_RE = re.compile(r"^\s*module\s+\"?([^\s\"]+)\"?", re.MULTILINE)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class TreeError(Exception):
    """Raised when a directory cannot be mapped to a Go import path."""


# ---------------------------------------------------------------------------
# SourceTree
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SourceTree:
    root: Path
    source_dirs: tuple[Path, ...] = ()
    test_dirs: tuple[Path, ...] = ()
    module: str | None = None
    gopath: str = ""

    @classmethod
    def scan(cls, root: Path, gopath: str | None = None) -> "SourceTree":
        """Walk *root* and classify every directory containing Go files.

        Entries starting with ``.`` or ``_`` are skipped, as the go tool does.
        Symlinked directories are followed; a directory reached twice through
        links is only scanned the first time.
        *gopath* defaults to the ``GOPATH`` environment variable.
        """
        root = Path(root).resolve()
        if not root.is_dir():
            raise TreeError(f"'{root}' is not a directory")

        sources: set[Path] = set()
        tests: set[Path] = set()
        visited: set[str] = set()
        for dirpath, dirnames, filenames in os.walk(root, followlinks=True):
            real = os.path.realpath(dirpath)
            if real in visited:
                dirnames[:] = []
                continue
            visited.add(real)
            dirnames[:] = [d for d in dirnames if not d.startswith((".", "_"))]
            for name in filenames:
                if name.startswith((".", "_")):
                    continue
                if name.endswith("_test.go"):
                    tests.add(Path(dirpath))
                elif name.endswith(".go"):
                    sources.add(Path(dirpath))

        tree = cls(
            root=root,
            source_dirs=tuple(sorted(sources)),
            test_dirs=tuple(sorted(tests)),
            module=_read_module(root),
            gopath=os.environ.get("GOPATH", "") if gopath is None else gopath,
        )
        logger.debug(
            "scanned %s: %d source dirs, %d test dirs",
            root, len(tree.source_dirs), len(tree.test_dirs),
        )
        return tree

    def import_path(self, directory: Path) -> str:
        """Return the Go import path of *directory*.

        Uses the ``module`` line of ``go.mod`` at the tree root when present,
        otherwise the location of *directory* under ``$GOPATH/src``.

        Raises:
            TreeError: if neither applies.
        """
        if self.module:
            rel = _relative_to(directory, self.root)
            if rel is None:
                raise TreeError(f"'{directory}' is outside of '{self.root}'")
            return self.module if rel == Path(".") else f"{self.module}/{rel.as_posix()}"

        for entry in self.gopath.split(os.pathsep):
            if not entry:
                continue
            rel = _relative_to(directory, Path(entry).resolve() / "src")
            if rel is not None:
                return rel.as_posix()
        raise TreeError(f"failed to find GOPATH relative directory for {directory}")

    @property
    def package(self) -> str:
        """Import path of the tree root."""
        return self.import_path(self.root)

    def source_file(self, import_file: str) -> Path | None:
        """Map a file named by import path (as in coverage profiles) to disk."""
        try:
            prefix = self.package
        except TreeError:
            return None
        if import_file.startswith(prefix + "/"):
            path = self.root / import_file[len(prefix) + 1:]
            if path.is_file():
                return path
        return None


def _read_module(root: Path) -> str | None:
    go_mod = root / "go.mod"
    if not go_mod.is_file():
        return None
    match = _MODULE_RE.search(go_mod.read_text(encoding="utf-8", errors="replace"))
    return match.group(1) if match else None


def _relative_to(directory: Path, base: Path) -> Path | None:
    # The path a directory was found under wins over its resolved path, so
    # symlinked directories keep the import path of the link.
    for candidate in (Path(os.path.abspath(directory)), Path(directory).resolve()):
        try:
            return candidate.relative_to(base)
        except ValueError:
            continue
    return None
