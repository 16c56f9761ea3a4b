"""Workspace scanning for shader files and per-document generation counters."""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Iterable, Iterator, Sequence, Union

from metalanalyzer.header_owners import normalize_path

PathLike = Union[str, "os.PathLike[str]"]

METAL_SUFFIX = ".metal"
SKIPPED_DIRECTORY_NAMES = frozenset(
    {"target", "build", "node_modules", "out", "bin", "obj", "DerivedData"}
)


def build_workspace_scan_exclude_prefixes(
    workspace_roots: Iterable[PathLike], exclude_paths: Iterable[str]
) -> list[Path]:
    """Turn configured exclude paths into normalized prefixes.

    Absolute paths are used as they are; relative ones are joined to every
    workspace root. Duplicates are dropped, first occurrence kept.
    """
    roots = [Path(root) for root in workspace_roots]
    prefixes: list[Path] = []
    seen: set[Path] = set()

    def add(candidate: Path) -> None:
        normalized = normalize_path(candidate)
        if normalized not in seen:
            seen.add(normalized)
            prefixes.append(normalized)

    for raw_path in exclude_paths:
        exclude_path = Path(raw_path)
        if exclude_path.is_absolute():
            add(exclude_path)
            continue
        for root in roots:
            add(root / exclude_path)
    return prefixes


def is_path_excluded(path: PathLike, excluded_prefixes: Iterable[PathLike]) -> bool:
    """Return True when ``path`` lies under any of ``excluded_prefixes`` (by whole components)."""
    candidate = Path(path)
    return any(_starts_with(candidate, Path(prefix)) for prefix in excluded_prefixes)


def _starts_with(path: Path, prefix: Path) -> bool:
    parts = path.parts
    prefix_parts = prefix.parts
    return parts[: len(prefix_parts)] == prefix_parts


def should_descend_into(path: PathLike, excluded_prefixes: Sequence[PathLike]) -> bool:
    """Decide whether a workspace scan visits ``path``.

    Excluded paths are never visited. Other files always are; directories are
    skipped when hidden, bundles, or build/dependency output.
    """
    candidate = Path(path)
    if is_path_excluded(normalize_path(candidate), excluded_prefixes):
        return False
    try:
        is_dir = candidate.is_dir()
    except OSError:
        is_dir = False
    if not is_dir:
        return True

    name = candidate.name
    if name.startswith("."):
        return False
    if name.endswith(".bundle"):
        return False
    return name not in SKIPPED_DIRECTORY_NAMES


def _walk_directory(
    directory: Path, excluded_prefixes: Sequence[Path], ancestors: set[Path]
) -> Iterator[Path]:
    try:
        real = directory.resolve(strict=True)
    except (OSError, RuntimeError):
        return
    if real in ancestors:
        return  # symbolic link loop
    try:
        with os.scandir(directory) as iterator:
            entries = sorted(iterator, key=lambda entry: entry.name)
    except OSError:
        return

    ancestors.add(real)
    try:
        for entry in entries:
            path = Path(entry.path)
            if not should_descend_into(path, excluded_prefixes):
                continue
            try:
                if entry.is_dir(follow_symlinks=True):
                    yield from _walk_directory(path, excluded_prefixes, ancestors)
                elif entry.is_file(follow_symlinks=True):
                    yield path
            except OSError:
                continue
    finally:
        ancestors.discard(real)


def _walk_files(root: Path, excluded_prefixes: Sequence[Path]) -> Iterator[Path]:
    if not root.exists() or not should_descend_into(root, excluded_prefixes):
        return
    if root.is_dir():
        yield from _walk_directory(root, excluded_prefixes, set())
    elif root.is_file():
        yield root


def discover_metal_files(
    workspace_roots: Iterable[PathLike],
    max_file_size_bytes: int,
    excluded_prefixes: Iterable[PathLike],
) -> list[Path]:
    """Return the normalized ``.metal`` files under the workspace roots.

    Files larger than ``max_file_size_bytes`` are left out, as is anything the
    scan does not descend into. Each file appears once, in discovery order.
    """
    prefixes = [Path(prefix) for prefix in excluded_prefixes]
    files: list[Path] = []
    seen: set[Path] = set()

    for root in workspace_roots:
        for path in _walk_files(Path(root), prefixes):
            if path.suffix != METAL_SUFFIX or path.name == METAL_SUFFIX:
                continue
            try:
                size = path.stat().st_size
            except OSError:
                size = None
            if size is not None and size > max_file_size_bytes:
                continue
            normalized = normalize_path(path)
            if normalized not in seen:
                seen.add(normalized)
                files.append(normalized)
    return files


class GenerationTracker:
    """Monotonic per-document counters used to drop stale diagnostics runs."""

    def __init__(self) -> None:
        self._generations: dict[str, int] = {}
        self._lock = threading.Lock()

    def next(self, uri: str) -> int:
        """Advance and return the generation for ``uri`` (the first is 1)."""
        with self._lock:
            value = self._generations.get(uri, 0) + 1
            self._generations[uri] = value
            return value

    def is_latest(self, uri: str, value: int) -> bool:
        """Return True when ``value`` is still the current generation of ``uri``."""
        with self._lock:
            return self._generations.get(uri) == value

    def remove(self, uri: str) -> None:
        """Forget the generation of ``uri``."""
        with self._lock:
            self._generations.pop(uri, None)

    def __contains__(self, uri: object) -> bool:
        with self._lock:
            return uri in self._generations