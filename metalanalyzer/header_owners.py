"""Tracking which shader files include which headers."""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Iterable, Optional, Union

PathLike = Union[str, "os.PathLike[str]"]

_HEADER_EXTENSIONS = frozenset({"h", "hh", "hpp", "hxx"})


def is_header_file(path: PathLike) -> bool:
    """Return True when ``path`` has a C/C++ header extension."""
    return Path(path).suffix[1:] in _HEADER_EXTENSIONS


def parse_include_directives(source: str) -> list[tuple[str, bool]]:
    """Return ``(target, is_system)`` for each ``#include`` line in ``source``."""
    includes: list[tuple[str, bool]] = []
    for raw_line in source.split("\n"):
        line = raw_line.rstrip("\r").lstrip()
        if not line.startswith("#include"):
            continue
        target = _between(line, "<", ">")
        if target is not None:
            includes.append((target, True))
            continue
        target = _between(line, '"', '"')
        if target is not None:
            includes.append((target, False))
    return includes


def _between(line: str, opener: str, closer: str) -> Optional[str]:
    start = line.find(opener)
    if start < 0:
        return None
    end = line.find(closer, start + 1)
    if end < 0:
        return None
    return line[start + 1 : end]


def normalize_path(path: PathLike) -> Path:
    """Return the canonical form of ``path``, or ``path`` itself if it cannot be resolved."""
    candidate = Path(path)
    try:
        return candidate.resolve(strict=True)
    except (OSError, RuntimeError):
        return candidate


def resolve_include_path(
    owner: PathLike,
    include_path: str,
    is_system: bool,
    include_paths: Iterable[str],
) -> Optional[Path]:
    """Find the file an include directive in ``owner`` refers to, if it exists."""
    include = Path(include_path)
    if include.is_absolute() and include.exists():
        return normalize_path(include)

    if not is_system:
        candidate = Path(owner).parent / include
        if candidate.exists():
            return normalize_path(candidate)

    for include_dir in include_paths:
        candidate = Path(include_dir) / include
        if candidate.exists():
            return normalize_path(candidate)
    return None


def collect_included_headers(
    owner: PathLike, source: str, include_paths: Iterable[str]
) -> set[Path]:
    """Return the header files that ``source`` (the text of ``owner``) includes directly."""
    search = list(include_paths)
    headers: set[Path] = set()
    for target, is_system in parse_include_directives(source):
        resolved = resolve_include_path(owner, target, is_system, search)
        if resolved is not None and is_header_file(resolved):
            headers.add(resolved)
    return headers


class IncludeGraph:
    """Forward and reverse links between owner files and the headers they include."""

    def __init__(self) -> None:
        self._header_owners: dict[Path, set[Path]] = {}
        self._owner_headers: dict[Path, set[Path]] = {}
        self._lock = threading.Lock()

    def update_owner_links(self, owner: PathLike, new_headers: Iterable[PathLike]) -> None:
        """Replace the set of headers that ``owner`` includes."""
        owner_key = normalize_path(owner)
        headers = {Path(h) for h in new_headers}
        with self._lock:
            for header in self._owner_headers.pop(owner_key, set()):
                owners = self._header_owners.get(header)
                if owners is None:
                    continue
                owners.discard(owner_key)
                if not owners:
                    del self._header_owners[header]
            for header in headers:
                self._header_owners.setdefault(header, set()).add(owner_key)
            self._owner_headers[owner_key] = headers

    def owner_candidates(self, header: PathLike, cap: int) -> list[Path]:
        """Return up to ``cap`` owners of ``header``, in sorted order."""
        with self._lock:
            owners = self._header_owners.get(normalize_path(header), set())
            return sorted(owners)[:cap]

    def headers_of(self, owner: PathLike) -> set[Path]:
        """Return the headers currently linked to ``owner``."""
        with self._lock:
            return set(self._owner_headers.get(normalize_path(owner), set()))