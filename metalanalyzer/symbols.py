"""Workspace-wide index of symbol names and their locations."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional

from metalanalyzer.protocol import Location, Range

_SYMBOL_KIND_VARIABLE = 13
_WORKSPACE_SYMBOL_LIMIT = 100


@dataclass(frozen=True)
class SymbolLocation:
    """Where one occurrence of a symbol is defined."""

    uri: str
    range: Range


@dataclass(frozen=True)
class SymbolInformation:
    """A symbol as reported to the client."""

    name: str
    kind: int
    location: Location
    container_name: Optional[str] = None


class SymbolIndex:
    """Thread-safe map from symbol names to the places they are defined."""

    def __init__(self) -> None:
        self._map: dict[str, list[SymbolLocation]] = {}
        self._lock = threading.Lock()

    def insert(self, name: str, location: SymbolLocation) -> None:
        """Record another location for ``name``."""
        with self._lock:
            self._map.setdefault(name, []).append(location)

    def get(self, name: str) -> list[SymbolLocation]:
        """Return all known locations of ``name`` (a fresh list)."""
        with self._lock:
            return list(self._map.get(name, ()))

    def search(self, query: str, limit: int) -> list[tuple[str, SymbolLocation]]:
        """Return up to ``limit`` symbols whose name contains ``query``, ignoring case."""
        needle = query.lower()
        results: list[tuple[str, SymbolLocation]] = []
        with self._lock:
            for name, locations in self._map.items():
                if needle not in name.lower():
                    continue
                for location in locations:
                    results.append((name, location))
                    if len(results) >= limit:
                        return results
        return results

    def remove_file(self, uri: str) -> None:
        """Drop every location that belongs to ``uri``."""
        with self._lock:
            for name in list(self._map):
                kept = [loc for loc in self._map[name] if loc.uri != uri]
                if kept:
                    self._map[name] = kept
                else:
                    del self._map[name]

    def document_symbols(self, uri: str) -> list[SymbolInformation]:
        """Return a flat list of the symbols defined in ``uri``."""
        with self._lock:
            return [
                _information(name, loc)
                for name, locations in self._map.items()
                for loc in locations
                if loc.uri == uri
            ]

    def workspace_symbols(self, query: str) -> list[SymbolInformation]:
        """Return symbols across the workspace that match ``query``."""
        return [
            _information(name, loc)
            for name, loc in self.search(query, _WORKSPACE_SYMBOL_LIMIT)
        ]


def _information(name: str, location: SymbolLocation) -> SymbolInformation:
    # The index does not keep symbol kinds, so everything reports as a variable.
    return SymbolInformation(
        name=name,
        kind=_SYMBOL_KIND_VARIABLE,
        location=Location(location.uri, location.range),
    )