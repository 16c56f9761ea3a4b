"""Compiler diagnostics and the rules for reporting them against one document."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Iterable, Optional, Union

from metalanalyzer.protocol import Location, Position, Range

PathLike = Union[str, "os.PathLike[str]"]

DIAGNOSTIC_SOURCE = "metal-compiler"
_MACRO_REDEFINED_FLAG = "[-Wmacro-redefined]"


class Severity(IntEnum):
    """Diagnostic severity, numbered as the language server protocol numbers it."""

    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4


@dataclass(frozen=True)
class RelatedInformation:
    """A note attached to a diagnostic, pointing at another place in the code."""

    location: Location
    message: str


@dataclass
class Diagnostic:
    """A diagnostic as published to the client."""

    range: Range
    severity: Severity
    message: str
    source: str = DIAGNOSTIC_SOURCE
    related_information: Optional[list[RelatedInformation]] = None


@dataclass(frozen=True)
class CompilerDiagnostic:
    """One diagnostic line reported by the compiler, with zero-based position."""

    file: Optional[str]
    line: int
    column: int
    severity: Severity
    message: str

    def to_diagnostic(self) -> Diagnostic:
        """Convert to a protocol diagnostic located at this line and column."""
        position = Position(self.line, self.column)
        return Diagnostic(
            range=Range.empty_at(position),
            severity=self.severity,
            message=self.message,
        )


def should_suppress_primary_diagnostic(diagnostic: CompilerDiagnostic) -> bool:
    """Return True for macro-redefinition warnings, which are never reported."""
    return (
        diagnostic.severity == Severity.WARNING
        and _MACRO_REDEFINED_FLAG in diagnostic.message
    )


def normalize_absolute_path(path: PathLike) -> Optional[Path]:
    """Lexically resolve ``.`` and ``..`` in an absolute path; None if it is relative."""
    candidate = Path(path)
    if not candidate.is_absolute():
        return None
    anchor, *rest = candidate.parts
    parts: list[str] = []
    for part in rest:
        if part == "..":
            if parts:
                parts.pop()
        elif part != ".":
            parts.append(part)
    return Path(anchor, *parts)


def _canonical(path: Path) -> Optional[Path]:
    try:
        return path.resolve(strict=True)
    except (OSError, RuntimeError):
        return None


def diagnostic_paths_match(a: PathLike, b: PathLike) -> bool:
    """Decide whether two paths name the same file, without basename-only matching."""
    a_text, b_text = os.fspath(a), os.fspath(b)
    if a_text == b_text:
        return True

    canonical_a = _canonical(Path(a_text))
    canonical_b = _canonical(Path(b_text))
    if canonical_a is not None and canonical_b is not None:
        return canonical_a == canonical_b

    normalized_a = normalize_absolute_path(a_text)
    normalized_b = normalize_absolute_path(b_text)
    if normalized_a is None or normalized_b is None:
        return False
    return normalized_a == normalized_b


def _note_location(note: CompilerDiagnostic) -> Optional[Location]:
    if note.file is None:
        return None
    try:
        uri = Path(note.file).as_uri()
    except ValueError:
        return None
    return Location(uri, Range.empty_at(Position(note.line, note.column)))


def _belongs(
    diagnostic: CompilerDiagnostic, target: Optional[str], strict_file_match: bool
) -> bool:
    if target is None:
        return True
    if diagnostic.file is None:
        return not strict_file_match
    return diagnostic_paths_match(diagnostic.file, target)


def filter_target_diagnostics(
    diagnostics: Iterable[CompilerDiagnostic],
    target_path: Optional[PathLike],
    strict_file_match: bool,
) -> list[Diagnostic]:
    """Keep the diagnostics that belong to ``target_path``, attaching notes and dropping repeats.

    Notes (information severity) are attached to the primary diagnostic that
    immediately precedes them, and only when that primary was kept.
    """
    target = os.fspath(target_path) if target_path is not None else None
    seen: set[tuple[int, int, Severity, str]] = set()
    out: list[Diagnostic] = []
    last_primary_kept = False

    for diagnostic in diagnostics:
        if diagnostic.severity == Severity.INFORMATION:
            if last_primary_kept:
                location = _note_location(diagnostic)
                if location is not None:
                    last = out[-1]
                    if last.related_information is None:
                        last.related_information = []
                    last.related_information.append(
                        RelatedInformation(location, diagnostic.message)
                    )
            continue

        if should_suppress_primary_diagnostic(diagnostic) or not _belongs(
            diagnostic, target, strict_file_match
        ):
            last_primary_kept = False
            continue

        key = (diagnostic.line, diagnostic.column, diagnostic.severity, diagnostic.message)
        if key in seen:
            last_primary_kept = False
            continue
        seen.add(key)
        last_primary_kept = True
        out.append(diagnostic.to_diagnostic())

    return out


def progress_end_message(count: int) -> str:
    """Return the progress message that ends a diagnostics run with ``count`` results."""
    if count == 0:
        return "No issues found"
    if count == 1:
        return "1 diagnostic"
    return f"{count} diagnostics"