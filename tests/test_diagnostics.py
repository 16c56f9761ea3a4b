from pathlib import Path

import pytest

from metalanalyzer.diagnostics import (
    CompilerDiagnostic,
    Severity,
    diagnostic_paths_match,
    filter_target_diagnostics,
    normalize_absolute_path,
    progress_end_message,
    should_suppress_primary_diagnostic,
)
from metalanalyzer.protocol import Position


def diag(file, line, column, severity, message):
    return CompilerDiagnostic(
        file=None if file is None else str(file),
        line=line,
        column=column,
        severity=severity,
        message=message,
    )


def test_to_diagnostic_keeps_position_and_source():
    compiler_diag = diag("/tmp/shader.metal", 5, 10, Severity.ERROR, "something went wrong")
    lsp = compiler_diag.to_diagnostic()
    assert lsp.range.start.line == 5
    assert lsp.range.start.character == 10
    assert lsp.range.end == lsp.range.start
    assert lsp.source == "metal-compiler"
    assert lsp.message == "something went wrong"
    assert lsp.severity == Severity.ERROR
    assert lsp.related_information is None


def test_progress_end_messages():
    assert progress_end_message(0) == "No issues found"
    assert progress_end_message(1) == "1 diagnostic"
    assert progress_end_message(7).startswith("7 ")


def test_macro_redefined_warning_is_suppressed_only_as_warning():
    message = "'X' macro redefined [-Wmacro-redefined]"
    assert should_suppress_primary_diagnostic(diag(None, 0, 0, Severity.WARNING, message))
    assert not should_suppress_primary_diagnostic(diag(None, 0, 0, Severity.ERROR, message))
    assert not should_suppress_primary_diagnostic(
        diag(None, 0, 0, Severity.WARNING, "unused variable 'x'")
    )


def test_normalize_absolute_path(tmp_path):
    assert normalize_absolute_path("relative/path.h") is None
    messy = tmp_path / "a" / "." / "b" / ".." / "c.h"
    assert normalize_absolute_path(str(messy)) == tmp_path / "a" / "c.h"
    root = Path(tmp_path.anchor)
    assert normalize_absolute_path(str(root / "..")) == root


def test_paths_match_identical_strings():
    assert diagnostic_paths_match("utils.h", "utils.h")


def test_paths_match_lexically_for_missing_absolute_files(tmp_path):
    a = tmp_path / "missing" / "." / "x" / ".." / "utils.h"
    b = tmp_path / "missing" / "utils.h"
    assert diagnostic_paths_match(str(a), str(b))


def test_paths_do_not_match_on_basename_only(tmp_path):
    a = tmp_path / "one" / "utils.h"
    b = tmp_path / "two" / "utils.h"
    assert not diagnostic_paths_match(str(a), str(b))
    assert not diagnostic_paths_match("one/utils.h", "two/utils.h")


def test_paths_match_canonically_for_existing_files(tmp_path):
    header = tmp_path / "inc" / "utils.h"
    header.parent.mkdir()
    header.write_text("// header\n")
    other = tmp_path / "inc" / ".." / "inc" / "utils.h"
    assert diagnostic_paths_match(str(header), str(other))


@pytest.fixture
def files(tmp_path):
    target = tmp_path / "shader.metal"
    other = tmp_path / "other.metal"
    return target, other


def test_note_attached_to_kept_primary(files):
    target, other = files
    raw = [
        diag(target, 3, 1, Severity.ERROR, "redefinition of 'f'"),
        diag(other, 1, 0, Severity.INFORMATION, "previous definition is here"),
    ]
    out = filter_target_diagnostics(raw, target, False)
    assert len(out) == 1
    related = out[0].related_information
    assert related is not None and len(related) == 1
    assert related[0].message == "previous definition is here"
    assert related[0].location.uri == other.as_uri()
    assert related[0].location.range.start == Position(1, 0)


def test_note_after_dropped_primary_is_not_misattributed(files):
    target, other = files
    raw = [
        diag(target, 1, 0, Severity.ERROR, "first"),
        diag(other, 2, 0, Severity.ERROR, "elsewhere"),
        diag(other, 3, 0, Severity.INFORMATION, "note for elsewhere"),
    ]
    out = filter_target_diagnostics(raw, target, False)
    assert [d.message for d in out] == ["first"]
    assert out[0].related_information is None


def test_suppressed_primary_drops_its_notes(files):
    target, _ = files
    raw = [
        diag(target, 1, 0, Severity.ERROR, "kept"),
        diag(target, 2, 0, Severity.WARNING, "'M' macro redefined [-Wmacro-redefined]"),
        diag(target, 0, 0, Severity.INFORMATION, "previous definition is here"),
    ]
    out = filter_target_diagnostics(raw, target, False)
    assert [d.message for d in out] == ["kept"]
    assert out[0].related_information is None


def test_duplicates_are_removed(files):
    target, _ = files
    raw = [
        diag(target, 4, 2, Severity.ERROR, "dup"),
        diag(target, 4, 2, Severity.ERROR, "dup"),
        diag(target, 4, 2, Severity.WARNING, "dup"),
    ]
    out = filter_target_diagnostics(raw, target, False)
    assert [(d.severity, d.message) for d in out] == [
        (Severity.ERROR, "dup"),
        (Severity.WARNING, "dup"),
    ]


def test_fileless_diagnostics_depend_on_strictness(files):
    target, _ = files
    raw = [diag(None, 0, 0, Severity.ERROR, "no file")]
    assert [d.message for d in filter_target_diagnostics(raw, target, False)] == ["no file"]
    assert filter_target_diagnostics(raw, target, True) == []


def test_no_target_keeps_everything(files):
    target, other = files
    raw = [
        diag(target, 0, 0, Severity.ERROR, "a"),
        diag(other, 0, 0, Severity.ERROR, "b"),
    ]
    for strict in (True, False):
        out = filter_target_diagnostics(raw, None, strict)
        assert [d.message for d in out] == ["a", "b"]


def test_note_with_relative_file_adds_no_related_information(files):
    target, _ = files
    raw = [
        diag(target, 0, 0, Severity.ERROR, "primary"),
        diag("relative.h", 0, 0, Severity.INFORMATION, "note"),
    ]
    out = filter_target_diagnostics(raw, target, True)
    assert len(out) == 1
    assert out[0].related_information is None


def test_strict_mode_filters_other_files(files):
    target, other = files
    raw = [
        diag(other, 0, 0, Severity.ERROR, "owner error"),
        diag(target, 5, 1, Severity.ERROR, "header error"),
    ]
    out = filter_target_diagnostics(raw, target, True)
    assert [d.message for d in out] == ["header error"]
    assert out[0].range.start == Position(5, 1)