# metalanalyzer

Building blocks for editor tooling around Metal shader sources: a workspace
symbol index, a two-way include graph between `.metal` files and the headers
they include, `clang-format` integration, filtering of compiler diagnostics
for one document, and workspace discovery of shader files.

The package has no dependencies beyond the standard library. Formatting needs
a `clang-format` executable (or `xcrun clang-format`) to be installed.

## Installation

```
pip install metalanalyzer
```

To run the test suite:

```
pip install "metalanalyzer[test]"
pytest
```

## Modules

### `metalanalyzer.protocol`

Frozen value types with zero-based lines and characters: `Position`
(ordered by line, then character), `Range(start, end)` and
`Location(uri, range)`. `Range.empty_at(position)` returns a zero-width range.

### `metalanalyzer.symbols`

`SymbolIndex` is a thread-safe map from symbol names to `SymbolLocation(uri, range)`:

- `insert(name, location)` adds another location for a name.
- `get(name)` returns a fresh list of its locations.
- `search(query, limit)` returns up to `limit` `(name, location)` pairs whose
  name contains `query`, ignoring case.
- `remove_file(uri)` drops every location in that document and forgets names
  left without locations.
- `document_symbols(uri)` and `workspace_symbols(query)` return
  `SymbolInformation(name, kind, location, container_name)` records. The index
  does not keep symbol kinds, so `kind` is always 13 (variable). Workspace
  search returns at most 100 results.

### `metalanalyzer.header_owners`

- `parse_include_directives(source)` returns `(target, is_system)` for every
  `#include <...>` / `#include "..."` line.
- `resolve_include_path(owner, include_path, is_system, include_paths)` finds
  the existing file an include refers to: an existing absolute path first,
  then (for quoted includes) the owner's directory, then each include
  directory in order. It returns `None` when nothing exists.
- `collect_included_headers(owner, source, include_paths)` returns the set of
  resolved files that are headers (`.h`, `.hh`, `.hpp`, `.hxx`, see
  `is_header_file`).
- `normalize_path(path)` returns the canonical path, or the path unchanged if
  it cannot be resolved.
- `IncludeGraph` keeps forward and reverse links:
  `update_owner_links(owner, new_headers)` replaces an owner's headers,
  `owner_candidates(header, cap)` returns up to `cap` owners in sorted order,
  and `headers_of(owner)` returns the owner's current headers.

### `metalanalyzer.formatting`

`format_document(text, path=None, command="clang-format", extra_args=())` pipes
the text through the formatter with the extra arguments followed by
`--assume-filename <path> --style file --fallback-style none` (the file name
defaults to `shader.metal`). It returns a `TextEdit(range, new_text)` that
replaces the whole document, or `None` when the output equals the input. When
the command is the default `clang-format` and it is not found, the same call
is retried as `xcrun clang-format`.

Errors are raised as subclasses of `FormattingError`:
`CommandNotFoundError` (executable missing), `LaunchFailedError` (could not be
started) and `FormattingFailedError` (non-zero exit, with its stderr or exit
status as the reason, or output that is not UTF-8).

`clang_format_args`, `run_clang_format` and `full_document_range` (whose end
character is counted in UTF-16 code units) are available on their own.

### `metalanalyzer.diagnostics`

`CompilerDiagnostic(file, line, column, severity, message)` holds one compiler
diagnostic with a zero-based position; `to_diagnostic()` turns it into a
`Diagnostic` with a zero-width range and source `metal-compiler`. `Severity`
uses the protocol's numbering (`ERROR`=1 to `HINT`=4).

`filter_target_diagnostics(diagnostics, target_path, strict_file_match)`:

- keeps primary diagnostics whose file matches `target_path`
  (`diagnostic_paths_match`: equal text, equal canonical paths, or equal
  lexically normalized absolute paths — never a file-name-only match);
  diagnostics without a file are kept unless `strict_file_match` is set;
  everything is kept when there is no target;
- drops macro-redefinition warnings (`should_suppress_primary_diagnostic`)
  and repeats of the same line, column, severity and message;
- attaches information-severity notes as `RelatedInformation` to the primary
  directly before them, only if that primary was kept.

`normalize_absolute_path(path)` resolves `.` and `..` lexically and returns
`None` for relative paths. `progress_end_message(count)` gives
`"No issues found"`, `"1 diagnostic"` or `"<n> diagnostics"`.

### `metalanalyzer.workspace`

- `discover_metal_files(workspace_roots, max_file_size_bytes, excluded_prefixes)`
  walks the roots (following symbolic links, guarding against loops) and
  returns normalized `.metal` files, each once, leaving out files larger than
  the limit.
- `should_descend_into(path, excluded_prefixes)` skips excluded paths, hidden
  directories, `*.bundle` directories and `target`, `build`, `node_modules`,
  `out`, `bin`, `obj`, `DerivedData`.
- `build_workspace_scan_exclude_prefixes(workspace_roots, exclude_paths)` keeps
  absolute exclude paths and joins relative ones to every root;
  `is_path_excluded(path, prefixes)` matches by whole path components.
- `GenerationTracker` gives each document a counter: `next(uri)` advances it
  (starting at 1), `is_latest(uri, value)` checks whether a result is still
  current, `remove(uri)` forgets it, and `uri in tracker` tells whether one
  exists.

## Example

```python
from pathlib import Path

from metalanalyzer.header_owners import IncludeGraph, collect_included_headers

owner = Path("shaders/blur.metal")
headers = collect_included_headers(owner, owner.read_text(), ["include"])

graph = IncludeGraph()
graph.update_owner_links(owner, headers)
for header in sorted(headers):
    print(header, graph.owner_candidates(header, 256))
```

## What this package does not do

It is a library of parts, not a running language server: there is no server
loop, no command-line program, and no handling of editor requests. It does not
invoke the Metal compiler or parse its output; `CompilerDiagnostic` values must
be produced by the caller. It does not parse shader source into symbols — the
`SymbolIndex` is filled by the caller — and it provides no completion, hover,
go-to-definition or semantic highlighting.