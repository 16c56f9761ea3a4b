"""Document formatting through an external clang-format process."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

from metalanalyzer.protocol import Position, Range

DEFAULT_COMMAND = "clang-format"
_FALLBACK_FILENAME = "shader.metal"


@dataclass(frozen=True)
class TextEdit:
    """Replace the text in ``range`` with ``new_text``."""

    range: Range
    new_text: str


class FormattingError(Exception):
    """Formatting the document did not succeed."""


class CommandNotFoundError(FormattingError):
    """The formatter executable could not be found."""

    def __init__(self, command: str) -> None:
        super().__init__(f"{command} is not available")
        self.command = command


class LaunchFailedError(FormattingError):
    """The formatter could not be started or talked to."""

    def __init__(self, command: str, reason: str) -> None:
        super().__init__(f"failed to launch {command}: {reason}")
        self.command = command
        self.reason = reason


class FormattingFailedError(FormattingError):
    """The formatter ran but did not produce usable output."""

    def __init__(self, command: str, reason: str) -> None:
        super().__init__(f"{command} failed: {reason}")
        self.command = command
        self.reason = reason


def clang_format_args(extra_args: Iterable[str], assume_filename: str) -> list[str]:
    """Return the formatter arguments: user arguments followed by the fixed ones."""
    return [
        *extra_args,
        "--assume-filename",
        assume_filename,
        "--style",
        "file",
        "--fallback-style",
        "none",
    ]


def full_document_range(text: str) -> Range:
    """Return the range that covers all of ``text``."""
    line = text.count("\n")
    last_line = text.rsplit("\n", 1)[-1]
    character = len(last_line.encode("utf-16-le")) // 2
    return Range(Position(0, 0), Position(line, character))


def _exit_status(returncode: int) -> str:
    if returncode < 0:
        return f"signal: {-returncode}"
    return f"exit status: {returncode}"


def run_clang_format(executable: str, args: Sequence[str], text: str) -> str:
    """Feed ``text`` to ``executable`` on stdin and return what it prints."""
    try:
        completed = subprocess.run(
            [executable, *args],
            input=text.encode("utf-8"),
            capture_output=True,
            check=False,
        )
    except FileNotFoundError as error:
        raise CommandNotFoundError(executable) from error
    except OSError as error:
        raise LaunchFailedError(executable, str(error)) from error

    if completed.returncode != 0:
        stderr = completed.stderr.decode("utf-8", errors="replace").strip()
        reason = stderr or f"process exited with status {_exit_status(completed.returncode)}"
        raise FormattingFailedError(executable, reason)

    try:
        return completed.stdout.decode("utf-8")
    except UnicodeDecodeError as error:
        raise FormattingFailedError(
            executable, f"formatter produced invalid UTF-8 output: {error}"
        ) from error


def format_document(
    text: str,
    path: Optional[Union[str, "os.PathLike[str]"]] = None,
    command: str = DEFAULT_COMMAND,
    extra_args: Iterable[str] = (),
) -> Optional[TextEdit]:
    """Format ``text``; return an edit replacing the whole document, or None if unchanged.

    When the default ``clang-format`` is not on the path, it is run through ``xcrun``.
    """
    assume_filename = os.fspath(path) if path is not None else _FALLBACK_FILENAME
    args = clang_format_args(extra_args, str(assume_filename))

    try:
        formatted = run_clang_format(command, args, text)
    except CommandNotFoundError:
        if command != DEFAULT_COMMAND:
            raise
        formatted = run_clang_format("xcrun", [DEFAULT_COMMAND, *args], text)

    if formatted == text:
        return None
    return TextEdit(range=full_document_range(text), new_text=formatted)