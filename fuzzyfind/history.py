"""Query history kept in a file."""

from __future__ import annotations

import os


class HistoryError(Exception):
    """The history file cannot be read or created."""


def _write(path: str, text: str) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
        handle.write(text)


class History:
    """Lines of past queries with a cursor for moving through them.

    The last line is always the entry being edited.
    """

    def __init__(self, path: str, max_size: int) -> None:
        self.path = path
        self.max_size = max_size
        try:
            with open(path, encoding="utf-8", newline="") as handle:
                data = handle.read()
        except FileNotFoundError:
            data = ""
            try:
                _write(path, data)
            except OSError as error:
                raise self._error(error) from error
        except (OSError, UnicodeDecodeError) as error:
            raise self._error(error) from error

        lines = data.strip("\n").split("\n")
        if lines[-1]:
            lines.append("")
        self.lines: list[str] = lines
        self.modified: dict[int, str] = {}
        self.cursor = len(lines) - 1

    def _error(self, error: Exception) -> HistoryError:
        if isinstance(error, PermissionError):
            return HistoryError(f"permission denied: {self.path}")
        return HistoryError(f"invalid history file: {error}")

    def append(self, line: str) -> None:
        """Record ``line`` and write the history file; empty lines are ignored."""
        if not line:
            return
        lines = self.lines[:-1] + [line]
        if len(lines) > self.max_size:
            lines = lines[len(lines) - self.max_size:]
        self.lines = lines + [""]
        _write(self.path, "\n".join(self.lines))

    def override(self, text: str) -> None:
        """Replace the entry under the cursor in memory only."""
        if self.cursor == len(self.lines) - 1:
            self.lines[self.cursor] = text
        elif self.cursor < len(self.lines) - 1:
            self.modified[self.cursor] = text

    def current(self) -> str:
        """The entry under the cursor, with any override applied."""
        return self.modified.get(self.cursor, self.lines[self.cursor])

    def previous(self) -> str:
        """Move to the older entry, if any, and return it."""
        if self.cursor > 0:
            self.cursor -= 1
        return self.current()

    def next(self) -> str:
        """Move to the newer entry, if any, and return it."""
        if self.cursor < len(self.lines) - 1:
            self.cursor += 1
        return self.current()