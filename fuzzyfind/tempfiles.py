"""Temporary files for passing data to other programs."""

from __future__ import annotations

import contextlib
import os
import tempfile
from collections.abc import Iterable


def write_temporary_file(data: Iterable[str], print_sep: str) -> str | None:
    """Write ``data`` joined and terminated by ``print_sep`` to a new file.

    Returns the path of the file, or None if it could not be created.
    """
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            newline="",
            prefix="fuzzyfind-temp-",
            delete=False,
        ) as handle:
            handle.write(print_sep.join(data))
            handle.write(print_sep)
            return handle.name
    except OSError:
        return None


def remove_files(files: Iterable[str]) -> None:
    """Delete each of ``files``, ignoring those that cannot be removed."""
    for path in files:
        with contextlib.suppress(OSError):
            os.remove(path)