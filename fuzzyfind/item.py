"""Input lines as held by the finder."""

from __future__ import annotations

from dataclasses import dataclass, field

from fuzzyfind.ansi import AnsiOffset, extract_color


@dataclass
class Item:
    """One input line.

    ``text`` is the searchable text, ``orig_text`` the line as it was read
    when it differs from ``text``, and ``colors`` the coloured spans of
    ``text``.
    """

    text: str
    index: int = 0
    orig_text: str | None = None
    colors: list[AnsiOffset] = field(default_factory=list)
    transformed: list | None = None

    def as_string(self, strip_ansi: bool) -> str:
        """Return the original line, without escape sequences if ``strip_ansi``."""
        if self.orig_text is not None:
            if strip_ansi:
                trimmed, _, _ = extract_color(self.orig_text, None, None)
                return trimmed
            return self.orig_text
        return self.text


MIN_ITEM = Item(text="", index=-(2**31))