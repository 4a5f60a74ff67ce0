"""Parsing of ANSI escape sequences and extraction of colour spans from text."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import IntFlag


class Attr(IntFlag):
    """Text attributes carried by SGR sequences."""

    BOLD = 1
    DIM = 2
    ITALIC = 4
    UNDERLINE = 8
    BLINK = 16
    REVERSE = 32
    STRIKE_THROUGH = 64


_NO_ATTR = Attr(0)

# Attribute flags in the order they are written back as SGR codes.
_ATTR_CODES: tuple[tuple[Attr, str], ...] = (
    (Attr.BOLD, "1"),
    (Attr.DIM, "2"),
    (Attr.ITALIC, "3"),
    (Attr.UNDERLINE, "4"),
    (Attr.BLINK, "5"),
    (Attr.REVERSE, "7"),
    (Attr.STRIKE_THROUGH, "9"),
)

_SET_ATTRS = {
    1: Attr.BOLD,
    2: Attr.DIM,
    3: Attr.ITALIC,
    4: Attr.UNDERLINE,
    5: Attr.BLINK,
    7: Attr.REVERSE,
    9: Attr.STRIKE_THROUGH,
}

_CLEAR_ATTRS = {
    22: Attr.BOLD | Attr.DIM,
    23: Attr.ITALIC,
    24: Attr.UNDERLINE,
    25: Attr.BLINK,
    27: Attr.REVERSE,
    29: Attr.STRIKE_THROUGH,
}

_DIGITS = "0123456789"

_CONTROL_CHARS = re.compile("[\x0e\x0f\x1b\x08]")
_CSI_TAIL = re.compile(r"[0-9;:?]*[a-zA-Z@]")
_PRINTABLE = re.compile("[\x20-\x7e]*")


@dataclass(frozen=True)
class Hyperlink:
    """Target of an OSC 8 hyperlink."""

    uri: str
    params: str


@dataclass(frozen=True)
class AnsiState:
    """Colours and attributes in effect at a point of the text."""

    fg: int = -1
    bg: int = -1
    attr: Attr = _NO_ATTR
    lbg: int = -1
    url: Hyperlink | None = None

    def colored(self) -> bool:
        """Whether this state differs from the terminal default."""
        return (
            self.fg != -1
            or self.bg != -1
            or self.attr > 0
            or self.lbg >= 0
            or self.url is not None
        )

    def to_string(self) -> str:
        """Render the state as the escape sequence that produces it."""
        if not self.colored():
            return ""
        parts = [code for flag, code in _ATTR_CODES if self.attr & flag]
        body = "".join(part + ";" for part in parts)
        body += to_ansi_string(self.fg, 30) + to_ansi_string(self.bg, 40)
        result = "\x1b[" + body.removesuffix(";") + "m"
        if self.url is not None:
            result = f"\x1b]8;{self.url.params};{self.url.uri}\x1b\\{result}\x1b]8;;\x1b"
        return result


@dataclass
class AnsiOffset:
    """A span of characters ``[start, end)`` drawn with ``color``."""

    start: int
    end: int
    color: AnsiState


_DEFAULT_STATE = AnsiState()


def _same_state(state: AnsiState, other: AnsiState | None) -> bool:
    if other is None:
        return not state.colored()
    return (
        state.fg == other.fg
        and state.bg == other.bg
        and state.attr == other.attr
        and state.lbg == other.lbg
        and state.url is other.url
    )


def to_ansi_string(color: int, offset: int) -> str:
    """SGR parameters selecting ``color``; ``offset`` is 30 for fg, 40 for bg."""
    if color == -1:
        text = str(offset + 9)
    elif color < 8:
        text = str(offset + color)
    elif color < 16:
        text = str(offset - 30 + 90 + color - 8)
    elif color < 256:
        text = f"{offset + 8};5;{color}"
    elif color >= 1 << 24:
        red = (color >> 16) & 0xFF
        green = (color >> 8) & 0xFF
        blue = color & 0xFF
        text = f"{offset + 8};2;{red};{green};{blue}"
    else:
        text = ""
    return text + ";"


def _is_print(char: str) -> bool:
    return "\x20" <= char <= "\x7e"


def _match_operating_system_command(text: str, start: int) -> int:
    n = len(text)
    k = _PRINTABLE.match(text, start + 5).end()
    if k < n:
        if text[k] == "\x07":
            return k + 1
        if text[k] == "\x1b" and k < n - 1 and text[k + 1] == "\\":
            return k + 2
    if k < n and text[start:k + 1] == "\x1b]8;;\x1b":
        return k + 1
    return -1


def _next_sequence(text: str, pos: int) -> tuple[int, int] | None:
    n = len(text)
    for found in _CONTROL_CHARS.finditer(text, pos):
        i = found.start()
        char = text[i]
        if char == "\x08":
            if i > pos and text[i - 1] != "\n":
                return i - 1, i + 1
        elif char == "\x1b":
            if i + 2 < n and text[i + 1] in "\\[()":
                tail = _CSI_TAIL.match(text, i + 2)
                if tail is not None:
                    return i, tail.end()
            if (
                i + 5 < n
                and text[i + 1] == "]"
                and "0" <= text[i + 2] <= "9"
                and text[i + 3] in ";:"
                and _is_print(text[i + 4])
            ):
                end = _match_operating_system_command(text, i)
                if end != -1:
                    return i, end
            if i + 1 < n and text[i + 1] != "\n":
                return i, i + 2
        else:
            return i, i + 1
    return None


def next_ansi_escape_sequence(text: str) -> tuple[int, int] | None:
    """Return ``(start, end)`` of the first escape sequence in ``text``, or None."""
    return _next_sequence(text, 0)


def extract_color(
    text: str,
    state: AnsiState | None,
    proc: Callable[[str, AnsiState | None], bool] | None,
) -> tuple[str, list[AnsiOffset] | None, AnsiState | None]:
    """Strip escape sequences from ``text`` and collect the coloured spans.

    ``state`` is the state carried over from the previous line.  ``proc``, if
    given, receives every plain segment with the state in effect; returning
    False from it aborts and yields ``("", None, None)``.  Returns the plain
    text, the spans (or None when there are none) and the final state.
    """
    offsets: list[AnsiOffset] = []
    if state is not None:
        offsets.append(AnsiOffset(0, 0, state))

    output: list[str] = []
    prev_idx = 0
    rune_count = 0
    idx = 0
    while idx < len(text):
        found = _next_sequence(text, idx)
        if found is None:
            break
        start, idx = found

        prev = text[prev_idx:start]
        if proc is not None and not proc(prev, state):
            return "", None, None
        prev_idx = idx

        if prev:
            rune_count += len(prev)
            output.append(prev)

        new_state = interpret_code(text[start:idx], state)
        if not _same_state(new_state, state):
            if state is not None:
                offsets[-1].end = rune_count
            if new_state.colored():
                state = new_state
                offsets.append(AnsiOffset(rune_count, rune_count, new_state))
            else:
                state = None

    if prev_idx == 0:
        rest = trimmed = text
    else:
        rest = text[prev_idx:]
        output.append(rest)
        trimmed = "".join(output)
    if proc is not None:
        proc(rest, state)
    if offsets:
        if rest and state is not None:
            rune_count += len(rest)
            offsets[-1].end = rune_count
        return trimmed, offsets, state
    return trimmed, None, state


def parse_ansi_code(text: str, delimiter: str = "") -> tuple[int, str, str]:
    """Split off the first numeric parameter of an SGR body.

    Without a ``delimiter`` either ';' or ':' separates parameters.  Returns
    the number (-1 when it is empty or not a plain number), the delimiter
    found and the remaining text.
    """
    if delimiter:
        i = text.find(delimiter)
    else:
        i = text.find(";")
        if i < 0:
            i = text.find(":")
    remaining = ""
    if i >= 0:
        delimiter = text[i]
        remaining = text[i + 1:]
        text = text[:i]
    if text and all(char in _DIGITS for char in text):
        return int(text), delimiter, remaining
    return -1, delimiter, remaining


def interpret_code(code: str, prev_state: AnsiState | None) -> AnsiState:
    """Apply the escape sequence ``code`` to ``prev_state`` and return the result."""
    base = prev_state if prev_state is not None else _DEFAULT_STATE

    if not (code.startswith("\x1b[") and code.endswith("m")):
        if prev_state is not None and code.endswith("0K"):
            return replace(base, lbg=prev_state.bg)
        if code == "\x1b]8;;\x1b\\":
            return replace(base, url=None)
        if code.startswith("\x1b]8;") and code.endswith("\x1b\\"):
            sep = code.find(";", 4)
            if sep >= 0:
                link = Hyperlink(uri=code[sep + 1:-2], params=code[4:sep])
                return replace(base, url=link)
        return base

    if len(code) <= 3:
        return replace(base, fg=-1, bg=-1, attr=_NO_ATTR)

    body = code[2:-1]
    colors = {"fg": base.fg, "bg": base.bg}
    attr = base.attr
    target = "fg"
    mode = 0
    delimiter = ""
    count = 0
    while body:
        num, delimiter, body = parse_ansi_code(body, delimiter)
        if num == -1:
            continue
        count += 1
        if mode == 0:
            if num == 38:
                target, mode = "fg", 1
            elif num == 48:
                target, mode = "bg", 1
            elif num == 39:
                colors["fg"] = -1
            elif num == 49:
                colors["bg"] = -1
            elif num in _SET_ATTRS:
                attr |= _SET_ATTRS[num]
            elif num in _CLEAR_ATTRS:
                attr &= ~_CLEAR_ATTRS[num]
            elif num == 0:
                colors["fg"] = colors["bg"] = -1
                attr = _NO_ATTR
            elif 30 <= num <= 37:
                colors["fg"] = num - 30
            elif 40 <= num <= 47:
                colors["bg"] = num - 40
            elif 90 <= num <= 97:
                colors["fg"] = num - 90 + 8
            elif 100 <= num <= 107:
                colors["bg"] = num - 100 + 8
        elif mode == 1:
            mode = {2: 10, 5: 2}.get(num, 0)
        elif mode == 2:
            colors[target] = num
            mode = 0
        elif mode == 10:
            colors[target] = (1 << 24) | (num << 16)
            mode = 11
        elif mode == 11:
            colors[target] |= num << 8
            mode = 12
        elif mode == 12:
            colors[target] |= num
            mode = 0

    if count == 0:
        colors["fg"] = colors["bg"] = -1
        attr = _NO_ATTR
    if mode > 0:
        colors[target] = -1
    return replace(base, fg=colors["fg"], bg=colors["bg"], attr=attr)