import random
import re

import pytest

from fuzzyfind.ansi import (
    AnsiState,
    Attr,
    Hyperlink,
    extract_color,
    interpret_code,
    next_ansi_escape_sequence,
    parse_ansi_code,
    to_ansi_string,
)

ANSI_REFERENCE = re.compile(
    "(?:\x1b[\\[()][0-9;:]*[a-zA-Z@]"
    "|\x1b\\][0-9][;:][\x20-\x7e]+(?:\x1b\\\\|\x07)"
    "|\x1b."
    "|[\x0e\x0f]"
    "|.\x08)"
)

BENCHMARK_STRING = (
    "\x1b[38;5;81m\x1b[01;31m\x1b[Kkernel/\x1b[0m\x1b[38:5:81mbpf/"
    "\x1b[0m\x1b[38:5:81mpreload/\x1b[0m\x1b[38;5;81miterators/"
    "\x1b[0m\x1b[38:5:149mMakefile\x1b[m\x1b[K\x1b[0m"
)

SAMPLES = [
    "\x1b[0mhello world",
    "\x1b[1mhello world",
    "椙\x1b[1m椙",
    "椙\x1b[1椙m椙",
    "\x1b[1mhello \x1b[mw\x1b7o\x1b8r\x1b(Bl\x1b[2@d",
    "\x1b[1mhello \x1b[Kworld",
    "hello \x1b[34;45;1mworld",
    "hello \x1b[34;45;1mwor\x1b[34;45;1mld",
    "hello \x1b[34;45;1mwor\x1b[0mld",
    "hello \x1b[34;48;5;233;1mwo\x1b[38;5;161mr\x1b[0ml\x1b[38;5;161md",
    "hello \x1b[38;5;38;48;5;48;1mwor\x1b[38;5;48;48;5;38ml\x1b[0md",
    "hello \x1b[32;1mworld",
    "hello world",
    "hello \x1b[0;38;5;200;48;5;100mworld",
]


def _compare_with_reference(text):
    rest = text
    while True:
        got = next_ansi_escape_sequence(rest)
        found = ANSI_REFERENCE.search(rest)
        expected = found.span() if found else None
        assert got == expected, repr(rest)
        if expected is None:
            return
        rest = rest[expected[1]:]


def _random_char(rng):
    while True:
        code = rng.randrange(0x110000)
        if not 0xD800 <= code <= 0xDFFF:
            return chr(code)


@pytest.mark.parametrize(
    "text",
    SAMPLES
    + [
        "\x1b椙",
        "椙\x08",
        "\n\x08",
        "X\x08",
        "",
        "\x1b]4;3;rgb:aa/bb/cc\x07 ",
        "\x1b]4;3;rgb:aa/bb/cc\x1b\\ ",
        BENCHMARK_STRING,
    ],
)
def test_next_ansi_escape_sequence(text):
    _compare_with_reference(text)


def test_next_ansi_escape_sequence_fuzz_modified():
    replacements = ["\x0e", "\x0f", "\x1b", "\x08"]
    rng = random.Random(1)
    for sample in SAMPLES + [BENCHMARK_STRING]:
        for _ in range(200):
            chars = list(sample)
            for _ in range(rng.randrange(len(sample)) + 1):
                if not chars:
                    break
                i = rng.randrange(len(chars))
                choice = rng.randrange(3)
                if choice == 0:
                    del chars[i]
                elif choice == 1:
                    chars[i] = replacements[rng.randrange(len(replacements) - 1)]
                else:
                    chars[i] = _random_char(rng)
            _compare_with_reference("".join(chars))


def test_next_ansi_escape_sequence_fuzz_random():
    rng = random.Random(1)
    for _ in range(2000):
        text = "".join(_random_char(rng) for _ in range(rng.randrange(50)))
        _compare_with_reference(text)


def test_next_ansi_escape_sequence_none_without_escapes():
    assert next_ansi_escape_sequence("plain text") is None


def _assert_offset(offset, start, end, fg, bg, bold):
    attr = Attr.BOLD if bold else Attr(0)
    assert (offset.start, offset.end) == (start, end)
    assert offset.color.fg == fg
    assert offset.color.bg == bg
    assert offset.color.attr == attr


@pytest.mark.parametrize(
    "text, expected",
    [
        ("hello world", None),
        ("\x1b[0mhello world", None),
        ("\x1b[1mhello world", [(0, 11, -1, -1, True)]),
        ("\x1b[1mhello \x1b[mw\x1b7o\x1b8r\x1b(Bl\x1b[2@d", [(0, 6, -1, -1, True)]),
        ("\x1b[1mhello \x1b[Kworld", [(0, 11, -1, -1, True)]),
        ("hello \x1b[34;45;1mworld", [(6, 11, 4, 5, True)]),
        ("hello \x1b[34;45;1mwor\x1b[34;45;1mld", [(6, 11, 4, 5, True)]),
        ("hello \x1b[34;45;1mwor\x1b[0mld", [(6, 9, 4, 5, True)]),
        (
            "hello \x1b[34;48;5;233;1mwo\x1b[38;5;161mr\x1b[0ml\x1b[38;5;161md",
            [(6, 8, 4, 233, True), (8, 9, 161, 233, True), (10, 11, 161, -1, False)],
        ),
        (
            "hello \x1b[38;5;38;48;5;48;1mwor\x1b[38;5;48;48;5;38ml\x1b[0md",
            [(6, 9, 38, 48, True), (9, 10, 48, 38, True)],
        ),
    ],
)
def test_extract_color(text, expected):
    output, offsets, _ = extract_color(text, None, None)
    assert output == "hello world"
    if expected is None:
        assert offsets is None
    else:
        assert len(offsets) == len(expected)
        for offset, values in zip(offsets, expected):
            _assert_offset(offset, *values)


def test_extract_color_carries_state():
    output, offsets, state = extract_color("hello \x1b[32;1mworld", None, None)
    assert output == "hello world"
    assert len(offsets) == 1
    assert (state.fg, state.bg) == (2, -1)
    assert state.attr != 0
    _assert_offset(offsets[0], 6, 11, 2, -1, True)

    output, offsets, state = extract_color("hello world", state, None)
    assert output == "hello world"
    assert len(offsets) == 1
    assert (state.fg, state.bg) == (2, -1)
    assert state.attr != 0
    _assert_offset(offsets[0], 0, 11, 2, -1, True)

    output, offsets, state = extract_color(
        "hello \x1b[0;38;5;200;48;5;100mworld", state, None
    )
    assert output == "hello world"
    assert len(offsets) == 2
    assert (state.fg, state.bg, state.attr) == (200, 100, Attr(0))
    _assert_offset(offsets[0], 0, 6, 2, -1, True)
    _assert_offset(offsets[1], 6, 11, 200, 100, False)


def test_extract_color_proc_sees_segments():
    seen = []

    def proc(segment, state):
        seen.append((segment, state is not None))
        return True

    output, _, _ = extract_color("ab\x1b[1mcd", None, proc)
    assert output == "abcd"
    assert seen == [("ab", False), ("cd", True)]


def test_extract_color_proc_can_abort():
    assert extract_color("ab\x1b[1mcd", None, lambda s, st: False) == ("", None, None)


@pytest.mark.parametrize(
    "code, prev, expected",
    [
        ("\x1b[m", None, ""),
        ("\x1b[m", AnsiState(fg=0, bg=0, attr=Attr.BLINK, lbg=-1), ""),
        ("\x1b[0m", AnsiState(fg=4, bg=4, lbg=-1), ""),
        ("\x1b[;m", AnsiState(fg=4, bg=4, lbg=-1), ""),
        ("\x1b[;;m", AnsiState(fg=4, bg=4, lbg=-1), ""),
        ("\x1b[31m", None, "\x1b[31;49m"),
        ("\x1b[41m", None, "\x1b[39;41m"),
        ("\x1b[92m", None, "\x1b[92;49m"),
        ("\x1b[102m", None, "\x1b[39;102m"),
        ("\x1b[31m", AnsiState(fg=4, bg=4, lbg=-1), "\x1b[31;44m"),
        (
            "\x1b[1;2;31m",
            AnsiState(fg=2, bg=-1, attr=Attr.REVERSE, lbg=-1),
            "\x1b[1;2;7;31;49m",
        ),
        ("\x1b[38;5;100;48;5;200m", None, "\x1b[38;5;100;48;5;200m"),
        ("\x1b[38:5:100:48:5:200m", None, "\x1b[38;5;100;48;5;200m"),
        ("\x1b[48;5;100;38;5;200m", None, "\x1b[38;5;200;48;5;100m"),
        ("\x1b[48;5;100;38;2;10;20;30;1m", None, "\x1b[1;38;2;10;20;30;48;5;100m"),
        (
            "\x1b[48;5;100;38;2;10;20;30;7m",
            AnsiState(fg=1, bg=1, attr=Attr.DIM | Attr.ITALIC, lbg=0),
            "\x1b[2;3;7;38;2;10;20;30;48;5;100m",
        ),
    ],
)
def test_ansi_code_string_conversion(code, prev, expected):
    assert interpret_code(code, prev).to_string() == expected


@pytest.mark.parametrize(
    "text, remaining, number",
    [
        ("123", "", 123),
        ("1a", "", -1),
        ("1a;12", "12", -1),
        ("12;a", "a", 12),
        ("-2", "", -1),
    ],
)
def test_parse_ansi_code(text, remaining, number):
    num, _, rest = parse_ansi_code(text, "")
    assert (num, rest) == (number, remaining)


def test_parse_ansi_code_reports_delimiter():
    assert parse_ansi_code("38:5", "") == (38, ":", "5")


def test_to_ansi_string_default_color():
    assert to_ansi_string(-1, 30) == "39;"
    assert to_ansi_string(-1, 40) == "49;"


def test_hyperlink_start_and_end():
    state = interpret_code("\x1b]8;id=1;https://example.com\x1b\\", None)
    assert state.url == Hyperlink(uri="https://example.com", params="id=1")
    assert state.colored()
    ended = interpret_code("\x1b]8;;\x1b\\", state)
    assert ended.url is None
    assert not ended.colored()


def test_erase_line_keeps_background():
    prev = AnsiState(fg=-1, bg=3)
    assert interpret_code("\x1b[0K", prev).lbg == 3


def test_default_state_is_not_colored():
    assert AnsiState().to_string() == ""
    assert not AnsiState().colored()