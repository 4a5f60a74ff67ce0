"""Character classes, scoring constants and the bonus scheme used by the matchers."""

from __future__ import annotations

import os
import unicodedata
from dataclasses import dataclass
from enum import IntEnum

from fuzzyfind.normalize import normalize_rune

SCORE_MATCH = 16
SCORE_GAP_START = -3
SCORE_GAP_EXTENSION = -1

# Bonus for a match at the beginning of a word; cancelled by a gap of about 8.
BONUS_BOUNDARY = SCORE_MATCH // 2

# Bonus for non-word characters, needed for consecutive chunks that start with one.
BONUS_NON_WORD = SCORE_MATCH // 2

# Edge-triggered bonus for camelCase and letter123 transitions.
BONUS_CAMEL123 = BONUS_BOUNDARY + SCORE_GAP_EXTENSION

# Minimum bonus given to characters in consecutive chunks.
BONUS_CONSECUTIVE = -(SCORE_GAP_START + SCORE_GAP_EXTENSION)

# The first character of the pattern counts more at special positions.
BONUS_FIRST_CHAR_MULTIPLIER = 2

WHITE_CHARS = " \t\n\v\f\r\x85\xa0"
DEFAULT_DELIMITER_CHARS = "/,:;|"
MAX_ASCII = 0x7F


class CharClass(IntEnum):
    """Classes of characters that decide the bonus at a position."""

    WHITE = 0
    NON_WORD = 1
    DELIMITER = 2
    LOWER = 3
    UPPER = 4
    LETTER = 5
    NUMBER = 6


@dataclass(frozen=True)
class ScoringScheme:
    """Bonus values and character tables selected by a scheme name."""

    name: str
    bonus_boundary_white: int
    bonus_boundary_delimiter: int
    delimiter_chars: str
    initial_char_class: CharClass
    ascii_classes: tuple[CharClass, ...]
    bonus_matrix: tuple[tuple[int, ...], ...]

    @classmethod
    def build(cls, name: str) -> ScoringScheme:
        """Create the scheme called ``name``: default, path or history."""
        delimiter_chars = DEFAULT_DELIMITER_CHARS
        initial = CharClass.WHITE
        if name == "default":
            white, delimiter = BONUS_BOUNDARY + 2, BONUS_BOUNDARY + 1
        elif name == "path":
            white, delimiter = BONUS_BOUNDARY, BONUS_BOUNDARY + 1
            delimiter_chars = "/" if os.sep == "/" else os.sep + "/"
            initial = CharClass.DELIMITER
        elif name == "history":
            white, delimiter = BONUS_BOUNDARY, BONUS_BOUNDARY
        else:
            raise ValueError(f"unknown scoring scheme: {name}")

        ascii_classes = tuple(
            _ascii_class(chr(code), delimiter_chars) for code in range(MAX_ASCII + 1)
        )
        matrix = tuple(
            tuple(_bonus(prev, cur, white, delimiter) for cur in CharClass)
            for prev in CharClass
        )
        return cls(name, white, delimiter, delimiter_chars, initial, ascii_classes, matrix)

    def class_of(self, char: str) -> CharClass:
        """Return the class of ``char`` under this scheme."""
        code = ord(char)
        if code <= MAX_ASCII:
            return self.ascii_classes[code]
        return self.class_of_non_ascii(char)

    def class_of_non_ascii(self, char: str) -> CharClass:
        """Classify a character outside the ASCII range."""
        category = unicodedata.category(char)
        if category == "Ll":
            return CharClass.LOWER
        if category == "Lu":
            return CharClass.UPPER
        if category.startswith("N"):
            return CharClass.NUMBER
        if category.startswith("L"):
            return CharClass.LETTER
        if char.isspace():
            return CharClass.WHITE
        if char in self.delimiter_chars:
            return CharClass.DELIMITER
        return CharClass.NON_WORD

    def bonus(self, prev_class: CharClass, cls: CharClass) -> int:
        """Bonus for a character of class ``cls`` following ``prev_class``."""
        return self.bonus_matrix[prev_class][cls]


def _ascii_class(char: str, delimiter_chars: str) -> CharClass:
    if "a" <= char <= "z":
        return CharClass.LOWER
    if "A" <= char <= "Z":
        return CharClass.UPPER
    if "0" <= char <= "9":
        return CharClass.NUMBER
    if char in WHITE_CHARS:
        return CharClass.WHITE
    if char in delimiter_chars:
        return CharClass.DELIMITER
    return CharClass.NON_WORD


def _bonus(prev_class: CharClass, cls: CharClass, white: int, delimiter: int) -> int:
    if cls > CharClass.NON_WORD:
        if prev_class == CharClass.WHITE:
            return white
        if prev_class == CharClass.DELIMITER:
            return delimiter
        if prev_class == CharClass.NON_WORD:
            return BONUS_BOUNDARY

    if (prev_class == CharClass.LOWER and cls == CharClass.UPPER) or (
        prev_class != CharClass.NUMBER and cls == CharClass.NUMBER
    ):
        return BONUS_CAMEL123

    if cls in (CharClass.NON_WORD, CharClass.DELIMITER):
        return BONUS_NON_WORD
    if cls == CharClass.WHITE:
        return white
    return 0


_current: ScoringScheme = ScoringScheme.build("default")


def init_scheme(scheme: str) -> ScoringScheme:
    """Select the scoring scheme by name; raise ValueError for an unknown name."""
    global _current
    _current = ScoringScheme.build(scheme)
    return _current


def current_scheme() -> ScoringScheme:
    """Return the scoring scheme in effect."""
    return _current


def char_class_of(char: str) -> CharClass:
    """Return the class of ``char`` under the current scheme."""
    return _current.class_of(char)


def bonus_for(prev_class: CharClass, cls: CharClass) -> int:
    """Bonus for class ``cls`` after ``prev_class`` under the current scheme."""
    return _current.bonus(prev_class, cls)


def bonus_at(text: str, idx: int) -> int:
    """Bonus of the character at ``idx`` in ``text``."""
    if idx == 0:
        return _current.bonus_boundary_white
    return _current.bonus(char_class_of(text[idx - 1]), char_class_of(text[idx]))


def _simple_lower(char: str) -> str:
    """Lowercase a single character, always yielding one character."""
    lowered = char.lower()
    return lowered[0] if lowered else char


def _fold(char: str, case_sensitive: bool, normalize: bool) -> str:
    if not case_sensitive:
        if "A" <= char <= "Z":
            char = chr(ord(char) + 32)
        elif ord(char) > MAX_ASCII:
            char = _simple_lower(char)
    if normalize:
        char = normalize_rune(char)
    return char


def _try_skip(text: str, case_sensitive: bool, char: str, start: int) -> int:
    rest = text[start:]
    idx = rest.find(char)
    if idx == 0:
        return start
    if not case_sensitive and "a" <= char <= "z":
        if idx > 0:
            rest = rest[:idx]
        upper_idx = rest.find(char.upper())
        if upper_idx >= 0:
            idx = upper_idx
    if idx < 0:
        return -1
    return start + idx


def ascii_fuzzy_index(text: str, pattern: str, case_sensitive: bool) -> tuple[int, int]:
    """Narrow the range of ``text`` that can hold ``pattern``; (-1, -1) if none can."""
    if not text.isascii():
        return 0, len(text)
    if not pattern.isascii():
        return -1, -1

    first_idx = idx = last_idx = 0
    char = "\x00"
    for pidx, char in enumerate(pattern):
        idx = _try_skip(text, case_sensitive, char, idx)
        if idx < 0:
            return -1, -1
        if pidx == 0 and idx > 0:
            # Step back to find the right bonus point
            first_idx = idx - 1
        last_idx = idx
        idx += 1

    upper = char.upper() if not case_sensitive and "a" <= char <= "z" else char
    scope = text[last_idx:]
    for offset in range(len(scope) - 1, 0, -1):
        if scope[offset] in (char, upper):
            return first_idx, last_idx + offset + 1
    return first_idx, last_idx + 1


def calculate_score(
    case_sensitive: bool,
    normalize: bool,
    text: str,
    pattern: str,
    sidx: int,
    eidx: int,
    with_pos: bool,
) -> tuple[int, list[int] | None]:
    """Score the match of ``pattern`` within ``text[sidx:eidx]``.

    Returns the score and, if ``with_pos`` is set, the matched positions.
    """
    scheme = _current
    pidx = score = consecutive = first_bonus = 0
    in_gap = False
    positions: list[int] | None = [] if with_pos else None
    prev_class = scheme.initial_char_class
    if sidx > 0:
        prev_class = scheme.class_of(text[sidx - 1])

    for idx, raw in enumerate(text[sidx:eidx], start=sidx):
        cls = scheme.class_of(raw)
        char = _fold(raw, case_sensitive, normalize)
        if char == pattern[pidx]:
            if positions is not None:
                positions.append(idx)
            score += SCORE_MATCH
            bonus = scheme.bonus(prev_class, cls)
            if consecutive == 0:
                first_bonus = bonus
            else:
                # Break consecutive chunk
                if bonus >= BONUS_BOUNDARY and bonus > first_bonus:
                    first_bonus = bonus
                bonus = max(bonus, first_bonus, BONUS_CONSECUTIVE)
            score += bonus * BONUS_FIRST_CHAR_MULTIPLIER if pidx == 0 else bonus
            in_gap = False
            consecutive += 1
            pidx += 1
        else:
            score += SCORE_GAP_EXTENSION if in_gap else SCORE_GAP_START
            in_gap = True
            consecutive = 0
            first_bonus = 0
        prev_class = cls
    return score, positions