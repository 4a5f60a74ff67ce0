"""Fuzzy, exact, prefix, suffix and equality matching with fzf-style scoring.

The fuzzy matchers follow two strategies.  ``fuzzy_match_v1`` finds the first
occurrence of the pattern and then looks backwards for a shorter one.  It is
fast but may miss the best-scoring occurrence.  ``fuzzy_match_v2`` fills a
Smith-Waterman style score matrix and finds the highest-scoring alignment,
falling back to v1 when the matrix would be too large.

Every matcher assumes that ``pattern`` is already lowercase when
``case_sensitive`` is false, and already folded when ``normalize`` is true.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from fuzzyfind.charclass import (
    BONUS_BOUNDARY,
    BONUS_CONSECUTIVE,
    BONUS_FIRST_CHAR_MULTIPLIER,
    MAX_ASCII,
    SCORE_GAP_EXTENSION,
    SCORE_GAP_START,
    SCORE_MATCH,
    CharClass,
    _fold,
    _simple_lower,
    ascii_fuzzy_index,
    bonus_at,
    calculate_score,
    char_class_of,
    current_scheme,
)
from fuzzyfind.normalize import normalize_rune


@dataclass(frozen=True)
class MatchResult:
    """Where a pattern matched and how well.

    ``start`` and ``end`` are -1 when there is no match.  ``positions`` holds
    the matched character indices when they were asked for and computed.
    """

    start: int
    end: int
    score: int
    positions: list[int] | None = None


Matcher = Callable[..., MatchResult]


def _no_match() -> MatchResult:
    return MatchResult(-1, -1, 0)


def _index_at(index: int, length: int, forward: bool) -> int:
    return index if forward else length - index - 1


def _is_space(char: str) -> bool:
    # Information separators count as space for str.isspace but not here.
    return char.isspace() and char not in "\x1c\x1d\x1e\x1f"


def _leading_whitespaces(text: str) -> int:
    count = 0
    for char in text:
        if not _is_space(char):
            break
        count += 1
    return count


def _trailing_whitespaces(text: str) -> int:
    count = 0
    for char in reversed(text):
        if not _is_space(char):
            break
        count += 1
    return count


def fuzzy_match_v2(
    case_sensitive: bool,
    normalize: bool,
    forward: bool,
    text: str,
    pattern: str,
    with_pos: bool = False,
    max_cells: int | None = None,
) -> MatchResult:
    """Find the highest-scoring fuzzy occurrence of ``pattern`` in ``text``.

    When ``max_cells`` is given and the score matrix would need more cells,
    the greedy ``fuzzy_match_v1`` is used instead.
    """
    m = len(pattern)
    if m == 0:
        return MatchResult(0, 0, 0, [] if with_pos else None)
    n = len(text)
    if m > n:
        return _no_match()
    if max_cells is not None and n * m > max_cells:
        return fuzzy_match_v1(case_sensitive, normalize, forward, text, pattern, with_pos, max_cells)

    # Phase 1. Narrow the search range
    min_idx, max_idx = ascii_fuzzy_index(text, pattern, case_sensitive)
    if min_idx < 0:
        return _no_match()
    n = max_idx - min_idx

    scheme = current_scheme()
    h0 = [0] * n
    c0 = [0] * n
    bonuses = [0] * n
    first = [0] * m
    chars = list(text[min_idx:max_idx])

    # Phase 2. Bonus for each position and the first occurrence of each pattern char
    max_score, max_score_pos = 0, 0
    pidx = last_idx = 0
    pchar0 = pchar = pattern[0]
    prev_h0 = 0
    prev_class = scheme.initial_char_class
    in_gap = False
    for off, char in enumerate(chars):
        code = ord(char)
        if code <= MAX_ASCII:
            cls = scheme.ascii_classes[code]
            if not case_sensitive and cls == CharClass.UPPER:
                char = chr(code + 32)
                chars[off] = char
        else:
            cls = scheme.class_of_non_ascii(char)
            if not case_sensitive and cls == CharClass.UPPER:
                char = _simple_lower(char)
            if normalize:
                char = normalize_rune(char)
            chars[off] = char

        bonus = scheme.bonus(prev_class, cls)
        bonuses[off] = bonus
        prev_class = cls

        if char == pchar:
            if pidx < m:
                first[pidx] = off
                pidx += 1
                pchar = pattern[min(pidx, m - 1)]
            last_idx = off

        if char == pchar0:
            score = SCORE_MATCH + bonus * BONUS_FIRST_CHAR_MULTIPLIER
            h0[off] = score
            c0[off] = 1
            if m == 1 and (forward and score > max_score or not forward and score >= max_score):
                max_score, max_score_pos = score, off
                if forward and bonus >= BONUS_BOUNDARY:
                    break
            in_gap = False
        else:
            penalty = SCORE_GAP_EXTENSION if in_gap else SCORE_GAP_START
            h0[off] = max(prev_h0 + penalty, 0)
            c0[off] = 0
            in_gap = True
        prev_h0 = h0[off]

    if pidx != m:
        return _no_match()
    if m == 1:
        pos = min_idx + max_score_pos
        return MatchResult(pos, pos + 1, max_score, [pos] if with_pos else None)

    # Phase 3. Fill in the score matrix; omission is not allowed
    f0 = first[0]
    width = last_idx - f0 + 1
    scores = [0] * (width * m)
    scores[:width] = h0[f0:last_idx + 1]
    runs = [0] * (width * m)
    runs[:width] = c0[f0:last_idx + 1]

    for row_idx in range(1, m):
        start_col = first[row_idx]
        pchar = pattern[row_idx]
        row = row_idx * width
        in_gap = False
        scores[row + start_col - f0 - 1] = 0
        for col in range(start_col, last_idx + 1):
            cell = row + col - f0
            s2 = scores[cell - 1] + (SCORE_GAP_EXTENSION if in_gap else SCORE_GAP_START)
            s1 = 0
            consecutive = 0
            if chars[col] == pchar:
                diag = cell - 1 - width
                s1 = scores[diag] + SCORE_MATCH
                bonus = bonuses[col]
                consecutive = runs[diag] + 1
                if consecutive > 1:
                    first_bonus = bonuses[col - consecutive + 1]
                    # Break consecutive chunk
                    if bonus >= BONUS_BOUNDARY and bonus > first_bonus:
                        consecutive = 1
                    else:
                        bonus = max(bonus, BONUS_CONSECUTIVE, first_bonus)
                if s1 + bonus < s2:
                    s1 += bonuses[col]
                    consecutive = 0
                else:
                    s1 += bonus
            runs[cell] = consecutive

            in_gap = s1 < s2
            score = max(s1, s2, 0)
            if row_idx == m - 1 and (forward and score > max_score or not forward and score >= max_score):
                max_score, max_score_pos = score, col
            scores[cell] = score

    # Phase 4. Backtrace to find character positions
    positions: list[int] | None = None
    j = f0
    if with_pos:
        positions = []
        i = m - 1
        j = max_score_pos
        prefer_match = True
        while True:
            row = i * width
            j0 = j - f0
            s = scores[row + j0]
            s1 = s2 = 0
            if i > 0 and j >= first[i]:
                s1 = scores[row - width + j0 - 1]
            if j > first[i]:
                s2 = scores[row + j0 - 1]

            if s > s1 and (s > s2 or s == s2 and prefer_match):
                positions.append(j + min_idx)
                if i == 0:
                    break
                i -= 1
            below = row + width + j0 + 1
            prefer_match = runs[row + j0] > 1 or (below < len(runs) and runs[below] > 0)
            j -= 1

    # The start offset is only accurate when positions were traced.
    return MatchResult(min_idx + j, min_idx + max_score_pos + 1, max_score, positions)


def fuzzy_match_v1(
    case_sensitive: bool,
    normalize: bool,
    forward: bool,
    text: str,
    pattern: str,
    with_pos: bool = False,
    max_cells: int | None = None,
) -> MatchResult:
    """Find the first fuzzy occurrence of ``pattern``, then shorten it backwards."""
    if not pattern:
        return MatchResult(0, 0, 0)
    idx, _ = ascii_fuzzy_index(text, pattern, case_sensitive)
    if idx < 0:
        return _no_match()

    n = len(text)
    m = len(pattern)
    pidx = 0
    sidx = eidx = -1
    for index in range(n):
        char = _fold(text[_index_at(index, n, forward)], case_sensitive, normalize)
        if char == pattern[_index_at(pidx, m, forward)]:
            if sidx < 0:
                sidx = index
            pidx += 1
            if pidx == m:
                eidx = index + 1
                break

    if sidx < 0 or eidx < 0:
        return _no_match()

    pidx -= 1
    for index in range(eidx - 1, sidx - 1, -1):
        char = _fold(text[_index_at(index, n, forward)], case_sensitive, False)
        if char == pattern[_index_at(pidx, m, forward)]:
            pidx -= 1
            if pidx < 0:
                sidx = index
                break

    if not forward:
        sidx, eidx = n - eidx, n - sidx

    score, positions = calculate_score(case_sensitive, normalize, text, pattern, sidx, eidx, with_pos)
    return MatchResult(sidx, eidx, score, positions)


def exact_match_naive(
    case_sensitive: bool,
    normalize: bool,
    forward: bool,
    text: str,
    pattern: str,
    with_pos: bool = False,
    max_cells: int | None = None,
) -> MatchResult:
    """Find the exact occurrence of ``pattern`` with the best bonus at its start."""
    return _exact_match(case_sensitive, normalize, forward, False, text, pattern)


def exact_match_boundary(
    case_sensitive: bool,
    normalize: bool,
    forward: bool,
    text: str,
    pattern: str,
    with_pos: bool = False,
    max_cells: int | None = None,
) -> MatchResult:
    """Find an exact occurrence of ``pattern`` that starts and ends at word boundaries."""
    return _exact_match(case_sensitive, normalize, forward, True, text, pattern)


def _exact_match(
    case_sensitive: bool,
    normalize: bool,
    forward: bool,
    boundary_check: bool,
    text: str,
    pattern: str,
) -> MatchResult:
    if not pattern:
        return MatchResult(0, 0, 0)
    n = len(text)
    m = len(pattern)
    if n < m:
        return _no_match()
    idx, _ = ascii_fuzzy_index(text, pattern, case_sensitive)
    if idx < 0:
        return _no_match()

    # Only the bonus at the first character position is considered.
    pidx = 0
    best_pos, bonus, best_bonus = -1, 0, -1
    index = 0
    while index < n:
        text_idx = _index_at(index, n, forward)
        char = _fold(text[text_idx], case_sensitive, normalize)
        pattern_idx = _index_at(pidx, m, forward)
        ok = pattern[pattern_idx] == char
        if ok:
            if pattern_idx == 0:
                bonus = bonus_at(text, text_idx)
            if boundary_check:
                ok = bonus >= BONUS_BOUNDARY
                if ok and pattern_idx == 0:
                    ok = text_idx == 0 or char_class_of(text[text_idx - 1]) <= CharClass.DELIMITER
                if ok and pattern_idx == m - 1:
                    ok = text_idx == n - 1 or char_class_of(text[text_idx + 1]) <= CharClass.DELIMITER
        if ok:
            pidx += 1
            if pidx == m:
                if bonus > best_bonus:
                    best_pos, best_bonus = index, bonus
                if bonus >= BONUS_BOUNDARY:
                    break
                index -= pidx - 1
                pidx, bonus = 0, 0
        else:
            index -= pidx
            pidx, bonus = 0, 0
        index += 1

    if best_pos < 0:
        return _no_match()

    if forward:
        sidx, eidx = best_pos - m + 1, best_pos + 1
    else:
        sidx, eidx = n - (best_pos + 1), n - (best_pos - m + 1)

    if boundary_check:
        # Underscore boundaries rank lower than other kinds of boundaries
        score = bonus
        deduct = bonus - BONUS_BOUNDARY + 1
        if sidx > 0 and text[sidx - 1] == "_":
            score -= deduct + 1
            deduct = 1
        if eidx < n and text[eidx] == "_":
            score -= deduct
        # Base score so that this can compete with other match types
        score += SCORE_MATCH * m + current_scheme().bonus_boundary_white * (m + 1)
    else:
        score, _ = calculate_score(case_sensitive, normalize, text, pattern, sidx, eidx, False)
    return MatchResult(sidx, eidx, score)


def _fold_simple(char: str, case_sensitive: bool, normalize: bool) -> str:
    if not case_sensitive:
        char = _simple_lower(char)
    if normalize:
        char = normalize_rune(char)
    return char


def prefix_match(
    case_sensitive: bool,
    normalize: bool,
    forward: bool,
    text: str,
    pattern: str,
    with_pos: bool = False,
    max_cells: int | None = None,
) -> MatchResult:
    """Match ``pattern`` at the start of ``text``, ignoring leading whitespace."""
    if not pattern:
        return MatchResult(0, 0, 0)

    trimmed = 0 if _is_space(pattern[0]) else _leading_whitespaces(text)
    if len(text) - trimmed < len(pattern):
        return _no_match()

    for offset, expected in enumerate(pattern):
        if _fold_simple(text[trimmed + offset], case_sensitive, normalize) != expected:
            return _no_match()

    end = trimmed + len(pattern)
    score, _ = calculate_score(case_sensitive, normalize, text, pattern, trimmed, end, False)
    return MatchResult(trimmed, end, score)


def suffix_match(
    case_sensitive: bool,
    normalize: bool,
    forward: bool,
    text: str,
    pattern: str,
    with_pos: bool = False,
    max_cells: int | None = None,
) -> MatchResult:
    """Match ``pattern`` at the end of ``text``, ignoring trailing whitespace."""
    trimmed = len(text)
    if not pattern or not _is_space(pattern[-1]):
        trimmed -= _trailing_whitespaces(text)
    if not pattern:
        return MatchResult(trimmed, trimmed, 0)
    diff = trimmed - len(pattern)
    if diff < 0:
        return _no_match()

    for offset, expected in enumerate(pattern):
        if _fold_simple(text[diff + offset], case_sensitive, normalize) != expected:
            return _no_match()

    sidx = trimmed - len(pattern)
    score, _ = calculate_score(case_sensitive, normalize, text, pattern, sidx, trimmed, False)
    return MatchResult(sidx, trimmed, score)


def equal_match(
    case_sensitive: bool,
    normalize: bool,
    forward: bool,
    text: str,
    pattern: str,
    with_pos: bool = False,
    max_cells: int | None = None,
) -> MatchResult:
    """Match when ``text`` equals ``pattern`` apart from surrounding whitespace."""
    m = len(pattern)
    if m == 0:
        return _no_match()

    leading = 0 if _is_space(pattern[0]) else _leading_whitespaces(text)
    trailing = 0 if _is_space(pattern[-1]) else _trailing_whitespaces(text)
    if len(text) - leading - trailing != m:
        return _no_match()

    if normalize:
        matched = True
        for offset, pchar in enumerate(pattern):
            char = text[leading + offset]
            if not case_sensitive:
                char = _simple_lower(char)
            if normalize_rune(pchar) != normalize_rune(char):
                matched = False
                break
    else:
        body = text[leading:len(text) - trailing]
        if not case_sensitive:
            body = body.lower()
        matched = body == pattern

    if not matched:
        return _no_match()
    white = current_scheme().bonus_boundary_white
    score = (SCORE_MATCH + white) * m + (BONUS_FIRST_CHAR_MULTIPLIER - 1) * white
    return MatchResult(leading, leading + m, score)