# fuzzyfind

The building blocks of an interactive fuzzy line filter, as a Python library
with no dependencies outside the standard library. It scores how well a short
pattern matches a line of text, strips ANSI escape sequences and records the
coloured spans, stores input lines in chunks with a per-chunk result cache,
and keeps query history in a file.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Matching

Every matcher in `fuzzyfind.algo` takes the same arguments and returns a
`MatchResult` with `start`, `end`, `score` and `positions`:

```python
from fuzzyfind.algo import fuzzy_match_v2

result = fuzzy_match_v2(
    False,          # case_sensitive
    False,          # normalize
    True,           # forward
    "foo bar baz",  # text
    "fbb",          # pattern, already lower case when case_sensitive is False
    with_pos=True,
    max_cells=None,
)
print(result.start, result.end, result.score)
print(result.positions)   # indices of the matched characters
```

When there is no match, `start` and `end` are `-1` and the score is `0`.
`positions` is `None` unless it was asked for with `with_pos=True` and the
matcher computes it (the two fuzzy matchers do); the indices are not
guaranteed to be in ascending order.

The matchers:

- `fuzzy_match_v2`: fills a score matrix and finds the best-scoring
  alignment. When `max_cells` is given and the text length times the pattern
  length exceeds it, it uses `fuzzy_match_v1` instead.
- `fuzzy_match_v1`: finds the first fuzzy occurrence, then shortens it by
  scanning backwards. Fast, but may miss the best-scoring occurrence.
- `exact_match_naive`: finds the substring occurrence with the best bonus at
  its first character.
- `exact_match_boundary`: like the above, but only accepts occurrences that
  start and end at word boundaries.
- `prefix_match`, `suffix_match` and `equal_match`: anchored matches that
  ignore leading and trailing white space unless the pattern itself starts or
  ends with it.

`forward=False` makes the scanning matchers prefer the last occurrence.

Scores reward matches at the start of the text, after white space, after
delimiters, at camelCase humps and letter-to-digit transitions, and in
consecutive runs; gaps reduce them. The bonuses come from a scoring scheme in
`fuzzyfind.charclass`: `init_scheme("default")`, `init_scheme("path")` or
`init_scheme("history")` selects one, and any other name raises `ValueError`.
`current_scheme()`, `char_class_of()`, `bonus_for()`, `bonus_at()` and
`calculate_score()` expose the same scoring for other uses.

With `normalize=True`, accented and variant Latin letters in the text are
folded to their base letters. The pattern must already be folded; use
`fuzzyfind.normalize.normalize_runes(pattern)` (or `normalize_rune` for one
character).

## ANSI colours

```python
from fuzzyfind.ansi import extract_color

text, offsets, state = extract_color("hello \x1b[34;45;1mworld", None, None)
# text == "hello world"
# offsets[0].start == 6, offsets[0].end == 11
# offsets[0].color.fg == 4, offsets[0].color.bg == 5, offsets[0].color.attr == Attr.BOLD
```

`offsets` is `None` when the text carries no colour. Pass the returned
`state` back in with the next line to carry colours from one line to the
next. The third argument may be a callable that receives each plain segment
and the state in effect; if it returns `False`, extraction stops and
`("", None, None)` is returned.

The module also provides `next_ansi_escape_sequence`, which returns the
`(start, end)` of the first escape sequence in a string or `None`,
`interpret_code`, which applies one sequence to an `AnsiState`,
`parse_ansi_code`, and `AnsiState.to_string()`, which renders a state back
into an escape sequence (OSC 8 hyperlinks included).

## Items, chunks and cache

- `fuzzyfind.item.Item` holds one input line: `text`, `index`, `orig_text`
  and `colors`. `Item.as_string(strip_ansi)` returns the original line,
  optionally without escape sequences.
- `fuzzyfind.chunklist.ChunkList(cache, builder)` collects items in chunks of
  100. `builder` turns raw input into an `Item`, or returns `None` to skip it.
  `push(data)` adds one, `clear()` drops all, and `snapshot(tail)` returns
  `(chunks, count, changed)`: copies of the chunks that later pushes will not
  change, their item count, and whether a positive `tail` discarded older
  items. `count_items(chunks)` counts the items in a list of chunks.
- `fuzzyfind.cache.ChunkCache` stores results for full chunks under the query
  string (`add`, `lookup`), finds results cached for the longest prefix or
  suffix of a query (`search`), and forgets chunks (`retire`, `clear`).
  Lists longer than a fifth of a chunk are not cached.

## History

```python
from fuzzyfind.history import History

history = History("queries.txt", 1000)
history.append("foo")     # written to the file at once
history.previous()        # "foo"
history.next()
```

`override(text)` changes the entry under the cursor in memory only. `History`
raises `HistoryError` when the file cannot be read or created.

## Other helpers

- `fuzzyfind.tempfiles.write_temporary_file(data, print_sep)` writes the lines
  joined and terminated by `print_sep` to a new temporary file and returns its
  path, or `None` if it could not be created. `remove_files(paths)` deletes
  files, ignoring errors.
- `fuzzyfind.constants` holds the tuning constants, the `EventType` and
  `ExitCode` enumerations.

## What this package does not do

It is a library of parts only. There is no command-line program and no
interactive screen; it does not read input from standard input, files or
commands; it does not parse the extended query syntax; and it does not run
searches across chunks in parallel or merge and sort their results. Those are
left to the program that uses these parts.