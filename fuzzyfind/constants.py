"""Tuning constants, event kinds and exit codes."""

from __future__ import annotations

from enum import IntEnum

# Core (seconds)
COORDINATOR_DELAY_MAX = 0.100
COORDINATOR_DELAY_STEP = 0.010

# Reader
READER_BUFFER_SIZE = 64 * 1024
READER_SLAB_SIZE = 128 * 1024
READER_POLL_INTERVAL_MIN = 0.010
READER_POLL_INTERVAL_STEP = 0.005
READER_POLL_INTERVAL_MAX = 0.050

# Terminal
INITIAL_DELAY = 0.020
INITIAL_DELAY_TAC = 0.100
SPINNER_DURATION = 0.100
PREVIEW_CANCEL_WAIT = 0.500
PREVIEW_CHUNK_DELAY = 0.100
PREVIEW_DELAYED = 0.500
MAX_PATTERN_LENGTH = 300
MAX_MULTI = 2**31 - 1

# Matcher
NUM_PARTITIONS_MULTIPLIER = 8
MAX_PARTITIONS = 32
PROGRESS_MIN_DURATION = 0.200

# Capacity of each chunk
CHUNK_SIZE = 100

# Sizes of the scratch areas used by the scoring matrix
SLAB16_SIZE = 100 * 1024
SLAB32_SIZE = 2048

# Results of low selectivity queries are not cached
QUERY_CACHE_MAX = CHUNK_SIZE // 5

# Mergers with large lists are not cached
MERGER_CACHE_MAX = 100000

# History
DEFAULT_HISTORY_MAX = 1000

# Jump labels
DEFAULT_JUMP_LABELS = (
    "asdfghjklqwertyuiopzxcvbnm1234567890ASDFGHJKLQWERTYUIOPZXCVBNM"
    "`~;:,<.>/?'\"!@#$%^&*()[{]}-_=+"
)


class EventType(IntEnum):
    """Kinds of events passed between reader, matcher and terminal."""

    READ_NEW = 0
    READ_FIN = 1
    SEARCH_NEW = 2
    SEARCH_PROGRESS = 3
    SEARCH_FIN = 4
    HEADER = 5
    READY = 6
    QUIT = 7


class ExitCode(IntEnum):
    """Process exit statuses."""

    OK = 0
    NO_MATCH = 1
    ERROR = 2
    BECOME = 126
    INTERRUPT = 130