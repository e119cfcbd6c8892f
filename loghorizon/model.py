"""Log domain model: levels, records, search criteria, ordering and store roles."""

from __future__ import annotations

import os
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Protocol


class Level(str, Enum):
    """Severity of a log record."""

    ERROR = "error"
    WARN = "warn"
    DEBUG = "debug"
    INFO = "info"


def is_valid_level(level: object) -> bool:
    """Return True if ``level`` names one of the known levels."""
    try:
        Level(level)
    except ValueError:
        return False
    return True


_CROCKFORD = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_RANDOM_BITS = 80


class _UlidClock:
    """Produces monotonically increasing ULIDs within this process."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last_ms = -1
        self._last_rand = 0

    def next(self) -> str:
        with self._lock:
            ms = time.time_ns() // 1_000_000
            if ms <= self._last_ms:
                ms = self._last_ms
                rand = self._last_rand + 1
                if rand >= 1 << _RANDOM_BITS:
                    ms += 1
                    rand = int.from_bytes(os.urandom(10), "big")
            else:
                rand = int.from_bytes(os.urandom(10), "big")
            self._last_ms, self._last_rand = ms, rand
        value = (ms << _RANDOM_BITS) | rand
        return "".join(
            _CROCKFORD[(value >> (5 * shift)) & 31] for shift in range(25, -1, -1)
        )


_ULID_CLOCK = _UlidClock()


def new_ulid() -> str:
    """Return a new 26-character, lexicographically sortable ULID."""
    return _ULID_CLOCK.next()


@dataclass
class Log:
    """A stored log record."""

    id: str
    message: str
    timestamp: datetime
    level: Level
    metadata: dict[str, str] = field(default_factory=dict)
    compressed: bool = False
    compressed_at: datetime | None = None


@dataclass(frozen=True)
class TimeRange:
    """An optional time window; a missing bound is unbounded."""

    start_time: datetime | None = None
    end_time: datetime | None = None


@dataclass(frozen=True)
class SearchCriteria:
    """Filter and paging for a log search; a missing level matches any."""

    time_range: TimeRange = field(default_factory=TimeRange)
    level: Level | None = None
    page_size: int = 0
    page: int = 0


@dataclass
class SearchResult:
    """One page of search results."""

    logs: list[Log] = field(default_factory=list)
    total: int = 0
    has_more: bool = False
    next_page: int = 0


class OrderDirection(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


class OrderField(str, Enum):
    """Field to sort logs by."""

    TIMESTAMP = "timestamp"
    LEVEL = "level"


@dataclass
class OrderOptions:
    """How to order logs in a query."""

    field: OrderField = OrderField.TIMESTAMP
    direction: OrderDirection = OrderDirection.DESC


OrderOption = Callable[[OrderOptions], None]


def default_order_options() -> OrderOptions:
    """Newest first, by timestamp."""
    return OrderOptions()


def with_order_field(field: OrderField) -> OrderOption:
    """Option that sets the sort field."""

    def apply(options: OrderOptions) -> None:
        options.field = field

    return apply


def with_order_direction(direction: OrderDirection) -> OrderOption:
    """Option that sets the sort direction."""

    def apply(options: OrderOptions) -> None:
        options.direction = direction

    return apply


def new_order_options(*args: OrderOption) -> OrderOptions:
    """Build order options from the defaults and the given options, in order."""
    options = default_order_options()
    for option in args:
        option(options)
    return options


class Writer(Protocol):
    """Persists log records."""

    def write(self, log: Log) -> None:
        """Store ``log``; raise on failure."""
        ...


class Reader(Protocol):
    """Queries stored log records."""

    def search(self, criteria: SearchCriteria) -> SearchResult:
        """Return one page of logs matching ``criteria``."""
        ...

    def count(self, criteria: SearchCriteria) -> int:
        """Return how many logs match ``criteria``."""
        ...


class Exporter(Protocol):
    """Writes matching logs to a file."""

    def export_to_file(self, criteria: SearchCriteria) -> tuple[str, int]:
        """Export logs; return the file name and the number of bytes written."""
        ...


class Store(Writer, Reader, Exporter, Protocol):
    """A complete log store."""