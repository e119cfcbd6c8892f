"""Business rules for registering, querying, counting and exporting logs."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Mapping, Protocol

from .logger import Logger
from .model import Level, Log, SearchCriteria, SearchResult, Store, TimeRange, is_valid_level, new_ulid


class CommitRollbacker(Protocol):
    """A unit of work that can be committed or rolled back."""

    def commit(self) -> None:
        """Make the work permanent."""
        ...

    def rollback(self) -> None:
        """Discard the work."""
        ...


class MlogError(Exception):
    """Base error of the log service."""


class RegisterLogError(MlogError):
    """The store failed to save a log."""

    reason = "failed on save log in writer"

    def __init__(self, operation: str = "register") -> None:
        super().__init__(f"{operation}: {self.reason}")


class InvalidLevelError(MlogError):
    """A level was given that is not recognised."""

    reason = "unrecognized level"

    def __init__(self, operation: str) -> None:
        super().__init__(f"{operation}: {self.reason}")


class InvalidTimeRangeError(MlogError):
    """The end of a time range lies before its start."""

    reason = "invalid time range"

    def __init__(self, operation: str) -> None:
        super().__init__(f"{operation}: {self.reason}")


class Business:
    """Validates requests and delegates to a log store."""

    def __init__(self, logger: Logger, store: Store) -> None:
        self.logger = logger
        self.store = store

    def new_with_tx(self, tx: CommitRollbacker) -> Business:
        """Return a service bound to ``tx``; the store is not transactional."""
        return self

    def register(
        self,
        message: str,
        level: Level | str,
        metadata: Mapping[str, str] | None = None,
    ) -> Log:
        """Create and store a new log record stamped with the current time."""
        if not is_valid_level(level):
            error = InvalidLevelError("register")
            self.logger.error(f"unrecognized level: {level}", error=error)
            raise error

        log = Log(
            id=new_ulid(),
            message=message,
            timestamp=datetime.now(timezone.utc),
            level=Level(level),
            metadata=dict(metadata or {}),
        )
        try:
            self.store.write(log)
        except Exception as err:
            self.logger.error("failed to register log", error=err)
            raise RegisterLogError("register") from err
        return log

    def query(
        self,
        start_time: datetime | None,
        end_time: datetime | None,
        level: Level | str | None = None,
        page: int = 0,
        page_size: int = 0,
    ) -> SearchResult:
        """Return one page of logs in the time range, optionally of one level."""
        criteria = self._criteria("query", start_time, end_time, level, page, page_size)
        try:
            return self.store.search(criteria)
        except Exception as err:
            self.logger.error("failed to search logs", error=err)
            raise MlogError(f"query: {err}") from err

    def export_to_file(
        self,
        start_time: datetime | None,
        end_time: datetime | None,
        level: Level | str | None = None,
    ) -> tuple[str, int]:
        """Export matching logs; return the file name and its size in bytes."""
        criteria = self._criteria("export", start_time, end_time, level)
        try:
            return self.store.export_to_file(criteria)
        except Exception as err:
            self.logger.error("failed to export logs to file", error=err)
            raise MlogError(f"export: {err}") from err

    def count(
        self,
        start_time: datetime | None,
        end_time: datetime | None,
        level: Level | str | None = None,
    ) -> int:
        """Return how many logs match the time range and level."""
        criteria = self._criteria("count", start_time, end_time, level)
        try:
            return self.store.count(criteria)
        except Exception as err:
            self.logger.error("failed to count logs", error=err)
            raise MlogError(f"count: {err}") from err

    def _criteria(
        self,
        operation: str,
        start_time: datetime | None,
        end_time: datetime | None,
        level: Level | str | None,
        page: int = 0,
        page_size: int = 0,
    ) -> SearchCriteria:
        if start_time is not None and end_time is not None and end_time < start_time:
            error = InvalidTimeRangeError(operation)
            self.logger.error("end time before start time", error=error)
            raise error

        if level is None or level == "":
            parsed = None
        elif is_valid_level(level):
            parsed = Level(level)
        else:
            error = InvalidLevelError(operation)
            self.logger.error(f"invalid level: {level}", error=error)
            raise error

        return SearchCriteria(
            time_range=TimeRange(start_time, end_time),
            level=parsed,
            page=page,
            page_size=page_size,
        )