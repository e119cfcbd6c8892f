"""Request handling for writing, searching, exporting and streaming logs."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Iterator

from .logger import Logger
from .model import Log, SearchResult
from .service import Business, InvalidLevelError, InvalidTimeRangeError, MlogError

_STREAM_PAGE_SIZE = 100
_STREAM_PAUSE = 0.01


@dataclass
class NewLog:
    """Request to register a log."""

    message: str = ""
    level: str = ""
    timestamp: int = 0
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass
class SearchQuery:
    """Request to search, export or stream logs; times are Unix seconds."""

    start_time: int = 0
    end_time: int = 0
    level: str = ""
    page_size: int = 0
    page: int = 0
    as_file: bool = False


@dataclass
class LogMessage:
    """A log as sent to clients."""

    id: str
    message: str
    level: str
    timestamp: int
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass
class LogResponse:
    """Reply to a registration."""

    id: str
    status: str


@dataclass
class Logs:
    """A page of logs."""

    logs: list[LogMessage] = field(default_factory=list)
    total: int = 0
    has_more: bool = False


@dataclass
class FileResponse:
    """Reply to an export."""

    file_url: str
    file_size: int
    compression: str


@dataclass
class LogInput:
    """A registration request in domain terms."""

    message: str
    level: str
    timestamp: datetime
    metadata: dict[str, str]


@dataclass
class SearchInput:
    """A search request in domain terms."""

    start_time: datetime
    end_time: datetime
    level: str
    page_size: int
    page: int
    as_file: bool


class StatusCode(Enum):
    """RPC status codes used in replies."""

    OK = 0
    INVALID_ARGUMENT = 3
    INTERNAL = 13


class RpcError(Exception):
    """An error reply carrying a status code."""

    def __init__(self, code: StatusCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return self.message


def _from_unix(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, timezone.utc)


def log_input_from_request(request: NewLog) -> LogInput:
    """Convert a registration request."""
    return LogInput(
        message=request.message,
        level=request.level,
        timestamp=_from_unix(request.timestamp),
        metadata=dict(request.metadata),
    )


def search_input_from_request(request: SearchQuery) -> SearchInput:
    """Convert a search request; both times are always taken as given."""
    return SearchInput(
        start_time=_from_unix(request.start_time),
        end_time=_from_unix(request.end_time),
        level=request.level,
        page_size=int(request.page_size),
        page=int(request.page),
        as_file=request.as_file,
    )


def to_log_message(log: Log) -> LogMessage:
    """Convert a domain log for sending."""
    return LogMessage(
        id=log.id,
        message=log.message,
        level=log.level.value,
        timestamp=math.floor(log.timestamp.timestamp()),
        metadata=dict(log.metadata),
    )


def to_log_response(log: Log) -> LogResponse:
    """Build the reply to a successful registration."""
    return LogResponse(id=log.id, status="success")


def to_logs(result: SearchResult) -> Logs:
    """Convert a page of search results."""
    return Logs(
        logs=[to_log_message(log) for log in result.logs],
        total=result.total,
        has_more=result.has_more,
    )


def to_file_response(file_url: str, file_size: int) -> FileResponse:
    """Build the reply to an export."""
    return FileResponse(file_url=file_url, file_size=file_size, compression="gzip")


class App:
    """Handles log requests on top of the log service."""

    def __init__(self, logger: Logger, business: Business) -> None:
        self.logger = logger
        self.business = business

    def register(self, request: NewLog) -> LogResponse:
        """Register a new log."""
        log_input = log_input_from_request(request)
        self.logger.info("log received", message=log_input.message, level=log_input.level)
        try:
            log = self.business.register(log_input.message, log_input.level, log_input.metadata)
        except InvalidLevelError as err:
            raise RpcError(StatusCode.INVALID_ARGUMENT, str(err)) from err
        except MlogError as err:
            raise RpcError(StatusCode.INTERNAL, "fail to register log") from err
        return to_log_response(log)

    def search(self, request: SearchQuery) -> Logs:
        """Return one page of matching logs."""
        search = search_input_from_request(request)
        self.logger.info(
            "search request received",
            startTime=search.start_time,
            endTime=search.end_time,
            level=search.level,
        )
        result = self._query(search, search.page, search.page_size, "error searching logs")
        return to_logs(result)

    def export_to_file(self, request: SearchQuery) -> FileResponse:
        """Export matching logs to a file."""
        search = search_input_from_request(request)
        self.logger.info(
            "export request received",
            startTime=search.start_time,
            endTime=search.end_time,
            level=search.level,
        )
        try:
            file_url, file_size = self.business.export_to_file(
                search.start_time, search.end_time, search.level
            )
        except (InvalidLevelError, InvalidTimeRangeError) as err:
            self.logger.error("error exporting logs to file", error=err)
            raise RpcError(StatusCode.INVALID_ARGUMENT, str(err)) from err
        except MlogError as err:
            self.logger.error("error exporting logs to file", error=err)
            raise RpcError(StatusCode.INTERNAL, "failed to export logs to file") from err
        return to_file_response(file_url, file_size)

    def stream_file(self, request: SearchQuery) -> Iterator[Logs]:
        """Yield every page of matching logs, starting from the first."""
        search = search_input_from_request(request)
        self.logger.info(
            "stream request received",
            startTime=search.start_time,
            endTime=search.end_time,
            level=search.level,
        )
        page_size = _STREAM_PAGE_SIZE
        if 0 < search.page_size < page_size:
            page_size = search.page_size

        page = 0
        while True:
            result = self._query(search, page, page_size, "error streaming logs")
            yield to_logs(result)
            if not result.has_more:
                return
            page = result.next_page
            time.sleep(_STREAM_PAUSE)

    def _query(self, search: SearchInput, page: int, page_size: int, failure: str) -> SearchResult:
        try:
            return self.business.query(
                search.start_time, search.end_time, search.level, page, page_size
            )
        except (InvalidLevelError, InvalidTimeRangeError) as err:
            self.logger.error(failure, error=err, page=page)
            raise RpcError(StatusCode.INVALID_ARGUMENT, str(err)) from err
        except MlogError as err:
            self.logger.error(failure, error=err, page=page)
            raise RpcError(StatusCode.INTERNAL, "failed on search logs") from err