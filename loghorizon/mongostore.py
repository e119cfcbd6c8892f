"""MongoDB-backed log store with gzip compression of long messages."""

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.errors import PyMongoError

from .compress import Compressor, GzipCompressor
from .logger import Logger
from .model import Level, Log, SearchCriteria, SearchResult

_COMPRESS_THRESHOLD = 100
_DEFAULT_PAGE_SIZE = 50


@dataclass(frozen=True)
class StoreConfig:
    """Connection and export settings for a MongoDB store."""

    uri: str = "mongodb://localhost:27017"
    database_name: str = "loghorizon"
    collection_name: str = "logs"
    compression_level: int = 9
    export_path: str = "./exports"


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _rfc3339(moment: datetime) -> str:
    text = _as_utc(moment).replace(microsecond=0).isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


class MongoStore:
    """Stores, searches, counts and exports logs in a MongoDB collection."""

    def __init__(
        self,
        logger: Logger,
        collection: Any,
        export_path: str,
        compressor: Compressor | None = None,
    ) -> None:
        self.logger = logger
        self.collection = collection
        self.export_path = export_path
        self.compressor: Compressor = compressor if compressor is not None else GzipCompressor()
        self.compression = True

    @classmethod
    def connect(cls, logger: Logger, config: StoreConfig) -> MongoStore:
        """Connect to MongoDB, verify the server and ensure the search index."""
        try:
            client: MongoClient = MongoClient(config.uri)
        except PyMongoError as err:
            raise ConnectionError(f"connecting to MongoDB: {err}") from err
        try:
            client.admin.command("ping")
        except PyMongoError as err:
            client.close()
            raise ConnectionError(f"pinging MongoDB: {err}") from err

        collection = client[config.database_name][config.collection_name]
        try:
            collection.create_index(
                [("timestamp", ASCENDING), ("level", ASCENDING)], background=True
            )
        except PyMongoError as err:
            logger.error("failed to create index", error=err)

        return cls(
            logger,
            collection,
            config.export_path,
            GzipCompressor(config.compression_level),
        )

    def write(self, log: Log) -> None:
        """Insert ``log``, compressing messages longer than 100 bytes."""
        message: str | bytes = log.message
        raw = log.message.encode("utf-8")
        if self.compression and len(raw) > _COMPRESS_THRESHOLD:
            try:
                compressed = self.compressor.compress(raw)
            except Exception as err:
                self.logger.error("failed to compress log message", error=err)
            else:
                message = compressed
                log.compressed = True
                log.compressed_at = datetime.now(timezone.utc)

        document = {
            "id": log.id,
            "message": message,
            "timestamp": log.timestamp,
            "level": Level(log.level).value,
            "metadata": dict(log.metadata),
            "compressed": log.compressed,
            "compressed_at": log.compressed_at,
        }
        try:
            self.collection.insert_one(document)
        except Exception as err:
            self.logger.error("failed to insert log in MongoDB", error=err)
            raise

    def search(self, criteria: SearchCriteria) -> SearchResult:
        """Return one page of matching logs, newest first."""
        page_size = criteria.page_size if criteria.page_size > 0 else _DEFAULT_PAGE_SIZE
        cursor = self.collection.find(
            self.build_filter(criteria),
            sort=[("timestamp", DESCENDING)],
            skip=criteria.page * page_size,
            limit=page_size,
        )
        logs = [log for log in map(self._decode, cursor) if log is not None]

        try:
            total = self.count(criteria)
        except Exception as err:
            self.logger.error("failed to count logs", error=err)
            total = 0

        has_more = (criteria.page + 1) * page_size < total
        return SearchResult(
            logs=logs,
            total=total,
            has_more=has_more,
            next_page=criteria.page + 1 if has_more else criteria.page,
        )

    def export_to_file(self, criteria: SearchCriteria) -> tuple[str, int]:
        """Write all matching logs to a text file; return its name and byte size."""
        cursor = self.collection.find(
            self.build_filter(criteria), sort=[("timestamp", DESCENDING)]
        )
        filename = f"logs_export_{int(time.time())}.txt"
        path = os.path.join(self.export_path, filename)

        size = 0
        with open(path, "w", encoding="utf-8", newline="") as file:
            for log in map(self._decode, cursor):
                if log is None:
                    continue
                line = f"[{_rfc3339(log.timestamp)}] [{log.level.value}] {log.message}\n"
                try:
                    file.write(line)
                except (OSError, UnicodeError) as err:
                    self.logger.error("error writing to export file", error=err)
                    continue
                size += len(line.encode("utf-8"))
        return filename, size

    def count(self, criteria: SearchCriteria) -> int:
        """Return how many logs match ``criteria``."""
        return int(self.collection.count_documents(self.build_filter(criteria)))

    def build_filter(self, criteria: SearchCriteria) -> dict[str, Any]:
        """Build the MongoDB query document for ``criteria``."""
        query: dict[str, Any] = {}
        time_filter: dict[str, datetime] = {}
        if criteria.time_range.start_time is not None:
            time_filter["$gte"] = criteria.time_range.start_time
        if criteria.time_range.end_time is not None:
            time_filter["$lte"] = criteria.time_range.end_time
        if time_filter:
            query["timestamp"] = time_filter
        if criteria.level is not None:
            query["level"] = Level(criteria.level).value
        return query

    def _decode(self, document: Mapping[str, Any]) -> Log | None:
        try:
            message = document["message"]
            compressed = bool(document.get("compressed", False))
            if isinstance(message, (bytes, bytearray, memoryview)):
                raw = bytes(message)
                if compressed:
                    try:
                        raw = self.compressor.decompress(raw)
                    except Exception:
                        pass
                message = raw.decode("utf-8", errors="replace")
            compressed_at = document.get("compressed_at")
            return Log(
                id=str(document["id"]),
                message=str(message),
                timestamp=_as_utc(document["timestamp"]),
                level=Level(document["level"]),
                metadata=dict(document.get("metadata") or {}),
                compressed=compressed,
                compressed_at=_as_utc(compressed_at) if compressed_at else None,
            )
        except (KeyError, ValueError, TypeError, AttributeError):
            return None