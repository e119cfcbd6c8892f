"""Structured logging interface and a simple stream-backed logger."""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from typing import Any, Protocol, TextIO


class Logger(Protocol):
    """Receives informational and error messages with key/value context."""

    def info(self, msg: str, **kwargs: Any) -> None:
        """Record an informational message."""
        ...

    def error(self, msg: str, **kwargs: Any) -> None:
        """Record an error message."""
        ...


@dataclass
class PrintLogger:
    """Writes one timestamped line per message to a text stream."""

    stream: TextIO | None = None

    def _emit(self, prefix: str, msg: str, fields: dict[str, Any]) -> None:
        out = self.stream if self.stream is not None else sys.stderr
        pairs = " ".join(f"{key} {value}" for key, value in fields.items())
        stamp = time.strftime("%Y/%m/%d %H:%M:%S")
        out.write(f"{stamp} {prefix}: {msg} [{pairs}]\n")
        out.flush()

    def info(self, msg: str, **kwargs: Any) -> None:
        """Write an INFO line."""
        self._emit("INFO", msg, kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        """Write an ERROR line."""
        self._emit("ERROR", msg, kwargs)