"""Byte compression used for storing large log messages."""

from __future__ import annotations

import gzip
from dataclasses import dataclass
from typing import Protocol


class Compressor(Protocol):
    """Something that can compress bytes and restore them."""

    def compress(self, data: bytes) -> bytes:
        """Return the compressed form of ``data``."""
        ...

    def decompress(self, data: bytes) -> bytes:
        """Return the original bytes from compressed ``data``."""
        ...


@dataclass(frozen=True)
class GzipCompressor:
    """Gzip compressor, using the best compression level by default."""

    level: int = 9

    def __post_init__(self) -> None:
        if not -1 <= self.level <= 9:
            raise ValueError(f"invalid gzip compression level: {self.level}")

    def compress(self, data: bytes) -> bytes:
        """Compress ``data`` into a gzip stream."""
        return gzip.compress(bytes(data), compresslevel=self.level, mtime=0)

    def decompress(self, data: bytes) -> bytes:
        """Decompress a gzip stream; raises OSError or EOFError on bad input."""
        return gzip.decompress(bytes(data))