"""Log recording, search, streaming and export backed by MongoDB."""

__version__ = "0.1.0"