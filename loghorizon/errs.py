"""Application error type carrying a category."""

from __future__ import annotations

from enum import Enum


class ErrorType(str, Enum):
    """Category of an application error."""

    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    INTERNAL = "internal"
    UNAUTHORIZED = "unauthorized"


class AppError(Exception):
    """An error with a category, a message and an optional underlying cause."""

    def __init__(
        self, type: ErrorType, message: str, err: BaseException | None = None
    ) -> None:
        super().__init__(message)
        self.type = type
        self.message = message
        self.err = err
        if err is not None:
            self.__cause__ = err

    def __str__(self) -> str:
        if self.err is not None:
            return f"{self.message}: {self.err}"
        return self.message