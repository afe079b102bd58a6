"""Domain-specific errors for the tunequeue core."""

from __future__ import annotations


class InvalidInputError(ValueError):
    """Raised when malformed data is supplied to core pipeline operations."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


__all__ = ["InvalidInputError"]
