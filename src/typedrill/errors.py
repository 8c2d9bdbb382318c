"""Typedrill errors."""

from __future__ import annotations


class TypedrillError(Exception):
    """Base exception for typedrill."""


class DataFetchError(TypedrillError):
    """Word list could not be fetched or had an unexpected shape."""

    def __init__(self, message: str, *, language: str, level: str | None = None):
        """Initialize error with the lookup key that failed."""
        super().__init__(message)
        self.message = message
        self.language = language
        self.level = level


class EmptySourceError(DataFetchError):
    """Word list resolved but contains nothing to type."""


class SessionStateError(TypedrillError):
    """Transition not allowed from the current session state."""

    def __init__(self, operation: str, state: str, reason: str | None = None):
        """Initialize error with the rejected operation and current state."""
        super().__init__(reason or f"cannot {operation} while {state}")
        self.operation = operation
        self.state = state
