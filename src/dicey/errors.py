"""Errors raised while parsing or rolling dice notation."""
from __future__ import annotations


class RollError(ValueError):
    """Base class for every error a roll can produce."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class RollSyntaxError(RollError):
    """Malformed notation. ``position`` is a 0-based offset into the trimmed input."""

    def __init__(self, position: int, message: str) -> None:
        super().__init__(message)
        self.position = position

    def __str__(self) -> str:
        return f"Syntax error at position {self.position}: {self.message}"


class RollSemanticError(RollError):
    """Well-formed notation that cannot be rolled (d0, division by zero, runaway rerolls)."""

    def __str__(self) -> str:
        return f"Error: {self.message}"
