"""Errors raised by the patcher core.

Both are programmer errors: a patcher or editor was driven in a way the
architecture rules out. Neither is meant to be caught and recovered from.
"""

from __future__ import annotations


class PatcherError(Exception):
    """Patcher contract violation with location info."""

    def __init__(self, msg: str, lineno: int, col: int):
        self.msg: str = msg
        self.lineno: int = lineno
        self.col: int = col
        super().__init__(msg)

    def __str__(self) -> str:
        return f"{self.lineno}:{self.col}: {self.msg}"


class EditorError(Exception):
    """Edit that conflicts with an already rewritten range."""
