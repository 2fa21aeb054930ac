"""Error taxonomy shared by the store, the AI gateway and the workspace.

Each error carries the HTTP status the API answers with.
"""
from __future__ import annotations
from typing import Optional


class InspirationError(Exception):
    status_code = 500


class ValidationError(InspirationError, ValueError):
    """Caller supplied invalid input (empty note, unknown action...)."""
    status_code = 400


class StorageError(InspirationError):
    """The database rejected a read or write."""
    status_code = 500


class UpstreamError(InspirationError):
    """The AI backend failed or answered with a non-success status."""
    status_code = 502

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self) -> str:
        if self.status is None:
            return f"AI upstream error: {self.message}"
        return f"AI upstream error ({self.status}): {self.message}"


class ParseError(InspirationError):
    """The AI call succeeded but its text is not the JSON we asked for."""
    status_code = 502


class WorkspaceBusyError(InspirationError):
    status_code = 409

    def __init__(self, message: str = "An AI action is already running on this document"):
        super().__init__(message)
