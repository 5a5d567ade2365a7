"""
Error kinds for the board core, plus the tagged results returned by the
gateway's ``try_*`` calls.

    ValidationError  — invalid status / missing field, never sent to the network
    RemoteError      — HTTP non-success, carries a user-facing message
    TransportError   — no response obtained (connection, DNS, timeout)
    NotFoundError    — referenced id absent from the working set
    CacheError       — local storage failure, always absorbed
"""
from dataclasses import dataclass
from typing import Any, Optional


class KeepTrackError(Exception):
    """Base class for every error the board core raises."""

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.__class__.__name__


class ValidationError(KeepTrackError):
    """Raised before any network call when a project is not fit to send."""
    pass


class RemoteError(KeepTrackError):
    """The API answered with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TransportError(KeepTrackError):
    """The request never got a response."""
    pass


class NotFoundError(KeepTrackError):
    """A move referenced a project id that is not in the working set."""
    pass


class CacheError(KeepTrackError):
    """Local storage read/write failed."""
    pass


# ── Tagged results ──────────────────────────────────────────────────────────


@dataclass
class Success:
    value: Any
    ok = True


@dataclass
class Failure:
    error: KeepTrackError
    ok = False

    @property
    def message(self) -> str:
        return self.error.message
