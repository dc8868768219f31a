"""
Operation outcomes — What one request chain produces.

Every call through the runner ends in exactly one of these:
- Success: the payload the UI should show (text or AnalysisResult)
- Failure: a classified reason, used for retry decisions and logging

Failure details never reach the end user. Coordinators translate any
Failure into one fixed, action-specific message.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union


class FailureReason(str, Enum):
    """Why a request chain failed."""

    TRANSPORT = "transport"                    # connection error, timeout
    HTTP_STATUS = "http_status"                # remote answered with non-2xx
    MALFORMED_RESPONSE = "malformed_response"  # expected field absent
    SCHEMA_MISMATCH = "schema_mismatch"        # structured payload has the wrong shape

    @property
    def retryable(self) -> bool:
        # Only the remote side can change its mind; a bad body stays bad
        return self in (FailureReason.TRANSPORT, FailureReason.HTTP_STATUS)


@dataclass(frozen=True)
class Success:
    """A usable payload."""

    payload: Any


@dataclass(frozen=True)
class Failure:
    """A classified failure."""

    reason: FailureReason

    status_code: Optional[int] = None
    """HTTP status, only set for HTTP_STATUS"""

    detail: str = ""
    """Internal diagnostic text for logs"""

    @property
    def retryable(self) -> bool:
        return self.reason.retryable

    def describe(self) -> str:
        if self.reason is FailureReason.HTTP_STATUS:
            return f"{self.reason.value} {self.status_code}"
        if self.detail:
            return f"{self.reason.value}: {self.detail}"
        return self.reason.value


OperationOutcome = Union[Success, Failure]
