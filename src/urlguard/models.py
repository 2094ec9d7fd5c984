"""
Data models for signed URL generation and validation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FailureReason(str, Enum):
    """Closed set of causes a signed URL can be rejected for."""

    MISSING_SIGNATURE = "missing signature"
    MALFORMED_TIMESTAMP = "malformed timestamp"
    EXPIRED = "expired"
    SIGNATURE_MISMATCH = "signature mismatch"


# Text returned to the client for each failure
FAILURE_MESSAGES = {
    FailureReason.MISSING_SIGNATURE: "Bad URL hash",
    FailureReason.MALFORMED_TIMESTAMP: "Bad URL timestamp",
    FailureReason.EXPIRED: "URL signature expired",
    FailureReason.SIGNATURE_MISMATCH: "URL signature mismatch",
}


@dataclass(frozen=True)
class ValidationError:
    """
    Why a signed URL failed validation.

    Attributes:
        reason: Machine-readable failure cause
        message: Human-readable text, safe to return to the client
    """
    reason: FailureReason
    message: str

    @classmethod
    def for_reason(cls, reason: FailureReason) -> ValidationError:
        return cls(reason=reason, message=FAILURE_MESSAGES[reason])

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of validating a signed URL.

    Attributes:
        valid: Whether the URL carried a current, matching signature
        error: Failure details when not valid, otherwise None
    """
    valid: bool
    error: ValidationError | None = None

    @classmethod
    def success(cls) -> ValidationResult:
        return cls(valid=True)

    @classmethod
    def failure(cls, reason: FailureReason) -> ValidationResult:
        return cls(valid=False, error=ValidationError.for_reason(reason))

    @property
    def is_success(self) -> bool:
        return self.valid

    @property
    def is_failure(self) -> bool:
        return not self.valid

    @property
    def reason(self) -> FailureReason | None:
        return self.error.reason if self.error is not None else None


@dataclass(frozen=True)
class SignedUrlRequest:
    """
    The fields a signature covers.

    Attributes:
        path: Percent-encoded absolute path of the target URI, without query string
        expiration: Expiration instant in Unix seconds
        client_address: Textual client IP address
    """
    path: str
    expiration: int
    client_address: str

    def message(self) -> str:
        """Canonical signing message: ``path:expiration:address``."""
        return f"{self.path}:{self.expiration}:{self.client_address}"
