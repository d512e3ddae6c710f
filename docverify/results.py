"""Tagged success/error result returned by every public service method."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorCode(StrEnum):
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
    OCR_FAILED = "OCR_FAILED"
    ANALYSIS_FAILED = "ANALYSIS_FAILED"
    NO_DOCUMENTS = "NO_DOCUMENTS"
    FRAUD_SCORE_NOT_FOUND = "FRAUD_SCORE_NOT_FOUND"
    VALIDATION_NOT_FOUND = "VALIDATION_NOT_FOUND"
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    REVIEW_ALREADY_RECORDED = "REVIEW_ALREADY_RECORDED"
    INVALID_DECISION = "INVALID_DECISION"
    BADGE_EXISTS = "BADGE_EXISTS"
    BADGE_NOT_FOUND = "BADGE_NOT_FOUND"
    BADGE_ALREADY_REVOKED = "BADGE_ALREADY_REVOKED"

    @property
    def retryable(self) -> bool:
        return self is ErrorCode.OCR_FAILED


@dataclass(frozen=True)
class ServiceError:
    code: ErrorCode
    message: str


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    """Either ``data`` (success) or ``error`` (expected failure), never both."""

    data: T | None = None
    error: ServiceError | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the payload or raise if this is an error result."""
        if self.error is not None:
            raise RuntimeError(f"{self.error.code}: {self.error.message}")
        return self.data  # type: ignore[return-value]


def ok(data: T) -> ServiceResult[T]:
    return ServiceResult(data=data)


def err(code: ErrorCode, message: str) -> ServiceResult[T]:
    return ServiceResult(error=ServiceError(code=code, message=message))
