from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class IdVerificationRequest:
    id_type: str
    id_number: str
    full_name: str | None
    country: str
    date_of_birth: date | None = None


@dataclass(frozen=True)
class IdVerificationResponse:
    verified: bool
    confidence: float
    details: str
    matched_fields: tuple[str, ...] = ()
    mismatched_fields: tuple[str, ...] = ()


class BaseExternalVerifier(ABC):
    """Contract for identity registries that confirm ID numbers."""

    @abstractmethod
    def verify_id_number(self, request: IdVerificationRequest) -> IdVerificationResponse:
        """Look up *request* in the registry.

        Raises:
            ExternalVerificationError: if the registry is unreachable or replies
                with something unusable.
        """
