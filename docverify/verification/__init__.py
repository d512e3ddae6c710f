from docverify.verification.base import (
    BaseExternalVerifier,
    IdVerificationRequest,
    IdVerificationResponse,
)
from docverify.verification.exceptions import ExternalVerificationError
from docverify.verification.factory import ExternalVerifierFactory

__all__ = [
    "BaseExternalVerifier",
    "ExternalVerificationError",
    "ExternalVerifierFactory",
    "IdVerificationRequest",
    "IdVerificationResponse",
]
