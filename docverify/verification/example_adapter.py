from docverify.verification.base import (
    BaseExternalVerifier,
    IdVerificationRequest,
    IdVerificationResponse,
)


class ExampleVerifier(BaseExternalVerifier):
    """Confirms every lookup; for local development and tests."""

    def verify_id_number(self, request: IdVerificationRequest) -> IdVerificationResponse:
        return IdVerificationResponse(
            verified=True,
            confidence=0.99,
            details=f"{request.id_type} {request.id_number} found in example registry",
            matched_fields=("id_number", "full_name"),
        )
