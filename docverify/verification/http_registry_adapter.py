from typing import Any

import httpx

from docverify.verification.base import (
    BaseExternalVerifier,
    IdVerificationRequest,
    IdVerificationResponse,
)
from docverify.verification.exceptions import ExternalVerificationError


class HttpRegistryVerificationAdapter(BaseExternalVerifier):
    """Posts ID lookups to a JSON registry endpoint."""

    def __init__(
        self,
        *,
        url: str,
        api_key: str,
        timeout_seconds: int,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not url:
            raise ValueError("external_verification_url is required for the http_registry provider")
        self._client = httpx.Client(
            base_url=url,
            timeout=timeout_seconds,
            headers={"Authorization": f"Bearer {api_key}"} if api_key else {},
            transport=transport,
        )

    def verify_id_number(self, request: IdVerificationRequest) -> IdVerificationResponse:
        payload = {
            "id_type": request.id_type,
            "id_number": request.id_number,
            "full_name": request.full_name,
            "date_of_birth": request.date_of_birth.isoformat() if request.date_of_birth else None,
            "country": request.country,
        }
        try:
            response = self._client.post("/verify", json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException as exc:
            raise ExternalVerificationError(f"Registry request timed out: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            raise ExternalVerificationError(
                f"Registry returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.RequestError as exc:
            raise ExternalVerificationError(f"Registry request failed: {exc}") from exc
        except ValueError as exc:
            raise ExternalVerificationError(f"Registry returned invalid JSON: {exc}") from exc
        return _to_response(body)

    def close(self) -> None:
        self._client.close()


def _to_response(body: Any) -> IdVerificationResponse:
    if not isinstance(body, dict) or not isinstance(body.get("verified"), bool):
        raise ExternalVerificationError("Registry response is missing 'verified'")
    confidence = body.get("confidence", 0.0)
    if not isinstance(confidence, (int, float)) or isinstance(confidence, bool):
        raise ExternalVerificationError("Registry response has a non-numeric 'confidence'")
    return IdVerificationResponse(
        verified=body["verified"],
        confidence=max(0.0, min(1.0, float(confidence))),
        details=str(body.get("details", "")),
        matched_fields=tuple(str(f) for f in body.get("matched_fields") or ()),
        mismatched_fields=tuple(str(f) for f in body.get("mismatched_fields") or ()),
    )
