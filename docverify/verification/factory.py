from docverify.config.settings import Settings
from docverify.verification.base import BaseExternalVerifier
from docverify.verification.example_adapter import ExampleVerifier
from docverify.verification.http_registry_adapter import HttpRegistryVerificationAdapter


class ExternalVerifierFactory:
    """Creates the configured registry verifier, or None when the feature is off."""

    PROVIDERS = ("http_registry", "example")

    @classmethod
    def create(cls, settings: Settings) -> BaseExternalVerifier | None:
        if not settings.external_verification_enabled:
            return None
        name = settings.external_verification_provider.lower()
        if name == "http_registry":
            return HttpRegistryVerificationAdapter(
                url=settings.external_verification_url,
                api_key=settings.external_verification_api_key,
                timeout_seconds=settings.external_verification_timeout_seconds,
            )
        if name == "example":
            return ExampleVerifier()
        raise ValueError(
            f"Unknown external verification provider '{name}'. Choose from: {list(cls.PROVIDERS)}"
        )
