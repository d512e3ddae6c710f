from dataclasses import dataclass

from docverify.config.settings import Settings


@dataclass(frozen=True)
class ValidationConfig:
    name_match_threshold: float = 0.85
    auto_approve_threshold: float = 0.9
    expiry_warning_days: int = 30
    required_document_types: tuple[str, ...] = ("national_id", "lease_agreement")
    enable_external_verification: bool = False
    default_country: str = "TZ"

    @classmethod
    def from_settings(cls, settings: Settings) -> "ValidationConfig":
        return cls(
            name_match_threshold=settings.validation_name_match_threshold,
            auto_approve_threshold=settings.validation_auto_approve_threshold,
            expiry_warning_days=settings.validation_expiry_warning_days,
            required_document_types=tuple(settings.validation_required_document_types),
            enable_external_verification=settings.external_verification_enabled,
            default_country=settings.external_verification_default_country,
        )
