from dataclasses import dataclass

from docverify.config.settings import Settings


@dataclass(frozen=True)
class ProfileMergeConfig:
    """Confidence thresholds and defaults used when merging extractions."""

    overwrite_confidence: float = 0.7
    full_name_min_confidence: float = 0.7
    id_number_min_confidence: float = 0.8
    default_country: str = "Tanzania"
    default_income_currency: str = "TZS"

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProfileMergeConfig":
        return cls(
            overwrite_confidence=settings.profile_overwrite_confidence,
            full_name_min_confidence=settings.profile_full_name_min_confidence,
            id_number_min_confidence=settings.profile_id_number_min_confidence,
            default_country=settings.default_country,
            default_income_currency=settings.default_income_currency,
        )
