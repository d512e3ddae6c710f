from dataclasses import dataclass

from docverify.config.settings import Settings


@dataclass(frozen=True)
class FraudDetectionConfig:
    high_risk_threshold: float = 0.6
    critical_risk_threshold: float = 0.8
    enable_cross_tenant_duplicate_check: bool = True
    model_version: str = "1.0.0"

    @classmethod
    def from_settings(cls, settings: Settings) -> "FraudDetectionConfig":
        return cls(
            high_risk_threshold=settings.fraud_high_risk_threshold,
            critical_risk_threshold=settings.fraud_critical_risk_threshold,
            enable_cross_tenant_duplicate_check=settings.fraud_cross_tenant_duplicate_check,
            model_version=settings.fraud_model_version,
        )
