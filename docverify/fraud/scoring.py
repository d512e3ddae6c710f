from collections.abc import Sequence
from dataclasses import dataclass

from docverify.fraud.config import FraudDetectionConfig
from docverify.fraud.models import FraudIndicator, FraudIndicatorType, RiskLevel

SEVERITY_WEIGHTS: dict[RiskLevel, float] = {
    RiskLevel.LOW: 0.1,
    RiskLevel.MEDIUM: 0.3,
    RiskLevel.HIGH: 0.6,
    RiskLevel.CRITICAL: 1.0,
}

MEDIUM_RISK_THRESHOLD = 0.4
NO_INDICATOR_CONFIDENCE = 0.95


@dataclass(frozen=True)
class RiskAssessment:
    score: float
    risk_level: RiskLevel
    primary_indicator: FraudIndicatorType | None


def calculate_risk(
    indicators: Sequence[FraudIndicator],
    config: FraudDetectionConfig,
) -> RiskAssessment:
    """Severity-weighted mean of indicator confidences, mapped to a risk level.

    Any critical indicator forces the critical level regardless of the score.
    The primary indicator is the first one with the heaviest severity.
    """
    if not indicators:
        return RiskAssessment(score=0.0, risk_level=RiskLevel.LOW, primary_indicator=None)

    weighted_sum = 0.0
    total_weight = 0.0
    primary: FraudIndicator | None = None
    primary_weight = 0.0
    for indicator in indicators:
        weight = SEVERITY_WEIGHTS[indicator.severity]
        weighted_sum += indicator.confidence * weight
        total_weight += weight
        if weight > primary_weight:
            primary_weight = weight
            primary = indicator

    score = max(0.0, min(1.0, weighted_sum / total_weight if total_weight else 0.0))

    if score >= config.critical_risk_threshold:
        level = RiskLevel.CRITICAL
    elif score >= config.high_risk_threshold:
        level = RiskLevel.HIGH
    elif score >= MEDIUM_RISK_THRESHOLD:
        level = RiskLevel.MEDIUM
    else:
        level = RiskLevel.LOW

    if any(i.severity is RiskLevel.CRITICAL for i in indicators):
        level = RiskLevel.CRITICAL

    return RiskAssessment(
        score=score,
        risk_level=level,
        primary_indicator=primary.type if primary is not None else None,
    )


def model_confidence(indicators: Sequence[FraudIndicator]) -> float:
    if not indicators:
        return NO_INDICATOR_CONFIDENCE
    return round(sum(i.confidence for i in indicators) / len(indicators), 2)


def requires_review(level: RiskLevel) -> bool:
    return level in (RiskLevel.HIGH, RiskLevel.CRITICAL)
