from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class RiskLevel(StrEnum):
    """Severity of a single indicator and risk level of a whole score."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


RISK_LEVEL_ORDER: dict[RiskLevel, int] = {
    RiskLevel.LOW: 0,
    RiskLevel.MEDIUM: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.CRITICAL: 3,
}


class FraudIndicatorType(StrEnum):
    SUSPICIOUS_FORMAT = "suspicious_format"
    UNUSUAL_FILE_SIZE = "unusual_file_size"
    METADATA_TAMPERING = "metadata_tampering"
    EXIF_ANOMALY = "exif_anomaly"
    CROSS_TENANT_DUPLICATE = "cross_tenant_duplicate"
    DATE_INCONSISTENCY = "date_inconsistency"
    EXPIRED_DOCUMENT = "expired_document"
    IMAGE_MANIPULATION = "image_manipulation"
    COPY_PASTE_DETECTED = "copy_paste_detected"


class Decision(StrEnum):
    APPROVED = "approved"
    REJECTED = "rejected"
    REVIEW_REQUIRED = "review_required"


@dataclass(frozen=True)
class FraudIndicator:
    type: FraudIndicatorType
    severity: RiskLevel
    description: str
    confidence: float
    detected_at: datetime
    evidence: str | None = None
    recommendation: str | None = None


@dataclass(frozen=True)
class FraudRiskScore:
    """Fraud verdict for one document; only the review fields change after creation."""

    id: str
    tenant_id: str
    document_id: str
    customer_id: str
    checksum: str
    indicators: tuple[FraudIndicator, ...]
    score: float
    risk_level: RiskLevel
    primary_indicator: FraudIndicatorType | None
    model_version: str
    model_confidence: float
    review_required: bool
    calculated_at: datetime
    decision: Decision | None = None
    decision_reason: str | None = None
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None
    review_notes: str | None = None


@dataclass(frozen=True)
class CustomerRiskSummary:
    customer_id: str
    risk_level: RiskLevel
    highest_score: float
    document_count: int
    flagged_count: int
