from dataclasses import dataclass, field
from datetime import datetime

from docverify.fraud.models import FraudIndicatorType, RiskLevel


@dataclass(frozen=True)
class ImageMetadata:
    """Metadata relevant to tampering checks; absent tags are None."""

    software: str | None = None
    create_date: datetime | None = None
    modify_date: datetime | None = None
    width: int | None = None
    height: int | None = None


@dataclass(frozen=True)
class ImageFinding:
    type: FraudIndicatorType
    description: str
    severity: RiskLevel
    confidence: float


@dataclass(frozen=True)
class IntegrityReport:
    is_modified: bool
    confidence: float
    findings: list[ImageFinding] = field(default_factory=list)


@dataclass(frozen=True)
class Region:
    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class DuplicateRegions:
    found: bool
    confidence: float
    regions: list[Region] = field(default_factory=list)
