from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class ValidationCheckType(StrEnum):
    NAME_MATCHING = "name_matching"
    ID_NUMBER_VERIFICATION = "id_number_verification"
    ADDRESS_CONSISTENCY = "address_consistency"
    DATE_ALIGNMENT = "date_alignment"
    CONTACT_CONSISTENCY = "contact_consistency"
    DOCUMENT_COMPLETENESS = "document_completeness"
    EXTERNAL_VERIFICATION = "external_verification"


class ValidationStatus(StrEnum):
    PASSED = "passed"
    WARNING = "warning"
    FAILED = "failed"
    SKIPPED = "skipped"
    MANUAL_REVIEW = "manual_review"


@dataclass(frozen=True)
class ValidationCheck:
    """One explainable comparison; ``discrepancy`` is set whenever it did not pass."""

    check_type: ValidationCheckType
    status: ValidationStatus
    score: float
    details: str
    source_documents: tuple[str, ...] = ()
    source_fields: tuple[str, ...] = ()
    expected_value: str | None = None
    actual_value: str | None = None
    discrepancy: str | None = None


@dataclass(frozen=True)
class ValidationResult:
    id: str
    tenant_id: str
    customer_id: str
    document_ids: tuple[str, ...]
    checks: tuple[ValidationCheck, ...]
    overall_status: ValidationStatus
    overall_score: float
    summary: str
    recommendations: tuple[str, ...]
    requires_manual_review: bool
    validated_at: datetime
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None
    review_notes: str | None = None
