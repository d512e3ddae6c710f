from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import StrEnum
from typing import Any

from docverify.documents.exceptions import InvalidStatusTransitionError


class DocumentCategory(StrEnum):
    IDENTITY = "identity"
    EMPLOYMENT = "employment"
    ADDRESS = "address"
    LEASE = "lease"
    SUPPORTING = "supporting"


class DocumentType(StrEnum):
    NATIONAL_ID = "national_id"
    PASSPORT = "passport"
    DRIVERS_LICENSE = "drivers_license"
    RESIDENCE_PERMIT = "residence_permit"
    WORK_PERMIT = "work_permit"
    UTILITY_BILL = "utility_bill"
    BANK_STATEMENT = "bank_statement"
    EMPLOYMENT_LETTER = "employment_letter"
    PAYSLIP = "payslip"
    LEASE_AGREEMENT = "lease_agreement"
    SIGNED_LEASE = "signed_lease"
    GUARANTOR_DOCUMENT = "guarantor_document"
    OTHER = "other"

    @property
    def category(self) -> DocumentCategory:
        return DOCUMENT_CATEGORIES[self]

    @property
    def is_identity(self) -> bool:
        return self.category is DocumentCategory.IDENTITY


DOCUMENT_CATEGORIES: dict[DocumentType, DocumentCategory] = {
    DocumentType.NATIONAL_ID: DocumentCategory.IDENTITY,
    DocumentType.PASSPORT: DocumentCategory.IDENTITY,
    DocumentType.DRIVERS_LICENSE: DocumentCategory.IDENTITY,
    DocumentType.RESIDENCE_PERMIT: DocumentCategory.SUPPORTING,
    DocumentType.WORK_PERMIT: DocumentCategory.SUPPORTING,
    DocumentType.UTILITY_BILL: DocumentCategory.ADDRESS,
    DocumentType.BANK_STATEMENT: DocumentCategory.ADDRESS,
    DocumentType.EMPLOYMENT_LETTER: DocumentCategory.EMPLOYMENT,
    DocumentType.PAYSLIP: DocumentCategory.EMPLOYMENT,
    DocumentType.LEASE_AGREEMENT: DocumentCategory.LEASE,
    DocumentType.SIGNED_LEASE: DocumentCategory.LEASE,
    DocumentType.GUARANTOR_DOCUMENT: DocumentCategory.SUPPORTING,
    DocumentType.OTHER: DocumentCategory.SUPPORTING,
}


class DocumentStatus(StrEnum):
    UPLOADED = "uploaded"
    VALIDATING = "validating"
    OCR_COMPLETED = "ocr_completed"
    FRAUD_CHECK = "fraud_check"
    VERIFIED = "verified"
    REJECTED = "rejected"
    REQUIRES_REUPLOAD = "requires_reupload"


STATUS_TRANSITIONS: dict[DocumentStatus, frozenset[DocumentStatus]] = {
    DocumentStatus.UPLOADED: frozenset({
        DocumentStatus.VALIDATING,
        DocumentStatus.OCR_COMPLETED,
        DocumentStatus.REQUIRES_REUPLOAD,
        DocumentStatus.REJECTED,
    }),
    DocumentStatus.VALIDATING: frozenset({
        DocumentStatus.OCR_COMPLETED,
        DocumentStatus.REQUIRES_REUPLOAD,
        DocumentStatus.REJECTED,
    }),
    DocumentStatus.OCR_COMPLETED: frozenset({
        DocumentStatus.OCR_COMPLETED,
        DocumentStatus.FRAUD_CHECK,
        DocumentStatus.VERIFIED,
        DocumentStatus.REJECTED,
        DocumentStatus.REQUIRES_REUPLOAD,
    }),
    DocumentStatus.FRAUD_CHECK: frozenset({
        DocumentStatus.VERIFIED,
        DocumentStatus.REJECTED,
        DocumentStatus.REQUIRES_REUPLOAD,
    }),
    DocumentStatus.VERIFIED: frozenset({DocumentStatus.REJECTED}),
    DocumentStatus.REQUIRES_REUPLOAD: frozenset({DocumentStatus.UPLOADED}),
    DocumentStatus.REJECTED: frozenset(),
}


def can_transition(current: DocumentStatus, target: DocumentStatus) -> bool:
    return target in STATUS_TRANSITIONS[current]


@dataclass(frozen=True)
class DocumentUpload:
    """Domain model for an uploaded document (subset of DB columns)."""

    id: str
    tenant_id: str
    customer_id: str
    document_type: DocumentType
    status: DocumentStatus
    original_file_name: str
    mime_type: str
    file_size: int
    storage_key: str
    checksum: str
    metadata: dict[str, Any] = field(default_factory=dict)
    processed_at: datetime | None = None
    uploaded_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    @property
    def file_extension(self) -> str:
        """Lowercased extension including the dot, or '' when the name has none."""
        name = self.original_file_name.lower()
        dot = name.rfind(".")
        return name[dot:] if dot != -1 else ""

    def with_status(self, target: DocumentStatus, at: datetime) -> "DocumentUpload":
        """Return a copy moved to *target*.

        Raises:
            InvalidStatusTransitionError: if the lifecycle does not allow it.
        """
        if not can_transition(self.status, target):
            raise InvalidStatusTransitionError(
                f"Document {self.id}: {self.status} -> {target} is not allowed"
            )
        return replace(self, status=target, updated_at=at)
