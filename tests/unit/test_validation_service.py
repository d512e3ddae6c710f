from dataclasses import replace
from datetime import datetime, timezone
from unittest.mock import MagicMock

from docverify.database.repositories.document_repository import DocumentRepository
from docverify.database.repositories.extraction_repository import ExtractionRepository
from docverify.database.repositories.identity_profile_repository import (
    IdentityProfileRepository,
)
from docverify.database.repositories.validation_result_repository import (
    ValidationResultRepository,
)
from docverify.documents.models import DocumentStatus, DocumentType, DocumentUpload
from docverify.extraction.models import ExtractedField, FieldName
from docverify.identity.models import IdNumber, TenantIdentityProfile
from docverify.ocr.models import OcrExtractionResult, OcrStatus
from docverify.results import ErrorCode
from docverify.validation.config import ValidationConfig
from docverify.validation.models import ValidationCheckType, ValidationStatus
from docverify.validation.service import ValidationService
from docverify.verification.base import BaseExternalVerifier, IdVerificationResponse

NOW = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


def _document(document_id: str, document_type: DocumentType) -> DocumentUpload:
    return DocumentUpload(
        id=document_id,
        tenant_id="tenant-1",
        customer_id="cust-1",
        document_type=document_type,
        status=DocumentStatus.OCR_COMPLETED,
        original_file_name="f.pdf",
        mime_type="application/pdf",
        file_size=1000,
        storage_key="f.pdf",
        checksum="f" * 64,
    )


def _extraction(document_id: str, **values: str) -> OcrExtractionResult:
    return OcrExtractionResult(
        id=f"ext-{document_id}",
        document_id=document_id,
        tenant_id="tenant-1",
        provider="example",
        status=OcrStatus.COMPLETED,
        raw_text="",
        fields=tuple(
            ExtractedField(field_name=FieldName(k), value=v, confidence=0.9)
            for k, v in values.items()
        ),
        confidence=0.9,
        language="en",
        page_count=1,
        processing_time_ms=3,
        processed_at=NOW,
    )


def _make_service(
    config: ValidationConfig | None = None,
    verifier: BaseExternalVerifier | None = None,
) -> tuple[ValidationService, MagicMock, MagicMock, MagicMock, MagicMock]:
    doc_repo = MagicMock(spec=DocumentRepository)
    extraction_repo = MagicMock(spec=ExtractionRepository)
    profile_repo = MagicMock(spec=IdentityProfileRepository)
    validation_repo = MagicMock(spec=ValidationResultRepository)
    validation_repo.create.side_effect = lambda result: result
    profile_repo.find_by_customer.return_value = None
    service = ValidationService(
        doc_repo=doc_repo,
        extraction_repo=extraction_repo,
        profile_repo=profile_repo,
        validation_repo=validation_repo,
        config=config,
        external_verifier=verifier,
        clock=lambda: NOW,
    )
    return service, doc_repo, extraction_repo, profile_repo, validation_repo


def _consistent_documents(doc_repo: MagicMock, extraction_repo: MagicMock) -> None:
    doc_repo.find_by_customer.return_value = [
        _document("doc-id", DocumentType.NATIONAL_ID),
        _document("doc-lease", DocumentType.LEASE_AGREEMENT),
    ]
    extractions = {
        "doc-id": _extraction(
            "doc-id",
            full_name="Asha Juma",
            id_number="19900101123456789012",
            expiry_date="2030-01-01",
        ),
        "doc-lease": _extraction(
            "doc-lease", full_name="Asha Juma", start_date="2025-01-01", end_date="2025-12-31"
        ),
    }
    extraction_repo.find_latest_completed.side_effect = lambda doc_id, tenant: extractions[doc_id]


class TestValidateCustomerDocuments:
    def test_consistent_documents_pass(self) -> None:
        service, doc_repo, extraction_repo, _, validation_repo = _make_service()
        _consistent_documents(doc_repo, extraction_repo)

        result = service.validate_customer_documents("cust-1", "tenant-1")

        assert result.success
        saved = result.data
        assert saved.overall_status is ValidationStatus.PASSED
        assert saved.overall_score == 1.0
        assert saved.requires_manual_review is False
        assert saved.document_ids == ("doc-id", "doc-lease")
        assert saved.validated_at == NOW
        assert saved.recommendations == ()
        assert saved.summary.startswith("Validation completed successfully.")
        validation_repo.create.assert_called_once()

    def test_no_documents(self) -> None:
        service, doc_repo, _, _, validation_repo = _make_service()
        doc_repo.find_by_customer.return_value = []

        result = service.validate_customer_documents("cust-1", "tenant-1")

        assert result.error.code is ErrorCode.NO_DOCUMENTS
        validation_repo.create.assert_not_called()

    def test_subset_uses_find_many(self) -> None:
        service, doc_repo, extraction_repo, _, _ = _make_service()
        doc_repo.find_many.return_value = [_document("doc-id", DocumentType.NATIONAL_ID)]
        extraction_repo.find_latest_completed.return_value = None

        result = service.validate_customer_documents("cust-1", "tenant-1", ["doc-id", "unknown"])

        doc_repo.find_many.assert_called_once_with(["doc-id", "unknown"], "tenant-1")
        doc_repo.find_by_customer.assert_not_called()
        assert result.data.document_ids == ("doc-id",)

    def test_documents_without_extraction_still_validate(self) -> None:
        service, doc_repo, extraction_repo, _, _ = _make_service()
        doc_repo.find_by_customer.return_value = [_document("doc-id", DocumentType.NATIONAL_ID)]
        extraction_repo.find_latest_completed.return_value = None

        result = service.validate_customer_documents("cust-1", "tenant-1")

        saved = result.data
        types = [c.check_type for c in saved.checks]
        assert ValidationCheckType.NAME_MATCHING in types
        assert saved.overall_status is ValidationStatus.WARNING
        assert "lease_agreement document is missing" in [c.details for c in saved.checks]

    def test_profile_id_mismatch_fails(self) -> None:
        service, doc_repo, extraction_repo, profile_repo, _ = _make_service()
        _consistent_documents(doc_repo, extraction_repo)
        profile_repo.find_by_customer.return_value = TenantIdentityProfile(
            id="profile-1",
            tenant_id="tenant-1",
            customer_id="cust-1",
            full_name="Asha Juma",
            id_numbers=(IdNumber(type="national_id", number="99990101123456789012"),),
        )

        saved = service.validate_customer_documents("cust-1", "tenant-1").data

        assert saved.overall_status is ValidationStatus.FAILED
        assert saved.requires_manual_review is True
        assert "Request valid ID document - current ID failed verification" in saved.recommendations

    def test_external_verification_runs_only_when_enabled(self) -> None:
        verifier = MagicMock(spec=BaseExternalVerifier)
        verifier.verify_id_number.return_value = IdVerificationResponse(
            verified=True, confidence=0.99, details="ok"
        )
        profile = TenantIdentityProfile(
            id="profile-1",
            tenant_id="tenant-1",
            customer_id="cust-1",
            full_name="Asha Juma",
            id_numbers=(IdNumber(type="national_id", number="19900101123456789012"),),
        )

        disabled, doc_repo, extraction_repo, profile_repo, _ = _make_service(verifier=verifier)
        _consistent_documents(doc_repo, extraction_repo)
        profile_repo.find_by_customer.return_value = profile
        disabled.validate_customer_documents("cust-1", "tenant-1")
        verifier.verify_id_number.assert_not_called()

        enabled, doc_repo, extraction_repo, profile_repo, _ = _make_service(
            config=ValidationConfig(enable_external_verification=True), verifier=verifier
        )
        _consistent_documents(doc_repo, extraction_repo)
        profile_repo.find_by_customer.return_value = profile
        saved = enabled.validate_customer_documents("cust-1", "tenant-1").data

        verifier.verify_id_number.assert_called_once()
        assert saved.checks[-1].check_type is ValidationCheckType.EXTERNAL_VERIFICATION


class TestRecordManualReview:
    def _stored(self, service_repo: MagicMock) -> None:
        service, doc_repo, extraction_repo, _, _ = _make_service()
        _consistent_documents(doc_repo, extraction_repo)
        stored = service.validate_customer_documents("cust-1", "tenant-1").data
        service_repo.find_by_id.return_value = replace(
            stored, overall_status=ValidationStatus.WARNING, requires_manual_review=True
        )

    def test_records_review_with_override(self) -> None:
        service, _, _, _, validation_repo = _make_service()
        self._stored(validation_repo)
        validation_repo.record_review.return_value = True

        result = service.record_manual_review(
            "val-1", "tenant-1", reviewed_by="officer-1", notes="Checked", override_status="passed"
        )

        reviewed = result.data
        assert reviewed.overall_status is ValidationStatus.PASSED
        assert reviewed.requires_manual_review is False
        assert reviewed.reviewed_by == "officer-1"
        assert reviewed.reviewed_at == NOW
        validation_repo.record_review.assert_called_once_with(reviewed)

    def test_without_override_keeps_status(self) -> None:
        service, _, _, _, validation_repo = _make_service()
        self._stored(validation_repo)
        validation_repo.record_review.return_value = True

        result = service.record_manual_review(
            "val-1", "tenant-1", reviewed_by="officer-1", notes="ok"
        )

        assert result.data.overall_status is ValidationStatus.WARNING

    def test_invalid_override(self) -> None:
        service, _, _, _, validation_repo = _make_service()

        result = service.record_manual_review(
            "val-1", "tenant-1", reviewed_by="officer-1", notes="", override_status="approved"
        )

        assert result.error.code is ErrorCode.INVALID_DECISION
        validation_repo.find_by_id.assert_not_called()

    def test_not_found(self) -> None:
        service, _, _, _, validation_repo = _make_service()
        validation_repo.find_by_id.return_value = None

        result = service.record_manual_review("val-1", "tenant-1", reviewed_by="x", notes="")

        assert result.error.code is ErrorCode.VALIDATION_NOT_FOUND

    def test_second_review_is_rejected(self) -> None:
        service, _, _, _, validation_repo = _make_service()
        self._stored(validation_repo)
        validation_repo.find_by_id.return_value = replace(
            validation_repo.find_by_id.return_value, reviewed_at=NOW, reviewed_by="officer-0"
        )

        result = service.record_manual_review("val-1", "tenant-1", reviewed_by="x", notes="")

        assert result.error.code is ErrorCode.REVIEW_ALREADY_RECORDED
        validation_repo.record_review.assert_not_called()

    def test_concurrent_review_loses(self) -> None:
        service, _, _, _, validation_repo = _make_service()
        self._stored(validation_repo)
        validation_repo.record_review.return_value = False

        result = service.record_manual_review("val-1", "tenant-1", reviewed_by="x", notes="")

        assert result.error.code is ErrorCode.REVIEW_ALREADY_RECORDED


class TestQueries:
    def test_passthroughs(self) -> None:
        service, _, _, _, validation_repo = _make_service()
        validation_repo.find_by_id.return_value = None
        validation_repo.find_latest_by_customer.return_value = None
        validation_repo.find_by_customer.return_value = []

        assert service.get_validation_result("val-1", "tenant-1").data is None
        assert service.get_latest_validation("cust-1", "tenant-1").data is None
        assert service.get_validation_history("cust-1", "tenant-1").data == []
        validation_repo.find_latest_by_customer.assert_called_once_with("cust-1", "tenant-1")
