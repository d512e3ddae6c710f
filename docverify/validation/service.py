import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone

from docverify.database.repositories.document_repository import DocumentRepository
from docverify.database.repositories.extraction_repository import ExtractionRepository
from docverify.database.repositories.identity_profile_repository import (
    IdentityProfileRepository,
)
from docverify.database.repositories.validation_result_repository import (
    ValidationResultRepository,
)
from docverify.documents.models import DocumentUpload
from docverify.extraction.models import FieldMap
from docverify.logging.logger import Log
from docverify.results import ErrorCode, ServiceResult, err, ok
from docverify.validation import checks
from docverify.validation.aggregation import aggregate, recommend, summarize
from docverify.validation.checks import DocumentFields
from docverify.validation.config import ValidationConfig
from docverify.validation.models import ValidationCheck, ValidationResult, ValidationStatus
from docverify.verification.base import BaseExternalVerifier


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ValidationService:
    """Cross-checks a customer's documents against each other and the profile."""

    def __init__(
        self,
        *,
        doc_repo: DocumentRepository,
        extraction_repo: ExtractionRepository,
        profile_repo: IdentityProfileRepository,
        validation_repo: ValidationResultRepository,
        config: ValidationConfig | None = None,
        external_verifier: BaseExternalVerifier | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._doc_repo = doc_repo
        self._extraction_repo = extraction_repo
        self._profile_repo = profile_repo
        self._validation_repo = validation_repo
        self._config = config or ValidationConfig()
        self._external_verifier = external_verifier
        self._clock = clock

    def validate_customer_documents(
        self,
        customer_id: str,
        tenant_id: str,
        document_ids: list[str] | None = None,
    ) -> ServiceResult[ValidationResult]:
        """Run every check family and store a new result row.

        With *document_ids* only that subset is validated (unknown ids are
        skipped); otherwise all of the customer's documents are.
        """
        Log.info(
            "Starting customer document validation",
            customer_id=customer_id,
            tenant_id=tenant_id,
            documents=len(document_ids) if document_ids is not None else "all",
        )
        if document_ids is not None:
            documents = self._doc_repo.find_many(document_ids, tenant_id)
        else:
            documents = self._doc_repo.find_by_customer(customer_id, tenant_id)
        if not documents:
            return err(ErrorCode.NO_DOCUMENTS, "No documents found for validation")

        profile = self._profile_repo.find_by_customer(customer_id, tenant_id)
        sources = [self._with_fields(d) for d in documents]
        now = self._clock()
        cfg = self._config

        results: list[ValidationCheck] = [
            *checks.check_name_matching(sources, profile, cfg.name_match_threshold),
            *checks.check_id_numbers(sources, profile),
            *checks.check_address_consistency(sources),
            *checks.check_date_alignment(sources, now.date(), cfg.expiry_warning_days),
            *checks.check_contact_consistency(sources, profile),
            *checks.check_document_completeness(documents, cfg.required_document_types),
        ]
        verifier = self._external_verifier
        if cfg.enable_external_verification and verifier is not None and profile is not None:
            results.extend(
                checks.check_external_verification(profile, verifier, cfg.default_country)
            )

        verdict = aggregate(results, cfg.auto_approve_threshold)
        result = ValidationResult(
            id=str(uuid.uuid4()),
            tenant_id=tenant_id,
            customer_id=customer_id,
            document_ids=tuple(d.id for d in documents),
            checks=tuple(results),
            overall_status=verdict.status,
            overall_score=verdict.score,
            summary=summarize(results, verdict.status),
            recommendations=tuple(recommend(results)),
            requires_manual_review=verdict.requires_manual_review,
            validated_at=now,
        )
        saved = self._validation_repo.create(result)

        Log.info(
            "Document validation completed",
            customer_id=customer_id,
            result_id=saved.id,
            status=saved.overall_status,
            score=saved.overall_score,
            checks=len(results),
            failed=sum(1 for c in results if c.status is ValidationStatus.FAILED),
        )
        return ok(saved)

    def _with_fields(self, document: DocumentUpload) -> DocumentFields:
        extraction = self._extraction_repo.find_latest_completed(document.id, document.tenant_id)
        fields = extraction.field_map() if extraction is not None else FieldMap(())
        return DocumentFields(document, fields)

    def record_manual_review(
        self,
        validation_result_id: str,
        tenant_id: str,
        *,
        reviewed_by: str,
        notes: str,
        override_status: str | None = None,
    ) -> ServiceResult[ValidationResult]:
        status: ValidationStatus | None = None
        if override_status is not None:
            try:
                status = ValidationStatus(override_status)
            except ValueError:
                return err(
                    ErrorCode.INVALID_DECISION,
                    f"Override status must be one of {[s.value for s in ValidationStatus]}",
                )

        result = self._validation_repo.find_by_id(validation_result_id, tenant_id)
        if result is None:
            return err(ErrorCode.VALIDATION_NOT_FOUND, "Validation result not found")
        if result.reviewed_at is not None:
            return err(ErrorCode.REVIEW_ALREADY_RECORDED, "Validation review already recorded")

        reviewed = replace(
            result,
            overall_status=status or result.overall_status,
            requires_manual_review=False,
            reviewed_at=self._clock(),
            reviewed_by=reviewed_by,
            review_notes=notes,
        )
        if not self._validation_repo.record_review(reviewed):
            return err(ErrorCode.REVIEW_ALREADY_RECORDED, "Validation review already recorded")

        Log.info(
            "Manual review recorded",
            validation_result_id=validation_result_id,
            tenant_id=tenant_id,
            reviewed_by=reviewed_by,
            override_status=status,
        )
        return ok(reviewed)

    def get_validation_result(
        self, validation_result_id: str, tenant_id: str
    ) -> ServiceResult[ValidationResult | None]:
        return ok(self._validation_repo.find_by_id(validation_result_id, tenant_id))

    def get_latest_validation(
        self, customer_id: str, tenant_id: str
    ) -> ServiceResult[ValidationResult | None]:
        return ok(self._validation_repo.find_latest_by_customer(customer_id, tenant_id))

    def get_validation_history(
        self, customer_id: str, tenant_id: str
    ) -> ServiceResult[list[ValidationResult]]:
        return ok(self._validation_repo.find_by_customer(customer_id, tenant_id))
