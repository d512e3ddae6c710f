from docverify.database.repositories.document_repository import DocumentRepository
from docverify.database.repositories.job_repository import JobRepository
from docverify.documents.exceptions import DocumentNotFoundError
from docverify.fraud.engine import FraudDetectionService
from docverify.identity.profile_builder import IdentityProfileBuilder
from docverify.logging.logger import Log
from docverify.ocr.orchestrator import OcrExtractionService
from docverify.pipeline.exceptions import StageFailedError, stage_error
from docverify.pipeline.pipeline import PipelineContext, PipelineStep
from docverify.results import ErrorCode, ServiceError
from docverify.validation.service import ValidationService


class LoadDocumentStep(PipelineStep):
    def __init__(self, doc_repo: DocumentRepository) -> None:
        self._doc_repo = doc_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        try:
            context.document = self._doc_repo.find_by_id(context.document_id, context.tenant_id)
        except DocumentNotFoundError as exc:
            raise StageFailedError(
                "load", ServiceError(ErrorCode.DOCUMENT_NOT_FOUND, str(exc))
            ) from exc
        Log.info(
            f"Loaded document {context.document_id} for job {context.job_id}",
            document_type=context.document.document_type,
            status=context.document.status,
        )
        return context


class OcrStep(PipelineStep):
    def __init__(self, ocr_service: OcrExtractionService) -> None:
        self._ocr_service = ocr_service

    def run(self, context: PipelineContext) -> PipelineContext:
        result = self._ocr_service.extract_from_document(context.document_id, context.tenant_id)
        if result.error is not None:
            raise stage_error("ocr", result.error)
        context.extraction = result.data
        return context


class BuildProfileStep(PipelineStep):
    def __init__(self, profile_builder: IdentityProfileBuilder) -> None:
        self._profile_builder = profile_builder

    def run(self, context: PipelineContext) -> PipelineContext:
        document = context.require_document()
        result = self._profile_builder.build_identity_profile(
            document.customer_id, context.tenant_id, [document.id]
        )
        if result.error is not None:
            raise stage_error("profile", result.error)
        context.profile = result.data
        return context


class FraudCheckStep(PipelineStep):
    def __init__(self, fraud_service: FraudDetectionService) -> None:
        self._fraud_service = fraud_service

    def run(self, context: PipelineContext) -> PipelineContext:
        result = self._fraud_service.analyze_document(context.document_id, context.tenant_id)
        if result.error is not None:
            raise stage_error("fraud", result.error)
        context.fraud_score = result.data
        return context


class ValidateStep(PipelineStep):
    """Re-validate all of the customer's documents now that one more is processed."""

    def __init__(self, validation_service: ValidationService) -> None:
        self._validation_service = validation_service

    def run(self, context: PipelineContext) -> PipelineContext:
        document = context.require_document()
        result = self._validation_service.validate_customer_documents(
            document.customer_id, context.tenant_id
        )
        if result.error is not None:
            raise stage_error("validation", result.error)
        context.validation = result.data
        return context


class MarkFailedStep(PipelineStep):
    def __init__(self, job_repo: JobRepository) -> None:
        self._job_repo = job_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        self._job_repo.mark_failed(context.job_id, context.error_message)
        Log.error(f"Job {context.job_id} marked as failed: {context.error_message}")
        return context
