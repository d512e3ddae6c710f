from pathlib import Path

from docverify.config.settings import Settings
from docverify.database.models import JobRecord
from docverify.database.repositories.document_repository import DocumentRepository
from docverify.database.repositories.extraction_repository import ExtractionRepository
from docverify.database.repositories.fraud_score_repository import FraudScoreRepository
from docverify.database.repositories.identity_profile_repository import (
    IdentityProfileRepository,
)
from docverify.database.repositories.job_repository import JobRepository
from docverify.database.repositories.validation_result_repository import (
    ValidationResultRepository,
)
from docverify.documents.storage import LocalStorageProvider
from docverify.fraud.config import FraudDetectionConfig
from docverify.fraud.engine import FraudDetectionService
from docverify.identity.config import ProfileMergeConfig
from docverify.identity.profile_builder import IdentityProfileBuilder
from docverify.imaging.factory import ImageAnalyzerFactory
from docverify.logging.logger import Log
from docverify.ocr.factory import OcrProviderFactory
from docverify.ocr.orchestrator import OcrExtractionService
from docverify.pipeline.exceptions import StageFailedError
from docverify.pipeline.pipeline import PipelineContext, PipelineStep
from docverify.pipeline.steps import (
    BuildProfileStep,
    FraudCheckStep,
    LoadDocumentStep,
    MarkFailedStep,
    OcrStep,
    ValidateStep,
)
from docverify.validation.config import ValidationConfig
from docverify.validation.service import ValidationService
from docverify.verification.factory import ExternalVerifierFactory


class Processor:
    """Runs the verification stages for one queued document.

    Pipeline: load -> OCR -> profile merge -> fraud score -> validation.
    A permanent stage failure runs *failed_step* and stops the pipeline;
    retryable failures propagate to the job runner.
    """

    def __init__(self, steps: list[PipelineStep], failed_step: PipelineStep) -> None:
        self._steps = steps
        self._failed_step = failed_step

    def process(self, job: JobRecord) -> PipelineContext:
        Log.info(f"Processing document {job.document_id} for job {job.id}")
        context = PipelineContext(
            job_id=job.id,
            document_id=job.document_id,
            tenant_id=job.tenant_id,
        )
        try:
            for step in self._steps:
                context = step.run(context)
        except StageFailedError as exc:
            context.error_message = str(exc)
            context.failed = True
            return self._failed_step.run(context)
        return context


def build_processor(
    settings: Settings,
    files_root: Path | None = None,
) -> Processor:
    """Build a Processor with all required services and adapters."""
    doc_repo = DocumentRepository()
    extraction_repo = ExtractionRepository()
    profile_repo = IdentityProfileRepository()
    fraud_repo = FraudScoreRepository()
    validation_repo = ValidationResultRepository()
    job_repo = JobRepository(settings.max_job_attempts)
    storage = LocalStorageProvider(
        files_root=files_root if files_root is not None else Path(settings.files_root)
    )

    ocr_service = OcrExtractionService(
        doc_repo=doc_repo,
        extraction_repo=extraction_repo,
        storage=storage,
        provider=OcrProviderFactory.create(settings),
        default_language=settings.ocr_default_language,
    )
    profile_builder = IdentityProfileBuilder(
        profile_repo=profile_repo,
        doc_repo=doc_repo,
        extraction_repo=extraction_repo,
        config=ProfileMergeConfig.from_settings(settings),
    )
    fraud_service = FraudDetectionService(
        doc_repo=doc_repo,
        storage=storage,
        fraud_repo=fraud_repo,
        config=FraudDetectionConfig.from_settings(settings),
        image_analyzer=ImageAnalyzerFactory.create(settings),
    )
    validation_service = ValidationService(
        doc_repo=doc_repo,
        extraction_repo=extraction_repo,
        profile_repo=profile_repo,
        validation_repo=validation_repo,
        config=ValidationConfig.from_settings(settings),
        external_verifier=ExternalVerifierFactory.create(settings),
    )
    return Processor(
        steps=[
            LoadDocumentStep(doc_repo),
            OcrStep(ocr_service),
            BuildProfileStep(profile_builder),
            FraudCheckStep(fraud_service),
            ValidateStep(validation_service),
        ],
        failed_step=MarkFailedStep(job_repo),
    )
