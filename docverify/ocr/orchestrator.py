import time
import uuid
from collections.abc import Callable
from datetime import datetime, timezone

from docverify.database.repositories.document_repository import DocumentRepository
from docverify.database.repositories.extraction_repository import ExtractionRepository
from docverify.documents.exceptions import DocumentNotFoundError, StorageError
from docverify.documents.lifecycle import advance_status
from docverify.documents.models import DocumentStatus
from docverify.documents.storage import BaseStorageProvider
from docverify.logging.logger import Log
from docverify.ocr.base import BaseOcrProvider
from docverify.ocr.exceptions import OcrError
from docverify.ocr.models import SUPPORTED_MIME_TYPES, OcrExtractionResult, OcrStatus
from docverify.results import ErrorCode, ServiceResult, err, ok


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OcrExtractionService:
    """Runs OCR over stored documents and records every attempt."""

    def __init__(
        self,
        *,
        doc_repo: DocumentRepository,
        extraction_repo: ExtractionRepository,
        storage: BaseStorageProvider,
        provider: BaseOcrProvider,
        default_language: str = "en",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._doc_repo = doc_repo
        self._extraction_repo = extraction_repo
        self._storage = storage
        self._provider = provider
        self._default_language = default_language
        self._clock = clock

    def extract_from_document(
        self,
        document_id: str,
        tenant_id: str,
        *,
        language: str | None = None,
        force_reprocess: bool = False,
    ) -> ServiceResult[OcrExtractionResult]:
        """Extract text and fields from a document.

        A document with a completed extraction is not processed again unless
        *force_reprocess* is set; the stored result is returned instead.
        """
        try:
            document = self._doc_repo.find_by_id(document_id, tenant_id)
        except DocumentNotFoundError:
            return err(ErrorCode.DOCUMENT_NOT_FOUND, "Document not found")

        if not force_reprocess:
            latest = self._extraction_repo.find_latest(document_id, tenant_id)
            if latest is not None and latest.is_completed:
                Log.info("Returning existing OCR extraction", document_id=document_id)
                return ok(latest)

        if document.mime_type not in SUPPORTED_MIME_TYPES:
            return err(
                ErrorCode.UNSUPPORTED_TYPE,
                f"Unsupported file type: {document.mime_type}. "
                f"Supported: {', '.join(SUPPORTED_MIME_TYPES)}",
            )

        lang = language or self._default_language
        Log.info(
            "Starting OCR extraction",
            document_id=document_id,
            tenant_id=tenant_id,
            provider=self._provider.name,
            language=lang,
        )
        started = time.perf_counter()
        try:
            content = self._storage.download(tenant_id, document.storage_key)
            output = self._provider.extract_text(
                content,
                document.mime_type,
                language=lang,
                document_type=document.document_type.value,
            )
        except (StorageError, OcrError) as exc:
            failed = OcrExtractionResult(
                id=str(uuid.uuid4()),
                document_id=document_id,
                tenant_id=tenant_id,
                provider=self._provider.name,
                status=OcrStatus.FAILED,
                raw_text=None,
                fields=(),
                confidence=0.0,
                language=lang,
                page_count=0,
                processing_time_ms=_elapsed_ms(started),
                processed_at=self._clock(),
                error=str(exc),
            )
            self._extraction_repo.create(failed)
            Log.error("OCR extraction failed", document_id=document_id, error=exc)
            return err(ErrorCode.OCR_FAILED, str(exc))

        now = self._clock()
        result = OcrExtractionResult(
            id=str(uuid.uuid4()),
            document_id=document_id,
            tenant_id=tenant_id,
            provider=self._provider.name,
            status=OcrStatus.COMPLETED,
            raw_text=output.raw_text,
            fields=tuple(output.fields),
            confidence=output.confidence,
            language=output.language,
            page_count=output.page_count,
            processing_time_ms=_elapsed_ms(started),
            processed_at=now,
            structured_data=output.structured_data,
        )
        self._extraction_repo.create(result)
        advance_status(
            self._doc_repo, document, DocumentStatus.OCR_COMPLETED, now, processed=True
        )

        Log.info(
            "OCR extraction completed",
            document_id=document_id,
            fields=len(result.fields),
            confidence=f"{result.confidence:.2f}",
            processing_time_ms=result.processing_time_ms,
        )
        return ok(result)

    def get_latest_extraction(
        self, document_id: str, tenant_id: str
    ) -> ServiceResult[OcrExtractionResult | None]:
        return ok(self._extraction_repo.find_latest(document_id, tenant_id))


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
