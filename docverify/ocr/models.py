from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from docverify.extraction.models import ExtractedField, FieldMap


class OcrStatus(StrEnum):
    COMPLETED = "completed"
    FAILED = "failed"


SUPPORTED_MIME_TYPES: tuple[str, ...] = (
    "application/pdf",
    "image/jpeg",
    "image/png",
    "image/tiff",
    "image/webp",
)


@dataclass(frozen=True)
class RecognizedText:
    """Output of a text recognizer before field extraction."""

    raw_text: str
    confidence: float
    page_count: int
    language: str


@dataclass(frozen=True)
class OcrOutput:
    """What an OCR provider returns for one document."""

    raw_text: str
    fields: list[ExtractedField]
    confidence: float
    language: str
    page_count: int
    structured_data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class OcrExtractionResult:
    """One OCR run over one document, successful or not."""

    id: str
    document_id: str
    tenant_id: str
    provider: str
    status: OcrStatus
    raw_text: str | None
    fields: tuple[ExtractedField, ...]
    confidence: float
    language: str | None
    page_count: int
    processing_time_ms: int
    processed_at: datetime
    structured_data: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    @property
    def is_completed(self) -> bool:
        return self.status is OcrStatus.COMPLETED

    def field_map(self) -> FieldMap:
        return FieldMap(self.fields)
