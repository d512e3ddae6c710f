from typing import Any

from docverify.extraction.base import BaseFieldExtractor
from docverify.extraction.exceptions import FieldExtractionError
from docverify.extraction.models import (
    ADDRESS_FIELDS,
    CONTACT_FIELDS,
    EMPLOYMENT_FIELDS,
    IDENTITY_FIELDS,
    ExtractedField,
)
from docverify.logging.logger import Log
from docverify.ocr.base import BaseOcrProvider, BaseTextRecognizer
from docverify.ocr.exceptions import OcrError
from docverify.ocr.models import OcrOutput

_SECTIONS = (
    ("identity", IDENTITY_FIELDS),
    ("address", ADDRESS_FIELDS),
    ("employment", EMPLOYMENT_FIELDS),
    ("contact", CONTACT_FIELDS),
)


class OcrProvider(BaseOcrProvider):
    """Text recognition followed by field extraction."""

    def __init__(self, recognizer: BaseTextRecognizer, extractor: BaseFieldExtractor) -> None:
        self._recognizer = recognizer
        self._extractor = extractor

    @property
    def name(self) -> str:
        return self._recognizer.name

    def extract_text(
        self,
        content: bytes,
        mime_type: str,
        *,
        language: str,
        document_type: str,
    ) -> OcrOutput:
        recognized = self._recognizer.recognize(content, mime_type, language=language)
        Log.debug(
            "Text recognized",
            engine=self.name,
            pages=recognized.page_count,
            chars=len(recognized.raw_text),
        )
        try:
            fields = self._extractor.extract(
                recognized.raw_text,
                document_type=document_type,
                text_confidence=recognized.confidence,
            )
        except FieldExtractionError as exc:
            raise OcrError(f"Field extraction failed: {exc}") from exc
        return OcrOutput(
            raw_text=recognized.raw_text,
            fields=fields,
            confidence=recognized.confidence,
            language=recognized.language,
            page_count=recognized.page_count,
            structured_data=_structure(fields),
        )


def _structure(fields: list[ExtractedField]) -> dict[str, Any]:
    """Group extracted values by section, e.g. {"identity": {"full_name": ...}}."""
    structured: dict[str, Any] = {}
    for section, names in _SECTIONS:
        values = {f.field_name.value: f.value for f in fields if f.field_name in names}
        if values:
            structured[section] = values
    return structured
