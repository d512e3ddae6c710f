import io

import pdfplumber

from docverify.ocr.base import BaseTextRecognizer
from docverify.ocr.exceptions import OcrError
from docverify.ocr.models import RecognizedText

# A PDF text layer is exact; it is only as doubtful as the document itself.
TEXT_LAYER_CONFIDENCE = 0.95


class PdfPlumberRecognizer(BaseTextRecognizer):
    """Reads the text layer of PDF documents using pdfplumber."""

    name = "pdfplumber"

    def recognize(self, content: bytes, mime_type: str, *, language: str) -> RecognizedText:
        if mime_type != "application/pdf":
            raise OcrError(f"pdfplumber only reads PDF documents, got {mime_type}")
        try:
            with pdfplumber.open(io.BytesIO(content)) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
        except Exception as exc:
            raise OcrError(f"pdfplumber extraction failed: {exc}") from exc
        text = "\n".join(pages).strip()
        return RecognizedText(
            raw_text=text,
            confidence=TEXT_LAYER_CONFIDENCE if text else 0.0,
            page_count=len(pages),
            language=language,
        )
