import pymupdf

from docverify.ocr.base import BaseTextRecognizer
from docverify.ocr.exceptions import OcrError
from docverify.ocr.models import RecognizedText
from docverify.ocr.pdfplumber_adapter import TEXT_LAYER_CONFIDENCE


class PyMuPdfRecognizer(BaseTextRecognizer):
    """Reads the text layer of PDF documents using PyMuPDF."""

    name = "pymupdf"

    def recognize(self, content: bytes, mime_type: str, *, language: str) -> RecognizedText:
        if mime_type != "application/pdf":
            raise OcrError(f"pymupdf only reads PDF documents, got {mime_type}")
        try:
            with pymupdf.open(stream=content, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                pages = [page.get_text() for page in doc]
        except Exception as exc:
            raise OcrError(f"pymupdf extraction failed: {exc}") from exc
        text = "\n".join(pages).strip()
        return RecognizedText(
            raw_text=text,
            confidence=TEXT_LAYER_CONFIDENCE if text else 0.0,
            page_count=len(pages),
            language=language,
        )
