"""Example text recognizer.

Use this module as a reference when implementing new recognizers.
Implement BaseTextRecognizer and register the engine in OcrProviderFactory.
"""

from docverify.ocr.base import BaseTextRecognizer
from docverify.ocr.models import RecognizedText


class ExampleRecognizer(BaseTextRecognizer):
    """Returns a fixed national ID transcript. No OCR engine required."""

    name = "example"

    DEFAULT_TEXT = (
        "UNITED REPUBLIC OF TANZANIA\n"
        "NATIONAL IDENTIFICATION AUTHORITY\n"
        "Full Name: George Mwikila\n"
        "ID Number: 19850123456789012345\n"
        "Date of Birth: 23/01/1985\n"
        "Sex: M\n"
        "Nationality: Tanzanian\n"
        "Date of Issue: 15/03/2020\n"
        "Date of Expiry: 14/03/2030\n"
    )

    def __init__(self, text: str | None = None, confidence: float = 0.92) -> None:
        self._text = self.DEFAULT_TEXT if text is None else text
        self._confidence = confidence

    def recognize(self, content: bytes, mime_type: str, *, language: str) -> RecognizedText:
        _ = content, mime_type
        return RecognizedText(
            raw_text=self._text,
            confidence=self._confidence,
            page_count=1,
            language=language,
        )
