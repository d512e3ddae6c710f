from abc import ABC, abstractmethod

from docverify.ocr.models import OcrOutput, RecognizedText


class BaseTextRecognizer(ABC):
    """Contract for all text recognition adapters."""

    name: str = "base"

    @abstractmethod
    def recognize(self, content: bytes, mime_type: str, *, language: str) -> RecognizedText:
        """Recognize the text in a document file.

        Args:
            content: Raw file content.
            mime_type: Declared MIME type of the content.
            language: Two-letter language hint (e.g. "en", "sw").

        Returns:
            The recognized text with an overall confidence in [0, 1].

        Raises:
            OcrError: if recognition fails for any reason.
        """


class BaseOcrProvider(ABC):
    """Contract for OCR providers used by the extraction orchestrator."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Identifier stored on every extraction record."""

    @abstractmethod
    def extract_text(
        self,
        content: bytes,
        mime_type: str,
        *,
        language: str,
        document_type: str,
    ) -> OcrOutput:
        """Recognize *content* and extract typed fields from it.

        Raises:
            OcrError: on any failure.
        """
