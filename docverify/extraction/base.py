from abc import ABC, abstractmethod

from docverify.extraction.models import ExtractedField


class BaseFieldExtractor(ABC):
    """Contract for all field extraction adapters."""

    @abstractmethod
    def extract(
        self,
        text: str,
        *,
        document_type: str,
        text_confidence: float,
    ) -> list[ExtractedField]:
        """Turn recognized document text into typed fields.

        Args:
            text: Raw text from the text recognizer.
            document_type: Declared type of the uploaded document.
            text_confidence: Recognizer confidence (0-1) for the text as a whole.

        Returns:
            Extracted fields, possibly empty.

        Raises:
            FieldExtractionError: on any failure.
        """
