from abc import ABC, abstractmethod

from docverify.imaging.models import DuplicateRegions, ImageMetadata, IntegrityReport


class BaseImageAnalyzer(ABC):
    """Contract for image forensics adapters.

    Every method raises ImageAnalysisError when the image cannot be analysed.
    """

    @abstractmethod
    def analyze_integrity(self, content: bytes, mime_type: str) -> IntegrityReport:
        """Look for signs that the image was re-encoded or manipulated."""

    @abstractmethod
    def extract_metadata(self, content: bytes) -> ImageMetadata:
        """Read the editing software and capture/modification timestamps."""

    @abstractmethod
    def detect_duplicate_regions(self, content: bytes) -> DuplicateRegions:
        """Find regions that were copied and pasted within the same image."""
