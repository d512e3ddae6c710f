"""Example image analyzer.

Use this module as a reference when implementing new image forensics
adapters. Implement BaseImageAnalyzer and register it in ImageAnalyzerFactory.
"""

from docverify.imaging.base import BaseImageAnalyzer
from docverify.imaging.models import DuplicateRegions, ImageMetadata, IntegrityReport


class ExampleImageAnalyzer(BaseImageAnalyzer):
    """Reports every image as clean. No decoding is performed."""

    def analyze_integrity(self, content: bytes, mime_type: str) -> IntegrityReport:
        _ = content, mime_type
        return IntegrityReport(is_modified=False, confidence=0.92)

    def extract_metadata(self, content: bytes) -> ImageMetadata:
        _ = content
        return ImageMetadata(width=1200, height=800)

    def detect_duplicate_regions(self, content: bytes) -> DuplicateRegions:
        _ = content
        return DuplicateRegions(found=False, confidence=0.95)
