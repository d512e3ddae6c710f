class OcrError(Exception):
    """Raised when an OCR provider cannot recognize a document."""
