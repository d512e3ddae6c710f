from docverify.ocr.base import BaseOcrProvider, BaseTextRecognizer
from docverify.ocr.factory import OcrProviderFactory

__all__ = ["BaseOcrProvider", "BaseTextRecognizer", "OcrProviderFactory"]
