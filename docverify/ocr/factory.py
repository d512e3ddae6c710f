from docverify.config.settings import Settings
from docverify.extraction.factory import FieldExtractorFactory
from docverify.ocr.base import BaseOcrProvider, BaseTextRecognizer
from docverify.ocr.example_adapter import ExampleRecognizer
from docverify.ocr.pdfplumber_adapter import PdfPlumberRecognizer
from docverify.ocr.provider import OcrProvider
from docverify.ocr.pymupdf_adapter import PyMuPdfRecognizer
from docverify.ocr.tesseract_adapter import TesseractRecognizer


class OcrProviderFactory:
    """Creates the OCR provider based on settings."""

    ENGINES: tuple[str, ...] = ("tesseract", "pdfplumber", "pymupdf", "example")

    @classmethod
    def create(cls, settings: Settings) -> BaseOcrProvider:
        return OcrProvider(
            recognizer=cls.create_recognizer(settings),
            extractor=FieldExtractorFactory.create(settings),
        )

    @classmethod
    def create_recognizer(cls, settings: Settings) -> BaseTextRecognizer:
        engine = settings.ocr_engine.lower()
        if engine == "tesseract":
            return TesseractRecognizer(pdf_render_dpi=settings.ocr_pdf_render_dpi)
        if engine == "pdfplumber":
            return PdfPlumberRecognizer()
        if engine == "pymupdf":
            return PyMuPdfRecognizer()
        if engine == "example":
            return ExampleRecognizer()
        raise ValueError(f"Unknown OCR engine '{engine}'. Choose from: {list(cls.ENGINES)}")
