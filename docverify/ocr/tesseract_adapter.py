import io
from collections.abc import Iterator

import pymupdf
import pytesseract
from PIL import Image, ImageSequence

from docverify.ocr.base import BaseTextRecognizer
from docverify.ocr.exceptions import OcrError
from docverify.ocr.models import RecognizedText

# Tesseract names its trained data by ISO 639-2 code.
_TESSERACT_LANGUAGES = {
    "en": "eng",
    "sw": "swa",
    "fr": "fra",
    "pt": "por",
    "ar": "ara",
}


class TesseractRecognizer(BaseTextRecognizer):
    """Recognizes scanned documents with Tesseract.

    Images are read with Pillow (every frame of a multi-page TIFF); PDFs are
    rasterised page by page with PyMuPDF first. Confidence is the mean word
    confidence reported by Tesseract.
    """

    name = "tesseract"

    def __init__(self, *, pdf_render_dpi: int = 200, psm: int = 6) -> None:
        self._pdf_render_dpi = pdf_render_dpi
        self._config = f"--psm {psm}"

    def recognize(self, content: bytes, mime_type: str, *, language: str) -> RecognizedText:
        lang = _TESSERACT_LANGUAGES.get(language, language)
        page_texts: list[str] = []
        confidences: list[float] = []
        try:
            for image in self._pages(content, mime_type):
                text, page_confidences = self._recognize_page(image, lang)
                page_texts.append(text)
                confidences.extend(page_confidences)
        except OcrError:
            raise
        except Exception as exc:
            raise OcrError(f"tesseract recognition failed: {exc}") from exc

        mean_confidence = sum(confidences) / len(confidences) if confidences else 0.0
        return RecognizedText(
            raw_text="\n".join(page_texts).strip(),
            confidence=round(mean_confidence, 4),
            page_count=len(page_texts),
            language=language,
        )

    def _pages(self, content: bytes, mime_type: str) -> Iterator[Image.Image]:
        if mime_type == "application/pdf":
            with pymupdf.open(stream=content, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                for page in doc:
                    pixmap = page.get_pixmap(dpi=self._pdf_render_dpi)
                    yield Image.open(io.BytesIO(pixmap.tobytes("png")))
            return
        if not mime_type.startswith("image/"):
            raise OcrError(f"tesseract cannot read {mime_type}")
        with Image.open(io.BytesIO(content)) as image:
            for frame in ImageSequence.Iterator(image):
                yield frame.convert("RGB")

    def _recognize_page(self, image: Image.Image, lang: str) -> tuple[str, list[float]]:
        data = pytesseract.image_to_data(
            image,
            lang=lang,
            config=self._config,
            output_type=pytesseract.Output.DICT,
        )
        lines: dict[tuple[int, int, int], list[str]] = {}
        confidences: list[float] = []
        for i, word in enumerate(data["text"]):
            word = word.strip()
            conf = float(data["conf"][i])
            if not word or conf < 0:
                continue
            key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
            lines.setdefault(key, []).append(word)
            confidences.append(conf / 100.0)
        text = "\n".join(" ".join(words) for words in lines.values())
        return text, confidences
