import io

import pytest
from PIL import Image
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

ID_CARD_LINES = [
    "UNITED REPUBLIC OF TANZANIA",
    "NATIONAL IDENTIFICATION CARD",
    "Name: George Mwikila",
    "ID Number: 19850123456789012345",
    "Date of Birth: 23/01/1985",
    "Sex: M",
]


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a single-page PDF laid out like a national ID card."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    y = 720
    for line in ID_CARD_LINES:
        c.drawString(72, y, line)
        y -= 20
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


def _image_bytes(fmt: str) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (64, 48), color=(200, 180, 150)).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture()
def png_bytes() -> bytes:
    return _image_bytes("PNG")


@pytest.fixture()
def jpeg_bytes() -> bytes:
    return _image_bytes("JPEG")
