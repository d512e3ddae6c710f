import io

import numpy as np
from PIL import ExifTags, Image

from docverify.extraction.dates import parse_timestamp
from docverify.fraud.models import FraudIndicatorType, RiskLevel
from docverify.imaging.base import BaseImageAnalyzer
from docverify.imaging.exceptions import ImageAnalysisError
from docverify.imaging.models import (
    DuplicateRegions,
    ImageFinding,
    ImageMetadata,
    IntegrityReport,
    Region,
)

_BLOCK = 16
_STEP = 8
_MAX_SIDE = 512
_QUANT = 16
_MIN_BLOCK_STD = 6.0
_MIN_MATCHES = 4


class PillowImageAnalyzer(BaseImageAnalyzer):
    """Image forensics built on Pillow and numpy.

    Clone detection hashes quantised grayscale blocks on a sliding grid; blocks
    that repeat under the same displacement vector mark a copy-moved region.
    Flat blocks (paper background, solid fills) are ignored.
    """

    def analyze_integrity(self, content: bytes, mime_type: str) -> IntegrityReport:
        findings: list[ImageFinding] = []
        try:
            with Image.open(io.BytesIO(content)) as probe:
                probe.verify()
        except Exception:
            findings.append(ImageFinding(
                type=FraudIndicatorType.IMAGE_MANIPULATION,
                description="Image data is truncated or fails to decode",
                severity=RiskLevel.MEDIUM,
                confidence=0.7,
            ))
            return IntegrityReport(is_modified=True, confidence=0.7, findings=findings)

        try:
            with Image.open(io.BytesIO(content)) as image:
                if mime_type == "image/jpeg" and "photoshop" in image.info:
                    findings.append(ImageFinding(
                        type=FraudIndicatorType.IMAGE_MANIPULATION,
                        description="Image carries Photoshop resource blocks",
                        severity=RiskLevel.MEDIUM,
                        confidence=0.6,
                    ))
                exif_size = self._exif_dimensions(image)
                if exif_size is not None and exif_size != image.size:
                    findings.append(ImageFinding(
                        type=FraudIndicatorType.IMAGE_MANIPULATION,
                        description=(
                            f"EXIF dimensions {exif_size[0]}x{exif_size[1]} differ from "
                            f"pixel dimensions {image.size[0]}x{image.size[1]}"
                        ),
                        severity=RiskLevel.MEDIUM,
                        confidence=0.65,
                    ))
        except Exception as exc:
            raise ImageAnalysisError(f"Integrity analysis failed: {exc}") from exc

        if not findings:
            return IntegrityReport(is_modified=False, confidence=0.9)
        return IntegrityReport(
            is_modified=True,
            confidence=max(f.confidence for f in findings),
            findings=findings,
        )

    def extract_metadata(self, content: bytes) -> ImageMetadata:
        try:
            with Image.open(io.BytesIO(content)) as image:
                exif = image.getexif()
                details = exif.get_ifd(ExifTags.IFD.Exif)
                software = exif.get(ExifTags.Base.Software) or image.info.get("Software")
                created = (
                    details.get(ExifTags.Base.DateTimeOriginal)
                    or details.get(ExifTags.Base.DateTimeDigitized)
                )
                return ImageMetadata(
                    software=str(software) if software else None,
                    create_date=parse_timestamp(created),
                    modify_date=parse_timestamp(exif.get(ExifTags.Base.DateTime)),
                    width=image.size[0],
                    height=image.size[1],
                )
        except Exception as exc:
            raise ImageAnalysisError(f"Metadata extraction failed: {exc}") from exc

    def detect_duplicate_regions(self, content: bytes) -> DuplicateRegions:
        try:
            with Image.open(io.BytesIO(content)) as image:
                gray = image.convert("L")
        except Exception as exc:
            raise ImageAnalysisError(f"Clone detection failed: {exc}") from exc

        scale = min(1.0, _MAX_SIDE / max(gray.size))
        if scale < 1.0:
            gray = gray.resize((int(gray.size[0] * scale), int(gray.size[1] * scale)))
        pixels = np.asarray(gray, dtype=np.uint8)
        quantised = pixels // _QUANT
        height, width = pixels.shape

        first_seen: dict[bytes, tuple[int, int]] = {}
        by_offset: dict[tuple[int, int], list[tuple[int, int]]] = {}
        for y in range(0, height - _BLOCK + 1, _STEP):
            for x in range(0, width - _BLOCK + 1, _STEP):
                if pixels[y:y + _BLOCK, x:x + _BLOCK].std() < _MIN_BLOCK_STD:
                    continue
                key = quantised[y:y + _BLOCK, x:x + _BLOCK].tobytes()
                source = first_seen.get(key)
                if source is None:
                    first_seen[key] = (x, y)
                    continue
                dx, dy = x - source[0], y - source[1]
                if abs(dx) < _BLOCK and abs(dy) < _BLOCK:
                    continue
                by_offset.setdefault((dx, dy), []).append(source)

        regions: list[Region] = []
        matched = 0
        for sources in by_offset.values():
            if len(sources) < _MIN_MATCHES:
                continue
            matched += len(sources)
            xs = [s[0] for s in sources]
            ys = [s[1] for s in sources]
            regions.append(Region(
                x=int(min(xs) / scale),
                y=int(min(ys) / scale),
                width=int((max(xs) - min(xs) + _BLOCK) / scale),
                height=int((max(ys) - min(ys) + _BLOCK) / scale),
            ))

        if not regions:
            return DuplicateRegions(found=False, confidence=0.95)
        return DuplicateRegions(
            found=True,
            confidence=round(min(0.95, 0.5 + 0.05 * matched), 2),
            regions=regions,
        )

    @staticmethod
    def _exif_dimensions(image: Image.Image) -> tuple[int, int] | None:
        details = image.getexif().get_ifd(ExifTags.IFD.Exif)
        width = details.get(ExifTags.Base.ExifImageWidth)
        height = details.get(ExifTags.Base.ExifImageHeight)
        if width is None or height is None:
            return None
        return int(width), int(height)
