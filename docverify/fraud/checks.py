"""Independent fraud signals.

Each check inspects one aspect of a document and returns zero or more
indicators. Optional signals (image forensics, duplicate lookup) log and
return nothing when their collaborator fails.
"""

from datetime import datetime

import psycopg

from docverify.database.repositories.fraud_score_repository import FraudScoreRepository
from docverify.documents.models import DocumentUpload
from docverify.extraction.dates import parse_date
from docverify.fraud.models import FraudIndicator, FraudIndicatorType, RiskLevel
from docverify.imaging.base import BaseImageAnalyzer
from docverify.imaging.exceptions import ImageAnalysisError
from docverify.logging.logger import Log

MIN_IDENTITY_FILE_SIZE = 50_000
MAX_FILE_SIZE = 20_000_000
EDITING_SOFTWARE = ("photoshop", "gimp", "paint", "pixelmator")
CHECKSUM_EVIDENCE_PREFIX = 12

MAGIC_BYTES: dict[str, tuple[bytes, ...]] = {
    "application/pdf": (b"%PDF",),
    "image/jpeg": (b"\xff\xd8\xff",),
    "image/png": (b"\x89PNG",),
    "image/gif": (b"GIF8",),
    "image/webp": (b"RIFF",),
    "image/tiff": (b"II*\x00", b"MM\x00*"),
}

EXPECTED_EXTENSIONS: dict[str, tuple[str, ...]] = {
    "application/pdf": (".pdf",),
    "image/jpeg": (".jpg", ".jpeg"),
    "image/png": (".png",),
    "image/tiff": (".tif", ".tiff"),
    "image/webp": (".webp",),
}


def check_metadata_anomalies(
    document: DocumentUpload,
    content: bytes,
    image_analyzer: BaseImageAnalyzer | None,
    now: datetime,
) -> list[FraudIndicator]:
    indicators: list[FraudIndicator] = []
    size = document.file_size

    if size == 0:
        indicators.append(FraudIndicator(
            type=FraudIndicatorType.SUSPICIOUS_FORMAT,
            severity=RiskLevel.CRITICAL,
            description="Document has zero file size",
            confidence=1.0,
            evidence=f"Reported size: {size} bytes",
            recommendation="Reject document and request re-upload",
            detected_at=now,
        ))
    if document.document_type.is_identity and size < MIN_IDENTITY_FILE_SIZE:
        indicators.append(FraudIndicator(
            type=FraudIndicatorType.UNUSUAL_FILE_SIZE,
            severity=RiskLevel.MEDIUM,
            description="ID document file size is unusually small",
            confidence=0.7,
            evidence=f"File size: {size} bytes (typical: >100KB)",
            recommendation="Request higher quality scan",
            detected_at=now,
        ))
    if size > MAX_FILE_SIZE:
        indicators.append(FraudIndicator(
            type=FraudIndicatorType.UNUSUAL_FILE_SIZE,
            severity=RiskLevel.LOW,
            description="Document file size is unusually large",
            confidence=0.5,
            evidence=f"File size: {size / 1_000_000:.2f}MB",
            recommendation="Review for hidden embedded content",
            detected_at=now,
        ))

    if image_analyzer is None or not document.is_image:
        return indicators
    try:
        metadata = image_analyzer.extract_metadata(content)
    except ImageAnalysisError as exc:
        Log.warning("Failed to extract image metadata", document_id=document.id, error=exc)
        return indicators

    if metadata.software and any(s in metadata.software.lower() for s in EDITING_SOFTWARE):
        indicators.append(FraudIndicator(
            type=FraudIndicatorType.METADATA_TAMPERING,
            severity=RiskLevel.HIGH,
            description="Document shows signs of editing software",
            confidence=0.85,
            evidence=f"Software: {metadata.software}",
            recommendation="Manual review required - potential document manipulation",
            detected_at=now,
        ))

    created, modified = metadata.create_date, metadata.modify_date
    if created is not None and modified is not None and (modified - created).days > 1:
        indicators.append(FraudIndicator(
            type=FraudIndicatorType.EXIF_ANOMALY,
            severity=RiskLevel.MEDIUM,
            description="Document modification date significantly after creation",
            confidence=0.6,
            evidence=f"Created: {created.isoformat()}, Modified: {modified.isoformat()}",
            recommendation="Verify document authenticity",
            detected_at=now,
        ))
    return indicators


def check_file_integrity(content: bytes, mime_type: str, now: datetime) -> list[FraudIndicator]:
    """Compare the leading magic bytes with the claimed MIME type."""
    signatures = MAGIC_BYTES.get(mime_type)
    if signatures is None or any(content.startswith(sig) for sig in signatures):
        return []
    head = content[: max(len(sig) for sig in signatures)]
    return [FraudIndicator(
        type=FraudIndicatorType.SUSPICIOUS_FORMAT,
        severity=RiskLevel.CRITICAL,
        description="File signature does not match claimed MIME type",
        confidence=0.95,
        evidence=f"Claimed: {mime_type}, Actual magic bytes: {head.hex()}",
        recommendation="Reject document - potential file spoofing",
        detected_at=now,
    )]


def check_cross_tenant_duplicates(
    document: DocumentUpload,
    fraud_repo: FraudScoreRepository,
    enabled: bool,
    now: datetime,
) -> list[FraudIndicator]:
    """Flag a checksum already scored for another customer or tenant.

    Matches are counted by distinct document so that re-analysing the same
    foreign document does not inflate the count. Evidence never names the
    other tenants or customers.
    """
    if not enabled or not document.checksum:
        return []
    try:
        matches = fraud_repo.find_by_checksum(document.checksum)
    except psycopg.Error as exc:
        Log.warning("Cross-tenant duplicate check failed", document_id=document.id, error=exc)
        return []

    foreign = [
        m for m in matches
        if m.document_id != document.id
        and (m.tenant_id != document.tenant_id or m.customer_id != document.customer_id)
    ]
    document_count = len({m.document_id for m in foreign})
    if document_count == 0:
        return []
    other_tenants = len({m.tenant_id for m in foreign if m.tenant_id != document.tenant_id})
    return [FraudIndicator(
        type=FraudIndicatorType.CROSS_TENANT_DUPLICATE,
        severity=RiskLevel.CRITICAL if document_count > 2 else RiskLevel.HIGH,
        description=f"Document appears in {document_count} other customer profiles",
        confidence=0.98,
        evidence=(
            f"Checksum {document.checksum[:CHECKSUM_EVIDENCE_PREFIX]} matched "
            f"{document_count} other document(s) across {other_tenants} other tenant(s)"
        ),
        recommendation=(
            "Investigate potential identity fraud - same document used by multiple applicants"
        ),
        detected_at=now,
    )]


def check_format_anomalies(document: DocumentUpload, now: datetime) -> list[FraudIndicator]:
    expected = EXPECTED_EXTENSIONS.get(document.mime_type)
    if expected is None:
        return []
    extension = document.file_extension
    if extension in expected:
        return []
    return [FraudIndicator(
        type=FraudIndicatorType.SUSPICIOUS_FORMAT,
        severity=RiskLevel.MEDIUM,
        description="File extension does not match MIME type",
        confidence=0.8,
        evidence=f"Extension: {extension or '(none)'}, MIME type: {document.mime_type}",
        recommendation="Verify file is what it claims to be",
        detected_at=now,
    )]


def check_date_consistency(document: DocumentUpload, now: datetime) -> list[FraudIndicator]:
    """Check the issue and expiry dates recorded in document metadata."""
    indicators: list[FraudIndicator] = []
    raw_issued = document.metadata.get("issued_date")
    raw_expires = document.metadata.get("expires_at")
    issued = parse_date(raw_issued)
    expires = parse_date(raw_expires)
    today = now.date()

    if issued is not None and expires is not None and expires <= issued:
        indicators.append(FraudIndicator(
            type=FraudIndicatorType.DATE_INCONSISTENCY,
            severity=RiskLevel.HIGH,
            description="Document expiry date is before or equal to issue date",
            confidence=0.95,
            evidence=f"Issued: {raw_issued}, Expires: {raw_expires}",
            recommendation="Reject document - impossible date combination",
            detected_at=now,
        ))
    if expires is not None and expires < today:
        indicators.append(FraudIndicator(
            type=FraudIndicatorType.EXPIRED_DOCUMENT,
            severity=RiskLevel.HIGH,
            description="Document has expired",
            confidence=1.0,
            evidence=f"Expired on: {raw_expires}",
            recommendation="Request current valid document",
            detected_at=now,
        ))
    if issued is not None and issued > today:
        indicators.append(FraudIndicator(
            type=FraudIndicatorType.DATE_INCONSISTENCY,
            severity=RiskLevel.CRITICAL,
            description="Document issue date is in the future",
            confidence=0.98,
            evidence=f"Issue date: {raw_issued}",
            recommendation="Reject document - fraudulent dates",
            detected_at=now,
        ))
    return indicators


def check_image_integrity(
    content: bytes,
    mime_type: str,
    image_analyzer: BaseImageAnalyzer,
    now: datetime,
) -> list[FraudIndicator]:
    indicators: list[FraudIndicator] = []
    try:
        report = image_analyzer.analyze_integrity(content, mime_type)
        duplicates = image_analyzer.detect_duplicate_regions(content)
    except ImageAnalysisError as exc:
        Log.warning("Image integrity analysis failed", error=exc)
        return indicators

    if report.is_modified:
        for finding in report.findings:
            indicators.append(FraudIndicator(
                type=finding.type,
                severity=finding.severity,
                description=finding.description,
                confidence=finding.confidence,
                recommendation="Manual review required",
                detected_at=now,
            ))

    if duplicates.found and duplicates.regions:
        regions = ", ".join(
            f"({r.x},{r.y} {r.width}x{r.height})" for r in duplicates.regions
        )
        indicators.append(FraudIndicator(
            type=FraudIndicatorType.COPY_PASTE_DETECTED,
            severity=RiskLevel.HIGH,
            description=f"Detected {len(duplicates.regions)} potentially cloned regions",
            confidence=duplicates.confidence,
            evidence=f"Regions: {regions}",
            recommendation="Document may have been digitally altered - manual review required",
            detected_at=now,
        ))
    return indicators
