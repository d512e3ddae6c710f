from typing import Any

from psycopg.rows import dict_row

from docverify.database.connection import get_connection
from docverify.database.serialization import to_jsonb
from docverify.extraction.models import (
    BoundingBox,
    ExtractedField,
    FieldName,
    FieldValidationStatus,
)
from docverify.ocr.models import OcrExtractionResult, OcrStatus

_COLUMNS = """
    id, document_id, tenant_id, provider, status, raw_text, fields,
    structured_data, confidence, language, page_count, processing_time_ms,
    error, processed_at
"""


class ExtractionRepository:
    """Database operations for the ocr_extractions table.

    Rows are append-only: every OCR invocation writes a new one.
    """

    def create(self, result: OcrExtractionResult) -> OcrExtractionResult:
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO ocr_extractions (
                    id, document_id, tenant_id, provider, status, raw_text,
                    fields, structured_data, confidence, language, page_count,
                    processing_time_ms, error, processed_at
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    result.id,
                    result.document_id,
                    result.tenant_id,
                    result.provider,
                    result.status.value,
                    result.raw_text,
                    to_jsonb(result.fields),
                    to_jsonb(result.structured_data),
                    result.confidence,
                    result.language,
                    result.page_count,
                    result.processing_time_ms,
                    result.error,
                    result.processed_at,
                ),
            )
            conn.commit()
        return result

    def find_latest(self, document_id: str, tenant_id: str) -> OcrExtractionResult | None:
        """Most recent extraction for a document, whatever its status."""
        return self._find_latest(document_id, tenant_id, completed_only=False)

    def find_latest_completed(
        self, document_id: str, tenant_id: str
    ) -> OcrExtractionResult | None:
        return self._find_latest(document_id, tenant_id, completed_only=True)

    def _find_latest(
        self, document_id: str, tenant_id: str, *, completed_only: bool
    ) -> OcrExtractionResult | None:
        status_filter = "AND status = 'completed'" if completed_only else ""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS} FROM ocr_extractions
                    WHERE document_id = %s AND tenant_id = %s {status_filter}
                    ORDER BY processed_at DESC
                    LIMIT 1
                    """,
                    (document_id, tenant_id),
                )
                row = cur.fetchone()
        return _to_result(row) if row is not None else None


def _to_field(raw: dict[str, Any]) -> ExtractedField:
    box = raw.get("bounding_box")
    return ExtractedField(
        field_name=FieldName(raw["field_name"]),
        value=raw.get("value"),
        confidence=float(raw["confidence"]),
        bounding_box=BoundingBox(**box) if box else None,
        normalized=bool(raw.get("normalized", False)),
        validation_status=FieldValidationStatus(
            raw.get("validation_status", FieldValidationStatus.UNCERTAIN)
        ),
    )


def _to_result(row: dict[str, Any]) -> OcrExtractionResult:
    return OcrExtractionResult(
        id=str(row["id"]),
        document_id=str(row["document_id"]),
        tenant_id=row["tenant_id"],
        provider=row["provider"],
        status=OcrStatus(row["status"]),
        raw_text=row["raw_text"],
        fields=tuple(_to_field(f) for f in row["fields"] or []),
        structured_data=row["structured_data"] or {},
        confidence=row["confidence"],
        language=row["language"],
        page_count=row["page_count"],
        processing_time_ms=row["processing_time_ms"],
        error=row["error"],
        processed_at=row["processed_at"],
    )
