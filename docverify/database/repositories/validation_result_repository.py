from typing import Any

from psycopg.rows import dict_row

from docverify.database.connection import get_connection
from docverify.database.serialization import to_jsonb
from docverify.validation.models import (
    ValidationCheck,
    ValidationCheckType,
    ValidationResult,
    ValidationStatus,
)

_COLUMNS = """
    id, tenant_id, customer_id, document_ids, checks, overall_status,
    overall_score, summary, recommendations, requires_manual_review,
    reviewed_at, reviewed_by, review_notes, validated_at
"""


class ValidationResultRepository:
    """Database operations for the validation_results table (append-only history)."""

    def create(self, result: ValidationResult) -> ValidationResult:
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO validation_results (
                    id, tenant_id, customer_id, document_ids, checks,
                    overall_status, overall_score, summary, recommendations,
                    requires_manual_review, reviewed_at, reviewed_by,
                    review_notes, validated_at
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    result.id,
                    result.tenant_id,
                    result.customer_id,
                    to_jsonb(result.document_ids),
                    to_jsonb(result.checks),
                    result.overall_status.value,
                    result.overall_score,
                    result.summary,
                    to_jsonb(result.recommendations),
                    result.requires_manual_review,
                    result.reviewed_at,
                    result.reviewed_by,
                    result.review_notes,
                    result.validated_at,
                ),
            )
            conn.commit()
        return result

    def find_by_id(self, result_id: str, tenant_id: str) -> ValidationResult | None:
        rows = self._select("id = %s AND tenant_id = %s", (result_id, tenant_id), limit=1)
        return rows[0] if rows else None

    def find_by_customer(self, customer_id: str, tenant_id: str) -> list[ValidationResult]:
        return self._select("customer_id = %s AND tenant_id = %s", (customer_id, tenant_id))

    def find_latest_by_customer(
        self, customer_id: str, tenant_id: str
    ) -> ValidationResult | None:
        rows = self._select(
            "customer_id = %s AND tenant_id = %s", (customer_id, tenant_id), limit=1
        )
        return rows[0] if rows else None

    def record_review(self, result: ValidationResult) -> bool:
        """Write the review fields once; False if already reviewed or missing."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE validation_results
                    SET overall_status = %s,
                        requires_manual_review = %s,
                        reviewed_at = %s,
                        reviewed_by = %s,
                        review_notes = %s
                    WHERE id = %s AND tenant_id = %s AND reviewed_at IS NULL
                    """,
                    (
                        result.overall_status.value,
                        result.requires_manual_review,
                        result.reviewed_at,
                        result.reviewed_by,
                        result.review_notes,
                        result.id,
                        result.tenant_id,
                    ),
                )
                updated = cur.rowcount > 0
            conn.commit()
        return updated

    def _select(
        self, where: str, params: tuple[Any, ...], limit: int | None = None
    ) -> list[ValidationResult]:
        limit_clause = f"LIMIT {int(limit)}" if limit is not None else ""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS} FROM validation_results
                    WHERE {where}
                    ORDER BY validated_at DESC
                    {limit_clause}
                    """,
                    params,
                )
                rows = cur.fetchall()
        return [_to_result(row) for row in rows]


def _to_check(raw: dict[str, Any]) -> ValidationCheck:
    return ValidationCheck(
        check_type=ValidationCheckType(raw["check_type"]),
        status=ValidationStatus(raw["status"]),
        score=float(raw["score"]),
        details=raw["details"],
        source_documents=tuple(raw.get("source_documents") or ()),
        source_fields=tuple(raw.get("source_fields") or ()),
        expected_value=raw.get("expected_value"),
        actual_value=raw.get("actual_value"),
        discrepancy=raw.get("discrepancy"),
    )


def _to_result(row: dict[str, Any]) -> ValidationResult:
    return ValidationResult(
        id=str(row["id"]),
        tenant_id=row["tenant_id"],
        customer_id=row["customer_id"],
        document_ids=tuple(row["document_ids"] or ()),
        checks=tuple(_to_check(c) for c in row["checks"] or ()),
        overall_status=ValidationStatus(row["overall_status"]),
        overall_score=row["overall_score"],
        summary=row["summary"],
        recommendations=tuple(row["recommendations"] or ()),
        requires_manual_review=row["requires_manual_review"],
        validated_at=row["validated_at"],
        reviewed_at=row["reviewed_at"],
        reviewed_by=row["reviewed_by"],
        review_notes=row["review_notes"],
    )
