from typing import Any

from psycopg.rows import dict_row

from docverify.database.connection import get_connection
from docverify.database.serialization import timestamp, to_jsonb
from docverify.fraud.models import (
    Decision,
    FraudIndicator,
    FraudIndicatorType,
    FraudRiskScore,
    RiskLevel,
)

_COLUMNS = """
    id, tenant_id, document_id, customer_id, checksum, indicators, score,
    risk_level, primary_indicator, model_version, model_confidence, decision,
    decision_reason, review_required, reviewed_at, reviewed_by, review_notes,
    calculated_at
"""


class FraudScoreRepository:
    """Database operations for the fraud_scores table.

    Every lookup is tenant-scoped except find_by_checksum, which exists to
    detect the same file submitted under different tenants.
    """

    def create(self, score: FraudRiskScore) -> FraudRiskScore:
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO fraud_scores (
                    id, tenant_id, document_id, customer_id, checksum,
                    indicators, score, risk_level, primary_indicator,
                    model_version, model_confidence, decision, decision_reason,
                    review_required, reviewed_at, reviewed_by, review_notes,
                    calculated_at
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s,
                        %s, %s, %s, %s, %s)
                """,
                (
                    score.id,
                    score.tenant_id,
                    score.document_id,
                    score.customer_id,
                    score.checksum,
                    to_jsonb(score.indicators),
                    score.score,
                    score.risk_level.value,
                    score.primary_indicator.value if score.primary_indicator else None,
                    score.model_version,
                    score.model_confidence,
                    score.decision.value if score.decision else None,
                    score.decision_reason,
                    score.review_required,
                    score.reviewed_at,
                    score.reviewed_by,
                    score.review_notes,
                    score.calculated_at,
                ),
            )
            conn.commit()
        return score

    def find_by_id(self, score_id: str, tenant_id: str) -> FraudRiskScore | None:
        rows = self._select("id = %s AND tenant_id = %s", (score_id, tenant_id))
        return rows[0] if rows else None

    def find_latest_by_document(
        self, document_id: str, tenant_id: str
    ) -> FraudRiskScore | None:
        rows = self._select(
            "document_id = %s AND tenant_id = %s",
            (document_id, tenant_id),
            limit=1,
        )
        return rows[0] if rows else None

    def find_by_customer(self, customer_id: str, tenant_id: str) -> list[FraudRiskScore]:
        return self._select("customer_id = %s AND tenant_id = %s", (customer_id, tenant_id))

    def find_by_checksum(self, checksum: str) -> list[FraudRiskScore]:
        """All scores for files with this checksum, across every tenant."""
        return self._select("checksum = %s", (checksum,))

    def record_review(self, score: FraudRiskScore) -> bool:
        """Write the review fields once.

        Returns False when the score is missing or was already reviewed.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE fraud_scores
                    SET decision = %s,
                        decision_reason = %s,
                        review_required = %s,
                        reviewed_at = %s,
                        reviewed_by = %s,
                        review_notes = %s
                    WHERE id = %s AND tenant_id = %s AND reviewed_at IS NULL
                    """,
                    (
                        score.decision.value if score.decision else None,
                        score.decision_reason,
                        score.review_required,
                        score.reviewed_at,
                        score.reviewed_by,
                        score.review_notes,
                        score.id,
                        score.tenant_id,
                    ),
                )
                updated = cur.rowcount > 0
            conn.commit()
        return updated

    def _select(
        self, where: str, params: tuple[Any, ...], limit: int | None = None
    ) -> list[FraudRiskScore]:
        limit_clause = f"LIMIT {int(limit)}" if limit is not None else ""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS} FROM fraud_scores
                    WHERE {where}
                    ORDER BY calculated_at DESC
                    {limit_clause}
                    """,
                    params,
                )
                rows = cur.fetchall()
        return [_to_score(row) for row in rows]


def _to_indicator(raw: dict[str, Any]) -> FraudIndicator:
    return FraudIndicator(
        type=FraudIndicatorType(raw["type"]),
        severity=RiskLevel(raw["severity"]),
        description=raw["description"],
        confidence=float(raw["confidence"]),
        detected_at=timestamp(raw["detected_at"]),  # type: ignore[arg-type]
        evidence=raw.get("evidence"),
        recommendation=raw.get("recommendation"),
    )


def _to_score(row: dict[str, Any]) -> FraudRiskScore:
    primary = row["primary_indicator"]
    decision = row["decision"]
    return FraudRiskScore(
        id=str(row["id"]),
        tenant_id=row["tenant_id"],
        document_id=str(row["document_id"]),
        customer_id=row["customer_id"],
        checksum=row["checksum"],
        indicators=tuple(_to_indicator(i) for i in row["indicators"] or []),
        score=row["score"],
        risk_level=RiskLevel(row["risk_level"]),
        primary_indicator=FraudIndicatorType(primary) if primary else None,
        model_version=row["model_version"],
        model_confidence=row["model_confidence"],
        review_required=row["review_required"],
        calculated_at=row["calculated_at"],
        decision=Decision(decision) if decision else None,
        decision_reason=row["decision_reason"],
        reviewed_at=row["reviewed_at"],
        reviewed_by=row["reviewed_by"],
        review_notes=row["review_notes"],
    )
