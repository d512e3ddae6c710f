from typing import Any

from psycopg.rows import dict_row

from docverify.database.connection import get_connection
from docverify.database.serialization import to_jsonb
from docverify.identity.models import BadgeType, VerificationBadge

_COLUMNS = """
    id, tenant_id, customer_id, identity_profile_id, badge_type, is_active,
    awarded_at, awarded_by, expires_at, revoked_at, revoked_by,
    revocation_reason, evidence_document_ids, verification_method, metadata
"""


class BadgeRepository:
    """Database operations for the verification_badges table."""

    def create(self, badge: VerificationBadge) -> VerificationBadge:
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO verification_badges (
                    id, tenant_id, customer_id, identity_profile_id, badge_type,
                    is_active, awarded_at, awarded_by, expires_at, revoked_at,
                    revoked_by, revocation_reason, evidence_document_ids,
                    verification_method, metadata
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    badge.id,
                    badge.tenant_id,
                    badge.customer_id,
                    badge.identity_profile_id,
                    badge.badge_type.value,
                    badge.is_active,
                    badge.awarded_at,
                    badge.awarded_by,
                    badge.expires_at,
                    badge.revoked_at,
                    badge.revoked_by,
                    badge.revocation_reason,
                    to_jsonb(badge.evidence_document_ids),
                    badge.verification_method,
                    to_jsonb(badge.metadata),
                ),
            )
            conn.commit()
        return badge

    def find_by_id(self, badge_id: str, tenant_id: str) -> VerificationBadge | None:
        rows = self._select("id = %s AND tenant_id = %s", (badge_id, tenant_id))
        return rows[0] if rows else None

    def find_by_customer(self, customer_id: str, tenant_id: str) -> list[VerificationBadge]:
        return self._select("customer_id = %s AND tenant_id = %s", (customer_id, tenant_id))

    def find_active_by_type(
        self, customer_id: str, badge_type: BadgeType, tenant_id: str
    ) -> VerificationBadge | None:
        rows = self._select(
            "customer_id = %s AND badge_type = %s AND tenant_id = %s AND is_active",
            (customer_id, badge_type.value, tenant_id),
        )
        return rows[0] if rows else None

    def revoke(self, badge: VerificationBadge) -> bool:
        """Persist the revocation; False if the badge was no longer active."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE verification_badges
                    SET is_active = FALSE,
                        revoked_at = %s,
                        revoked_by = %s,
                        revocation_reason = %s
                    WHERE id = %s AND tenant_id = %s AND is_active
                    """,
                    (
                        badge.revoked_at,
                        badge.revoked_by,
                        badge.revocation_reason,
                        badge.id,
                        badge.tenant_id,
                    ),
                )
                updated = cur.rowcount > 0
            conn.commit()
        return updated

    def _select(self, where: str, params: tuple[Any, ...]) -> list[VerificationBadge]:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM verification_badges WHERE {where} "
                    "ORDER BY awarded_at DESC",
                    params,
                )
                rows = cur.fetchall()
        return [_to_badge(row) for row in rows]


def _to_badge(row: dict[str, Any]) -> VerificationBadge:
    profile_id = row["identity_profile_id"]
    return VerificationBadge(
        id=str(row["id"]),
        tenant_id=row["tenant_id"],
        customer_id=row["customer_id"],
        identity_profile_id=str(profile_id) if profile_id is not None else None,
        badge_type=BadgeType(row["badge_type"]),
        is_active=row["is_active"],
        awarded_at=row["awarded_at"],
        awarded_by=row["awarded_by"],
        expires_at=row["expires_at"],
        revoked_at=row["revoked_at"],
        revoked_by=row["revoked_by"],
        revocation_reason=row["revocation_reason"],
        evidence_document_ids=tuple(row["evidence_document_ids"] or []),
        verification_method=row["verification_method"],
        metadata=row["metadata"] or {},
    )
