import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from docverify.database.repositories.badge_repository import BadgeRepository
from docverify.database.repositories.identity_profile_repository import (
    IdentityProfileRepository,
)
from docverify.identity.models import BadgeType, VerificationBadge
from docverify.logging.logger import Log
from docverify.results import ErrorCode, ServiceResult, err, ok


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BadgeService:
    """Awards and revokes verification badges on customer profiles."""

    def __init__(
        self,
        *,
        badge_repo: BadgeRepository,
        profile_repo: IdentityProfileRepository,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._badge_repo = badge_repo
        self._profile_repo = profile_repo
        self._clock = clock

    def create_badge(
        self,
        customer_id: str,
        tenant_id: str,
        badge_type: BadgeType,
        *,
        awarded_by: str | None = None,
        evidence_document_ids: tuple[str, ...] = (),
        verification_method: str | None = None,
        expires_at: datetime | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> ServiceResult[VerificationBadge]:
        """Award *badge_type*; a customer holds at most one active badge per type."""
        existing = self._badge_repo.find_active_by_type(customer_id, badge_type, tenant_id)
        if existing is not None:
            return err(ErrorCode.BADGE_EXISTS, f"Active {badge_type} badge already exists")

        profile = self._profile_repo.find_by_customer(customer_id, tenant_id)
        badge = VerificationBadge(
            id=str(uuid.uuid4()),
            tenant_id=tenant_id,
            customer_id=customer_id,
            identity_profile_id=profile.id if profile is not None else None,
            badge_type=badge_type,
            awarded_at=self._clock(),
            awarded_by=awarded_by,
            expires_at=expires_at,
            evidence_document_ids=evidence_document_ids,
            verification_method=verification_method,
            metadata=metadata or {},
        )
        saved = self._badge_repo.create(badge)
        Log.info(
            "Verification badge awarded",
            badge_id=saved.id,
            customer_id=customer_id,
            tenant_id=tenant_id,
            badge_type=badge_type,
        )
        return ok(saved)

    def revoke_badge(
        self, badge_id: str, tenant_id: str, *, revoked_by: str, reason: str
    ) -> ServiceResult[VerificationBadge]:
        badge = self._badge_repo.find_by_id(badge_id, tenant_id)
        if badge is None:
            return err(ErrorCode.BADGE_NOT_FOUND, "Badge not found")
        if not badge.is_active:
            return err(ErrorCode.BADGE_ALREADY_REVOKED, "Badge already revoked")

        revoked = replace(
            badge,
            is_active=False,
            revoked_at=self._clock(),
            revoked_by=revoked_by,
            revocation_reason=reason,
        )
        if not self._badge_repo.revoke(revoked):
            return err(ErrorCode.BADGE_ALREADY_REVOKED, "Badge already revoked")
        Log.info("Verification badge revoked", badge_id=badge_id, revoked_by=revoked_by)
        return ok(revoked)

    def get_customer_badges(
        self, customer_id: str, tenant_id: str
    ) -> ServiceResult[list[VerificationBadge]]:
        return ok(self._badge_repo.find_by_customer(customer_id, tenant_id))

    def get_active_badges(
        self, customer_id: str, tenant_id: str
    ) -> ServiceResult[list[VerificationBadge]]:
        now = self._clock()
        badges = self._badge_repo.find_by_customer(customer_id, tenant_id)
        return ok([b for b in badges if b.is_current(now)])
