from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from typing import Any


class VerificationStatus(StrEnum):
    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETE = "complete"


class AddressType(StrEnum):
    CURRENT = "current"
    PERMANENT = "permanent"
    WORK = "work"


@dataclass(frozen=True)
class IdNumber:
    """A government identifier; once recorded on a profile it is never rewritten."""

    type: str
    number: str
    issued_at: str | None = None
    expires_at: str | None = None
    issuing_country: str | None = None
    verified: bool = False


@dataclass(frozen=True)
class Address:
    line1: str
    city: str
    country: str
    type: AddressType = AddressType.CURRENT
    line2: str | None = None
    region: str | None = None
    postal_code: str | None = None
    verified: bool = False


@dataclass(frozen=True)
class ContactInfo:
    primary_phone: str | None = None
    secondary_phone: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class Employment:
    employer: str | None = None
    job_title: str | None = None
    employment_type: str | None = None
    monthly_income: float | None = None
    income_currency: str | None = None
    verified: bool = False


@dataclass(frozen=True)
class FieldProvenance:
    """Where the current value of a profile field came from."""

    document_id: str
    confidence: float


@dataclass(frozen=True)
class TenantIdentityProfile:
    """Merged identity of one customer within one tenant."""

    id: str
    tenant_id: str
    customer_id: str
    full_name: str | None = None
    first_name: str | None = None
    middle_name: str | None = None
    last_name: str | None = None
    date_of_birth: date | None = None
    gender: str | None = None
    nationality: str | None = None
    id_numbers: tuple[IdNumber, ...] = ()
    addresses: tuple[Address, ...] = ()
    contact_info: ContactInfo = field(default_factory=ContactInfo)
    employment: Employment | None = None
    photo_url: str | None = None
    provenance: dict[str, FieldProvenance] = field(default_factory=dict)
    completeness_score: int = 0
    verification_status: VerificationStatus = VerificationStatus.PENDING
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BadgeType(StrEnum):
    IDENTITY_VERIFIED = "identity_verified"
    ADDRESS_VERIFIED = "address_verified"
    EMPLOYMENT_VERIFIED = "employment_verified"
    INCOME_VERIFIED = "income_verified"


@dataclass(frozen=True)
class VerificationBadge:
    id: str
    tenant_id: str
    customer_id: str
    badge_type: BadgeType
    awarded_at: datetime
    identity_profile_id: str | None = None
    is_active: bool = True
    awarded_by: str | None = None
    expires_at: datetime | None = None
    revoked_at: datetime | None = None
    revoked_by: str | None = None
    revocation_reason: str | None = None
    evidence_document_ids: tuple[str, ...] = ()
    verification_method: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def is_current(self, now: datetime) -> bool:
        """Active and not past its expiry."""
        return self.is_active and (self.expires_at is None or self.expires_at > now)
