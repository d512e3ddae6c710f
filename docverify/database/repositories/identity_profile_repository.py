from collections.abc import Callable
from typing import Any

import psycopg
from psycopg.rows import dict_row

from docverify.database.connection import get_connection
from docverify.database.serialization import to_jsonb
from docverify.identity.models import (
    Address,
    AddressType,
    ContactInfo,
    Employment,
    FieldProvenance,
    IdNumber,
    TenantIdentityProfile,
    VerificationStatus,
)

_COLUMNS = """
    id, tenant_id, customer_id, full_name, first_name, middle_name, last_name,
    date_of_birth, gender, nationality, id_numbers, addresses, contact_info,
    employment, photo_url, provenance, completeness_score, verification_status,
    created_at, updated_at
"""

MergeFn = Callable[[TenantIdentityProfile | None], TenantIdentityProfile]


class IdentityProfileRepository:
    """Database operations for the identity_profiles table."""

    def find_by_customer(
        self, customer_id: str, tenant_id: str
    ) -> TenantIdentityProfile | None:
        with get_connection() as conn:
            return self._select(conn, customer_id, tenant_id)

    def merge_for_customer(
        self, tenant_id: str, customer_id: str, merge: MergeFn
    ) -> TenantIdentityProfile:
        """Read, merge and write a customer's profile as one serialised unit.

        A transaction-scoped advisory lock keyed on the tenant and customer
        makes concurrent merges for the same customer run one after another.
        *merge* receives the stored profile (None on first build) and returns
        the profile to store.
        """
        with get_connection() as conn:
            with conn.transaction():
                conn.execute(
                    "SELECT pg_advisory_xact_lock(hashtextextended(%s, 0))",
                    (f"identity_profile:{tenant_id}:{customer_id}",),
                )
                existing = self._select(conn, customer_id, tenant_id)
                profile = merge(existing)
                self._upsert(conn, profile)
        return profile

    @staticmethod
    def _select(
        conn: psycopg.Connection[Any], customer_id: str, tenant_id: str
    ) -> TenantIdentityProfile | None:
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM identity_profiles
                WHERE customer_id = %s AND tenant_id = %s
                """,
                (customer_id, tenant_id),
            )
            row = cur.fetchone()
        return _to_profile(row) if row is not None else None

    @staticmethod
    def _upsert(conn: psycopg.Connection[Any], profile: TenantIdentityProfile) -> None:
        conn.execute(
            """
            INSERT INTO identity_profiles (
                id, tenant_id, customer_id, full_name, first_name, middle_name,
                last_name, date_of_birth, gender, nationality, id_numbers,
                addresses, contact_info, employment, photo_url, provenance,
                completeness_score, verification_status, created_at, updated_at
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s,
                    %s, %s, %s, COALESCE(%s, NOW()), COALESCE(%s, NOW()))
            ON CONFLICT (tenant_id, customer_id) DO UPDATE SET
                full_name = EXCLUDED.full_name,
                first_name = EXCLUDED.first_name,
                middle_name = EXCLUDED.middle_name,
                last_name = EXCLUDED.last_name,
                date_of_birth = EXCLUDED.date_of_birth,
                gender = EXCLUDED.gender,
                nationality = EXCLUDED.nationality,
                id_numbers = EXCLUDED.id_numbers,
                addresses = EXCLUDED.addresses,
                contact_info = EXCLUDED.contact_info,
                employment = EXCLUDED.employment,
                photo_url = EXCLUDED.photo_url,
                provenance = EXCLUDED.provenance,
                completeness_score = EXCLUDED.completeness_score,
                verification_status = EXCLUDED.verification_status,
                updated_at = EXCLUDED.updated_at
            """,
            (
                profile.id,
                profile.tenant_id,
                profile.customer_id,
                profile.full_name,
                profile.first_name,
                profile.middle_name,
                profile.last_name,
                profile.date_of_birth,
                profile.gender,
                profile.nationality,
                to_jsonb(profile.id_numbers),
                to_jsonb(profile.addresses),
                to_jsonb(profile.contact_info),
                to_jsonb(profile.employment) if profile.employment is not None else None,
                profile.photo_url,
                to_jsonb(profile.provenance),
                profile.completeness_score,
                profile.verification_status.value,
                profile.created_at,
                profile.updated_at,
            ),
        )


def _to_profile(row: dict[str, Any]) -> TenantIdentityProfile:
    employment = row["employment"]
    return TenantIdentityProfile(
        id=str(row["id"]),
        tenant_id=row["tenant_id"],
        customer_id=row["customer_id"],
        full_name=row["full_name"],
        first_name=row["first_name"],
        middle_name=row["middle_name"],
        last_name=row["last_name"],
        date_of_birth=row["date_of_birth"],
        gender=row["gender"],
        nationality=row["nationality"],
        id_numbers=tuple(IdNumber(**item) for item in row["id_numbers"] or []),
        addresses=tuple(
            Address(**{**item, "type": AddressType(item.get("type", AddressType.CURRENT))})
            for item in row["addresses"] or []
        ),
        contact_info=ContactInfo(**(row["contact_info"] or {})),
        employment=Employment(**employment) if employment else None,
        photo_url=row["photo_url"],
        provenance={
            key: FieldProvenance(**value) for key, value in (row["provenance"] or {}).items()
        },
        completeness_score=row["completeness_score"],
        verification_status=VerificationStatus(row["verification_status"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
