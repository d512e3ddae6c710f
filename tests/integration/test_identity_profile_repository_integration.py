import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import date

import pytest

from docverify.database.repositories.identity_profile_repository import (
    IdentityProfileRepository,
)
from docverify.identity.models import (
    Address,
    ContactInfo,
    Employment,
    FieldProvenance,
    IdNumber,
    TenantIdentityProfile,
    VerificationStatus,
)


def _new_profile(tenant_id: str, customer_id: str) -> TenantIdentityProfile:
    return TenantIdentityProfile(id=str(uuid.uuid4()), tenant_id=tenant_id, customer_id=customer_id)


@pytest.mark.integration
class TestIdentityProfileRepository:
    def test_first_merge_creates_profile(self, tenant_id: str) -> None:
        repo = IdentityProfileRepository()

        def merge(existing: TenantIdentityProfile | None) -> TenantIdentityProfile:
            assert existing is None
            return replace(
                _new_profile(tenant_id, "cust-1"),
                full_name="Asha Juma",
                date_of_birth=date(1990, 1, 1),
                id_numbers=(IdNumber(type="national_id", number="19900101123456789012"),),
                addresses=(Address(line1="Plot 12", city="Dar es Salaam", country="TZ"),),
                contact_info=ContactInfo(primary_phone="+255712345678"),
                employment=Employment(employer="Acme", monthly_income=1500000.0),
                provenance={"full_name": FieldProvenance(document_id="doc-1", confidence=0.9)},
                completeness_score=70,
                verification_status=VerificationStatus.PARTIAL,
            )

        repo.merge_for_customer(tenant_id, "cust-1", merge)
        stored = repo.find_by_customer("cust-1", tenant_id)

        assert stored is not None
        assert stored.full_name == "Asha Juma"
        assert stored.date_of_birth == date(1990, 1, 1)
        assert stored.id_numbers[0].number == "19900101123456789012"
        assert stored.addresses[0].city == "Dar es Salaam"
        assert stored.contact_info.primary_phone == "+255712345678"
        assert stored.employment.employer == "Acme"
        assert stored.provenance["full_name"].document_id == "doc-1"
        assert stored.verification_status is VerificationStatus.PARTIAL
        assert stored.created_at is not None

    def test_find_by_customer_is_tenant_scoped(self, tenant_id: str) -> None:
        repo = IdentityProfileRepository()
        repo.merge_for_customer(tenant_id, "cust-1", lambda _: _new_profile(tenant_id, "cust-1"))

        assert repo.find_by_customer("cust-1", "another-tenant") is None

    def test_concurrent_merges_are_serialised(self, tenant_id: str) -> None:
        repo = IdentityProfileRepository()
        start = threading.Barrier(2)

        def add_id(number: str) -> None:
            def merge(existing: TenantIdentityProfile | None) -> TenantIdentityProfile:
                profile = existing or _new_profile(tenant_id, "cust-1")
                return replace(
                    profile,
                    id_numbers=(*profile.id_numbers, IdNumber(type="passport", number=number)),
                )

            start.wait()
            repo.merge_for_customer(tenant_id, "cust-1", merge)

        with ThreadPoolExecutor(max_workers=2) as pool:
            list(pool.map(add_id, ["AB1234567", "CD7654321"]))

        stored = repo.find_by_customer("cust-1", tenant_id)
        assert stored is not None
        assert sorted(i.number for i in stored.id_numbers) == ["AB1234567", "CD7654321"]
