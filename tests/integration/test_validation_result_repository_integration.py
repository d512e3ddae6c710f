import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from docverify.database.repositories.validation_result_repository import (
    ValidationResultRepository,
)
from docverify.validation.models import (
    ValidationCheck,
    ValidationCheckType,
    ValidationResult,
    ValidationStatus,
)

NOW = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


def _result(tenant_id: str, at: datetime = NOW) -> ValidationResult:
    return ValidationResult(
        id=str(uuid.uuid4()),
        tenant_id=tenant_id,
        customer_id="cust-1",
        document_ids=("doc-1", "doc-2"),
        checks=(
            ValidationCheck(
                check_type=ValidationCheckType.ADDRESS_CONSISTENCY,
                status=ValidationStatus.WARNING,
                score=0.5,
                details="Addresses may differ across documents - manual review recommended",
                source_documents=("doc-1", "doc-2"),
                source_fields=("address",),
                discrepancy="Address variations detected",
            ),
        ),
        overall_status=ValidationStatus.WARNING,
        overall_score=0.5,
        summary="Validation completed with 1 warning(s). 0/1 checks passed.",
        recommendations=("Verify address variations are for the same location",),
        requires_manual_review=False,
        validated_at=at,
    )


@pytest.mark.integration
class TestValidationResultRepository:
    def test_history_is_newest_first(self, tenant_id: str) -> None:
        repo = ValidationResultRepository()
        older = repo.create(_result(tenant_id, NOW - timedelta(hours=1)))
        newer = repo.create(_result(tenant_id))

        history = repo.find_by_customer("cust-1", tenant_id)
        latest = repo.find_latest_by_customer("cust-1", tenant_id)

        assert [r.id for r in history] == [newer.id, older.id]
        assert latest is not None
        assert latest.id == newer.id
        assert latest.checks[0].check_type is ValidationCheckType.ADDRESS_CONSISTENCY
        assert latest.checks[0].source_documents == ("doc-1", "doc-2")
        assert latest.document_ids == ("doc-1", "doc-2")

    def test_review_is_recorded_once(self, tenant_id: str) -> None:
        repo = ValidationResultRepository()
        stored = repo.create(_result(tenant_id))
        reviewed = replace(
            stored,
            overall_status=ValidationStatus.PASSED,
            reviewed_at=NOW,
            reviewed_by="officer-1",
            review_notes="Same plot",
        )

        assert repo.record_review(reviewed) is True
        assert repo.record_review(reviewed) is False

        found = repo.find_by_id(stored.id, tenant_id)
        assert found is not None
        assert found.overall_status is ValidationStatus.PASSED
        assert found.review_notes == "Same plot"

    def test_find_by_id_is_tenant_scoped(self, tenant_id: str) -> None:
        repo = ValidationResultRepository()
        stored = repo.create(_result(tenant_id))

        assert repo.find_by_id(stored.id, "another-tenant") is None
