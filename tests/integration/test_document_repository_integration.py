import uuid
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from docverify.database.repositories.document_repository import DocumentRepository
from docverify.documents.exceptions import DocumentNotFoundError
from docverify.documents.models import DocumentStatus, DocumentType, DocumentUpload


@pytest.mark.integration
class TestDocumentRepository:
    def test_create_and_find_by_id(self, seed_document: DocumentUpload) -> None:
        found = DocumentRepository().find_by_id(seed_document.id, seed_document.tenant_id)

        assert found.id == seed_document.id
        assert found.document_type is DocumentType.NATIONAL_ID
        assert found.status is DocumentStatus.UPLOADED
        assert found.metadata == {}
        assert found.uploaded_at is not None

    def test_find_by_id_is_tenant_scoped(self, seed_document: DocumentUpload) -> None:
        with pytest.raises(DocumentNotFoundError):
            DocumentRepository().find_by_id(seed_document.id, "another-tenant")

    def test_find_many_skips_unknown_ids(self, document_factory) -> None:
        first = document_factory()
        second = document_factory(document_type=DocumentType.UTILITY_BILL)

        found = DocumentRepository().find_many(
            [first.id, second.id, str(uuid.uuid4())], first.tenant_id
        )

        assert {d.id for d in found} == {first.id, second.id}

    def test_find_by_customer(self, document_factory) -> None:
        mine = document_factory(customer_id="cust-a")
        document_factory(customer_id="cust-b")

        found = DocumentRepository().find_by_customer("cust-a", mine.tenant_id)

        assert [d.id for d in found] == [mine.id]

    def test_update_persists_status_and_metadata(self, seed_document: DocumentUpload) -> None:
        repo = DocumentRepository()
        now = datetime(2025, 2, 1, tzinfo=timezone.utc)
        updated = replace(
            seed_document.with_status(DocumentStatus.OCR_COMPLETED, now),
            metadata={"ocr_extraction_id": "x"},
            processed_at=now,
        )

        repo.update(updated)

        found = repo.find_by_id(seed_document.id, seed_document.tenant_id)
        assert found.status is DocumentStatus.OCR_COMPLETED
        assert found.metadata == {"ocr_extraction_id": "x"}
        assert found.processed_at == now

    def test_update_missing_document_raises(self, seed_document: DocumentUpload) -> None:
        missing = replace(seed_document, id=str(uuid.uuid4()))

        with pytest.raises(DocumentNotFoundError):
            DocumentRepository().update(missing)
