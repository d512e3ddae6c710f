import os
import uuid
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from docverify.config.settings import Settings
from docverify.database.connection import apply_schema, close_pool, get_connection, init_pool
from docverify.database.models import JobRecord
from docverify.database.repositories.document_repository import DocumentRepository
from docverify.database.repositories.job_repository import JobRepository
from docverify.documents.models import DocumentStatus, DocumentType, DocumentUpload

# Child tables first so foreign keys never block the cleanup.
_TENANT_TABLES = (
    "verification_jobs",
    "fraud_scores",
    "ocr_extractions",
    "validation_results",
    "verification_badges",
    "identity_profiles",
    "document_uploads",
)


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "docverify_test")
    return Settings(ocr_engine="pdfplumber", field_extraction_provider="rules")


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        apply_schema()
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def tenant_id(integration_pool: None) -> Generator[str, None, None]:
    """A fresh tenant per test; every row written under it is removed afterwards."""
    tenant = f"test-tenant-{uuid.uuid4()}"
    yield tenant
    with get_connection() as conn:
        with conn.cursor() as cur:
            for table in _TENANT_TABLES:
                cur.execute(f"DELETE FROM {table} WHERE tenant_id = %s", (tenant,))
        conn.commit()


@pytest.fixture
def files_root(tmp_path: Path) -> Path:
    return tmp_path


def _make_document(
    tenant_id: str,
    *,
    customer_id: str = "cust-1",
    document_type: DocumentType = DocumentType.NATIONAL_ID,
    checksum: str | None = None,
    file_size: int = 1024,
) -> DocumentUpload:
    document_id = str(uuid.uuid4())
    return DocumentUpload(
        id=document_id,
        tenant_id=tenant_id,
        customer_id=customer_id,
        document_type=document_type,
        status=DocumentStatus.UPLOADED,
        original_file_name="id.pdf",
        mime_type="application/pdf",
        file_size=file_size,
        storage_key=f"{document_id}.pdf",
        checksum=checksum or uuid.uuid4().hex * 2,
    )


@pytest.fixture
def document_factory(tenant_id: str) -> Callable[..., DocumentUpload]:
    """Insert a document under the test tenant; keyword arguments override defaults."""

    def create(**kwargs: Any) -> DocumentUpload:
        return DocumentRepository().create(_make_document(tenant_id, **kwargs))

    return create


@pytest.fixture
def seed_document(tenant_id: str) -> DocumentUpload:
    return DocumentRepository().create(_make_document(tenant_id))


@pytest.fixture
def seed_job(seed_document: DocumentUpload, test_settings: Settings) -> JobRecord:
    repo = JobRepository(max_attempts=test_settings.max_job_attempts)
    job_id = repo.enqueue(seed_document.id, seed_document.tenant_id)
    job = repo.find_by_id(job_id)
    assert job is not None
    return job


@pytest.fixture
def sample_pdf_on_disk(
    seed_document: DocumentUpload,
    files_root: Path,
    sample_pdf_bytes: bytes,
) -> tuple[DocumentUpload, Path]:
    path = files_root / seed_document.tenant_id / seed_document.storage_key
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(sample_pdf_bytes)
    return seed_document, files_root
