from typing import Any

from psycopg.rows import dict_row

from docverify.database.connection import get_connection
from docverify.database.serialization import to_jsonb
from docverify.documents.exceptions import DocumentNotFoundError
from docverify.documents.models import DocumentStatus, DocumentType, DocumentUpload

_COLUMNS = """
    id, tenant_id, customer_id, document_type, status, original_file_name,
    mime_type, file_size, storage_key, checksum, metadata, processed_at,
    uploaded_at, updated_at
"""


class DocumentRepository:
    """Database operations for the document_uploads table."""

    def find_by_id(self, document_id: str, tenant_id: str) -> DocumentUpload:
        """Find a tenant's document by ID.

        Raises:
            DocumentNotFoundError: if the tenant has no document with this ID.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM document_uploads WHERE id = %s AND tenant_id = %s",
                    (document_id, tenant_id),
                )
                row = cur.fetchone()

        if row is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return _to_document(row)

    def find_many(self, document_ids: list[str], tenant_id: str) -> list[DocumentUpload]:
        """Return the tenant's documents among *document_ids*; unknown IDs are skipped."""
        if not document_ids:
            return []
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS} FROM document_uploads
                    WHERE id = ANY(%s::text[]) AND tenant_id = %s
                    ORDER BY uploaded_at, id
                    """,
                    (document_ids, tenant_id),
                )
                rows = cur.fetchall()
        return [_to_document(row) for row in rows]

    def find_by_customer(self, customer_id: str, tenant_id: str) -> list[DocumentUpload]:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS} FROM document_uploads
                    WHERE customer_id = %s AND tenant_id = %s
                    ORDER BY uploaded_at, id
                    """,
                    (customer_id, tenant_id),
                )
                rows = cur.fetchall()
        return [_to_document(row) for row in rows]

    def create(self, document: DocumentUpload) -> DocumentUpload:
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO document_uploads (
                    id, tenant_id, customer_id, document_type, status,
                    original_file_name, mime_type, file_size, storage_key,
                    checksum, metadata, processed_at, uploaded_at, updated_at
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s,
                        COALESCE(%s, NOW()), COALESCE(%s, NOW()))
                """,
                (
                    document.id,
                    document.tenant_id,
                    document.customer_id,
                    document.document_type.value,
                    document.status.value,
                    document.original_file_name,
                    document.mime_type,
                    document.file_size,
                    document.storage_key,
                    document.checksum,
                    to_jsonb(document.metadata),
                    document.processed_at,
                    document.uploaded_at,
                    document.updated_at,
                ),
            )
            conn.commit()
        return document

    def update(self, document: DocumentUpload) -> None:
        """Persist the mutable columns of *document*.

        Raises:
            DocumentNotFoundError: if no document with this ID exists for the tenant.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE document_uploads
                    SET status = %s,
                        metadata = %s,
                        processed_at = %s,
                        updated_at = COALESCE(%s, NOW())
                    WHERE id = %s AND tenant_id = %s
                    """,
                    (
                        document.status.value,
                        to_jsonb(document.metadata),
                        document.processed_at,
                        document.updated_at,
                        document.id,
                        document.tenant_id,
                    ),
                )
                if cur.rowcount == 0:
                    raise DocumentNotFoundError(f"Document {document.id} not found")
            conn.commit()


def _to_document(row: dict[str, Any]) -> DocumentUpload:
    return DocumentUpload(
        id=str(row["id"]),
        tenant_id=row["tenant_id"],
        customer_id=row["customer_id"],
        document_type=DocumentType(row["document_type"]),
        status=DocumentStatus(row["status"]),
        original_file_name=row["original_file_name"],
        mime_type=row["mime_type"],
        file_size=row["file_size"],
        storage_key=row["storage_key"],
        checksum=row["checksum"],
        metadata=row["metadata"] or {},
        processed_at=row["processed_at"],
        uploaded_at=row["uploaded_at"],
        updated_at=row["updated_at"],
    )
