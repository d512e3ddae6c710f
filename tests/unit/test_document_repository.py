from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from docverify.database.repositories.document_repository import DocumentRepository
from docverify.documents.exceptions import DocumentNotFoundError
from docverify.documents.models import DocumentStatus, DocumentType, DocumentUpload

UPLOADED_AT = datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc)


def _make_row(**overrides) -> dict:
    row = {
        "id": "550e8400-e29b-41d4-a716-446655440000",
        "tenant_id": "tenant-1",
        "customer_id": "cust-1",
        "document_type": "national_id",
        "status": "uploaded",
        "original_file_name": "id.pdf",
        "mime_type": "application/pdf",
        "file_size": 2048,
        "storage_key": "tenant-1/id.pdf",
        "checksum": "a" * 64,
        "metadata": {"expires_at": "2030-01-01"},
        "processed_at": None,
        "uploaded_at": UPLOADED_AT,
        "updated_at": UPLOADED_AT,
    }
    row.update(overrides)
    return row


def _make_document() -> DocumentUpload:
    return DocumentUpload(
        id="550e8400-e29b-41d4-a716-446655440000",
        tenant_id="tenant-1",
        customer_id="cust-1",
        document_type=DocumentType.NATIONAL_ID,
        status=DocumentStatus.OCR_COMPLETED,
        original_file_name="id.pdf",
        mime_type="application/pdf",
        file_size=2048,
        storage_key="tenant-1/id.pdf",
        checksum="a" * 64,
    )


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    """Wire up a mock connection + cursor and return (mock_conn, mock_cursor)."""
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


class TestFindById:
    @patch("docverify.database.repositories.document_repository.get_connection")
    def test_returns_document_when_found(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = _make_row()

        repo = DocumentRepository()
        result = repo.find_by_id("550e8400-e29b-41d4-a716-446655440000", "tenant-1")

        assert isinstance(result, DocumentUpload)
        assert result.document_type is DocumentType.NATIONAL_ID
        assert result.status is DocumentStatus.UPLOADED
        assert result.metadata == {"expires_at": "2030-01-01"}
        assert result.uploaded_at == UPLOADED_AT
        sql, params = mock_cursor.execute.call_args.args
        assert "tenant_id = %s" in sql
        assert params == ("550e8400-e29b-41d4-a716-446655440000", "tenant-1")

    @patch("docverify.database.repositories.document_repository.get_connection")
    def test_null_metadata_becomes_empty_dict(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = _make_row(metadata=None)

        result = DocumentRepository().find_by_id("x", "tenant-1")

        assert result.metadata == {}

    @patch("docverify.database.repositories.document_repository.get_connection")
    def test_raises_document_not_found_when_missing(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        repo = DocumentRepository()

        with pytest.raises(DocumentNotFoundError, match="Document doc-999 not found"):
            repo.find_by_id("doc-999", "tenant-1")


class TestFindMany:
    @patch("docverify.database.repositories.document_repository.get_connection")
    def test_empty_ids_skip_query(self, mock_get_conn: MagicMock) -> None:
        assert DocumentRepository().find_many([], "tenant-1") == []
        mock_get_conn.assert_not_called()

    @patch("docverify.database.repositories.document_repository.get_connection")
    def test_queries_by_id_array(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchall.return_value = [_make_row(), _make_row(id="other")]

        result = DocumentRepository().find_many(["a", "b"], "tenant-1")

        assert [d.id for d in result] == ["550e8400-e29b-41d4-a716-446655440000", "other"]
        sql, params = mock_cursor.execute.call_args.args
        assert "ANY(%s::text[])" in sql
        assert params == (["a", "b"], "tenant-1")


class TestFindByCustomer:
    @patch("docverify.database.repositories.document_repository.get_connection")
    def test_returns_documents_in_upload_order(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchall.return_value = [_make_row()]

        result = DocumentRepository().find_by_customer("cust-1", "tenant-1")

        assert len(result) == 1
        sql, params = mock_cursor.execute.call_args.args
        assert "ORDER BY uploaded_at" in sql
        assert params == ("cust-1", "tenant-1")


class TestCreate:
    @patch("docverify.database.repositories.document_repository.get_connection")
    def test_inserts_and_commits(self, mock_get_conn: MagicMock) -> None:
        mock_conn, _cursor = _mock_connection(mock_get_conn)
        document = _make_document()

        result = DocumentRepository().create(document)

        assert result is document
        sql, params = mock_conn.execute.call_args.args
        assert "INSERT INTO document_uploads" in sql
        assert params[3] == "national_id"
        assert params[4] == "ocr_completed"
        mock_conn.commit.assert_called_once()


class TestUpdate:
    @patch("docverify.database.repositories.document_repository.get_connection")
    def test_executes_update_query(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 1

        DocumentRepository().update(_make_document())

        sql, params = mock_cursor.execute.call_args.args
        assert "UPDATE document_uploads" in sql
        assert params[0] == "ocr_completed"
        assert params[-2:] == ("550e8400-e29b-41d4-a716-446655440000", "tenant-1")
        mock_conn.commit.assert_called_once()

    @patch("docverify.database.repositories.document_repository.get_connection")
    def test_raises_document_not_found_when_no_rows_updated(
        self, mock_get_conn: MagicMock
    ) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 0

        with pytest.raises(DocumentNotFoundError, match="not found"):
            DocumentRepository().update(_make_document())

        mock_conn.commit.assert_not_called()
