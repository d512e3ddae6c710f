from abc import ABC, abstractmethod
from pathlib import Path

from docverify.documents.exceptions import StorageError


class BaseStorageProvider(ABC):
    """Contract for reading uploaded document content."""

    @abstractmethod
    def download(self, tenant_id: str, key: str) -> bytes:
        """Return the stored bytes for *key* within the tenant's space.

        Raises:
            StorageError: if the file cannot be read.
        """


def document_file_path(files_root: Path, tenant_id: str, key: str) -> Path:
    """Build path to document file: {files_root}/{tenant_id}/{key}"""
    return files_root / tenant_id / key


class LocalStorageProvider(BaseStorageProvider):
    """Resolves filesystem path for a stored document and reads its bytes."""

    FILES_ROOT = Path("/app/files")

    def __init__(self, files_root: Path | None = None) -> None:
        self._files_root = files_root if files_root is not None else self.FILES_ROOT

    def download(self, tenant_id: str, key: str) -> bytes:
        path = self._resolve_path(tenant_id, key)
        if not path.exists():
            raise StorageError(f"File not found: {path}")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise StorageError(f"Failed to read {path}: {exc}") from exc

    def _resolve_path(self, tenant_id: str, key: str) -> Path:
        files_root = self._files_root.resolve()
        tenant_root = (self._files_root / tenant_id).resolve()
        if tenant_root == files_root or not tenant_root.is_relative_to(files_root):
            raise StorageError(f"Tenant id escapes files root: {tenant_id}")
        path = document_file_path(self._files_root, tenant_id, key).resolve()
        if not path.is_relative_to(tenant_root):
            raise StorageError(f"Storage key escapes tenant directory: {key}")
        return path
