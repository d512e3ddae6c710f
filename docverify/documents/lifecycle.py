from dataclasses import replace
from datetime import datetime

from docverify.database.repositories.document_repository import DocumentRepository
from docverify.documents.models import DocumentStatus, DocumentUpload, can_transition
from docverify.logging.logger import Log


def advance_status(
    doc_repo: DocumentRepository,
    document: DocumentUpload,
    target: DocumentStatus,
    at: datetime,
    *,
    processed: bool = False,
) -> DocumentUpload | None:
    """Persist *document* moved to *target* if the lifecycle allows it.

    Returns the updated document, or None when the transition is not on the
    lifecycle graph (the stored status is left untouched).
    """
    if not can_transition(document.status, target):
        Log.warning(
            f"Skipping status change for document {document.id}",
            current=document.status,
            target=target,
        )
        return None
    updated = document.with_status(target, at)
    if processed:
        updated = replace(updated, processed_at=at)
    doc_repo.update(updated)
    return updated
