import uuid
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from docverify.database.repositories.document_repository import DocumentRepository
from docverify.database.repositories.extraction_repository import ExtractionRepository
from docverify.database.repositories.identity_profile_repository import (
    IdentityProfileRepository,
)
from docverify.documents.exceptions import DocumentNotFoundError
from docverify.documents.models import DocumentUpload
from docverify.extraction.models import FieldMap
from docverify.identity.config import ProfileMergeConfig
from docverify.identity.merge import merge_extraction, with_completeness
from docverify.identity.models import TenantIdentityProfile
from docverify.logging.logger import Log
from docverify.results import ErrorCode, ServiceResult, err, ok


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class _Source:
    document: DocumentUpload
    fields: FieldMap


class IdentityProfileBuilder:
    """Folds the extracted fields of a customer's documents into one profile."""

    def __init__(
        self,
        *,
        profile_repo: IdentityProfileRepository,
        doc_repo: DocumentRepository,
        extraction_repo: ExtractionRepository,
        config: ProfileMergeConfig | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._profile_repo = profile_repo
        self._doc_repo = doc_repo
        self._extraction_repo = extraction_repo
        self._config = config or ProfileMergeConfig()
        self._clock = clock

    def build_identity_profile(
        self, customer_id: str, tenant_id: str, document_ids: list[str]
    ) -> ServiceResult[TenantIdentityProfile]:
        """Create or update the customer's profile from *document_ids*.

        Documents that are missing or have no completed extraction are skipped.
        The read-merge-write runs under a per-customer lock in the repository.
        """
        Log.info(
            "Building identity profile",
            customer_id=customer_id,
            tenant_id=tenant_id,
            documents=len(document_ids),
        )
        sources = self._load_sources(document_ids, tenant_id, customer_id)
        now = self._clock()

        def merge(existing: TenantIdentityProfile | None) -> TenantIdentityProfile:
            profile = existing or _empty_profile(tenant_id, customer_id, now)
            for source in sources:
                profile = merge_extraction(profile, source.document, source.fields, self._config)
            return replace(with_completeness(profile), updated_at=now)

        profile = self._profile_repo.merge_for_customer(tenant_id, customer_id, merge)
        Log.info(
            "Identity profile built",
            customer_id=customer_id,
            profile_id=profile.id,
            merged_documents=len(sources),
            completeness=profile.completeness_score,
            status=profile.verification_status,
        )
        return ok(profile)

    def get_profile(
        self, customer_id: str, tenant_id: str
    ) -> ServiceResult[TenantIdentityProfile]:
        profile = self._profile_repo.find_by_customer(customer_id, tenant_id)
        if profile is None:
            return err(ErrorCode.PROFILE_NOT_FOUND, "Identity profile not found")
        return ok(profile)

    def _load_sources(
        self, document_ids: list[str], tenant_id: str, customer_id: str
    ) -> list[_Source]:
        sources: list[_Source] = []
        for document_id in document_ids:
            try:
                document = self._doc_repo.find_by_id(document_id, tenant_id)
            except DocumentNotFoundError:
                Log.warning("Skipping missing document", document_id=document_id)
                continue
            if document.customer_id != customer_id:
                Log.warning(
                    "Skipping document owned by another customer",
                    document_id=document_id,
                    customer_id=customer_id,
                )
                continue
            extraction = self._extraction_repo.find_latest_completed(document_id, tenant_id)
            if extraction is None:
                Log.warning("Skipping document without OCR extraction", document_id=document_id)
                continue
            sources.append(_Source(document, extraction.field_map()))
        return sources


def _empty_profile(tenant_id: str, customer_id: str, now: datetime) -> TenantIdentityProfile:
    return TenantIdentityProfile(
        id=str(uuid.uuid4()),
        tenant_id=tenant_id,
        customer_id=customer_id,
        created_at=now,
        updated_at=now,
    )
