import uuid
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import datetime, timezone

import psycopg

from docverify.database.repositories.document_repository import DocumentRepository
from docverify.database.repositories.fraud_score_repository import FraudScoreRepository
from docverify.documents.exceptions import DocumentNotFoundError, StorageError
from docverify.documents.lifecycle import advance_status
from docverify.documents.models import DocumentStatus, DocumentUpload
from docverify.documents.storage import BaseStorageProvider
from docverify.fraud import checks
from docverify.fraud.config import FraudDetectionConfig
from docverify.fraud.models import (
    RISK_LEVEL_ORDER,
    CustomerRiskSummary,
    Decision,
    FraudIndicator,
    FraudRiskScore,
    RiskLevel,
)
from docverify.fraud.scoring import calculate_risk, model_confidence, requires_review
from docverify.imaging.base import BaseImageAnalyzer
from docverify.logging.logger import Log
from docverify.results import ErrorCode, ServiceResult, err, ok

AUTO_APPROVAL_REASON = "Automated approval - low risk"
_REVIEW_DECISIONS = (Decision.APPROVED, Decision.REJECTED)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FraudDetectionService:
    """Scores a single document for fraud risk from independent signals."""

    def __init__(
        self,
        *,
        doc_repo: DocumentRepository,
        storage: BaseStorageProvider,
        fraud_repo: FraudScoreRepository,
        config: FraudDetectionConfig | None = None,
        image_analyzer: BaseImageAnalyzer | None = None,
        clock: Callable[[], datetime] = _utcnow,
        max_workers: int = 4,
    ) -> None:
        self._doc_repo = doc_repo
        self._storage = storage
        self._fraud_repo = fraud_repo
        self._config = config or FraudDetectionConfig()
        self._image_analyzer = image_analyzer
        self._clock = clock
        self._max_workers = max_workers

    def analyze_document(self, document_id: str, tenant_id: str) -> ServiceResult[FraudRiskScore]:
        try:
            document = self._doc_repo.find_by_id(document_id, tenant_id)
        except DocumentNotFoundError:
            return err(ErrorCode.DOCUMENT_NOT_FOUND, "Document not found")

        Log.info(
            "Starting fraud detection analysis",
            document_id=document_id,
            tenant_id=tenant_id,
            document_type=document.document_type,
        )
        now = self._clock()
        try:
            content = self._storage.download(tenant_id, document.storage_key)
            indicators = self._run_checks(document, content, now)
            assessment = calculate_risk(indicators, self._config)
            review = requires_review(assessment.risk_level)
            score = FraudRiskScore(
                id=str(uuid.uuid4()),
                tenant_id=tenant_id,
                document_id=document.id,
                customer_id=document.customer_id,
                checksum=document.checksum,
                indicators=tuple(indicators),
                score=assessment.score,
                risk_level=assessment.risk_level,
                primary_indicator=assessment.primary_indicator,
                model_version=self._config.model_version,
                model_confidence=model_confidence(indicators),
                review_required=review,
                calculated_at=now,
                decision=None if review else Decision.APPROVED,
                decision_reason=None if review else AUTO_APPROVAL_REASON,
            )
            saved = self._fraud_repo.create(score)
            advance_status(
                self._doc_repo,
                document,
                DocumentStatus.FRAUD_CHECK if review else DocumentStatus.VERIFIED,
                now,
            )
        except (StorageError, DocumentNotFoundError, psycopg.Error) as exc:
            Log.error(
                "Fraud detection analysis failed",
                document_id=document_id,
                tenant_id=tenant_id,
                error=exc,
            )
            return err(ErrorCode.ANALYSIS_FAILED, f"Fraud detection analysis failed: {exc}")

        Log.info(
            "Fraud detection analysis completed",
            document_id=document_id,
            risk_level=saved.risk_level,
            score=f"{saved.score:.3f}",
            indicators=len(saved.indicators),
            review_required=saved.review_required,
        )
        return ok(saved)

    def _run_checks(
        self, document: DocumentUpload, content: bytes, now: datetime
    ) -> list[FraudIndicator]:
        """Run every check concurrently; indicators keep the submission order."""
        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            futures = [
                pool.submit(
                    checks.check_metadata_anomalies, document, content, self._image_analyzer, now
                ),
                pool.submit(checks.check_file_integrity, content, document.mime_type, now),
                pool.submit(
                    checks.check_cross_tenant_duplicates,
                    document,
                    self._fraud_repo,
                    self._config.enable_cross_tenant_duplicate_check,
                    now,
                ),
                pool.submit(checks.check_format_anomalies, document, now),
                pool.submit(checks.check_date_consistency, document, now),
            ]
            if document.is_image and self._image_analyzer is not None:
                futures.append(pool.submit(
                    checks.check_image_integrity,
                    content,
                    document.mime_type,
                    self._image_analyzer,
                    now,
                ))
            indicators: list[FraudIndicator] = []
            for future in futures:
                indicators.extend(future.result())
        return indicators

    def record_review(
        self,
        fraud_score_id: str,
        tenant_id: str,
        *,
        decision: str,
        reason: str,
        notes: str | None,
        reviewed_by: str,
    ) -> ServiceResult[FraudRiskScore]:
        """Record the one-time manual decision and move the document accordingly."""
        try:
            verdict = Decision(decision)
        except ValueError:
            verdict = None
        if verdict not in _REVIEW_DECISIONS:
            return err(
                ErrorCode.INVALID_DECISION,
                f"Decision must be one of {[d.value for d in _REVIEW_DECISIONS]}",
            )

        score = self._fraud_repo.find_by_id(fraud_score_id, tenant_id)
        if score is None:
            return err(ErrorCode.FRAUD_SCORE_NOT_FOUND, "Fraud risk score not found")
        if score.reviewed_at is not None:
            return err(ErrorCode.REVIEW_ALREADY_RECORDED, "Fraud review already recorded")

        now = self._clock()
        reviewed = replace(
            score,
            decision=verdict,
            decision_reason=reason,
            review_required=False,
            reviewed_at=now,
            reviewed_by=reviewed_by,
            review_notes=notes,
        )
        if not self._fraud_repo.record_review(reviewed):
            return err(ErrorCode.REVIEW_ALREADY_RECORDED, "Fraud review already recorded")

        target = DocumentStatus.VERIFIED if verdict is Decision.APPROVED else DocumentStatus.REJECTED
        try:
            document = self._doc_repo.find_by_id(score.document_id, tenant_id)
        except DocumentNotFoundError:
            Log.warning("Reviewed fraud score has no document", fraud_score_id=fraud_score_id)
        else:
            advance_status(self._doc_repo, document, target, now)

        Log.info(
            "Fraud review recorded",
            fraud_score_id=fraud_score_id,
            tenant_id=tenant_id,
            decision=verdict,
            reviewed_by=reviewed_by,
        )
        return ok(reviewed)

    def get_fraud_score(self, document_id: str, tenant_id: str) -> ServiceResult[FraudRiskScore | None]:
        return ok(self._fraud_repo.find_latest_by_document(document_id, tenant_id))

    def get_customer_fraud_scores(
        self, customer_id: str, tenant_id: str
    ) -> ServiceResult[list[FraudRiskScore]]:
        return ok(self._fraud_repo.find_by_customer(customer_id, tenant_id))

    def get_customer_risk_level(
        self, customer_id: str, tenant_id: str
    ) -> ServiceResult[CustomerRiskSummary]:
        scores = self._fraud_repo.find_by_customer(customer_id, tenant_id)
        if not scores:
            return ok(CustomerRiskSummary(customer_id, RiskLevel.LOW, 0.0, 0, 0))
        worst = max((s.risk_level for s in scores), key=RISK_LEVEL_ORDER.__getitem__)
        flagged = sum(1 for s in scores if s.review_required or s.decision is Decision.REJECTED)
        return ok(CustomerRiskSummary(
            customer_id=customer_id,
            risk_level=worst,
            highest_score=max(s.score for s in scores),
            document_count=len(scores),
            flagged_count=flagged,
        ))
