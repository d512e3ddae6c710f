from abc import ABC, abstractmethod
from dataclasses import dataclass

from docverify.documents.models import DocumentUpload
from docverify.fraud.models import FraudRiskScore
from docverify.identity.models import TenantIdentityProfile
from docverify.ocr.models import OcrExtractionResult
from docverify.validation.models import ValidationResult


@dataclass(slots=True)
class PipelineContext:
    job_id: int
    document_id: str
    tenant_id: str
    document: DocumentUpload | None = None
    extraction: OcrExtractionResult | None = None
    profile: TenantIdentityProfile | None = None
    fraud_score: FraudRiskScore | None = None
    validation: ValidationResult | None = None
    error_message: str = ""
    failed: bool = False

    def require_document(self) -> DocumentUpload:
        if self.document is None:
            raise ValueError("PipelineContext.document must be set before this step")
        return self.document


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
