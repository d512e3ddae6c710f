from docverify.extraction.base import BaseFieldExtractor
from docverify.extraction.factory import FieldExtractorFactory
from docverify.extraction.models import ExtractedField, FieldMap, FieldName

__all__ = [
    "BaseFieldExtractor",
    "ExtractedField",
    "FieldExtractorFactory",
    "FieldMap",
    "FieldName",
]
