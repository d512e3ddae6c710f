from unittest.mock import MagicMock

import pytest

from docverify.extraction.exceptions import FieldExtractionError
from docverify.extraction.rule_extractor import RuleBasedFieldExtractor
from docverify.ocr.example_adapter import ExampleRecognizer
from docverify.ocr.exceptions import OcrError
from docverify.ocr.provider import OcrProvider


class TestOcrProvider:
    def test_recognizes_and_extracts(self) -> None:
        provider = OcrProvider(ExampleRecognizer(), RuleBasedFieldExtractor())

        output = provider.extract_text(
            b"", "image/jpeg", language="en", document_type="national_id"
        )

        names = {f.field_name.value: f.value for f in output.fields}
        assert names["full_name"] == "George Mwikila"
        assert names["nationality"] == "Tanzanian"
        assert output.confidence == 0.92
        assert output.page_count == 1

    def test_structures_fields_by_section(self) -> None:
        text = "Full Name: Asha Juma\nCity: Arusha\nEmail: asha@example.com"
        provider = OcrProvider(ExampleRecognizer(text=text), RuleBasedFieldExtractor())

        output = provider.extract_text(b"", "image/png", language="en", document_type="other")

        assert output.structured_data == {
            "identity": {"full_name": "Asha Juma"},
            "address": {"city": "Arusha"},
            "contact": {"email": "asha@example.com"},
        }

    def test_name_comes_from_recognizer(self) -> None:
        provider = OcrProvider(ExampleRecognizer(), RuleBasedFieldExtractor())
        assert provider.name == "example"

    def test_extraction_error_becomes_ocr_error(self) -> None:
        extractor = MagicMock()
        extractor.extract.side_effect = FieldExtractionError("provider down")
        provider = OcrProvider(ExampleRecognizer(), extractor)

        with pytest.raises(OcrError, match="provider down"):
            provider.extract_text(b"", "image/png", language="en", document_type="other")
