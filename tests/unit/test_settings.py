import pytest
from pydantic import ValidationError

from docverify.config.settings import Settings


class TestSettingsDefaults:
    def test_default_app_env(self) -> None:
        s = Settings()
        assert s.app_env == "dev"

    def test_default_db_port(self) -> None:
        s = Settings()
        assert s.db_port == 5432

    def test_default_max_job_attempts(self) -> None:
        s = Settings()
        assert s.max_job_attempts == 3

    def test_default_ocr_engine(self) -> None:
        s = Settings()
        assert s.ocr_engine == "tesseract"

    def test_default_field_extraction_provider(self) -> None:
        s = Settings()
        assert s.field_extraction_provider == "rules"

    def test_default_fraud_thresholds(self) -> None:
        s = Settings()
        assert s.fraud_high_risk_threshold == 0.6
        assert s.fraud_critical_risk_threshold == 0.8

    def test_default_required_document_types(self) -> None:
        s = Settings()
        assert s.validation_required_document_types == ["national_id", "lease_agreement"]

    def test_external_verification_disabled_by_default(self) -> None:
        s = Settings()
        assert s.external_verification_enabled is False


class TestSettingsFromEnv:
    def test_loads_app_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_ENV", "production")
        s = Settings()
        assert s.app_env == "production"

    def test_loads_db_host(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_HOST", "db.example.com")
        s = Settings()
        assert s.db_host == "db.example.com"

    def test_loads_ocr_engine(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OCR_ENGINE", "pdfplumber")
        s = Settings()
        assert s.ocr_engine == "pdfplumber"

    def test_loads_required_document_types_as_json(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("VALIDATION_REQUIRED_DOCUMENT_TYPES", '["passport"]')
        s = Settings()
        assert s.validation_required_document_types == ["passport"]

    def test_loads_apply_schema_flag(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_APPLY_SCHEMA", "true")
        s = Settings()
        assert s.db_apply_schema is True


class TestSettingsValidation:
    def test_invalid_db_port_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_PORT", "not_a_number")
        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_threshold_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FRAUD_HIGH_RISK_THRESHOLD", "high")
        with pytest.raises(ValidationError):
            Settings()
