from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "docverify"
    db_username: str = "docverify"
    db_password: str = "secret"
    db_apply_schema: bool = False

    max_job_attempts: int = 3
    job_poll_interval_seconds: int = 5

    files_root: str = "/app/files"

    ocr_engine: str = "tesseract"
    ocr_default_language: str = "en"
    ocr_pdf_render_dpi: int = 200

    field_extraction_provider: str = "rules"
    field_extraction_openai_api_key: str = ""
    field_extraction_openai_model: str = "gpt-4o-mini"
    field_extraction_openai_timeout_seconds: int = 30
    field_extraction_openai_temperature: float = 0.0
    field_extraction_openai_compatible_base_url: str | None = None

    image_analyzer: str = "pillow"

    profile_overwrite_confidence: float = 0.7
    profile_full_name_min_confidence: float = 0.7
    profile_id_number_min_confidence: float = 0.8
    default_country: str = "Tanzania"
    default_income_currency: str = "TZS"

    fraud_high_risk_threshold: float = 0.6
    fraud_critical_risk_threshold: float = 0.8
    fraud_cross_tenant_duplicate_check: bool = True
    fraud_model_version: str = "1.0.0"

    validation_name_match_threshold: float = 0.85
    validation_auto_approve_threshold: float = 0.9
    validation_expiry_warning_days: int = 30
    validation_required_document_types: list[str] = ["national_id", "lease_agreement"]

    external_verification_enabled: bool = False
    external_verification_provider: str = "http_registry"
    external_verification_url: str = ""
    external_verification_api_key: str = ""
    external_verification_timeout_seconds: int = 15
    external_verification_default_country: str = "TZ"
