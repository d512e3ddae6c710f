from docverify.config.settings import Settings
from docverify.extraction.ai_extractor import AiFieldExtractor
from docverify.extraction.base import BaseFieldExtractor
from docverify.extraction.example_client_adapter import ExampleClientAdapter
from docverify.extraction.openai_client_adapter import OpenAIClientAdapter
from docverify.extraction.rule_extractor import RuleBasedFieldExtractor

_SYSTEM_PROMPT = (
    "You extract identity, address, employment and contact data from "
    "recognized document text. Answer only with JSON matching the schema."
)


class FieldExtractorFactory:
    """Creates the configured field extractor."""

    PROVIDERS: tuple[str, ...] = ("rules", "example", "openai", "openai_compatible")

    @classmethod
    def create(cls, settings: Settings) -> BaseFieldExtractor:
        """Create a configured field extractor from application settings."""
        provider = settings.field_extraction_provider.lower()
        if provider == "rules":
            return RuleBasedFieldExtractor()
        if provider == "example":
            return AiFieldExtractor(
                client=ExampleClientAdapter(),
                model="example",
                temperature=0.0,
                system_prompt=_SYSTEM_PROMPT,
            )
        if provider in ("openai", "openai_compatible"):
            client = OpenAIClientAdapter(
                api_key=settings.field_extraction_openai_api_key,
                timeout_seconds=settings.field_extraction_openai_timeout_seconds,
                base_url=cls._resolve_base_url(provider, settings),
            )
            return AiFieldExtractor(
                client=client,
                model=settings.field_extraction_openai_model,
                temperature=settings.field_extraction_openai_temperature,
                system_prompt=_SYSTEM_PROMPT,
            )
        raise ValueError(
            f"Unknown field extraction provider '{provider}'. Choose from: {list(cls.PROVIDERS)}"
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        url = (settings.field_extraction_openai_compatible_base_url or "").strip()
        if not url:
            raise ValueError(
                "field_extraction_openai_compatible_base_url is required for "
                "field_extraction_provider=openai_compatible"
            )
        return url
