"""AI-powered field extraction over recognized document text."""

import json
from pathlib import Path

from docverify.extraction.base import BaseFieldExtractor
from docverify.extraction.client_base import BaseExtractionClient
from docverify.extraction.exceptions import FieldExtractionError
from docverify.extraction.models import ExtractedField
from docverify.extraction.prompt_loader import load_json_schema, load_prompt_template
from docverify.extraction.validator import validate_and_build
from docverify.logging.logger import Log


class AiFieldExtractor(BaseFieldExtractor):
    """Extracts typed document fields using an AI provider."""

    def __init__(
        self,
        *,
        client: BaseExtractionClient,
        model: str,
        temperature: float = 0.0,
        prompt_template_path: Path | None = None,
        json_schema_path: Path | None = None,
        system_prompt: str = "",
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(0.2, temperature))
        self._system_prompt = system_prompt
        self._prompt_template = load_prompt_template(prompt_template_path)
        schema_str = load_json_schema(json_schema_path)
        self._json_schema = schema_str
        self._json_schema_dict = json.loads(schema_str)

    def extract(
        self,
        text: str,
        *,
        document_type: str,
        text_confidence: float,
    ) -> list[ExtractedField]:
        if not text.strip():
            return []
        prompt = self._build_prompt(text, document_type)
        Log.debug(f"Field extraction prompt:\n{prompt}")

        raw_response = self._call_ai(prompt)
        Log.debug(f"AI raw response:\n{raw_response}")

        parsed = self._parse_json(raw_response)
        fields = validate_and_build(parsed, confidence_cap=text_confidence)

        Log.info(f"Field extraction complete: {len(fields)} fields extracted")
        return fields

    def _build_prompt(self, text: str, document_type: str) -> str:
        return self._prompt_template.format(
            document_type=document_type,
            recognized_text=text,
            json_schema=self._json_schema,
        )

    def _call_ai(self, prompt: str) -> str:
        return self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            system_prompt=self._system_prompt,
            user_prompt=prompt,
            json_schema=self._json_schema_dict,
        )

    @staticmethod
    def _parse_json(raw: str) -> dict[str, object]:
        cleaned = raw.strip()
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()
            if lines and lines[0].startswith("```"):
                lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            cleaned = "\n".join(lines)

        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise FieldExtractionError(f"Invalid JSON response: {exc}") from exc

        if not isinstance(parsed, dict):
            raise FieldExtractionError("JSON response must be an object")
        return parsed
