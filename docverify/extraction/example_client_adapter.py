"""Example field extraction client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseExtractionClient and register the provider in FieldExtractorFactory.
"""

import json
from typing import ClassVar

from docverify.extraction.client_base import BaseExtractionClient


class ExampleClientAdapter(BaseExtractionClient):
    """Example adapter that returns a fixed, valid extraction payload.

    No network calls. Useful for local development and tests.
    """

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "fields": [
            {"field_name": "full_name", "value": "George Mwikila", "confidence": 0.95},
            {"field_name": "id_number", "value": "19850123456789012345", "confidence": 0.92},
            {"field_name": "date_of_birth", "value": "1985-01-23", "confidence": 0.88},
            {"field_name": "nationality", "value": "Tanzanian", "confidence": 0.9},
        ],
    }

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, object],
    ) -> str:
        _ = model, temperature, system_prompt, user_prompt, json_schema
        return json.dumps(self.DEFAULT_RESPONSE)
