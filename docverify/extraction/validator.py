"""Validates a raw parsed extraction payload and builds typed fields."""

from typing import Any

from docverify.extraction.dates import to_iso
from docverify.extraction.exceptions import FieldExtractionValidationError
from docverify.extraction.models import ExtractedField, FieldName, FieldValidationStatus

_MAX_FIELDS = 100
_DATE_FIELDS = frozenset({
    FieldName.DATE_OF_BIRTH,
    FieldName.ISSUE_DATE,
    FieldName.EXPIRY_DATE,
    FieldName.START_DATE,
    FieldName.END_DATE,
})
_VALID_NAMES = frozenset(name.value for name in FieldName)


def validate_and_build(data: dict[str, Any], *, confidence_cap: float = 1.0) -> list[ExtractedField]:
    """Validate raw parsed JSON and build the extracted field list.

    Field confidence is capped by *confidence_cap* so that a model cannot be
    more certain than the text recognizer that produced its input.

    Raises:
        FieldExtractionValidationError: on any validation failure.
    """
    if "fields" not in data:
        raise FieldExtractionValidationError("Missing required top-level field: fields")
    raw = data["fields"]
    if not isinstance(raw, list):
        raise FieldExtractionValidationError("'fields' must be a list")
    if len(raw) > _MAX_FIELDS:
        raise FieldExtractionValidationError(
            f"Too many fields: {len(raw)} (max {_MAX_FIELDS})"
        )
    fields: list[ExtractedField] = []
    for i, item in enumerate(raw):
        built = _build_field(item, i, confidence_cap)
        if built is not None:
            fields.append(built)
    return fields


def _build_field(raw: Any, index: int, confidence_cap: float) -> ExtractedField | None:
    if not isinstance(raw, dict):
        raise FieldExtractionValidationError(f"Field at index {index} must be an object")
    name = raw.get("field_name")
    if name not in _VALID_NAMES:
        raise FieldExtractionValidationError(
            f"Field at index {index}: unknown field_name {name!r}"
        )
    value = raw.get("value")
    if value is not None and not isinstance(value, str):
        raise FieldExtractionValidationError(
            f"Field at index {index}: 'value' must be a string or null"
        )
    confidence = raw.get("confidence")
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        raise FieldExtractionValidationError(
            f"Field at index {index}: 'confidence' must be a number"
        )
    if not 0.0 <= confidence <= 1.0:
        raise FieldExtractionValidationError(
            f"Field at index {index}: 'confidence' must be within [0, 1], got {confidence}"
        )
    if value is None or not value.strip():
        return None

    field_name = FieldName(name)
    text = value.strip()
    status = FieldValidationStatus.VALID
    normalized = False
    if field_name in _DATE_FIELDS:
        iso = to_iso(text)
        if iso is None:
            status = FieldValidationStatus.INVALID
        else:
            normalized = iso != text
            text = iso
    return ExtractedField(
        field_name=field_name,
        value=text,
        confidence=min(float(confidence), confidence_cap),
        normalized=normalized,
        validation_status=status,
    )
