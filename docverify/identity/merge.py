"""Pure functions that fold one document's extracted fields into a profile.

Nothing here touches the database: the builder loads the inputs, calls
:func:`merge_extraction` for each document and persists the result.
"""

import re
from dataclasses import replace
from typing import Any

from docverify.documents.models import DocumentCategory, DocumentUpload
from docverify.extraction.dates import parse_date
from docverify.extraction.models import ExtractedField, FieldMap, FieldName
from docverify.identity.config import ProfileMergeConfig
from docverify.identity.models import (
    Address,
    ContactInfo,
    Employment,
    FieldProvenance,
    IdNumber,
    TenantIdentityProfile,
    VerificationStatus,
)
from docverify.identity.names import normalize_id_number, split_name

_GENDERS = frozenset({"male", "female", "other"})
_AMOUNT_RE = re.compile(r"[^0-9.]")

COMPLETENESS_WEIGHTS = {
    "full_name": 20,
    "date_of_birth": 10,
    "id_numbers": 25,
    "addresses": 15,
    "contact_info": 15,
    "employment": 10,
    "photo_url": 5,
}


def completeness_score(profile: TenantIdentityProfile) -> int:
    """Weighted share (0-100) of the profile sections that are filled in."""
    score = 0
    if profile.full_name:
        score += COMPLETENESS_WEIGHTS["full_name"]
    if profile.date_of_birth:
        score += COMPLETENESS_WEIGHTS["date_of_birth"]
    if profile.id_numbers:
        score += COMPLETENESS_WEIGHTS["id_numbers"]
    if profile.addresses:
        score += COMPLETENESS_WEIGHTS["addresses"]
    if profile.contact_info.primary_phone or profile.contact_info.email:
        score += COMPLETENESS_WEIGHTS["contact_info"]
    if profile.employment is not None and profile.employment.employer:
        score += COMPLETENESS_WEIGHTS["employment"]
    if profile.photo_url:
        score += COMPLETENESS_WEIGHTS["photo_url"]
    return score


def verification_status_for(score: int) -> VerificationStatus:
    if score >= 80:
        return VerificationStatus.COMPLETE
    if score >= 50:
        return VerificationStatus.PARTIAL
    return VerificationStatus.PENDING


def with_completeness(profile: TenantIdentityProfile) -> TenantIdentityProfile:
    """Return *profile* with its completeness score and status recomputed."""
    score = completeness_score(profile)
    return replace(
        profile,
        completeness_score=score,
        verification_status=verification_status_for(score),
    )


def merge_extraction(
    profile: TenantIdentityProfile,
    document: DocumentUpload,
    fields: FieldMap,
    config: ProfileMergeConfig,
) -> TenantIdentityProfile:
    """Merge the fields extracted from *document* into *profile*.

    Identity fields are read from identity documents only. Employment and
    address sections are also filled from any document carrying an employer
    or a complete address, and contact details from every document.
    """
    merger = _Merger(profile, document.id, config)
    category = document.document_type.category

    if category is DocumentCategory.IDENTITY:
        merger.apply_identity(fields, document.document_type.value)
    if category is DocumentCategory.EMPLOYMENT or FieldName.EMPLOYER_NAME in fields:
        merger.apply_employment(fields)
    if category is DocumentCategory.ADDRESS or fields.has_all(FieldName.ADDRESS_LINE1, FieldName.CITY):
        merger.apply_address(fields)
    merger.apply_contact(fields)

    return with_completeness(merger.result())


class _Merger:
    """Accumulates changes for one document against one profile."""

    def __init__(
        self,
        profile: TenantIdentityProfile,
        document_id: str,
        config: ProfileMergeConfig,
    ) -> None:
        self._profile = profile
        self._document_id = document_id
        self._config = config
        self._changes: dict[str, Any] = {}
        self._provenance = dict(profile.provenance)

    def result(self) -> TenantIdentityProfile:
        return replace(self._profile, provenance=self._provenance, **self._changes)

    def _current(self, name: str) -> Any:
        if name in self._changes:
            return self._changes[name]
        return getattr(self._profile, name)

    def _may_overwrite(self, key: str, has_value: bool, confidence: float) -> bool:
        """Empty slots always take a value; filled ones only from confident data."""
        if not has_value:
            return True
        source = self._provenance.get(key)
        existing_confidence = source.confidence if source is not None else 1.0
        return confidence >= min(self._config.overwrite_confidence, existing_confidence)

    def _set(self, name: str, value: Any, confidence: float) -> None:
        if value is None or value == "":
            return
        if not self._may_overwrite(name, bool(self._current(name)), confidence):
            return
        self._changes[name] = value
        self._provenance[name] = FieldProvenance(self._document_id, confidence)

    def apply_identity(self, fields: FieldMap, document_type: str) -> None:
        self._apply_names(fields)

        dob = fields.get(FieldName.DATE_OF_BIRTH)
        if dob is not None:
            self._set("date_of_birth", parse_date(dob.value), dob.confidence)

        nationality = fields.get(FieldName.NATIONALITY)
        if nationality is not None:
            self._set("nationality", nationality.value, nationality.confidence)

        gender = fields.get(FieldName.GENDER)
        if gender is not None and gender.value and gender.value.lower() in _GENDERS:
            self._set("gender", gender.value.lower(), gender.confidence)

        self._apply_id_number(fields, document_type)

    def _apply_names(self, fields: FieldMap) -> None:
        full = fields.get(FieldName.FULL_NAME)
        if full is not None and full.value and full.confidence > self._config.full_name_min_confidence:
            name = " ".join(full.value.split())
            if not self._may_overwrite("full_name", bool(self._current("full_name")), full.confidence):
                return
            parts = split_name(name)
            self._set("full_name", name, full.confidence)
            self._set("first_name", parts.first, full.confidence)
            self._set("last_name", parts.last, full.confidence)
            self._changes["middle_name"] = parts.middle
            self._provenance["middle_name"] = FieldProvenance(self._document_id, full.confidence)
            return

        first = fields.get(FieldName.FIRST_NAME)
        last = fields.get(FieldName.LAST_NAME)
        if first is None or last is None:
            return
        confidence = min(first.confidence, last.confidence)
        middle = fields.get(FieldName.MIDDLE_NAME)
        name_parts = [first.value, middle.value if middle else None, last.value]
        self._set("full_name", " ".join(p for p in name_parts if p), confidence)
        self._set("first_name", first.value, first.confidence)
        self._set("last_name", last.value, last.confidence)
        if middle is not None:
            self._set("middle_name", middle.value, middle.confidence)

    def _apply_id_number(self, fields: FieldMap, document_type: str) -> None:
        id_field = fields.get(FieldName.ID_NUMBER)
        if id_field is None or not id_field.value:
            return
        if id_field.confidence <= self._config.id_number_min_confidence:
            return
        id_numbers: tuple[IdNumber, ...] = self._current("id_numbers")
        normalized = normalize_id_number(id_field.value)
        if any(
            existing.type == document_type and normalize_id_number(existing.number) == normalized
            for existing in id_numbers
        ):
            return
        self._changes["id_numbers"] = (
            *id_numbers,
            IdNumber(
                type=document_type,
                number=id_field.value,
                issued_at=_value(fields.get(FieldName.ISSUE_DATE)),
                expires_at=_value(fields.get(FieldName.EXPIRY_DATE)),
                issuing_country=_value(fields.get(FieldName.NATIONALITY)),
            ),
        )

    def apply_employment(self, fields: FieldMap) -> None:
        employer = fields.get(FieldName.EMPLOYER_NAME)
        if employer is None or not employer.value:
            return
        current: Employment | None = self._current("employment")
        if not self._may_overwrite("employment", current is not None, employer.confidence):
            return
        job_title = _value(fields.get(FieldName.JOB_TITLE))
        employment_type = _value(fields.get(FieldName.EMPLOYMENT_TYPE))
        monthly_income = parse_amount(_value(fields.get(FieldName.SALARY)))
        if monthly_income is None and current is not None:
            monthly_income = current.monthly_income
            income_currency = current.income_currency
        else:
            income_currency = self._config.default_income_currency
        self._changes["employment"] = Employment(
            employer=employer.value,
            job_title=job_title or (current.job_title if current else None),
            employment_type=employment_type or (current.employment_type if current else None),
            monthly_income=monthly_income,
            income_currency=income_currency,
        )
        self._provenance["employment"] = FieldProvenance(self._document_id, employer.confidence)

    def apply_address(self, fields: FieldMap) -> None:
        line1 = _value(fields.get(FieldName.ADDRESS_LINE1))
        city = _value(fields.get(FieldName.CITY))
        if not line1 or not city:
            return
        addresses: tuple[Address, ...] = self._current("addresses")
        key = (line1.strip().lower(), city.strip().lower())
        if any((a.line1.strip().lower(), a.city.strip().lower()) == key for a in addresses):
            return
        self._changes["addresses"] = (
            *addresses,
            Address(
                line1=line1,
                line2=_value(fields.get(FieldName.ADDRESS_LINE2)),
                city=city,
                region=_value(fields.get(FieldName.REGION)),
                postal_code=_value(fields.get(FieldName.POSTAL_CODE)),
                country=_value(fields.get(FieldName.COUNTRY)) or self._config.default_country,
            ),
        )

    def apply_contact(self, fields: FieldMap) -> None:
        contact: ContactInfo = self._current("contact_info")
        phone = _value(fields.get(FieldName.PHONE))
        email = _value(fields.get(FieldName.EMAIL))
        updated = contact
        if phone:
            if updated.primary_phone is None:
                updated = replace(updated, primary_phone=phone)
            elif updated.secondary_phone is None and phone != updated.primary_phone:
                updated = replace(updated, secondary_phone=phone)
        if email and updated.email is None:
            updated = replace(updated, email=email)
        if updated != contact:
            self._changes["contact_info"] = updated


def parse_amount(value: str | None) -> float | None:
    """Parse a printed amount such as 'TZS 1,500,000.00'."""
    if not value:
        return None
    cleaned = _AMOUNT_RE.sub("", value)
    try:
        return float(cleaned)
    except ValueError:
        return None


def _value(field: ExtractedField | None) -> str | None:
    return field.value if field is not None else None
