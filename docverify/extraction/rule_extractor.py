"""Label-driven field extraction over recognized document text.

Documents issued in the region print their data as ``Label: value`` lines
(or label and value separated by a wide gap). Each line is tested against an
ordered table of label patterns; the first match wins, so more specific
labels are listed before generic ones.
"""

import re

from docverify.extraction.base import BaseFieldExtractor
from docverify.extraction.dates import to_iso
from docverify.extraction.models import ExtractedField, FieldName, FieldValidationStatus

_LABELS: tuple[tuple[FieldName, str], ...] = (
    (FieldName.PLACE_OF_BIRTH, r"place\s+of\s+birth"),
    (FieldName.DATE_OF_BIRTH, r"date\s+of\s+birth|birth\s+date|d\.?o\.?b\.?"),
    (FieldName.FIRST_NAME, r"first\s+names?|given\s+names?|forenames?"),
    (FieldName.MIDDLE_NAME, r"middle\s+names?|other\s+names?"),
    (FieldName.LAST_NAME, r"last\s+name|surname|family\s+name"),
    (FieldName.EMPLOYER_NAME, r"employer(?:'s)?(?:\s+name)?|company(?:\s+name)?|organi[sz]ation"),
    (FieldName.EMPLOYEE_NAME, r"employee(?:'s)?(?:\s+name)?|staff\s+name"),
    (
        FieldName.FULL_NAME,
        r"full\s+names?|names?(?:\s+of\s+holder)?|holder'?s?\s+name"
        r"|tenant(?:'s)?\s+name|customer\s+name|account\s+(?:holder|name)",
    ),
    (FieldName.GENDER, r"sex|gender"),
    (FieldName.NATIONALITY, r"nationality|citizenship"),
    (
        FieldName.ID_NUMBER,
        r"(?:national\s+)?id(?:entification)?\s*(?:no\.?|number|#)"
        r"|nin|nida(?:\s*(?:no\.?|number))?"
        r"|(?:passport|licen[cs]e|document|permit)\s*(?:no\.?|number)",
    ),
    (FieldName.END_DATE, r"end\s+date|lease\s+end(?:\s+date)?|termination\s+date|expiry\s+of\s+lease"),
    (
        FieldName.START_DATE,
        r"start\s+date|lease\s+start(?:\s+date)?|commencement\s+date"
        r"|date\s+of\s+(?:employment|joining)",
    ),
    (FieldName.ISSUE_DATE, r"date\s+of\s+issue|issue\s+date|issued(?:\s+on)?"),
    (
        FieldName.EXPIRY_DATE,
        r"date\s+of\s+expiry|expiry(?:\s+date)?|expiration\s+date|expires(?:\s+on)?|valid\s+until",
    ),
    (FieldName.ADDRESS_LINE2, r"address\s+line\s*2"),
    (
        FieldName.ADDRESS_LINE1,
        r"address\s+line\s*1|(?:residential\s+|physical\s+|service\s+|billing\s+|postal\s+)?address|street",
    ),
    (FieldName.CITY, r"city|town"),
    (FieldName.REGION, r"region|province|county"),
    (FieldName.POSTAL_CODE, r"postal\s+code|post\s+code|zip(?:\s+code)?|p\.?\s*o\.?\s*box"),
    (FieldName.COUNTRY, r"country"),
    (FieldName.JOB_TITLE, r"job\s+title|position|designation"),
    (FieldName.EMPLOYMENT_TYPE, r"employment\s+type|contract\s+type|terms\s+of\s+employment"),
    (FieldName.SALARY, r"(?:gross\s+|basic\s+|net\s+|monthly\s+)?salary|gross\s+pay|net\s+pay"),
    (FieldName.PHONE, r"phone(?:\s+number)?|tel(?:ephone)?\.?|mobile(?:\s+number)?|cell"),
    (FieldName.EMAIL, r"e-?mail(?:\s+address)?"),
)

_LINE_PATTERNS: tuple[tuple[FieldName, re.Pattern[str]], ...] = tuple(
    (
        name,
        re.compile(
            rf"^\s*(?:{labels})\s*(?::|\s{{2,}}|\t)\s*(?P<value>\S.*?)\s*$",
            re.IGNORECASE,
        ),
    )
    for name, labels in _LABELS
)

_EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)+")
_PHONE_RE = re.compile(r"(?<!\d)(?:\+?255[\s-]?|0)[67]\d{2}[\s-]?\d{3}[\s-]?\d{3}(?!\d)")

_DATE_FIELDS = frozenset({
    FieldName.DATE_OF_BIRTH,
    FieldName.ISSUE_DATE,
    FieldName.EXPIRY_DATE,
    FieldName.START_DATE,
    FieldName.END_DATE,
})
_EMPLOYMENT_DOCUMENT_TYPES = frozenset({"employment_letter", "payslip"})
_GENDERS = {"m": "male", "male": "male", "f": "female", "female": "female"}

# Unlabelled matches found anywhere in the text are less trustworthy.
_UNLABELLED_FACTOR = 0.8


class RuleBasedFieldExtractor(BaseFieldExtractor):
    """Extracts fields by matching printed labels line by line."""

    def extract(
        self,
        text: str,
        *,
        document_type: str,
        text_confidence: float,
    ) -> list[ExtractedField]:
        fields: list[ExtractedField] = []
        seen: set[FieldName] = set()
        for line in text.splitlines():
            match = self._match_line(line)
            if match is None:
                continue
            name, value = match
            if name is FieldName.FULL_NAME and document_type in _EMPLOYMENT_DOCUMENT_TYPES:
                name = FieldName.EMPLOYEE_NAME
            if name in seen:
                continue
            seen.add(name)
            fields.append(_build(name, value, text_confidence))

        if FieldName.EMAIL not in seen:
            email = _EMAIL_RE.search(text)
            if email:
                fields.append(_build(
                    FieldName.EMAIL, email.group(0), text_confidence * _UNLABELLED_FACTOR
                ))
        if FieldName.PHONE not in seen:
            phone = _PHONE_RE.search(text)
            if phone:
                fields.append(_build(
                    FieldName.PHONE, phone.group(0), text_confidence * _UNLABELLED_FACTOR
                ))
        return fields

    @staticmethod
    def _match_line(line: str) -> tuple[FieldName, str] | None:
        for name, pattern in _LINE_PATTERNS:
            m = pattern.match(line)
            if m:
                return name, m.group("value")
        return None


def _build(name: FieldName, raw: str, confidence: float) -> ExtractedField:
    value = " ".join(raw.split())
    status = FieldValidationStatus.VALID
    normalized = False
    if name in _DATE_FIELDS:
        iso = to_iso(value)
        if iso is None:
            status = FieldValidationStatus.INVALID
        else:
            normalized = iso != value
            value = iso
    elif name is FieldName.GENDER:
        mapped = _GENDERS.get(value.lower())
        if mapped is None:
            status = FieldValidationStatus.UNCERTAIN
        else:
            normalized = mapped != value
            value = mapped
    elif name is FieldName.EMAIL:
        normalized = value != value.lower()
        value = value.lower()
    return ExtractedField(
        field_name=name,
        value=value,
        confidence=round(max(0.0, min(1.0, confidence)), 4),
        normalized=normalized,
        validation_status=status,
    )
