from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import StrEnum


class FieldName(StrEnum):
    FULL_NAME = "full_name"
    FIRST_NAME = "first_name"
    MIDDLE_NAME = "middle_name"
    LAST_NAME = "last_name"
    DATE_OF_BIRTH = "date_of_birth"
    PLACE_OF_BIRTH = "place_of_birth"
    GENDER = "gender"
    NATIONALITY = "nationality"
    ID_NUMBER = "id_number"
    ISSUE_DATE = "issue_date"
    EXPIRY_DATE = "expiry_date"
    ADDRESS = "address"
    ADDRESS_LINE1 = "address_line1"
    ADDRESS_LINE2 = "address_line2"
    CITY = "city"
    REGION = "region"
    POSTAL_CODE = "postal_code"
    COUNTRY = "country"
    EMPLOYEE_NAME = "employee_name"
    EMPLOYER_NAME = "employer_name"
    JOB_TITLE = "job_title"
    EMPLOYMENT_TYPE = "employment_type"
    SALARY = "salary"
    START_DATE = "start_date"
    END_DATE = "end_date"
    PHONE = "phone"
    EMAIL = "email"


IDENTITY_FIELDS = frozenset({
    FieldName.FULL_NAME,
    FieldName.FIRST_NAME,
    FieldName.MIDDLE_NAME,
    FieldName.LAST_NAME,
    FieldName.DATE_OF_BIRTH,
    FieldName.PLACE_OF_BIRTH,
    FieldName.GENDER,
    FieldName.NATIONALITY,
    FieldName.ID_NUMBER,
    FieldName.ISSUE_DATE,
    FieldName.EXPIRY_DATE,
})

EMPLOYMENT_FIELDS = frozenset({
    FieldName.EMPLOYEE_NAME,
    FieldName.EMPLOYER_NAME,
    FieldName.JOB_TITLE,
    FieldName.EMPLOYMENT_TYPE,
    FieldName.SALARY,
    FieldName.START_DATE,
    FieldName.END_DATE,
})

ADDRESS_FIELDS = frozenset({
    FieldName.ADDRESS,
    FieldName.ADDRESS_LINE1,
    FieldName.ADDRESS_LINE2,
    FieldName.CITY,
    FieldName.REGION,
    FieldName.POSTAL_CODE,
    FieldName.COUNTRY,
})

LEASE_FIELDS = frozenset({FieldName.START_DATE, FieldName.END_DATE})

CONTACT_FIELDS = frozenset({FieldName.PHONE, FieldName.EMAIL})


class FieldValidationStatus(StrEnum):
    VALID = "valid"
    INVALID = "invalid"
    UNCERTAIN = "uncertain"


@dataclass(frozen=True)
class BoundingBox:
    left: float
    top: float
    width: float
    height: float


@dataclass(frozen=True)
class ExtractedField:
    """One OCR-derived datum."""

    field_name: FieldName
    value: str | None
    confidence: float
    bounding_box: BoundingBox | None = None
    normalized: bool = False
    validation_status: FieldValidationStatus = FieldValidationStatus.UNCERTAIN


class FieldMap:
    """Lookup table over extracted fields; the most confident value per name wins."""

    def __init__(self, fields: Iterable[ExtractedField]) -> None:
        self._fields: dict[FieldName, ExtractedField] = {}
        for f in fields:
            if not f.value:
                continue
            current = self._fields.get(f.field_name)
            if current is None or f.confidence > current.confidence:
                self._fields[f.field_name] = f

    def get(self, name: FieldName) -> ExtractedField | None:
        return self._fields.get(name)

    def value(self, name: FieldName) -> str | None:
        f = self._fields.get(name)
        return f.value if f is not None else None

    def first_value(self, *names: FieldName) -> ExtractedField | None:
        """Return the first present field among *names*, in the given order."""
        for name in names:
            f = self._fields.get(name)
            if f is not None:
                return f
        return None

    def has_all(self, *names: FieldName) -> bool:
        return all(name in self._fields for name in names)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[ExtractedField]:
        return iter(self._fields.values())

    def __len__(self) -> int:
        return len(self._fields)
