"""Cross-document consistency checks.

Every function is pure over already-loaded documents, their extracted fields
and the customer's profile, and returns the checks it produced in a stable
order. Name and address disagreements are warnings, never failures.
"""

import re
from dataclasses import dataclass
from datetime import date

from docverify.documents.models import DocumentType, DocumentUpload
from docverify.extraction.dates import parse_date
from docverify.extraction.models import FieldMap, FieldName
from docverify.identity.models import TenantIdentityProfile
from docverify.identity.names import (
    match_id_numbers,
    match_names,
    normalize_name,
    validate_id_format,
)
from docverify.logging.logger import Log
from docverify.validation.models import ValidationCheck, ValidationCheckType, ValidationStatus
from docverify.verification.base import BaseExternalVerifier, IdVerificationRequest
from docverify.verification.exceptions import ExternalVerificationError

ID_DOCUMENT_TYPES = frozenset({
    DocumentType.NATIONAL_ID,
    DocumentType.PASSPORT,
    DocumentType.DRIVERS_LICENSE,
})
ADDRESS_DOCUMENT_TYPES = frozenset({
    DocumentType.UTILITY_BILL,
    DocumentType.BANK_STATEMENT,
    DocumentType.LEASE_AGREEMENT,
    DocumentType.SIGNED_LEASE,
})
LEASE_DOCUMENT_TYPES = frozenset({DocumentType.LEASE_AGREEMENT, DocumentType.SIGNED_LEASE})

# Share of the shorter address's tokens that must appear in the other one.
ADDRESS_TOKEN_OVERLAP = 0.5

_NON_DIGIT_RE = re.compile(r"\D")


@dataclass(frozen=True)
class DocumentFields:
    """A document with the fields of its latest completed extraction (may be empty)."""

    document: DocumentUpload
    fields: FieldMap


def check_name_matching(
    sources: list[DocumentFields],
    profile: TenantIdentityProfile | None,
    threshold: float,
) -> list[ValidationCheck]:
    names: list[tuple[str, str]] = []
    for source in sources:
        name = source.fields.first_value(FieldName.FULL_NAME, FieldName.EMPLOYEE_NAME)
        if name is not None and name.value:
            names.append((source.document.id, name.value))
    if profile is not None and profile.full_name:
        names.append((profile.id, profile.full_name))

    if not names:
        return [ValidationCheck(
            check_type=ValidationCheckType.NAME_MATCHING,
            status=ValidationStatus.SKIPPED,
            score=0.0,
            details="No names extracted from documents to compare",
            source_fields=(FieldName.FULL_NAME.value,),
        )]

    checks: list[ValidationCheck] = []
    for i, (source_a, name_a) in enumerate(names):
        for source_b, name_b in names[i + 1:]:
            match = match_names(name_a, name_b, threshold)
            checks.append(ValidationCheck(
                check_type=ValidationCheckType.NAME_MATCHING,
                status=ValidationStatus.PASSED if match.is_match else ValidationStatus.WARNING,
                score=match.similarity,
                details=match.details,
                source_documents=(source_a, source_b),
                source_fields=(FieldName.FULL_NAME.value,),
                expected_value=name_a,
                actual_value=name_b,
                discrepancy=None if match.is_match else f"Similarity: {match.similarity * 100:.1f}%",
            ))
    return checks


def check_id_numbers(
    sources: list[DocumentFields],
    profile: TenantIdentityProfile | None,
) -> list[ValidationCheck]:
    """Validate each ID document's number format and compare it with the profile."""
    checks: list[ValidationCheck] = []
    for source in sources:
        document = source.document
        if document.document_type not in ID_DOCUMENT_TYPES:
            continue
        id_number = source.fields.value(FieldName.ID_NUMBER)
        if not id_number:
            continue

        fmt = validate_id_format(id_number, document.document_type.value)
        checks.append(ValidationCheck(
            check_type=ValidationCheckType.ID_NUMBER_VERIFICATION,
            status=ValidationStatus.PASSED if fmt.is_valid else ValidationStatus.WARNING,
            score=1.0 if fmt.is_valid else 0.5,
            details=fmt.details,
            source_documents=(document.id,),
            source_fields=(FieldName.ID_NUMBER.value,),
            expected_value=f"Valid {document.document_type} format",
            actual_value=id_number,
            discrepancy=None if fmt.is_valid else fmt.details,
        ))

        if profile is None:
            continue
        recorded = [i for i in profile.id_numbers if i.type == document.document_type.value]
        if not recorded:
            continue
        matches = any(match_id_numbers(id_number, i.number) for i in recorded)
        checks.append(ValidationCheck(
            check_type=ValidationCheckType.ID_NUMBER_VERIFICATION,
            status=ValidationStatus.PASSED if matches else ValidationStatus.FAILED,
            score=1.0 if matches else 0.0,
            details=(
                "ID number matches profile record"
                if matches else "ID number does not match profile record"
            ),
            source_documents=(document.id,),
            source_fields=(FieldName.ID_NUMBER.value,),
            expected_value=", ".join(i.number for i in recorded),
            actual_value=id_number,
            discrepancy=None if matches else "ID numbers do not match",
        ))
    return checks


def check_address_consistency(sources: list[DocumentFields]) -> list[ValidationCheck]:
    addresses: list[tuple[str, str]] = []
    for source in sources:
        if source.document.document_type not in ADDRESS_DOCUMENT_TYPES:
            continue
        field = source.fields.first_value(FieldName.ADDRESS, FieldName.ADDRESS_LINE1)
        if field is not None and field.value:
            addresses.append((source.document.id, field.value))

    if len(addresses) < 2:
        return []

    reference = set(normalize_name(addresses[0][1]).split())
    consistent = all(
        _tokens_overlap(reference, set(normalize_name(address).split()))
        for _, address in addresses[1:]
    )
    return [ValidationCheck(
        check_type=ValidationCheckType.ADDRESS_CONSISTENCY,
        status=ValidationStatus.PASSED if consistent else ValidationStatus.WARNING,
        score=1.0 if consistent else 0.5,
        details=(
            "Addresses appear consistent across documents"
            if consistent
            else "Addresses may differ across documents - manual review recommended"
        ),
        source_documents=tuple(doc_id for doc_id, _ in addresses),
        source_fields=(FieldName.ADDRESS.value,),
        expected_value=addresses[0][1],
        actual_value=addresses[1][1],
        discrepancy=None if consistent else "Address variations detected",
    )]


def _tokens_overlap(a: set[str], b: set[str]) -> bool:
    if not a or not b:
        return False
    return len(a & b) / min(len(a), len(b)) >= ADDRESS_TOKEN_OVERLAP


def check_date_alignment(
    sources: list[DocumentFields],
    today: date,
    expiry_warning_days: int,
) -> list[ValidationCheck]:
    checks: list[ValidationCheck] = []

    lease = next(
        (s for s in sources if s.document.document_type in LEASE_DOCUMENT_TYPES), None
    )
    if lease is not None:
        raw_start = lease.fields.value(FieldName.START_DATE)
        raw_end = lease.fields.value(FieldName.END_DATE)
        start, end = parse_date(raw_start), parse_date(raw_end)
        if start is not None and end is not None:
            ordered = end > start
            checks.append(ValidationCheck(
                check_type=ValidationCheckType.DATE_ALIGNMENT,
                status=ValidationStatus.PASSED if ordered else ValidationStatus.FAILED,
                score=1.0 if ordered else 0.0,
                details=(
                    "Lease dates are valid and properly ordered"
                    if ordered else "Lease end date is before or equal to start date"
                ),
                source_documents=(lease.document.id,),
                source_fields=(FieldName.START_DATE.value, FieldName.END_DATE.value),
                expected_value="End date after start date",
                actual_value=f"Start: {raw_start}, End: {raw_end}",
                discrepancy=None if ordered else "Invalid date range",
            ))

    for source in sources:
        if source.document.document_type not in ID_DOCUMENT_TYPES:
            continue
        raw_expiry = source.document.metadata.get("expires_at") or source.fields.value(
            FieldName.EXPIRY_DATE
        )
        expiry = parse_date(raw_expiry)
        if expiry is None:
            continue
        days_left = (expiry - today).days
        if expiry < today:
            status, score, details = ValidationStatus.FAILED, 0.0, "Document has expired"
        elif days_left < expiry_warning_days:
            status, score = ValidationStatus.WARNING, 0.7
            details = f"Document expires in {days_left} days"
        else:
            status, score, details = ValidationStatus.PASSED, 1.0, "Document is valid and not expired"
        checks.append(ValidationCheck(
            check_type=ValidationCheckType.DATE_ALIGNMENT,
            status=status,
            score=score,
            details=details,
            source_documents=(source.document.id,),
            source_fields=(FieldName.EXPIRY_DATE.value,),
            expected_value="Valid (not expired)",
            actual_value=str(raw_expiry),
            discrepancy=None if status is ValidationStatus.PASSED else details,
        ))
    return checks


def check_contact_consistency(
    sources: list[DocumentFields],
    profile: TenantIdentityProfile | None,
) -> list[ValidationCheck]:
    """Compare document phones and emails with the profile's primary contact."""
    if profile is None:
        return []
    phones = [p for s in sources if (p := s.fields.value(FieldName.PHONE))]
    emails = [e for s in sources if (e := s.fields.value(FieldName.EMAIL))]
    document_ids = tuple(s.document.id for s in sources)
    contact = profile.contact_info
    checks: list[ValidationCheck] = []

    if phones and contact.primary_phone:
        expected = _NON_DIGIT_RE.sub("", contact.primary_phone)
        matches = any(expected in _NON_DIGIT_RE.sub("", phone) for phone in phones)
        checks.append(ValidationCheck(
            check_type=ValidationCheckType.CONTACT_CONSISTENCY,
            status=ValidationStatus.PASSED if matches else ValidationStatus.WARNING,
            score=1.0 if matches else 0.5,
            details=(
                "Phone numbers are consistent"
                if matches else "Phone numbers may differ across documents"
            ),
            source_documents=document_ids,
            source_fields=(FieldName.PHONE.value,),
            expected_value=contact.primary_phone,
            actual_value=", ".join(phones),
            discrepancy=None if matches else "Phone number variation detected",
        ))

    if emails and contact.email:
        matches = any(email.lower() == contact.email.lower() for email in emails)
        checks.append(ValidationCheck(
            check_type=ValidationCheckType.CONTACT_CONSISTENCY,
            status=ValidationStatus.PASSED if matches else ValidationStatus.WARNING,
            score=1.0 if matches else 0.5,
            details=(
                "Email addresses are consistent"
                if matches else "Email addresses may differ across documents"
            ),
            source_documents=document_ids,
            source_fields=(FieldName.EMAIL.value,),
            expected_value=contact.email,
            actual_value=", ".join(emails),
            discrepancy=None if matches else "Email variation detected",
        ))
    return checks


def check_document_completeness(
    documents: list[DocumentUpload],
    required_types: tuple[str, ...],
) -> list[ValidationCheck]:
    present = {d.document_type.value for d in documents}
    checks: list[ValidationCheck] = []
    for required in required_types:
        found = required in present
        checks.append(ValidationCheck(
            check_type=ValidationCheckType.DOCUMENT_COMPLETENESS,
            status=ValidationStatus.PASSED if found else ValidationStatus.WARNING,
            score=1.0 if found else 0.5,
            details=f"{required} document is {'present' if found else 'missing'}",
            expected_value=required,
            actual_value="Present" if found else "Missing",
            discrepancy=None if found else f"Missing {required}",
        ))
    return checks


def check_external_verification(
    profile: TenantIdentityProfile,
    verifier: BaseExternalVerifier,
    default_country: str,
) -> list[ValidationCheck]:
    """Confirm each profile ID with the registry; registry errors become skipped checks."""
    checks: list[ValidationCheck] = []
    for id_number in profile.id_numbers:
        request = IdVerificationRequest(
            id_type=id_number.type,
            id_number=id_number.number,
            full_name=profile.full_name,
            date_of_birth=profile.date_of_birth,
            country=id_number.issuing_country or default_country,
        )
        try:
            response = verifier.verify_id_number(request)
        except ExternalVerificationError as exc:
            Log.error("External verification failed", id_type=id_number.type, error=exc)
            checks.append(ValidationCheck(
                check_type=ValidationCheckType.EXTERNAL_VERIFICATION,
                status=ValidationStatus.SKIPPED,
                score=0.0,
                details="External verification service unavailable",
            ))
            continue
        checks.append(ValidationCheck(
            check_type=ValidationCheckType.EXTERNAL_VERIFICATION,
            status=ValidationStatus.PASSED if response.verified else ValidationStatus.FAILED,
            score=response.confidence,
            details=response.details,
            source_fields=response.matched_fields,
            expected_value="External verification match",
            actual_value="Verified" if response.verified else "Not verified",
            discrepancy=(
                None if response.verified
                else f"Mismatched fields: {', '.join(response.mismatched_fields)}"
            ),
        ))
    return checks
