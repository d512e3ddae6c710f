from datetime import date
from unittest.mock import MagicMock

from docverify.documents.models import DocumentStatus, DocumentType, DocumentUpload
from docverify.extraction.models import ExtractedField, FieldMap, FieldName
from docverify.identity.models import ContactInfo, IdNumber, TenantIdentityProfile
from docverify.validation.checks import (
    DocumentFields,
    check_address_consistency,
    check_contact_consistency,
    check_date_alignment,
    check_document_completeness,
    check_external_verification,
    check_id_numbers,
    check_name_matching,
)
from docverify.validation.models import ValidationCheckType, ValidationStatus
from docverify.verification.base import BaseExternalVerifier, IdVerificationResponse
from docverify.verification.exceptions import ExternalVerificationError

TODAY = date(2025, 3, 1)


def _document(
    document_id: str, document_type: DocumentType, metadata: dict | None = None
) -> DocumentUpload:
    return DocumentUpload(
        id=document_id,
        tenant_id="tenant-1",
        customer_id="cust-1",
        document_type=document_type,
        status=DocumentStatus.OCR_COMPLETED,
        original_file_name="f.pdf",
        mime_type="application/pdf",
        file_size=1000,
        storage_key="f.pdf",
        checksum="f" * 64,
        metadata=metadata or {},
    )


def _source(
    document_id: str,
    document_type: DocumentType,
    metadata: dict | None = None,
    **values: str,
) -> DocumentFields:
    fields = FieldMap(
        ExtractedField(field_name=FieldName(k), value=v, confidence=0.9)
        for k, v in values.items()
    )
    return DocumentFields(_document(document_id, document_type, metadata), fields)


def _profile(**kwargs) -> TenantIdentityProfile:
    return TenantIdentityProfile(id="profile-1", tenant_id="tenant-1", customer_id="cust-1", **kwargs)


class TestNameMatching:
    def test_minor_spelling_variation_passes(self) -> None:
        sources = [
            _source("doc-id", DocumentType.NATIONAL_ID, full_name="John Mwangi"),
            _source("doc-lease", DocumentType.LEASE_AGREEMENT, full_name="Jon Mwangi"),
        ]

        checks = check_name_matching(sources, None, 0.85)

        assert len(checks) == 1
        assert checks[0].status is ValidationStatus.PASSED
        assert checks[0].score >= 0.85
        assert checks[0].source_documents == ("doc-id", "doc-lease")
        assert checks[0].discrepancy is None

    def test_different_names_are_a_warning_not_a_failure(self) -> None:
        sources = [
            _source("doc-id", DocumentType.NATIONAL_ID, full_name="Asha Juma"),
            _source("doc-slip", DocumentType.PAYSLIP, employee_name="Peter Smith"),
        ]

        checks = check_name_matching(sources, None, 0.85)

        assert checks[0].status is ValidationStatus.WARNING
        assert checks[0].discrepancy.startswith("Similarity: ")

    def test_compares_every_pair_including_profile(self) -> None:
        sources = [
            _source("doc-a", DocumentType.NATIONAL_ID, full_name="Asha Juma"),
            _source("doc-b", DocumentType.UTILITY_BILL, full_name="Asha Juma"),
        ]
        profile = _profile(full_name="Asha Juma")

        checks = check_name_matching(sources, profile, 0.85)

        assert len(checks) == 3
        assert checks[2].source_documents == ("doc-b", "profile-1")
        assert all(c.status is ValidationStatus.PASSED for c in checks)

    def test_no_names_is_skipped(self) -> None:
        sources = [_source("doc-a", DocumentType.UTILITY_BILL, address="1 Main St")]

        checks = check_name_matching(sources, None, 0.85)

        assert len(checks) == 1
        assert checks[0].status is ValidationStatus.SKIPPED
        assert checks[0].check_type is ValidationCheckType.NAME_MATCHING

    def test_single_name_produces_no_comparison(self) -> None:
        sources = [_source("doc-a", DocumentType.NATIONAL_ID, full_name="Asha Juma")]

        assert check_name_matching(sources, None, 0.85) == []


class TestIdNumbers:
    def test_valid_format_without_profile(self) -> None:
        sources = [
            _source("doc-id", DocumentType.NATIONAL_ID, id_number="1990-0101-1234-5678-9012"),
        ]

        checks = check_id_numbers(sources, None)

        assert len(checks) == 1
        assert checks[0].status is ValidationStatus.PASSED
        assert checks[0].details == "Valid Tanzania NIDA format"

    def test_unrecognized_format_is_warning(self) -> None:
        sources = [_source("doc-pp", DocumentType.PASSPORT, id_number="12")]

        checks = check_id_numbers(sources, None)

        assert checks[0].status is ValidationStatus.WARNING
        assert checks[0].score == 0.5

    def test_mismatch_with_profile_fails(self) -> None:
        sources = [_source("doc-id", DocumentType.NATIONAL_ID, id_number="19900101123456789012")]
        profile = _profile(
            id_numbers=(IdNumber(type="national_id", number="19900101123456789099"),),
        )

        checks = check_id_numbers(sources, profile)

        assert [c.status for c in checks] == [ValidationStatus.PASSED, ValidationStatus.FAILED]
        assert checks[1].discrepancy == "ID numbers do not match"

    def test_match_with_profile_ignores_formatting(self) -> None:
        sources = [_source("doc-id", DocumentType.NATIONAL_ID, id_number="19900101 1234 5678 9012")]
        profile = _profile(
            id_numbers=(IdNumber(type="national_id", number="19900101-1234-5678-9012"),),
        )

        checks = check_id_numbers(sources, profile)

        assert checks[1].status is ValidationStatus.PASSED

    def test_profile_ids_of_other_type_are_not_compared(self) -> None:
        sources = [_source("doc-id", DocumentType.NATIONAL_ID, id_number="19900101123456789012")]
        profile = _profile(id_numbers=(IdNumber(type="passport", number="AB1234567"),))

        checks = check_id_numbers(sources, profile)

        assert len(checks) == 1

    def test_non_id_documents_are_ignored(self) -> None:
        sources = [_source("doc-bill", DocumentType.UTILITY_BILL, id_number="19900101123456789012")]

        assert check_id_numbers(sources, None) == []


class TestAddressConsistency:
    def test_overlapping_addresses_pass(self) -> None:
        sources = [
            _source("doc-bill", DocumentType.UTILITY_BILL, address="Plot 12, Msasani Road, Dar es Salaam"),
            _source("doc-bank", DocumentType.BANK_STATEMENT, address_line1="Plot 12 Msasani Rd"),
        ]

        checks = check_address_consistency(sources)

        assert len(checks) == 1
        assert checks[0].status is ValidationStatus.PASSED
        assert checks[0].source_documents == ("doc-bill", "doc-bank")

    def test_different_addresses_warn(self) -> None:
        sources = [
            _source("doc-bill", DocumentType.UTILITY_BILL, address="Plot 12 Msasani Road"),
            _source("doc-lease", DocumentType.LEASE_AGREEMENT, address="45 Kenyatta Avenue Nairobi"),
        ]

        checks = check_address_consistency(sources)

        assert checks[0].status is ValidationStatus.WARNING
        assert checks[0].discrepancy == "Address variations detected"

    def test_fewer_than_two_addresses_produces_nothing(self) -> None:
        sources = [
            _source("doc-bill", DocumentType.UTILITY_BILL, address="Plot 12 Msasani Road"),
            _source("doc-id", DocumentType.NATIONAL_ID, address="Somewhere else"),
        ]

        assert check_address_consistency(sources) == []


class TestDateAlignment:
    def test_lease_dates_in_order_pass(self) -> None:
        sources = [
            _source("doc-lease", DocumentType.LEASE_AGREEMENT, start_date="01/01/2025", end_date="31/12/2025"),
        ]

        checks = check_date_alignment(sources, TODAY, 30)

        assert checks[0].status is ValidationStatus.PASSED

    def test_lease_end_before_start_fails(self) -> None:
        sources = [
            _source("doc-lease", DocumentType.SIGNED_LEASE, start_date="2025-06-01", end_date="2025-01-01"),
        ]

        checks = check_date_alignment(sources, TODAY, 30)

        assert checks[0].status is ValidationStatus.FAILED
        assert checks[0].discrepancy == "Invalid date range"

    def test_expired_document_fails(self) -> None:
        sources = [_source("doc-id", DocumentType.PASSPORT, expiry_date="2024-12-31")]

        checks = check_date_alignment(sources, TODAY, 30)

        assert checks[0].status is ValidationStatus.FAILED
        assert checks[0].details == "Document has expired"

    def test_expiring_soon_warns(self) -> None:
        sources = [_source("doc-id", DocumentType.NATIONAL_ID, metadata={"expires_at": "2025-03-11"})]

        checks = check_date_alignment(sources, TODAY, 30)

        assert checks[0].status is ValidationStatus.WARNING
        assert checks[0].score == 0.7
        assert checks[0].details == "Document expires in 10 days"

    def test_metadata_expiry_takes_precedence(self) -> None:
        sources = [
            _source(
                "doc-id",
                DocumentType.NATIONAL_ID,
                metadata={"expires_at": "2030-01-01"},
                expiry_date="2020-01-01",
            ),
        ]

        checks = check_date_alignment(sources, TODAY, 30)

        assert checks[0].status is ValidationStatus.PASSED

    def test_unparseable_dates_produce_nothing(self) -> None:
        sources = [
            _source("doc-lease", DocumentType.LEASE_AGREEMENT, start_date="soon", end_date="later"),
            _source("doc-id", DocumentType.NATIONAL_ID, expiry_date="never"),
        ]

        assert check_date_alignment(sources, TODAY, 30) == []


class TestContactConsistency:
    def test_phone_match_ignores_formatting(self) -> None:
        sources = [_source("doc-bill", DocumentType.UTILITY_BILL, phone="+255 712 345 678")]
        profile = _profile(contact_info=ContactInfo(primary_phone="255712345678"))

        checks = check_contact_consistency(sources, profile)

        assert len(checks) == 1
        assert checks[0].status is ValidationStatus.PASSED

    def test_email_mismatch_warns(self) -> None:
        sources = [_source("doc-slip", DocumentType.PAYSLIP, email="asha@work.example")]
        profile = _profile(contact_info=ContactInfo(email="Asha@Home.example"))

        checks = check_contact_consistency(sources, profile)

        assert checks[0].status is ValidationStatus.WARNING
        assert checks[0].discrepancy == "Email variation detected"

    def test_email_comparison_is_case_insensitive(self) -> None:
        sources = [_source("doc-slip", DocumentType.PAYSLIP, email="ASHA@home.example")]
        profile = _profile(contact_info=ContactInfo(email="asha@home.example"))

        checks = check_contact_consistency(sources, profile)

        assert checks[0].status is ValidationStatus.PASSED

    def test_no_profile_produces_nothing(self) -> None:
        sources = [_source("doc-bill", DocumentType.UTILITY_BILL, phone="0712345678")]

        assert check_contact_consistency(sources, None) == []


class TestDocumentCompleteness:
    def test_reports_present_and_missing_types(self) -> None:
        documents = [_document("doc-id", DocumentType.NATIONAL_ID)]

        checks = check_document_completeness(documents, ("national_id", "lease_agreement"))

        assert [c.status for c in checks] == [ValidationStatus.PASSED, ValidationStatus.WARNING]
        assert checks[1].details == "lease_agreement document is missing"
        assert checks[1].discrepancy == "Missing lease_agreement"


class TestExternalVerification:
    def _profile_with_id(self) -> TenantIdentityProfile:
        return _profile(
            full_name="Asha Juma",
            id_numbers=(IdNumber(type="national_id", number="19900101123456789012"),),
        )

    def test_verified_response_passes(self) -> None:
        verifier = MagicMock(spec=BaseExternalVerifier)
        verifier.verify_id_number.return_value = IdVerificationResponse(
            verified=True,
            confidence=0.97,
            matched_fields=("id_number", "full_name"),
            details="Record found",
        )

        checks = check_external_verification(self._profile_with_id(), verifier, "TZ")

        assert checks[0].status is ValidationStatus.PASSED
        assert checks[0].score == 0.97
        request = verifier.verify_id_number.call_args[0][0]
        assert request.country == "TZ"
        assert request.full_name == "Asha Juma"

    def test_unverified_response_fails_with_mismatched_fields(self) -> None:
        verifier = MagicMock(spec=BaseExternalVerifier)
        verifier.verify_id_number.return_value = IdVerificationResponse(
            verified=False,
            confidence=0.2,
            mismatched_fields=("full_name",),
            details="Name differs",
        )

        checks = check_external_verification(self._profile_with_id(), verifier, "TZ")

        assert checks[0].status is ValidationStatus.FAILED
        assert checks[0].discrepancy == "Mismatched fields: full_name"

    def test_registry_error_is_skipped(self) -> None:
        verifier = MagicMock(spec=BaseExternalVerifier)
        verifier.verify_id_number.side_effect = ExternalVerificationError("Registry request timed out")

        checks = check_external_verification(self._profile_with_id(), verifier, "TZ")

        assert checks[0].status is ValidationStatus.SKIPPED
        assert checks[0].details == "External verification service unavailable"
