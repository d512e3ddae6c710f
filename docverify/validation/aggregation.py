"""Overall verdict, summary and recommendations derived from a list of checks."""

from dataclasses import dataclass

from docverify.validation.models import ValidationCheck, ValidationCheckType, ValidationStatus

# Manual review is only forced once warnings exceed this count.
MAX_UNREVIEWED_WARNINGS = 2

_FAILED_RECOMMENDATIONS = {
    ValidationCheckType.NAME_MATCHING:
        "Verify customer name across all documents - significant mismatch detected",
    ValidationCheckType.ID_NUMBER_VERIFICATION:
        "Request valid ID document - current ID failed verification",
    ValidationCheckType.DATE_ALIGNMENT:
        "Review document dates - inconsistent or invalid dates detected",
}

_WARNING_RECOMMENDATIONS = {
    ValidationCheckType.NAME_MATCHING: "Confirm minor name variations are acceptable",
    ValidationCheckType.ADDRESS_CONSISTENCY:
        "Verify address variations are for the same location",
}


@dataclass(frozen=True)
class Verdict:
    status: ValidationStatus
    score: float
    requires_manual_review: bool


def aggregate(checks: list[ValidationCheck], auto_approve_threshold: float) -> Verdict:
    active = [c for c in checks if c.status is not ValidationStatus.SKIPPED]
    if not active:
        return Verdict(ValidationStatus.SKIPPED, 0.0, True)

    failed = sum(1 for c in active if c.status is ValidationStatus.FAILED)
    warnings = sum(1 for c in active if c.status is ValidationStatus.WARNING)
    mean = sum(c.score for c in active) / len(active)
    score = round(mean, 2)

    if failed:
        return Verdict(ValidationStatus.FAILED, score, True)
    if warnings:
        return Verdict(ValidationStatus.WARNING, score, warnings > MAX_UNREVIEWED_WARNINGS)
    if mean >= auto_approve_threshold:
        return Verdict(ValidationStatus.PASSED, score, False)
    return Verdict(ValidationStatus.MANUAL_REVIEW, score, True)


def summarize(checks: list[ValidationCheck], status: ValidationStatus) -> str:
    total = len(checks)
    passed = sum(1 for c in checks if c.status is ValidationStatus.PASSED)
    failed = sum(1 for c in checks if c.status is ValidationStatus.FAILED)
    warnings = sum(1 for c in checks if c.status is ValidationStatus.WARNING)

    if status is ValidationStatus.PASSED:
        return f"Validation completed successfully. {passed}/{total} checks passed."
    if status is ValidationStatus.WARNING:
        return f"Validation completed with {warnings} warning(s). {passed}/{total} checks passed."
    if status is ValidationStatus.FAILED:
        return f"Validation failed. {failed} critical issue(s) detected."
    return f"Validation requires manual review. {passed}/{total} checks passed."


def recommend(checks: list[ValidationCheck]) -> list[str]:
    """One recommendation per failed or warning check, deduplicated in order."""
    recommendations: list[str] = []
    for check in checks:
        if check.status is ValidationStatus.FAILED:
            text = _FAILED_RECOMMENDATIONS.get(
                check.check_type,
                f"Review {check.check_type} - {check.discrepancy or 'issue detected'}",
            )
        elif check.status is ValidationStatus.WARNING:
            text = _WARNING_RECOMMENDATIONS.get(
                check.check_type, f"Consider reviewing {check.check_type}"
            )
        else:
            continue
        if text not in recommendations:
            recommendations.append(text)
    return recommendations
