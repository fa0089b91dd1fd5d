"""Evaluate extracted certificate data against a list of coverage requirements."""

from datetime import date
from typing import Iterable, Optional

from schemas.compliance import (
    ComplianceResult, CoverageRequirement, ExpiringCoverage, ExpiryState,
    ExtractedCertificateData, ExtractedCoverage, Gap, GapReason, OverallStatus,
    validate_as,
)
from services.compliance.errors import MissingExpirationDate
from services.compliance.expiration import (
    DEFAULT_WARN_WINDOW_DAYS, check_expiration, days_until_expiration,
)
from services.compliance.matcher import match_coverage
from services.compliance.normalize import entity_names_match, format_amount

EXPIRATION_DATE_REQUIRED = "Policy expiration date"
HOLDER_FIELD = "certificate_holder"


def _missing_gap(requirement: CoverageRequirement) -> Gap:
    return Gap(
        coverage=requirement.coverage_type,
        reason=GapReason.MISSING,
        required_value=format_amount(requirement.min_amount),
        actual_value=None,
        explanation="Coverage not found on certificate",
    )


def _missing_expiration_gap(coverage: str) -> Gap:
    return Gap(
        coverage=coverage,
        reason=GapReason.MISSING,
        required_value=EXPIRATION_DATE_REQUIRED,
        actual_value=None,
        explanation="No policy expiration date shown",
    )


def _holder_gap(required_holder: str, actual_holder: Optional[str]) -> Optional[Gap]:
    if entity_names_match(required_holder, actual_holder):
        return None
    if actual_holder:
        explanation = f"Certificate holder \"{actual_holder}\" does not match \"{required_holder}\""
    else:
        explanation = "Certificate holder not shown on certificate"
    return Gap(
        coverage=HOLDER_FIELD,
        reason=GapReason.HOLDER_MISMATCH,
        required_value=required_holder,
        actual_value=actual_holder,
        explanation=explanation,
    )


def _expiration_gap(coverage: str, state: ExpiryState, effective: Optional[date],
                    expiration: date, as_of: date) -> Gap:
    if state == ExpiryState.NOT_YET_EFFECTIVE:
        return Gap(
            coverage=coverage,
            reason=GapReason.EXPIRED,
            required_value=f"In force on {as_of.isoformat()}",
            actual_value=f"Effective {effective.isoformat()}",
            explanation=f"Coverage is not in force until {effective.isoformat()}",
        )
    return Gap(
        coverage=coverage,
        reason=GapReason.EXPIRED,
        required_value=f"In force on {as_of.isoformat()}",
        actual_value=f"Expired {expiration.isoformat()}",
        explanation=f"Coverage expired on {expiration.isoformat()}",
    )


def _overall_status(gaps: Iterable[Gap]) -> OverallStatus:
    reasons = {gap.reason for gap in gaps}
    if GapReason.EXPIRED in reasons:
        return OverallStatus.EXPIRED
    if reasons:
        return OverallStatus.NON_COMPLIANT
    return OverallStatus.COMPLIANT


def evaluate(
    required_coverages: Iterable[CoverageRequirement],
    actual: ExtractedCertificateData,
    as_of: date,
    warn_window_days: int = DEFAULT_WARN_WINDOW_DAYS,
    required_holder: Optional[str] = None,
) -> ComplianceResult:
    """Run every requirement against the certificate and build a fresh result.

    Requirements are processed in the order given. A coverage absent from
    the certificate yields a single ``missing`` gap and nothing else. A
    present coverage is checked for limits, endorsements and its policy
    period; coverage-level dates win over certificate-level dates.

    A present coverage with no expiration date on either the line or the
    certificate gets a ``missing`` gap for the date; the remaining lines
    are still checked.

    When ``required_holder`` is given, the certificate holder must match it
    after name normalization (LLC/Inc/Corp forms fold together). A
    mismatch or an absent holder is reported after the coverage gaps.

    Gaps on advisory lines (``is_required=False``) are reported separately
    in ``advisories`` and never change the overall status. Expiring-soon
    lines are informational and never produce a gap.

    Raises ValidationError for malformed dict input or a negative window.
    """
    requirements = [validate_as(CoverageRequirement, r) for r in required_coverages]
    actual = validate_as(ExtractedCertificateData, actual)

    gaps = []
    advisories = []
    expiring = []
    expirations = []

    for requirement in requirements:
        coverage_type = requirement.coverage_type
        target = gaps if requirement.is_required else advisories
        coverage: Optional[ExtractedCoverage] = actual.coverage(coverage_type)

        if coverage is None:
            target.append(_missing_gap(requirement))
            continue

        target.extend(match_coverage(requirement, coverage).gaps)

        effective = coverage.effective_date or actual.effective_date
        expiration = coverage.expiration_date or actual.expiration_date
        try:
            state = check_expiration(effective, expiration, as_of, warn_window_days, coverage=coverage_type)
        except MissingExpirationDate:
            target.append(_missing_expiration_gap(coverage_type))
            continue
        expirations.append(expiration)

        if state in (ExpiryState.EXPIRED, ExpiryState.NOT_YET_EFFECTIVE):
            target.append(_expiration_gap(coverage_type, state, effective, expiration, as_of))
        elif state == ExpiryState.EXPIRING_SOON:
            expiring.append(ExpiringCoverage(
                coverage=coverage_type,
                expiration_date=expiration,
                days_remaining=days_until_expiration(expiration, as_of),
            ))

    if required_holder:
        holder_gap = _holder_gap(required_holder, actual.certificate_holder)
        if holder_gap is not None:
            gaps.append(holder_gap)

    return ComplianceResult(
        overall_status=_overall_status(gaps),
        gaps=tuple(gaps),
        advisories=tuple(advisories),
        expiring_soon=tuple(expiring),
        earliest_expiration=min(expirations) if expirations else None,
        as_of=as_of,
    )
