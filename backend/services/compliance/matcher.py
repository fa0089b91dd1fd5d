"""Compare one extracted coverage line against one requirement."""

from typing import NamedTuple

from schemas.compliance import CoverageRequirement, ExtractedCoverage, Gap, GapReason
from services.compliance.normalize import format_amount


class MatchOutcome(NamedTuple):
    ok: bool
    gaps: tuple[Gap, ...]

    @property
    def reason(self):
        """Reason of the first gap, or None when the line passes."""
        return self.gaps[0].reason if self.gaps else None


def _normalize_endorsement(name: str) -> str:
    return name.strip().casefold()


def match_coverage(required: CoverageRequirement, actual: ExtractedCoverage) -> MatchOutcome:
    """Check limit, aggregate and endorsements of a present coverage line.

    Every failed check yields its own gap, in the order amount, aggregate,
    endorsements. The function is pure.
    """
    coverage = required.coverage_type
    gaps = []

    # Statutory lines pass on presence alone
    below_minimum = not required.is_statutory and (
        actual.amount is None or actual.amount < required.min_amount
    )
    if below_minimum:
        if actual.amount is None:
            explanation = f"No limit shown; {format_amount(required.min_amount)} required"
        else:
            explanation = (
                f"Limit {format_amount(actual.amount)} is below required "
                f"{format_amount(required.min_amount)}"
            )
        gaps.append(Gap(
            coverage=coverage,
            reason=GapReason.AMOUNT_BELOW_MINIMUM,
            required_value=format_amount(required.min_amount),
            actual_value=format_amount(actual.amount),
            explanation=explanation,
        ))

    if required.min_aggregate is not None:
        if actual.aggregate is None or actual.aggregate < required.min_aggregate:
            if actual.aggregate is None:
                explanation = f"No aggregate limit shown; {format_amount(required.min_aggregate)} required"
            else:
                explanation = (
                    f"Aggregate {format_amount(actual.aggregate)} is below required "
                    f"{format_amount(required.min_aggregate)}"
                )
            gaps.append(Gap(
                coverage=coverage,
                reason=GapReason.AGGREGATE_BELOW_MINIMUM,
                required_value=format_amount(required.min_aggregate),
                actual_value=format_amount(actual.aggregate),
                explanation=explanation,
            ))

    present = {_normalize_endorsement(e) for e in actual.endorsements}
    for endorsement in required.required_endorsements:
        if _normalize_endorsement(endorsement) not in present:
            gaps.append(Gap(
                coverage=coverage,
                reason=GapReason.ENDORSEMENT_MISSING,
                required_value=endorsement,
                actual_value=None,
                explanation=f"{endorsement} endorsement not shown on certificate",
            ))

    return MatchOutcome(ok=not gaps, gaps=tuple(gaps))
