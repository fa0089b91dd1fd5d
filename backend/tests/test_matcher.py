"""Tests for comparing a single coverage line against a requirement."""

from schemas.compliance import CoverageRequirement, ExtractedCoverage, GapReason
from services.compliance.matcher import match_coverage


def _requirement(**overrides) -> CoverageRequirement:
    fields = {"coverage_type": "general_liability", "min_amount": 1000000}
    fields.update(overrides)
    return CoverageRequirement(**fields)


def test_amount_equal_to_minimum_passes():
    outcome = match_coverage(_requirement(), ExtractedCoverage(amount=1000000))

    assert outcome.ok
    assert outcome.gaps == ()
    assert outcome.reason is None


def test_amount_one_dollar_short_fails():
    outcome = match_coverage(_requirement(), ExtractedCoverage(amount=999999))

    assert not outcome.ok
    assert outcome.reason == GapReason.AMOUNT_BELOW_MINIMUM
    gap = outcome.gaps[0]
    assert gap.required_value == "$1,000,000"
    assert gap.actual_value == "$999,999"
    assert "below required" in gap.explanation


def test_missing_amount_is_below_minimum():
    outcome = match_coverage(_requirement(), ExtractedCoverage())

    assert outcome.reason == GapReason.AMOUNT_BELOW_MINIMUM
    assert outcome.gaps[0].actual_value == "Not found"


def test_aggregate_checked_independently():
    requirement = _requirement(min_aggregate=2000000)

    outcome = match_coverage(requirement, ExtractedCoverage(amount=1000000, aggregate=1500000))

    assert [g.reason for g in outcome.gaps] == [GapReason.AGGREGATE_BELOW_MINIMUM]


def test_aggregate_not_required_is_ignored():
    outcome = match_coverage(_requirement(), ExtractedCoverage(amount=1000000, aggregate=1))

    assert outcome.ok


def test_each_missing_endorsement_is_its_own_gap():
    requirement = _requirement(
        required_endorsements=["Additional Insured", "Waiver of Subrogation", "Primary & Non-Contributory"],
    )
    actual = ExtractedCoverage(amount=1000000, endorsements=["Waiver of Subrogation"])

    outcome = match_coverage(requirement, actual)

    assert [g.reason for g in outcome.gaps] == [GapReason.ENDORSEMENT_MISSING] * 2
    assert [g.required_value for g in outcome.gaps] == ["Additional Insured", "Primary & Non-Contributory"]


def test_endorsement_names_compare_case_insensitively():
    requirement = _requirement(required_endorsements=["Additional Insured"])
    actual = ExtractedCoverage(amount=1000000, endorsements=["  additional insured "])

    assert match_coverage(requirement, actual).ok


def test_gaps_are_ordered_amount_aggregate_endorsements():
    requirement = _requirement(min_aggregate=2000000, required_endorsements=["Additional Insured"])

    outcome = match_coverage(requirement, ExtractedCoverage(amount=1, aggregate=1))

    assert [g.reason for g in outcome.gaps] == [
        GapReason.AMOUNT_BELOW_MINIMUM,
        GapReason.AGGREGATE_BELOW_MINIMUM,
        GapReason.ENDORSEMENT_MISSING,
    ]


class TestStatutory:
    def test_statutory_flag_satisfies(self):
        requirement = _requirement(coverage_type="workers_comp", min_amount="Statutory")

        assert match_coverage(requirement, ExtractedCoverage(is_statutory=True)).ok

    def test_statutory_text_in_amount_satisfies(self):
        requirement = _requirement(coverage_type="workers_comp", min_amount="Statutory")

        assert match_coverage(requirement, ExtractedCoverage(amount="Statutory")).ok

    def test_presence_without_amount_satisfies(self):
        requirement = _requirement(coverage_type="workers_comp", min_amount="statutory")

        assert match_coverage(requirement, ExtractedCoverage()).ok

    def test_any_positive_amount_satisfies(self):
        requirement = _requirement(coverage_type="workers_comp", min_amount="Statutory")

        assert match_coverage(requirement, ExtractedCoverage(amount=1)).ok

    def test_zero_amount_from_empty_limit_box_satisfies(self):
        requirement = _requirement(coverage_type="workers_comp", min_amount="Statutory")

        outcome = match_coverage(requirement, ExtractedCoverage(amount=0))

        assert outcome.ok
        assert outcome.gaps == ()
