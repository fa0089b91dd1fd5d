"""Plain-English one-paragraph summaries of a compliance result."""

from services.compliance.evaluator import EXPIRATION_DATE_REQUIRED

COVERAGE_LABELS = {
    "general_liability": "General Liability",
    "auto_liability": "Automobile Liability",
    "automobile_liability": "Automobile Liability",
    "workers_comp": "Workers' Compensation",
    "workers_compensation": "Workers' Compensation",
    "employers_liability": "Employers' Liability",
    "umbrella": "Umbrella / Excess Liability",
    "umbrella_excess_liability": "Umbrella / Excess Liability",
    "professional_liability_eo": "Professional Liability (E&O)",
    "property_inland_marine": "Property / Inland Marine",
    "property_insurance": "Property Insurance",
    "pollution_liability": "Pollution Liability",
    "liquor_liability": "Liquor Liability",
    "cyber_liability": "Cyber Liability",
}

MAX_NAMED_GAPS = 3

_GENERIC_MESSAGE = "This certificate does not meet requirements. Review the coverage details."


def coverage_label(coverage_type) -> str:
    if coverage_type in COVERAGE_LABELS:
        return COVERAGE_LABELS[coverage_type]
    return str(coverage_type).replace("_", " ").title()


def _value(enum_or_str) -> str:
    return getattr(enum_or_str, "value", enum_or_str)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def describe_gap(gap) -> str:
    label = coverage_label(gap.coverage)
    reason = _value(gap.reason)
    if reason == "missing":
        if gap.required_value == EXPIRATION_DATE_REQUIRED:
            return f"{label} has no expiration date shown"
        return f"{label} is missing"
    if reason == "amount_below_minimum":
        if gap.required_value and gap.actual_value:
            return f"{label} limit is {gap.actual_value} (requires {gap.required_value})"
        return f"{label} limit is below the minimum"
    if reason == "aggregate_below_minimum":
        if gap.required_value and gap.actual_value:
            return f"{label} aggregate is {gap.actual_value} (requires {gap.required_value})"
        return f"{label} aggregate is below the minimum"
    if reason == "endorsement_missing":
        if gap.required_value:
            return f"{label} is missing the {gap.required_value} endorsement"
        return f"{label} is missing a required endorsement"
    if reason == "expired":
        return f"{label} has expired"
    if reason == "expiring_soon":
        return f"{label} is expiring soon"
    if reason == "holder_mismatch":
        if gap.actual_value:
            return f"Certificate holder is {gap.actual_value} (requires {gap.required_value})"
        return "Certificate holder is not shown"
    return f"{label} has an issue"


def _join(parts: list[str]) -> str:
    if len(parts) <= 1:
        return "".join(parts)
    if len(parts) == 2:
        return f"{parts[0]} and {parts[1]}"
    return ", ".join(parts[:-1]) + f", and {parts[-1]}"


def _gap_summary(gaps: list) -> str:
    named = [describe_gap(g) for g in gaps[:MAX_NAMED_GAPS]]
    remaining = len(gaps) - len(named)
    text = _join(named)
    if remaining > 0:
        text += f", plus {remaining} more"
    return text


def _expiring_note(expiring) -> str:
    if not expiring:
        return ""
    soonest = min(expiring, key=lambda e: e.days_remaining)
    days = soonest.days_remaining
    when = "today" if days == 0 else f"in {_plural(days, 'day')}"
    note = f" {coverage_label(soonest.coverage)} expires {when}"
    if len(expiring) > 1:
        note += f" and {_plural(len(expiring) - 1, 'other coverage')} {'expires' if len(expiring) == 2 else 'expire'} soon"
    return note + "; request a renewal certificate."


def _compliant(result) -> str:
    return "All required coverages meet requirements." + _expiring_note(list(result.expiring_soon or ()))


def _non_compliant(result) -> str:
    gaps = list(result.gaps or ())
    if not gaps:
        return _GENERIC_MESSAGE
    return f"Not compliant: {_plural(len(gaps), 'gap')} found. {_gap_summary(gaps)}."


def _expired(result) -> str:
    gaps = list(result.gaps or ())
    expired = [g for g in gaps if _value(g.reason) == "expired"]
    others = [g for g in gaps if _value(g.reason) != "expired"]
    if not expired:
        return _non_compliant(result)

    labels = _join([coverage_label(g.coverage) for g in expired[:MAX_NAMED_GAPS]])
    if len(expired) > MAX_NAMED_GAPS:
        labels += f", plus {len(expired) - MAX_NAMED_GAPS} more"
    verb = "is" if len(expired) == 1 else "are"
    text = f"Expired: {labels} {verb} not currently in force."
    if others:
        text += f" Also {_plural(len(others), 'other gap')}: {_gap_summary(others)}."
    return text


_BY_STATUS = {
    "compliant": _compliant,
    "non_compliant": _non_compliant,
    "expired": _expired,
}


def generate_insight(result) -> str:
    """Summarize a ComplianceResult for display. Never raises."""
    try:
        status = _value(getattr(result, "overall_status", None))
        handler = _BY_STATUS.get(status, _non_compliant)
        return handler(result)
    except Exception:
        return _GENERIC_MESSAGE
