import re

COVERAGE_PATTERNS = {
    "general_liability": r"general\s+liability|commercial\s+general|\bCGL\b|\bGL\b",
    "auto_liability": r"\bauto(?:mobile)?\b",
    "workers_comp": r"workers'?\s*comp",
    "employers_liability": r"employers'?\s+liability",
    "umbrella": r"umbrella|excess\s+liability",
    "professional_liability_eo": r"professional\s+liability|errors\s*(?:&|and)\s*omissions|\bE&O\b",
    "property_insurance": r"property\s+(?:insurance|coverage)|commercial\s+property",
    "pollution_liability": r"pollution",
    "liquor_liability": r"liquor",
    "cyber_liability": r"\bcyber\b",
}

ENDORSEMENT_PATTERNS = {
    "Additional Insured": r"additional\s+insured",
    "Waiver of Subrogation": r"waiver\s+of\s+subrogation",
    "Primary & Non-Contributory": r"primary\s*(?:&|and)\s*non[-\s]?contributory",
}

AMOUNT = r"\$\s?(\d[\d,]*(?:\.\d+)?\s*(?:MM|[MmKk])?)\b"
DATE = r"(\d{4}-\d{2}-\d{2}|\d{1,2}/\d{1,2}/\d{2,4})"


def _checked(pattern: str, text: str) -> bool:
    """True when an endorsement is ticked: '[x] Additional Insured' or '... Insured: Yes'"""
    return bool(
        re.search(r"\[x\]\s*" + pattern, text, re.IGNORECASE)
        or re.search(pattern + r"[:\s]+(?:yes|y|x|checked|included)\b", text, re.IGNORECASE)
    )


def _line_amounts(line: str) -> tuple:
    occurrence = None
    aggregate = None
    for match in re.finditer(AMOUNT, line):
        value = f"${match.group(1).strip()}"
        after = line[match.end():match.end() + 6].lower()
        before = line[max(0, match.start() - 12):match.start()].lower()
        if "agg" in after or "agg" in before:
            aggregate = aggregate or value
        else:
            occurrence = occurrence or value
    return occurrence, aggregate


def _first_match(patterns, text: str):
    for pattern in patterns:
        match = re.search(pattern, text, re.IGNORECASE | re.MULTILINE)
        if match:
            return match.group(1).strip()
    return None


def mock_coi_extract(text: str) -> dict:
    """Generate mock COI extraction for testing.

    Works line by line: a line naming a coverage contributes its limits,
    dates and endorsements to that coverage.
    """
    insured = _first_match([r"^\s*(?:named\s+)?insured[ \t]*:[ \t]*([^\n]+)"], text)
    carrier = _first_match([r"^\s*(?:carrier|insurer(?:\s+[a-f])?)[ \t]*:[ \t]*([^\n]+)"], text)
    holder = _first_match([r"^\s*certificate\s+holder[ \t]*:[ \t]*([^\n]+)"], text)

    effective = None
    expiration = None
    period = re.search(
        r"(?:policy\s+period|eff(?:ective)?)[:\s]+" + DATE + r"\s*(?:-|to|through)\s*" + DATE,
        text, re.IGNORECASE,
    )
    if period:
        effective, expiration = period.group(1), period.group(2)
    else:
        expiration = _first_match([r"expir(?:es|ation)(?:\s+date)?[:\s]+" + DATE], text)
        effective = _first_match([r"effective(?:\s+date)?[:\s]+" + DATE], text)

    coverages = {}
    for line in text.splitlines():
        for coverage_type, pattern in COVERAGE_PATTERNS.items():
            if not re.search(pattern, line, re.IGNORECASE):
                continue
            occurrence, aggregate = _line_amounts(line)
            dates = re.findall(DATE, line)
            entry = coverages.setdefault(coverage_type, {
                "amount": None,
                "aggregate": None,
                "endorsements": [],
                "is_statutory": False,
                "effective_date": None,
                "expiration_date": None,
            })
            entry["amount"] = entry["amount"] or occurrence
            entry["aggregate"] = entry["aggregate"] or aggregate
            if re.search(r"statut", line, re.IGNORECASE):
                entry["is_statutory"] = True
            if len(dates) >= 2:
                entry["effective_date"], entry["expiration_date"] = dates[0], dates[1]
            elif len(dates) == 1:
                entry["expiration_date"] = dates[0]
            for name, endorsement_pattern in ENDORSEMENT_PATTERNS.items():
                if re.search(endorsement_pattern, line, re.IGNORECASE) and name not in entry["endorsements"]:
                    entry["endorsements"].append(name)

    # Checkbox endorsements outside a coverage line apply to general liability
    if "general_liability" in coverages:
        gl_endorsements = coverages["general_liability"]["endorsements"]
        for name, pattern in ENDORSEMENT_PATTERNS.items():
            if name not in gl_endorsements and _checked(pattern, text):
                gl_endorsements.append(name)

    return {
        "insured_name": insured,
        "carrier": carrier,
        "certificate_holder": holder,
        "effective_date": effective,
        "expiration_date": expiration,
        "coverages": coverages,
    }
