"""Tests for regex COI extraction used in MOCK_MODE."""

from datetime import date

from services.llm import build_certificate_data, clean_llm_response
from services.mock.coi import mock_coi_extract

MESSY_COI_EMAIL = """fwd: insurance stuff

hey can u check this out? their coverage looks weird to me lol

---
CERTIFICATE OF LIABILITY INSURANCE
Insured: Artisanal Pickle Co LLC
Carrier: Midwest Mutual Insurance
Eff: 1/15/24 - 1/15/25

GL: $1M per occ / $2M agg
Umbrella: $5M (policy UMB-441)
Workers comp: statutory limits

let me know thx
"""


def test_header_fields(compliant_coi):
    raw = mock_coi_extract(compliant_coi)

    assert raw["insured_name"] == "Acme Janitorial LLC"
    assert raw["carrier"] == "Hartford Fire Insurance"
    assert raw["certificate_holder"] == "Oakwood Properties"
    assert raw["effective_date"] == "2020-01-01"
    assert raw["expiration_date"] == "2099-01-01"


def test_coverage_lines(compliant_coi):
    coverages = mock_coi_extract(compliant_coi)["coverages"]

    assert set(coverages) == {"general_liability", "auto_liability", "workers_comp", "employers_liability"}
    assert coverages["general_liability"]["amount"] == "$1,000,000"
    assert coverages["general_liability"]["aggregate"] == "$2,000,000"
    assert coverages["auto_liability"]["amount"] == "$1,000,000"
    assert coverages["workers_comp"]["is_statutory"] is True
    assert coverages["employers_liability"]["amount"] == "$500,000"


def test_checked_endorsements_go_to_general_liability(compliant_coi):
    gl = mock_coi_extract(compliant_coi)["coverages"]["general_liability"]

    assert gl["endorsements"] == ["Additional Insured", "Waiver of Subrogation"]


def test_unchecked_endorsement_ignored():
    text = "General Liability: $1,000,000\n[ ] Additional Insured\n[x] Waiver of Subrogation\n"

    gl = mock_coi_extract(text)["coverages"]["general_liability"]

    assert gl["endorsements"] == ["Waiver of Subrogation"]


def test_messy_email_abbreviations():
    data = build_certificate_data(mock_coi_extract(MESSY_COI_EMAIL))

    assert data.insured_name == "Artisanal Pickle Co LLC"
    assert data.effective_date == date(2024, 1, 15)
    assert data.expiration_date == date(2025, 1, 15)

    gl = data.coverage("general_liability")
    assert gl.amount == 1000000
    assert gl.aggregate == 2000000
    assert data.coverage("umbrella").amount == 5000000
    assert data.coverage("workers_comp").is_statutory
    assert data.coverage("auto_liability") is None


def test_line_level_dates():
    text = "Automobile Liability $1,000,000 03/01/2026 03/01/2027\n"

    auto = build_certificate_data(mock_coi_extract(text)).coverage("auto_liability")

    assert auto.effective_date == date(2026, 3, 1)
    assert auto.expiration_date == date(2027, 3, 1)


def test_build_certificate_data_drops_unreadable_fields():
    raw = {
        "insured_name": "Acme",
        "expiration_date": "someday",
        "coverages": {
            "general_liability": {"amount": "lots", "aggregate": "$2,000,000", "expiration_date": "2027-01-01"},
            "auto_liability": "see attached",
        },
    }

    data = build_certificate_data(raw)

    assert data.insured_name == "Acme"
    assert data.expiration_date is None
    gl = data.coverage("general_liability")
    assert gl.amount is None
    assert gl.aggregate == 2000000
    assert gl.expiration_date == date(2027, 1, 1)
    assert data.coverage("auto_liability") is None


def test_clean_llm_response_strips_code_fence():
    assert clean_llm_response('```json\n{"coverages": {}}\n```') == '{"coverages": {}}'
    assert clean_llm_response('  {"a": 1}  ') == '{"a": 1}'
