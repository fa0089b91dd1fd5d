"""Pytest configuration and shared fixtures."""

import os
from datetime import date

# Must be set before config is imported
os.environ["MOCK_MODE"] = "true"
os.environ["CRON_SECRET"] = "test-cron-secret"
os.environ.pop("DATABASE_URL", None)

import pytest
from fastapi.testclient import TestClient

from database import init_db, reset_db
from main import app
from schemas.compliance import CoverageRequirement, ExtractedCertificateData
from services.db_ops import seed_default_templates

init_db("sqlite://")

AS_OF = date(2026, 6, 1)

COMPLIANT_COI = """CERTIFICATE OF LIABILITY INSURANCE
Insured: Acme Janitorial LLC
Carrier: Hartford Fire Insurance
Certificate Holder: Oakwood Properties
Policy Period: 2020-01-01 - 2099-01-01

General Liability: $1,000,000 per occurrence / $2,000,000 aggregate
Automobile Liability: $1,000,000 combined single limit
Workers Compensation: Statutory
Employers Liability: $500,000 each accident

[x] Additional Insured
[x] Waiver of Subrogation
"""


@pytest.fixture(autouse=True)
def fresh_database():
    """Empty tables with the system default templates seeded."""
    reset_db()
    seed_default_templates()
    yield


@pytest.fixture
def test_client() -> TestClient:
    """Create FastAPI test client.

    The lifespan is not run; the database is set up by this module.
    """
    return TestClient(app)


@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    """Ensure FastAPI dependency overrides are reset between tests."""
    app.dependency_overrides = {}
    yield
    app.dependency_overrides = {}


@pytest.fixture
def compliant_coi() -> str:
    return COMPLIANT_COI


@pytest.fixture
def standard_vendor_requirements() -> list[CoverageRequirement]:
    return [
        CoverageRequirement(
            coverage_type="general_liability",
            min_amount=1000000,
            min_aggregate=2000000,
            required_endorsements=["Additional Insured", "Waiver of Subrogation"],
        ),
        CoverageRequirement(coverage_type="auto_liability", min_amount=1000000),
        CoverageRequirement(coverage_type="workers_comp", min_amount="Statutory"),
        CoverageRequirement(coverage_type="employers_liability", min_amount=500000),
    ]


@pytest.fixture
def compliant_certificate() -> ExtractedCertificateData:
    """Certificate that satisfies the standard vendor requirements on AS_OF."""
    dates = {"effective_date": "2026-01-01", "expiration_date": "2027-01-01"}
    return ExtractedCertificateData.model_validate({
        "insured_name": "Acme Janitorial LLC",
        "carrier": "Hartford Fire Insurance",
        **dates,
        "coverages": {
            "general_liability": {
                "amount": 1000000,
                "aggregate": 2000000,
                "endorsements": ["Additional Insured", "Waiver of Subrogation"],
                **dates,
            },
            "auto_liability": {"amount": 1000000, **dates},
            "workers_comp": {"amount": "Statutory", **dates},
            "employers_liability": {"amount": 500000, **dates},
        },
    })
