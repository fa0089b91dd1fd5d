from fastapi import APIRouter

from data.default_templates import COVERAGE_TYPES, DEFAULT_TEMPLATES, ENDORSEMENTS
from schemas.compliance import RISK_LEVELS
from services.compliance.insight import coverage_label
from services.compliance.normalize import format_amount

router = APIRouter(prefix="/api", tags=["reference"])

RISK_LEVEL_DESCRIPTIONS = {
    "standard": "Low-hazard work or ordinary office occupancy",
    "high_risk": "Hazardous trades such as roofing, electrical or elevator work",
    "professional_services": "Advice and design work where errors & omissions is the main exposure",
    "restaurant": "Food and beverage service, including alcohol",
    "industrial": "Heavy equipment, environmental or manufacturing operations",
    "retail": "Stores and showrooms open to the public",
}


@router.get("/coverage-types")
async def get_coverage_types():
    """Coverage lines a template can require, with display labels"""
    return {
        "coverage_types": [{"key": key, "label": coverage_label(key)} for key in COVERAGE_TYPES],
        "endorsements": ENDORSEMENTS,
    }


@router.get("/risk-levels")
async def get_risk_levels():
    return [
        {
            "key": level,
            "label": level.replace("_", " ").title(),
            "description": RISK_LEVEL_DESCRIPTIONS.get(level),
        }
        for level in RISK_LEVELS
    ]


@router.get("/default-templates")
async def get_default_templates():
    """Built-in templates with their limits formatted for display"""
    return [
        {
            "name": template["name"],
            "description": template["description"],
            "category": template["category"],
            "risk_level": template["risk_level"],
            "coverages": [
                {
                    "coverage_type": c["coverage_type"],
                    "label": coverage_label(c["coverage_type"]),
                    "min_amount": format_amount(c["min_amount"]),
                    "min_aggregate": format_amount(c["min_aggregate"]) if c.get("min_aggregate") else None,
                    "required_endorsements": c.get("required_endorsements", []),
                    "is_required": c.get("is_required", True),
                }
                for c in template["coverages"]
            ],
        }
        for template in DEFAULT_TEMPLATES
    ]
