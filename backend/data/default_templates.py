# System default requirement templates, seeded into the database on startup.
# Organizations copy and edit these; an org copy with the same
# category + risk_level hides the default.

ADDITIONAL_INSURED = "Additional Insured"
WAIVER_OF_SUBROGATION = "Waiver of Subrogation"
PRIMARY_NONCONTRIBUTORY = "Primary & Non-Contributory"

COVERAGE_TYPES = [
    "general_liability",
    "auto_liability",
    "workers_comp",
    "employers_liability",
    "umbrella",
    "professional_liability_eo",
    "property_insurance",
    "pollution_liability",
    "liquor_liability",
    "cyber_liability",
]

ENDORSEMENTS = [ADDITIONAL_INSURED, WAIVER_OF_SUBROGATION, PRIMARY_NONCONTRIBUTORY]

DEFAULT_TEMPLATES = [
    {
        "name": "Standard Vendor",
        "description": "Janitorial, landscaping, general maintenance",
        "category": "vendor",
        "risk_level": "standard",
        "coverages": [
            {"coverage_type": "general_liability", "min_amount": 1000000, "min_aggregate": 2000000,
             "required_endorsements": [ADDITIONAL_INSURED, WAIVER_OF_SUBROGATION]},
            {"coverage_type": "auto_liability", "min_amount": 1000000},
            {"coverage_type": "workers_comp", "min_amount": "Statutory"},
            {"coverage_type": "employers_liability", "min_amount": 500000},
        ],
    },
    {
        "name": "High Risk Vendor",
        "description": "Roofing, electrical, elevator, HVAC and other hazardous trades",
        "category": "vendor",
        "risk_level": "high_risk",
        "coverages": [
            {"coverage_type": "general_liability", "min_amount": 2000000, "min_aggregate": 4000000,
             "required_endorsements": [ADDITIONAL_INSURED, WAIVER_OF_SUBROGATION, PRIMARY_NONCONTRIBUTORY]},
            {"coverage_type": "auto_liability", "min_amount": 1000000},
            {"coverage_type": "workers_comp", "min_amount": "Statutory",
             "required_endorsements": [WAIVER_OF_SUBROGATION]},
            {"coverage_type": "employers_liability", "min_amount": 1000000},
            {"coverage_type": "umbrella", "min_amount": 5000000},
        ],
    },
    {
        "name": "Professional Services Vendor",
        "description": "Architects, engineers, consultants, IT providers",
        "category": "vendor",
        "risk_level": "professional_services",
        "coverages": [
            {"coverage_type": "general_liability", "min_amount": 1000000, "min_aggregate": 2000000,
             "required_endorsements": [ADDITIONAL_INSURED]},
            {"coverage_type": "professional_liability_eo", "min_amount": 1000000},
            {"coverage_type": "workers_comp", "min_amount": "Statutory"},
            {"coverage_type": "cyber_liability", "min_amount": 1000000, "is_required": False},
        ],
    },
    {
        "name": "Industrial Vendor",
        "description": "Heavy equipment, environmental and industrial contractors",
        "category": "vendor",
        "risk_level": "industrial",
        "coverages": [
            {"coverage_type": "general_liability", "min_amount": 2000000, "min_aggregate": 4000000,
             "required_endorsements": [ADDITIONAL_INSURED, WAIVER_OF_SUBROGATION, PRIMARY_NONCONTRIBUTORY]},
            {"coverage_type": "auto_liability", "min_amount": 1000000},
            {"coverage_type": "workers_comp", "min_amount": "Statutory",
             "required_endorsements": [WAIVER_OF_SUBROGATION]},
            {"coverage_type": "employers_liability", "min_amount": 1000000},
            {"coverage_type": "umbrella", "min_amount": 5000000},
            {"coverage_type": "pollution_liability", "min_amount": 1000000},
        ],
    },
    {
        "name": "Office Tenant",
        "description": "Standard office, professional services, coworking",
        "category": "tenant",
        "risk_level": "standard",
        "coverages": [
            {"coverage_type": "general_liability", "min_amount": 1000000, "min_aggregate": 2000000,
             "required_endorsements": [ADDITIONAL_INSURED, WAIVER_OF_SUBROGATION]},
            {"coverage_type": "workers_comp", "min_amount": "Statutory"},
            {"coverage_type": "employers_liability", "min_amount": 500000},
            {"coverage_type": "property_insurance", "min_amount": 1},
        ],
    },
    {
        "name": "Retail Tenant",
        "description": "Retail stores, shops, showrooms, salons",
        "category": "tenant",
        "risk_level": "retail",
        "coverages": [
            {"coverage_type": "general_liability", "min_amount": 1000000, "min_aggregate": 2000000,
             "required_endorsements": [ADDITIONAL_INSURED, WAIVER_OF_SUBROGATION]},
            {"coverage_type": "auto_liability", "min_amount": 1000000},
            {"coverage_type": "workers_comp", "min_amount": "Statutory"},
            {"coverage_type": "employers_liability", "min_amount": 500000},
            {"coverage_type": "umbrella", "min_amount": 2000000},
            {"coverage_type": "property_insurance", "min_amount": 1},
        ],
    },
    {
        "name": "Restaurant Tenant",
        "description": "Restaurants, bars, cafes, breweries",
        "category": "tenant",
        "risk_level": "restaurant",
        "coverages": [
            {"coverage_type": "general_liability", "min_amount": 1000000, "min_aggregate": 2000000,
             "required_endorsements": [ADDITIONAL_INSURED, WAIVER_OF_SUBROGATION]},
            {"coverage_type": "auto_liability", "min_amount": 1000000},
            {"coverage_type": "workers_comp", "min_amount": "Statutory"},
            {"coverage_type": "employers_liability", "min_amount": 1000000},
            {"coverage_type": "umbrella", "min_amount": 2000000},
            {"coverage_type": "property_insurance", "min_amount": 1},
            {"coverage_type": "liquor_liability", "min_amount": 1000000},
        ],
    },
]
