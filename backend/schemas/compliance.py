from datetime import date, datetime
from enum import Enum
from typing import Literal, NamedTuple, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from services.compliance.errors import ValidationError
from services.compliance.normalize import (
    STATUTORY, ROUND_ACTUAL, ROUND_REQUIRED, is_statutory, parse_amount, parse_date,
)

Category = Literal["vendor", "tenant"]

RISK_LEVELS = [
    "standard",
    "high_risk",
    "professional_services",
    "restaurant",
    "industrial",
    "retail",
]


class GapReason(str, Enum):
    MISSING = "missing"
    AMOUNT_BELOW_MINIMUM = "amount_below_minimum"
    AGGREGATE_BELOW_MINIMUM = "aggregate_below_minimum"
    ENDORSEMENT_MISSING = "endorsement_missing"
    EXPIRED = "expired"
    EXPIRING_SOON = "expiring_soon"
    HOLDER_MISMATCH = "holder_mismatch"


class OverallStatus(str, Enum):
    COMPLIANT = "compliant"
    NON_COMPLIANT = "non_compliant"
    EXPIRED = "expired"


class ExpiryState(str, Enum):
    NOT_YET_EFFECTIVE = "not_yet_effective"
    CURRENT = "current"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"


class TemplateKey(NamedTuple):
    category: str
    risk_level: str


def _clean_endorsements(value):
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    return tuple(e.strip() for e in value if isinstance(e, str) and e.strip())


def check_unique_coverage_types(coverages, owner: str = "Template"):
    """Raise ValidationError when a coverage type appears twice."""
    seen = set()
    for requirement in coverages:
        if requirement.coverage_type in seen:
            raise ValidationError(f"{owner} lists {requirement.coverage_type} more than once")
        seen.add(requirement.coverage_type)
    return coverages


class CoverageRequirement(BaseModel):
    """One required coverage line of a template."""

    model_config = ConfigDict(frozen=True)

    coverage_type: str
    min_amount: Union[int, Literal["Statutory"]]
    min_aggregate: Optional[int] = None
    required_endorsements: tuple[str, ...] = ()
    is_required: bool = True

    @field_validator("coverage_type")
    @classmethod
    def _check_coverage_type(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValidationError("coverage_type must not be empty")
        return value

    @field_validator("min_amount", mode="before")
    @classmethod
    def _parse_min_amount(cls, value):
        if is_statutory(value):
            return STATUTORY
        amount = parse_amount(value, rounding=ROUND_REQUIRED)
        if amount is None:
            raise ValidationError("min_amount is required (a number or 'Statutory')")
        if amount < 0:
            raise ValidationError(f"min_amount must not be negative: {amount}")
        return amount

    @field_validator("min_aggregate", mode="before")
    @classmethod
    def _parse_min_aggregate(cls, value):
        return parse_amount(value, rounding=ROUND_REQUIRED)

    @field_validator("required_endorsements", mode="before")
    @classmethod
    def _parse_endorsements(cls, value):
        return _clean_endorsements(value)

    @property
    def is_statutory(self) -> bool:
        return self.min_amount == STATUTORY


class ExtractedCoverage(BaseModel):
    """What the certificate says about one coverage line. Every field is optional."""

    model_config = ConfigDict(frozen=True)

    amount: Optional[int] = None
    aggregate: Optional[int] = None
    endorsements: tuple[str, ...] = ()
    is_statutory: bool = False
    effective_date: Optional[date] = None
    expiration_date: Optional[date] = None

    @model_validator(mode="before")
    @classmethod
    def _statutory_amount(cls, data):
        # "Statutory" printed in the limit box flags the line instead of giving a figure
        if isinstance(data, dict) and is_statutory(data.get("amount")):
            data = dict(data, amount=None, is_statutory=True)
        return data

    @field_validator("amount", "aggregate", mode="before")
    @classmethod
    def _parse_amounts(cls, value):
        return parse_amount(value, rounding=ROUND_ACTUAL)

    @field_validator("endorsements", mode="before")
    @classmethod
    def _parse_endorsements(cls, value):
        return _clean_endorsements(value)

    @field_validator("effective_date", "expiration_date", mode="before")
    @classmethod
    def _parse_dates(cls, value):
        return parse_date(value)


class ExtractedCertificateData(BaseModel):
    model_config = ConfigDict(frozen=True)

    insured_name: Optional[str] = None
    carrier: Optional[str] = None
    certificate_holder: Optional[str] = None
    effective_date: Optional[date] = None
    expiration_date: Optional[date] = None
    coverages: dict[str, Optional[ExtractedCoverage]] = Field(default_factory=dict)

    @field_validator("effective_date", "expiration_date", mode="before")
    @classmethod
    def _parse_dates(cls, value):
        return parse_date(value)

    @field_validator("coverages", mode="before")
    @classmethod
    def _parse_coverages(cls, value):
        if value is None:
            return {}
        return value

    def coverage(self, coverage_type: str) -> Optional[ExtractedCoverage]:
        return self.coverages.get(coverage_type)


class RequirementTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    description: Optional[str] = None
    organization_id: Optional[str] = None
    is_system_default: bool = False
    category: Category
    risk_level: str = "standard"
    created_at: Optional[datetime] = None
    coverages: tuple[CoverageRequirement, ...] = ()

    @field_validator("risk_level", mode="before")
    @classmethod
    def _normalize_risk_level(cls, value):
        if value is None:
            return "standard"
        return str(value).strip().lower()

    @model_validator(mode="after")
    def _unique_coverage_types(self):
        check_unique_coverage_types(self.coverages, f"Template '{self.name}'")
        return self

    @property
    def key(self) -> TemplateKey:
        return TemplateKey(self.category, self.risk_level)

    @property
    def is_org_owned(self) -> bool:
        return not self.is_system_default and self.organization_id is not None


class EntityContext(BaseModel):
    """The bits of a vendor or tenant that decide which template applies."""

    model_config = ConfigDict(frozen=True)

    category: Category
    risk_level: str = "standard"
    assigned_template: Optional[RequirementTemplate] = None

    @field_validator("risk_level", mode="before")
    @classmethod
    def _normalize_risk_level(cls, value):
        if value is None:
            return "standard"
        return str(value).strip().lower()

    @property
    def key(self) -> TemplateKey:
        return TemplateKey(self.category, self.risk_level)


class Gap(BaseModel):
    model_config = ConfigDict(frozen=True)

    coverage: str
    reason: GapReason
    required_value: Optional[str] = None
    actual_value: Optional[str] = None
    explanation: str = ""


class ExpiringCoverage(BaseModel):
    model_config = ConfigDict(frozen=True)

    coverage: str
    expiration_date: date
    days_remaining: int


class ComplianceResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    overall_status: OverallStatus
    gaps: tuple[Gap, ...] = ()
    advisories: tuple[Gap, ...] = ()
    expiring_soon: tuple[ExpiringCoverage, ...] = ()
    earliest_expiration: Optional[date] = None
    as_of: date


def validate_as(model_cls, value):
    """Build model_cls from a dict, reporting bad shapes as the engine's ValidationError."""
    if isinstance(value, model_cls):
        return value
    try:
        return model_cls.model_validate(value)
    except PydanticValidationError as e:
        raise ValidationError(str(e)) from e
