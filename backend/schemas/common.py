from datetime import date, datetime
from pydantic import BaseModel, field_validator
from typing import Optional

from schemas.compliance import (
    Category, ComplianceResult, CoverageRequirement, ExtractedCertificateData, RequirementTemplate,
    check_unique_coverage_types,
)


class EvaluateInput(BaseModel):
    requirements: list[CoverageRequirement]
    certificate: ExtractedCertificateData
    as_of: Optional[date] = None
    warn_window_days: Optional[int] = None
    certificate_holder: Optional[str] = None


class ComplianceReport(BaseModel):
    result: ComplianceResult
    insight: str
    template_id: Optional[int] = None
    template_name: Optional[str] = None
    certificate_id: Optional[int] = None
    snapshot_id: Optional[int] = None
    coi_data: Optional[ExtractedCertificateData] = None


class InsightResponse(BaseModel):
    insight: str


class TemplateInput(BaseModel):
    organization_id: str
    name: str
    description: Optional[str] = None
    category: Category
    risk_level: str = "standard"
    coverages: list[CoverageRequirement] = []

    @field_validator("coverages")
    @classmethod
    def _unique_coverages(cls, value):
        return check_unique_coverage_types(value)


class TemplateUpdateInput(BaseModel):
    organization_id: str
    name: str
    description: Optional[str] = None
    risk_level: str = "standard"
    coverages: list[CoverageRequirement] = []

    @field_validator("coverages")
    @classmethod
    def _unique_coverages(cls, value):
        return check_unique_coverage_types(value)


class DuplicateTemplateInput(BaseModel):
    organization_id: str


class TemplateWithUsage(RequirementTemplate):
    vendor_count: int = 0
    tenant_count: int = 0


class TemplateUsage(BaseModel):
    vendors: int
    tenants: int
    total_entities: int
    properties: int


class RecalculationSummary(BaseModel):
    success: bool
    template_id: int
    reevaluated: int
    pending: int
    failed: int = 0


class EntityInput(BaseModel):
    name: str
    organization_id: Optional[str] = None
    contact_email: Optional[str] = None
    property_name: Optional[str] = None
    risk_level: str = "standard"
    template_id: Optional[int] = None
    certificate_holder_name: Optional[str] = None
    service_type: Optional[str] = None
    unit: Optional[str] = None


class EntityResponse(BaseModel):
    id: int
    entity_type: Category
    name: str
    organization_id: Optional[str] = None
    contact_email: Optional[str] = None
    property_name: Optional[str] = None
    risk_level: str = "standard"
    template_id: Optional[int] = None
    certificate_holder_name: Optional[str] = None
    compliance_status: str = "pending"
    created_at: Optional[datetime] = None


class CertificateUploadInput(BaseModel):
    coi_text: str
    uploaded_by: str = "pm"
    as_of: Optional[date] = None


class SnapshotResponse(BaseModel):
    id: int
    certificate_id: int
    template_id: Optional[int] = None
    as_of: date
    overall_status: str
    gap_count: int
    insight: Optional[str] = None
    result: ComplianceResult
    created_at: Optional[datetime] = None


class RecheckSummary(BaseModel):
    checked: int = 0
    compliant: int = 0
    non_compliant: int = 0
    expired: int = 0
    failed: int = 0
