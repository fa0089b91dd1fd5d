from models.templates import RequirementTemplateRecord, TemplateCoverageRequirement
from models.entities import Vendor, Tenant, Certificate, ComplianceSnapshot

__all__ = [
    "RequirementTemplateRecord",
    "TemplateCoverageRequirement",
    "Vendor",
    "Tenant",
    "Certificate",
    "ComplianceSnapshot",
]
