from schemas.compliance import (
    Category, RISK_LEVELS, GapReason, OverallStatus, ExpiryState, TemplateKey,
    CoverageRequirement, ExtractedCoverage, ExtractedCertificateData, RequirementTemplate,
    EntityContext, Gap, ExpiringCoverage, ComplianceResult, validate_as,
)
from schemas.common import (
    EvaluateInput, ComplianceReport, InsightResponse,
    TemplateInput, TemplateUpdateInput, DuplicateTemplateInput, TemplateWithUsage,
    TemplateUsage, RecalculationSummary,
    EntityInput, EntityResponse, CertificateUploadInput, SnapshotResponse, RecheckSummary,
)
