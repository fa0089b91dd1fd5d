"""Glue between the compliance engine, extraction and persistence.

The engine in ``services.compliance`` is pure. Everything here loads
templates and certificates through ``services.db_ops``, runs the engine,
and records a new snapshot for every evaluation.
"""

import logging
from datetime import date
from typing import Iterable, Optional

from config import EXPIRING_SOON_DAYS
from schemas.common import ComplianceReport, EntityResponse, RecalculationSummary, RecheckSummary
from schemas.compliance import (
    ComplianceResult, CoverageRequirement, EntityContext, ExtractedCertificateData,
    RequirementTemplate,
)
from services import db_ops
from services.compliance.evaluator import evaluate
from services.compliance.insight import generate_insight
from services.compliance.resolver import resolve_effective_template
from services.llm import extract_certificate_data

logger = logging.getLogger(__name__)

PENDING = "pending"


class DatabaseUnavailable(Exception):
    """Raised when an operation needs persistence but DATABASE_URL is not configured"""

    pass


class NotFound(Exception):
    """Raised when a vendor, tenant, template or certificate does not exist"""

    pass


def _require_database():
    if not db_ops.database_available():
        raise DatabaseUnavailable("Database not configured")


def evaluate_certificate(requirements: Iterable[CoverageRequirement], certificate: ExtractedCertificateData,
                         as_of: Optional[date] = None,
                         warn_window_days: Optional[int] = None,
                         required_holder: Optional[str] = None) -> tuple[ComplianceResult, str]:
    """Evaluate and summarize without touching the database"""
    if warn_window_days is None:
        warn_window_days = EXPIRING_SOON_DAYS
    result = evaluate(requirements, certificate, as_of or date.today(), warn_window_days,
                      required_holder=required_holder)
    return result, generate_insight(result)


def get_entity_or_raise(entity_type: str, entity_id: int) -> EntityResponse:
    _require_database()
    entity = db_ops.get_entity(entity_type, entity_id)
    if entity is None:
        raise NotFound(f"{entity_type.title()} {entity_id} not found")
    return entity


def resolve_template_for(entity: EntityResponse) -> RequirementTemplate:
    """Template explicitly assigned to the entity, else the org/default for its risk level"""
    assigned = None
    if entity.template_id is not None:
        assigned = db_ops.get_template(entity.template_id)
        if assigned is None:
            logger.warning("%s %s points at missing template %s; resolving by risk level",
                           entity.entity_type, entity.id, entity.template_id)

    context = EntityContext(
        category=entity.entity_type,
        risk_level=entity.risk_level,
        assigned_template=assigned,
    )
    candidates = [] if assigned else db_ops.list_templates(entity.organization_id, entity.entity_type)
    return resolve_effective_template(context, candidates)


def check_certificate(entity: EntityResponse, certificate_id: int, certificate: ExtractedCertificateData,
                      as_of: Optional[date] = None) -> ComplianceReport:
    """Evaluate a stored certificate for an entity and record the outcome"""
    template = resolve_template_for(entity)
    result, insight = evaluate_certificate(
        template.coverages, certificate, as_of, required_holder=entity.certificate_holder_name,
    )

    snapshot_id = db_ops.save_snapshot(
        certificate_id, entity.entity_type, entity.id, template.id, result, insight,
    )
    db_ops.set_compliance_status(entity.entity_type, entity.id, result.overall_status.value)

    logger.info(
        "Evaluated %s %s against template %s: %s (%d gaps)",
        entity.entity_type, entity.id, template.id, result.overall_status.value, len(result.gaps),
    )
    return ComplianceReport(
        result=result,
        insight=insight,
        template_id=template.id,
        template_name=template.name,
        certificate_id=certificate_id,
        snapshot_id=snapshot_id,
        coi_data=certificate,
    )


def upload_certificate(entity_type: str, entity_id: int, coi_text: str, uploaded_by: str = "pm",
                       as_of: Optional[date] = None) -> ComplianceReport:
    """Extract a COI, store it, and evaluate it for the vendor or tenant"""
    entity = get_entity_or_raise(entity_type, entity_id)
    extracted = extract_certificate_data(coi_text)

    certificate_id = db_ops.save_certificate(entity_type, entity_id, coi_text, extracted, uploaded_by)
    if certificate_id is None:
        raise DatabaseUnavailable("Could not store certificate")
    return check_certificate(entity, certificate_id, extracted, as_of)


def recheck_entity(entity_type: str, entity_id: int, as_of: Optional[date] = None) -> ComplianceReport:
    """Re-evaluate the latest certificate on file as of a date (today by default)"""
    entity = get_entity_or_raise(entity_type, entity_id)
    latest = db_ops.latest_certificate(entity_type, entity_id)
    if latest is None:
        raise NotFound(f"{entity_type.title()} {entity_id} has no certificate on file")
    certificate_id, certificate = latest
    return check_certificate(entity, certificate_id, certificate, as_of)


def reevaluate_template_entities(template_id: int) -> RecalculationSummary:
    """Re-run every vendor and tenant assigned to a template after it changes.

    Entities without a certificate go back to pending.
    """
    reevaluated = 0
    pending = 0
    failed = 0
    for entity_type in db_ops.ENTITY_MODELS:
        for entity in db_ops.list_entities(entity_type, template_id=template_id):
            latest = db_ops.latest_certificate(entity_type, entity.id)
            if latest is None:
                db_ops.set_compliance_status(entity_type, entity.id, PENDING)
                pending += 1
                continue
            certificate_id, certificate = latest
            try:
                check_certificate(entity, certificate_id, certificate)
            except Exception:
                logger.exception("Re-evaluation failed for %s %s", entity_type, entity.id)
                failed += 1
                continue
            reevaluated += 1

    logger.info("Template %s changed: re-evaluated %d entities, %d pending, %d failed",
                template_id, reevaluated, pending, failed)
    return RecalculationSummary(
        success=failed == 0, template_id=template_id,
        reevaluated=reevaluated, pending=pending, failed=failed,
    )


def recheck_all(as_of: Optional[date] = None) -> RecheckSummary:
    """Re-evaluate every vendor and tenant that has a certificate.

    A failure on one entity is logged and counted; the batch keeps going.
    """
    _require_database()
    counts = {"checked": 0, "failed": 0, "compliant": 0, "non_compliant": 0, "expired": 0}

    for entity_type in db_ops.ENTITY_MODELS:
        for entity in db_ops.list_entities(entity_type):
            latest = db_ops.latest_certificate(entity_type, entity.id)
            if latest is None:
                continue
            certificate_id, certificate = latest
            try:
                report = check_certificate(entity, certificate_id, certificate, as_of)
            except Exception:
                logger.exception("Re-check failed for %s %s", entity_type, entity.id)
                counts["failed"] += 1
                continue
            counts["checked"] += 1
            counts[report.result.overall_status.value] += 1

    logger.info("Batch re-check finished: %s", counts)
    return RecheckSummary(**counts)
