import logging
from typing import Optional

import database
from database import get_db
from models import (
    RequirementTemplateRecord, TemplateCoverageRequirement,
    Vendor, Tenant, Certificate, ComplianceSnapshot,
)
from schemas.common import EntityResponse, SnapshotResponse
from schemas.compliance import (
    ComplianceResult, CoverageRequirement, ExtractedCertificateData, RequirementTemplate,
)
from services.compliance.normalize import STATUTORY
from data.default_templates import DEFAULT_TEMPLATES

logger = logging.getLogger(__name__)

ENTITY_MODELS = {"vendor": Vendor, "tenant": Tenant}


def database_available() -> bool:
    return database.SessionLocal is not None


# ============== TEMPLATES ==============

def _coverage_rows(coverages: list[CoverageRequirement]) -> list[TemplateCoverageRequirement]:
    rows = []
    for position, requirement in enumerate(coverages):
        rows.append(TemplateCoverageRequirement(
            position=position,
            coverage_type=requirement.coverage_type,
            is_required=requirement.is_required,
            is_statutory=requirement.is_statutory,
            min_amount=None if requirement.is_statutory else requirement.min_amount,
            min_aggregate=requirement.min_aggregate,
            required_endorsements=list(requirement.required_endorsements),
        ))
    return rows


def template_to_schema(record: RequirementTemplateRecord) -> RequirementTemplate:
    """Convert an ORM template (with its coverage rows loaded) to the engine's model"""
    return RequirementTemplate(
        id=record.id,
        name=record.name,
        description=record.description,
        organization_id=record.organization_id,
        is_system_default=bool(record.is_system_default),
        category=record.category,
        risk_level=record.risk_level,
        created_at=record.created_at,
        coverages=[
            CoverageRequirement(
                coverage_type=row.coverage_type,
                min_amount=STATUTORY if row.is_statutory else (row.min_amount or 0),
                min_aggregate=row.min_aggregate,
                required_endorsements=row.required_endorsements or [],
                is_required=bool(row.is_required),
            )
            for row in record.coverages
        ],
    )


def seed_default_templates() -> int:
    """Insert the system default templates once. Returns how many were created."""
    db = get_db()
    if db is None:
        return 0

    try:
        existing = db.query(RequirementTemplateRecord).filter(
            RequirementTemplateRecord.is_system_default.is_(True)
        ).count()
        if existing:
            return 0

        for default in DEFAULT_TEMPLATES:
            coverages = [CoverageRequirement(**c) for c in default["coverages"]]
            record = RequirementTemplateRecord(
                organization_id=None,
                name=default["name"],
                description=default["description"],
                category=default["category"],
                risk_level=default["risk_level"],
                is_system_default=True,
                coverages=_coverage_rows(coverages),
            )
            db.add(record)
        db.commit()
        logger.info("Seeded %d system default templates", len(DEFAULT_TEMPLATES))
        return len(DEFAULT_TEMPLATES)
    except Exception:
        logger.exception("Error seeding default templates")
        db.rollback()
        return 0
    finally:
        db.close()


def list_templates(organization_id: str = None, category: str = None) -> list[RequirementTemplate]:
    """System defaults plus the organization's own templates"""
    db = get_db()
    if db is None:
        return []

    try:
        query = db.query(RequirementTemplateRecord)
        if organization_id:
            query = query.filter(
                (RequirementTemplateRecord.is_system_default.is_(True))
                | (RequirementTemplateRecord.organization_id == organization_id)
            )
        else:
            query = query.filter(RequirementTemplateRecord.is_system_default.is_(True))
        if category:
            query = query.filter(RequirementTemplateRecord.category == category)
        records = query.order_by(RequirementTemplateRecord.name).all()
        return [template_to_schema(r) for r in records]
    finally:
        db.close()


def get_template(template_id: int) -> Optional[RequirementTemplate]:
    db = get_db()
    if db is None:
        return None

    try:
        record = db.get(RequirementTemplateRecord, template_id)
        return template_to_schema(record) if record else None
    finally:
        db.close()


def create_template(organization_id: Optional[str], name: str, description: Optional[str],
                    category: str, risk_level: str, coverages: list[CoverageRequirement],
                    is_system_default: bool = False) -> Optional[RequirementTemplate]:
    db = get_db()
    if db is None:
        return None

    try:
        record = RequirementTemplateRecord(
            organization_id=organization_id,
            name=name,
            description=description,
            category=category,
            risk_level=risk_level,
            is_system_default=is_system_default,
            coverages=_coverage_rows(coverages),
        )
        db.add(record)
        db.commit()
        db.refresh(record)
        return template_to_schema(record)
    except Exception:
        logger.exception("Error creating template")
        db.rollback()
        return None
    finally:
        db.close()


def update_template(template_id: int, name: str, description: Optional[str], risk_level: str,
                    coverages: list[CoverageRequirement]) -> Optional[RequirementTemplate]:
    """Replace a template's metadata and its coverage requirements"""
    db = get_db()
    if db is None:
        return None

    try:
        record = db.get(RequirementTemplateRecord, template_id)
        if record is None:
            return None
        record.name = name
        record.description = description
        record.risk_level = risk_level
        record.coverages = _coverage_rows(coverages)
        db.commit()
        db.refresh(record)
        return template_to_schema(record)
    except Exception:
        logger.exception("Error updating template %s", template_id)
        db.rollback()
        return None
    finally:
        db.close()


def delete_template(template_id: int) -> bool:
    db = get_db()
    if db is None:
        return False

    try:
        record = db.get(RequirementTemplateRecord, template_id)
        if record is None:
            return False
        db.delete(record)
        db.commit()
        return True
    except Exception:
        logger.exception("Error deleting template %s", template_id)
        db.rollback()
        return False
    finally:
        db.close()


def template_usage(template_id: int, organization_id: str = None) -> dict:
    """Count live vendors, tenants and distinct properties assigned to a template"""
    db = get_db()
    if db is None:
        return {"vendors": 0, "tenants": 0, "properties": 0}

    try:
        counts = {}
        properties = set()
        for entity_type, model in ENTITY_MODELS.items():
            query = db.query(model).filter(model.template_id == template_id, model.deleted_at.is_(None))
            if organization_id:
                query = query.filter(model.organization_id == organization_id)
            rows = query.all()
            counts[f"{entity_type}s"] = len(rows)
            properties.update(r.property_name for r in rows if r.property_name)
        counts["properties"] = len(properties)
        return counts
    finally:
        db.close()


# ============== VENDORS & TENANTS ==============

def _entity_to_schema(entity_type: str, row) -> EntityResponse:
    return EntityResponse(
        id=row.id,
        entity_type=entity_type,
        name=row.name,
        organization_id=row.organization_id,
        contact_email=row.contact_email,
        property_name=row.property_name,
        risk_level=row.risk_level or "standard",
        template_id=row.template_id,
        certificate_holder_name=row.certificate_holder_name,
        compliance_status=row.compliance_status or "pending",
        created_at=row.created_at,
    )


def create_entity(entity_type: str, **fields) -> Optional[EntityResponse]:
    db = get_db()
    if db is None:
        return None

    model = ENTITY_MODELS[entity_type]
    try:
        row = model(**fields)
        db.add(row)
        db.commit()
        db.refresh(row)
        return _entity_to_schema(entity_type, row)
    except Exception:
        logger.exception("Error creating %s", entity_type)
        db.rollback()
        return None
    finally:
        db.close()


def get_entity(entity_type: str, entity_id: int) -> Optional[EntityResponse]:
    db = get_db()
    if db is None:
        return None

    try:
        row = db.get(ENTITY_MODELS[entity_type], entity_id)
        if row is None or row.deleted_at is not None:
            return None
        return _entity_to_schema(entity_type, row)
    finally:
        db.close()


def list_entities(entity_type: str, template_id: int = None) -> list[EntityResponse]:
    db = get_db()
    if db is None:
        return []

    model = ENTITY_MODELS[entity_type]
    try:
        query = db.query(model).filter(model.deleted_at.is_(None))
        if template_id is not None:
            query = query.filter(model.template_id == template_id)
        return [_entity_to_schema(entity_type, row) for row in query.order_by(model.id).all()]
    finally:
        db.close()


def set_compliance_status(entity_type: str, entity_id: int, status: str) -> bool:
    db = get_db()
    if db is None:
        return False

    try:
        row = db.get(ENTITY_MODELS[entity_type], entity_id)
        if row is None:
            return False
        row.compliance_status = status
        db.commit()
        return True
    except Exception:
        logger.exception("Error updating compliance status for %s %s", entity_type, entity_id)
        db.rollback()
        return False
    finally:
        db.close()


# ============== CERTIFICATES & SNAPSHOTS ==============

def save_certificate(entity_type: str, entity_id: int, text: str,
                     extracted: ExtractedCertificateData, uploaded_by: str = "pm") -> Optional[int]:
    db = get_db()
    if db is None:
        return None

    try:
        certificate = Certificate(
            entity_type=entity_type,
            entity_id=entity_id,
            document_text=text,
            extracted_data=extracted.model_dump(mode="json"),
            uploaded_by=uploaded_by,
        )
        db.add(certificate)
        db.commit()
        db.refresh(certificate)
        return certificate.id
    except Exception:
        logger.exception("Error saving certificate for %s %s", entity_type, entity_id)
        db.rollback()
        return None
    finally:
        db.close()


def latest_certificate(entity_type: str, entity_id: int) -> Optional[tuple[int, ExtractedCertificateData]]:
    """Most recently uploaded certificate id and its extracted data"""
    db = get_db()
    if db is None:
        return None

    try:
        certificate = (
            db.query(Certificate)
            .filter(Certificate.entity_type == entity_type, Certificate.entity_id == entity_id)
            .order_by(Certificate.uploaded_at.desc(), Certificate.id.desc())
            .first()
        )
        if certificate is None:
            return None
        return certificate.id, ExtractedCertificateData.model_validate(certificate.extracted_data or {})
    finally:
        db.close()


def save_snapshot(certificate_id: int, entity_type: str, entity_id: int, template_id: Optional[int],
                  result: ComplianceResult, insight: str) -> Optional[int]:
    """Persist a new result snapshot. Earlier snapshots are never modified."""
    db = get_db()
    if db is None:
        return None

    try:
        snapshot = ComplianceSnapshot(
            certificate_id=certificate_id,
            entity_type=entity_type,
            entity_id=entity_id,
            template_id=template_id,
            as_of=result.as_of,
            overall_status=result.overall_status.value,
            gap_count=len(result.gaps),
            result=result.model_dump(mode="json"),
            insight=insight,
        )
        db.add(snapshot)
        db.commit()
        db.refresh(snapshot)
        return snapshot.id
    except Exception:
        logger.exception("Error saving compliance snapshot for %s %s", entity_type, entity_id)
        db.rollback()
        return None
    finally:
        db.close()


def list_snapshots(entity_type: str, entity_id: int) -> list[SnapshotResponse]:
    """Snapshot history, newest first"""
    db = get_db()
    if db is None:
        return []

    try:
        rows = (
            db.query(ComplianceSnapshot)
            .filter(ComplianceSnapshot.entity_type == entity_type, ComplianceSnapshot.entity_id == entity_id)
            .order_by(ComplianceSnapshot.created_at.desc(), ComplianceSnapshot.id.desc())
            .all()
        )
        return [
            SnapshotResponse(
                id=row.id,
                certificate_id=row.certificate_id,
                template_id=row.template_id,
                as_of=row.as_of,
                overall_status=row.overall_status,
                gap_count=row.gap_count or 0,
                insight=row.insight,
                result=ComplianceResult.model_validate(row.result),
                created_at=row.created_at,
            )
            for row in rows
        ]
    finally:
        db.close()
