import logging
from typing import Optional

from fastapi import APIRouter, HTTPException

from schemas.common import (
    DuplicateTemplateInput, TemplateInput, TemplateUpdateInput, TemplateUsage, TemplateWithUsage,
)
from schemas.compliance import Category, RequirementTemplate
from services import db_ops
from services.compliance.resolver import effective_templates
from services.compliance_service import reevaluate_template_entities
from routers.errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/templates", tags=["templates"])


def _require_database():
    if not db_ops.database_available():
        raise HTTPException(status_code=503, detail="Database not configured")


def _get_or_404(template_id: int) -> RequirementTemplate:
    template = db_ops.get_template(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail=f"Template {template_id} not found")
    return template


def _check_editable(template: RequirementTemplate, organization_id: str):
    if template.is_system_default:
        raise HTTPException(status_code=403, detail="System default templates cannot be modified; duplicate it instead")
    if template.organization_id != organization_id:
        raise HTTPException(status_code=403, detail="Template belongs to another organization")


@router.get("", response_model=list[TemplateWithUsage])
async def list_templates(organization_id: Optional[str] = None, category: Optional[Category] = None):
    """Templates in effect for an organization; defaults it has customized are hidden"""
    _require_database()
    templates = effective_templates(db_ops.list_templates(organization_id, category))

    listed = []
    for template in templates:
        usage = db_ops.template_usage(template.id, organization_id)
        listed.append(TemplateWithUsage(
            **template.model_dump(),
            vendor_count=usage["vendors"],
            tenant_count=usage["tenants"],
        ))
    return listed


@router.get("/{template_id}", response_model=RequirementTemplate)
async def get_template(template_id: int):
    _require_database()
    return _get_or_404(template_id)


@router.post("", response_model=RequirementTemplate)
async def create_template(input: TemplateInput):
    """Create an organization-owned template"""
    _require_database()
    template = db_ops.create_template(
        organization_id=input.organization_id,
        name=input.name,
        description=input.description,
        category=input.category,
        risk_level=input.risk_level,
        coverages=input.coverages,
    )
    if template is None:
        raise HTTPException(status_code=500, detail="Failed to create template")
    logger.info("Created template %s for organization %s", template.id, input.organization_id)
    return template


@router.put("/{template_id}")
async def update_template(template_id: int, input: TemplateUpdateInput):
    """Update an organization template, then re-evaluate everything assigned to it"""
    _require_database()
    template = _get_or_404(template_id)
    _check_editable(template, input.organization_id)

    updated = db_ops.update_template(
        template_id,
        name=input.name,
        description=input.description,
        risk_level=input.risk_level,
        coverages=input.coverages,
    )
    if updated is None:
        raise HTTPException(status_code=500, detail="Failed to update template")

    try:
        recalculation = reevaluate_template_entities(template_id)
    except Exception as e:
        raise to_http_exception(e, "Template re-evaluation")

    return {"template": updated, "recalculation": recalculation}


@router.post("/{template_id}/duplicate", response_model=RequirementTemplate)
async def duplicate_template(template_id: int, input: DuplicateTemplateInput):
    """Copy a system default (or one of the organization's templates) into the organization"""
    _require_database()
    source = _get_or_404(template_id)
    if not source.is_system_default and source.organization_id != input.organization_id:
        raise HTTPException(status_code=403, detail="Template belongs to another organization")

    copy = db_ops.create_template(
        organization_id=input.organization_id,
        name=f"{source.name} (Custom)",
        description=source.description,
        category=source.category,
        risk_level=source.risk_level,
        coverages=list(source.coverages),
    )
    if copy is None:
        raise HTTPException(status_code=500, detail="Failed to duplicate template")
    logger.info("Duplicated template %s into %s as %s", template_id, input.organization_id, copy.id)
    return copy


@router.delete("/{template_id}")
async def delete_template(template_id: int, organization_id: str):
    """Delete an organization template that nothing is assigned to"""
    _require_database()
    template = _get_or_404(template_id)
    _check_editable(template, organization_id)

    usage = db_ops.template_usage(template_id)
    assigned = usage["vendors"] + usage["tenants"]
    if assigned:
        raise HTTPException(
            status_code=409,
            detail=f"Template is assigned to {assigned} vendor(s)/tenant(s); reassign them first",
        )

    if not db_ops.delete_template(template_id):
        raise HTTPException(status_code=500, detail="Failed to delete template")
    return {"success": True, "template_id": template_id}


@router.get("/{template_id}/usage", response_model=TemplateUsage)
async def get_template_usage(template_id: int, organization_id: Optional[str] = None):
    _require_database()
    _get_or_404(template_id)
    usage = db_ops.template_usage(template_id, organization_id)
    return TemplateUsage(
        vendors=usage["vendors"],
        tenants=usage["tenants"],
        total_entities=usage["vendors"] + usage["tenants"],
        properties=usage["properties"],
    )
