import logging

from fastapi import APIRouter, HTTPException

from schemas.common import (
    CertificateUploadInput, ComplianceReport, EntityInput, EntityResponse, SnapshotResponse,
)
from services import db_ops
from services.compliance_service import get_entity_or_raise, recheck_entity, upload_certificate
from routers.errors import to_http_exception

logger = logging.getLogger(__name__)

# Column only one of the two entity tables has
EXTRA_FIELDS = {"vendor": "service_type", "tenant": "unit"}


def build_entity_router(entity_type: str) -> APIRouter:
    """Routes for one kind of insured party, mounted at /api/vendors or /api/tenants"""
    router = APIRouter(prefix=f"/api/{entity_type}s", tags=[f"{entity_type}s"])
    label = entity_type.title()

    @router.post("", response_model=EntityResponse)
    async def create_entity(input: EntityInput):
        if not db_ops.database_available():
            raise HTTPException(status_code=503, detail="Database not configured")

        if input.template_id is not None:
            template = db_ops.get_template(input.template_id)
            if template is None:
                raise HTTPException(status_code=404, detail=f"Template {input.template_id} not found")
            if template.category != entity_type:
                raise HTTPException(
                    status_code=422,
                    detail=f"Template {input.template_id} is a {template.category} template",
                )

        fields = input.model_dump(exclude={"service_type", "unit"})
        fields["risk_level"] = (input.risk_level or "standard").strip().lower()
        extra = EXTRA_FIELDS[entity_type]
        fields[extra] = getattr(input, extra)

        entity = db_ops.create_entity(entity_type, **fields)
        if entity is None:
            raise HTTPException(status_code=500, detail=f"Failed to create {entity_type}")
        logger.info("Created %s %s (%s)", entity_type, entity.id, entity.name)
        return entity

    @router.get("/{entity_id}", response_model=EntityResponse)
    async def get_entity(entity_id: int):
        try:
            return get_entity_or_raise(entity_type, entity_id)
        except Exception as e:
            raise to_http_exception(e, f"{label} lookup")

    @router.post("/{entity_id}/certificates", response_model=ComplianceReport)
    async def upload_entity_certificate(entity_id: int, input: CertificateUploadInput):
        """Extract a COI, store it and check it against the entity's template"""
        if not input.coi_text.strip():
            raise HTTPException(status_code=422, detail="coi_text must not be empty")
        try:
            return upload_certificate(entity_type, entity_id, input.coi_text, input.uploaded_by, input.as_of)
        except Exception as e:
            raise to_http_exception(e, "COI compliance check")

    @router.post("/{entity_id}/recheck", response_model=ComplianceReport)
    async def recheck(entity_id: int):
        """Re-evaluate the latest certificate as of today"""
        try:
            return recheck_entity(entity_type, entity_id)
        except Exception as e:
            raise to_http_exception(e, f"{label} re-check")

    @router.get("/{entity_id}/history", response_model=list[SnapshotResponse])
    async def history(entity_id: int):
        """Compliance snapshots, newest first"""
        try:
            get_entity_or_raise(entity_type, entity_id)
        except Exception as e:
            raise to_http_exception(e, f"{label} history")
        return db_ops.list_snapshots(entity_type, entity_id)

    return router


vendors_router = build_entity_router("vendor")
tenants_router = build_entity_router("tenant")
