import logging
from typing import Optional

from fastapi import APIRouter, Header, HTTPException

from config import CRON_SECRET
from schemas.common import ComplianceReport, EvaluateInput, InsightResponse, RecheckSummary
from schemas.compliance import ComplianceResult
from services.compliance.insight import generate_insight
from services.compliance_service import evaluate_certificate, recheck_all
from routers.errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/compliance", tags=["compliance"])


@router.post("/evaluate", response_model=ComplianceReport)
async def evaluate_compliance(input: EvaluateInput):
    """Evaluate extracted certificate data against a list of requirements (nothing is stored)"""
    try:
        result, insight = evaluate_certificate(
            input.requirements, input.certificate, input.as_of, input.warn_window_days,
            required_holder=input.certificate_holder,
        )
        return ComplianceReport(result=result, insight=insight, coi_data=input.certificate)
    except Exception as e:
        raise to_http_exception(e, "Compliance evaluation")


@router.post("/insight", response_model=InsightResponse)
async def compliance_insight(result: ComplianceResult):
    """Plain-English summary of a compliance result"""
    return InsightResponse(insight=generate_insight(result))


@router.post("/recheck-all", response_model=RecheckSummary)
async def recheck_all_entities(authorization: Optional[str] = Header(None)):
    """Re-evaluate every vendor and tenant with a certificate on file (called by cron)"""
    if not CRON_SECRET:
        raise HTTPException(status_code=503, detail="CRON_SECRET not configured")
    if authorization != f"Bearer {CRON_SECRET}":
        logger.warning("Rejected batch re-check with bad credentials")
        raise HTTPException(status_code=401, detail="Unauthorized")

    try:
        return recheck_all()
    except Exception as e:
        raise to_http_exception(e, "Batch re-check")
