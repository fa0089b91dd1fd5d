from fastapi import HTTPException
from openai import OpenAIError

from services.compliance.errors import MissingExpirationDate, NoTemplateFound, ValidationError
from services.compliance_service import DatabaseUnavailable, NotFound
from services.llm import ExtractionError


def to_http_exception(e: Exception, action: str) -> HTTPException:
    """Map service and engine exceptions onto HTTP status codes"""
    if isinstance(e, HTTPException):
        return e
    if isinstance(e, (ValidationError, MissingExpirationDate)):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, (NoTemplateFound, NotFound)):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, DatabaseUnavailable):
        return HTTPException(status_code=503, detail=str(e))
    if isinstance(e, (ExtractionError, OpenAIError)):
        return HTTPException(status_code=502, detail=f"Certificate extraction failed: {str(e)}")
    return HTTPException(status_code=500, detail=f"{action} failed: {str(e)}")
