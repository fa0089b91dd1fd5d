import json
import logging

from openai import OpenAI
from pydantic import ValidationError as PydanticValidationError

from config import get_api_key, MOCK_MODE, OPENAI_MODEL
from prompts.coi import COI_EXTRACTION_PROMPT
from schemas.compliance import ExtractedCertificateData, ExtractedCoverage
from services.mock.coi import mock_coi_extract

logger = logging.getLogger(__name__)


class ExtractionError(Exception):
    """Raised when the extraction service returns something unusable"""

    pass


# Lazy client initialization
_client = None


def get_client():
    global _client
    if MOCK_MODE:
        return None  # Mock mode doesn't need a client
    if _client is None:
        api_key = get_api_key()
        if not api_key:
            raise ExtractionError(
                "OPENAI_API_KEY not configured. Set it in environment, .env file, or ~/.openai/api_key"
            )
        _client = OpenAI(api_key=api_key)
    return _client


def clean_llm_response(response_text: str) -> str:
    """Clean up potential markdown formatting from LLM JSON responses.

    Handles the common pattern where LLMs wrap JSON in ```json``` code blocks.
    """
    if response_text.startswith("```"):
        response_text = response_text.split("```")[1]
        if response_text.startswith("json"):
            response_text = response_text[4:]
    return response_text.strip()


def _readable_fields(model_cls, name: str, raw: dict) -> dict:
    """Keep only the fields of raw that model_cls can parse on their own"""
    kept = {}
    for field, value in raw.items():
        try:
            model_cls.model_validate({field: value})
        except PydanticValidationError:
            logger.warning("Ignoring unreadable %s.%s: %r", name, field, value)
            continue
        kept[field] = value
    return kept


def build_certificate_data(raw: dict) -> ExtractedCertificateData:
    """Turn a raw extraction dict into ExtractedCertificateData.

    Extraction output is untrusted: unreadable values are dropped field by
    field instead of failing the whole certificate, so a garbled limit shows
    up later as a gap rather than an error.
    """
    if not isinstance(raw, dict):
        raise ExtractionError(f"Expected a JSON object, got {type(raw).__name__}")

    coverages = {}
    raw_coverages = raw.get("coverages") or {}
    if not isinstance(raw_coverages, dict):
        logger.warning("Ignoring coverages of type %s", type(raw_coverages).__name__)
        raw_coverages = {}
    for coverage_type, value in raw_coverages.items():
        if not isinstance(value, dict):
            continue
        coverages[coverage_type] = ExtractedCoverage.model_validate(
            _readable_fields(ExtractedCoverage, coverage_type, value)
        )

    header = {k: v for k, v in raw.items() if k != "coverages"}
    header = _readable_fields(ExtractedCertificateData, "certificate", header)
    return ExtractedCertificateData.model_validate({**header, "coverages": coverages})


def extract_certificate_data(coi_text: str) -> ExtractedCertificateData:
    """Extract structured coverage data from COI text (mock regexes in MOCK_MODE)"""
    if MOCK_MODE:
        return build_certificate_data(mock_coi_extract(coi_text))

    prompt = COI_EXTRACTION_PROMPT.replace("<<DOCUMENT>>", coi_text[:15000])
    response = get_client().chat.completions.create(
        model=OPENAI_MODEL,
        max_completion_tokens=4096,
        messages=[{"role": "user", "content": prompt}]
    )

    response_text = clean_llm_response(response.choices[0].message.content or "")
    try:
        raw = json.loads(response_text)
    except json.JSONDecodeError as e:
        raise ExtractionError(f"Failed to parse extraction response: {e}") from e
    return build_certificate_data(raw)
