"""Conversion of untrusted limit and date values into the engine's units.

Every amount inside the engine is a whole number of US dollars (``int``).
This module is the only place where other representations are converted:
extracted actual amounts round down, required minimums round up, so a
fractional cent can never turn a failing certificate into a passing one.
"""

import math
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_CEILING, ROUND_FLOOR
from typing import Optional, Union

from services.compliance.errors import ValidationError

STATUTORY = "Statutory"

ROUND_ACTUAL = ROUND_FLOOR
ROUND_REQUIRED = ROUND_CEILING

_AMOUNT_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(K|MM|M)?")
_MULTIPLIERS = {None: 1, "K": 1000, "M": 1000000, "MM": 1000000}
_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%m/%d/%y", "%m-%d-%Y")

Amount = Union[int, str]


def is_statutory(value) -> bool:
    return isinstance(value, str) and value.strip().lower() == STATUTORY.lower()


def parse_amount(value, rounding: str = ROUND_ACTUAL) -> Optional[int]:
    """Parse a limit like 1000000, '$1,000,000', '$1M' or '500k' to whole dollars.

    None and blank strings mean "not reported" and return None. Anything
    else that is not a number raises ValidationError.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"Invalid amount: {value!r}")
    if isinstance(value, int):
        return value

    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValidationError(f"Invalid amount: {value!r}")
        number = Decimal(str(value))
    elif isinstance(value, Decimal):
        number = value
    elif isinstance(value, str):
        cleaned = value.upper().replace("$", "").replace(",", "").replace("USD", "").strip()
        if not cleaned:
            return None
        match = _AMOUNT_PATTERN.fullmatch(cleaned)
        if not match:
            raise ValidationError(f"Invalid amount: {value!r}")
        try:
            number = Decimal(match.group(1)) * _MULTIPLIERS[match.group(2)]
        except InvalidOperation as e:
            raise ValidationError(f"Invalid amount: {value!r}") from e
    else:
        raise ValidationError(f"Invalid amount: {value!r}")

    if not number.is_finite():
        raise ValidationError(f"Invalid amount: {value!r}")
    return int(number.to_integral_value(rounding=rounding))


def parse_date(value) -> Optional[date]:
    """Parse an ISO or US-style date. Datetimes are reduced to their date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"Invalid date: {value!r}")

    text = value.strip()
    if not text:
        return None
    # 2025-01-15T00:00:00Z and friends
    if len(text) > 10 and text[4:5] == "-" and text[10] in "T ":
        text = text[:10]
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValidationError(f"Invalid date: {value!r}")


def format_amount(value: Optional[Amount]) -> str:
    if value is None:
        return "Not found"
    if is_statutory(value):
        return STATUTORY
    return f"${value:,}"


_NAME_PUNCTUATION = re.compile(r"[.,;:'\"!?()]")
_NAME_SUFFIXES = (
    (re.compile(r"\blimited liability company\b"), "llc"),
    (re.compile(r"\bincorporated\b"), "inc"),
    (re.compile(r"\bcorporation\b"), "corp"),
)


def normalize_entity_name(name: Optional[str]) -> str:
    """Lowercase a company name and fold LLC/Inc/Corp spellings together.

    'Oakwood Properties, L.L.C.' and 'Oakwood Properties LLC' both become
    'oakwood properties llc'.
    """
    if not name:
        return ""
    text = _NAME_PUNCTUATION.sub("", name.lower())
    text = " ".join(text.split())
    for pattern, replacement in _NAME_SUFFIXES:
        text = pattern.sub(replacement, text)
    return text


def entity_names_match(required: Optional[str], actual: Optional[str]) -> bool:
    """True when the normalized names are equal or one contains the other."""
    r = normalize_entity_name(required)
    a = normalize_entity_name(actual)
    if not r or not a:
        return False
    return r == a or r in a or a in r
