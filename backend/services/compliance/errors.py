"""Exceptions raised by the compliance engine."""

from typing import Optional


class ComplianceError(Exception):
    """Base exception for all compliance engine errors."""

    pass


class ValidationError(ComplianceError, ValueError):
    """Raised when an input has the wrong shape, e.g. a non-numeric limit.

    Subclasses ValueError so pydantic field validators can raise it directly.
    """

    pass


class NoTemplateFound(ComplianceError):
    """Raised when no requirement template applies to an entity."""

    def __init__(self, category: str, risk_level: Optional[str] = None):
        self.category = category
        self.risk_level = risk_level
        if risk_level:
            message = f"No requirement template found for {category} ({risk_level})"
        else:
            message = f"No requirement template found for {category}"
        super().__init__(message)


class MissingExpirationDate(ComplianceError):
    """Raised when an expiration check has no usable expiration date."""

    def __init__(self, coverage: Optional[str] = None):
        self.coverage = coverage
        if coverage:
            message = f"No expiration date available for {coverage}"
        else:
            message = "No expiration date available"
        super().__init__(message)
