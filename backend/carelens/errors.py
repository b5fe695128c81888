"""
Error taxonomy shared by the gateway, the AI client and the request handlers.
"""

from typing import List, Optional


class CareLensError(Exception):
    """Base class for application errors."""


class SchemaValidationError(CareLensError):
    """Inbound data failed validation. Carries one entry per failing field."""

    def __init__(self, errors: List[dict]):
        self.errors = errors
        fields = ", ".join(e["field"] for e in errors)
        super().__init__(f"Validation failed: {fields}")


class AuthError(CareLensError):
    """Missing, invalid or expired credentials."""


class NotFoundError(CareLensError):
    """Operation referenced a record that does not exist."""


class ConflictError(CareLensError):
    """Uniqueness constraint violated."""


class AnalysisError(CareLensError):
    """
    The external AI call failed, returned nothing, or returned content that
    could not be parsed. `cause` is for logs only.
    """

    def __init__(self, message: str, cause: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message
