"""
Inbound payload validation.

Request handlers call these before touching the gateway or the AI client.
Each returns a typed model or raises SchemaValidationError listing every
failing field; nothing is partially applied.
"""

from typing import Any, Iterable, List

from pydantic import BaseModel, ValidationError

from .errors import SchemaValidationError
from .models.user import ProfileUpdate, UserCreate
from .models.health_log import HealthLogCreate, HealthLogType, health_log_create_adapter


def _reason(error_type: str) -> str:
    if error_type in ("missing", "union_tag_not_found"):
        return "required"
    if error_type in ("enum", "literal_error", "union_tag_invalid"):
        return "enum_mismatch"
    if error_type.endswith("_type") or error_type.endswith("_parsing"):
        return "wrong_type"
    return "invalid"


def field_errors(exc: ValidationError, skip: Iterable[str] = ()) -> List[dict]:
    """Flatten a pydantic ValidationError into {field, reason, message} entries."""
    skip = set(skip)
    errors = []
    for err in exc.errors():
        loc = [str(p) for p in err["loc"]]
        if loc and loc[0] in skip:
            loc = loc[1:]
        errors.append({
            "field": ".".join(loc) or "body",
            "reason": _reason(err["type"]),
            "message": err["msg"],
        })
    return errors


def _validate(model: type[BaseModel], data: Any):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise SchemaValidationError(field_errors(e)) from e


def validate_registration(data: Any) -> UserCreate:
    """Validate a registration payload (username and password only)."""
    return _validate(UserCreate, data)


def validate_profile(data: Any) -> ProfileUpdate:
    """Validate a full profile replacement payload."""
    return _validate(ProfileUpdate, data)


def validate_health_log(data: Any) -> HealthLogCreate:
    """Validate a health log entry against the payload shape of its type."""
    try:
        return health_log_create_adapter.validate_python(data)
    except ValidationError as e:
        tags = [t.value for t in HealthLogType]
        raise SchemaValidationError(field_errors(e, skip=tags)) from e
