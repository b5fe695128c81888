"""
Health log API routes.
"""

from typing import Any, List, Optional
from fastapi import APIRouter, Body, Depends, Query, status

from ..database import Storage, get_storage
from ..models.health_log import HealthLog, HealthLogType
from ..models.user import User
from ..validation import validate_health_log
from .dependencies import get_current_user

router = APIRouter(prefix="/api/health-logs", tags=["Health Logs"])


@router.post("", response_model=HealthLog, status_code=status.HTTP_201_CREATED)
async def create_health_log(
    payload: Any = Body(...),
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage)
):
    """Append a health log owned by the caller."""
    entry = validate_health_log(payload)
    return await storage.create_health_log(current_user.id, entry)


@router.get("", response_model=List[HealthLog])
async def list_health_logs(
    log_type: Optional[HealthLogType] = Query(None, alias="type", description="Filter by category"),
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage)
):
    """Get the caller's health logs, newest first."""
    return await storage.get_user_health_logs(current_user.id, log_type)
