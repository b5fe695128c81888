"""
Lifestyle monitoring API routes.
"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from ..database import Storage, get_storage
from ..models.health_log import HealthLogType, LifestyleLog, LifestyleLogCreate, LifestyleLogData
from ..models.user import User
from .dependencies import get_current_user

router = APIRouter(prefix="/api/lifestyle", tags=["Lifestyle"])

# Sections a client may send on their own
LIFESTYLE_SECTIONS = ("diet", "activity", "sleep", "stress")


async def latest_entry(storage: Storage, user_id: str, log_date: date) -> LifestyleLogData:
    """The newest entry recorded for `log_date`, or an empty one."""
    logs = await storage.get_user_health_logs(user_id, HealthLogType.LIFESTYLE)
    for log in logs:
        if log.data.log_date == log_date:
            return log.data
    return LifestyleLogData(log_date=log_date)


@router.get("", response_model=LifestyleLogData)
async def get_lifestyle_entry(
    log_date: Optional[date] = Query(None, alias="date"),
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage)
):
    """Get the latest lifestyle entry for a day, or an empty one."""
    return await latest_entry(storage, current_user.id, log_date or date.today())


@router.post("", response_model=LifestyleLog, status_code=status.HTTP_201_CREATED)
async def log_lifestyle(
    entry: LifestyleLogData,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage)
):
    """
    Record a lifestyle entry.

    Sections missing from the request are carried over from the day's
    latest entry, so a client can post diet, activity, sleep and stress
    separately. The result is stored as a new log.
    """
    current = await latest_entry(storage, current_user.id, entry.log_date)
    updates = {
        name: getattr(entry, name)
        for name in LIFESTYLE_SECTIONS
        if name in entry.model_fields_set
    }
    merged = current.model_copy(update=updates, deep=True)
    return await storage.create_health_log(current_user.id, LifestyleLogCreate(data=merged))
