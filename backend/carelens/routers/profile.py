"""
Profile API routes.
"""

from typing import Any
from fastapi import APIRouter, Body, Depends

from ..database import Storage, get_storage
from ..models.user import User
from ..validation import validate_profile
from .dependencies import get_current_user

router = APIRouter(prefix="/api/profile", tags=["Profile"])


@router.get("", response_model=User)
async def get_profile(current_user: User = Depends(get_current_user)):
    """Get the caller's own user record."""
    return current_user


@router.post("", response_model=User)
async def update_profile(
    payload: Any = Body(...),
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage)
):
    """Replace the caller's profile. Omitted fields are reset to their defaults."""
    profile = validate_profile(payload)
    user = await storage.update_user(current_user.id, profile)
    return user.to_public()
