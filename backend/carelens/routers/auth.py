"""
Authentication API routes.
"""

from typing import Any
from fastapi import APIRouter, Body, status, Depends

from ..database import Storage, get_storage
from ..errors import AuthError
from ..models.user import UserLogin, User, Token
from ..services.auth_service import AuthService
from ..validation import validate_registration
from .dependencies import get_current_user

router = APIRouter(prefix="/api", tags=["Authentication"])


@router.post("/register", response_model=User, status_code=status.HTTP_201_CREATED)
async def register(
    payload: Any = Body(...),
    storage: Storage = Depends(get_storage)
):
    """Register a new user with an empty profile."""
    user_data = validate_registration(payload)
    return await AuthService.register(storage, user_data)


@router.post("/login", response_model=Token)
async def login(
    credentials: UserLogin,
    storage: Storage = Depends(get_storage)
):
    """Login and get access token."""
    token = await AuthService.login(storage, credentials.username, credentials.password)
    
    if not token:
        raise AuthError("Invalid username or password")
    
    return token


@router.get("/user", response_model=User)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return current_user


@router.post("/logout")
async def logout(current_user: User = Depends(get_current_user)):
    """Logout (client should discard token)."""
    return {"message": "Logged out successfully"}
