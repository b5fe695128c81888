"""
Authentication dependencies.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..database import Storage, get_storage
from ..errors import AuthError
from ..models.user import User
from ..services.auth_service import AuthService

security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    storage: Storage = Depends(get_storage)
) -> User:
    """Get current authenticated user from JWT token."""
    if credentials is None:
        raise AuthError("Missing bearer token")

    user = await AuthService.get_current_user(storage, credentials.credentials)
    if not user:
        raise AuthError("Invalid or expired token")

    return user
