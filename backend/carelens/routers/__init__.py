"""Routers package for CareLens API."""

from .auth import router as auth_router
from .profile import router as profile_router
from .symptoms import router as symptoms_router
from .risks import router as risks_router
from .health_logs import router as health_logs_router
from .lifestyle import router as lifestyle_router

__all__ = [
    "auth_router",
    "profile_router",
    "symptoms_router",
    "risks_router",
    "health_logs_router",
    "lifestyle_router"
]
