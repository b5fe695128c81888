"""Services package for CareLens."""

from .auth_service import AuthService
from .analysis_service import AnalysisService, OpenAIChatAdapter, get_analysis_service

__all__ = [
    "AuthService",
    "AnalysisService",
    "OpenAIChatAdapter",
    "get_analysis_service"
]
