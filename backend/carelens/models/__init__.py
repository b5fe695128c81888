"""Pydantic models for CareLens."""

from .user import (
    User,
    UserCreate,
    UserLogin,
    UserCredentials,
    UserInDB,
    Token,
    TokenData,
    Profile,
    ProfileUpdate,
    Lifestyle,
    Exercise,
    EmergencyContact,
)
from .analysis import (
    PossibleCondition,
    SymptomAnalysis,
    RiskFactor,
    OverallHealth,
    RiskAssessment,
    ProfileContext,
    SymptomAnalysisRequest,
)
from .health_log import (
    HealthLogType,
    HealthLog,
    HealthLogCreate,
    SymptomLog,
    SymptomLogData,
    LifestyleLog,
    LifestyleLogData,
    AssessmentLog,
    AssessmentLogData,
)

__all__ = [
    # User
    "User", "UserCreate", "UserLogin", "UserCredentials", "UserInDB", "Token", "TokenData",
    "Profile", "ProfileUpdate", "Lifestyle", "Exercise", "EmergencyContact",
    # Analysis
    "PossibleCondition", "SymptomAnalysis", "RiskFactor", "OverallHealth",
    "RiskAssessment", "ProfileContext", "SymptomAnalysisRequest",
    # Health logs
    "HealthLogType", "HealthLog", "HealthLogCreate",
    "SymptomLog", "SymptomLogData", "LifestyleLog", "LifestyleLogData",
    "AssessmentLog", "AssessmentLogData",
]
