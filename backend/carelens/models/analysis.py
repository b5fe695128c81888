"""
AI analysis request and result models.
"""

from pydantic import Field, field_validator
from typing import Optional, List, Literal

from .base import CamelModel
from .user import Lifestyle


Severity = Literal["low", "medium", "high"]


class PossibleCondition(CamelModel):
    """A condition suggested by the symptom analysis."""
    name: str
    confidence: float = Field(..., ge=0, le=1)
    severity: Severity


class SymptomAnalysis(CamelModel):
    """Parsed symptom analysis reply."""
    conditions: List[PossibleCondition]
    recommendations: List[str]
    emergency_warning: Optional[str] = None


class RiskFactor(CamelModel):
    """Risk of a single condition. `risk` is a 0-100 score."""
    condition: str
    risk: int = Field(..., ge=0, le=100)
    factors: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class OverallHealth(CamelModel):
    score: int = Field(..., ge=0, le=100)
    summary: str


class RiskAssessment(CamelModel):
    """Parsed risk assessment reply."""
    risk_factors: List[RiskFactor]
    overall_health: OverallHealth


class ProfileContext(CamelModel):
    """Profile-derived fields appended to a symptom analysis prompt."""
    age: Optional[int] = None
    gender: Optional[str] = None
    medical_history: List[str] = Field(default_factory=list)
    family_history: List[str] = Field(default_factory=list)
    lifestyle: Optional[Lifestyle] = None


class SymptomAnalysisRequest(CamelModel):
    """Request body for a symptom analysis."""
    symptoms: List[str] = Field(..., min_length=1, max_length=50)
    include_profile: bool = True

    @field_validator("symptoms")
    @classmethod
    def reject_blank_symptoms(cls, v: List[str]) -> List[str]:
        if any(not s.strip() for s in v):
            raise ValueError("symptoms must not be blank")
        return v
