"""
Health log models.

A health log is an immutable record owned by a user. Its `data` payload
shape is selected by `type`; every payload carries a `version` so stored
records can be told apart if a payload shape changes.
"""

from enum import Enum
from pydantic import Field, TypeAdapter
from typing import Annotated, List, Literal, Union
from datetime import date, datetime

from .base import CamelModel
from .analysis import SymptomAnalysis, RiskAssessment


class HealthLogType(str, Enum):
    """Health log categories."""
    SYMPTOM = "symptom"
    LIFESTYLE = "lifestyle"
    ASSESSMENT = "assessment"


class SymptomLogData(CamelModel):
    """Symptoms as bare labels, with the analysis they produced."""
    version: Literal[1] = 1
    symptoms: List[str] = Field(..., min_length=1)
    analysis: SymptomAnalysis


class DietEntry(CamelModel):
    meals: List[str] = Field(default_factory=list)
    calories: int = Field(0, ge=0)
    water: float = Field(0, ge=0)


class ExerciseSession(CamelModel):
    type: str
    duration: int = Field(..., ge=0, description="Minutes")


class ActivityEntry(CamelModel):
    steps: int = Field(0, ge=0)
    exercise: List[ExerciseSession] = Field(default_factory=list)


class SleepEntry(CamelModel):
    hours: float = Field(0, ge=0, le=24)
    quality: int = Field(0, ge=0, le=10)


class LifestyleLogData(CamelModel):
    """A day's diet, activity, sleep and stress entry."""
    version: Literal[1] = 1
    log_date: date = Field(..., alias="date")
    diet: DietEntry = Field(default_factory=DietEntry)
    activity: ActivityEntry = Field(default_factory=ActivityEntry)
    sleep: SleepEntry = Field(default_factory=SleepEntry)
    stress: int = Field(0, ge=0, le=10)


class AssessmentLogData(CamelModel):
    version: Literal[1] = 1
    assessment: RiskAssessment


class SymptomLogCreate(CamelModel):
    type: Literal["symptom"] = "symptom"
    data: SymptomLogData


class LifestyleLogCreate(CamelModel):
    type: Literal["lifestyle"] = "lifestyle"
    data: LifestyleLogData


class AssessmentLogCreate(CamelModel):
    type: Literal["assessment"] = "assessment"
    data: AssessmentLogData


class _Stored(CamelModel):
    id: str
    user_id: str
    created_at: datetime


class SymptomLog(SymptomLogCreate, _Stored):
    pass


class LifestyleLog(LifestyleLogCreate, _Stored):
    pass


class AssessmentLog(AssessmentLogCreate, _Stored):
    pass


HealthLogCreate = Annotated[
    Union[SymptomLogCreate, LifestyleLogCreate, AssessmentLogCreate],
    Field(discriminator="type"),
]

HealthLog = Annotated[
    Union[SymptomLog, LifestyleLog, AssessmentLog],
    Field(discriminator="type"),
]

health_log_create_adapter = TypeAdapter(HealthLogCreate)
health_log_adapter = TypeAdapter(HealthLog)
