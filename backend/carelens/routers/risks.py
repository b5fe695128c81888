"""
Health risk assessment API routes.
"""

from fastapi import APIRouter, Depends

from ..database import Storage, get_storage
from ..models.analysis import RiskAssessment
from ..models.health_log import AssessmentLogCreate, AssessmentLogData
from ..models.user import User
from ..services.analysis_service import AnalysisService, get_analysis_service
from .dependencies import get_current_user

router = APIRouter(prefix="/api/risks", tags=["Risk Assessment"])


@router.post("/assess", response_model=RiskAssessment)
async def assess_risks(
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    analyzer: AnalysisService = Depends(get_analysis_service)
):
    """Assess health risks from the caller's full profile."""
    assessment = await analyzer.assess_health_risks(current_user.profile())

    await storage.create_health_log(
        current_user.id,
        AssessmentLogCreate(data=AssessmentLogData(assessment=assessment))
    )
    return assessment
