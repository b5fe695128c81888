"""
Symptom checker API routes.
"""

import logging
from typing import List
from fastapi import APIRouter, Depends, Response, status

from ..database import Storage, get_storage
from ..models.analysis import SymptomAnalysis, SymptomAnalysisRequest
from ..models.health_log import HealthLogType, SymptomLog, SymptomLogCreate, SymptomLogData
from ..models.user import User
from ..services.analysis_service import AnalysisService, build_profile_context, get_analysis_service
from .dependencies import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/symptoms", tags=["Symptoms"])


@router.post("/analyze", response_model=SymptomAnalysis)
async def analyze_symptoms(
    request: SymptomAnalysisRequest,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    analyzer: AnalysisService = Depends(get_analysis_service)
):
    """
    Analyze symptoms with the AI service and record the result.

    The symptom log is written only after the analysis succeeds.
    """
    context = build_profile_context(current_user) if request.include_profile else None
    analysis = await analyzer.analyze_symptoms(request.symptoms, context)

    await storage.create_health_log(
        current_user.id,
        SymptomLogCreate(data=SymptomLogData(symptoms=request.symptoms, analysis=analysis))
    )
    logger.info("Symptom analysis recorded for user %s (%d conditions)", current_user.id, len(analysis.conditions))
    return analysis


@router.get("", response_model=List[SymptomLog])
async def get_symptom_history(
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage)
):
    """Get the caller's symptom logs, newest first."""
    return await storage.get_user_health_logs(current_user.id, HealthLogType.SYMPTOM)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_symptom_history(
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage)
):
    """Delete all of the caller's symptom logs."""
    deleted = await storage.delete_user_health_logs(current_user.id, HealthLogType.SYMPTOM)
    logger.info("Cleared %d symptom logs for user %s", deleted, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
