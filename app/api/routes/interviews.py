"""
Interview history endpoints: save, list, detail, stats, daily limit and
post-interview AI feedback.
"""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, get_current_user_obj
from app.core.gating import (
    check_interview_limit,
    get_user_tier,
    has_feature_access,
    require_feature,
)
from app.db.models.user import User
from app.schemas.interview import (
    FeedbackRequest,
    FeedbackResponse,
    InterviewCreateRequest,
    InterviewCreatedResponse,
    InterviewDetail,
    InterviewLimitResponse,
    InterviewStatsResponse,
    InterviewSummary,
)
from app.services import feedback_service, interview_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/interviews", tags=["Interviews"])


@router.post("", response_model=InterviewCreatedResponse, status_code=status.HTTP_201_CREATED)
def save_interview(
    payload: InterviewCreateRequest,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    interview = interview_service.save_interview(db, user, payload)
    return {"id": interview.id}


@router.get("", response_model=List[InterviewSummary])
def list_interviews(
    type: Optional[str] = Query(None, description="Interview type filter; 'all' disables it"),
    search: Optional[str] = Query(None, description="Case-insensitive job role search"),
    user: User = Depends(require_feature("interview_history")),
    db: Session = Depends(get_db),
):
    """Interview history, newest first. Requires a plan with interview history."""
    interviews = interview_service.list_interviews(db, user, interview_type=type, search=search)
    return [interview_service.to_summary(i) for i in interviews]


@router.get("/stats", response_model=InterviewStatsResponse)
def interview_stats(
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    """Dashboard numbers: totals, averages, weekly count, improvement, streak, skills."""
    interviews = interview_service.list_interviews(db, user)
    return interview_service.compute_stats(interviews)


@router.get("/limit", response_model=InterviewLimitResponse)
def interview_limit(
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    return check_interview_limit(db, user)


@router.post("/feedback", response_model=FeedbackResponse)
def generate_feedback(
    payload: FeedbackRequest,
    user: User = Depends(get_current_user_obj),
):
    """
    Score a transcript without saving it.

    Always answers 200; when analysis is unavailable the neutral fallback
    result is returned.
    """
    result = feedback_service.generate_interview_feedback(payload.transcript, payload.config)
    logger.info(f"Feedback requested: user_id={user.id}, overall={result.metrics.overall_score}")
    return FeedbackResponse(
        metrics=result.metrics,
        feedback=result.feedback,
        label=feedback_service.score_label(result.metrics.overall_score),
    )


@router.get("/{interview_id}", response_model=InterviewDetail)
def get_interview(
    interview_id: str,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    interview = interview_service.get_interview(db, user, interview_id)
    if not interview:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Interview not found")

    detailed = has_feature_access(get_user_tier(db, user), "detailed_analysis")
    return interview_service.to_detail(interview, detailed=detailed)


@router.delete("")
def clear_history(
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    deleted = interview_service.clear_history(db, user)
    return {"deleted": deleted}
