"""
Live session endpoints: start, integrity events, pause/resume, finish.

The browser owns the audio/video stream to the realtime model; these routes
hand it the interviewer instruction and keep the integrity state server-side.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core import config
from app.core.auth_dependency import get_db, get_current_user_obj
from app.core.gating import enforce_interview_limit, get_user_tier, has_feature_access
from app.db.models.interview_session import InterviewSession
from app.db.models.user import User
from app.schemas.interview import InterviewDetail
from app.schemas.session import (
    AttentionSample,
    IntegrityEventResponse,
    SessionFinishRequest,
    SessionStartRequest,
    SessionStartResponse,
    SessionStateResponse,
    ViolationRequest,
)
from app.services import interview_service, session_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["Sessions"])


def _load_session(db: Session, user: User, session_id: str) -> InterviewSession:
    session = session_service.get_session(db, user, session_id)
    if not session:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return session


@router.post("", response_model=SessionStartResponse, status_code=status.HTTP_201_CREATED)
def start_session(
    payload: SessionStartRequest,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    """Check today's allowance and open a session."""
    enforce_interview_limit(db, user)

    session = session_service.start_session(db, user, payload.config, anti_cheat=payload.anti_cheat)
    return SessionStartResponse(
        session_id=session.id,
        system_prompt=session_service.build_system_prompt(payload.config),
        model=config.GEMINI_LIVE_MODEL,
        voice=session_service.INTERVIEWER_VOICE,
        duration_seconds=session_service.session_duration_seconds(payload.config),
        warning_threshold=session_service.WARNING_THRESHOLD,
    )


@router.get("/{session_id}", response_model=SessionStateResponse)
def get_session(
    session_id: str,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    return session_service.to_state(_load_session(db, user, session_id))


@router.post("/{session_id}/violations", response_model=IntegrityEventResponse)
def report_violation(
    session_id: str,
    payload: ViolationRequest,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    """Tab switch, focus loss, fullscreen exit or screen-share stop."""
    session = _load_session(db, user, session_id)
    counted = session_service.record_violation(db, session, payload.reason)
    return IntegrityEventResponse(
        counted=counted,
        warning=payload.reason if counted else None,
        state=session_service.to_state(session),
    )


@router.post("/{session_id}/attention", response_model=IntegrityEventResponse)
def report_attention(
    session_id: str,
    payload: AttentionSample,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    session = _load_session(db, user, session_id)
    warning = session_service.record_attention(db, session, payload.landmarks, payload.timestamp_ms)
    return IntegrityEventResponse(
        counted=warning is not None,
        warning=warning,
        state=session_service.to_state(session),
    )


@router.post("/{session_id}/pause", response_model=SessionStateResponse)
def pause_session(
    session_id: str,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    session = _load_session(db, user, session_id)
    try:
        session_service.pause_session(db, session)
    except session_service.SessionStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return session_service.to_state(session)


@router.post("/{session_id}/resume", response_model=SessionStateResponse)
def resume_session(
    session_id: str,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    session = _load_session(db, user, session_id)
    try:
        session_service.resume_session(db, session)
    except session_service.SessionStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return session_service.to_state(session)


@router.post("/{session_id}/finish", response_model=InterviewDetail)
def finish_session(
    session_id: str,
    payload: SessionFinishRequest,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    """Generate feedback, save the interview and close the session."""
    session = _load_session(db, user, session_id)
    try:
        interview = session_service.finish_session(
            db,
            user,
            session,
            transcript=payload.transcript,
            duration=payload.duration,
            questions_asked=payload.questions_asked,
        )
    except session_service.SessionStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    detailed = has_feature_access(get_user_tier(db, user), "detailed_analysis")
    return interview_service.to_detail(interview, detailed=detailed)
