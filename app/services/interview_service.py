"""
Interview history: persistence, listing, detail and dashboard statistics.
"""
import logging
import math
from datetime import datetime, timedelta
from typing import List, Optional, Iterable, Dict

from sqlalchemy.orm import Session

from app.core.gating import as_naive_utc, utcnow
from app.db.models.interview import Interview, InterviewTranscript
from app.db.models.user import User
from app.schemas.interview import (
    AIAnalysisResult,
    InterviewConfig,
    InterviewCreateRequest,
    InterviewDetail,
    InterviewStatsResponse,
    InterviewSummary,
    PerformanceMetrics,
    SkillBreakdown,
    TranscriptEntry,
)
from app.services.feedback_service import score_label

logger = logging.getLogger(__name__)

STREAK_WINDOW_DAYS = 30
IMPROVEMENT_WINDOW = 3


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def save_interview(db: Session, user: User, payload: InterviewCreateRequest) -> Interview:
    """Insert an interview row and, when there is one, its transcript."""
    interview = Interview(
        user_id=user.id,
        config=payload.config.model_dump(by_alias=True, mode="json"),
        status=payload.status,
        duration=payload.duration,
        questions_asked=payload.questions_asked,
        warning_count=payload.warning_count,
        overall_score=payload.overall_score,
        metrics=payload.metrics.model_dump(by_alias=True, mode="json") if payload.metrics else None,
        feedback=payload.feedback.model_dump(by_alias=True, mode="json") if payload.feedback else None,
    )
    if interview.overall_score is None and payload.metrics is not None:
        interview.overall_score = payload.metrics.overall_score

    if payload.transcript:
        interview.transcript = InterviewTranscript(
            entries=[entry.model_dump(by_alias=True, mode="json") for entry in payload.transcript]
        )

    db.add(interview)
    db.commit()
    db.refresh(interview)

    logger.info(
        f"Interview saved: interview_id={interview.id}, user_id={user.id}, "
        f"status={interview.status}, score={interview.overall_score}, "
        f"transcript_entries={len(payload.transcript)}"
    )
    return interview


def build_create_request(
    config: InterviewConfig,
    analysis: AIAnalysisResult,
    transcript: List[TranscriptEntry],
    status: str,
    duration: Optional[int],
    questions_asked: int,
    warning_count: int,
) -> InterviewCreateRequest:
    """Assemble a save payload from a finished live session."""
    return InterviewCreateRequest(
        config=config,
        status=status,
        duration=duration,
        questions_asked=questions_asked,
        warning_count=warning_count,
        overall_score=analysis.metrics.overall_score,
        metrics=analysis.metrics,
        feedback=analysis.feedback,
        transcript=transcript,
    )


def list_interviews(
    db: Session,
    user: User,
    interview_type: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Interview]:
    """
    The user's interviews, newest first.

    Filters are applied on the decoded config so they behave the same on
    SQLite and Postgres JSON columns.
    """
    interviews = (
        db.query(Interview)
        .filter(Interview.user_id == user.id)
        .order_by(Interview.created_at.desc())
        .all()
    )

    if interview_type and interview_type != "all":
        interviews = [i for i in interviews if (i.config or {}).get("interviewType") == interview_type]

    if search:
        needle = search.strip().lower()
        interviews = [i for i in interviews if needle in ((i.config or {}).get("jobRole") or "").lower()]

    return interviews


def get_interview(db: Session, user: User, interview_id: str) -> Optional[Interview]:
    """Fetch one interview; another user's interview is reported as missing."""
    return db.query(Interview).filter(
        Interview.id == interview_id,
        Interview.user_id == user.id,
    ).first()


def clear_history(db: Session, user: User) -> int:
    interviews = db.query(Interview).filter(Interview.user_id == user.id).all()
    for interview in interviews:
        db.delete(interview)
    db.commit()
    logger.info(f"Interview history cleared: user_id={user.id}, deleted={len(interviews)}")
    return len(interviews)


def to_summary(interview: Interview) -> InterviewSummary:
    return InterviewSummary(
        id=interview.id,
        user_id=interview.user_id,
        config=interview.config or {},
        status=interview.status,
        duration=interview.duration,
        questions_asked=interview.questions_asked or 0,
        warning_count=interview.warning_count or 0,
        overall_score=interview.overall_score,
        metrics=interview.metrics,
        feedback=interview.feedback,
        created_at=interview.created_at,
    )


def to_detail(interview: Interview, detailed: bool = True) -> InterviewDetail:
    """
    Detail view with transcript.

    Without detailed analysis only the overall score survives; the metric
    breakdown and written feedback are withheld.
    """
    summary = to_summary(interview)
    detail = InterviewDetail(
        **summary.model_dump(),
        transcript=interview.transcript.entries if interview.transcript else None,
        score_label=score_label(interview.overall_score) if interview.overall_score is not None else None,
    )
    if not detailed:
        detail.metrics = None
        detail.feedback = None
    return detail


def _average(values: List[int]) -> int:
    if not values:
        return 0
    return _round_half_up(sum(values) / len(values))


def _streak(created: Iterable[datetime], today: datetime) -> int:
    """Consecutive days with an interview counting back from today; today may be empty."""
    days = {as_naive_utc(c).date() for c in created}
    streak = 0
    for offset in range(STREAK_WINDOW_DAYS):
        day = (today - timedelta(days=offset)).date()
        if day in days:
            streak += 1
        elif offset > 0:
            break
    return streak


def compute_stats(interviews: List[Interview], now: Optional[datetime] = None) -> InterviewStatsResponse:
    """
    Dashboard numbers for a newest-first list of interviews.
    """
    now = now or utcnow()
    scored = [i.overall_score for i in interviews if i.overall_score is not None]

    improvement = 0
    if len(scored) >= IMPROVEMENT_WINDOW * 2:
        recent = scored[:IMPROVEMENT_WINDOW]
        previous = scored[IMPROVEMENT_WINDOW:IMPROVEMENT_WINDOW * 2]
        improvement = _round_half_up(sum(recent) / IMPROVEMENT_WINDOW - sum(previous) / IMPROVEMENT_WINDOW)

    week_ago = now - timedelta(days=7)
    this_week = sum(1 for i in interviews if as_naive_utc(i.created_at) > week_ago)

    metrics = [PerformanceMetrics.model_validate(i.metrics) for i in interviews if i.metrics]
    skills = SkillBreakdown(
        technical=_average([m.technical_knowledge for m in metrics]),
        communication=_average([m.communication for m in metrics]),
        problem_solving=_average([m.problem_solving for m in metrics]),
        confidence=_average([m.confidence for m in metrics]),
    )

    by_type: Dict[str, int] = {}
    for interview in interviews:
        kind = (interview.config or {}).get("interviewType") or "unknown"
        by_type[kind] = by_type.get(kind, 0) + 1

    return InterviewStatsResponse(
        total_interviews=len(interviews),
        average_score=_average(scored),
        best_score=max(scored) if scored else 0,
        total_duration=sum(i.duration or 0 for i in interviews),
        this_week=this_week,
        improvement=improvement,
        streak=_streak((i.created_at for i in interviews), now),
        skills=skills,
        by_type=by_type,
    )
