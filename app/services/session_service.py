"""
Live interview sessions.

Builds the interviewer instruction handed to the realtime model and keeps the
integrity monitor state (warnings, look-away window, pause, disqualification)
for a session while the browser streams audio and video elsewhere.
"""
import logging
from typing import Optional, List, Dict, Any

from sqlalchemy.orm import Session

from app.core.gating import utcnow, as_naive_utc
from app.db.models.interview_session import InterviewSession
from app.db.models.interview import Interview
from app.db.models.user import User
from app.llm.provider import LLMProvider
from app.schemas.interview import InterviewConfig, TranscriptEntry
from app.schemas.session import Landmark, SessionStateResponse
from app.services import feedback_service, interview_service

logger = logging.getLogger(__name__)

WARNING_THRESHOLD = 4
LOOK_AWAY_THRESHOLD_MS = 3000
LOOK_AWAY_RATIO = 0.25
INTERVIEWER_VOICE = "Kore"

# Face mesh indices
NOSE_TIP = 1
LEFT_CHEEK = 234
RIGHT_CHEEK = 454

INTERVIEW_TYPES: Dict[str, Dict[str, Any]] = {
    "technical": {
        "title": "Technical",
        "description": "Coding, algorithms, and system knowledge",
        "duration": 30,
    },
    "behavioral": {
        "title": "Behavioral",
        "description": "STAR method, past experiences, soft skills",
        "duration": 25,
    },
    "hr": {
        "title": "HR Round",
        "description": "Culture fit, salary, expectations",
        "duration": 20,
    },
    "system-design": {
        "title": "System Design",
        "description": "Architecture, scalability, design patterns",
        "duration": 45,
    },
}

EXPERIENCE_LEVEL_CONTEXT = {
    "Entry": "This is an entry-level candidate (0-2 years). Focus on fundamentals, learning ability, and potential. Be encouraging but still professional.",
    "Mid": "This is a mid-level candidate (2-5 years). Expect solid fundamentals and some independent project experience. Probe for depth.",
    "Senior": "This is a senior candidate (5-8 years). Expect strong technical depth, system thinking, and leadership examples. Challenge them appropriately.",
    "Lead": "This is a lead/principal level candidate (8+ years). Expect strategic thinking, architectural decisions, and mentorship examples. Discuss high-level impact.",
}


class SessionStateError(ValueError):
    """Operation not allowed in the session's current state."""


def _type_focus(config: InterviewConfig) -> str:
    if config.interview_type == "technical":
        skills_line = f"\n- Specific expertise in: {config.skills}" if config.skills else ""
        return f"""FOCUS AREAS:
- Data structures, algorithms, and computational complexity
- System design principles and architectural patterns
- Coding best practices, testing, and debugging approaches
- Problem-solving methodology and technical communication{skills_line}

QUESTION TYPES:
- Start with a warm-up question about their background/experience
- Progress to conceptual questions about core CS fundamentals
- Include at least one problem-solving scenario
- Ask follow-up questions to probe depth of understanding"""

    if config.interview_type == "behavioral":
        return """FOCUS AREAS:
- Leadership and teamwork experiences using STAR method (Situation, Task, Action, Result)
- Conflict resolution and interpersonal skills
- Adaptability, resilience, and growth mindset
- Communication, collaboration, and stakeholder management

QUESTION TYPES:
- "Tell me about a time when..." format
- Probe for specific examples, not hypotheticals
- Follow up on vague answers with "What specifically did YOU do?"
- Assess self-awareness by asking what they learned"""

    if config.interview_type == "hr":
        return """FOCUS AREAS:
- Cultural fit and alignment with company values
- Career aspirations and long-term goals
- Work style preferences and expectations
- Motivation for the role and company interest

QUESTION TYPES:
- Open-ended questions about career journey
- Questions about ideal work environment
- Assess genuine interest and research about the company
- Discuss growth expectations and development goals"""

    if config.interview_type == "system-design":
        return """FOCUS AREAS:
- High-level architecture and component design
- Scalability, reliability, and performance trade-offs
- Database selection, caching strategies, and data flow
- API design, microservices patterns, and distributed systems

APPROACH:
- Let the candidate drive the discussion
- Start with clarifying questions about requirements
- Encourage them to think out loud
- Probe on trade-offs: "What are the downsides of that approach?"
- Cover edge cases and failure scenarios"""

    return "Conduct a professional interview."


def build_system_prompt(config: InterviewConfig) -> str:
    """Interviewer instruction for the realtime voice model."""
    type_info = INTERVIEW_TYPES.get(config.interview_type, INTERVIEW_TYPES["technical"])

    profile = [
        f"- Name: {config.candidate_name}",
        f"- Target Role: {config.job_role}",
        f"- Experience Level: {config.experience_level}",
    ]
    if config.company_name:
        profile.append(f"- Company: {config.company_name}")
    if config.skills:
        profile.append(f"- Key Skills: {config.skills}")
    if config.portfolio_links:
        profile.append(f"- Portfolio/Links: {config.portfolio_links}")

    sections = [
        f"You are a seasoned {type_info['title']} Interviewer at "
        f"{config.company_name or 'a leading technology company'}.",
        """INTERVIEWER PERSONA:
- You are professional, articulate, and respectful
- You speak naturally like a real human interviewer - conversational but focused
- You are genuinely interested in understanding the candidate's experience and potential
- You maintain a warm but evaluative tone throughout
- You are an expert in your field with years of interview experience""",
        "CANDIDATE PROFILE:\n" + "\n".join(profile),
        EXPERIENCE_LEVEL_CONTEXT.get(config.experience_level, ""),
        _type_focus(config),
    ]

    if config.resume_text:
        sections.append(
            "RESUME / CV CONTEXT (Use this to ask personalized questions based on their actual experience):\n"
            + config.resume_text[:4000]
        )
    if config.job_description:
        sections.append("JOB CONTEXT (use to tailor questions):\n" + config.job_description[:300])

    sections.append("""INTERVIEW STRUCTURE:
1. OPENING (1 question): Welcome them warmly by name, briefly introduce yourself, and ask an icebreaker about their background
2. CORE INTERVIEW (3-4 questions): Ask progressively challenging questions based on the interview type
3. CLOSING (1 question): Ask if they have any questions, then professionally wrap up""")

    closing = f"Thank you for your time today, {config.candidate_name}. We'll be in touch soon."
    sections.append(f"""CRITICAL GUIDELINES:
- Ask ONE question at a time and wait for the complete response
- Listen actively - reference their previous answers in follow-ups
- Keep questions concise (aim for under 15 seconds speaking time)
- Eliminate conversational filler (e.g., avoid "That's a great point, I really like how you said that..." -> just say "Good point.")
- If an answer is unclear, ask for clarification immediately
- Maintain professional pacing - don't rush through questions
- After 4-5 substantive exchanges, begin wrapping up the interview
- End with: "{closing}\"""")

    sections.append("BEGIN THE INTERVIEW NOW. Greet the candidate and start with your opening question.")
    return "\n\n".join(s for s in sections if s)


def session_duration_seconds(config: InterviewConfig) -> int:
    """Configured duration, falling back to the interview type's default."""
    minutes = config.duration or INTERVIEW_TYPES.get(config.interview_type, {}).get("duration", 30)
    return int(minutes) * 60


def look_away_reason(landmarks: Optional[List[Landmark]]) -> Optional[str]:
    """
    Decide from one frame whether the candidate is looking away.

    Returns the reason, or None when the candidate faces the screen. A frame
    without the three reference points cannot be judged and counts as facing.
    """
    if not landmarks:
        return "Face not detected."
    if len(landmarks) <= max(NOSE_TIP, LEFT_CHEEK, RIGHT_CHEEK):
        return None

    nose = landmarks[NOSE_TIP]
    d1 = abs(nose.x - landmarks[LEFT_CHEEK].x)
    d2 = abs(nose.x - landmarks[RIGHT_CHEEK].x)
    widest = max(d1, d2)
    if widest == 0:
        return None
    if min(d1, d2) / widest < LOOK_AWAY_RATIO:
        return "Please look at the screen."
    return None


def is_disqualified(session: InterviewSession) -> bool:
    return session.status == "terminated"


def _is_open(session: InterviewSession) -> bool:
    return session.interview_id is None and session.status in ("in_progress", "paused")


def to_state(session: InterviewSession) -> SessionStateResponse:
    return SessionStateResponse(
        session_id=session.id,
        status=session.status,
        anti_cheat=session.anti_cheat,
        warning_count=session.warning_count,
        warnings_remaining=max(0, WARNING_THRESHOLD - session.warning_count),
        disqualified=is_disqualified(session),
        last_warning=session.last_warning,
        interview_id=session.interview_id,
        started_at=session.started_at,
        ended_at=session.ended_at,
    )


def start_session(db: Session, user: User, config: InterviewConfig, anti_cheat: bool = True) -> InterviewSession:
    session = InterviewSession(
        user_id=user.id,
        config=config.model_dump(by_alias=True, mode="json"),
        status="in_progress",
        anti_cheat=anti_cheat,
        warning_count=0,
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    logger.info(
        f"Interview session started: session_id={session.id}, user_id={user.id}, "
        f"type={config.interview_type}, anti_cheat={anti_cheat}"
    )
    return session


def get_session(db: Session, user: User, session_id: str) -> Optional[InterviewSession]:
    return db.query(InterviewSession).filter(
        InterviewSession.id == session_id,
        InterviewSession.user_id == user.id,
    ).first()


def _trigger_warning(session: InterviewSession, reason: str) -> bool:
    """Count one warning; the session is disqualified at the threshold."""
    if session.status != "in_progress":
        return False

    session.warning_count = (session.warning_count or 0) + 1
    session.last_warning = reason
    logger.warning(
        f"Integrity warning: session_id={session.id}, count={session.warning_count}/{WARNING_THRESHOLD}, "
        f"reason={reason}"
    )
    if session.warning_count >= WARNING_THRESHOLD:
        session.status = "terminated"
        session.ended_at = utcnow()
        session.look_away_started_ms = None
        logger.warning(f"Session disqualified: session_id={session.id}")
    return True


def record_violation(db: Session, session: InterviewSession, reason: str) -> bool:
    """
    Tab switch, focus loss, fullscreen exit, screen-share stop.

    Ignored while paused, after disqualification, or with anti-cheat off.
    """
    if not session.anti_cheat:
        return False
    counted = _trigger_warning(session, reason)
    if counted:
        db.commit()
        db.refresh(session)
    return counted


def record_attention(
    db: Session,
    session: InterviewSession,
    landmarks: Optional[List[Landmark]],
    timestamp_ms: float,
) -> Optional[str]:
    """
    Feed one face-landmark frame to the look-away window.

    Returns the warning text when a warning was raised.
    """
    if session.status != "in_progress":
        return None

    reason = look_away_reason(landmarks)
    warning = None

    if reason is None:
        session.look_away_started_ms = None
    elif session.look_away_started_ms is None:
        session.look_away_started_ms = timestamp_ms
    elif timestamp_ms - session.look_away_started_ms > LOOK_AWAY_THRESHOLD_MS:
        warning = f"Attention Alert: {reason}"
        _trigger_warning(session, warning)
        if session.status == "in_progress":
            session.look_away_started_ms = timestamp_ms

    db.commit()
    db.refresh(session)
    return warning


def pause_session(db: Session, session: InterviewSession) -> InterviewSession:
    if session.status != "in_progress" or session.interview_id is not None:
        raise SessionStateError(f"Cannot pause a session that is {session.status}")
    session.status = "paused"
    session.look_away_started_ms = None
    db.commit()
    db.refresh(session)
    logger.info(f"Session paused: session_id={session.id}")
    return session


def resume_session(db: Session, session: InterviewSession) -> InterviewSession:
    if session.status != "paused":
        raise SessionStateError(f"Cannot resume a session that is {session.status}")
    session.status = "in_progress"
    db.commit()
    db.refresh(session)
    logger.info(f"Session resumed: session_id={session.id}")
    return session


def finish_session(
    db: Session,
    user: User,
    session: InterviewSession,
    transcript: List[TranscriptEntry],
    duration: Optional[int] = None,
    questions_asked: int = 0,
    provider: Optional[LLMProvider] = None,
) -> Interview:
    """
    Score the transcript, save the interview and close the session.

    A disqualified session is saved with status "terminated".
    """
    if session.interview_id is not None:
        raise SessionStateError("Session already finished")
    if not _is_open(session) and not is_disqualified(session):
        raise SessionStateError(f"Cannot finish a session that is {session.status}")

    config = InterviewConfig.model_validate(session.config)
    if duration is None:
        started = as_naive_utc(session.started_at)
        ended = as_naive_utc(session.ended_at) or utcnow()
        duration = max(0, int((ended - started).total_seconds()))

    analysis = feedback_service.generate_interview_feedback(transcript, config, provider=provider)
    status = "terminated" if is_disqualified(session) else "completed"

    interview = interview_service.save_interview(
        db,
        user,
        interview_service.build_create_request(
            config=config,
            analysis=analysis,
            transcript=transcript,
            status=status,
            duration=duration,
            questions_asked=questions_asked,
            warning_count=session.warning_count or 0,
        ),
    )

    session.interview_id = interview.id
    session.status = status
    session.ended_at = session.ended_at or utcnow()
    session.look_away_started_ms = None
    db.commit()
    db.refresh(session)

    logger.info(
        f"Interview session finished: session_id={session.id}, interview_id={interview.id}, "
        f"status={status}, warnings={session.warning_count}"
    )
    return interview
