"""
Schemas for live interview sessions and the integrity monitor.
"""
from typing import Optional, List
from datetime import datetime
from pydantic import Field

from app.schemas.interview import CamelModel, InterviewConfig, TranscriptEntry


class SessionStartRequest(CamelModel):
    config: InterviewConfig
    anti_cheat: bool = True


class SessionStartResponse(CamelModel):
    session_id: str
    system_prompt: str
    model: str
    voice: str
    duration_seconds: int
    warning_threshold: int


class SessionStateResponse(CamelModel):
    session_id: str
    status: str
    anti_cheat: bool
    warning_count: int
    warnings_remaining: int
    disqualified: bool
    last_warning: Optional[str] = None
    interview_id: Optional[str] = None
    started_at: datetime
    ended_at: Optional[datetime] = None


class ViolationRequest(CamelModel):
    reason: str = Field(..., min_length=1, max_length=200)


class Landmark(CamelModel):
    """Normalised face landmark coordinate (0-1 across the frame)."""
    x: float
    y: float = 0.0
    z: float = 0.0


class AttentionSample(CamelModel):
    """One face-landmark frame; landmarks is null when no face was found."""
    landmarks: Optional[List[Landmark]] = None
    timestamp_ms: float = Field(..., ge=0)


class IntegrityEventResponse(CamelModel):
    counted: bool
    warning: Optional[str] = None
    state: SessionStateResponse


class SessionFinishRequest(CamelModel):
    transcript: List[TranscriptEntry] = Field(default_factory=list)
    duration: Optional[int] = Field(None, ge=0, description="Seconds; measured server-side when omitted")
    questions_asked: int = Field(0, ge=0)
