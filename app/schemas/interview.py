"""
Pydantic schemas for interviews, transcripts and AI feedback.

JSON keys are camelCase on the wire and in the stored JSON columns, matching
what the web client sends; Python attributes stay snake_case.
"""
from typing import Optional, List, Literal, Dict, Any
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

InterviewType = Literal["technical", "behavioral", "hr", "system-design"]
ExperienceLevel = Literal["Entry", "Mid", "Senior", "Lead"]
InterviewStatus = Literal["completed", "terminated"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InterviewConfig(CamelModel):
    """What the candidate filled in on the setup screen."""
    candidate_name: str = Field(..., min_length=1, max_length=200)
    job_role: str = Field(..., min_length=1, max_length=200)
    job_description: str = ""
    experience_level: ExperienceLevel = "Entry"
    interview_type: InterviewType = "technical"
    company_name: Optional[str] = None
    skills: Optional[str] = None
    resume_text: Optional[str] = None
    portfolio_links: Optional[str] = Field(None, description="Comma separated links")
    duration: int = Field(30, ge=1, le=180, description="Minutes")


class TranscriptEntry(CamelModel):
    id: str
    speaker: Literal["ai", "user"]
    text: str
    timestamp: datetime


def _clamp_score(value: Any) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    return int(round(max(0.0, min(100.0, number))))


class PerformanceMetrics(CamelModel):
    """Scores 0-100; out-of-range model output is clamped rather than rejected."""
    communication: int = 0
    technical_knowledge: int = 0
    problem_solving: int = 0
    confidence: int = 0
    clarity: int = 0
    overall_score: int = 0

    @field_validator(
        "communication", "technical_knowledge", "problem_solving",
        "confidence", "clarity", "overall_score",
        mode="before",
    )
    @classmethod
    def clamp(cls, v: Any) -> int:
        return _clamp_score(v)


class AIFeedback(CamelModel):
    summary: str = ""
    strengths: List[str] = Field(default_factory=list)
    areas_to_improve: List[str] = Field(default_factory=list)
    tips: List[str] = Field(default_factory=list)
    recommended_resources: Optional[List[str]] = None


class AIAnalysisResult(CamelModel):
    metrics: PerformanceMetrics
    feedback: AIFeedback


class FeedbackRequest(CamelModel):
    config: InterviewConfig
    transcript: List[TranscriptEntry] = Field(default_factory=list)


class FeedbackResponse(AIAnalysisResult):
    label: str = Field(..., description="Excellent | Very Good | Good | Fair | Needs Improvement")


class InterviewCreateRequest(CamelModel):
    config: InterviewConfig
    status: InterviewStatus = "completed"
    duration: Optional[int] = Field(None, ge=0, description="Seconds")
    questions_asked: int = Field(0, ge=0)
    warning_count: int = Field(0, ge=0)
    overall_score: Optional[int] = Field(None, ge=0, le=100)
    metrics: Optional[PerformanceMetrics] = None
    feedback: Optional[AIFeedback] = None
    transcript: List[TranscriptEntry] = Field(default_factory=list)


class InterviewCreatedResponse(BaseModel):
    id: str


class InterviewSummary(CamelModel):
    """History list row."""
    id: str
    user_id: str
    config: InterviewConfig
    status: str
    duration: Optional[int] = None
    questions_asked: int = 0
    warning_count: int = 0
    overall_score: Optional[int] = None
    metrics: Optional[PerformanceMetrics] = None
    feedback: Optional[AIFeedback] = None
    created_at: datetime


class InterviewDetail(InterviewSummary):
    transcript: Optional[List[TranscriptEntry]] = None
    score_label: Optional[str] = None


class InterviewLimitResponse(BaseModel):
    allowed: bool
    remaining: int
    total: int


class SkillBreakdown(CamelModel):
    technical: int = 0
    communication: int = 0
    problem_solving: int = 0
    confidence: int = 0


class InterviewStatsResponse(CamelModel):
    total_interviews: int
    average_score: int
    best_score: int
    total_duration: int = Field(..., description="Seconds")
    this_week: int
    improvement: int
    streak: int
    skills: SkillBreakdown
    by_type: Dict[str, int] = Field(default_factory=dict)
