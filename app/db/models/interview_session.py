import uuid
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean, Float, JSON
from app.db.base import Base, utcnow


class InterviewSession(Base):
    """Live session bookkeeping: integrity warnings and lifecycle of one interview in progress."""
    __tablename__ = "interview_sessions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    config = Column(JSON, nullable=False, default=dict)

    status = Column(String, nullable=False, default="in_progress")  # in_progress / paused / completed / terminated
    anti_cheat = Column(Boolean, nullable=False, default=True)
    warning_count = Column(Integer, nullable=False, default=0)
    last_warning = Column(String, nullable=True)
    look_away_started_ms = Column(Float, nullable=True)

    interview_id = Column(String(36), ForeignKey("interviews.id", ondelete="SET NULL"), nullable=True)
    started_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    ended_at = Column(DateTime(timezone=True), nullable=True)
