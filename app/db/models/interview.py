import uuid
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship
from app.db.base import Base, utcnow


class Interview(Base):
    """One completed (or terminated) practice session."""
    __tablename__ = "interviews"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    config = Column(JSON, nullable=False, default=dict)
    status = Column(String, nullable=False, default="completed")  # completed | terminated
    duration = Column(Integer, nullable=True)  # seconds
    questions_asked = Column(Integer, nullable=False, default=0)
    warning_count = Column(Integer, nullable=False, default=0)
    overall_score = Column(Integer, nullable=True)
    metrics = Column(JSON, nullable=True)
    feedback = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship("User", back_populates="interviews")
    transcript = relationship(
        "InterviewTranscript",
        back_populates="interview",
        uselist=False,
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_interviews_created_at", "created_at"),
    )


class InterviewTranscript(Base):
    __tablename__ = "interview_transcripts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    interview_id = Column(
        String(36),
        ForeignKey("interviews.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    entries = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    interview = relationship("Interview", back_populates="transcript")
