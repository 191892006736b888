"""
Database models module.

This module imports all database models to ensure they are registered with SQLAlchemy's Base.metadata
before table creation.
"""
from app.db.models.user import User
from app.db.models.plan import Plan
from app.db.models.subscription import Subscription
from app.db.models.interview import Interview, InterviewTranscript
from app.db.models.interview_session import InterviewSession

__all__ = [
    "User",
    "Plan",
    "Subscription",
    "Interview",
    "InterviewTranscript",
    "InterviewSession",
]
