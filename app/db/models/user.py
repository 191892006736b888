import uuid
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from app.db.base import Base, utcnow


def _uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    """Account plus profile metadata (name, avatar, study details, resume reference)."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String)
    phone = Column(String, nullable=True)

    full_name = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)

    # Study details
    course = Column(String, nullable=True)
    college = Column(String, nullable=True)
    graduation_year = Column(Integer, nullable=True)
    specialization = Column(String, nullable=True)

    # Resume reference (file lives in external storage)
    resume_url = Column(String, nullable=True)
    resume_name = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    subscription = relationship("Subscription", back_populates="user", uselist=False)
    interviews = relationship("Interview", back_populates="user", cascade="all, delete-orphan")
