from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.db.base import Base, utcnow

SUBSCRIPTION_STATUSES = ("created", "active", "halted", "cancelled", "completed", "expired")


class Subscription(Base):
    __tablename__ = "subscriptions"

    # One row per user
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    razorpay_customer_id = Column(String, nullable=True, index=True)
    razorpay_subscription_id = Column(String, nullable=True, unique=True)
    plan_id = Column(String, ForeignKey("plans.id"), nullable=True)

    status = Column(String, nullable=False, default="created")  # see SUBSCRIPTION_STATUSES
    current_period_end = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="subscription")
    plan = relationship("Plan")
