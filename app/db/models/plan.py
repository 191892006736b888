from sqlalchemy import Column, Integer, String, DateTime, JSON
from app.db.base import Base, utcnow


class Plan(Base):
    """
    Pricing tier.

    `id` is the Razorpay plan id for recurring plans, or a locally generated id
    for one-time plans (those are paid through Razorpay orders instead).
    """
    __tablename__ = "plans"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    price = Column(Integer, nullable=False)  # paise
    interval = Column(String, nullable=False)  # daily | monthly | yearly
    type = Column(String, nullable=False, default="recurring")  # recurring | one_time
    features = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    @property
    def is_one_time(self) -> bool:
        return self.type == "one_time"
