"""
Create tables and seed the default plan catalog.

Used for local development and SQLite deployments; Postgres deployments run
the Alembic migrations instead (see app/db/migrate.py).
"""
import logging
from sqlalchemy.orm import Session

from app.db.session import engine, SessionLocal
from app.db.base import Base
import app.db.models  # noqa: F401  (registers models on Base.metadata)
from app.db.models.plan import Plan

logger = logging.getLogger(__name__)

# Mock catalog shipped with the initial schema; replace ids with real Razorpay plan ids
DEFAULT_PLANS = [
    {
        "id": "plan_mock_monthly",
        "name": "Pro Monthly",
        "price": 49900,
        "interval": "monthly",
        "type": "recurring",
        "features": ["Unlimited AI Interviews", "Detailed Performance Analysis", "Priority Support", "PDF Reports"],
    },
    {
        "id": "plan_mock_yearly",
        "name": "Pro Yearly",
        "price": 499900,
        "interval": "yearly",
        "type": "recurring",
        "features": ["Everything in Monthly", "2 Months Free", "Exclusive Guidance", "Early Access to New Features"],
    },
    {
        "id": "plan_day_pass_20",
        "name": "One Day Pass",
        "price": 2000,
        "interval": "daily",
        "type": "one_time",
        "features": ["24-Hour Unlimited Access", "Instant Feedback", "No Subscription Commitment", "PDF Reports"],
    },
]

DAY_PASS_PLAN_ID = "plan_day_pass_20"


def seed_default_plans(db: Session) -> int:
    """Upsert DEFAULT_PLANS. Returns the number of rows written."""
    for data in DEFAULT_PLANS:
        plan = db.query(Plan).filter(Plan.id == data["id"]).first()
        if plan is None:
            plan = Plan(id=data["id"])
            db.add(plan)
        plan.name = data["name"]
        plan.price = data["price"]
        plan.interval = data["interval"]
        plan.type = data["type"]
        plan.features = list(data["features"])
    db.commit()
    logger.info(f"Seeded {len(DEFAULT_PLANS)} default plans")
    return len(DEFAULT_PLANS)


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_default_plans(db)
    finally:
        db.close()
