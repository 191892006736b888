"""
Feature gating and interview limit enforcement.

Derives the caller's plan tier from their subscription row and answers
"may this user do X" questions for the routes.
"""
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from sqlalchemy.orm import Session
from fastapi import Depends, HTTPException, status

from app.db.base import utcnow
from app.db.models.user import User
from app.db.models.plan import Plan
from app.db.models.subscription import Subscription
from app.db.models.interview import Interview
from app.core.auth_dependency import get_current_user_obj, get_db
from app.core.config import FRONTEND_URL
from app.core.plan_limits import (
    GATED_FEATURES,
    tiers_for_feature,
    minimum_tier_for_feature,
    get_daily_interview_limit,
)

logger = logging.getLogger(__name__)


def as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalise aware datetimes (Postgres) to naive UTC (SQLite) for comparisons."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def get_subscription(db: Session, user_id: str) -> Optional[Subscription]:
    return db.query(Subscription).filter(Subscription.user_id == user_id).first()


def is_subscription_active(subscription: Optional[Subscription], now: Optional[datetime] = None) -> bool:
    """
    Active means status == "active" and, when a period end is recorded, it has
    not passed yet. An expired day pass therefore counts as free.
    """
    if subscription is None or subscription.status != "active":
        return False
    period_end = as_naive_utc(subscription.current_period_end)
    if period_end is None:
        return True
    return period_end > (now or utcnow())


def get_plan_tier(
    subscription: Optional[Subscription],
    plan: Optional[Plan] = None,
    now: Optional[datetime] = None,
) -> str:
    """
    Map a subscription to a tier by looking at its plan id and name.

    Returns "free", "one_day", "starter", "pro_monthly" or "pro_yearly".
    """
    if not is_subscription_active(subscription, now):
        return "free"

    plan_id = (subscription.plan_id or "").lower()
    if plan is None:
        plan = subscription.plan
    plan_name = plan.name.lower() if plan is not None and plan.name else plan_id

    if "one_day" in plan_id or "daily" in plan_id or "day_pass" in plan_id or "one day" in plan_name:
        return "one_day"
    if "yearly" in plan_id or "yearly" in plan_name:
        return "pro_yearly"
    if "pro" in plan_id or "pro" in plan_name:
        return "pro_monthly"
    return "starter"


def get_user_tier(db: Session, user: User) -> str:
    return get_plan_tier(get_subscription(db, user.id))


def has_feature_access(tier: str, feature: str) -> bool:
    return tier in tiers_for_feature(feature)


def get_feature_access(tier: str) -> Dict[str, bool]:
    """Access map over every gated feature for one tier."""
    return {feature: has_feature_access(tier, feature) for feature in GATED_FEATURES}


def start_of_today() -> datetime:
    now = utcnow()
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def check_interview_limit(db: Session, user: User) -> Dict[str, Any]:
    """
    Daily interview allowance.

    Returns:
        {"allowed": bool, "remaining": int, "total": int} where total is the
        number of interviews already recorded today (UTC).
    """
    since = start_of_today()
    usage = db.query(Interview).filter(
        Interview.user_id == user.id,
        Interview.created_at >= since,
    ).count()

    is_paid = is_subscription_active(get_subscription(db, user.id))
    limit = get_daily_interview_limit(is_paid)

    return {
        "allowed": usage < limit,
        "remaining": max(0, limit - usage),
        "total": usage,
    }


def enforce_interview_limit(db: Session, user: User) -> None:
    """Raise 429 when the user has used up today's interviews."""
    result = check_interview_limit(db, user)
    if result["allowed"]:
        return

    logger.warning(f"Interview limit reached: user_id={user.id}, used={result['total']}")
    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail={
            "detail": "Daily interview limit reached. Upgrade for unlimited interviews.",
            "code": "PAYWALL",
            "feature": "unlimited_interviews",
            "upgrade_url": f"{FRONTEND_URL}/pricing",
            "used": result["total"],
            "remaining": 0,
        },
    )


def enforce_feature_access(db: Session, user: User, feature: str) -> None:
    """Raise 402 with a paywall payload if the user's tier lacks the feature."""
    tier = get_user_tier(db, user)
    if has_feature_access(tier, feature):
        return

    required_tier = minimum_tier_for_feature(feature)
    logger.warning(f"Feature access denied: user_id={user.id}, tier={tier}, feature={feature}")

    raise HTTPException(
        status_code=status.HTTP_402_PAYMENT_REQUIRED,
        detail={
            "detail": f"This feature requires the {required_tier.replace('_', ' ').title()} plan. Upgrade to unlock.",
            "code": "PAYWALL",
            "feature": feature,
            "upgrade_url": f"{FRONTEND_URL}/pricing",
            "required_plan": required_tier,
        },
    )


def require_feature(feature: str):
    """Dependency factory: resolves the current user and enforces feature access."""
    def feature_checker(
        user: User = Depends(get_current_user_obj),
        db: Session = Depends(get_db),
    ) -> User:
        enforce_feature_access(db, user, feature)
        return user

    return feature_checker
