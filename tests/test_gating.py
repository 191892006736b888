"""
Tests for plan tier detection, feature access and the daily interview limit.
"""
from datetime import datetime, timedelta

import pytest
from fastapi import HTTPException

from app.db.base import utcnow
from app.core.gating import (
    get_plan_tier,
    is_subscription_active,
    has_feature_access,
    get_feature_access,
    check_interview_limit,
    enforce_interview_limit,
    enforce_feature_access,
)
from app.core.plan_limits import minimum_tier_for_feature, GATED_FEATURES
from app.db.models.interview import Interview
from app.db.models.plan import Plan
from app.db.models.subscription import Subscription


def _sub(plan_id, status="active", period_end=None):
    return Subscription(user_id="u1", plan_id=plan_id, status=status, current_period_end=period_end)


@pytest.mark.parametrize("plan_id,plan_name,expected", [
    ("plan_day_pass_20", "One Day Pass", "one_day"),
    ("plan_oneday_1707000000000", "One Day Pass", "one_day"),
    ("plan_daily_x", "Daily", "one_day"),
    ("plan_mock_yearly", "Pro Yearly", "pro_yearly"),
    ("plan_mock_monthly", "Pro Monthly", "pro_monthly"),
    ("plan_Nxyz123", "Starter Monthly", "starter"),
])
def test_plan_tier_from_plan_id_and_name(plan_id, plan_name, expected):
    plan = Plan(id=plan_id, name=plan_name, price=100, interval="monthly")
    assert get_plan_tier(_sub(plan_id), plan) == expected


def test_no_subscription_is_free():
    assert get_plan_tier(None) == "free"


@pytest.mark.parametrize("status", ["created", "halted", "cancelled", "completed", "expired"])
def test_inactive_subscription_is_free(status):
    plan = Plan(id="plan_mock_monthly", name="Pro Monthly", price=49900, interval="monthly")
    assert get_plan_tier(_sub("plan_mock_monthly", status=status), plan) == "free"


def test_expired_day_pass_is_free():
    now = datetime(2026, 3, 1, 12, 0, 0)
    expired = _sub("plan_day_pass_20", period_end=now - timedelta(minutes=1))
    live = _sub("plan_day_pass_20", period_end=now + timedelta(hours=23))
    plan = Plan(id="plan_day_pass_20", name="One Day Pass", price=2000, interval="daily")

    assert not is_subscription_active(expired, now)
    assert get_plan_tier(expired, plan, now) == "free"
    assert get_plan_tier(live, plan, now) == "one_day"


def test_feature_matrix():
    assert not has_feature_access("free", "detailed_analysis")
    assert has_feature_access("one_day", "detailed_analysis")
    assert not has_feature_access("one_day", "interview_history")
    assert has_feature_access("starter", "interview_history")
    assert not has_feature_access("starter", "progress_analytics")
    assert has_feature_access("pro_yearly", "audio_recording")
    assert not has_feature_access("pro_monthly", "unknown_feature")


def test_feature_access_map_covers_every_feature():
    access = get_feature_access("free")
    assert set(access) == set(GATED_FEATURES)
    assert not any(access.values())


def test_minimum_tier_for_feature():
    assert minimum_tier_for_feature("pdf_download") == "one_day"
    assert minimum_tier_for_feature("interview_history") == "starter"
    assert minimum_tier_for_feature("progress_analytics") == "pro_monthly"


def _add_interviews(db, user, count, created_at=None):
    for _ in range(count):
        db.add(Interview(user_id=user.id, config={}, created_at=created_at or utcnow()))
    db.commit()


def test_free_user_gets_one_interview_per_day(db, test_user):
    assert check_interview_limit(db, test_user) == {"allowed": True, "remaining": 1, "total": 0}

    _add_interviews(db, test_user, 1)
    assert check_interview_limit(db, test_user) == {"allowed": False, "remaining": 0, "total": 1}

    with pytest.raises(HTTPException) as exc:
        enforce_interview_limit(db, test_user)
    assert exc.value.status_code == 429
    assert exc.value.detail["code"] == "PAYWALL"


def test_yesterdays_interviews_do_not_count(db, test_user):
    _add_interviews(db, test_user, 3, created_at=utcnow() - timedelta(days=1, hours=1))
    assert check_interview_limit(db, test_user)["allowed"] is True


def test_paid_user_limit(db, test_user, subscribe):
    subscribe(test_user, "plan_mock_monthly")
    _add_interviews(db, test_user, 5)

    result = check_interview_limit(db, test_user)
    assert result["allowed"] is True
    assert result["total"] == 5
    assert result["remaining"] == 9999 - 5


def test_enforce_feature_access_paywall(db, test_user):
    with pytest.raises(HTTPException) as exc:
        enforce_feature_access(db, test_user, "interview_history")

    assert exc.value.status_code == 402
    assert exc.value.detail["code"] == "PAYWALL"
    assert exc.value.detail["required_plan"] == "starter"


def test_enforce_feature_access_allows_paid_tier(db, test_user, subscribe):
    subscribe(test_user, "plan_mock_monthly")
    enforce_feature_access(db, test_user, "interview_history")
