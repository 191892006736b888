"""
Plan tier configuration.

Single source of truth for which tier unlocks which feature and how many
interviews a day each tier may start.
"""
from typing import Dict, List

PLAN_TIERS: List[str] = ["free", "one_day", "starter", "pro_monthly", "pro_yearly"]

# Features that can be gated
GATED_FEATURES: List[str] = [
    "unlimited_interviews",
    "detailed_analysis",
    "pdf_download",
    "interview_history",
    "audio_recording",
    "progress_analytics",
]

# Feature -> tiers that unlock it
FEATURE_ACCESS: Dict[str, List[str]] = {
    "unlimited_interviews": ["one_day", "starter", "pro_monthly", "pro_yearly"],
    "detailed_analysis": ["one_day", "starter", "pro_monthly", "pro_yearly"],
    "pdf_download": ["one_day", "starter", "pro_monthly", "pro_yearly"],
    "interview_history": ["starter", "pro_monthly", "pro_yearly"],
    "audio_recording": ["pro_monthly", "pro_yearly"],
    "progress_analytics": ["pro_monthly", "pro_yearly"],
}

# Interviews per UTC day
FREE_DAILY_INTERVIEWS = 1
PAID_DAILY_INTERVIEWS = 9999


def get_daily_interview_limit(is_paid: bool) -> int:
    return PAID_DAILY_INTERVIEWS if is_paid else FREE_DAILY_INTERVIEWS


def tiers_for_feature(feature: str) -> List[str]:
    """Tiers that unlock a feature; unknown features unlock nothing."""
    return FEATURE_ACCESS.get(feature, [])


def minimum_tier_for_feature(feature: str) -> str:
    """Cheapest tier (by PLAN_TIERS order) that unlocks the feature."""
    tiers = tiers_for_feature(feature)
    for tier in PLAN_TIERS:
        if tier in tiers:
            return tier
    return PLAN_TIERS[-1]
