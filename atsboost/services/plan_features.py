"""
Plan tiers and feature gating.

A user's tier comes from their active subscription (status "active" and a
period end in the future), matched on the plan name. Users without one are on
the free tier, whose single scan is counted from ATS analyses over the last
30 days.
"""

import logging
from datetime import timedelta

from sqlalchemy.orm import Session

from atsboost.db.tables import CV, ATSScore, Plan, Subscription, utcnow

logger = logging.getLogger(__name__)

FREE_SCAN_WINDOW = timedelta(days=30)

PLAN_FEATURES = {
    "FREE": {
        "name": "Free",
        "scan_limit": 1,
        "max_strengths": 2,
        "max_improvements": 1,
        "full_recommendations": False,
        "before_after_comparison": False,
        "keyword_optimization": False,
        "unlimited_uploads": False,
        "bbbee_guidance": False,
        "nqf_guidance": False,
        "interview_practice": False,
        "skill_gap_analysis": False,
        "job_matching": False,
        "email_support": False,
    },
    "ESSENTIAL": {
        "name": "Essential",
        "scan_limit": 5,
        "max_strengths": None,
        "max_improvements": None,
        "full_recommendations": True,
        "before_after_comparison": False,
        "keyword_optimization": True,
        "unlimited_uploads": False,
        "bbbee_guidance": True,
        "nqf_guidance": True,
        "interview_practice": False,
        "skill_gap_analysis": False,
        "job_matching": False,
        "email_support": False,
    },
    "PREMIUM": {
        "name": "Premium",
        "scan_limit": None,
        "max_strengths": None,
        "max_improvements": None,
        "full_recommendations": True,
        "before_after_comparison": True,
        "keyword_optimization": True,
        "unlimited_uploads": True,
        "bbbee_guidance": True,
        "nqf_guidance": True,
        "interview_practice": False,
        "skill_gap_analysis": False,
        "job_matching": True,
        "email_support": False,
    },
    "PROFESSIONAL": {
        "name": "Professional",
        "scan_limit": None,
        "max_strengths": None,
        "max_improvements": None,
        "full_recommendations": True,
        "before_after_comparison": True,
        "keyword_optimization": True,
        "unlimited_uploads": True,
        "bbbee_guidance": True,
        "nqf_guidance": True,
        "interview_practice": True,
        "skill_gap_analysis": True,
        "job_matching": True,
        "email_support": True,
    },
}

# Checked in this order so "Professional" wins over a name that also contains "Premium"
TIER_ORDER = ["PROFESSIONAL", "PREMIUM", "ESSENTIAL"]

DEFAULT_PLANS = [
    {
        "name": "Free",
        "price": 0.0,
        "description": "One ATS scan with summary feedback",
        "features": ["1 CV scan", "Basic ATS score", "Top strengths"],
    },
    {
        "name": "Essential",
        "price": 30.0,
        "description": "Five scans a month with full recommendations",
        "features": ["5 CV scans per month", "Full recommendations", "Keyword optimisation", "B-BBEE and NQF guidance"],
    },
    {
        "name": "Premium",
        "price": 100.0,
        "description": "Unlimited scans and job matching",
        "features": ["Unlimited CV scans", "Before/after comparison", "Job matching", "Unlimited uploads"],
    },
    {
        "name": "Professional",
        "price": 200.0,
        "description": "Everything plus interview practice and skill gap analysis",
        "features": ["Everything in Premium", "Interview practice", "Skill gap analysis", "Email support"],
    },
]


def tier_for_plan_name(plan_name: str) -> str:
    upper = plan_name.upper()
    for tier in TIER_ORDER:
        if tier in upper:
            return tier
    return "FREE"


def get_active_subscription(db: Session, user_id: str) -> Subscription | None:
    return (
        db.query(Subscription)
        .filter(
            Subscription.user_id == user_id,
            Subscription.status == "active",
            Subscription.current_period_end >= utcnow(),
        )
        .order_by(Subscription.current_period_end.desc())
        .first()
    )


def get_user_plan_features(db: Session, user_id: str | None) -> dict:
    """Feature dict for a user; guests and users without a subscription get FREE."""
    if not user_id:
        return PLAN_FEATURES["FREE"]

    subscription = get_active_subscription(db, user_id)
    if not subscription or not subscription.plan:
        return PLAN_FEATURES["FREE"]

    return PLAN_FEATURES[tier_for_plan_name(subscription.plan.name)]


def get_user_plan_name(db: Session, user_id: str | None) -> str:
    return get_user_plan_features(db, user_id)["name"]


def can_access_feature(db: Session, user_id: str | None, feature: str) -> bool:
    """Boolean features return their flag; numeric limits are allowed when unlimited or positive."""
    features = get_user_plan_features(db, user_id)
    if feature not in features:
        return False
    value = features[feature]
    if isinstance(value, bool):
        return value
    if value is None:
        return True
    if isinstance(value, int):
        return value > 0
    return False


def _free_scans_used(db: Session, user_id: str) -> int:
    since = utcnow() - FREE_SCAN_WINDOW
    return (
        db.query(ATSScore)
        .join(CV, CV.id == ATSScore.cv_id)
        .filter(CV.user_id == user_id, ATSScore.created_at >= since)
        .count()
    )


def get_scans_remaining(db: Session, user_id: str | None) -> int | None:
    """Scans left in the current period; None means unlimited."""
    if not user_id:
        return None

    subscription = get_active_subscription(db, user_id)
    if subscription and subscription.plan:
        limit = PLAN_FEATURES[tier_for_plan_name(subscription.plan.name)]["scan_limit"]
        if limit is None:
            return None
        return max(0, limit - (subscription.scans_used or 0))

    return max(0, PLAN_FEATURES["FREE"]["scan_limit"] - _free_scans_used(db, user_id))


def record_scan(db: Session, user_id: str | None) -> bool:
    """
    Count a scan against the user's subscription.

    Free-tier scans are counted from stored ATS scores, so there is nothing to
    increment; returns False in that case.
    """
    if not user_id:
        return False
    subscription = get_active_subscription(db, user_id)
    if not subscription:
        return False
    subscription.scans_used = (subscription.scans_used or 0) + 1
    db.commit()
    return True


def seed_plans(db: Session) -> list[Plan]:
    """Insert the default plans that do not exist yet; returns the new ones."""
    created = []
    for data in DEFAULT_PLANS:
        if db.query(Plan).filter(Plan.name == data["name"]).first():
            continue
        plan = Plan(**data)
        db.add(plan)
        created.append(plan)
    db.commit()
    if created:
        logger.info(f"Seeded {len(created)} plans")
    return created
