"""Plan tiers, feature gating and scan counting."""

from datetime import timedelta

from atsboost.db import ATSScore, Plan, Subscription, utcnow
from atsboost.services.plan_features import (
    PLAN_FEATURES,
    can_access_feature,
    get_scans_remaining,
    get_user_plan_features,
    record_scan,
    tier_for_plan_name,
)


def subscribe(db, user, plan_name, days=30, status="active"):
    plan = db.query(Plan).filter(Plan.name == plan_name).first()
    if not plan:
        plan = Plan(name=plan_name, price=100.0)
        db.add(plan)
        db.flush()
    subscription = Subscription(
        user_id=user.id,
        plan_id=plan.id,
        status=status,
        current_period_start=utcnow(),
        current_period_end=utcnow() + timedelta(days=days),
    )
    db.add(subscription)
    db.commit()
    return subscription


def test_tier_for_plan_name():
    assert tier_for_plan_name("Professional") == "PROFESSIONAL"
    assert tier_for_plan_name("Premium Plus") == "PREMIUM"
    assert tier_for_plan_name("essential monthly") == "ESSENTIAL"
    assert tier_for_plan_name("Starter") == "FREE"


def test_guests_and_users_without_subscription_are_free(db, user):
    assert get_user_plan_features(db, None) is PLAN_FEATURES["FREE"]
    assert get_user_plan_features(db, user.id) is PLAN_FEATURES["FREE"]
    assert not can_access_feature(db, user.id, "job_matching")
    assert can_access_feature(db, user.id, "scan_limit")
    assert not can_access_feature(db, user.id, "no_such_feature")


def test_expired_or_pending_subscriptions_do_not_count(db, user):
    subscribe(db, user, "Premium", days=-1)
    subscribe(db, user, "Professional", status="pending")
    assert get_user_plan_features(db, user.id)["name"] == "Free"


def test_active_subscription_unlocks_features(db, user):
    subscribe(db, user, "Professional")
    assert can_access_feature(db, user.id, "interview_practice")
    assert can_access_feature(db, user.id, "scan_limit")
    assert get_scans_remaining(db, user.id) is None


def test_free_scans_counted_from_recent_scores(db, user, cv):
    assert get_scans_remaining(db, user.id) == 1
    assert not record_scan(db, user.id)

    db.add(ATSScore(cv_id=cv.id, score=70, created_at=utcnow() - timedelta(days=31)))
    db.commit()
    assert get_scans_remaining(db, user.id) == 1

    cv.ats_score.created_at = utcnow()
    db.commit()
    assert get_scans_remaining(db, user.id) == 0


def test_subscription_scans(db, user):
    subscription = subscribe(db, user, "Essential")
    assert get_scans_remaining(db, user.id) == 5
    for _ in range(6):
        assert record_scan(db, user.id)
    assert subscription.scans_used == 6
    assert get_scans_remaining(db, user.id) == 0


def test_guests_have_no_scan_limit(db):
    assert get_scans_remaining(db, None) is None
    assert not record_scan(db, None)
