"""Subscription plan endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from atsboost.api.deps import get_current_user
from atsboost.api.schemas import PlanListResponse, PlanResponse, UserPlanResponse
from atsboost.db import Plan, User, get_db
from atsboost.services.plan_features import (
    get_active_subscription,
    get_scans_remaining,
    get_user_plan_features,
)

router = APIRouter()


@router.get("", response_model=PlanListResponse)
def list_plans(db: Session = Depends(get_db)):
    """Active plans, cheapest first."""
    plans = db.query(Plan).filter(Plan.is_active.is_(True)).order_by(Plan.price).all()
    return PlanListResponse(plans=[PlanResponse.model_validate(p) for p in plans])


@router.get("/me", response_model=UserPlanResponse)
def my_plan(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """The user's plan, its features and the scans left this period."""
    features = get_user_plan_features(db, user.id)
    subscription = get_active_subscription(db, user.id)
    return UserPlanResponse(
        plan=features["name"],
        features=features,
        scans_remaining=get_scans_remaining(db, user.id),
        current_period_end=subscription.current_period_end if subscription else None,
    )
