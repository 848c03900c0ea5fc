"""Admin endpoints."""

import logging
import math
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from atsboost.api.deps import require_admin
from atsboost.api.schemas import (
    AdminCVListResponse,
    AdminStatsResponse,
    AdminUserListResponse,
    AdminUserUpdate,
    CVResponse,
    PaymentResponse,
    PlanResponse,
    RefundRequest,
    RevenueResponse,
    UserResponse,
)
from atsboost.db import (
    CV,
    ATSScore,
    PaymentTransaction,
    SAProfile,
    Subscription,
    User,
    get_db,
    utcnow,
)
from atsboost.services import payments
from atsboost.services.plan_features import seed_plans
from atsboost.services.premium_matching import run_matching_engine

logger = logging.getLogger(__name__)

router = APIRouter()

ACTIVE_WINDOW = timedelta(days=30)


@router.get("/stats", response_model=AdminStatsResponse)
def stats(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    """Platform counts and the latest sign-ups and uploads."""
    average = db.query(func.avg(ATSScore.score)).scalar()
    latest_users = db.query(User).order_by(User.created_at.desc()).limit(5).all()
    latest_cvs = db.query(CV).order_by(CV.created_at.desc()).limit(5).all()

    return AdminStatsResponse(
        total_users=db.query(User).count(),
        active_users=db.query(User).filter(User.last_login >= utcnow() - ACTIVE_WINDOW).count(),
        total_cvs=db.query(CV).count(),
        total_ats_scores=db.query(ATSScore).count(),
        total_sa_profiles=db.query(SAProfile).count(),
        active_subscriptions=db.query(Subscription)
        .filter(Subscription.status == "active", Subscription.current_period_end >= utcnow())
        .count(),
        average_score=round(float(average), 1) if average is not None else 0.0,
        latest_users=[UserResponse.model_validate(u) for u in latest_users],
        latest_cvs=[CVResponse.model_validate(c) for c in latest_cvs],
    )


@router.get("/users", response_model=AdminUserListResponse)
def list_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    search: str | None = None,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Users, newest first, optionally filtered by username or email."""
    query = db.query(User)
    if search:
        pattern = f"%{search}%"
        query = query.filter(User.username.ilike(pattern) | User.email.ilike(pattern))

    total = query.count()
    users = query.order_by(User.created_at.desc()).offset((page - 1) * page_size).limit(page_size).all()
    return AdminUserListResponse(
        users=[UserResponse.model_validate(u) for u in users],
        total=total,
        page=page,
        total_pages=math.ceil(total / page_size) if total else 0,
    )


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    body: AdminUserUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Change a user's role or active flag."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if user.id == admin.id and (
        (body.role is not None and body.role != "admin") or body.is_active is False
    ):
        raise HTTPException(status_code=400, detail="You cannot remove your own admin access")

    if body.role is not None:
        user.role = body.role
    if body.is_active is not None:
        user.is_active = body.is_active
    db.commit()
    db.refresh(user)
    logger.info(f"Admin {admin.id} updated user {user.id}: role={user.role} active={user.is_active}")
    return UserResponse.model_validate(user)


@router.get("/cvs", response_model=AdminCVListResponse)
def list_cvs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """All uploaded CVs, newest first."""
    query = db.query(CV)
    total = query.count()
    cvs = query.order_by(CV.created_at.desc()).offset((page - 1) * page_size).limit(page_size).all()
    return AdminCVListResponse(
        cvs=[CVResponse.model_validate(c) for c in cvs],
        total=total,
        page=page,
        total_pages=math.ceil(total / page_size) if total else 0,
    )


@router.get("/revenue", response_model=RevenueResponse)
def revenue(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    """Completed payment totals, overall and per payment type."""
    completed = (
        db.query(PaymentTransaction.payment_type, func.count(), func.sum(PaymentTransaction.amount))
        .filter(PaymentTransaction.status == "completed")
        .group_by(PaymentTransaction.payment_type)
        .all()
    )
    refunded = (
        db.query(func.sum(PaymentTransaction.amount)).filter(PaymentTransaction.status == "refunded").scalar()
    )

    by_type = {payment_type: float(total or 0) for payment_type, _, total in completed}
    return RevenueResponse(
        total_revenue=sum(by_type.values()),
        completed_payments=sum(count for _, count, _ in completed),
        refunded_amount=float(refunded or 0),
        by_type=by_type,
    )


@router.post("/matching/run")
def run_matching(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    """Run the premium matching engine now."""
    created = run_matching_engine(db)
    return {"created": created}


@router.post("/plans/seed", response_model=list[PlanResponse])
def seed_default_plans(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    """Insert the default plans that are missing."""
    return [PlanResponse.model_validate(p) for p in seed_plans(db)]


@router.post("/payments/{transaction_id}/confirm", response_model=PaymentResponse)
def confirm_payment(transaction_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    """Mark a payment completed by hand, e.g. after an EFT."""
    if not payments.process_payment_success(db, transaction_id, metadata={"confirmed_by": admin.id}):
        raise HTTPException(status_code=404, detail="Payment not found")
    return PaymentResponse.model_validate(payments.get_payment(db, transaction_id))


@router.post("/payments/{payment_id}/refund", response_model=PaymentResponse)
def refund_payment(
    payment_id: str,
    body: RefundRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Refund a completed payment."""
    payment = db.query(PaymentTransaction).filter(PaymentTransaction.id == payment_id).first()
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    if body.amount is not None and body.amount > payment.amount:
        raise HTTPException(status_code=400, detail="Refund amount exceeds the payment amount")
    if not payments.process_refund(db, payment_id, body.reason, body.amount):
        raise HTTPException(status_code=400, detail="Only completed payments can be refunded")

    db.refresh(payment)
    return PaymentResponse.model_validate(payment)
