"""
Payments for premium matching and subscriptions.

Premium matches unlock in two steps: the job seeker pays R50 to activate the
match, then the recruiter pays R200 to enable communication. Subscriptions
are paid at the plan price and run for 30 days from payment.
"""

import logging
import secrets
import string
import time
from datetime import timedelta

from sqlalchemy.orm import Session

from atsboost.db.tables import (
    CV,
    PaymentTransaction,
    Plan,
    PremiumJobMatch,
    Subscription,
    User,
    utcnow,
)
from atsboost.services.notifications import create_notification
from atsboost.tools import email, payfast

logger = logging.getLogger(__name__)

JOB_SEEKER_PRICE = 50.0
RECRUITER_PRICE = 200.0
PAYMENT_TTL = timedelta(hours=24)
SUBSCRIPTION_PERIOD = timedelta(days=30)

PAYMENT_TYPE_LABELS = {
    "job_seeker_match": "Premium Job Matching Access",
    "recruiter_access": "Premium Candidate Access",
    "subscription": "Subscription",
}


class PaymentError(Exception):
    """A payment request that cannot go ahead."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def generate_transaction_id() -> str:
    """ATS_<epoch ms>_<6 random chars>, upper case."""
    alphabet = string.ascii_uppercase + string.digits
    suffix = "".join(secrets.choice(alphabet) for _ in range(6))
    return f"ATS_{int(time.time() * 1000)}_{suffix}"


def _split_name(user: User) -> tuple[str | None, str | None]:
    if not user.name:
        return None, None
    first, _, last = user.name.partition(" ")
    return first or None, last or None


def _checkout_url(payment: PaymentTransaction, user: User, description: str, subscription: bool = False) -> str:
    first_name, last_name = _split_name(user)
    return payfast.create_payment_url(
        reference=payment.transaction_id,
        amount=payment.amount,
        item_name=PAYMENT_TYPE_LABELS[payment.payment_type],
        item_description=description,
        email=user.email,
        first_name=first_name,
        last_name=last_name,
        subscription=subscription,
    )


def _new_payment(user: User, payment_type: str, amount: float, description: str, **fields) -> PaymentTransaction:
    return PaymentTransaction(
        transaction_id=generate_transaction_id(),
        user_id=user.id,
        payment_type=payment_type,
        amount=amount,
        expires_at=utcnow() + PAYMENT_TTL,
        extra_data={"description": description},
        **fields,
    )


def create_job_seeker_payment(
    db: Session, user: User, cv_id: str, match_id: str | None = None
) -> tuple[PaymentTransaction, str]:
    cv = db.query(CV).filter(CV.id == cv_id, CV.user_id == user.id).first()
    if not cv:
        raise PaymentError("CV not found", status_code=404)

    if match_id:
        match = db.query(PremiumJobMatch).filter(PremiumJobMatch.id == match_id).first()
        if not match or match.seeker_id != user.id:
            raise PaymentError("Match not found", status_code=404)
        if match.job_seeker_paid:
            raise PaymentError("You have already paid for this match")

    description = f"Premium Job Matching Access - CV {cv.title or cv.file_name}"
    payment = _new_payment(user, "job_seeker_match", JOB_SEEKER_PRICE, description, match_id=match_id)
    payment.extra_data = {**payment.extra_data, "cv_id": cv_id}
    db.add(payment)
    db.commit()
    db.refresh(payment)

    logger.info(f"Created job seeker payment {payment.transaction_id} for user {user.id}")
    return payment, _checkout_url(payment, user, description)


def create_recruiter_payment(db: Session, user: User, match_id: str) -> tuple[PaymentTransaction, str]:
    match = db.query(PremiumJobMatch).filter(PremiumJobMatch.id == match_id).first()
    if not match or match.recruiter_id != user.id:
        raise PaymentError("Match not found", status_code=404)
    if not match.job_seeker_paid:
        raise PaymentError("The job seeker has not activated this match yet")
    if match.recruiter_paid:
        raise PaymentError("You have already paid for this match")

    description = f"Premium Candidate Access - {match.job.title if match.job else 'match'}"
    payment = _new_payment(user, "recruiter_access", RECRUITER_PRICE, description, match_id=match_id)
    payment.extra_data = {**payment.extra_data, "job_seeker_id": match.seeker_id}
    db.add(payment)
    db.commit()
    db.refresh(payment)

    logger.info(f"Created recruiter payment {payment.transaction_id} for match {match_id}")
    return payment, _checkout_url(payment, user, description)


def create_subscription_payment(db: Session, user: User, plan_id: str) -> tuple[PaymentTransaction, str]:
    plan = db.query(Plan).filter(Plan.id == plan_id, Plan.is_active.is_(True)).first()
    if not plan:
        raise PaymentError("Plan not found", status_code=404)
    if plan.price <= 0:
        raise PaymentError("The free plan does not need a payment")

    subscription = Subscription(user_id=user.id, plan_id=plan.id, status="pending")
    db.add(subscription)
    db.flush()

    description = f"{plan.name} plan ({plan.interval})"
    payment = _new_payment(user, "subscription", plan.price, description, subscription_id=subscription.id)
    db.add(payment)
    db.commit()
    db.refresh(payment)

    logger.info(f"Created subscription payment {payment.transaction_id} for plan {plan.name}")
    return payment, _checkout_url(payment, user, description)


def get_payment(db: Session, transaction_id: str) -> PaymentTransaction | None:
    return db.query(PaymentTransaction).filter(PaymentTransaction.transaction_id == transaction_id).first()


def process_payment_success(
    db: Session, transaction_id: str, provider_payment_id: str | None = None, metadata: dict | None = None
) -> bool:
    """Mark a payment completed and unlock what it paid for. Repeat calls are no-ops."""
    payment = get_payment(db, transaction_id)
    if not payment:
        logger.error(f"Payment not found for transaction: {transaction_id}")
        return False

    if payment.status in ("completed", "refunded"):
        logger.info(f"Payment already processed: {transaction_id} ({payment.status})")
        return True

    payment.status = "completed"
    payment.provider_payment_id = provider_payment_id
    payment.paid_at = utcnow()
    payment.extra_data = {**(payment.extra_data or {}), **(metadata or {})}

    if payment.payment_type == "job_seeker_match":
        _handle_job_seeker_success(db, payment)
    elif payment.payment_type == "recruiter_access":
        _handle_recruiter_success(db, payment)
    elif payment.payment_type == "subscription":
        _handle_subscription_success(db, payment)

    db.commit()

    user = db.query(User).filter(User.id == payment.user_id).first()
    if user:
        description = (payment.extra_data or {}).get("description", PAYMENT_TYPE_LABELS[payment.payment_type])
        email.send_payment_receipt(user.email, user.name, description, payment.amount, payment.transaction_id)

    logger.info(f"Payment processed successfully: {transaction_id}")
    return True


def _handle_job_seeker_success(db: Session, payment: PaymentTransaction) -> None:
    create_notification(
        db,
        payment.user_id,
        "payment_success",
        "Premium Matching Activated",
        f"Your payment of R{payment.amount:.0f} was received. Recruiters can now see your premium matches.",
        extra_data={"payment_id": payment.id},
        send_whatsapp=True,
    )

    if not payment.match_id:
        return
    match = db.query(PremiumJobMatch).filter(PremiumJobMatch.id == payment.match_id).first()
    if not match:
        return

    match.job_seeker_paid = True
    match.status = "active"

    seeker = db.query(User).filter(User.id == match.seeker_id).first()
    seeker_name = (seeker.name or seeker.username) if seeker else "A candidate"
    create_notification(
        db,
        match.recruiter_id,
        "premium_match_paid",
        "Candidate Ready to Connect",
        f"{seeker_name} ({match.match_score}% match) activated their premium match. "
        f"Unlock their contact details for R{RECRUITER_PRICE:.0f}.",
        priority="high",
        extra_data={"match_id": match.id},
    )


def _handle_recruiter_success(db: Session, payment: PaymentTransaction) -> None:
    if not payment.match_id:
        return
    match = db.query(PremiumJobMatch).filter(PremiumJobMatch.id == payment.match_id).first()
    if not match:
        return

    match.recruiter_paid = True
    match.communication_enabled = True

    company = "A company"
    if match.job and match.job.employer:
        company = match.job.employer.company_name
    job_title = match.job.title if match.job else "a position"

    create_notification(
        db,
        match.seeker_id,
        "recruiter_interest",
        "A Recruiter Wants to Connect",
        f"{company} is interested in you for {job_title}. They can now contact you directly.",
        priority="high",
        extra_data={"match_id": match.id},
        send_whatsapp=True,
    )


def _handle_subscription_success(db: Session, payment: PaymentTransaction) -> None:
    if not payment.subscription_id:
        return
    subscription = db.query(Subscription).filter(Subscription.id == payment.subscription_id).first()
    if not subscription:
        return

    now = utcnow()
    current = (
        db.query(Subscription)
        .filter(
            Subscription.user_id == subscription.user_id,
            Subscription.plan_id == subscription.plan_id,
            Subscription.status == "active",
            Subscription.id != subscription.id,
            Subscription.current_period_end >= now,
        )
        .first()
    )
    # Renewal of the same plan extends the running period
    start = current.current_period_end if current else now
    if current:
        current.status = "expired"

    others = (
        db.query(Subscription)
        .filter(
            Subscription.user_id == subscription.user_id,
            Subscription.status == "active",
            Subscription.plan_id != subscription.plan_id,
        )
        .all()
    )
    for other in others:
        other.status = "cancelled"

    subscription.status = "active"
    subscription.current_period_start = now
    subscription.current_period_end = start + SUBSCRIPTION_PERIOD
    subscription.scans_used = 0

    plan_name = subscription.plan.name if subscription.plan else "your"
    create_notification(
        db,
        subscription.user_id,
        "subscription_active",
        "Subscription Active",
        f"Thank you for subscribing to our {plan_name} plan! "
        f"Your subscription is active until {subscription.current_period_end:%d %B %Y}.",
        extra_data={"subscription_id": subscription.id},
        send_whatsapp=True,
    )


def process_payment_failure(db: Session, transaction_id: str, reason: str) -> bool:
    payment = get_payment(db, transaction_id)
    if not payment:
        return False

    # Only a pending payment can fail; later notifications leave a settled payment alone
    if payment.status != "pending":
        logger.info(f"Ignoring failure for {payment.status} payment {transaction_id} ({reason})")
        return True

    payment.status = "failed"
    payment.failure_reason = reason
    if payment.subscription_id:
        subscription = db.query(Subscription).filter(Subscription.id == payment.subscription_id).first()
        if subscription and subscription.status == "pending":
            subscription.status = "cancelled"

    create_notification(
        db,
        payment.user_id,
        "payment_failed",
        "Payment Failed",
        f"Your payment of R{payment.amount:.0f} could not be processed. {reason}",
        priority="high",
        extra_data={"payment_id": payment.id},
    )
    db.commit()

    logger.warning(f"Payment failed: {transaction_id} ({reason})")
    return True


def process_refund(db: Session, payment_id: str, reason: str, amount: float | None = None) -> bool:
    """Refund a completed payment. Returns False for unknown or non-completed payments."""
    payment = db.query(PaymentTransaction).filter(PaymentTransaction.id == payment_id).first()
    if not payment or payment.status != "completed":
        return False

    refund_amount = payment.amount if amount is None else amount
    payment.status = "refunded"
    payment.refunded_at = utcnow()
    payment.extra_data = {**(payment.extra_data or {}), "refund_amount": refund_amount, "refund_reason": reason}

    create_notification(
        db,
        payment.user_id,
        "payment_refunded",
        "Refund Processed",
        f"Your refund of R{refund_amount:.0f} has been processed successfully. {reason}",
        extra_data={"payment_id": payment.id},
    )
    db.commit()

    logger.info(f"Refunded payment {payment.transaction_id}: {reason}")
    return True


def has_user_paid_for_match(db: Session, user_id: str, match_id: str, user_type: str) -> bool:
    payment_type = "job_seeker_match" if user_type == "job_seeker" else "recruiter_access"
    return (
        db.query(PaymentTransaction)
        .filter(
            PaymentTransaction.user_id == user_id,
            PaymentTransaction.match_id == match_id,
            PaymentTransaction.payment_type == payment_type,
            PaymentTransaction.status == "completed",
        )
        .first()
        is not None
    )


def get_payment_history(db: Session, user_id: str, limit: int = 10, offset: int = 0) -> list[PaymentTransaction]:
    return (
        db.query(PaymentTransaction)
        .filter(PaymentTransaction.user_id == user_id)
        .order_by(PaymentTransaction.created_at.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )


def handle_itn(db: Session, data: dict) -> bool:
    """
    Apply a PayFast ITN.

    Returns False when the notification is not authentic or names an
    unknown payment.
    """
    if not payfast.verify_notification(data):
        return False

    transaction_id = data.get("custom_str1") or data.get("m_payment_id")
    if not transaction_id:
        logger.warning("PayFast ITN without a payment reference")
        return False

    status = (data.get("payment_status") or "").upper()
    if status == "COMPLETE":
        return process_payment_success(
            db,
            transaction_id,
            data.get("pf_payment_id"),
            {"amount_gross": data.get("amount_gross"), "amount_fee": data.get("amount_fee")},
        )

    return process_payment_failure(db, transaction_id, f"PayFast status: {status or 'UNKNOWN'}")
