"""Payment endpoints and the PayFast ITN callback."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from atsboost.api.deps import get_current_user
from atsboost.api.schemas import (
    JobSeekerPaymentRequest,
    PaymentCreatedResponse,
    PaymentHistoryResponse,
    PaymentResponse,
    RecruiterPaymentRequest,
    SubscriptionPaymentRequest,
)
from atsboost.db import User, get_db
from atsboost.services import payments
from atsboost.services.payments import PaymentError

logger = logging.getLogger(__name__)

router = APIRouter()


def _created(result: tuple) -> PaymentCreatedResponse:
    payment, url = result
    return PaymentCreatedResponse(payment=PaymentResponse.model_validate(payment), payment_url=url)


@router.post("/job-seeker", response_model=PaymentCreatedResponse, status_code=201)
def job_seeker_payment(
    body: JobSeekerPaymentRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Start the R50 payment that activates premium matching."""
    try:
        return _created(payments.create_job_seeker_payment(db, user, body.cv_id, body.match_id))
    except PaymentError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/recruiter", response_model=PaymentCreatedResponse, status_code=201)
def recruiter_payment(
    body: RecruiterPaymentRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Start the R200 payment that unlocks a candidate's contact details."""
    try:
        return _created(payments.create_recruiter_payment(db, user, body.match_id))
    except PaymentError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/subscription", response_model=PaymentCreatedResponse, status_code=201)
def subscription_payment(
    body: SubscriptionPaymentRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Start a subscription payment at the plan price."""
    try:
        return _created(payments.create_subscription_payment(db, user, body.plan_id))
    except PaymentError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


async def process_itn(request: Request, db: Session) -> PlainTextResponse:
    """Apply a form-encoded PayFast ITN. PayFast only needs a 200 back."""
    form = await request.form()
    data = {key: str(value) for key, value in form.items()}
    logger.info(f"PayFast ITN for {data.get('m_payment_id')}: {data.get('payment_status')}")

    if not payments.handle_itn(db, data):
        raise HTTPException(status_code=400, detail="Invalid payment notification")
    return PlainTextResponse("OK")


@router.post("/notify", response_class=PlainTextResponse)
async def payfast_notify(request: Request, db: Session = Depends(get_db)):
    """PayFast ITN callback."""
    return await process_itn(request, db)


@router.get("/history", response_model=PaymentHistoryResponse)
def payment_history(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """The user's payments, newest first."""
    history = payments.get_payment_history(db, user.id, limit, offset)
    return PaymentHistoryResponse(payments=[PaymentResponse.model_validate(p) for p in history])


@router.get("/{transaction_id}", response_model=PaymentResponse)
def get_payment(transaction_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Status of one of the user's payments."""
    payment = payments.get_payment(db, transaction_id)
    if not payment or (payment.user_id != user.id and not user.is_admin):
        raise HTTPException(status_code=404, detail="Payment not found")
    return PaymentResponse.model_validate(payment)
