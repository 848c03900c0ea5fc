"""South African profile and WhatsApp verification endpoints."""

import hmac
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from atsboost.api.deps import get_current_user
from atsboost.api.limiter import limiter
from atsboost.api.schemas import (
    SAProfileResponse,
    SAProfileUpdate,
    WhatsAppSendCodeRequest,
    WhatsAppVerifyRequest,
)
from atsboost.db import SAProfile, User, get_db, utcnow
from atsboost.services.sa_context import normalize_province
from atsboost.services.security import generate_code, hash_code
from atsboost.tools import whatsapp

router = APIRouter()

CODE_VALID_MINUTES = 10


def _get_or_create_profile(db: Session, user: User) -> SAProfile:
    profile = db.query(SAProfile).filter(SAProfile.user_id == user.id).first()
    if not profile:
        profile = SAProfile(user_id=user.id)
        db.add(profile)
        db.flush()
    return profile


@router.get("", response_model=SAProfileResponse)
def get_profile(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get the user's South African profile; an empty one when not set up yet."""
    profile = _get_or_create_profile(db, user)
    db.commit()
    return SAProfileResponse.model_validate(profile)


@router.put("", response_model=SAProfileResponse)
def update_profile(
    update: SAProfileUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update the user's South African profile."""
    profile = _get_or_create_profile(db, user)
    changes = update.model_dump(exclude_unset=True)

    if "province" in changes and changes["province"] is not None:
        province = normalize_province(changes["province"])
        if not province:
            raise HTTPException(status_code=400, detail=f"Unknown province: {changes['province']}")
        changes["province"] = province

    for field, value in changes.items():
        setattr(profile, field, value)

    db.commit()
    db.refresh(profile)
    return SAProfileResponse.model_validate(profile)


@router.post("/whatsapp/send-code")
@limiter.limit("3/minute")
def send_whatsapp_code(
    request: Request,
    body: WhatsAppSendCodeRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Send a verification code to a South African WhatsApp number."""
    if not whatsapp.is_valid_sa_number(body.number):
        raise HTTPException(status_code=400, detail="Invalid South African mobile number")

    profile = _get_or_create_profile(db, user)
    code = generate_code()
    profile.whatsapp_number = whatsapp.normalize_sa_number(body.number)
    profile.whatsapp_verified = False
    profile.whatsapp_code_hash = hash_code(code)
    profile.whatsapp_code_expires = utcnow() + timedelta(minutes=CODE_VALID_MINUTES)
    db.commit()

    if not whatsapp.send_verification_code(profile.whatsapp_number, code, CODE_VALID_MINUTES):
        raise HTTPException(status_code=502, detail="Could not send the verification code")

    return {"status": "sent", "number": profile.whatsapp_number}


@router.post("/whatsapp/verify", response_model=SAProfileResponse)
@limiter.limit("5/minute")
def verify_whatsapp(
    request: Request,
    body: WhatsAppVerifyRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Confirm a WhatsApp number with the code sent to it."""
    profile = db.query(SAProfile).filter(SAProfile.user_id == user.id).first()
    if (
        not profile
        or not profile.whatsapp_code_hash
        or not profile.whatsapp_code_expires
        or profile.whatsapp_code_expires < utcnow()
    ):
        raise HTTPException(status_code=400, detail="No valid verification code. Request a new one.")

    if not hmac.compare_digest(profile.whatsapp_code_hash, hash_code(body.code)):
        raise HTTPException(status_code=400, detail="Incorrect verification code")

    profile.whatsapp_verified = True
    profile.whatsapp_code_hash = None
    profile.whatsapp_code_expires = None
    db.commit()
    db.refresh(profile)
    return SAProfileResponse.model_validate(profile)
