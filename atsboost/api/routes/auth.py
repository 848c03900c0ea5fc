"""Account endpoints: registration, login and password recovery."""

import logging
from datetime import timedelta

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from atsboost.api.deps import get_current_user
from atsboost.api.limiter import limiter
from atsboost.api.schemas import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenRequest,
    UserResponse,
)
from atsboost.config import settings
from atsboost.db import User, get_db, utcnow
from atsboost.services.security import (
    create_access_token,
    generate_token,
    hash_password,
    is_legacy_hash,
    verify_password,
)
from atsboost.tools import email

logger = logging.getLogger(__name__)

router = APIRouter()


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        token=create_access_token(user.id, user.email, user.role),
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
@limiter.limit("5/minute")
def register(
    request: Request,
    body: RegisterRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """Create an account and send welcome and verification emails."""
    email_address = body.email.lower()
    existing = (
        db.query(User)
        .filter(or_(func.lower(User.username) == body.username.lower(), User.email == email_address))
        .first()
    )
    if existing:
        raise HTTPException(status_code=409, detail="Username or email already registered")

    user = User(
        username=body.username,
        email=email_address,
        password=hash_password(body.password),
        name=body.name,
        verification_token=generate_token(),
        verification_expires=utcnow() + timedelta(hours=settings.email_verification_hours),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Registered user {user.id}")

    background_tasks.add_task(email.send_welcome_email, user.email, user.name)
    background_tasks.add_task(email.send_verification_email, user.email, user.name, user.verification_token)

    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
@limiter.limit("10/minute")
def login(request: Request, body: LoginRequest, db: Session = Depends(get_db)):
    """Log in with email or username."""
    identifier = body.login.strip().lower()
    user = (
        db.query(User)
        .filter(or_(User.email == identifier, func.lower(User.username) == identifier))
        .first()
    )
    if not user or not verify_password(body.password, user.password):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=401, detail="Account is disabled")

    # Move legacy scrypt hashes to bcrypt on successful login
    if is_legacy_hash(user.password):
        user.password = hash_password(body.password)
    user.last_login = utcnow()
    db.commit()
    db.refresh(user)

    return _auth_response(user)


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    """Get the logged-in user."""
    return UserResponse.model_validate(user)


@router.post("/verify-email")
def verify_email(body: TokenRequest, db: Session = Depends(get_db)):
    """Confirm an email address with the emailed token."""
    user = db.query(User).filter(User.verification_token == body.token).first()
    if not user or not user.verification_expires or user.verification_expires < utcnow():
        raise HTTPException(status_code=400, detail="Invalid or expired verification token")

    user.email_verified = True
    user.verification_token = None
    user.verification_expires = None
    db.commit()
    return {"status": "verified"}


@router.post("/forgot-password")
@limiter.limit("3/minute")
def forgot_password(
    request: Request,
    body: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """Email a reset link. The response is the same whether or not the account exists."""
    user = db.query(User).filter(User.email == body.email.lower()).first()
    if user and user.is_active:
        user.reset_token = generate_token()
        user.reset_token_expires = utcnow() + timedelta(minutes=settings.password_reset_minutes)
        db.commit()
        background_tasks.add_task(email.send_password_reset_email, user.email, user.name, user.reset_token)

    return {"status": "ok"}


@router.post("/reset-password")
@limiter.limit("5/minute")
def reset_password(request: Request, body: ResetPasswordRequest, db: Session = Depends(get_db)):
    """Set a new password with the emailed reset token."""
    user = db.query(User).filter(User.reset_token == body.token).first()
    if not user or not user.reset_token_expires or user.reset_token_expires < utcnow():
        raise HTTPException(status_code=400, detail="Invalid or expired reset token")

    user.password = hash_password(body.password)
    user.reset_token = None
    user.reset_token_expires = None
    db.commit()
    logger.info(f"Password reset for user {user.id}")
    return {"status": "ok"}
