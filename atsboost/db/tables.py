"""Database table models."""

import uuid
from datetime import UTC, date, datetime

from sqlalchemy import JSON, Boolean, Date, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from atsboost.db.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp; columns store UTC without tzinfo."""
    return datetime.now(UTC).replace(tzinfo=None)


class User(Base):
    """User account (job seeker, recruiter or admin)."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    username: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password: Mapped[str] = mapped_column(String(255))
    name: Mapped[str | None] = mapped_column(String(255), default=None)
    role: Mapped[str] = mapped_column(String(20), default="user")  # user/recruiter/admin
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    verification_token: Mapped[str | None] = mapped_column(String(100), default=None, index=True)
    verification_expires: Mapped[datetime | None] = mapped_column(DateTime, default=None)
    reset_token: Mapped[str | None] = mapped_column(String(100), default=None, index=True)
    reset_token_expires: Mapped[datetime | None] = mapped_column(DateTime, default=None)
    last_login: Mapped[datetime | None] = mapped_column(DateTime, default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    cvs: Mapped[list["CV"]] = relationship(back_populates="user")
    sa_profile: Mapped["SAProfile | None"] = relationship(back_populates="user", uselist=False)
    employer: Mapped["Employer | None"] = relationship(back_populates="user", uselist=False)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class CV(Base):
    """An uploaded CV and its extracted text."""

    __tablename__ = "cvs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str | None] = mapped_column(ForeignKey("users.id"), nullable=True, index=True)
    file_name: Mapped[str] = mapped_column(String(255))
    file_type: Mapped[str] = mapped_column(String(100))
    file_size: Mapped[int] = mapped_column(Integer, default=0)
    content: Mapped[str] = mapped_column(Text, default="")
    title: Mapped[str | None] = mapped_column(String(255), default=None)
    target_position: Mapped[str | None] = mapped_column(String(255), default=None)
    target_industry: Mapped[str | None] = mapped_column(String(255), default=None)
    job_description: Mapped[str | None] = mapped_column(Text, default=None)
    is_guest: Mapped[bool] = mapped_column(Boolean, default=False)
    upload_method: Mapped[str] = mapped_column(String(20), default="web")  # web/whatsapp
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    user: Mapped["User | None"] = relationship(back_populates="cvs")
    ats_score: Mapped["ATSScore | None"] = relationship(
        back_populates="cv", uselist=False, cascade="all, delete-orphan"
    )


class ATSScore(Base):
    """Stored ATS analysis for a CV."""

    __tablename__ = "ats_scores"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    cv_id: Mapped[str] = mapped_column(ForeignKey("cvs.id"), unique=True)
    score: Mapped[int] = mapped_column(Integer)
    skills_score: Mapped[int] = mapped_column(Integer, default=0)
    context_score: Mapped[int] = mapped_column(Integer, default=0)
    format_score: Mapped[int] = mapped_column(Integer, default=0)
    rating: Mapped[str] = mapped_column(String(30), default="")
    strengths: Mapped[list] = mapped_column(JSON, default=list)
    improvements: Mapped[list] = mapped_column(JSON, default=list)
    issues: Mapped[list] = mapped_column(JSON, default=list)
    skills_found: Mapped[list] = mapped_column(JSON, default=list)
    sa_keywords_found: Mapped[list] = mapped_column(JSON, default=list)
    bbbee_detected: Mapped[bool] = mapped_column(Boolean, default=False)
    nqf_detected: Mapped[bool] = mapped_column(Boolean, default=False)
    ai_analysis: Mapped[dict | None] = mapped_column(JSON, default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    cv: Mapped["CV"] = relationship(back_populates="ats_score")


class SAProfile(Base):
    """South African job-market profile of a user."""

    __tablename__ = "sa_profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), unique=True)
    province: Mapped[str | None] = mapped_column(String(50), default=None)
    city: Mapped[str | None] = mapped_column(String(100), default=None)
    bbbee_status: Mapped[str | None] = mapped_column(String(50), default=None)
    bbbee_level: Mapped[int | None] = mapped_column(Integer, default=None)
    nqf_level: Mapped[int | None] = mapped_column(Integer, default=None)
    languages: Mapped[list] = mapped_column(JSON, default=list)
    preferred_industries: Mapped[list] = mapped_column(JSON, default=list)
    preferred_job_types: Mapped[list] = mapped_column(JSON, default=list)
    whatsapp_number: Mapped[str | None] = mapped_column(String(20), default=None)
    whatsapp_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    whatsapp_notifications: Mapped[bool] = mapped_column(Boolean, default=True)
    whatsapp_code_hash: Mapped[str | None] = mapped_column(String(64), default=None)
    whatsapp_code_expires: Mapped[datetime | None] = mapped_column(DateTime, default=None)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    user: Mapped["User"] = relationship(back_populates="sa_profile")


class Employer(Base):
    """Company profile owned by a recruiter."""

    __tablename__ = "employers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), unique=True)
    company_name: Mapped[str] = mapped_column(String(255))
    industry: Mapped[str | None] = mapped_column(String(100), default=None)
    location: Mapped[str | None] = mapped_column(String(255), default=None)
    bbbee_level: Mapped[int | None] = mapped_column(Integer, default=None)
    website: Mapped[str | None] = mapped_column(String(255), default=None)
    description: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    user: Mapped["User"] = relationship(back_populates="employer")
    jobs: Mapped[list["JobPosting"]] = relationship(back_populates="employer")


class JobPosting(Base):
    """A job advertised by an employer."""

    __tablename__ = "job_postings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    employer_id: Mapped[str] = mapped_column(ForeignKey("employers.id"), index=True)
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text, default="")
    location: Mapped[str | None] = mapped_column(String(255), default=None)
    province: Mapped[str | None] = mapped_column(String(50), default=None)
    industry: Mapped[str | None] = mapped_column(String(100), default=None)
    employment_type: Mapped[str] = mapped_column(String(30), default="full_time")
    experience_level: Mapped[str | None] = mapped_column(String(30), default=None)
    required_skills: Mapped[list] = mapped_column(JSON, default=list)
    preferred_skills: Mapped[list] = mapped_column(JSON, default=list)
    salary_min: Mapped[int | None] = mapped_column(Integer, default=None)
    salary_max: Mapped[int | None] = mapped_column(Integer, default=None)
    nqf_level: Mapped[int | None] = mapped_column(Integer, default=None)
    bbbee_requirement: Mapped[str] = mapped_column(String(20), default="none")  # required/preferred/none
    is_remote: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    employer: Mapped["Employer"] = relationship(back_populates="jobs")


class JobMatch(Base):
    """A scored pairing of a CV with a job posting (recommended or applied)."""

    __tablename__ = "job_matches"
    __table_args__ = (UniqueConstraint("job_id", "cv_id", name="uq_job_matches_job_cv"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    job_id: Mapped[str] = mapped_column(ForeignKey("job_postings.id"), index=True)
    cv_id: Mapped[str] = mapped_column(ForeignKey("cvs.id"), index=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)
    match_score: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[str] = mapped_column(String(20), default="applied")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    job: Mapped["JobPosting"] = relationship()


class Plan(Base):
    """Subscription plan."""

    __tablename__ = "plans"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(100), unique=True)
    description: Mapped[str] = mapped_column(Text, default="")
    price: Mapped[float] = mapped_column(Float, default=0.0)  # ZAR per interval
    interval: Mapped[str] = mapped_column(String(20), default="monthly")
    features: Mapped[list] = mapped_column(JSON, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class Subscription(Base):
    """A user's plan subscription."""

    __tablename__ = "subscriptions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)
    plan_id: Mapped[str] = mapped_column(ForeignKey("plans.id"))
    status: Mapped[str] = mapped_column(String(20), default="pending")  # pending/active/cancelled/expired
    current_period_start: Mapped[datetime | None] = mapped_column(DateTime, default=None)
    current_period_end: Mapped[datetime | None] = mapped_column(DateTime, default=None)
    scans_used: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    plan: Mapped["Plan"] = relationship()


class PaymentTransaction(Base):
    """A PayFast payment."""

    __tablename__ = "payment_transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    transaction_id: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)
    payment_type: Mapped[str] = mapped_column(String(30))  # job_seeker_match/recruiter_access/subscription
    amount: Mapped[float] = mapped_column(Float)
    currency: Mapped[str] = mapped_column(String(3), default="ZAR")
    status: Mapped[str] = mapped_column(String(20), default="pending")  # pending/completed/failed/refunded
    match_id: Mapped[str | None] = mapped_column(ForeignKey("premium_job_matches.id"), nullable=True)
    subscription_id: Mapped[str | None] = mapped_column(ForeignKey("subscriptions.id"), nullable=True)
    provider: Mapped[str] = mapped_column(String(20), default="payfast")
    provider_payment_id: Mapped[str | None] = mapped_column(String(100), default=None)
    failure_reason: Mapped[str | None] = mapped_column(Text, default=None)
    extra_data: Mapped[dict] = mapped_column(JSON, default=dict)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime, default=None)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime, default=None)
    refunded_at: Mapped[datetime | None] = mapped_column(DateTime, default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


class PremiumSeekerProfile(Base):
    """Job seeker opted in to premium matching."""

    __tablename__ = "premium_seeker_profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), unique=True)
    cv_id: Mapped[str] = mapped_column(ForeignKey("cvs.id"))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    experience_level: Mapped[str | None] = mapped_column(String(20), default=None)  # entry/mid/senior/executive
    skills: Mapped[list] = mapped_column(JSON, default=list)
    expected_salary_min: Mapped[int | None] = mapped_column(Integer, default=None)
    expected_salary_max: Mapped[int | None] = mapped_column(Integer, default=None)
    preferred_locations: Mapped[list] = mapped_column(JSON, default=list)
    preferred_industries: Mapped[list] = mapped_column(JSON, default=list)
    open_to_remote: Mapped[bool] = mapped_column(Boolean, default=False)
    open_to_relocation: Mapped[bool] = mapped_column(Boolean, default=False)
    available_from: Mapped[date | None] = mapped_column(Date, default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    cv: Mapped["CV"] = relationship()


class PremiumJobMatch(Base):
    """A high-scoring seeker/job pairing that both sides unlock by paying."""

    __tablename__ = "premium_job_matches"
    __table_args__ = (UniqueConstraint("job_id", "seeker_id", name="uq_premium_matches_job_seeker"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    job_id: Mapped[str] = mapped_column(ForeignKey("job_postings.id"), index=True)
    seeker_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)
    recruiter_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)
    cv_id: Mapped[str] = mapped_column(ForeignKey("cvs.id"))
    match_score: Mapped[int] = mapped_column(Integer)
    score_breakdown: Mapped[dict] = mapped_column(JSON, default=dict)
    match_reasons: Mapped[list] = mapped_column(JSON, default=list)
    matched_skills: Mapped[list] = mapped_column(JSON, default=list)
    skill_gaps: Mapped[list] = mapped_column(JSON, default=list)
    status: Mapped[str] = mapped_column(String(20), default="pending_payment")  # pending_payment/active/closed
    job_seeker_paid: Mapped[bool] = mapped_column(Boolean, default=False)
    recruiter_paid: Mapped[bool] = mapped_column(Boolean, default=False)
    communication_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    job: Mapped["JobPosting"] = relationship()
    seeker: Mapped["User"] = relationship(foreign_keys=[seeker_id])
    recruiter: Mapped["User"] = relationship(foreign_keys=[recruiter_id])


class Notification(Base):
    """In-app notification."""

    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)
    type: Mapped[str] = mapped_column(String(50))
    title: Mapped[str] = mapped_column(String(255))
    message: Mapped[str] = mapped_column(Text)
    priority: Mapped[str] = mapped_column(String(10), default="normal")  # low/normal/high
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    extra_data: Mapped[dict] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
