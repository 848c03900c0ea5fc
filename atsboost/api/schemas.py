"""API request/response schemas."""

from datetime import date, datetime

from pydantic import BaseModel, EmailStr, Field


# Auth schemas
class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    name: str | None = None


class LoginRequest(BaseModel):
    login: str = Field(description="Email address or username")
    password: str


class UserResponse(BaseModel):
    id: str
    username: str
    email: str
    name: str | None
    role: str
    is_active: bool
    email_verified: bool
    created_at: datetime
    last_login: datetime | None

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    token: str
    user: UserResponse


class TokenRequest(BaseModel):
    token: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str
    password: str = Field(min_length=8, max_length=128)


# CV schemas
class CVResponse(BaseModel):
    id: str
    user_id: str | None
    file_name: str
    file_type: str
    file_size: int
    title: str | None
    target_position: str | None
    target_industry: str | None
    is_guest: bool
    upload_method: str
    created_at: datetime

    class Config:
        from_attributes = True


class CVDetailResponse(CVResponse):
    content: str
    job_description: str | None


class CVListResponse(BaseModel):
    cvs: list[CVResponse]


class ATSScoreResponse(BaseModel):
    cv_id: str
    score: int
    skills_score: int
    context_score: int
    format_score: int
    rating: str
    strengths: list[str]
    improvements: list[str]
    issues: list[str]
    skills_found: list[str]
    sa_keywords_found: list[str]
    bbbee_detected: bool
    nqf_detected: bool
    keyword_recommendations: list[str] = []
    job_fit: dict | None = None
    limited: bool = False
    plan: str = "Free"
    scans_remaining: int | None = None
    created_at: datetime


class AnalyzeTextRequest(BaseModel):
    content: str
    job_description: str | None = None
    target_industry: str | None = None


class AnalyzeTextResponse(BaseModel):
    score: int
    skills_score: int
    context_score: int
    format_score: int
    rating: str
    strengths: list[str]
    improvements: list[str]
    issues: list[str]
    skills_found: list[str]
    sa_keywords_found: list[str]
    bbbee_detected: bool
    nqf_detected: bool
    nqf_levels: list[int]
    keyword_recommendations: list[str]
    job_fit: dict | None = None


class SAContextResponse(BaseModel):
    b_bbee_mentions: list[str]
    nqf_levels: list[str]
    locations: list[str]
    regulations: list[str]
    languages: list[str]


class DeepAnalysisResponse(BaseModel):
    cv_id: str
    overall_score: int
    rating: str
    skill_score: int
    format_score: int
    sa_score: int
    strengths: list[str]
    improvements: list[str]
    skills_identified: list[str]
    south_african_context: SAContextResponse
    cached: bool = False


# SA profile schemas
class SAProfileUpdate(BaseModel):
    province: str | None = None
    city: str | None = None
    bbbee_status: str | None = None
    bbbee_level: int | None = Field(default=None, ge=1, le=8)
    nqf_level: int | None = Field(default=None, ge=1, le=10)
    languages: list[str] | None = None
    preferred_industries: list[str] | None = None
    preferred_job_types: list[str] | None = None
    whatsapp_notifications: bool | None = None


class SAProfileResponse(BaseModel):
    province: str | None
    city: str | None
    bbbee_status: str | None
    bbbee_level: int | None
    nqf_level: int | None
    languages: list[str]
    preferred_industries: list[str]
    preferred_job_types: list[str]
    whatsapp_number: str | None
    whatsapp_verified: bool
    whatsapp_notifications: bool

    class Config:
        from_attributes = True


class WhatsAppSendCodeRequest(BaseModel):
    number: str


class WhatsAppVerifyRequest(BaseModel):
    code: str = Field(min_length=6, max_length=6)


# Employer and job schemas
class EmployerCreate(BaseModel):
    company_name: str = Field(min_length=1, max_length=255)
    industry: str | None = None
    location: str | None = None
    bbbee_level: int | None = Field(default=None, ge=1, le=8)
    website: str | None = None
    description: str = ""


class EmployerResponse(BaseModel):
    id: str
    company_name: str
    industry: str | None
    location: str | None
    bbbee_level: int | None
    website: str | None
    description: str
    created_at: datetime

    class Config:
        from_attributes = True


class JobCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = ""
    location: str | None = None
    province: str | None = None
    industry: str | None = None
    employment_type: str = "full_time"
    experience_level: str | None = Field(default=None, description="entry/mid/senior/executive")
    required_skills: list[str] = []
    preferred_skills: list[str] = []
    salary_min: int | None = Field(default=None, ge=0)
    salary_max: int | None = Field(default=None, ge=0)
    nqf_level: int | None = Field(default=None, ge=1, le=10)
    bbbee_requirement: str = Field(default="none", pattern="^(required|preferred|none)$")
    is_remote: bool = False


class JobUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    location: str | None = None
    province: str | None = None
    industry: str | None = None
    employment_type: str | None = None
    experience_level: str | None = None
    required_skills: list[str] | None = None
    preferred_skills: list[str] | None = None
    salary_min: int | None = Field(default=None, ge=0)
    salary_max: int | None = Field(default=None, ge=0)
    nqf_level: int | None = Field(default=None, ge=1, le=10)
    bbbee_requirement: str | None = Field(default=None, pattern="^(required|preferred|none)$")
    is_remote: bool | None = None
    is_active: bool | None = None


class JobResponse(BaseModel):
    id: str
    employer_id: str
    title: str
    description: str
    location: str | None
    province: str | None
    industry: str | None
    employment_type: str
    experience_level: str | None
    required_skills: list[str]
    preferred_skills: list[str]
    salary_min: int | None
    salary_max: int | None
    nqf_level: int | None
    bbbee_requirement: str
    is_remote: bool
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class JobListResponse(BaseModel):
    jobs: list[JobResponse]


class ApplyRequest(BaseModel):
    cv_id: str


class JobMatchResponse(BaseModel):
    id: str
    job_id: str
    cv_id: str
    match_score: int
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class RecommendationResponse(BaseModel):
    job_id: str
    title: str
    company: str
    location: str | None
    employment_type: str
    salary_min: int | None
    salary_max: int | None
    posted_at: datetime
    match_score: int
    match_details: dict


class RecommendationListResponse(BaseModel):
    cv_id: str
    recommendations: list[RecommendationResponse]


# Premium matching schemas
class PremiumProfileRequest(BaseModel):
    cv_id: str
    experience_level: str | None = Field(default=None, pattern="^(entry|mid|senior|executive)$")
    skills: list[str] = []
    expected_salary_min: int | None = Field(default=None, ge=0)
    expected_salary_max: int | None = Field(default=None, ge=0)
    preferred_locations: list[str] = []
    preferred_industries: list[str] = []
    open_to_remote: bool = False
    open_to_relocation: bool = False
    available_from: date | None = None
    is_active: bool = True


class PremiumProfileResponse(BaseModel):
    id: str
    cv_id: str
    is_active: bool
    experience_level: str | None
    skills: list[str]
    expected_salary_min: int | None
    expected_salary_max: int | None
    preferred_locations: list[str]
    preferred_industries: list[str]
    open_to_remote: bool
    open_to_relocation: bool
    available_from: date | None
    created_at: datetime

    class Config:
        from_attributes = True


class ContactDetails(BaseModel):
    name: str | None
    email: str
    whatsapp_number: str | None = None
    company_name: str | None = None


class PremiumMatchResponse(BaseModel):
    id: str
    job_id: str
    job_title: str
    match_score: int
    score_breakdown: dict
    match_reasons: list[str]
    matched_skills: list[str]
    skill_gaps: list[str]
    status: str
    job_seeker_paid: bool
    recruiter_paid: bool
    communication_enabled: bool
    contact: ContactDetails | None = None
    created_at: datetime


class PremiumMatchListResponse(BaseModel):
    matches: list[PremiumMatchResponse]
    total: int
    page: int
    total_pages: int


# Payment schemas
class JobSeekerPaymentRequest(BaseModel):
    cv_id: str
    match_id: str | None = None


class RecruiterPaymentRequest(BaseModel):
    match_id: str


class SubscriptionPaymentRequest(BaseModel):
    plan_id: str


class PaymentResponse(BaseModel):
    id: str
    transaction_id: str
    payment_type: str
    amount: float
    currency: str
    status: str
    match_id: str | None
    subscription_id: str | None
    failure_reason: str | None
    expires_at: datetime | None
    paid_at: datetime | None
    refunded_at: datetime | None
    created_at: datetime

    class Config:
        from_attributes = True


class PaymentCreatedResponse(BaseModel):
    payment: PaymentResponse
    payment_url: str


class PaymentHistoryResponse(BaseModel):
    payments: list[PaymentResponse]


class RefundRequest(BaseModel):
    reason: str
    amount: float | None = Field(default=None, gt=0)


# Plan schemas
class PlanResponse(BaseModel):
    id: str
    name: str
    description: str
    price: float
    interval: str
    features: list[str]

    class Config:
        from_attributes = True


class PlanListResponse(BaseModel):
    plans: list[PlanResponse]


class UserPlanResponse(BaseModel):
    plan: str
    features: dict
    scans_remaining: int | None
    current_period_end: datetime | None


# Notification schemas
class NotificationResponse(BaseModel):
    id: str
    type: str
    title: str
    message: str
    priority: str
    is_read: bool
    extra_data: dict
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    unread: int


# Admin schemas
class AdminUserUpdate(BaseModel):
    role: str | None = Field(default=None, pattern="^(user|recruiter|admin)$")
    is_active: bool | None = None


class AdminStatsResponse(BaseModel):
    total_users: int
    active_users: int
    total_cvs: int
    total_ats_scores: int
    total_sa_profiles: int
    active_subscriptions: int
    average_score: float
    latest_users: list[UserResponse]
    latest_cvs: list[CVResponse]


class AdminUserListResponse(BaseModel):
    users: list[UserResponse]
    total: int
    page: int
    total_pages: int


class AdminCVListResponse(BaseModel):
    cvs: list[CVResponse]
    total: int
    page: int
    total_pages: int


class RevenueResponse(BaseModel):
    total_revenue: float
    completed_payments: int
    refunded_amount: float
    by_type: dict[str, float]
