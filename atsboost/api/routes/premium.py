"""Premium matching endpoints for job seekers and recruiters."""

import math

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from atsboost.api.deps import get_current_user
from atsboost.api.schemas import (
    ContactDetails,
    PremiumMatchListResponse,
    PremiumMatchResponse,
    PremiumProfileRequest,
    PremiumProfileResponse,
)
from atsboost.db import CV, PremiumJobMatch, PremiumSeekerProfile, SAProfile, User, get_db
from atsboost.services.premium_matching import MatchAccessError, get_match_for_user, list_matches

router = APIRouter()


def _contact_for(db: Session, match: PremiumJobMatch, side: str) -> ContactDetails | None:
    """Contact details of the other party, once both sides have paid."""
    if not match.communication_enabled:
        return None

    if side == "recruiter":
        seeker = match.seeker
        profile = db.query(SAProfile).filter(SAProfile.user_id == seeker.id).first()
        return ContactDetails(
            name=seeker.name or seeker.username,
            email=seeker.email,
            whatsapp_number=profile.whatsapp_number if profile and profile.whatsapp_verified else None,
        )

    recruiter = match.recruiter
    return ContactDetails(
        name=recruiter.name or recruiter.username,
        email=recruiter.email,
        company_name=recruiter.employer.company_name if recruiter.employer else None,
    )


def _match_response(db: Session, match: PremiumJobMatch, side: str, with_contact: bool = False) -> PremiumMatchResponse:
    return PremiumMatchResponse(
        id=match.id,
        job_id=match.job_id,
        job_title=match.job.title if match.job else "",
        match_score=match.match_score,
        score_breakdown=match.score_breakdown or {},
        match_reasons=match.match_reasons or [],
        matched_skills=match.matched_skills or [],
        skill_gaps=match.skill_gaps or [],
        status=match.status,
        job_seeker_paid=match.job_seeker_paid,
        recruiter_paid=match.recruiter_paid,
        communication_enabled=match.communication_enabled,
        contact=_contact_for(db, match, side) if with_contact else None,
        created_at=match.created_at,
    )


@router.post("/profile", response_model=PremiumProfileResponse)
def upsert_premium_profile(
    body: PremiumProfileRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Opt in to premium matching with one of the user's CVs."""
    if not db.query(CV).filter(CV.id == body.cv_id, CV.user_id == user.id).first():
        raise HTTPException(status_code=404, detail="CV not found")
    if (
        body.expected_salary_min is not None
        and body.expected_salary_max is not None
        and body.expected_salary_min > body.expected_salary_max
    ):
        raise HTTPException(status_code=400, detail="expected_salary_min cannot exceed expected_salary_max")

    profile = db.query(PremiumSeekerProfile).filter(PremiumSeekerProfile.user_id == user.id).first()
    if not profile:
        profile = PremiumSeekerProfile(user_id=user.id, cv_id=body.cv_id)
        db.add(profile)

    for field, value in body.model_dump().items():
        setattr(profile, field, value)
    db.commit()
    db.refresh(profile)
    return PremiumProfileResponse.model_validate(profile)


@router.get("/profile", response_model=PremiumProfileResponse)
def get_premium_profile(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get the user's premium matching profile."""
    profile = db.query(PremiumSeekerProfile).filter(PremiumSeekerProfile.user_id == user.id).first()
    if not profile:
        raise HTTPException(status_code=404, detail="Premium profile not found")
    return PremiumProfileResponse.model_validate(profile)


@router.get("/matches", response_model=PremiumMatchListResponse)
def get_matches(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Premium matches, best first. Recruiters see matches for their postings."""
    side = "recruiter" if user.role == "recruiter" else "seeker"
    matches, total = list_matches(db, user.id, side, page, page_size)
    return PremiumMatchListResponse(
        matches=[_match_response(db, m, side) for m in matches],
        total=total,
        page=page,
        total_pages=math.ceil(total / page_size) if total else 0,
    )


@router.get("/matches/{match_id}", response_model=PremiumMatchResponse)
def get_match(match_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Match details; contact details appear once communication is enabled."""
    try:
        match, side = get_match_for_user(db, match_id, user.id)
    except MatchAccessError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _match_response(db, match, side, with_contact=True)
