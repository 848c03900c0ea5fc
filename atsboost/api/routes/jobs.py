"""Job posting, application and recommendation endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from atsboost.api.deps import get_current_user, require_recruiter
from atsboost.api.schemas import (
    ApplyRequest,
    JobCreate,
    JobListResponse,
    JobMatchResponse,
    JobResponse,
    JobUpdate,
    RecommendationListResponse,
    RecommendationResponse,
)
from atsboost.db import CV, Employer, JobMatch, JobPosting, SAProfile, User, get_db
from atsboost.services.job_matching import calculate_match, get_recommendations, match_score
from atsboost.services.plan_features import can_access_feature
from atsboost.services.sa_context import SA_INDUSTRIES, get_industry_template, normalize_province

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_owned_job(db: Session, job_id: str, user: User) -> JobPosting:
    job = db.query(JobPosting).filter(JobPosting.id == job_id).first()
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    if job.employer.user_id != user.id and not user.is_admin:
        raise HTTPException(status_code=403, detail="Not your job posting")
    return job


def _check_salary_range(salary_min: int | None, salary_max: int | None) -> None:
    if salary_min is not None and salary_max is not None and salary_min > salary_max:
        raise HTTPException(status_code=400, detail="salary_min cannot exceed salary_max")


@router.get("", response_model=JobListResponse)
def list_jobs(
    industry: str | None = None,
    location: str | None = None,
    employment_type: str | None = None,
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    """List active job postings, newest first."""
    query = db.query(JobPosting).filter(JobPosting.is_active.is_(True))
    if industry:
        query = query.filter(JobPosting.industry.ilike(f"%{industry}%"))
    if location:
        query = query.filter(JobPosting.location.ilike(f"%{location}%"))
    if employment_type:
        query = query.filter(JobPosting.employment_type == employment_type)

    jobs = query.order_by(JobPosting.created_at.desc()).limit(limit).all()
    return JobListResponse(jobs=[JobResponse.model_validate(j) for j in jobs])


@router.post("", response_model=JobResponse, status_code=201)
def create_job(
    body: JobCreate,
    user: User = Depends(require_recruiter),
    db: Session = Depends(get_db),
):
    """Post a job for the recruiter's company."""
    employer = db.query(Employer).filter(Employer.user_id == user.id).first()
    if not employer:
        raise HTTPException(status_code=400, detail="Create an employer profile first")
    _check_salary_range(body.salary_min, body.salary_max)

    data = body.model_dump()
    if data["province"]:
        data["province"] = normalize_province(data["province"]) or data["province"]

    job = JobPosting(employer_id=employer.id, **data)
    db.add(job)
    db.commit()
    db.refresh(job)
    logger.info(f"Job {job.id} posted by employer {employer.id}")
    return JobResponse.model_validate(job)


@router.get("/recommendations", response_model=RecommendationListResponse)
def recommendations(
    cv_id: str | None = None,
    limit: int = Query(10, ge=1, le=50),
    include_applied: bool = False,
    province: str | None = None,
    industries: str | None = Query(None, description="Comma-separated industries"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Active jobs ranked for one of the user's CVs (latest CV by default)."""
    if not can_access_feature(db, user.id, "job_matching"):
        raise HTTPException(status_code=403, detail="Job matching requires a Premium or Professional plan")

    query = db.query(CV).filter(CV.user_id == user.id)
    if cv_id:
        cv = query.filter(CV.id == cv_id).first()
    else:
        cv = query.order_by(CV.created_at.desc()).first()
    if not cv:
        raise HTTPException(status_code=404, detail="CV not found")

    industry_list = [i.strip() for i in industries.split(",") if i.strip()] if industries else None
    results = get_recommendations(
        db,
        cv,
        limit=limit,
        include_applied=include_applied,
        province=province,
        industries=industry_list,
    )
    return RecommendationListResponse(
        cv_id=cv.id,
        recommendations=[RecommendationResponse(**r) for r in results],
    )


@router.get("/templates/{industry}")
def industry_template(industry: str):
    """Search template (keywords, locations, salary range) for an industry."""
    if industry not in SA_INDUSTRIES:
        raise HTTPException(status_code=404, detail=f"Unknown industry: {industry}")
    return get_industry_template(industry)


@router.get("/{job_id}", response_model=JobResponse)
def get_job(job_id: str, db: Session = Depends(get_db)):
    """Get a job posting."""
    job = db.query(JobPosting).filter(JobPosting.id == job_id).first()
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return JobResponse.model_validate(job)


@router.put("/{job_id}", response_model=JobResponse)
def update_job(
    job_id: str,
    body: JobUpdate,
    user: User = Depends(require_recruiter),
    db: Session = Depends(get_db),
):
    """Update a job posting of the recruiter's company."""
    job = _get_owned_job(db, job_id, user)
    changes = body.model_dump(exclude_unset=True)
    _check_salary_range(changes.get("salary_min", job.salary_min), changes.get("salary_max", job.salary_max))
    if changes.get("province"):
        changes["province"] = normalize_province(changes["province"]) or changes["province"]

    for field, value in changes.items():
        setattr(job, field, value)
    db.commit()
    db.refresh(job)
    return JobResponse.model_validate(job)


@router.delete("/{job_id}")
def delete_job(
    job_id: str,
    user: User = Depends(require_recruiter),
    db: Session = Depends(get_db),
):
    """Close a job posting. Postings with applications are deactivated instead of deleted."""
    job = _get_owned_job(db, job_id, user)
    if db.query(JobMatch).filter(JobMatch.job_id == job.id).first():
        job.is_active = False
        db.commit()
        return {"message": "Job deactivated"}

    db.delete(job)
    db.commit()
    return {"message": "Job deleted"}


@router.post("/{job_id}/apply", response_model=JobMatchResponse, status_code=201)
def apply_to_job(
    job_id: str,
    body: ApplyRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Apply to a job with one of the user's CVs."""
    job = db.query(JobPosting).filter(JobPosting.id == job_id, JobPosting.is_active.is_(True)).first()
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")

    cv = db.query(CV).filter(CV.id == body.cv_id, CV.user_id == user.id).first()
    if not cv:
        raise HTTPException(status_code=404, detail="CV not found")

    existing = db.query(JobMatch).filter(JobMatch.job_id == job.id, JobMatch.user_id == user.id).first()
    if existing:
        raise HTTPException(status_code=409, detail="You have already applied to this job")

    sa_profile = db.query(SAProfile).filter(SAProfile.user_id == user.id).first()
    details = calculate_match(
        cv,
        job,
        job.employer,
        sa_profile,
        province=sa_profile.province if sa_profile else None,
        industries=sa_profile.preferred_industries if sa_profile else None,
    )

    match = JobMatch(job_id=job.id, cv_id=cv.id, user_id=user.id, match_score=match_score(details))
    db.add(match)
    db.commit()
    db.refresh(match)
    logger.info(f"User {user.id} applied to job {job.id} ({match.match_score}%)")
    return JobMatchResponse.model_validate(match)
