"""CV upload and analysis endpoints."""

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from sqlalchemy.orm import Session

from atsboost.api.deps import get_current_user, get_optional_user
from atsboost.api.limiter import limiter
from atsboost.api.schemas import (
    AnalyzeTextRequest,
    AnalyzeTextResponse,
    ATSScoreResponse,
    CVDetailResponse,
    CVListResponse,
    CVResponse,
    DeepAnalysisResponse,
)
from atsboost.config import settings
from atsboost.db import CV, ATSScore, User, get_db
from atsboost.services import cv_service
from atsboost.services.ats_scoring import analyze_cv, analyze_job_fit, apply_plan_limits
from atsboost.services.plan_features import (
    get_scans_remaining,
    get_user_plan_features,
    record_scan,
)
from atsboost.tools import ai_analyzer
from atsboost.tools.errors import AnalysisError, DocumentParseError, UnsupportedFileType

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_accessible_cv(db: Session, cv_id: str, user: User | None) -> CV:
    """Owners reach their CVs; guest CVs are reachable by id."""
    cv = db.query(CV).filter(CV.id == cv_id).first()
    if not cv:
        raise HTTPException(status_code=404, detail="CV not found")
    if cv.user_id is not None and (user is None or (cv.user_id != user.id and not user.is_admin)):
        raise HTTPException(status_code=404, detail="CV not found")
    return cv


def _score_response(db: Session, cv: CV, score: ATSScore, user: User | None) -> ATSScoreResponse:
    features = get_user_plan_features(db, user.id if user else None)
    report = analyze_cv(cv.content, cv.target_industry)
    data = {
        "score": score.score,
        "skills_score": score.skills_score,
        "context_score": score.context_score,
        "format_score": score.format_score,
        "rating": score.rating,
        "strengths": score.strengths or [],
        "improvements": score.improvements or [],
        "issues": score.issues or [],
        "skills_found": score.skills_found or [],
        "sa_keywords_found": score.sa_keywords_found or [],
        "bbbee_detected": score.bbbee_detected,
        "nqf_detected": score.nqf_detected,
        "keyword_recommendations": report.keyword_recommendations,
    }
    data = apply_plan_limits(data, features)
    job_fit = analyze_job_fit(cv.content, cv.job_description) if cv.job_description else None

    return ATSScoreResponse(
        cv_id=cv.id,
        job_fit=job_fit,
        plan=features["name"],
        scans_remaining=get_scans_remaining(db, user.id if user else None),
        created_at=score.created_at,
        **data,
    )


@router.post("/upload", response_model=CVResponse, status_code=201)
@limiter.limit("10/minute")
async def upload_cv(
    request: Request,
    file: UploadFile = File(...),
    title: str | None = Form(None),
    target_position: str | None = Form(None),
    target_industry: str | None = Form(None),
    job_description: str | None = Form(None),
    db: Session = Depends(get_db),
    user: User | None = Depends(get_optional_user),
):
    """Upload a CV (PDF or DOCX). Guests may upload without an account."""
    content = await file.read()
    if len(content) > settings.max_upload_size:
        raise HTTPException(
            status_code=413,
            detail=f"File too large (max {settings.max_upload_size // (1024 * 1024)}MB)",
        )

    try:
        cv = cv_service.create_cv(
            db,
            user,
            file.filename or "cv",
            file.content_type,
            content,
            title=title,
            target_position=target_position,
            target_industry=target_industry,
            job_description=job_description,
        )
    except UnsupportedFileType as e:
        raise HTTPException(status_code=415, detail=str(e))
    except DocumentParseError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return CVResponse.model_validate(cv)


@router.get("", response_model=CVListResponse)
def list_cvs(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """List the user's CVs, newest first."""
    cvs = db.query(CV).filter(CV.user_id == user.id).order_by(CV.created_at.desc()).all()
    return CVListResponse(cvs=[CVResponse.model_validate(cv) for cv in cvs])


@router.get("/latest", response_model=CVDetailResponse)
def latest_cv(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get the user's most recent CV."""
    cv = db.query(CV).filter(CV.user_id == user.id).order_by(CV.created_at.desc()).first()
    if not cv:
        raise HTTPException(status_code=404, detail="No CV uploaded yet")
    return CVDetailResponse.model_validate(cv)


@router.post("/analyze-text", response_model=AnalyzeTextResponse)
@limiter.limit("20/minute")
def analyze_text(request: Request, body: AnalyzeTextRequest):
    """Analyse pasted CV text without storing it."""
    if not body.content.strip():
        raise HTTPException(status_code=400, detail="CV content is required")

    report = analyze_cv(body.content, body.target_industry)
    job_fit = analyze_job_fit(body.content, body.job_description) if body.job_description else None
    return AnalyzeTextResponse(**report.to_dict(), job_fit=job_fit)


@router.get("/{cv_id}", response_model=CVDetailResponse)
def get_cv(
    cv_id: str,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_optional_user),
):
    """Get a CV with its extracted text."""
    return CVDetailResponse.model_validate(_get_accessible_cv(db, cv_id, user))


@router.delete("/{cv_id}")
def delete_cv(
    cv_id: str,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_optional_user),
):
    """Delete a CV and its score."""
    cv = _get_accessible_cv(db, cv_id, user)
    db.delete(cv)
    db.commit()
    return {"message": "CV deleted"}


@router.get("/{cv_id}/ats-score", response_model=ATSScoreResponse)
def get_ats_score(
    cv_id: str,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_optional_user),
):
    """
    ATS score for a CV.

    The first request analyses the CV and counts as a scan against the
    user's plan; later requests return the stored score.
    """
    cv = _get_accessible_cv(db, cv_id, user)
    if cv.ats_score:
        return _score_response(db, cv, cv.ats_score, user)

    user_id = user.id if user else None
    remaining = get_scans_remaining(db, user_id)
    if remaining is not None and remaining <= 0:
        raise HTTPException(
            status_code=403,
            detail="You have used all CV scans for this period. Upgrade your plan for more scans.",
        )

    score = cv_service.score_cv(db, cv)
    record_scan(db, user_id)
    cv_service.notify_score(db, user_id, cv, score)
    logger.info(f"Scored CV {cv.id}: {score.score}")

    return _score_response(db, cv, score, user)


@router.post("/{cv_id}/deep-analysis", response_model=DeepAnalysisResponse)
@limiter.limit("5/minute")
def deep_analysis(
    request: Request,
    cv_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """AI analysis of a CV for the South African market."""
    cv = _get_accessible_cv(db, cv_id, user)
    if not ai_analyzer.is_available():
        raise HTTPException(status_code=503, detail="AI analysis is not configured")

    try:
        result, cached = ai_analyzer.analyze_cv_cached(cv.id, cv.content, cv.job_description)
    except AnalysisError as e:
        raise HTTPException(status_code=502, detail=f"AI analysis failed: {e}")

    if cv.ats_score and not cached:
        cv.ats_score.ai_analysis = result
        db.commit()

    return DeepAnalysisResponse(cv_id=cv.id, cached=cached, **result)
