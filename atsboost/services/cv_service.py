"""Storing CVs and their ATS scores."""

import logging

from sqlalchemy.orm import Session

from atsboost.db.tables import CV, ATSScore, SAProfile, User
from atsboost.services.ats_scoring import analyze_cv
from atsboost.tools import whatsapp
from atsboost.tools.documents import extract_cv_text
from atsboost.tools.errors import DocumentParseError

logger = logging.getLogger(__name__)


def create_cv(
    db: Session,
    user: User | None,
    filename: str,
    content_type: str | None,
    content: bytes,
    title: str | None = None,
    target_position: str | None = None,
    target_industry: str | None = None,
    job_description: str | None = None,
    upload_method: str = "web",
) -> CV:
    """
    Extract the text of an uploaded document and store it as a CV.

    Raises UnsupportedFileType for anything but PDF/DOCX and
    DocumentParseError when no text can be read.
    """
    mime, text = extract_cv_text(filename, content_type, content)
    if not text.strip():
        raise DocumentParseError("Document appears to be empty or unreadable")

    cv = CV(
        user_id=user.id if user else None,
        file_name=filename,
        file_type=mime,
        file_size=len(content),
        content=text,
        title=title,
        target_position=target_position,
        target_industry=target_industry,
        job_description=job_description,
        is_guest=user is None,
        upload_method=upload_method,
    )
    db.add(cv)
    db.commit()
    db.refresh(cv)
    logger.info(f"Stored CV {cv.id} ({mime}, {len(content)} bytes, via {upload_method})")
    return cv


def score_cv(db: Session, cv: CV) -> ATSScore:
    """Run the local analysis on a CV and persist the result."""
    report = analyze_cv(cv.content, cv.target_industry)
    score = ATSScore(
        cv_id=cv.id,
        score=report.score,
        skills_score=report.skills_score,
        context_score=report.context_score,
        format_score=report.format_score,
        rating=report.rating,
        strengths=report.strengths,
        improvements=report.improvements,
        issues=report.issues,
        skills_found=report.skills_found,
        sa_keywords_found=report.sa_keywords_found,
        bbbee_detected=report.bbbee_detected,
        nqf_detected=report.nqf_detected,
    )
    db.add(score)
    db.commit()
    db.refresh(score)
    return score


def notify_score(db: Session, user_id: str | None, cv: CV, score: ATSScore) -> bool:
    """Send the 'analysis complete' WhatsApp message to a verified number."""
    if not user_id:
        return False
    profile = db.query(SAProfile).filter(SAProfile.user_id == user_id).first()
    if not profile or not profile.whatsapp_verified or not profile.whatsapp_notifications:
        return False
    return whatsapp.send_cv_analysis_notification(profile.whatsapp_number, score.score, cv.title or cv.file_name)
