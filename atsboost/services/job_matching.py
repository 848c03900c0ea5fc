"""
Job recommendations for a CV, weighted for the South African market.

Each component scores 0..1; the match score is the weighted sum as a
percentage. Jobs are ranked by that single number.
"""

import re
from dataclasses import asdict, dataclass, field

from sqlalchemy import select
from sqlalchemy.orm import Session

from atsboost.db.tables import CV, Employer, JobMatch, JobPosting, SAProfile
from atsboost.services.sa_context import (
    SA_MATCHING_KEYWORDS,
    SKILL_KEYWORDS,
    find_keywords,
    get_province_cities,
)

WEIGHTS = {
    "skills": 0.30,
    "experience": 0.15,
    "recency": 0.10,  # carried for reporting; not scored
    "industry": 0.15,
    "location": 0.10,
    "sa_keywords": 0.10,
    "bbbee": 0.05,
    "nqf": 0.05,
}

EXPERIENCE_CATEGORIES = [
    ("entry", ["entry", "junior", "graduate", "intern", "trainee"]),
    ("mid", ["mid", "intermediate", "experienced"]),
    ("senior", ["senior", "manager", "head", "lead", "expert", "principal"]),
]

NQF_PATTERN = re.compile(r"NQF\s+level\s+(\d+)", re.IGNORECASE)


@dataclass
class MatchDetails:
    skills_match: float = 0.0
    skills_matched: list[str] = field(default_factory=list)
    industry_match: float = 0.0
    location_match: float = 0.0
    sa_context_match: float = 0.0
    sa_keywords_found: list[str] = field(default_factory=list)
    experience_match: float = 0.0
    bbbee_relevance: float = 0.0
    nqf_match: float = 0.0

    def total(self) -> float:
        return (
            self.skills_match * WEIGHTS["skills"]
            + self.industry_match * WEIGHTS["industry"]
            + self.location_match * WEIGHTS["location"]
            + self.sa_context_match * WEIGHTS["sa_keywords"]
            + self.experience_match * WEIGHTS["experience"]
            + self.bbbee_relevance * WEIGHTS["bbbee"]
            + self.nqf_match * WEIGHTS["nqf"]
        )


def _skills_component(cv_text: str, job: JobPosting) -> tuple[float, list[str]]:
    required = job.required_skills or []
    if required:
        matched = [s for s in required if s.lower() in cv_text]
        return len(matched) / len(required), matched

    job_text = (job.description or "").lower()
    matched = [s for s in SKILL_KEYWORDS if s in job_text and s in cv_text]
    return (0.5 if matched else 0.0), matched


def _industry_component(cv: CV, cv_text: str, industry: str | None, preferences: list[str]) -> float:
    if not industry:
        return 0.0
    industry_lower = industry.lower()
    if cv.target_industry and cv.target_industry.lower() == industry_lower:
        return 1.0
    if industry in preferences:
        return 0.9
    if industry_lower in cv_text:
        return 0.7

    words = industry_lower.split()
    matching = [w for w in words if len(w) > 3 and w in cv_text]
    if matching:
        return 0.5 * (len(matching) / len(words))
    return 0.0


def _location_component(cv_text: str, location: str | None, province: str | None, sa_profile: SAProfile | None) -> float:
    if not location:
        return 0.0
    if province and province in location:
        return 1.0
    if sa_profile and sa_profile.city and sa_profile.city in location:
        return 0.9
    if location.lower() in cv_text:
        return 0.7
    if any(city.lower() in cv_text for city in get_province_cities(location)):
        return 0.5
    return 0.0


def _sa_context_component(cv_text: str) -> tuple[float, list[str]]:
    found = find_keywords(cv_text, SA_MATCHING_KEYWORDS)
    count = len(found)
    if count > 10:
        return 1.0, found
    if count > 5:
        return 0.8, found
    if count > 2:
        return 0.5, found
    if count > 0:
        return 0.3, found
    return 0.0, found


def experience_category(text: str | None) -> str | None:
    if not text:
        return None
    lowered = text.lower()
    for category, keywords in EXPERIENCE_CATEGORIES:
        if any(k in lowered for k in keywords):
            return category
    return None


def _experience_component(job: JobPosting, cv: CV) -> float:
    job_category = experience_category(job.experience_level)
    cv_category = experience_category(cv.target_position)
    if not job_category or not cv_category:
        return 0.0
    if job_category == cv_category:
        return 1.0
    order = [c for c, _ in EXPERIENCE_CATEGORIES]
    distance = abs(order.index(job_category) - order.index(cv_category))
    return 0.5 if distance == 1 else 0.1


def _bbbee_component(cv_text: str, employer: Employer, sa_profile: SAProfile | None) -> float:
    if not employer.bbbee_level:
        return 0.0
    if "b-bbee" in cv_text or "bbbee" in cv_text or "black economic empowerment" in cv_text:
        return 1.0
    if sa_profile and sa_profile.bbbee_status:
        return 0.9
    return 0.0


def _nqf_component(job: JobPosting, sa_profile: SAProfile | None) -> float:
    match = NQF_PATTERN.search(job.description or "")
    job_level = int(match.group(1)) if match else job.nqf_level
    user_level = sa_profile.nqf_level if sa_profile else None
    if not job_level or not user_level:
        return 0.0
    if user_level >= job_level:
        return 1.0
    return 0.5 * (user_level / job_level)


def calculate_match(
    cv: CV,
    job: JobPosting,
    employer: Employer,
    sa_profile: SAProfile | None = None,
    province: str | None = None,
    industries: list[str] | None = None,
) -> MatchDetails:
    """Score one CV against one job posting."""
    cv_text = (cv.content or "").lower()
    location = employer.location or job.location

    skills, matched = _skills_component(cv_text, job)
    sa_score, sa_found = _sa_context_component(cv_text)

    return MatchDetails(
        skills_match=skills,
        skills_matched=matched,
        industry_match=_industry_component(cv, cv_text, job.industry or employer.industry, industries or []),
        location_match=_location_component(cv_text, location, province, sa_profile),
        sa_context_match=sa_score,
        sa_keywords_found=sa_found,
        experience_match=_experience_component(job, cv),
        bbbee_relevance=_bbbee_component(cv_text, employer, sa_profile),
        nqf_match=_nqf_component(job, sa_profile),
    )


def match_score(details: MatchDetails) -> int:
    return round(details.total() * 100)


def get_recommendations(
    db: Session,
    cv: CV,
    limit: int = 10,
    include_applied: bool = False,
    province: str | None = None,
    industries: list[str] | None = None,
) -> list[dict]:
    """
    Rank active job postings for a CV.

    Province and industry preferences fall back to the user's SA profile.
    Jobs the user already has a match record for (applied, shortlisted,
    rejected or otherwise) are left out unless include_applied.
    """
    sa_profile = None
    if cv.user_id:
        sa_profile = db.query(SAProfile).filter(SAProfile.user_id == cv.user_id).first()

    if province is None and sa_profile:
        province = sa_profile.province
    if industries is None and sa_profile:
        industries = sa_profile.preferred_industries or []

    query = (
        db.query(JobPosting, Employer)
        .join(Employer, JobPosting.employer_id == Employer.id)
        .filter(JobPosting.is_active.is_(True))
    )
    if not include_applied and cv.user_id:
        applied = select(JobMatch.job_id).where(JobMatch.user_id == cv.user_id)
        query = query.filter(JobPosting.id.not_in(applied))

    recommendations = []
    for job, employer in query.all():
        details = calculate_match(cv, job, employer, sa_profile, province, industries)
        recommendations.append(
            {
                "job_id": job.id,
                "title": job.title,
                "company": employer.company_name,
                "location": employer.location or job.location,
                "employment_type": job.employment_type,
                "salary_min": job.salary_min,
                "salary_max": job.salary_max,
                "posted_at": job.created_at,
                "match_score": match_score(details),
                "match_details": asdict(details),
            }
        )

    recommendations.sort(key=lambda r: r["match_score"], reverse=True)
    return recommendations[:limit]
