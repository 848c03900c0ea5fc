"""
Premium matching engine.

Pairs active job postings with job seekers who opted in to premium matching.
Each pairing is scored 0-100 on seven weighted components; pairs scoring 70
or more become PremiumJobMatch rows. Neither side sees the other's contact
details until both have paid.
"""

import logging
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy.orm import Session

from atsboost.db.tables import (
    CV,
    Employer,
    JobPosting,
    PremiumJobMatch,
    PremiumSeekerProfile,
    SAProfile,
    utcnow,
)
from atsboost.services.notifications import create_notification

logger = logging.getLogger(__name__)

WEIGHTS = {
    "skills": 0.35,
    "experience": 0.15,
    "salary": 0.15,
    "location": 0.12,
    "industry": 0.10,
    "sa_context": 0.08,
    "availability": 0.05,
}

MATCH_THRESHOLD = 70

EXPERIENCE_LEVELS = {"entry": 1, "mid": 2, "senior": 3, "executive": 4}


@dataclass
class MatchAnalysis:
    skills_score: float
    experience_score: int
    salary_score: int
    location_score: int
    industry_score: int
    sa_context_score: int
    availability_score: int
    overall_score: int
    skills_matched: list[str] = field(default_factory=list)
    skills_gap: list[str] = field(default_factory=list)
    match_reasons: list[str] = field(default_factory=list)

    def breakdown(self) -> dict:
        return {
            "skills": round(self.skills_score),
            "experience": self.experience_score,
            "salary": self.salary_score,
            "location": self.location_score,
            "industry": self.industry_score,
            "sa_context": self.sa_context_score,
            "availability": self.availability_score,
        }


def analyze_skills(job: JobPosting, cv: CV | None) -> tuple[float, list[str], list[str]]:
    """Required skills are worth 80 points, preferred skills 20."""
    required = job.required_skills or []
    preferred = job.preferred_skills or []

    if not cv or not cv.content:
        return 0.0, [], list(required)

    cv_text = cv.content.lower()
    matched = []
    gap = []
    for skill in required:
        if skill.lower() in cv_text:
            matched.append(skill)
        else:
            gap.append(skill)
    for skill in preferred:
        if skill.lower() in cv_text and skill not in matched:
            matched.append(skill)

    required_matched = len([s for s in matched if s in required])
    preferred_matched = len([s for s in matched if s in preferred])

    required_score = (required_matched / len(required)) * 80 if required else 40
    preferred_score = (preferred_matched / len(preferred)) * 20 if preferred else 0

    return min(100.0, required_score + preferred_score), matched, gap


def analyze_experience(job_level: str | None, seeker_level: str | None) -> int:
    job_num = EXPERIENCE_LEVELS.get((job_level or "").lower(), 2)
    seeker_num = EXPERIENCE_LEVELS.get((seeker_level or "").lower(), 2)

    if job_num == seeker_num:
        return 100
    if abs(job_num - seeker_num) == 1:
        return 75
    return 50 if seeker_num > job_num else 25


def analyze_salary(job: JobPosting, seeker: PremiumSeekerProfile) -> int:
    if not job.salary_min or not seeker.expected_salary_min:
        return 50

    job_mid = (job.salary_min + (job.salary_max or job.salary_min)) / 2
    seeker_mid = (seeker.expected_salary_min + (seeker.expected_salary_max or seeker.expected_salary_min)) / 2
    difference = abs(job_mid - seeker_mid) / job_mid

    if difference <= 0.1:
        return 100
    if difference <= 0.2:
        return 80
    if difference <= 0.3:
        return 60
    return 30


def analyze_location(job: JobPosting, seeker: PremiumSeekerProfile) -> int:
    if job.is_remote and seeker.open_to_remote:
        return 100
    preferred_locations = seeker.preferred_locations or []
    if not job.location or not preferred_locations:
        return 50

    job_location = job.location.lower()
    job_province = (job.province or "").lower()
    for preferred in preferred_locations:
        preferred_lower = preferred.lower()
        if preferred_lower in job_location or job_location in preferred_lower:
            return 100
        if job_province and job_province in preferred_lower:
            return 80

    return 40 if seeker.open_to_relocation else 20


def analyze_industry(job_industry: str | None, seeker_industries: list[str] | None) -> int:
    if not seeker_industries:
        return 50
    if not job_industry:
        return 30

    job_lower = job_industry.lower()
    for industry in seeker_industries:
        industry_lower = industry.lower()
        if industry_lower == job_lower:
            return 100
        if industry_lower in job_lower or job_lower in industry_lower:
            return 80
    return 30


def analyze_sa_context(job: JobPosting, sa_profile: SAProfile | None) -> int:
    score = 50

    has_bbbee = bool(sa_profile and sa_profile.bbbee_status)
    if job.bbbee_requirement == "required" and has_bbbee:
        score += 30
    elif job.bbbee_requirement == "preferred" and has_bbbee:
        score += 15

    if job.nqf_level and sa_profile and sa_profile.nqf_level:
        if sa_profile.nqf_level >= job.nqf_level:
            score += 20
        elif sa_profile.nqf_level >= job.nqf_level - 1:
            score += 10

    return min(100, score)


def analyze_availability(seeker: PremiumSeekerProfile, today: date | None = None) -> int:
    if not seeker.available_from:
        return 70

    today = today or utcnow().date()
    days = (seeker.available_from - today).days
    if days <= 0:
        return 100
    if days <= 30:
        return 90
    if days <= 60:
        return 70
    return 40


def match_reasons(skills_score: float, matched: list[str], experience: int, salary: int, location: int) -> list[str]:
    reasons = []
    if skills_score >= 80:
        reasons.append(f"Strong skills match ({len(matched)} key skills aligned)")
    if experience >= 80:
        reasons.append("Experience level perfectly matches requirements")
    if salary >= 80:
        reasons.append("Salary expectations align well")
    if location >= 80:
        reasons.append("Location preferences match")
    return reasons


def analyze_match(
    job: JobPosting,
    seeker: PremiumSeekerProfile,
    cv: CV | None,
    sa_profile: SAProfile | None,
) -> MatchAnalysis:
    skills_score, matched, gap = analyze_skills(job, cv)
    experience = analyze_experience(job.experience_level, seeker.experience_level)
    salary = analyze_salary(job, seeker)
    location = analyze_location(job, seeker)
    industry = analyze_industry(job.industry, seeker.preferred_industries)
    sa_context = analyze_sa_context(job, sa_profile)
    availability = analyze_availability(seeker)

    overall = round(
        skills_score * WEIGHTS["skills"]
        + experience * WEIGHTS["experience"]
        + salary * WEIGHTS["salary"]
        + location * WEIGHTS["location"]
        + industry * WEIGHTS["industry"]
        + sa_context * WEIGHTS["sa_context"]
        + availability * WEIGHTS["availability"]
    )

    return MatchAnalysis(
        skills_score=skills_score,
        experience_score=experience,
        salary_score=salary,
        location_score=location,
        industry_score=industry,
        sa_context_score=sa_context,
        availability_score=availability,
        overall_score=overall,
        skills_matched=matched,
        skills_gap=gap,
        match_reasons=match_reasons(skills_score, matched, experience, salary, location),
    )


def run_matching_engine(db: Session) -> int:
    """Score every active job against every active premium seeker; returns the number of new matches."""
    jobs = (
        db.query(JobPosting, Employer)
        .join(Employer, JobPosting.employer_id == Employer.id)
        .filter(JobPosting.is_active.is_(True))
        .all()
    )
    seekers = db.query(PremiumSeekerProfile).filter(PremiumSeekerProfile.is_active.is_(True)).all()
    logger.info(f"Premium matching: {len(jobs)} jobs, {len(seekers)} job seekers")

    existing = {(m.job_id, m.seeker_id) for m in db.query(PremiumJobMatch.job_id, PremiumJobMatch.seeker_id).all()}
    seeker_ids = [s.user_id for s in seekers]
    sa_profiles = {p.user_id: p for p in db.query(SAProfile).filter(SAProfile.user_id.in_(seeker_ids)).all()}

    created = 0
    for job, employer in jobs:
        for seeker in seekers:
            if seeker.user_id == employer.user_id or (job.id, seeker.user_id) in existing:
                continue

            analysis = analyze_match(job, seeker, seeker.cv, sa_profiles.get(seeker.user_id))
            if analysis.overall_score < MATCH_THRESHOLD:
                continue

            match = PremiumJobMatch(
                job_id=job.id,
                seeker_id=seeker.user_id,
                recruiter_id=employer.user_id,
                cv_id=seeker.cv_id,
                match_score=analysis.overall_score,
                score_breakdown=analysis.breakdown(),
                match_reasons=analysis.match_reasons,
                matched_skills=analysis.skills_matched,
                skill_gaps=analysis.skills_gap,
            )
            db.add(match)
            db.flush()
            existing.add((job.id, seeker.user_id))
            created += 1

            _notify_match(db, match, job, employer)

    db.commit()
    logger.info(f"Premium matching complete: created {created} new matches")
    return created


def _notify_match(db: Session, match: PremiumJobMatch, job: JobPosting, employer: Employer) -> None:
    """Tell both sides about a new match without revealing who the other party is."""
    create_notification(
        db,
        match.seeker_id,
        "premium_match",
        "New Premium Job Match",
        f"You are a {match.match_score}% match for a {job.title} role in {job.location or 'South Africa'}. "
        "Activate the match to let the recruiter see your profile.",
        extra_data={"match_id": match.id},
        send_whatsapp=True,
    )
    create_notification(
        db,
        match.recruiter_id,
        "premium_match",
        "New Premium Candidate Match",
        f"A candidate is a {match.match_score}% match for your {job.title} posting.",
        extra_data={"match_id": match.id},
    )


def list_matches(db: Session, user_id: str, role: str, page: int = 1, page_size: int = 20) -> tuple[list[PremiumJobMatch], int]:
    """Matches for a seeker (role 'seeker') or recruiter, best first."""
    column = PremiumJobMatch.seeker_id if role == "seeker" else PremiumJobMatch.recruiter_id
    query = db.query(PremiumJobMatch).filter(column == user_id)
    total = query.count()
    matches = (
        query.order_by(PremiumJobMatch.match_score.desc(), PremiumJobMatch.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return matches, total


class MatchAccessError(Exception):
    """The user is neither the seeker nor the recruiter of a match."""


def get_match_for_user(db: Session, match_id: str, user_id: str) -> tuple[PremiumJobMatch, str]:
    """Return (match, side) where side is 'seeker' or 'recruiter'."""
    match = db.query(PremiumJobMatch).filter(PremiumJobMatch.id == match_id).first()
    if not match:
        raise MatchAccessError("Match not found")
    if match.seeker_id == user_id:
        return match, "seeker"
    if match.recruiter_id == user_id:
        return match, "recruiter"
    raise MatchAccessError("Match not found")
