"""Premium matching engine."""

from datetime import date, timedelta

import pytest

from atsboost.db import Notification, PremiumJobMatch, PremiumSeekerProfile, SAProfile
from atsboost.services.premium_matching import (
    MatchAccessError,
    analyze_availability,
    analyze_experience,
    analyze_match,
    analyze_salary,
    get_match_for_user,
    list_matches,
    run_matching_engine,
)


@pytest.fixture
def seeker(db, user, cv):
    profile = PremiumSeekerProfile(
        user_id=user.id,
        cv_id=cv.id,
        experience_level="senior",
        expected_salary_min=50000,
        expected_salary_max=60000,
        preferred_locations=["Johannesburg"],
        preferred_industries=["Information Technology"],
    )
    db.add(profile)
    db.add(SAProfile(user_id=user.id, bbbee_status="Level 1", nqf_level=7))
    db.commit()
    db.refresh(profile)
    return profile


def test_analyze_match(db, seeker, job, cv):
    sa_profile = db.query(SAProfile).filter(SAProfile.user_id == seeker.user_id).first()
    analysis = analyze_match(job, seeker, cv, sa_profile)

    assert analysis.skills_score == 90
    assert analysis.skills_matched == ["Python", "SQL", "React", "PostgreSQL"]
    assert analysis.skills_gap == []
    assert analysis.experience_score == 100
    assert analysis.salary_score == 100
    assert analysis.location_score == 100
    assert analysis.industry_score == 100
    assert analysis.sa_context_score == 85
    assert analysis.availability_score == 70
    assert analysis.overall_score == 94
    assert "Salary expectations align well" in analysis.match_reasons


def test_component_edges(job, seeker):
    assert analyze_experience("entry", "executive") == 50
    assert analyze_experience("executive", "entry") == 25
    assert analyze_experience(None, None) == 100

    seeker.expected_salary_min = 90000
    seeker.expected_salary_max = None
    assert analyze_salary(job, seeker) == 30
    seeker.expected_salary_min = None
    assert analyze_salary(job, seeker) == 50

    today = date(2026, 3, 1)
    seeker.available_from = today + timedelta(days=45)
    assert analyze_availability(seeker, today) == 70
    seeker.available_from = today - timedelta(days=1)
    assert analyze_availability(seeker, today) == 100


def test_run_matching_engine_creates_matches_once(db, seeker, job, recruiter):
    assert run_matching_engine(db) == 1

    match = db.query(PremiumJobMatch).one()
    assert match.seeker_id == seeker.user_id
    assert match.recruiter_id == recruiter.id
    assert match.status == "pending_payment"
    assert not match.communication_enabled

    seeker_note = db.query(Notification).filter(Notification.user_id == seeker.user_id).one()
    recruiter_note = db.query(Notification).filter(Notification.user_id == recruiter.id).one()
    assert seeker_note.extra_data == {"match_id": match.id}
    # The recruiter is not told who the candidate is
    assert "Thandi" not in recruiter_note.message

    assert run_matching_engine(db) == 0


def test_low_scores_are_not_matched(db, seeker, job):
    job.required_skills = ["Kubernetes", "Go", "Terraform"]
    job.preferred_skills = []
    job.salary_min = 150000
    job.salary_max = 200000
    job.experience_level = "entry"
    job.industry = "Mining"
    job.location = "Kimberley"
    db.commit()
    assert run_matching_engine(db) == 0


def test_match_access(db, seeker, job, recruiter, admin):
    run_matching_engine(db)
    match = db.query(PremiumJobMatch).one()

    assert get_match_for_user(db, match.id, seeker.user_id) == (match, "seeker")
    assert get_match_for_user(db, match.id, recruiter.id) == (match, "recruiter")
    with pytest.raises(MatchAccessError):
        get_match_for_user(db, match.id, admin.id)

    matches, total = list_matches(db, recruiter.id, "recruiter")
    assert total == 1 and matches == [match]
    assert list_matches(db, recruiter.id, "seeker") == ([], 0)
