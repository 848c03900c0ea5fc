"""Shared fixtures: in-memory database, API client and users."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from atsboost.api.app import app
from atsboost.api.limiter import limiter
from atsboost.config import settings
from atsboost.db import CV, Base, Employer, JobPosting, User, get_db
from atsboost.services import security
from atsboost.services.security import create_access_token, hash_password

SAMPLE_CV = """Thandi Mokoena
Senior Software Developer | Johannesburg, Gauteng, South Africa
Email: thandi@example.co.za

PROFESSIONAL SUMMARY
Software developer with 8 years of experience in software development, web development
and project management. Strong leadership, communication and teamwork. B-BBEE Level 1.

SKILLS
Python, JavaScript, React, SQL, PostgreSQL, Excel, database design, reporting, analysis,
problem solving, stakeholder management, training, agile implementation.

EDUCATION
BSc Computer Science, University of the Witwatersrand (NQF Level 7)
Matric, National Senior Certificate

LANGUAGES
English, Afrikaans, Zulu (multilingual)
"""


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    monkeypatch.setattr(security, "BCRYPT_ROUNDS", 4)


@pytest.fixture(autouse=True)
def external_services_off(monkeypatch):
    monkeypatch.setattr(settings, "sendgrid_api_key", "")
    monkeypatch.setattr(settings, "twilio_account_sid", "")
    monkeypatch.setattr(settings, "twilio_auth_token", "")
    monkeypatch.setattr(settings, "twilio_whatsapp_number", "")
    monkeypatch.setattr(settings, "deepseek_api_key", "")
    monkeypatch.setattr(settings, "payfast_passphrase", "")
    monkeypatch.setattr(settings, "payfast_validate_itn", False)


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        limiter.enabled = True


def make_user(db, username="thandi", email="thandi@example.co.za", password="password123", role="user", name="Thandi Mokoena"):
    user = User(username=username, email=email, password=hash_password(password), name=name, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email, user.role)}"}


@pytest.fixture
def user(db):
    return make_user(db)


@pytest.fixture
def headers(user):
    return auth_headers(user)


@pytest.fixture
def admin(db):
    return make_user(db, username="admin", email="admin@example.co.za", role="admin", name="Admin")


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def recruiter(db):
    return make_user(db, username="recruiter", email="hr@acme.co.za", role="recruiter", name="Sipho Dlamini")


@pytest.fixture
def recruiter_headers(recruiter):
    return auth_headers(recruiter)


@pytest.fixture
def employer(db, recruiter):
    employer = Employer(
        user_id=recruiter.id,
        company_name="Acme Digital",
        industry="Information Technology",
        location="Johannesburg, Gauteng",
        bbbee_level=2,
    )
    db.add(employer)
    db.commit()
    db.refresh(employer)
    return employer


@pytest.fixture
def job(db, employer):
    job = JobPosting(
        employer_id=employer.id,
        title="Senior Python Developer",
        description="Build web platforms. Degree at NQF Level 7 required.",
        location="Johannesburg",
        province="Gauteng",
        industry="Information Technology",
        experience_level="senior",
        required_skills=["Python", "SQL", "React"],
        preferred_skills=["PostgreSQL", "Docker"],
        salary_min=50000,
        salary_max=60000,
        nqf_level=7,
        bbbee_requirement="preferred",
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


@pytest.fixture
def cv(db, user):
    cv = CV(
        user_id=user.id,
        file_name="thandi.pdf",
        file_type="application/pdf",
        file_size=2048,
        content=SAMPLE_CV,
        title="Main CV",
        target_position="Senior Developer",
        target_industry="Information Technology",
    )
    db.add(cv)
    db.commit()
    db.refresh(cv)
    return cv
