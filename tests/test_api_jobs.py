"""Employer, job posting and application endpoints."""

from atsboost.db import JobMatch, JobPosting
from tests.test_plan_features import subscribe

NEW_JOB = {
    "title": "Data Analyst",
    "description": "Reporting and dashboards",
    "location": "Cape Town",
    "province": "western cape",
    "industry": "Financial Services",
    "experience_level": "mid",
    "required_skills": ["SQL", "Excel"],
    "salary_min": 30000,
    "salary_max": 40000,
}


def test_become_an_employer(client, headers, user, db):
    response = client.post(
        "/employers", json={"company_name": "Mokoena Consulting", "location": "Sandton"}, headers=headers
    )
    assert response.status_code == 201
    db.refresh(user)
    assert user.role == "recruiter"

    assert client.post("/employers", json={"company_name": "Again"}, headers=headers).status_code == 409
    assert client.get("/employers/me", headers=headers).json()["company_name"] == "Mokoena Consulting"

    updated = client.put("/employers/me", json={"company_name": "Mokoena Digital", "bbbee_level": 1}, headers=headers)
    assert updated.json()["company_name"] == "Mokoena Digital"
    assert updated.json()["bbbee_level"] == 1


def test_employer_not_found(client, headers):
    assert client.get("/employers/me", headers=headers).status_code == 404


def test_post_job(client, recruiter_headers, employer):
    response = client.post("/jobs", json=NEW_JOB, headers=recruiter_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["employer_id"] == employer.id
    assert data["province"] == "Western Cape"
    assert data["is_active"]


def test_post_job_checks(client, headers, recruiter_headers, employer):
    assert client.post("/jobs", json=NEW_JOB, headers=headers).status_code == 403
    bad_salary = {**NEW_JOB, "salary_min": 50000, "salary_max": 10000}
    assert client.post("/jobs", json=bad_salary, headers=recruiter_headers).status_code == 400
    bad_bbbee = {**NEW_JOB, "bbbee_requirement": "sometimes"}
    assert client.post("/jobs", json=bad_bbbee, headers=recruiter_headers).status_code == 422


def test_recruiter_without_employer(client, recruiter_headers):
    assert client.post("/jobs", json=NEW_JOB, headers=recruiter_headers).status_code == 400


def test_list_and_filter_jobs(client, job, db):
    db.add(JobPosting(employer_id=job.employer_id, title="Closed", is_active=False))
    db.commit()

    assert [j["id"] for j in client.get("/jobs").json()["jobs"]] == [job.id]
    assert client.get("/jobs", params={"industry": "information"}).json()["jobs"]
    assert client.get("/jobs", params={"location": "Durban"}).json()["jobs"] == []
    assert client.get(f"/jobs/{job.id}").json()["title"] == "Senior Python Developer"
    assert client.get("/jobs/missing").status_code == 404


def test_update_job(client, job, recruiter_headers, headers):
    response = client.put(f"/jobs/{job.id}", json={"salary_max": 70000, "is_remote": True}, headers=recruiter_headers)
    assert response.status_code == 200
    assert response.json()["salary_max"] == 70000
    assert response.json()["salary_min"] == 50000
    assert response.json()["is_remote"]

    assert client.put(f"/jobs/{job.id}", json={"salary_max": 100}, headers=recruiter_headers).status_code == 400
    assert client.put(f"/jobs/{job.id}", json={"title": "Mine"}, headers=headers).status_code == 403


def test_apply_to_job(client, job, cv, headers, db):
    response = client.post(f"/jobs/{job.id}/apply", json={"cv_id": cv.id}, headers=headers)
    assert response.status_code == 201
    assert response.json()["status"] == "applied"
    assert 0 <= response.json()["match_score"] <= 100

    assert client.post(f"/jobs/{job.id}/apply", json={"cv_id": cv.id}, headers=headers).status_code == 409
    assert client.post(f"/jobs/{job.id}/apply", json={"cv_id": "missing"}, headers=headers).status_code == 404
    assert db.query(JobMatch).count() == 1


def test_delete_job(client, job, cv, headers, recruiter_headers, db):
    client.post(f"/jobs/{job.id}/apply", json={"cv_id": cv.id}, headers=headers)
    assert client.delete(f"/jobs/{job.id}", headers=recruiter_headers).json() == {"message": "Job deactivated"}
    db.refresh(job)
    assert not job.is_active
    assert client.post(f"/jobs/{job.id}/apply", json={"cv_id": cv.id}, headers=headers).status_code == 404

    fresh = client.post("/jobs", json=NEW_JOB, headers=recruiter_headers).json()
    assert client.delete(f"/jobs/{fresh['id']}", headers=recruiter_headers).json() == {"message": "Job deleted"}


def test_recommendations_need_job_matching(client, headers, user, cv, job, db):
    assert client.get("/jobs/recommendations", headers=headers).status_code == 403

    subscribe(db, user, "Premium")
    response = client.get("/jobs/recommendations", params={"industries": "Information Technology, Finance"}, headers=headers)
    assert response.status_code == 200
    data = response.json()
    assert data["cv_id"] == cv.id
    assert data["recommendations"][0]["job_id"] == job.id
    assert data["recommendations"][0]["company"] == "Acme Digital"

    assert client.get("/jobs/recommendations", params={"cv_id": "missing"}, headers=headers).status_code == 404


def test_industry_template(client):
    template = client.get("/jobs/templates/Information Technology").json()
    assert template["industry"] == "Information Technology"
    assert client.get("/jobs/templates/Underwater Basket Weaving").status_code == 404
