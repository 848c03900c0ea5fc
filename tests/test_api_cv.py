"""CV endpoints."""

import pytest

from atsboost.config import settings
from atsboost.db import CV, ATSScore
from atsboost.tools import ai_analyzer
from atsboost.tools.documents import DOCX_MIME
from atsboost.tools.errors import AnalysisError
from atsboost.utils import parse_analysis_response
from tests.conftest import SAMPLE_CV, auth_headers, make_user
from tests.test_documents import make_blank_pdf, make_docx


def upload(client, headers=None, **form):
    return client.post(
        "/cv/upload",
        files={"file": ("lerato.docx", make_docx(), DOCX_MIME)},
        data=form,
        headers=headers or {},
    )


def test_upload_docx(client, headers, user):
    response = upload(client, headers, title="Finance CV", target_industry="Finance & Banking")
    assert response.status_code == 201
    data = response.json()
    assert data["user_id"] == user.id
    assert data["file_type"] == DOCX_MIME
    assert data["title"] == "Finance CV"
    assert not data["is_guest"]

    detail = client.get(f"/cv/{data['id']}", headers=headers).json()
    assert "Lerato Khumalo" in detail["content"]


def test_guest_upload(client):
    response = upload(client)
    assert response.status_code == 201
    assert response.json()["is_guest"]
    assert response.json()["user_id"] is None


def test_upload_rejections(client, headers, monkeypatch):
    text_file = client.post("/cv/upload", files={"file": ("cv.txt", b"plain text", "text/plain")}, headers=headers)
    assert text_file.status_code == 415

    blank = client.post("/cv/upload", files={"file": ("cv.pdf", make_blank_pdf(), "application/pdf")}, headers=headers)
    assert blank.status_code == 400

    monkeypatch.setattr(settings, "max_upload_size", 100)
    assert upload(client, headers).status_code == 413


def test_list_latest_and_delete(client, headers, db, cv):
    assert [c["id"] for c in client.get("/cv", headers=headers).json()["cvs"]] == [cv.id]
    assert client.get("/cv/latest", headers=headers).json()["id"] == cv.id

    assert client.delete(f"/cv/{cv.id}", headers=headers).status_code == 200
    assert db.query(CV).count() == 0
    assert client.get("/cv/latest", headers=headers).status_code == 404


def test_other_users_cannot_see_a_cv(client, db, cv, admin_headers):
    stranger = make_user(db, username="stranger", email="stranger@example.co.za")
    assert client.get(f"/cv/{cv.id}", headers=auth_headers(stranger)).status_code == 404
    assert client.get(f"/cv/{cv.id}").status_code == 404
    assert client.get(f"/cv/{cv.id}", headers=admin_headers).status_code == 200


def test_ats_score_uses_the_free_scan(client, headers, db, cv):
    cv.job_description = "Python and Kubernetes engineer"
    db.commit()

    response = client.get(f"/cv/{cv.id}/ats-score", headers=headers)
    assert response.status_code == 200
    data = response.json()
    assert data["plan"] == "Free"
    assert data["limited"] is True
    assert data["scans_remaining"] == 0
    assert len(data["improvements"]) <= 1
    assert "kubernetes" in data["job_fit"]["missing_keywords"]
    assert db.query(ATSScore).count() == 1

    # A stored score is returned without using another scan
    again = client.get(f"/cv/{cv.id}/ats-score", headers=headers)
    assert again.status_code == 200
    assert again.json()["score"] == data["score"]

    second = upload(client, headers).json()
    blocked = client.get(f"/cv/{second['id']}/ats-score", headers=headers)
    assert blocked.status_code == 403


def test_guest_ats_score(client):
    cv_id = upload(client).json()["id"]
    data = client.get(f"/cv/{cv_id}/ats-score").json()
    assert 0 <= data["score"] <= 100
    assert data["scans_remaining"] is None


def test_analyze_text(client):
    response = client.post(
        "/cv/analyze-text",
        json={"content": SAMPLE_CV, "target_industry": "Information Technology", "job_description": "Python, SQL"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["nqf_levels"] == [7]
    assert data["job_fit"]["score"] > 0

    assert client.post("/cv/analyze-text", json={"content": "   "}).status_code == 400


def test_deep_analysis_unavailable(client, headers, cv):
    assert client.post(f"/cv/{cv.id}/deep-analysis", headers=headers).status_code == 503
    assert client.post(f"/cv/{cv.id}/deep-analysis").status_code == 401


@pytest.fixture
def fake_ai(monkeypatch):
    calls = []

    def analyze(cv_text, job_description=None):
        calls.append(cv_text)
        return parse_analysis_response(
            '{"overall_score": 74, "skill_score": 30, "format_score": 30, "sa_score": 14,'
            ' "strengths": ["Clear structure"], "improvements": ["Quantify achievements"],'
            ' "skills_identified": ["Python"], "south_african_context": {"locations": ["Johannesburg"]}}'
        )

    monkeypatch.setattr(settings, "deepseek_api_key", "sk-test")
    monkeypatch.setattr(ai_analyzer, "analyze_cv_with_ai", analyze)
    ai_analyzer.clear_cache()
    yield calls
    ai_analyzer.clear_cache()


def test_deep_analysis_is_cached(client, headers, cv, fake_ai):
    first = client.post(f"/cv/{cv.id}/deep-analysis", headers=headers)
    assert first.status_code == 200
    data = first.json()
    assert data["overall_score"] == 74
    assert data["rating"] == "Good"
    assert data["south_african_context"]["locations"] == ["Johannesburg"]
    assert not data["cached"]

    second = client.post(f"/cv/{cv.id}/deep-analysis", headers=headers)
    assert second.json()["cached"]
    assert len(fake_ai) == 1


def test_deep_analysis_provider_error(client, headers, cv, monkeypatch):
    def fail(cv_text, job_description=None):
        raise AnalysisError("AI provider returned an invalid analysis")

    monkeypatch.setattr(settings, "deepseek_api_key", "sk-test")
    monkeypatch.setattr(ai_analyzer, "analyze_cv_with_ai", fail)
    ai_analyzer.clear_cache()
    assert client.post(f"/cv/{cv.id}/deep-analysis", headers=headers).status_code == 502
