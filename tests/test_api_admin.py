"""Admin endpoints."""

from atsboost.db import ATSScore
from atsboost.services import payments


def test_admin_only(client, headers, recruiter_headers):
    for path in ("/admin/stats", "/admin/users", "/admin/cvs", "/admin/revenue"):
        assert client.get(path, headers=headers).status_code == 403
        assert client.get(path, headers=recruiter_headers).status_code == 403
        assert client.get(path).status_code == 401


def test_stats(client, admin_headers, db, cv):
    db.add(ATSScore(cv_id=cv.id, score=71))
    db.commit()

    data = client.get("/admin/stats", headers=admin_headers).json()
    assert data["total_users"] == 2
    assert data["total_cvs"] == 1
    assert data["total_ats_scores"] == 1
    assert data["average_score"] == 71.0
    assert data["active_users"] == 0
    assert data["latest_cvs"][0]["id"] == cv.id


def test_list_and_search_users(client, admin_headers, user, recruiter):
    data = client.get("/admin/users", headers=admin_headers).json()
    assert data["total"] == 3

    found = client.get("/admin/users", params={"search": "acme"}, headers=admin_headers).json()
    assert [u["id"] for u in found["users"]] == [recruiter.id]

    paged = client.get("/admin/users", params={"page_size": 2, "page": 2}, headers=admin_headers).json()
    assert len(paged["users"]) == 1
    assert paged["total_pages"] == 2


def test_update_user(client, admin_headers, admin, user, db):
    response = client.put(f"/admin/users/{user.id}", json={"role": "recruiter", "is_active": False}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["role"] == "recruiter"
    assert not response.json()["is_active"]

    assert client.put(f"/admin/users/{admin.id}", json={"role": "user"}, headers=admin_headers).status_code == 400
    assert client.put(f"/admin/users/{admin.id}", json={"is_active": False}, headers=admin_headers).status_code == 400
    assert client.put(f"/admin/users/{user.id}", json={"role": "superuser"}, headers=admin_headers).status_code == 422
    assert client.put("/admin/users/missing", json={"role": "user"}, headers=admin_headers).status_code == 404


def test_list_cvs(client, admin_headers, cv):
    data = client.get("/admin/cvs", headers=admin_headers).json()
    assert data["total"] == 1
    assert data["cvs"][0]["id"] == cv.id


def test_confirm_refund_and_revenue(client, admin_headers, db, user, cv):
    payment, _ = payments.create_job_seeker_payment(db, user, cv.id)
    other, _ = payments.create_job_seeker_payment(db, user, cv.id)

    confirmed = client.post(f"/admin/payments/{payment.transaction_id}/confirm", headers=admin_headers)
    assert confirmed.json()["status"] == "completed"
    client.post(f"/admin/payments/{other.transaction_id}/confirm", headers=admin_headers)
    assert client.post("/admin/payments/ATS_0_NOPE00/confirm", headers=admin_headers).status_code == 404

    revenue = client.get("/admin/revenue", headers=admin_headers).json()
    assert revenue["total_revenue"] == 100.0
    assert revenue["completed_payments"] == 2
    assert revenue["by_type"] == {"job_seeker_match": 100.0}

    too_much = client.post(f"/admin/payments/{payment.id}/refund", json={"reason": "Oops", "amount": 500}, headers=admin_headers)
    assert too_much.status_code == 400

    refunded = client.post(f"/admin/payments/{payment.id}/refund", json={"reason": "Duplicate"}, headers=admin_headers)
    assert refunded.json()["status"] == "refunded"
    assert refunded.json()["refunded_at"] is not None
    assert client.post(f"/admin/payments/{payment.id}/refund", json={"reason": "Again"}, headers=admin_headers).status_code == 400
    assert client.post("/admin/payments/missing/refund", json={"reason": "x"}, headers=admin_headers).status_code == 404

    revenue = client.get("/admin/revenue", headers=admin_headers).json()
    assert revenue["total_revenue"] == 50.0
    assert revenue["refunded_amount"] == 50.0


def test_seed_plans(client, admin_headers):
    first = client.post("/admin/plans/seed", headers=admin_headers).json()
    assert [p["name"] for p in first] == ["Free", "Essential", "Premium", "Professional"]
    assert client.post("/admin/plans/seed", headers=admin_headers).json() == []
