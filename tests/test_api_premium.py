"""Premium matching and payment endpoints, end to end."""

from atsboost.db import PaymentTransaction
from atsboost.tools import payfast


def notify(client, transaction_id: str, status: str = "COMPLETE"):
    data = {
        "m_payment_id": transaction_id,
        "pf_payment_id": "1089250",
        "payment_status": status,
        "custom_str1": transaction_id,
        "custom_str2": "",
        "name_last": "",
    }
    data["signature"] = payfast.generate_itn_signature(data)
    return client.post("/payments/notify", data=data)


def opt_in(client, headers, cv):
    return client.post(
        "/premium/profile",
        json={
            "cv_id": cv.id,
            "experience_level": "senior",
            "expected_salary_min": 50000,
            "expected_salary_max": 60000,
            "preferred_locations": ["Johannesburg"],
            "preferred_industries": ["Information Technology"],
        },
        headers=headers,
    )


def test_premium_profile(client, headers, cv):
    assert client.get("/premium/profile", headers=headers).status_code == 404

    response = opt_in(client, headers, cv)
    assert response.status_code == 200
    assert response.json()["experience_level"] == "senior"

    update = client.post("/premium/profile", json={"cv_id": cv.id, "is_active": False}, headers=headers)
    assert update.json()["id"] == response.json()["id"]
    assert not client.get("/premium/profile", headers=headers).json()["is_active"]


def test_premium_profile_validation(client, headers, cv):
    assert client.post("/premium/profile", json={"cv_id": "missing"}, headers=headers).status_code == 404
    reversed_salary = {"cv_id": cv.id, "expected_salary_min": 9000, "expected_salary_max": 1000}
    assert client.post("/premium/profile", json=reversed_salary, headers=headers).status_code == 400
    assert client.post("/premium/profile", json={"cv_id": cv.id, "experience_level": "guru"}, headers=headers).status_code == 422


def test_match_payment_flow(client, db, headers, recruiter_headers, admin_headers, user, cv, job):
    opt_in(client, headers, cv)
    assert client.post("/admin/matching/run", headers=admin_headers).json() == {"created": 1}

    seeker_view = client.get("/premium/matches", headers=headers).json()
    assert seeker_view["total"] == 1
    assert seeker_view["total_pages"] == 1
    match = seeker_view["matches"][0]
    assert match["job_title"] == "Senior Python Developer"
    assert match["status"] == "pending_payment"
    assert client.get("/premium/matches", headers=recruiter_headers).json()["total"] == 1

    # Recruiters cannot pay before the job seeker
    early = client.post("/payments/recruiter", json={"match_id": match["id"]}, headers=recruiter_headers)
    assert early.status_code == 400

    seeker_payment = client.post("/payments/job-seeker", json={"cv_id": cv.id, "match_id": match["id"]}, headers=headers)
    assert seeker_payment.status_code == 201
    assert seeker_payment.json()["payment_url"].startswith(payfast.SANDBOX_URL)
    transaction_id = seeker_payment.json()["payment"]["transaction_id"]

    assert notify(client, transaction_id).text == "OK"
    assert client.get(f"/payments/{transaction_id}", headers=headers).json()["status"] == "completed"
    assert client.get(f"/premium/matches/{match['id']}", headers=recruiter_headers).json()["contact"] is None

    recruiter_payment = client.post("/payments/recruiter", json={"match_id": match["id"]}, headers=recruiter_headers)
    assert recruiter_payment.status_code == 201
    notify(client, recruiter_payment.json()["payment"]["transaction_id"])

    recruiter_view = client.get(f"/premium/matches/{match['id']}", headers=recruiter_headers).json()
    assert recruiter_view["communication_enabled"]
    assert recruiter_view["contact"]["email"] == user.email

    seeker_detail = client.get(f"/premium/matches/{match['id']}", headers=headers).json()
    assert seeker_detail["contact"]["company_name"] == "Acme Digital"

    assert client.get(f"/premium/matches/{match['id']}", headers=admin_headers).status_code == 404
    assert db.query(PaymentTransaction).filter(PaymentTransaction.status == "completed").count() == 2


def test_notify_rejects_bad_signature(client, headers, cv):
    created = client.post("/payments/job-seeker", json={"cv_id": cv.id}, headers=headers).json()
    transaction_id = created["payment"]["transaction_id"]
    forged = {"m_payment_id": transaction_id, "payment_status": "COMPLETE", "signature": "0" * 32}
    assert client.post("/payments/notify", data=forged).status_code == 400

    # The webhook alias accepts the same notifications
    data = {"m_payment_id": transaction_id, "payment_status": "COMPLETE"}
    data["signature"] = payfast.generate_signature(data)
    assert client.post("/webhooks/payfast", data=data).status_code == 200


def test_payment_history_and_privacy(client, headers, recruiter_headers, admin_headers, cv):
    created = client.post("/payments/job-seeker", json={"cv_id": cv.id}, headers=headers).json()
    transaction_id = created["payment"]["transaction_id"]

    history = client.get("/payments/history", headers=headers).json()["payments"]
    assert [p["transaction_id"] for p in history] == [transaction_id]

    assert client.get(f"/payments/{transaction_id}", headers=recruiter_headers).status_code == 404
    assert client.get(f"/payments/{transaction_id}", headers=admin_headers).status_code == 200
    assert client.post("/payments/job-seeker", json={"cv_id": "missing"}, headers=headers).status_code == 404


def test_subscription_payment(client, headers, admin_headers):
    client.post("/admin/plans/seed", headers=admin_headers)
    plans = {p["name"]: p for p in client.get("/plans").json()["plans"]}
    assert [p["name"] for p in client.get("/plans").json()["plans"]] == ["Free", "Essential", "Premium", "Professional"]

    assert client.post("/payments/subscription", json={"plan_id": plans["Free"]["id"]}, headers=headers).status_code == 400
    created = client.post("/payments/subscription", json={"plan_id": plans["Premium"]["id"]}, headers=headers)
    assert created.status_code == 201
    assert created.json()["payment"]["amount"] == 100.0

    notify(client, created.json()["payment"]["transaction_id"])
    me = client.get("/plans/me", headers=headers).json()
    assert me["plan"] == "Premium"
