from datetime import datetime, timedelta, timezone

import jwt

from conftest import bearer, register


def _user_id(client, admin_headers, email="a@x.com"):
    response = client.get("/api/admin/search", params={"email": email}, headers=admin_headers)
    assert response.status_code == 200
    return response.json()[0]["id"]


def test_root_banner(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.text == "Olympic Platform API is running."


def test_full_onboarding_scenario(client, admin_headers):
    response = register(client, email="a@x.com", name="a")
    assert response.status_code == 200
    assert response.json()["status"] == "step1"
    token = response.json()["token"]
    user_id = _user_id(client, admin_headers)

    response = client.post("/api/admin/set-pin", json={"userId": user_id, "pin": "12345"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == {"message": "PIN set"}

    response = client.post("/api/users/verify-pin", json={"pin": "12345"}, headers=bearer(token))
    assert response.status_code == 200
    assert response.json() == {"message": "PIN verified", "status": "step2"}

    profile = client.get("/api/users/profile", headers=bearer(token)).json()["user"]
    assert profile["approved_steps"] == ["pin"]
    assert profile["has_pin"] is False

    response = client.post("/api/users/select-plan", json={"plan": "gold"}, headers=bearer(token))
    assert response.status_code == 200
    assert response.json()["status"] == "step2"
    assert client.get("/api/users/profile", headers=bearer(token)).json()["user"]["plan"] == "gold"

    response = client.post("/api/admin/approve", json={"userId": user_id, "step": "plan"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Approved plan", "status": "step3"}

    # The token still says step1; the handler must use the stored status
    response = client.post("/api/users/complete-idcard", headers=bearer(token))
    assert response.status_code == 200
    assert response.json()["status"] == "step3"

    response = client.post("/api/admin/approve", json={"userId": user_id, "step": "idcard"}, headers=admin_headers)
    assert response.json() == {"message": "Approved idcard", "status": "completed"}

    body = client.get("/api/users/profile", headers=bearer(token)).json()
    assert body["user"]["status"] == "completed"
    assert body["user"]["approved_steps"] == ["pin", "plan", "idcard"]
    assert body["progress"]["step_number"] == 4
    assert body["progress"]["message"] == "Step 4 of 4"
    assert "password" not in body["user"]
    assert "pin" not in body["user"]


def test_wrong_pin_leaves_status_unchanged(client, admin_headers):
    token = register(client).json()["token"]
    user_id = _user_id(client, admin_headers)
    client.post("/api/admin/set-pin", json={"userId": user_id, "pin": "12345"}, headers=admin_headers)

    for _ in range(3):
        response = client.post("/api/users/verify-pin", json={"pin": "54321"}, headers=bearer(token))
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_PIN"

    assert client.get("/api/users/profile", headers=bearer(token)).json()["user"]["status"] == "step1"

    # Unlimited attempts: the right PIN still works afterwards
    response = client.post("/api/users/verify-pin", json={"pin": "12345"}, headers=bearer(token))
    assert response.status_code == 200


def test_wrong_length_pin_is_invalid_pin(client, admin_headers):
    token = register(client).json()["token"]
    user_id = _user_id(client, admin_headers)
    client.post("/api/admin/set-pin", json={"userId": user_id, "pin": "12345"}, headers=admin_headers)

    for attempt in ("1234", "123456"):
        response = client.post("/api/users/verify-pin", json={"pin": attempt}, headers=bearer(token))
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_PIN"

    assert client.get("/api/users/profile", headers=bearer(token)).json()["user"]["status"] == "step1"


def test_pin_is_consumed_after_use(client, admin_headers):
    token = register(client).json()["token"]
    user_id = _user_id(client, admin_headers)
    client.post("/api/admin/set-pin", json={"userId": user_id, "pin": "12345"}, headers=admin_headers)

    assert client.post("/api/users/verify-pin", json={"pin": "12345"}, headers=bearer(token)).status_code == 200
    assert client.post("/api/users/verify-pin", json={"pin": "12345"}, headers=bearer(token)).status_code == 400


def test_verify_pin_without_issued_pin(client):
    token = register(client).json()["token"]
    response = client.post("/api/users/verify-pin", json={"pin": "12345"}, headers=bearer(token))
    assert response.status_code == 400


def test_select_plan_forbidden_before_pin(client):
    token = register(client).json()["token"]
    response = client.post("/api/users/select-plan", json={"plan": "gold"}, headers=bearer(token))
    assert response.status_code == 403
    assert response.json()["code"] == "INVALID_TRANSITION"


def test_select_plan_forbidden_after_plan_approved(client, admin_headers):
    token = register(client).json()["token"]
    user_id = _user_id(client, admin_headers)
    client.post("/api/admin/approve", json={"userId": user_id, "step": "plan"}, headers=admin_headers)

    response = client.post("/api/users/select-plan", json={"plan": "silver"}, headers=bearer(token))
    assert response.status_code == 403

    client.post("/api/admin/approve", json={"userId": user_id, "step": "idcard"}, headers=admin_headers)
    response = client.post("/api/users/select-plan", json={"plan": "silver"}, headers=bearer(token))
    assert response.status_code == 403


def test_complete_idcard_forbidden_before_step3(client):
    token = register(client).json()["token"]
    response = client.post("/api/users/complete-idcard", headers=bearer(token))
    assert response.status_code == 403


def test_duplicate_registration_differing_in_case(client):
    assert register(client, email="a@x.com").status_code == 200
    response = register(client, email="A@X.com")
    assert response.status_code == 409
    assert response.json()["code"] == "DUPLICATE_EMAIL"


def test_login_returns_current_status(client, admin_headers):
    register(client, email="a@x.com", password="secret123")
    user_id = _user_id(client, admin_headers)
    client.post("/api/admin/approve", json={"userId": user_id, "step": "pin"}, headers=admin_headers)

    response = client.post("/api/users/login", json={"email": "A@x.com", "password": "secret123"})
    assert response.status_code == 200
    assert response.json()["status"] == "step2"
    assert "is_admin" not in response.json()


def test_login_rejects_bad_credentials(client):
    register(client, email="a@x.com", password="secret123")
    response = client.post("/api/users/login", json={"email": "a@x.com", "password": "nope"})
    assert response.status_code == 401
    response = client.post("/api/users/login", json={"email": "ghost@x.com", "password": "secret123"})
    assert response.status_code == 401


def test_login_accepts_admin_pair(client):
    response = client.post("/api/users/login", json={"email": "admin@olympic.test", "password": "admin-secret"})
    assert response.status_code == 200
    assert response.json()["is_admin"] is True
    assert "status" not in response.json()


def test_admin_login_rejects_applicant_credentials(client):
    register(client, email="a@x.com", password="secret123")
    response = client.post("/api/admin/login", json={"email": "a@x.com", "password": "secret123"})
    assert response.status_code == 401


def test_legacy_plaintext_login_rehashes(client, db):
    import asyncio

    asyncio.run(db["users"].insert_one(
        {"name": "old", "email": "old@x.com", "password": "legacy-pass", "status": "step1", "approvedSteps": []}
    ))

    response = client.post("/api/users/login", json={"email": "old@x.com", "password": "legacy-pass"})
    assert response.status_code == 200

    stored = asyncio.run(db["users"].find_one({"email": "old@x.com"}))
    assert stored["password"] != "legacy-pass"
    assert stored["password"].startswith("$pbkdf2-sha256$")


def test_approve_twice_does_not_duplicate_steps(client, admin_headers):
    token = register(client).json()["token"]
    user_id = _user_id(client, admin_headers)
    for _ in range(2):
        response = client.post("/api/admin/approve", json={"userId": user_id, "step": "pin"}, headers=admin_headers)
        assert response.status_code == 200

    assert client.get("/api/users/profile", headers=bearer(token)).json()["user"]["approved_steps"] == ["pin"]


def test_approve_unknown_step_is_validation_error(client, admin_headers):
    register(client)
    user_id = _user_id(client, admin_headers)
    response = client.post("/api/admin/approve", json={"userId": user_id, "step": "passport"}, headers=admin_headers)
    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_approve_missing_user(client, admin_headers):
    response = client.post(
        "/api/admin/approve",
        json={"userId": "64b7f0c2a1b2c3d4e5f60718", "step": "plan"},
        headers=admin_headers
    )
    assert response.status_code == 404


def test_set_pin_requires_five_characters(client, admin_headers):
    register(client)
    user_id = _user_id(client, admin_headers)
    response = client.post("/api/admin/set-pin", json={"userId": user_id, "pin": "123"}, headers=admin_headers)
    assert response.status_code == 422


def test_admin_list_users(client, admin_headers):
    register(client, email="a@x.com")
    register(client, email="b@x.com")
    response = client.get("/api/admin/users", headers=admin_headers)
    assert response.status_code == 200
    assert {u["email"] for u in response.json()} == {"a@x.com", "b@x.com"}


def test_admin_list_users_pages_explicitly(client, admin_headers):
    for i in range(5):
        register(client, email=f"user{i}@x.com")

    everyone = client.get("/api/admin/users", headers=admin_headers).json()
    assert len(everyone) == 5

    first = client.get("/api/admin/users", params={"limit": 2}, headers=admin_headers).json()
    rest = client.get("/api/admin/users", params={"skip": 2}, headers=admin_headers).json()
    assert [u["id"] for u in first] == [u["id"] for u in everyone[:2]]
    assert [u["id"] for u in rest] == [u["id"] for u in everyone[2:]]

    response = client.get("/api/admin/users", params={"limit": 0}, headers=admin_headers)
    assert response.status_code == 422


def test_applicant_token_on_admin_route_is_forbidden(client):
    token = register(client).json()["token"]
    for method, path in [("get", "/api/admin/users"), ("get", "/api/admin/search?email=a@x.com")]:
        response = getattr(client, method)(path, headers=bearer(token))
        assert response.status_code == 403
    response = client.post(
        "/api/admin/approve", json={"userId": "x", "step": "plan"}, headers=bearer(token)
    )
    assert response.status_code == 403


def test_admin_token_on_applicant_route_is_forbidden(client, admin_headers):
    response = client.get("/api/users/profile", headers=admin_headers)
    assert response.status_code == 403


def test_missing_or_bad_token_is_unauthorized(client):
    assert client.get("/api/admin/users").status_code == 401
    assert client.post("/api/users/verify-pin", json={"pin": "12345"}).status_code == 401
    assert client.get("/api/users/profile", headers={"Authorization": "Bearer garbage"}).status_code == 401
    assert client.get("/api/users/profile", headers={"Authorization": "Basic abc"}).status_code == 401


def test_expired_token_is_unauthorized(client):
    past = datetime.now(timezone.utc) - timedelta(minutes=1)
    token = jwt.encode({"role": "admin", "exp": int(past.timestamp())}, "test-signing-secret", algorithm="HS256")
    response = client.get("/api/admin/users", headers=bearer(token))
    assert response.status_code == 401
    assert response.json()["code"] == "TOKEN_EXPIRED"


def test_auth_is_checked_before_body_validation(client):
    response = client.post("/api/admin/approve", json={"step": "nonsense"})
    assert response.status_code == 401


def test_liveness_and_readiness_without_database(client):
    from app.db import mongo

    assert client.get("/live").json() == {"status": "alive"}

    mongo.use_database(None)
    response = client.get("/ready")
    assert response.status_code == 503
    assert response.json()["reason"] == "database_unavailable"
    assert client.get("/health").json()["checks"]["database"] == "unhealthy"


def test_process_time_header(client):
    assert "x-process-time" in client.get("/live").headers
