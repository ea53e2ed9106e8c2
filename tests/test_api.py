from __future__ import annotations

import pytest

from src.pension_system.pension_system.main import create_app


@pytest.fixture
def client(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=container)
    return app.test_client()


def _login(client, email, password, path="/api/auth/login"):
    resp = client.post(path, json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return {"Authorization": f"Bearer {resp.get_json()['token']}"}


@pytest.fixture
def holder_headers(client, holder):
    return _login(client, "rahim@example.com", "secret1", path="/api/pension-holder/login")


@pytest.fixture
def manager_headers(client, manager):
    return _login(client, "karim@pension.gov", "manager123")


@pytest.fixture
def admin_headers(client, admin):
    return _login(client, "admin@pension.gov", "admin123")


APPLICATION = {
    "personalInfo": {"fullName": "Rahim Uddin", "nid": "1234567890", "phone": "01711111111"},
    "serviceInfo": {
        "employeeId": "EMP-001",
        "department": "Finance",
        "designation": "Officer",
        "joiningDate": "2000-01-01",
        "lastBasicSalary": 50000,
        "serviceYears": 25,
    },
    "bankInfo": {"bankName": "Sonali Bank", "accountNumber": "0011223344"},
    "nomineeInfo": {"nomineeName": "Amina", "nomineeRelation": "spouse"},
}


def test_health(client):
    resp = client.get("/api/health")

    assert resp.status_code == 200
    assert resp.get_json()["status"] == "OK"


def test_unknown_route_returns_json_404(client):
    resp = client.get("/api/nope")

    assert resp.status_code == 404
    assert resp.get_json() == {"message": "Route not found"}


def test_register_returns_token_and_user(client):
    resp = client.post(
        "/api/pension-holder/register",
        json={
            "name": "Salma Begum",
            "email": "salma@example.com",
            "password": "secret1",
            "nid": "9876543210",
            "phone": "+8801712345678",
            "employeeId": "EMP-777",
            "department": "Health",
            "designation": "Nurse",
            "joiningDate": "1999-05-01",
        },
    )

    body = resp.get_json()
    assert resp.status_code == 201
    assert body["token"]
    assert body["user"]["role"] == "pension-holder"
    assert body["user"]["joiningDate"] == "1999-05-01"


def test_register_reports_every_invalid_field(client):
    resp = client.post("/api/pension-holder/register", json={"name": "A", "email": "bad", "password": "123"})

    body = resp.get_json()
    assert resp.status_code == 400
    assert body["message"] == "Validation failed"
    fields = {e["field"] for e in body["errors"]}
    assert {"name", "email", "password", "nid", "phone", "employeeId", "joiningDate"} <= fields


def test_missing_token_is_401(client):
    resp = client.get("/api/pension-holder/applications")

    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Access denied. No token provided."


def test_invalid_token_is_401(client):
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})

    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid token."


def test_wrong_role_is_403_with_roles(client, holder_headers):
    resp = client.get("/api/manager/applications", headers=holder_headers)

    body = resp.get_json()
    assert resp.status_code == 403
    assert body["requiredRoles"] == ["manager"]
    assert body["userRole"] == "pension-holder"


def test_me_returns_public_view(client, admin_headers):
    body = client.get("/api/auth/me", headers=admin_headers).get_json()

    assert body["user"]["email"] == "admin@pension.gov"
    assert "password_hash" not in body["user"]
    assert "passwordHash" not in body["user"]


def test_locked_login_is_423(client, holder):
    for _ in range(5):
        resp = client.post("/api/pension-holder/login", json={"email": "rahim@example.com", "password": "nope"})
        assert resp.status_code == 401

    resp = client.post("/api/pension-holder/login", json={"email": "rahim@example.com", "password": "secret1"})
    assert resp.status_code == 423


def test_application_lifecycle(client, holder_headers, manager_headers):
    resp = client.post("/api/pension-holder/applications", json=APPLICATION, headers=holder_headers)
    assert resp.status_code == 201
    app_id = resp.get_json()["application"]["_id"]

    resp = client.post("/api/pension-holder/applications", json=APPLICATION, headers=holder_headers)
    assert resp.status_code == 400

    listing = client.get("/api/manager/applications", headers=manager_headers).get_json()
    assert listing[0]["pensionHolderName"] == "Rahim Uddin"

    resp = client.put(f"/api/manager/applications/{app_id}/approve", json={}, headers=manager_headers)
    details = resp.get_json()["application"]["pensionDetails"]
    assert resp.status_code == 200
    assert details["monthlyPension"] == 27500
    assert details["gratuity"] == 1250000
    assert details["providentFund"] == 1800000

    resp = client.put(
        f"/api/manager/applications/{app_id}/reject",
        json={"comments": "Changing my mind now"},
        headers=manager_headers,
    )
    assert resp.status_code == 400

    stats = client.get("/api/manager/stats", headers=manager_headers).get_json()
    assert stats["approved"] == 1


def test_certificate_pdf_only_for_approved(client, holder_headers, manager_headers):
    app_id = client.post("/api/pension-holder/applications", json=APPLICATION, headers=holder_headers).get_json()[
        "application"
    ]["_id"]

    resp = client.get(f"/api/pension-holder/applications/{app_id}/pdf", headers=holder_headers)
    assert resp.status_code == 404
    assert resp.get_json()["message"] == "Approved application not found"

    client.put(f"/api/manager/applications/{app_id}/approve", json={}, headers=manager_headers)
    resp = client.get(f"/api/pension-holder/applications/{app_id}/pdf", headers=holder_headers)
    assert resp.status_code == 200
    assert resp.mimetype == "application/pdf"
    assert resp.data.startswith(b"%PDF")


def test_invalid_application_payload_lists_nested_fields(client, holder_headers):
    resp = client.post(
        "/api/pension-holder/applications",
        json={"personalInfo": {"fullName": "R"}, "serviceInfo": {"lastBasicSalary": "abc"}},
        headers=holder_headers,
    )

    fields = {e["field"] for e in resp.get_json()["errors"]}
    assert resp.status_code == 400
    assert {"personalInfo.fullName", "personalInfo.nid", "serviceInfo.employeeId", "serviceInfo.lastBasicSalary"} <= fields


def test_complaint_red_flags_disable_manager(client, holder_headers, admin_headers, manager):
    for i in range(3):
        resp = client.post(
            "/api/pension-holder/complaints",
            json={
                "subject": f"Misconduct report {i}",
                "description": "The manager asked for an unofficial payment.",
                "category": "manager-misconduct",
                "targetManager": "KARIM",
            },
            headers=holder_headers,
        )
        assert resp.status_code == 201
        complaint_id = resp.get_json()["complaint"]["_id"]

        resp = client.put(
            f"/api/admin/complaints/{complaint_id}/resolve",
            json={"resolution": "Confirmed by the audit team.", "issueRedFlag": True, "redFlagReason": "Bribery"},
            headers=admin_headers,
        )
        assert resp.status_code == 200

    flagged = client.get("/api/admin/flagged-managers", headers=admin_headers).get_json()
    assert flagged[0]["redFlags"] == 3
    assert flagged[0]["isActive"] is False

    resp = client.post("/api/auth/login", json={"email": "karim@pension.gov", "password": "manager123"})
    assert resp.status_code == 423

    stats = client.get("/api/admin/stats", headers=admin_headers).get_json()
    assert stats["redFlagsIssued"] == 3
    assert stats["disabledManagers"] == 1

    listing = client.get("/api/admin/complaints", headers=admin_headers).get_json()
    assert listing[0]["targetManagerName"] == "Karim Manager"
    assert listing[0]["resolvedByName"] == "System Admin"


def test_admin_user_management(client, admin_headers, admin):
    resp = client.post(
        "/api/admin/users",
        json={"name": "New Manager", "email": "new@pension.gov", "password": "secret1", "role": "manager"},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    user_id = resp.get_json()["user"]["id"]

    resp = client.put(f"/api/admin/users/{user_id}/status", json={"isActive": False}, headers=admin_headers)
    assert resp.get_json()["user"]["isActive"] is False

    resp = client.put(f"/api/admin/users/{user_id}/status", json={"isActive": "no"}, headers=admin_headers)
    assert resp.status_code == 400

    resp = client.delete(f"/api/admin/users/{admin.user_id}", headers=admin_headers)
    assert resp.status_code == 403
    assert resp.get_json()["message"] == "Cannot delete admin users"

    assert client.delete(f"/api/admin/users/{user_id}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/admin/users/{user_id}", headers=admin_headers).status_code == 404


def _with_service(**overrides):
    return {**APPLICATION, "serviceInfo": {**APPLICATION["serviceInfo"], **overrides}}


@pytest.mark.parametrize(
    "overrides",
    [{"serviceYears": "NaN"}, {"serviceYears": "Infinity"}, {"lastBasicSalary": "NaN"}],
)
def test_non_finite_numbers_are_rejected(client, holder_headers, overrides):
    resp = client.post("/api/pension-holder/applications", json=_with_service(**overrides), headers=holder_headers)

    assert resp.status_code == 400
    assert client.get("/api/pension-holder/applications", headers=holder_headers).get_json() == []


def test_flat_application_payload_is_accepted(client, holder_headers):
    flat = {
        "fullName": "Rahim Uddin",
        "nid": "1234567890",
        "employeeId": "EMP-001",
        "lastBasicSalary": "50000",
        "serviceYears": 25,
        "bankName": "Sonali Bank",
        "nomineeName": "Amina",
        "nomineeRelation": "spouse",
    }

    resp = client.post("/api/pension-holder/applications", json=flat, headers=holder_headers)

    body = resp.get_json()["application"]
    assert resp.status_code == 201
    assert body["personalInfo"]["fullName"] == "Rahim Uddin"
    assert body["serviceInfo"]["lastBasicSalary"] == 50000
    assert body["bankInfo"]["bankName"] == "Sonali Bank"
    assert body["nomineeInfo"]["nomineeRelation"] == "spouse"


def test_flat_application_errors_use_plain_field_names(client, holder_headers):
    resp = client.post("/api/pension-holder/applications", json={"fullName": "R"}, headers=holder_headers)

    fields = {e["field"] for e in resp.get_json()["errors"]}
    assert resp.status_code == 400
    assert {"fullName", "nid", "employeeId", "lastBasicSalary"} <= fields


def test_manager_stats_use_status_names(client, holder_headers, manager_headers):
    app_id = client.post("/api/pension-holder/applications", json=APPLICATION, headers=holder_headers).get_json()[
        "application"
    ]["_id"]
    client.put(f"/api/manager/applications/{app_id}/review", headers=manager_headers)

    stats = client.get("/api/manager/stats", headers=manager_headers).get_json()
    assert stats["under-review"] == 1
    assert "underReview" not in stats


def test_fractional_rating_and_level_are_rejected(client, holder_headers, admin_headers):
    complaint_id = client.post(
        "/api/pension-holder/complaints",
        json={
            "subject": "Payment missing",
            "description": "My March payment never arrived.",
            "category": "payment-issue",
        },
        headers=holder_headers,
    ).get_json()["complaint"]["_id"]

    resp = client.put(f"/api/admin/complaints/{complaint_id}/escalate", json={"level": 2.7}, headers=admin_headers)
    assert resp.status_code == 400

    client.put(
        f"/api/admin/complaints/{complaint_id}/resolve",
        json={"resolution": "Payment reissued by the bank."},
        headers=admin_headers,
    )
    resp = client.put(
        f"/api/pension-holder/complaints/{complaint_id}/rating",
        json={"rating": 4.5},
        headers=holder_headers,
    )
    assert resp.status_code == 400

    resp = client.put(
        f"/api/pension-holder/complaints/{complaint_id}/rating",
        json={"rating": 4},
        headers=holder_headers,
    )
    assert resp.status_code == 200
    assert resp.get_json()["complaint"]["satisfactionRating"] == 4
