import pytest
from fastapi.testclient import TestClient

import config
from auth import create_session_token
from models import Role


def _register(client, **overrides):
    payload = {
        "name": "John Doe",
        "email": "john@dayflow.io",
        "password": "SecurePass123!",
        "userType": "Employee",
    }
    payload.update(overrides)
    return client.post("/auth/register", json=payload)


def test_requests_without_session_are_rejected(client):
    r = client.get("/auth/me")
    assert r.status_code == 401
    assert r.json() == {"detail": "Not authenticated", "code": "NOT_AUTHENTICATED"}


def test_garbage_session_is_rejected(client):
    client.cookies.set(config.SESSION_COOKIE_NAME, "not-a-token")
    assert client.get("/auth/me").status_code == 401


def test_token_for_unknown_user_is_rejected(client):
    client.cookies.set(config.SESSION_COOKIE_NAME, create_session_token(12345, Role.ADMIN))
    assert client.get("/employees").status_code == 401


def test_register_employee_generates_login_id(client):
    r = _register(client)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["redirectUrl"] == "/dashboard"
    assert body["user"]["role"] == "Employee"
    # Company "Dayflow", registered in 2024 per the test clock
    assert body["user"]["loginId"] == "DXJODO20240001"
    assert config.SESSION_COOKIE_NAME in r.cookies

    me = client.get("/auth/me")
    assert me.status_code == 200
    assert me.json()["user"]["email"] == "john@dayflow.io"
    assert me.json()["user"]["employeeId"] == "DXJODO20240001"


@pytest.mark.parametrize(
    "user_type, redirect",
    [("Admin", "/admin"), ("HR", "/hr"), ("hr", "/hr"), ("EMPLOYEE", "/dashboard")],
)
def test_register_redirects_by_role(client, user_type, redirect):
    r = _register(client, userType=user_type)
    assert r.status_code == 200, r.text
    assert r.json()["redirectUrl"] == redirect


def test_admin_accounts_have_no_login_id(client):
    r = _register(client, userType="Admin")
    assert r.json()["user"]["loginId"] is None


def test_register_with_supplied_login_id(app):
    first = _register(TestClient(app), employeeId="CUSTOM001")
    assert first.json()["user"]["loginId"] == "CUSTOM001"

    r = _register(TestClient(app), email="other@dayflow.io", employeeId="CUSTOM001")
    assert r.status_code == 409


def test_register_rejects_duplicates_and_bad_input(app):
    assert _register(TestClient(app)).status_code == 200
    assert _register(TestClient(app)).status_code == 409
    assert _register(TestClient(app), email="x@dayflow.io", userType="Manager").status_code == 400
    assert _register(TestClient(app), email="not-an-email").status_code == 400


def test_login_by_email_or_login_id(client, alice):
    r = client.post("/auth/login", json={"loginId": "DXALAN20240001", "password": "Passw0rd!"})
    assert r.status_code == 200
    assert r.json()["user"]["id"] == alice.id

    r = client.post("/auth/login", json={"email": "ALICE@dayflow.io", "password": "Passw0rd!"})
    assert r.status_code == 200


def test_login_failures(client, alice):
    r = client.post("/auth/login", json={"email": alice.email, "password": "wrong"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid credentials"

    assert client.post("/auth/login", json={"password": "Passw0rd!"}).status_code == 400


def test_logout_ends_session(alice):
    assert alice.client.get("/auth/me").status_code == 200
    assert alice.client.post("/auth/logout").status_code == 200
    assert alice.client.get("/auth/me").status_code == 401


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["database"] == "connected"


# ============================================================================
# PAGES
# ============================================================================

def test_public_pages(client):
    assert client.get("/").status_code == 200
    assert client.get("/auth/login").status_code == 200


def test_pages_redirect_to_login_without_session(client):
    r = client.get("/dashboard", follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/auth/login?redirect=/dashboard"


def test_pages_are_role_gated(alice, hr, admin):
    assert alice.client.get("/dashboard").status_code == 200

    r = alice.client.get("/admin", follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/dashboard"
    assert alice.client.get("/hr", follow_redirects=False).status_code == 303

    assert hr.client.get("/hr").status_code == 200
    assert hr.client.get("/admin", follow_redirects=False).headers["location"] == "/dashboard"

    assert admin.client.get("/admin").status_code == 200
    assert admin.client.get("/hr").status_code == 200


def test_login_page_keeps_same_site_redirect(client):
    r = client.get("/auth/login", params={"redirect": "/hr"})
    assert 'window.location = "/hr" || data.redirectUrl;' in r.text


@pytest.mark.parametrize(
    "target",
    ["//evil.example", "/\\evil.example", "/\\/evil.example", "https://evil.example/", "/\tevil", "dashboard"],
)
def test_login_page_drops_off_site_redirect(client, target):
    r = client.get("/auth/login", params={"redirect": target})
    assert r.status_code == 200
    assert 'window.location = "" || data.redirectUrl;' in r.text
    assert "evil" not in r.text


def test_login_page_redirect_cannot_close_script(client):
    r = client.get("/auth/login", params={"redirect": "/x</script><script>alert(1)</script>"})
    assert "</script><script>alert(1)" not in r.text
