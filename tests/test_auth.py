from __future__ import annotations

from fastapi.testclient import TestClient

from workforce.main import app
from workforce.routers.auth import hash_password, verify_password


def test_register_signs_the_user_in(register) -> None:
    client = register("employee", name="Alice Builder")

    response = client.get("/api/user")

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Alice Builder"
    assert body["role"] == "employee"
    assert "createdAt" in body
    assert "password" not in body and "passwordHash" not in body


def test_register_rejects_mismatched_passwords(anonymous) -> None:
    response = anonymous.post(
        "/api/register",
        json={
            "username": "mismatch",
            "password": "one",
            "confirmPassword": "two",
            "name": "Mismatch",
            "email": "mismatch@example.com",
        },
    )

    assert response.status_code == 400
    errors = response.json()["errors"]
    assert any("Passwords do not match" in e["message"] for e in errors)


def test_register_reports_field_paths(anonymous) -> None:
    response = anonymous.post(
        "/api/register",
        json={"username": "x", "password": "p", "confirmPassword": "p", "name": "X", "email": "nope"},
    )

    assert response.status_code == 400
    assert [e["path"] for e in response.json()["errors"]] == ["email"]


def test_duplicate_username_is_a_business_rule_error(register, anonymous, password) -> None:
    existing = register("employee").user

    response = anonymous.post(
        "/api/register",
        json={
            "username": existing["username"],
            "password": password,
            "confirmPassword": password,
            "name": "Copy",
            "email": "copy@example.com",
        },
    )

    assert response.status_code == 400
    assert response.json() == {"message": "Username or email already exists"}


def test_login_and_logout(register, password) -> None:
    username = register("sales").user["username"]
    client = TestClient(app)

    bad = client.post("/api/login", json={"username": username, "password": "wrong"})
    assert bad.status_code == 401
    assert bad.json() == {"message": "Invalid credentials"}

    good = client.post("/api/login", json={"username": username, "password": password})
    assert good.status_code == 200
    assert good.json()["username"] == username
    assert client.get("/api/user").status_code == 200

    assert client.post("/api/logout").json() == {"message": "Logged out"}
    client.cookies.clear()
    assert client.get("/api/user").status_code == 401


def test_anonymous_is_401_and_wrong_role_is_403(anonymous, employee) -> None:
    assert anonymous.get("/api/dashboard/metrics").status_code == 401
    assert anonymous.get("/api/dashboard/metrics").json() == {"message": "Not authenticated"}

    forbidden = employee.post("/api/skills", json={"name": "Rust", "category": "Backend"})
    assert forbidden.status_code == 403
    assert forbidden.json() == {"message": "Not authorized"}


def test_tampered_cookie_is_treated_as_anonymous(anonymous) -> None:
    anonymous.cookies.set("access_token", "not-a-jwt")
    assert anonymous.get("/api/user").status_code == 401


def test_password_hashes_are_salted_scrypt() -> None:
    first = hash_password("s3cret-pass")
    second = hash_password("s3cret-pass")

    assert first.startswith("scrypt:") and second.startswith("scrypt:")
    assert first != second
    assert verify_password("s3cret-pass", first)
    assert not verify_password("wrong", first)
    assert not verify_password("s3cret-pass", "not-a-hash")
