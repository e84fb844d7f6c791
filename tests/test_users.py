from __future__ import annotations

from fastapi.testclient import TestClient

from workforce.main import app


def test_admin_lists_and_creates_users(admin, employee) -> None:
    created = admin.post(
        "/api/users",
        json={"username": "riley", "password": "pw", "name": "Riley", "email": "riley@example.com", "role": "recruitment"},
    )
    assert created.status_code == 201
    assert created.json()["role"] == "recruitment"

    usernames = [u["username"] for u in admin.get("/api/users").json()]
    assert usernames[-1] == "riley"
    assert employee.get("/api/users").status_code == 403


def test_created_user_can_sign_in(admin) -> None:
    admin.post(
        "/api/users",
        json={"username": "sam", "password": "pw-123", "name": "Sam", "email": "sam@example.com", "role": "sales"},
    )

    client = TestClient(app)
    assert client.post("/api/login", json={"username": "sam", "password": "pw-123"}).status_code == 200


def test_profile_visibility(register, manager) -> None:
    alice = register("employee")
    bob = register("employee")

    assert alice.get(f"/api/users/{alice.user['id']}").status_code == 200
    assert alice.get(f"/api/users/{bob.user['id']}").status_code == 403
    assert manager.get(f"/api/users/{bob.user['id']}").json()["username"] == bob.user["username"]
    assert manager.get("/api/users/999").status_code == 404


def test_update_user_and_password(admin, employee, password) -> None:
    user_id = employee.user["id"]

    response = admin.patch(f"/api/users/{user_id}", json={"name": "Alice B.", "role": "project_manager", "password": "new-pw"})

    assert response.status_code == 200
    assert (response.json()["name"], response.json()["role"]) == ("Alice B.", "project_manager")
    client = TestClient(app)
    username = employee.user["username"]
    assert client.post("/api/login", json={"username": username, "password": password}).status_code == 401
    assert client.post("/api/login", json={"username": username, "password": "new-pw"}).status_code == 200
    # the new role takes effect on the next request
    assert employee.get("/api/employees").status_code == 200


def test_delete_rules(make_skill, register, admin) -> None:
    skill = make_skill("React.js")
    rated = register("employee")
    rated.post(
        f"/api/employees/{rated.user['id']}/skills",
        json={"skillId": skill["id"], "experienceBand": "0-2", "rating": "Beginner", "yearsOfExperience": 1},
    )
    idle = register("employee")

    own = admin.delete(f"/api/users/{admin.user['id']}")
    assert own.status_code == 400
    assert own.json() == {"message": "You cannot delete your own account"}

    assert admin.delete(f"/api/users/{rated.user['id']}").status_code == 400

    gone = admin.delete(f"/api/users/{idle.user['id']}")
    assert gone.json() == {"message": "User deleted successfully"}
    assert admin.get(f"/api/users/{idle.user['id']}").status_code == 404
    # the session of a deleted user no longer authenticates
    assert idle.get("/api/user").status_code == 401
