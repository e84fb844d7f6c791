from __future__ import annotations


def _rate(client, employee_id, skill_id, band="0-2", rating="Beginner", years=1):
    return client.post(
        f"/api/employees/{employee_id}/skills",
        json={"skillId": skill_id, "experienceBand": band, "rating": rating, "yearsOfExperience": years},
    )


def test_rating_a_skill_is_an_upsert_per_band(make_skill, employee) -> None:
    skill = make_skill("React.js")
    me = employee.user["id"]

    first = _rate(employee, me, skill["id"], band="0-2", rating="Beginner", years=1)
    again = _rate(employee, me, skill["id"], band="0-2", rating="Intermediate", years=2)
    other_band = _rate(employee, me, skill["id"], band="2-5", rating="Expert", years=3)

    assert first.status_code == again.status_code == other_band.status_code == 201
    assert again.json()["id"] == first.json()["id"]
    assert again.json()["rating"] == "Intermediate"
    assert other_band.json()["id"] != first.json()["id"]

    mappings = employee.get(f"/api/employees/{me}/skills").json()
    assert [(m["experienceBand"], m["rating"]) for m in mappings] == [("0-2", "Intermediate"), ("2-5", "Expert")]
    assert mappings[0]["skillName"] == "React.js"
    assert mappings[0]["skillCategory"] == "Frontend"


def test_skills_can_only_be_rated_for_yourself(make_skill, register, admin) -> None:
    skill = make_skill("Python", "Backend")
    alice = register("employee")
    bob = register("employee")

    assert _rate(alice, bob.user["id"], skill["id"]).status_code == 403
    assert _rate(admin, bob.user["id"], skill["id"]).status_code == 403


def test_rating_an_unknown_skill(employee) -> None:
    response = _rate(employee, employee.user["id"], 999)

    assert response.status_code == 400
    assert response.json() == {"message": "Skill not found"}


def test_years_of_experience_is_bounded(make_skill, employee) -> None:
    skill = make_skill("Go", "Backend")

    response = _rate(employee, employee.user["id"], skill["id"], years=51)

    assert response.status_code == 400
    assert response.json()["errors"][0]["path"] == "yearsOfExperience"


def test_employee_records_are_self_or_manager(register, manager) -> None:
    alice = register("employee")
    bob = register("employee")
    bob_id = bob.user["id"]

    assert bob.get(f"/api/employees/{bob_id}/skills").status_code == 200
    assert alice.get(f"/api/employees/{bob_id}/skills").status_code == 403
    assert alice.get(f"/api/employees/{bob_id}/timesheets").status_code == 403
    assert manager.get(f"/api/employees/{bob_id}/skills").status_code == 200
    assert manager.get(f"/api/employees/{bob_id}/assignments").json() == []


def test_employee_overview(make_skill, make_project, register, manager, admin) -> None:
    skill = make_skill("React.js")
    project = make_project("PRJ-1")
    alice = register("employee", name="Alice")
    bob = register("employee", name="Bob")
    _rate(alice, alice.user["id"], skill["id"])
    _rate(alice, alice.user["id"], skill["id"], band="2-5")
    admin.post(
        f"/api/projects/{project['id']}/assignments",
        json={"employeeId": alice.user["id"], "skillId": skill["id"], "experienceBand": "0-2", "assignedHoursPerMonth": 80},
    )

    response = manager.get("/api/employees")

    assert response.status_code == 200
    rows = {row["name"]: row for row in response.json()}
    # only employee-role users are listed
    assert set(rows) == {"Alice", "Bob"}
    assert (rows["Alice"]["skillsCount"], rows["Alice"]["assignmentsCount"], rows["Alice"]["onBench"]) == (2, 1, False)
    assert (rows["Bob"]["skillsCount"], rows["Bob"]["assignmentsCount"], rows["Bob"]["onBench"]) == (0, 0, True)
    assert bob.get("/api/employees").status_code == 403
