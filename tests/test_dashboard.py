from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest


def _rate(client, skill_id, band):
    response = client.post(
        f"/api/employees/{client.user['id']}/skills",
        json={"skillId": skill_id, "experienceBand": band, "rating": "Intermediate", "yearsOfExperience": 2},
    )
    assert response.status_code == 201


@pytest.fixture
def workforce(make_skill, make_project, register, admin, sales) -> dict:
    """
    React 0-2: 4 needed by a live project, 2 employees rated   -> gap 2, 50% medium
    PostgreSQL 2-5: 2 needed by an open pipeline, nobody rated -> gap 2, 0% high
    Figma 2-5: needed by a finished project only               -> no demand
    """
    react = make_skill("React.js")
    postgres = make_skill("PostgreSQL", "Database")
    figma = make_skill("Figma", "Design")
    alice = register("employee", name="Alice")
    bob = register("employee", name="Bob")
    register("employee", name="Charlie")
    _rate(alice, react["id"], "0-2")
    _rate(bob, react["id"], "0-2")

    live = make_project("PRJ-LIVE")
    past = datetime.now(timezone.utc) - timedelta(days=60)
    done = make_project("PRJ-DONE", startDate=(past - timedelta(days=30)).isoformat(), endDate=past.isoformat())
    admin.post(
        f"/api/projects/{live['id']}/requirements",
        json={"skillId": react["id"], "experienceBand": "0-2", "peopleNeeded": 4, "hoursPerMonth": 160},
    )
    admin.post(
        f"/api/projects/{done['id']}/requirements",
        json={"skillId": figma["id"], "experienceBand": "2-5", "peopleNeeded": 3, "hoursPerMonth": 160},
    )
    admin.post(
        f"/api/projects/{live['id']}/assignments",
        json={"employeeId": alice.user["id"], "skillId": react["id"], "experienceBand": "0-2", "assignedHoursPerMonth": 80},
    )

    pipeline = sales.post("/api/pipeline", json={"name": "Retail Analytics", "status": "Negotiation"}).json()
    sales.post(
        f"/api/pipeline/{pipeline['id']}/skills",
        json={"skillId": postgres["id"], "experienceBand": "2-5", "peopleNeeded": 2},
    )
    lost = sales.post("/api/pipeline", json={"name": "Lost deal", "status": "Lost"}).json()
    sales.post(
        f"/api/pipeline/{lost['id']}/skills",
        json={"skillId": figma["id"], "experienceBand": "10+", "peopleNeeded": 5},
    )
    return {"react": react, "postgres": postgres, "figma": figma, "alice": alice}


def test_metrics(workforce, admin) -> None:
    response = admin.get("/api/dashboard/metrics")

    assert response.status_code == 200
    assert response.json() == {
        "activeProjects": 1,
        "benchEmployees": 2,
        "pipelineProjects": 1,
        "skillGaps": 2,
    }


def test_metrics_on_an_empty_database(employee) -> None:
    assert employee.get("/api/dashboard/metrics").json() == {
        "activeProjects": 0,
        "benchEmployees": 1,
        "pipelineProjects": 0,
        "skillGaps": 0,
    }


def test_recruitment_needs(workforce, employee) -> None:
    needs = employee.get("/api/dashboard/recruitment-needs").json()

    assert [(n["skillName"], n["experienceBand"], n["priority"]) for n in needs] == [
        ("PostgreSQL", "2-5", "high"),
        ("React.js", "0-2", "medium"),
    ]
    react = needs[1]
    assert (react["needed"], react["available"], react["gap"], react["fulfillmentPercentage"]) == (4, 2, 2, 50)

    top = employee.get("/api/dashboard/recruitment-needs", params={"limit": 1}).json()
    assert [n["skillName"] for n in top] == ["PostgreSQL"]


def test_skill_distribution(workforce, employee) -> None:
    rows = {r["skillName"]: r for r in employee.get("/api/dashboard/skill-distribution").json()}

    assert list(rows) == ["React.js", "PostgreSQL", "Figma"]
    assert rows["React.js"]["bands"]["0-2"] == 2
    assert rows["React.js"]["intermediate"] == 2
    assert rows["React.js"]["total"] == 2
    assert rows["Figma"]["total"] == 0
    assert set(rows["Figma"]["bands"].values()) == {0}


def test_activity_feed(workforce, admin) -> None:
    feed = admin.get("/api/activities").json()

    assert feed[0]["type"] == "pipeline_skill_added"
    assert feed[0]["userName"] == "Sam Sales"
    types = {a["type"] for a in feed}
    assert {
        "user_registered",
        "skill_created",
        "skill_mapping_updated",
        "project_created",
        "project_requirement_added",
        "employee_assigned",
        "pipeline_created",
    } <= types

    assert len(admin.get("/api/activities", params={"limit": 3}).json()) == 3


def _registration(feed, name):
    return next(a for a in feed if a["type"] == "user_registered" and a["description"].endswith(name))


def test_deleting_a_user_leaves_the_activity_log_untouched(register, admin) -> None:
    leaver = register("recruitment", name="Leaver")
    before = _registration(admin.get("/api/activities").json(), "Leaver")

    assert admin.delete(f"/api/users/{leaver.user['id']}").status_code == 200

    after = _registration(admin.get("/api/activities").json(), "Leaver")
    assert after["id"] == before["id"]
    assert after["userId"] == before["userId"] == leaver.user["id"]
    assert after["description"] == before["description"]
    assert after["userName"] == "System"


def test_project_ended_in_another_timezone_is_not_active(make_project, admin) -> None:
    plus_five = timezone(timedelta(hours=5))
    ended = datetime.now(timezone.utc) - timedelta(hours=2)
    make_project(
        "PRJ-ENDED",
        startDate=(ended - timedelta(days=30)).astimezone(plus_five).isoformat(),
        endDate=ended.astimezone(plus_five).isoformat(),
    )

    assert admin.get("/api/dashboard/metrics").json()["activeProjects"] == 0
