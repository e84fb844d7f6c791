from __future__ import annotations

from datetime import datetime, timedelta, timezone


def _iso(days_from_now: int) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days_from_now)).isoformat()


def test_sales_creates_pipeline_with_default_dates(sales) -> None:
    response = sales.post("/api/pipeline", json={"name": "Retail Analytics"})

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "Prospect"
    assert body["demands"] == []
    assert body["createdBy"] == sales.user["id"]


def test_pipeline_date_rules(sales) -> None:
    past = sales.post("/api/pipeline", json={"name": "Late", "expectedStartDate": _iso(-3)})
    assert past.status_code == 400
    assert past.json()["errors"][0]["path"] == "expectedStartDate"

    backwards = sales.post(
        "/api/pipeline",
        json={"name": "Backwards", "expectedStartDate": _iso(30), "expectedEndDate": _iso(10)},
    )
    assert backwards.status_code == 400
    assert backwards.json()["errors"][0]["path"] == "expectedEndDate"

    bad_status = sales.post("/api/pipeline", json={"name": "Odd", "status": "Maybe"})
    assert bad_status.status_code == 400


def test_only_sales_and_admin_manage_the_pipeline(sales, employee, admin) -> None:
    assert employee.post("/api/pipeline", json={"name": "Nope"}).status_code == 403
    assert admin.post("/api/pipeline", json={"name": "Admin deal", "status": "Negotiation"}).status_code == 201
    assert [p["name"] for p in employee.get("/api/pipeline").json()] == ["Admin deal"]


def test_skill_demands_are_listed_with_their_pipeline(make_skill, sales, employee) -> None:
    skill = make_skill("PostgreSQL", "Database")
    pipeline = sales.post("/api/pipeline", json={"name": "Retail Analytics"}).json()

    added = sales.post(
        f"/api/pipeline/{pipeline['id']}/skills",
        json={"skillId": skill["id"], "experienceBand": "2-5", "peopleNeeded": 2},
    )
    assert added.status_code == 201
    assert added.json()["skillName"] == "PostgreSQL"

    [listed] = employee.get("/api/pipeline").json()
    assert [(d["skillName"], d["experienceBand"], d["peopleNeeded"]) for d in listed["demands"]] == [
        ("PostgreSQL", "2-5", 2)
    ]


def test_skill_demand_lookups(make_skill, sales) -> None:
    skill = make_skill("PostgreSQL", "Database")
    pipeline = sales.post("/api/pipeline", json={"name": "Retail Analytics"}).json()

    missing_pipeline = sales.post(
        "/api/pipeline/999/skills", json={"skillId": skill["id"], "experienceBand": "2-5", "peopleNeeded": 1}
    )
    assert missing_pipeline.status_code == 404
    assert missing_pipeline.json() == {"message": "Pipeline project not found"}

    missing_skill = sales.post(
        f"/api/pipeline/{pipeline['id']}/skills", json={"skillId": 999, "experienceBand": "2-5", "peopleNeeded": 1}
    )
    assert missing_skill.status_code == 400
