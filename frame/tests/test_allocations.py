from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlmodel import select

from frame.models import Project
from frame.models.allocation import Allocation, AllocationWrite
from frame.schemas.planning import AllocationCell
from frame.services.allocations import (
    average_utilization,
    build_week_headers,
    summarize_week,
    upsert_allocation,
    week_starts,
)

MONDAY = date(2026, 3, 2)


def test_summarize_week_adds_up_projects():
    cells = [
        AllocationCell(id=1, project_id=1, planned_hours=10),
        AllocationCell(id=2, project_id=2, planned_hours=20),
    ]

    week = summarize_week(MONDAY, cells, capacity=40)

    assert week.total_planned == 30
    assert week.variance == 10
    assert week.utilization_percent == 75


def test_summarize_week_rounds_half_up():
    # 0.2h of 40h is exactly half a percent
    week = summarize_week(MONDAY, [AllocationCell(id=1, project_id=1, planned_hours=0.2)], capacity=40)
    assert week.utilization_percent == 1


def test_summarize_week_overbooked_and_empty():
    over = summarize_week(MONDAY, [AllocationCell(id=1, project_id=1, planned_hours=50)], capacity=40)
    assert over.utilization_percent == 125
    assert over.variance == -10

    empty = summarize_week(MONDAY)
    assert empty.total_planned == 0
    assert empty.utilization_percent == 0

    assert summarize_week(MONDAY, capacity=0).utilization_percent == 0


def test_average_utilization():
    weeks = [
        summarize_week(MONDAY, [AllocationCell(id=1, project_id=1, planned_hours=30)]),
        summarize_week(MONDAY, [AllocationCell(id=2, project_id=1, planned_hours=20)]),
    ]
    # (75 + 50) / 2 = 62.5
    assert average_utilization(weeks) == 63
    assert average_utilization([]) == 0


def test_week_headers():
    starts = week_starts(MONDAY, 3)
    assert starts == [date(2026, 3, 2), date(2026, 3, 9), date(2026, 3, 16)]

    headers = build_week_headers(starts, current_week=date(2026, 3, 9))
    assert [h.label for h in headers] == ["Mar 02", "Mar 09", "Mar 16"]
    assert [h.is_current_week for h in headers] == [False, True, False]


def test_upsert_allocation_lifecycle(db, org, member, project):
    def write(hours):
        data = AllocationWrite(
            user_id=member.id, project_id=project.id, week_start_date=MONDAY, planned_hours=hours
        )
        return upsert_allocation(db, org.id, data)

    created = write(12.5)
    assert created.action == "created"
    assert created.allocation.planned_hours == 12.5

    updated = write(20)
    assert updated.action == "updated"
    assert updated.allocation.id == created.allocation.id
    assert updated.allocation.planned_hours == 20

    assert write(0).action == "deleted"
    assert write(0).action == "unchanged"


def test_hours_that_round_to_zero_are_not_stored(db, org, member, project):
    def write(hours):
        data = AllocationWrite(
            user_id=member.id, project_id=project.id, week_start_date=MONDAY, planned_hours=hours
        )
        return upsert_allocation(db, org.id, data)

    def stored():
        return [a.planned_hours for a in db.exec(select(Allocation)).all()]

    assert write(0.04).action == "unchanged"
    assert stored() == []

    assert write(2).action == "created"
    assert write(0.04).action == "deleted"
    assert stored() == []

    # Half a tenth rounds up
    result = write(0.05)
    assert result.action == "created"
    assert result.allocation.planned_hours == 0.1
    assert stored() == [Decimal("0.1")]


def test_planning_grid(client, auth, manager, member, project):
    response = client.post(
        "/api/v1/planning/allocations",
        json={
            "user_id": member.id,
            "project_id": project.id,
            # A Wednesday; stored under its Monday
            "week_start_date": "2026-03-04",
            "planned_hours": 30,
        },
        headers=auth(manager),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["action"] == "created"
    assert body["allocation"]["week_start_date"] == "2026-03-02"

    response = client.get(
        "/api/v1/planning/allocations",
        params={"start_week": "2026-03-02", "weeks": 2},
        headers=auth(manager),
    )
    assert response.status_code == 200
    grid = response.json()

    assert [h["week_start"] for h in grid["week_headers"]] == ["2026-03-02", "2026-03-09"]
    assert grid["period"] == {"start_date": "2026-03-02", "end_date": "2026-03-16", "weeks": 2}
    assert [p["name"] for p in grid["projects"]] == ["Website Redesign"]

    rows = {row["user"]["name"]: row for row in grid["grid_data"]}
    dana = rows["Dana Designer"]
    assert dana["capacity"] == 40
    assert [w["utilization_percent"] for w in dana["weeks"]] == [75, 0]
    assert dana["weeks"][0]["allocations"][0]["project_id"] == project.id
    assert dana["total_planned"] == 30
    # (75 + 0) / 2 = 37.5
    assert dana["average_utilization"] == 38
    assert rows["Mark Manager"]["average_utilization"] == 0


def test_planning_requires_manager(client, auth, member):
    response = client.get("/api/v1/planning/allocations", headers=auth(member))
    assert response.status_code == 403


def test_allocation_on_other_org_project_is_not_found(client, auth, manager, member, other_org_project):
    response = client.post(
        "/api/v1/planning/allocations",
        json={
            "user_id": member.id,
            "project_id": other_org_project.id,
            "week_start_date": "2026-03-02",
            "planned_hours": 8,
        },
        headers=auth(manager),
    )
    assert response.status_code == 404


def test_clearing_one_project_keeps_the_others(client, auth, db, org, manager, member, project):
    branding = Project(org_id=org.id, name="Branding")
    db.add(branding)
    db.commit()
    db.refresh(branding)

    def allocate(project_id, hours):
        response = client.post(
            "/api/v1/planning/allocations",
            json={
                "user_id": member.id,
                "project_id": project_id,
                "week_start_date": "2026-03-02",
                "planned_hours": hours,
            },
            headers=auth(manager),
        )
        assert response.status_code == 200
        return response.json()

    def dana_week():
        grid = client.get(
            "/api/v1/planning/allocations",
            params={"start_week": "2026-03-02", "weeks": 1, "user_id": member.id},
            headers=auth(manager),
        ).json()
        return grid["grid_data"][0]["weeks"][0]

    allocate(project.id, 24)
    allocate(branding.id, 12)
    assert dana_week()["total_planned"] == 36

    assert allocate(project.id, 0)["action"] == "deleted"

    week = dana_week()
    assert week["total_planned"] == 12
    assert [a["project_id"] for a in week["allocations"]] == [branding.id]
    assert week["utilization_percent"] == 30
