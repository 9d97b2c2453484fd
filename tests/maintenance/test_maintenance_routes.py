"""HTTP tests for machines, plan assignment and the checklist task list."""

from flask import g

from extensions import db
from models import User
from modules.maintenance.models import ChecklistItem, MaintenancePlan
from modules.maintenance.services import assign_maintenance, change_item_status, create_machine


def _authenticate(client, user_id: int) -> None:
    g.pop("_login_user", None)
    with client.session_transaction() as session:
        session["_user_id"] = str(user_id)
        session["_fresh"] = True


def _user(role: str) -> User:
    user = User(username=f"{role}-user", role=role)
    user.set_password("secret")
    db.session.add(user)
    db.session.commit()
    return user


def test_machine_list_access(client, root_user) -> None:
    _authenticate(client, root_user.id)
    create_machine("Hydraulic Press", "Furnace")
    create_machine("CNC Mill", "CCM")

    response = client.get("/maintenance/machines?q=mill")
    assert response.status_code == 200
    assert [m["name"] for m in response.get_json()] == ["CNC Mill"]


def test_machine_creation(client, app, root_user) -> None:
    _authenticate(client, root_user.id)

    response = client.post("/maintenance/machines",
                           json={"name": "Hydraulic Press", "department": "Furnace"})
    assert response.status_code == 201
    body = response.get_json()
    assert body["serial_number"].startswith("SN-")
    assert body["serial_number"].endswith("/Hydraulic Press/001")

    missing = client.post("/maintenance/machines", json={"department": "Furnace"})
    assert missing.status_code == 400


def test_machine_creation_requires_admin(client, app) -> None:
    user = _user("user")
    _authenticate(client, user.id)

    response = client.post("/maintenance/machines", json={"name": "Press"})
    assert response.status_code == 403


def test_anonymous_cannot_assign(client, app) -> None:
    response = client.post("/maintenance/machines", json={"name": "Press"})
    assert response.status_code == 401


def test_assign_plan(client, app, root_user) -> None:
    _authenticate(client, root_user.id)
    mill = create_machine("CNC Mill", "CCM")

    response = client.post("/maintenance/plans", json={
        "machine_id": mill.id,
        "frequency": "15days",
        "start_date": "2024-01-01",
        "work_description": "Inspect way covers",
        "priority": "high",
        "assigned_to": "Ravi",
        "given_by": "Anita",
        "temperature": "yes",
        "enable_reminder": True,
    })
    assert response.status_code == 201
    body = response.get_json()

    assert body["end_date"] == "2024-01-15"
    assert body["is_temperature_sensitive"] is True
    assert body["enable_reminder"] is True
    assert body["require_attachment"] is False
    assert len(body["items"]) == 15
    assert body["items"][0]["task_no"] == "CM-001"
    assert body["items"][0]["scheduled_date"] == "2024-01-01"
    assert body["items"][14]["description"] == "Inspect way covers - 15/01/2024"


def test_assign_plan_validation(client, app, root_user) -> None:
    _authenticate(client, root_user.id)
    press = create_machine("Hydraulic Press")

    cases = [
        ({"frequency": "daily", "start_date": "2024-01-01"}, "Please select a machine"),
        ({"machine_id": 999, "frequency": "daily", "start_date": "2024-01-01"}, "Unknown machine"),
        ({"machine_id": press.id, "start_date": "2024-01-01"}, "Frequency"),
        ({"machine_id": press.id, "frequency": "hourly", "start_date": "2024-01-01"}, "Frequency"),
        ({"machine_id": press.id, "frequency": "daily"}, "Start date"),
        ({"machine_id": press.id, "frequency": "daily", "start_date": "01/01/2024"}, "YYYY-MM-DD"),
        ({"machine_id": press.id, "frequency": "daily", "start_date": "2024-01-01",
          "assigned_to": "Ravi", "given_by": "Ravi"}, "cannot be the same"),
        ({"machine_id": press.id, "frequency": 7, "start_date": "2024-01-01"}, "Frequency must be one of"),
        ({"machine_id": press.id, "frequency": None, "start_date": "2024-01-01"}, "Frequency is required"),
        ({"machine_id": press.id, "frequency": "daily", "start_date": "2024-01-01",
          "assigned_to": 5, "given_by": 5}, "cannot be the same"),
        ({"machine_id": press.id, "frequency": "", "start_date": "2024-01-10",
          "end_date": "2024-01-01"}, "End date cannot be before start date"),
    ]
    for payload, message in cases:
        response = client.post("/maintenance/plans", json=payload)
        assert response.status_code == 400, payload
        assert message in response.get_json()["error"]

    assert MaintenancePlan.query.count() == 0

    not_an_object = client.post("/maintenance/plans", json=[1])
    assert not_an_object.status_code == 400
    assert "JSON object" in not_an_object.get_json()["error"]


def test_assign_single_plan_with_end_date(client, app, root_user) -> None:
    _authenticate(client, root_user.id)
    press = create_machine("Hydraulic Press")
    payload = {"machine_id": press.id, "frequency": "", "start_date": "2024-01-10",
               "end_date": "2024-01-20", "part_name": "Seal kit"}

    preview = client.post("/maintenance/plans/preview", json=payload)
    assert preview.status_code == 200
    assert preview.get_json()["maintenance_plan"]["end_date"] == "2024-01-20"
    assert len(preview.get_json()["checklist_items"]) == 1

    response = client.post("/maintenance/plans", json=payload)
    assert response.status_code == 201
    body = response.get_json()
    assert body["frequency"] is None
    assert body["task_title"] == "Seal kit"
    assert body["start_date"] == "2024-01-10"
    assert body["end_date"] == "2024-01-20"
    assert [it["task_no"] for it in body["items"]] == ["HP-001"]
    assert body["items"][0]["description"] == "Seal kit"


def test_preview_does_not_persist(client, app, root_user) -> None:
    _authenticate(client, root_user.id)
    press = create_machine("Hydraulic Press", "Rolling Mill")
    assign_maintenance(press, "20days", "2024-01-01")

    response = client.post("/maintenance/plans/preview", json={
        "machine_id": press.id, "frequency": "weekly", "start_date": "2024-01-01",
    })
    assert response.status_code == 200
    body = response.get_json()

    assert body["maintenance_plan"]["end_date"] == "2024-12-31"
    assert body["maintenance_plan"]["machine_id"] == press.id
    assert len(body["checklist_items"]) == 53
    assert body["checklist_items"][0]["task_no"] == "HP-021"
    assert ChecklistItem.query.count() == 20


def test_plan_view_and_delete(client, app, root_user) -> None:
    _authenticate(client, root_user.id)
    press = create_machine("Hydraulic Press")
    plan = assign_maintenance(press, "quarterly", "2024-01-01")
    plan_id = plan.id

    view = client.get(f"/maintenance/plans/{plan_id}")
    assert view.status_code == 200
    assert len(view.get_json()["items"]) == 4

    deleted = client.delete(f"/maintenance/plans/{plan_id}")
    assert deleted.status_code == 200
    assert ChecklistItem.query.count() == 0
    assert client.get(f"/maintenance/plans/{plan_id}").status_code == 404


def test_machine_delete_cascades(client, app, root_user) -> None:
    _authenticate(client, root_user.id)
    press = create_machine("Hydraulic Press")
    assign_maintenance(press, "15days", "2024-01-01")

    response = client.delete(f"/maintenance/machines/{press.id}")
    assert response.status_code == 200
    assert MaintenancePlan.query.count() == 0
    assert ChecklistItem.query.count() == 0


def test_task_list_filters_and_pages(client, app, root_user) -> None:
    _authenticate(client, root_user.id)
    press = create_machine("Hydraulic Press")
    mill = create_machine("CNC Mill")
    assign_maintenance(press, "15days", "2024-01-01", work_description="Hoses", assigned_to="Ravi")
    mill_plan = assign_maintenance(mill, "20days", "2024-01-01", work_description="Coolant", assigned_to="Anita")
    change_item_status(mill_plan.items[0], "completed")

    everything = client.get("/maintenance/tasks?per_page=10").get_json()
    assert everything["total"] == 35
    assert everything["pages"] == 4
    assert len(everything["items"]) == 10
    assert everything["items"][0]["task_no"] == "CM-020"

    by_machine = client.get("/maintenance/tasks", query_string={"machine": "Hydraulic Press"}).get_json()
    assert by_machine["total"] == 15

    by_user = client.get("/maintenance/tasks?assigned_to=Anita").get_json()
    assert by_user["total"] == 20

    completed = client.get("/maintenance/tasks?status=completed,approved").get_json()
    assert [it["task_no"] for it in completed["items"]] == ["CM-001"]

    assert client.get("/maintenance/tasks?status=all").get_json()["total"] == 35

    search = client.get("/maintenance/tasks?search=hp-01").get_json()
    assert search["total"] == 6

    last_page = client.get("/maintenance/tasks?per_page=10&page=4").get_json()
    assert len(last_page["items"]) == 5


def test_approval_requires_admin(client, app) -> None:
    doer = _user("user")
    _authenticate(client, doer.id)
    press = create_machine("Hydraulic Press")
    item = assign_maintenance(press, "", "2024-01-01").items[0]
    item_id = item.id

    submitted = client.post(f"/maintenance/tasks/{item_id}/submit",
                            json={"remarks": "All good", "maintenance_cost": "250"})
    assert submitted.status_code == 200
    assert submitted.get_json()["status"] == "completed"
    assert submitted.get_json()["maintenance_cost"] == 250.0

    denied = client.post(f"/maintenance/tasks/{item_id}/status", json={"status": "approved"})
    assert denied.status_code == 403
    assert db.session.get(ChecklistItem, item_id).status == "completed"


def test_admin_approves_and_bad_transition_is_400(client, app, root_user) -> None:
    _authenticate(client, root_user.id)
    press = create_machine("Hydraulic Press")
    item_id = assign_maintenance(press, "", "2024-01-01").items[0].id

    early = client.post(f"/maintenance/tasks/{item_id}/status", json={"status": "approved"})
    assert early.status_code == 400

    client.post(f"/maintenance/tasks/{item_id}/status", json={"status": "completed"})
    approved = client.post(f"/maintenance/tasks/{item_id}/status", json={"status": "approved"})
    assert approved.status_code == 200
    assert approved.get_json()["status"] == "approved"

    assert client.get(f"/maintenance/tasks/{item_id}").get_json()["status"] == "approved"
