"""Groups, the task board and custom fields through the HTTP API."""

from __future__ import annotations

import pytest

from conftest import onboard


@pytest.fixture()
def group(client, owner_auth) -> dict:
    response = client.post(
        "/v1/groups/",
        json={"name": "Design", "metadata": {"tags": ["ui"]}},
        headers=owner_auth["headers"],
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def _board(client, auth, group_id) -> dict:
    response = client.get(f"/v1/groups/{group_id}/tasks/board", headers=auth["headers"])
    assert response.status_code == 200, response.text
    return {column["name"]: column for column in response.json()["data"]["columns"]}


def _create_task(client, auth, group_id, column_id, title, **extra) -> dict:
    response = client.post(
        f"/v1/groups/{group_id}/tasks/",
        json={"title": title, "column_id": column_id, **extra},
        headers=auth["headers"],
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_group_create_list_and_conflict(client, owner_auth, group):
    assert group["type"] == "regular"
    assert group["metadata"]["tags"] == ["ui"]

    listed = client.get("/v1/groups/", headers=owner_auth["headers"]).json()["data"]
    names = {g["name"] for g in listed}
    assert {"Design", "Olive's Private Space"} <= names

    duplicate = client.post("/v1/groups/", json={"name": "design"}, headers=owner_auth["headers"])
    assert duplicate.status_code == 409
    assert duplicate.json()["success"] is False


def test_groups_require_authentication(client):
    response = client.get("/v1/groups/")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == 401


def test_other_workplace_cannot_see_group(client, api_mailer, owner_auth, group):
    stranger = onboard(client, api_mailer, "stranger@example.com", "Other Co", "Sam")

    response = client.get(f"/v1/groups/{group['id']}/tasks/board", headers=stranger["headers"])

    assert response.status_code == 403


def test_board_task_lifecycle(client, owner_auth, group):
    columns = _board(client, owner_auth, group["id"])
    assert list(columns) == ["To Do", "In Progress", "Done"]
    todo, doing = columns["To Do"]["id"], columns["In Progress"]["id"]

    first = _create_task(
        client, owner_auth, group["id"], todo, "Wireframes", metadata={"estimated_hours": 4}
    )
    second = _create_task(client, owner_auth, group["id"], todo, "Mockups", priority="high")
    assert first["position"] == 1
    assert second["position"] == 2
    assert first["metadata"] == {"estimated_hours": 4}
    assert second["priority"] == "high"

    moved = client.post(
        f"/v1/groups/{group['id']}/tasks/{first['id']}/move",
        json={"column_id": doing, "position": 1},
        headers=owner_auth["headers"],
    )
    assert moved.status_code == 200, moved.text
    assert moved.json()["data"]["column_id"] == doing

    columns = _board(client, owner_auth, group["id"])
    assert [(t["title"], t["position"]) for t in columns["To Do"]["tasks"]] == [("Mockups", 1)]
    assert [t["title"] for t in columns["In Progress"]["tasks"]] == ["Wireframes"]

    done = client.put(
        f"/v1/groups/{group['id']}/tasks/{first['id']}",
        json={"status": "done"},
        headers=owner_auth["headers"],
    )
    assert done.json()["data"]["completed_by"] == owner_auth["user_id"]

    deleted = client.delete(
        f"/v1/groups/{group['id']}/tasks/{first['id']}", headers=owner_auth["headers"]
    )
    assert deleted.status_code == 200
    missing = client.get(f"/v1/groups/{group['id']}/tasks/{first['id']}", headers=owner_auth["headers"])
    assert missing.status_code == 404


def test_move_rejects_position_zero(client, owner_auth, group):
    todo = _board(client, owner_auth, group["id"])["To Do"]["id"]
    task = _create_task(client, owner_auth, group["id"], todo, "Edge")

    response = client.post(
        f"/v1/groups/{group['id']}/tasks/{task['id']}/move",
        json={"column_id": todo, "position": 0},
        headers=owner_auth["headers"],
    )

    assert response.status_code == 422
    assert response.json()["error"]["message"] == "Validation failed"


def test_default_column_delete_is_bad_request(client, owner_auth, group):
    todo = _board(client, owner_auth, group["id"])["To Do"]["id"]

    response = client.delete(
        f"/v1/groups/{group['id']}/tasks/columns/{todo}", headers=owner_auth["headers"]
    )

    assert response.status_code == 400


def test_comments_and_time_entries(client, owner_auth, group):
    todo = _board(client, owner_auth, group["id"])["To Do"]["id"]
    task = _create_task(client, owner_auth, group["id"], todo, "Review")
    base = f"/v1/groups/{group['id']}/tasks/{task['id']}"

    comment = client.post(f"{base}/comments", json={"content": "Looks good"}, headers=owner_auth["headers"])
    assert comment.status_code == 201
    comments = client.get(f"{base}/comments", headers=owner_auth["headers"]).json()["data"]
    assert [c["content"] for c in comments] == ["Looks good"]

    timed = client.post(f"{base}/time-entries", json={"hours": 2}, headers=owner_auth["headers"])
    assert timed.status_code == 201
    assert timed.json()["data"]["metadata"]["actual_hours"] == 2


def test_custom_field_definitions_and_values(client, owner_auth, group):
    headers = owner_auth["headers"]
    definition = client.post(
        f"/v1/groups/{group['id']}/custom-field-definitions",
        json={"name": "Severity", "type": "dropdown", "options": ["low", "high"]},
        headers=headers,
    )
    assert definition.status_code == 201, definition.text
    definition_id = definition.json()["data"]["id"]

    todo = _board(client, owner_auth, group["id"])["To Do"]["id"]
    task = _create_task(client, owner_auth, group["id"], todo, "Bug")

    bad = client.post(
        f"/v1/tasks/{task['id']}/custom-fields",
        json={"field_definition_id": definition_id, "field_value": "urgent"},
        headers=headers,
    )
    assert bad.status_code == 400

    good = client.post(
        f"/v1/tasks/{task['id']}/custom-fields",
        json={"field_definition_id": definition_id, "field_value": "high"},
        headers=headers,
    )
    assert good.status_code == 200, good.text
    assert good.json()["data"]["field_name"] == "Severity"
    assert good.json()["data"]["is_group_field"] is True

    adhoc = client.put(
        f"/v1/groups/{group['id']}/tasks/{task['id']}/custom-fields",
        json={"custom_fields": {"Sprint": "12"}},
        headers=headers,
    )
    assert adhoc.status_code == 200, adhoc.text
    assert {f["field_name"]: f["field_value"] for f in adhoc.json()["data"]} == {
        "Severity": "high",
        "Sprint": "12",
    }
