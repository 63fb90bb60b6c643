"""Tests for the task routes: validation, partial updates and ownership."""

import uuid

import pytest


def tasks_url(project_id):
    return f"/api/projects/{project_id}/tasks"


@pytest.fixture
async def project(owner, create_project):
    _, headers = owner
    return await create_project(headers)


async def test_create_task_defaults(client, owner, project):
    _, headers = owner

    resp = await client.post(tasks_url(project["id"]), json={"title": "  Whitespace Task  "}, headers=headers)

    assert resp.status_code == 201
    task = resp.json()["task"]
    assert resp.json()["message"] == "Task created successfully."
    assert task["title"] == "Whitespace Task"
    assert task["priority"] == 2
    assert task["is_completed"] is False
    assert task["description"] is None
    assert task["due_date"] is None
    assert task["project_id"] == project["id"]


async def test_create_task_with_all_fields(client, owner, project):
    _, headers = owner
    payload = {"title": "Full", "description": "  Description with spaces  ", "due_date": "2024-12-31", "priority": 1}

    resp = await client.post(tasks_url(project["id"]), json=payload, headers=headers)

    task = resp.json()["task"]
    assert task["description"] == "Description with spaces"
    assert task["due_date"] == "2024-12-31"
    assert task["priority"] == 1


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"title": ""}, "Task title is required."),
        ({"title": "   "}, "Task title is required."),
        ({"description": "no title"}, "Task title is required."),
        ({"title": "x" * 256}, "Task title must be between 1 and 255 characters."),
        ({"title": "ok", "priority": 0}, "Priority must be 1 (Low), 2 (Medium), or 3 (High)."),
        ({"title": "ok", "priority": 4}, "Priority must be 1 (Low), 2 (Medium), or 3 (High)."),
        ({"title": "ok", "priority": "high"}, "Priority must be 1 (Low), 2 (Medium), or 3 (High)."),
        ({"title": "ok", "priority": True}, "Priority must be 1 (Low), 2 (Medium), or 3 (High)."),
        ({"title": "ok", "due_date": "31/12/2024"}, "Due date must be a valid date (YYYY-MM-DD)."),
    ],
)
async def test_create_task_validation(client, owner, project, payload, message):
    _, headers = owner

    resp = await client.post(tasks_url(project["id"]), json=payload, headers=headers)

    assert resp.status_code == 400
    assert resp.json()["message"] == message


async def test_create_task_reports_every_invalid_field(client, owner, project):
    _, headers = owner

    resp = await client.post(tasks_url(project["id"]), json={"title": "", "priority": 9}, headers=headers)

    assert resp.status_code == 400
    assert "Task title is required." in resp.json()["message"]
    assert "Priority must be 1 (Low), 2 (Medium), or 3 (High)." in resp.json()["message"]


async def test_list_tasks_newest_first(client, owner, project, create_task):
    _, headers = owner
    await create_task(headers, project["id"], title="First Task")
    await create_task(headers, project["id"], title="Second Task")

    resp = await client.get(tasks_url(project["id"]), headers=headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Tasks fetched successfully."
    assert body["count"] == 2
    assert [t["title"] for t in body["tasks"]] == ["Second Task", "First Task"]


async def test_list_tasks_is_scoped_to_project(client, owner, project, create_project, create_task):
    _, headers = owner
    other = await create_project(headers, "Other")
    await create_task(headers, project["id"], title="Mine")
    await create_task(headers, other["id"], title="Elsewhere")

    resp = await client.get(tasks_url(project["id"]), headers=headers)

    assert [t["title"] for t in resp.json()["tasks"]] == ["Mine"]


async def test_get_task(client, owner, project, create_task):
    _, headers = owner
    task = await create_task(headers, project["id"])

    resp = await client.get(f"/api/tasks/{task['id']}", headers=headers)

    assert resp.status_code == 200
    assert resp.json()["task"]["id"] == task["id"]


async def test_put_updates_only_given_fields(client, owner, project, create_task):
    _, headers = owner
    task = await create_task(headers, project["id"], title="Lifecycle", description="Original description", due_date="2024-12-31", priority=1)

    resp = await client.put(
        f"/api/tasks/{task['id']}",
        json={"title": "Updated Task Title", "description": "Updated description", "priority": 3, "is_completed": True},
        headers=headers,
    )

    assert resp.status_code == 200
    assert resp.json()["message"] == "Task updated successfully."
    updated = resp.json()["task"]
    assert updated["title"] == "Updated Task Title"
    assert updated["description"] == "Updated description"
    assert updated["priority"] == 3
    assert updated["is_completed"] is True
    assert updated["due_date"] == "2024-12-31"


async def test_patch_single_field(client, owner, project, create_task):
    _, headers = owner
    task = await create_task(headers, project["id"], priority=1)

    resp = await client.patch(f"/api/tasks/{task['id']}", json={"priority": 3}, headers=headers)

    assert resp.status_code == 200
    assert resp.json()["task"]["priority"] == 3
    assert resp.json()["task"]["title"] == task["title"]


async def test_patch_clears_nullable_fields(client, owner, project, create_task):
    _, headers = owner
    task = await create_task(headers, project["id"], description="something", due_date="2030-01-01")

    resp = await client.patch(f"/api/tasks/{task['id']}", json={"description": None, "due_date": None}, headers=headers)

    assert resp.json()["task"]["description"] is None
    assert resp.json()["task"]["due_date"] is None


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"title": None}, "Task title is required."),
        ({"title": "  "}, "Task title is required."),
        ({"priority": 5}, "Priority must be 1 (Low), 2 (Medium), or 3 (High)."),
        ({"priority": None}, "Priority must be 1 (Low), 2 (Medium), or 3 (High)."),
        ({"is_completed": "yes"}, "is_completed must be a boolean."),
        ({}, "Request body is required. Please provide the necessary data."),
    ],
)
async def test_patch_validation(client, owner, project, create_task, payload, message):
    _, headers = owner
    task = await create_task(headers, project["id"])

    resp = await client.patch(f"/api/tasks/{task['id']}", json=payload, headers=headers)

    assert resp.status_code == 400
    assert resp.json()["message"] == message


async def test_delete_task(client, owner, project, create_task):
    _, headers = owner
    task = await create_task(headers, project["id"])

    resp = await client.delete(f"/api/tasks/{task['id']}", headers=headers)

    assert resp.status_code == 200
    assert resp.json()["message"] == "Task deleted successfully."
    assert (await client.get(f"/api/tasks/{task['id']}", headers=headers)).status_code == 404


async def test_project_task_routes_enforce_ownership(client, project, intruder):
    _, other_headers = intruder
    missing_project = uuid.uuid4()

    assert (await client.get(tasks_url(project["id"]))).status_code == 401
    assert (await client.get(tasks_url(project["id"]), headers=other_headers)).status_code == 403
    assert (await client.post(tasks_url(project["id"]), json={"title": "x"}, headers=other_headers)).status_code == 403
    assert (await client.get(tasks_url(missing_project), headers=other_headers)).status_code == 404
    resp = await client.post(tasks_url(missing_project), json={"title": "x"}, headers=other_headers)
    assert resp.status_code == 404
    assert resp.json()["message"] == "Project not found."


@pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE"])
async def test_task_routes_enforce_ownership(client, owner, intruder, project, create_task, method):
    _, headers = owner
    _, other_headers = intruder
    task = await create_task(headers, project["id"])
    kwargs = {"json": {"title": "Hacked title"}} if method in ("PUT", "PATCH") else {}

    unauthenticated = await client.request(method, f"/api/tasks/{task['id']}", **kwargs)
    forbidden = await client.request(method, f"/api/tasks/{task['id']}", headers=other_headers, **kwargs)
    missing = await client.request(method, f"/api/tasks/{uuid.uuid4()}", headers=other_headers, **kwargs)
    malformed = await client.request(method, "/api/tasks/invalid-uuid", headers=headers, **kwargs)

    assert unauthenticated.status_code == 401
    assert forbidden.status_code == 403
    assert forbidden.json()["message"] == "User not authorized to access this task."
    assert missing.status_code == 404
    assert missing.json()["message"] == "Task not found."
    assert malformed.status_code == 404

    still_there = await client.get(f"/api/tasks/{task['id']}", headers=headers)
    assert still_there.json()["task"]["title"] == "Test Task"
