"""Thin wrappers over the REST endpoints, unwrapping the response envelopes."""

from taskclient.api import ApiClient


async def register_user(api: ApiClient, username: str, email: str, password: str) -> dict:
    return await api.post(
        "/auth/register",
        {"username": username, "email": email, "password": password},
        "registering",
    )


async def login_user(api: ApiClient, password: str, email: str | None = None, username: str | None = None) -> dict:
    """Log in by email or username and start the client session with the returned token."""
    payload = {"password": password}
    if email:
        payload["email"] = email
    if username:
        payload["username"] = username
    data = await api.post("/auth/login", payload, "logging in")
    api.session.login(data["token"], data["user"], data.get("expiresAt"))
    return data


async def get_current_user(api: ApiClient) -> dict:
    return await api.get("/auth/me", "loading your profile")


async def get_projects(api: ApiClient) -> list[dict]:
    data = await api.get("/projects", "fetching projects")
    return data.get("projects") or []


async def get_project(api: ApiClient, project_id: str) -> dict:
    data = await api.get(f"/projects/{project_id}", "fetching the project")
    return data["project"]


async def create_project(api: ApiClient, name: str) -> dict:
    data = await api.post("/projects", {"name": name}, "creating project")
    return data["project"]


async def update_project(api: ApiClient, project_id: str, name: str) -> dict:
    data = await api.put(f"/projects/{project_id}", {"name": name}, "updating project")
    return data["project"]


async def delete_project(api: ApiClient, project_id: str) -> dict:
    return await api.delete(f"/projects/{project_id}", "deleting project")


async def get_tasks_for_project(api: ApiClient, project_id: str) -> list[dict]:
    data = await api.get(f"/projects/{project_id}/tasks", "fetching tasks")
    return data.get("tasks") or []


async def get_task(api: ApiClient, task_id: str) -> dict:
    data = await api.get(f"/tasks/{task_id}", "fetching the task")
    return data["task"]


async def create_task_in_project(api: ApiClient, project_id: str, task_data: dict) -> dict:
    data = await api.post(f"/projects/{project_id}/tasks", task_data, "creating task")
    return data["task"]


async def update_task(api: ApiClient, task_id: str, task_data: dict) -> dict:
    data = await api.put(f"/tasks/{task_id}", task_data, "updating task")
    return data["task"]


async def patch_task(api: ApiClient, task_id: str, partial_task_data: dict) -> dict:
    data = await api.patch(f"/tasks/{task_id}", partial_task_data, "updating task")
    return data["task"]


async def delete_task(api: ApiClient, task_id: str) -> dict:
    return await api.delete(f"/tasks/{task_id}", "deleting task")
