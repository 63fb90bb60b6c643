import httpx
import pytest

from taskclient.api import ApiClient
from taskclient.cache import QueryCache
from taskclient.mutations import ProjectMutations, TaskMutations, tasks_key
from taskclient.notifications import Notifier
from taskclient.session import AuthSession

BASE_URL = "http://test/api"
PROJECT_ID = "7d1f7a52-3a8e-4c55-9a55-1f0d1f2b9c11"


class FakeServer:
    """Routes requests to canned responses and records every request it sees."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes = {}

    def on(self, method: str, path: str, status: int = 200, json=None, raises: Exception | None = None):
        self.routes[(method, "/api" + path)] = (status, json, raises)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"status": "error", "message": f"Route {request.url.path} not found"})
        status, body, raises = route
        if raises is not None:
            raise raises
        if callable(body):
            body = body(request)
        if isinstance(body, httpx.Response):
            return body
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == "/api" + path]


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def session():
    s = AuthSession()
    s.login("token-123", {"id": "u1", "username": "owner", "email": "owner@example.com"})
    return s


@pytest.fixture
async def api(server, session):
    client = ApiClient(session, base_url=BASE_URL, transport=httpx.MockTransport(server))
    yield client
    await client.aclose()


@pytest.fixture
def cache():
    return QueryCache()


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def task_mutations(api, cache, notifier):
    return TaskMutations(api, cache, notifier)


@pytest.fixture
def project_mutations(api, cache, notifier):
    return ProjectMutations(api, cache, notifier)


@pytest.fixture
def project_id():
    return PROJECT_ID


@pytest.fixture
def seeded_tasks(cache, project_id):
    """Three cached tasks for the project, in the server's newest-first order."""
    tasks = [
        {"id": "t3", "project_id": project_id, "title": "Write report", "description": None,
         "due_date": None, "priority": 1, "is_completed": False},
        {"id": "t2", "project_id": project_id, "title": "Buy milk", "description": "2 litres",
         "due_date": "2025-07-01", "priority": 3, "is_completed": True},
        {"id": "t1", "project_id": project_id, "title": "Call plumber", "description": None,
         "due_date": "2025-06-15", "priority": 2, "is_completed": False},
    ]
    cache.set_query_data(tasks_key(project_id), tasks)
    return tasks
