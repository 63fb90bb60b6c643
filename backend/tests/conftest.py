import os

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RUN_MIGRATIONS"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient

from database import build_engine, build_sessionmaker, get_db, reset_database
from main import app

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
DEFAULT_PASSWORD = "password123"


@pytest.fixture
async def engine():
    engine = build_engine(TEST_DATABASE_URL)
    await reset_database(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_sessionmaker(engine)


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def register(client, username, email=None, password=DEFAULT_PASSWORD):
    email = email or f"{username}@example.com"
    resp = await client.post("/api/auth/register", json={"username": username, "email": email, "password": password})
    assert resp.status_code == 201, resp.text
    return resp.json()["userId"]


async def login(client, username, password=DEFAULT_PASSWORD):
    resp = await client.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()


@pytest.fixture
def create_user(client):
    """Register a user and return ``(user_id, auth_headers)``."""

    async def _create(username: str):
        user_id = await register(client, username)
        data = await login(client, username)
        return user_id, {"Authorization": f"Bearer {data['token']}"}

    return _create


@pytest.fixture
async def owner(create_user):
    return await create_user("owner")


@pytest.fixture
async def intruder(create_user):
    return await create_user("intruder")


@pytest.fixture
def create_project(client):
    async def _create(headers, name="Test Project"):
        resp = await client.post("/api/projects", json={"name": name}, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()["project"]

    return _create


@pytest.fixture
def create_task(client):
    async def _create(headers, project_id, **fields):
        payload = {"title": "Test Task", **fields}
        resp = await client.post(f"/api/projects/{project_id}/tasks", json=payload, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()["task"]

    return _create
