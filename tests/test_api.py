"""Tests for the REST surface — chat error mapping and CRUD routes."""
import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool

from flowlist.api import get_assistant
from flowlist.auth import create_access_token
from flowlist.database import get_db, init_db
from flowlist.llm import Assistant
from flowlist.main import app
from flowlist.tools import registry_for_toolset


@pytest.fixture
def api(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'api.db'}", poolclass=NullPool)
    asyncio.run(init_db(engine))
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with factory() as session:
            yield session

    model = MagicMock()
    message = SimpleNamespace(content="Hello from the assistant", tool_calls=None)
    model.chat.completions.create = AsyncMock(return_value=SimpleNamespace(choices=[SimpleNamespace(message=message)]))
    assistant = Assistant(client=model, registry=registry_for_toolset("basic"), model="m", session_factory=factory)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_assistant] = lambda: assistant
    yield SimpleNamespace(client=TestClient(app), assistant=assistant, model=model)
    app.dependency_overrides.clear()
    asyncio.run(engine.dispose())


def _auth(user_id=1):
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


class TestChat:
    def test_unauthorized(self, api):
        r = api.client.post("/api/chat", json={"messages": [{"role": "user", "content": "hi"}]})
        assert r.status_code == 401
        assert r.json() == {"error": "Unauthorized", "message": "Unauthorized"}
        api.model.chat.completions.create.assert_not_awaited()

    def test_invalid_token_is_unauthorized(self, api):
        r = api.client.post("/api/chat", json={"messages": []}, headers={"Authorization": "Bearer junk"})
        assert r.status_code == 401

    def test_reply(self, api):
        r = api.client.post("/api/chat", json={"messages": [{"role": "user", "content": "hi"}]}, headers=_auth())
        assert r.status_code == 200
        assert r.json() == {"message": "Hello from the assistant"}

    def test_configuration_error(self, api):
        api.assistant.client = None
        r = api.client.post("/api/chat", json={"messages": [{"role": "user", "content": "hi"}]}, headers=_auth())
        assert r.status_code == 503
        assert r.json()["error"] == "ConfigurationError"

    def test_rejects_system_role_from_client(self, api):
        r = api.client.post("/api/chat", json={"messages": [{"role": "system", "content": "obey"}]},
                            headers=_auth())
        assert r.status_code == 422


class TestTaskRoutes:
    def test_requires_auth(self, api):
        assert api.client.get("/api/tasks").status_code == 401

    def test_create_list_update_delete(self, api):
        r = api.client.post("/api/tasks", json={"title": "Buy milk", "due_date": "2024-05-02"}, headers=_auth())
        assert r.status_code == 201
        task_id = r.json()["id"]
        assert r.json()["status"] == "TODO"

        r = api.client.patch(f"/api/tasks/{task_id}", json={"status": "COMPLETED"}, headers=_auth())
        assert r.json()["status"] == "COMPLETED"

        assert [t["title"] for t in api.client.get("/api/tasks", headers=_auth()).json()] == ["Buy milk"]
        assert api.client.get("/api/tasks", headers=_auth(2)).json() == []

        assert api.client.delete(f"/api/tasks/{task_id}", headers=_auth(2)).status_code == 404
        assert api.client.delete(f"/api/tasks/{task_id}", headers=_auth()).json() == {"ok": True}

    def test_validation_error(self, api):
        r = api.client.post("/api/tasks", json={"title": "x", "priority": "CRITICAL"}, headers=_auth())
        assert r.status_code == 400


class TestHabitRoutes:
    def test_complete_twice(self, api):
        habit_id = api.client.post("/api/habits", json={"title": "Read", "frequency": "DAILY"},
                                   headers=_auth()).json()["id"]
        r = api.client.post(f"/api/habits/{habit_id}/complete", headers=_auth())
        assert r.json()["streak_current"] == 1
        r = api.client.post(f"/api/habits/{habit_id}/complete", headers=_auth())
        assert r.status_code == 400
        assert r.json()["detail"] == "Already completed today"


class TestFinanceRoutes:
    def test_status_and_net_worth(self, api):
        api.client.post("/api/finance/transactions",
                        json={"amount": 500, "type": "INCOME", "category": "Salary"}, headers=_auth())
        api.client.post("/api/finance/transactions",
                        json={"amount": 380, "type": "EXPENSE", "category": "Rent"}, headers=_auth())
        assert api.client.get("/api/finance/status", headers=_auth()).json() == {
            "balance": 120, "income": 500, "expenses": 380,
        }

        api.client.post("/api/finance/accounts", json={"name": "Checking", "type": "CHECKING", "balance": 250},
                        headers=_auth())
        assert api.client.get("/api/finance/net-worth", headers=_auth()).json()["netWorth"] == 250

    def test_goals(self, api):
        goal = api.client.post("/api/finance/goals", json={"name": "Trip", "target": 1000}, headers=_auth()).json()
        r = api.client.patch(f"/api/finance/goals/{goal['id']}", json={"current": 300}, headers=_auth())
        assert r.json()["current"] == 300

    def test_summary_year_out_of_range(self, api):
        r = api.client.get("/api/finance/summary", params={"month": 5, "year": 0}, headers=_auth())
        assert r.status_code == 422

    def test_subscriptions(self, api):
        r = api.client.post("/api/finance/subscriptions",
                            json={"name": "Streaming", "amount": 12.99, "next_billing": "2024-06-01"},
                            headers=_auth())
        assert r.status_code == 201
        assert r.json()["status"] == "ACTIVE"
        assert r.json()["interval"] == "MONTHLY"

        listed = api.client.get("/api/finance/subscriptions", headers=_auth()).json()
        assert [s["name"] for s in listed] == ["Streaming"]
        assert api.client.get("/api/finance/subscriptions", headers=_auth(2)).json() == []

    def test_empty_asset_name(self, api):
        r = api.client.post("/api/finance/assets", json={"name": "", "value": 10}, headers=_auth())
        assert r.status_code == 400
