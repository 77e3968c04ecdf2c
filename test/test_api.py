import asyncio
import importlib

import pytest
from fastapi.testclient import TestClient

from conftest import FakeImageSearch, FakeProvider, text_completion, tool_completion
from llm.llm_client import LLMClient
from mailcraft.models import User
from storage.response_store import InMemoryGptResponseStore
from storage.task_store import InMemoryTaskStore
from storage.template_store import InMemoryCustomTemplateStore
from storage.user_store import InMemoryUserStore

SCHEDULE_ARGS = {
    "mainTasks": [{"name": "B", "priority": "low"}, {"name": "A", "priority": "high"}],
    "subtasks": [
        {"description": "a1", "time": 1, "mainTaskName": "A"},
        {"description": "orphan", "time": 1, "mainTaskName": "Z"},
    ],
}


@pytest.fixture
def api(monkeypatch):
    main = importlib.import_module("api.main")
    state = importlib.import_module("api.state")
    deps = importlib.import_module("api.dependencies")

    monkeypatch.setattr(state, "user_store", InMemoryUserStore())
    monkeypatch.setattr(state, "task_store", InMemoryTaskStore())
    monkeypatch.setattr(state, "gpt_response_store", InMemoryGptResponseStore())
    monkeypatch.setattr(state, "custom_template_store", InMemoryCustomTemplateStore())
    asyncio.run(state.user_store.upsert(User(id="alice", credits=1)))
    asyncio.run(state.user_store.upsert(User(id="broke", credits=0)))

    class Ctx:
        provider = FakeProvider()
        image_search = FakeImageSearch()
        client = TestClient(main.app)

        def use(self, *completions):
            self.provider = FakeProvider(*completions)

    ctx = Ctx()
    main.app.dependency_overrides[deps.get_llm_client] = lambda: LLMClient(provider=ctx.provider)
    main.app.dependency_overrides[deps.get_image_search] = lambda: ctx.image_search
    yield ctx
    main.app.dependency_overrides.clear()


ALICE = {"X-User-Id": "alice"}

CHAT_BODY = {
    "systemPrompt": "You edit HTML emails.",
    "receiverProfileDetails": "Default receiver",
    "senderProfileDetails": "Default sender",
    "purpose": "Email modification",
    "userMessage": "make it blue",
    "logoUrl": "",
    "userChatHistory": [],
    "emailContent": "<p>A</p>",
}


def test_chat_without_tool_call(api):
    api.use(text_completion("<p style=\"color:blue\">A</p>"))
    r = api.client.post("/chat", json=CHAT_BODY, headers=ALICE)
    assert r.status_code == 200
    assert r.json() == {"success": True, "response": "<p style=\"color:blue\">A</p>"}
    assert len(api.provider.requests) == 1


def test_chat_with_tool_call(api):
    api.use(tool_completion("search_unsplash", {"query": "sea"}), text_completion("<img>"))
    r = api.client.post("/chat", json=CHAT_BODY, headers=ALICE)
    assert r.status_code == 200
    assert r.json()["response"] == "<img>"
    assert api.image_search.queries == ["sea"]
    assert len(api.provider.requests) == 2


def test_chat_requires_user(api):
    for headers in ({}, {"X-User-Id": "mallory"}):
        r = api.client.post("/chat", json=CHAT_BODY, headers=headers)
        assert r.status_code == 401
    assert api.provider.requests == []


def test_chat_upstream_failure_is_500(api):
    api.use(RuntimeError("provider exploded"))
    r = api.client.post("/chat", json=CHAT_BODY, headers=ALICE)
    assert r.status_code == 500
    assert "provider exploded" in r.json()["detail"]


def test_chat_rejects_malformed_history(api):
    body = dict(CHAT_BODY, userChatHistory=[{"role": "wizard", "content": "x"}])
    r = api.client.post("/chat", json=body, headers=ALICE)
    assert r.status_code == 422


def test_plan_flow(api):
    api.client.post("/tasks", json={"description": "A", "time": 2}, headers=ALICE)
    api.use(tool_completion("parseTodaysSchedule", SCHEDULE_ARGS))

    r = api.client.post("/plan", json={"hours": 8}, headers=ALICE)
    assert r.status_code == 200
    body = r.json()
    assert [t["priority"] for t in body["schedule"]["mainTasks"]] == ["high", "low"]
    assert body["view"]["sections"][0]["subtasks"][0]["description"] == "a1"
    assert body["view"]["orphanedSubtasks"][0]["mainTaskName"] == "Z"

    me = api.client.get("/me", headers=ALICE).json()
    assert me["credits"] == 0
    assert me["hasValidSubscription"] is False

    audit = api.client.get("/gpt-responses", headers=ALICE).json()["responses"]
    assert len(audit) == 1

    # out of credits now
    r = api.client.post("/plan", json={"hours": 8}, headers=ALICE)
    assert r.status_code == 402
    assert len(api.provider.requests) == 1


def test_plan_payment_required_and_unauthenticated(api):
    r = api.client.post("/plan", json={"hours": 8}, headers={"X-User-Id": "broke"})
    assert r.status_code == 402
    r = api.client.post("/plan", json={"hours": 8})
    assert r.status_code == 401
    assert api.provider.requests == []


def test_plan_rejects_bad_hours(api):
    r = api.client.post("/plan", json={"hours": 0}, headers=ALICE)
    assert r.status_code == 422


def test_task_crud_endpoints(api):
    created = api.client.post("/tasks", json={"description": "Write intro"}, headers=ALICE).json()["task"]
    assert created["isDone"] is False
    assert created["time"] == 1.0

    r = api.client.patch(f"/tasks/{created['id']}", json={"isDone": True, "time": 0.5}, headers=ALICE)
    assert r.status_code == 200
    assert r.json()["task"]["isDone"] is True

    listed = api.client.get("/tasks", headers=ALICE).json()
    assert listed["total"] == 1

    r = api.client.delete(f"/tasks/{created['id']}", headers={"X-User-Id": "broke"})
    assert r.status_code == 404
    r = api.client.delete(f"/tasks/{created['id']}", headers=ALICE)
    assert r.status_code == 200
    assert api.client.get("/tasks", headers=ALICE).json()["total"] == 0

    assert api.client.get("/tasks").status_code == 401


def test_template_endpoints(api):
    first = api.client.get("/templates", headers=ALICE).json()["templates"]
    second = api.client.get("/templates", headers=ALICE).json()["templates"]
    assert first == second
    assert "Flash Sale.html" in first

    r = api.client.get("/templates/Flash Sale.html/html", headers=ALICE)
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    assert "Flash Sale" in r.text

    r = api.client.post(
        "/templates/custom",
        json={"name": "mine.html", "url": "https://cdn.example/mine.html"},
        headers=ALICE,
    )
    assert r.status_code == 200
    assert api.client.get("/templates", headers=ALICE).json()["templates"][-1] == "mine.html"

    assert api.client.get("/templates/nope.html/html", headers=ALICE).status_code == 404
    assert api.client.get("/templates").status_code == 401


def test_health(api):
    r = api.client.get("/health")
    assert r.status_code == 200
    assert r.json()["storage"] == "in-memory"


def test_health_degraded_when_database_pool_is_down(api, monkeypatch):
    state = importlib.import_module("api.state")
    monkeypatch.setattr(state, "USE_DATABASE", True)
    body = api.client.get("/health").json()
    assert body["storage"] == "postgres"
    assert body["status"] == "degraded"
    assert body["database"] == {"status": "unhealthy", "database": "not initialized"}
