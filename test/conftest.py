import json
from contextlib import asynccontextmanager

import pytest

from llm.schemas import Completion, ToolCall, ToolFunction
from storage import db


class FakeProvider:
    """Replays canned completions in order and records every request it sees."""

    def __init__(self, *completions: Completion):
        self._completions = list(completions)
        self.requests = []

    def complete(self, request):
        self.requests.append(request)
        if not self._completions:
            raise AssertionError("unexpected upstream call")
        item = self._completions.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeImageSearch:
    def __init__(self, url: str = "https://images.example/photo.jpg", error: Exception = None):
        self.url = url
        self.error = error
        self.queries = []

    def search(self, query: str) -> str:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return self.url


def text_completion(content: str) -> Completion:
    return Completion(content=content)


def tool_completion(name: str, arguments: dict, call_id: str = "call_1", content=None) -> Completion:
    return Completion(
        content=content,
        tool_calls=[ToolCall(id=call_id, function=ToolFunction(name=name, arguments=json.dumps(arguments)))],
    )


@pytest.fixture
def fake_provider_factory():
    def _make(*completions):
        return FakeProvider(*completions)
    return _make


@pytest.fixture
def fake_image_search():
    return FakeImageSearch()


class FakeConnection:
    """Stands in for an asyncpg connection: records statements, replays queued results."""

    def __init__(self):
        self.calls = []
        self.transactions = 0
        self._replies = {}

    def reply(self, method: str, *values):
        self._replies.setdefault(method, []).extend(values)

    async def _call(self, method, query, args, default):
        self.calls.append((method, " ".join(query.split()), args))
        queue = self._replies.get(method)
        value = queue.pop(0) if queue else default
        if isinstance(value, Exception):
            raise value
        return value

    async def execute(self, query, *args):
        return await self._call("execute", query, args, "OK")

    async def fetch(self, query, *args):
        return await self._call("fetch", query, args, [])

    async def fetchrow(self, query, *args):
        return await self._call("fetchrow", query, args, None)

    async def fetchval(self, query, *args):
        return await self._call("fetchval", query, args, None)

    @asynccontextmanager
    async def transaction(self):
        self.transactions += 1
        yield


class FakePool:
    def __init__(self, conn: FakeConnection):
        self.conn = conn
        self.acquired = 0
        self.closed = False

    @asynccontextmanager
    async def acquire(self):
        self.acquired += 1
        yield self.conn

    def get_size(self):
        return 2

    def get_idle_size(self):
        return 1

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_pool(monkeypatch):
    pool = FakePool(FakeConnection())
    monkeypatch.setattr(db, "_pool", pool)
    return pool
