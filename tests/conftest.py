"""Shared fixtures: a scripted model backend and real SQLite-backed stores."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from creator_agents.agents.registry import AgentRegistry
from creator_agents.ai.client import ModelBackend, ModelReply, ModelRequest
from creator_agents.ai.tools.base import Tool
from creator_agents.ai.tools.registry import ToolRegistry
from creator_agents.config import ModelsConfig, OrchestratorConfig
from creator_agents.core.models import ToolCall, User
from creator_agents.core.session import SessionStore
from creator_agents.core.team import AgentTeam
from creator_agents.storage.activity_repo import ActivityLog
from creator_agents.storage.database import Database
from creator_agents.storage.kv_repo import KeyValueRepository


class ScriptedBackend(ModelBackend):
    """Replays a fixed list of replies (or raises queued exceptions)."""

    def __init__(self, replies: list[ModelReply | Exception] | None = None):
        self.replies: list[ModelReply | Exception] = list(replies or [])
        self.requests: list[ModelRequest] = []
        self.gate: asyncio.Event | None = None
        self.search_result: str | Exception = "1. Cooking 101 by Chef A"

    async def generate(self, request: ModelRequest) -> ModelReply:
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        if not self.replies:
            raise RuntimeError("no scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def search(self, prompt: str, model: str) -> str:
        if isinstance(self.search_result, Exception):
            raise self.search_result
        return self.search_result


class EchoSearchTool(Tool):
    """Stand-in for youtubeSearch that echoes its query."""

    @property
    def name(self) -> str:
        return "youtubeSearch"

    @property
    def description(self) -> str:
        return "Search YouTube"

    @property
    def input_schema(self) -> dict[str, Any]:
        return {"type": "object", "properties": {"query": {"type": "string"}}, "required": ["query"]}

    async def execute(self, **kwargs: Any) -> str:
        return f"results for {kwargs['query']}"


def text(value: str) -> ModelReply:
    return ModelReply(text=value)


def calls(*pairs: tuple[str, dict[str, Any]]) -> ModelReply:
    return ModelReply(tool_calls=[ToolCall(name=name, args=args) for name, args in pairs])


@pytest.fixture
async def db(tmp_path):
    database = Database(str(tmp_path / "test.db"))
    await database.initialize()
    yield database
    await database.close()


@pytest.fixture
def models() -> ModelsConfig:
    return ModelsConfig(default="base-model", pro="pro-model", pro_plans=["pro"])


@pytest.fixture
def kv_repo(db) -> KeyValueRepository:
    return KeyValueRepository(db)


@pytest.fixture
async def session_store(kv_repo, models):
    store = SessionStore(kv_repo, models)
    yield store
    await store.flush()


@pytest.fixture
async def activity_log(db):
    log = ActivityLog(db)
    yield log
    await log.flush()


@pytest.fixture
def backend() -> ScriptedBackend:
    return ScriptedBackend()


@pytest.fixture
def tool_registry() -> ToolRegistry:
    registry = ToolRegistry()
    registry.register(EchoSearchTool())
    return registry


@pytest.fixture
def agent_registry() -> AgentRegistry:
    return AgentRegistry()


@pytest.fixture
def user() -> User:
    return User(id="alice@example.com", name="Alice", plan="free")


@pytest.fixture
def team(user, agent_registry, backend, tool_registry, session_store, activity_log) -> AgentTeam:
    return AgentTeam(
        user=user,
        registry=agent_registry,
        backend=backend,
        tool_registry=tool_registry,
        session_store=session_store,
        config=OrchestratorConfig(max_tool_rounds=3, round_timeout=5),
        activity_log=activity_log,
    )
