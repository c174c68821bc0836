"""Tests for the per-conversation turn loop."""

import asyncio

import pytest

from conftest import calls, text
from creator_agents.ai.conversation import build_messages
from creator_agents.config import OrchestratorConfig
from creator_agents.core.orchestrator import APOLOGY_TEXT, ROUND_LIMIT_TEXT, ConversationOrchestrator
from creator_agents.core.types import Role, TurnState


@pytest.fixture
async def orchestrator(agent_registry, backend, tool_registry, session_store, activity_log):
    agent = agent_registry.find_agent("visionary")
    transcript = await session_store.load_conversation("alice", agent)
    return ConversationOrchestrator(
        user_id="alice",
        agent=agent,
        instructions=agent_registry.system_prompt(agent),
        transcript=transcript,
        backend=backend,
        tool_registry=tool_registry,
        session_store=session_store,
        config=OrchestratorConfig(max_tool_rounds=3, round_timeout=5),
        activity_log=activity_log,
    )


async def persisted(session_store, agent_registry):
    await session_store.flush()
    return await session_store.load_conversation("alice", agent_registry.find_agent("visionary"))


class TestSubmit:
    @pytest.mark.asyncio
    async def test_plain_reply(self, orchestrator, backend):
        backend.replies = [text("Try a 30-second recipe series.")]
        assert await orchestrator.submit("ideas for a cooking channel") is True
        roles = [m.role for m in orchestrator.transcript]
        assert roles == [Role.MODEL, Role.USER, Role.MODEL]
        assert orchestrator.transcript[-1].content == "Try a 30-second recipe series."
        assert orchestrator.state == TurnState.IDLE

    @pytest.mark.asyncio
    async def test_request_carries_persona_tools_and_settings(self, orchestrator, backend):
        backend.replies = [text("ok")]
        await orchestrator.submit("hello")
        request = backend.requests[0]
        assert request.model == "base-model"
        assert request.temperature == 0.7
        assert request.instructions.startswith(orchestrator.agent.instructions)
        assert [t["name"] for t in request.tools] == ["youtubeSearch"]
        assert request.transcript[-1].content == "hello"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rounds", [0, 1, 3])
    async def test_tool_rounds_persist_in_order(self, orchestrator, backend, session_store, agent_registry, rounds):
        backend.replies = [calls(("youtubeSearch", {"query": f"q{i}"})) for i in range(rounds)]
        backend.replies.append(text("final"))
        await orchestrator.submit("go")

        saved = await persisted(session_store, agent_registry)
        turn = saved[1:]
        assert [m.role for m in turn] == [Role.USER] + [Role.TOOL] * rounds + [Role.MODEL]
        assert all(m.tool_result is not None for m in turn if m.role == Role.TOOL)
        assert [m.tool_result for m in turn if m.role == Role.TOOL] == [f"results for q{i}" for i in range(rounds)]

    @pytest.mark.asyncio
    async def test_batch_resolved_in_model_order(self, orchestrator, backend):
        backend.replies = [
            calls(("youtubeSearch", {"query": "a"}), ("youtubeSearch", {"query": "b"})),
            text("done"),
        ]
        await orchestrator.submit("go")
        tools = [m for m in orchestrator.transcript if m.role == Role.TOOL]
        assert [m.tool_result for m in tools] == ["results for a", "results for b"]
        # Both results go back to the model together in the second round.
        second = backend.requests[1].transcript
        assert [m.tool_result for m in second if m.role == Role.TOOL] == ["results for a", "results for b"]

    @pytest.mark.asyncio
    async def test_sequential_rounds_replayed_separately(self, orchestrator, backend):
        backend.replies = [
            calls(("youtubeSearch", {"query": "a"})),
            calls(("youtubeSearch", {"query": "b"})),
            text("done"),
        ]
        await orchestrator.submit("go")
        tools = [m for m in orchestrator.transcript if m.role == Role.TOOL]
        assert tools[0].batch != tools[1].batch

        messages = build_messages(backend.requests[2].transcript)
        assert [m["role"] for m in messages] == ["user", "assistant", "user", "assistant", "user"]
        assert [len(m["content"]) for m in messages[1:]] == [1, 1, 1, 1]

    @pytest.mark.asyncio
    async def test_unknown_tool_result_is_fed_back(self, orchestrator, backend):
        backend.replies = [calls(("fooBar", {})), text("sorry, no such tool")]
        await orchestrator.submit("go")
        tool_msg = next(m for m in orchestrator.transcript if m.role == Role.TOOL)
        assert "fooBar" in tool_msg.tool_result
        assert tool_msg.tool_result.startswith("Error")
        assert len(backend.requests) == 2
        assert orchestrator.transcript[-1].content == "sorry, no such tool"

    @pytest.mark.asyncio
    async def test_round_limit_produces_fallback(self, orchestrator, backend):
        backend.replies = [calls(("youtubeSearch", {"query": "again"})) for _ in range(10)]
        await orchestrator.submit("loop forever")
        tools = [m for m in orchestrator.transcript if m.role == Role.TOOL]
        assert len(tools) == 3
        assert len(backend.requests) == 4
        assert orchestrator.transcript[-1].content == ROUND_LIMIT_TEXT
        assert orchestrator.state == TurnState.IDLE

    @pytest.mark.asyncio
    async def test_backend_error_appends_single_apology(self, orchestrator, backend):
        backend.replies = [calls(("youtubeSearch", {"query": "x"})), ConnectionError("down")]
        await orchestrator.submit("go")
        roles = [m.role for m in orchestrator.transcript]
        assert roles == [Role.MODEL, Role.USER, Role.TOOL, Role.MODEL]
        assert orchestrator.transcript[-1].content == APOLOGY_TEXT
        assert orchestrator.state == TurnState.IDLE

    @pytest.mark.asyncio
    async def test_backend_timeout_returns_to_idle(self, orchestrator, backend):
        orchestrator._config = OrchestratorConfig(round_timeout=0.05)
        backend.gate = asyncio.Event()
        await orchestrator.submit("go")
        assert orchestrator.transcript[-1].content == APOLOGY_TEXT
        assert orchestrator.state == TurnState.IDLE

    @pytest.mark.asyncio
    async def test_blank_submission_ignored(self, orchestrator, backend):
        assert await orchestrator.submit("   ") is False
        assert len(orchestrator.transcript) == 1
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_submission_while_in_flight_is_ignored(self, orchestrator, backend):
        backend.gate = asyncio.Event()
        backend.replies = [text("first answer")]
        first = asyncio.create_task(orchestrator.submit("first"))
        await asyncio.sleep(0)
        while not backend.requests:
            await asyncio.sleep(0)
        length = len(orchestrator.transcript)

        assert await orchestrator.submit("second") is False
        assert len(orchestrator.transcript) == length

        backend.gate.set()
        assert await first is True
        assert [m.content for m in orchestrator.transcript if m.role == Role.USER] == ["first"]

    @pytest.mark.asyncio
    async def test_activity_recorded_for_successful_turn(self, orchestrator, backend, activity_log):
        backend.replies = [text("ok")]
        await orchestrator.submit("a really long message about sourdough starters")
        await activity_log.flush()
        entries = await activity_log.recent()
        assert len(entries) == 1
        assert entries[0].user_id == "alice"
        assert entries[0].summary.startswith("chatted with Viral Visionary")
        assert entries[0].icon == "MessageSquare"

    @pytest.mark.asyncio
    async def test_reset_refused_while_busy(self, orchestrator, backend):
        backend.gate = asyncio.Event()
        backend.replies = [text("x")]
        task = asyncio.create_task(orchestrator.submit("go"))
        while not backend.requests:
            await asyncio.sleep(0)
        with pytest.raises(RuntimeError):
            orchestrator.reset([])
        backend.gate.set()
        await task
