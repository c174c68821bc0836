"""Turn-taking loop for one (user, agent) conversation."""

from __future__ import annotations

import asyncio
import uuid
from typing import TYPE_CHECKING

from creator_agents.ai.client import ModelBackend, ModelReply, ModelRequest
from creator_agents.ai.tools.registry import ToolRegistry
from creator_agents.config import OrchestratorConfig
from creator_agents.core.models import ChatMessage
from creator_agents.core.session import SessionStore
from creator_agents.core.types import TurnState
from creator_agents.log import get_logger

if TYPE_CHECKING:
    from creator_agents.agents.registry import Agent
    from creator_agents.storage.activity_repo import ActivityLog

logger = get_logger(__name__)

APOLOGY_TEXT = "I've encountered an error. Please try again."
ROUND_LIMIT_TEXT = (
    "I got stuck calling tools for this request and stopped to avoid looping. "
    "Could you rephrase or narrow it down?"
)


class ConversationOrchestrator:
    """Owns the transcript of one (user, agent) pair and runs its turns.

    The persistence key is fixed at construction, so a turn that finishes
    after the user switched to another agent still lands in this
    conversation.
    """

    def __init__(
        self,
        user_id: str,
        agent: Agent,
        instructions: str,
        transcript: list[ChatMessage],
        backend: ModelBackend,
        tool_registry: ToolRegistry,
        session_store: SessionStore,
        config: OrchestratorConfig | None = None,
        activity_log: ActivityLog | None = None,
    ):
        self.user_id = user_id
        self.agent = agent
        self._instructions = instructions
        self._transcript = transcript
        self._backend = backend
        self._tool_registry = tool_registry
        self._session_store = session_store
        self._config = config or OrchestratorConfig()
        self._activity_log = activity_log
        self._state = TurnState.IDLE

    @property
    def state(self) -> TurnState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state != TurnState.IDLE

    @property
    def transcript(self) -> list[ChatMessage]:
        return self._transcript

    def reset(self, transcript: list[ChatMessage]) -> None:
        if self.busy:
            raise RuntimeError("Cannot reset a conversation while a turn is in flight")
        self._transcript = transcript

    async def submit(self, text: str) -> bool:
        """Run one full turn for *text*.

        Returns False, leaving the transcript untouched, when the text is
        blank or another turn is already running for this conversation.
        """
        text = text.strip()
        if not text or self.busy:
            logger.debug("submit_ignored", agent_id=self.agent.id, busy=self.busy)
            return False

        self._state = TurnState.AWAITING_MODEL
        log = logger.bind(user_id=self.user_id, agent_id=self.agent.id)
        log.info("turn_started", length=len(text))
        try:
            self._append(ChatMessage.user(text))
            final_text = await self._run_rounds(log)
            self._append(ChatMessage.model(final_text))
            self._record_activity(text)
        except Exception as e:
            log.error("model_backend_error", error=str(e), error_type=type(e).__name__)
            self._append(ChatMessage.model(APOLOGY_TEXT))
        finally:
            self._state = TurnState.IDLE
        log.info("turn_finished", transcript_length=len(self._transcript))
        return True

    async def _run_rounds(self, log) -> str:
        settings = await self._session_store.load_settings(self.user_id)
        tools = [t.to_api_dict() for t in self._tool_registry.get_tools_by_names(self.agent.tools)]
        rounds = 0

        while True:
            self._state = TurnState.AWAITING_MODEL
            reply = await self._call_model(
                ModelRequest(
                    model=settings.model,
                    instructions=self._instructions,
                    transcript=list(self._transcript),
                    temperature=settings.temperature,
                    tools=tools,
                    max_tokens=self._config.max_tokens,
                )
            )
            if reply.is_final:
                return reply.text

            if rounds >= self._config.max_tool_rounds:
                log.warning("tool_round_limit_reached", rounds=rounds)
                return ROUND_LIMIT_TEXT

            self._state = TurnState.RESOLVING_TOOLS
            batch = f"round_{uuid.uuid4().hex[:12]}"
            for call in reply.tool_calls:
                message = ChatMessage.pending_tool(call, batch=batch)
                self._append(message)
                result = await self._tool_registry.invoke(call.name, call.args)
                message.resolve(result)
                self._persist()
            rounds += 1

    async def _call_model(self, request: ModelRequest) -> ModelReply:
        return await asyncio.wait_for(
            self._backend.generate(request),
            timeout=self._config.round_timeout,
        )

    def _append(self, message: ChatMessage) -> None:
        self._transcript.append(message)
        self._persist()

    def _persist(self) -> None:
        self._session_store.schedule_save(self.user_id, self.agent.id, self._transcript)

    def _record_activity(self, text: str) -> None:
        if self._activity_log is None:
            return
        preview = text if len(text) <= 30 else text[:30] + "..."
        try:
            self._activity_log.record(self.user_id, f'chatted with {self.agent.name}: "{preview}"', "MessageSquare")
        except Exception as e:
            logger.warning("activity_record_failed", error=str(e))
