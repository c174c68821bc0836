"""One user's agent team: active agent selection, hand-offs and affordances."""

from __future__ import annotations

from typing import TYPE_CHECKING

from creator_agents.ai.directives import Affordance, ExternalAction, HandOff, ParsedReply, render_message
from creator_agents.core.models import AgentSettings, User
from creator_agents.core.orchestrator import ConversationOrchestrator
from creator_agents.core.types import HandoffOutcome
from creator_agents.log import get_logger

if TYPE_CHECKING:
    from creator_agents.agents.registry import Agent, AgentRegistry
    from creator_agents.ai.client import ModelBackend
    from creator_agents.ai.tools.registry import ToolRegistry
    from creator_agents.config import OrchestratorConfig
    from creator_agents.core.models import ChatMessage
    from creator_agents.core.session import SessionStore
    from creator_agents.storage.activity_repo import ActivityLog

logger = get_logger(__name__)


class AgentTeam:
    """Tracks which agent a user is talking to and dispatches hand-offs.

    Each agent gets its own orchestrator, created on first use from the
    conversation stored for (user, agent).
    """

    def __init__(
        self,
        user: User,
        registry: AgentRegistry,
        backend: ModelBackend,
        tool_registry: ToolRegistry,
        session_store: SessionStore,
        config: OrchestratorConfig | None = None,
        activity_log: ActivityLog | None = None,
    ):
        self.user = user
        self.registry = registry
        self._backend = backend
        self._tool_registry = tool_registry
        self._session_store = session_store
        self._config = config
        self._activity_log = activity_log
        self._orchestrators: dict[str, ConversationOrchestrator] = {}
        self._active_id: str | None = None

    @property
    def active(self) -> ConversationOrchestrator | None:
        if self._active_id is None:
            return None
        return self._orchestrators.get(self._active_id)

    @property
    def active_agent(self) -> Agent | None:
        orchestrator = self.active
        return orchestrator.agent if orchestrator else None

    async def switch(self, agent_id: str) -> ConversationOrchestrator | None:
        """Make *agent_id* the active agent, loading its conversation if needed."""
        agent = self.registry.find_agent(agent_id)
        if agent is None:
            logger.info("agent_unknown", agent_id=agent_id)
            return None

        orchestrator = self._orchestrators.get(agent.id)
        if orchestrator is None:
            orchestrator = await self._open(agent)
            self._orchestrators[agent.id] = orchestrator
        self._active_id = agent.id
        logger.debug("agent_switched", user_id=self.user.id, agent_id=agent.id)
        return orchestrator

    async def _open(self, agent: Agent) -> ConversationOrchestrator:
        transcript = await self._session_store.load_conversation(self.user.id, agent)
        return ConversationOrchestrator(
            user_id=self.user.id,
            agent=agent,
            instructions=self.registry.system_prompt(agent),
            transcript=transcript,
            backend=self._backend,
            tool_registry=self._tool_registry,
            session_store=self._session_store,
            config=self._config,
            activity_log=self._activity_log,
        )

    async def submit(self, text: str) -> bool:
        """Send *text* to the active agent. No-op when no agent is active."""
        orchestrator = self.active
        if orchestrator is None:
            return False
        return await orchestrator.submit(text)

    async def handoff(self, agent_id: str, seed_prompt: str = "") -> HandoffOutcome:
        """Switch to *agent_id* and, when given, submit *seed_prompt* to it.

        UNAVAILABLE leaves the active agent unchanged. SEED_DROPPED means the
        switch happened but the target was still answering an earlier turn,
        so the prompt was not sent.
        """
        orchestrator = await self.switch(agent_id)
        if orchestrator is None:
            logger.info("handoff_target_unknown", user_id=self.user.id, agent_id=agent_id)
            return HandoffOutcome.UNAVAILABLE
        logger.info("handoff", user_id=self.user.id, agent_id=agent_id, seeded=bool(seed_prompt.strip()))
        if not seed_prompt.strip():
            return HandoffOutcome.SWITCHED
        if await orchestrator.submit(seed_prompt):
            return HandoffOutcome.SEEDED
        logger.info("handoff_seed_dropped", user_id=self.user.id, agent_id=agent_id)
        return HandoffOutcome.SEED_DROPPED

    async def activate(self, affordance: Affordance) -> str:
        """Carry out an affordance and return a notice for the user."""
        if isinstance(affordance, HandOff):
            outcome = await self.handoff(affordance.agent_id, affordance.prompt)
            if outcome == HandoffOutcome.UNAVAILABLE:
                return f"{affordance.agent_name} is not available."
            if outcome == HandoffOutcome.SEED_DROPPED:
                return f"Switched to {affordance.agent_name}, but it is still answering. Your request was not sent."
            return f"Switched to {affordance.agent_name}."
        if isinstance(affordance, ExternalAction):
            logger.info("external_action_simulated", user_id=self.user.id, service=affordance.service)
            return affordance.completion_notice()
        raise TypeError(f"Unsupported affordance: {affordance!r}")

    def render(self, message: ChatMessage) -> ParsedReply:
        return render_message(message, self.registry)

    def last_affordances(self) -> tuple[Affordance, ...]:
        """Affordances of the active conversation's most recent message."""
        orchestrator = self.active
        if orchestrator is None or not orchestrator.transcript:
            return ()
        return self.render(orchestrator.transcript[-1]).affordances

    async def clear(self) -> bool:
        """Forget the active conversation and start over from the greeting.

        Refused while a turn is in flight for that conversation.
        """
        orchestrator = self.active
        if orchestrator is None or orchestrator.busy:
            return False
        await self._session_store.clear_conversation(self.user.id, orchestrator.agent.id)
        orchestrator.reset(await self._session_store.load_conversation(self.user.id, orchestrator.agent))
        return True

    async def settings(self) -> AgentSettings:
        return await self._session_store.load_settings(self.user.id)

    async def update_settings(self, settings: AgentSettings) -> AgentSettings:
        """Raises UnknownModelError or EntitlementError when the model cannot be used."""
        return await self._session_store.update_settings(self.user, settings)
