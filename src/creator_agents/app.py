"""Application wiring - builds all components and manages lifecycle."""

from __future__ import annotations

from creator_agents.agents.registry import AgentRegistry
from creator_agents.ai.client import AnthropicBackend, ModelBackend
from creator_agents.ai.tools.registry import ToolRegistry
from creator_agents.config import AppConfig
from creator_agents.core.models import User
from creator_agents.core.session import SessionStore
from creator_agents.core.team import AgentTeam
from creator_agents.log import get_logger
from creator_agents.storage.activity_repo import ActivityLog
from creator_agents.storage.database import Database
from creator_agents.storage.kv_repo import KeyValueRepository

logger = get_logger(__name__)


class CreatorAgentsApp:
    """Top-level application object."""

    def __init__(self, config: AppConfig, backend: ModelBackend | None = None):
        self.config = config
        self.db = Database(config.storage.db_path)
        self.kv_repo = KeyValueRepository(self.db)
        self.session_store = SessionStore(self.kv_repo, config.models)
        self.activity_log = ActivityLog(self.db)
        self.agent_registry = AgentRegistry()
        self.backend = backend or self._create_backend()
        self.tool_registry = ToolRegistry()

    async def start(self) -> None:
        await self.db.initialize()
        self.tool_registry.discover_and_register(self.backend, self.config.models)
        logger.info("creator_agents_started", agents=len(self.agent_registry.ids()))

    async def stop(self) -> None:
        await self.session_store.flush()
        await self.activity_log.flush()
        await self.db.close()
        logger.info("creator_agents_stopped")

    def team_for(self, user: User) -> AgentTeam:
        return AgentTeam(
            user=user,
            registry=self.agent_registry,
            backend=self.backend,
            tool_registry=self.tool_registry,
            session_store=self.session_store,
            config=self.config.orchestrator,
            activity_log=self.activity_log,
        )

    def _create_backend(self) -> ModelBackend:
        if not self.config.anthropic:
            raise ValueError("No 'anthropic' section in config; a model backend is required")
        return AnthropicBackend(self.config.anthropic)
