"""Session store: per-user, per-agent transcripts and per-user agent settings."""

from __future__ import annotations

import asyncio
from typing import Any

from creator_agents.agents.registry import Agent
from creator_agents.config import ModelsConfig
from creator_agents.core.models import AgentSettings, ChatMessage, User
from creator_agents.errors import EntitlementError, UnknownModelError
from creator_agents.log import get_logger
from creator_agents.storage.kv_repo import KeyValueRepository

logger = get_logger(__name__)

DEFAULT_TEMPERATURE = 0.7


def conversation_key(user_id: str, agent_id: str) -> str:
    return f"conversation:{user_id}:{agent_id}"


def settings_key(user_id: str) -> str:
    return f"settings:{user_id}"


class SessionStore:
    """Loads and saves conversations and settings through a key/value repository."""

    def __init__(self, repo: KeyValueRepository, models: ModelsConfig | None = None):
        self._repo = repo
        self._models = models or ModelsConfig()
        self._pending: set[asyncio.Task] = set()

    @property
    def models(self) -> ModelsConfig:
        return self._models

    # -- conversations -----------------------------------------------------

    async def load_conversation(self, user_id: str, agent: Agent) -> list[ChatMessage]:
        """Return the stored transcript, or a one-message greeting when none is stored.

        A stored empty transcript is returned as-is; only an absent key
        synthesizes the greeting.
        """
        stored = await self._repo.get(conversation_key(user_id, agent.id))
        if stored is None:
            logger.debug("conversation_created", user_id=user_id, agent_id=agent.id)
            return [ChatMessage.model(agent.greeting)]
        return [ChatMessage.model_validate(item) for item in stored]

    async def save_conversation(self, user_id: str, agent_id: str, messages: list[ChatMessage]) -> None:
        await self._repo.set(conversation_key(user_id, agent_id), _dump(messages))

    def schedule_save(self, user_id: str, agent_id: str, messages: list[ChatMessage]) -> None:
        """Persist a snapshot of *messages* in the background.

        The snapshot is taken now, so later in-place edits are not picked up
        until the next call. Write failures are logged and dropped.
        """
        snapshot = _dump(messages)
        task = asyncio.create_task(self._write(conversation_key(user_id, agent_id), snapshot))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _write(self, key: str, value: list[dict[str, Any]]) -> None:
        try:
            await self._repo.set(key, value)
        except Exception as e:
            logger.error("conversation_save_failed", key=key, error=str(e))

    async def flush(self) -> None:
        """Wait for every scheduled write to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    async def clear_conversation(self, user_id: str, agent_id: str) -> None:
        await self.flush()
        await self._repo.delete(conversation_key(user_id, agent_id))
        logger.info("conversation_cleared", user_id=user_id, agent_id=agent_id)

    # -- settings ----------------------------------------------------------

    def default_settings(self) -> AgentSettings:
        return AgentSettings(model=self._models.default, temperature=DEFAULT_TEMPERATURE)

    async def load_settings(self, user_id: str) -> AgentSettings:
        stored = await self._repo.get(settings_key(user_id))
        if stored is None:
            return self.default_settings()
        return AgentSettings.model_validate(stored)

    async def save_settings(self, user_id: str, settings: AgentSettings) -> None:
        await self._repo.set(settings_key(user_id), settings.model_dump(mode="json"))

    def selectable_models(self) -> list[str]:
        return [self._models.default, self._models.pro]

    def is_entitled(self, user: User, model: str) -> bool:
        if model != self._models.pro:
            return True
        return str(user.plan) in self._models.pro_plans

    async def update_settings(self, user: User, settings: AgentSettings) -> AgentSettings:
        """Save settings after checking the user's plan allows the chosen model.

        Raises UnknownModelError when the model is not one of the configured
        tiers and EntitlementError when the plan does not allow it. Nothing is
        written in either case.
        """
        allowed = self.selectable_models()
        if settings.model not in allowed:
            logger.info("settings_rejected", user_id=user.id, model=settings.model, reason="unknown_model")
            raise UnknownModelError(
                f"Unknown model {settings.model!r}. Choose one of: {', '.join(allowed)}.",
                model=settings.model,
                allowed=allowed,
            )
        if not self.is_entitled(user, settings.model):
            logger.info("settings_rejected", user_id=user.id, plan=str(user.plan), model=settings.model)
            raise EntitlementError(
                "The Pro model is only available on the Pro plan.",
                plan=str(user.plan),
                model=settings.model,
            )
        await self.save_settings(user.id, settings)
        logger.info("settings_saved", user_id=user.id, model=settings.model, temperature=settings.temperature)
        return settings


def _dump(messages: list[ChatMessage]) -> list[dict[str, Any]]:
    return [m.model_dump(mode="json") for m in messages]
