"""Conversation, settings and user models.

Everything here round-trips through JSON so the session store can persist
it verbatim.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field

from creator_agents.core.types import Plan, Role


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ToolCall(BaseModel):
    """A model-requested invocation of a named tool."""

    name: str
    args: dict[str, Any] = Field(default_factory=dict)
    id: str = Field(default_factory=lambda: f"call_{uuid.uuid4().hex[:12]}")


class ChatMessage(BaseModel):
    role: Role
    content: str = ""
    tool_call: Optional[ToolCall] = None
    tool_result: Optional[str] = None
    batch: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def user(cls, text: str) -> ChatMessage:
        return cls(role=Role.USER, content=text)

    @classmethod
    def model(cls, text: str) -> ChatMessage:
        return cls(role=Role.MODEL, content=text)

    @classmethod
    def pending_tool(cls, call: ToolCall, batch: Optional[str] = None) -> ChatMessage:
        return cls(role=Role.TOOL, content=f"Using tool: {call.name}...", tool_call=call, batch=batch)

    @property
    def is_pending(self) -> bool:
        return self.role == Role.TOOL and self.tool_result is None

    def resolve(self, result: str) -> None:
        """Attach a tool result. A tool message resolves exactly once."""
        if self.role != Role.TOOL:
            raise ValueError(f"Cannot resolve a {self.role} message")
        if self.tool_result is not None:
            raise ValueError("Tool message already resolved")
        self.tool_result = result
        name = self.tool_call.name if self.tool_call else "tool"
        self.content = f"Used tool: {name}"


class AgentSettings(BaseModel):
    model: str
    temperature: float = Field(default=0.7, ge=0.0, le=1.0)


class User(BaseModel):
    id: str
    name: str = ""
    plan: Plan = Plan.FREE
