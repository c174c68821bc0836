"""Model backend abstraction with an Anthropic API implementation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from creator_agents.ai.conversation import build_messages
from creator_agents.config import AnthropicConfig
from creator_agents.core.models import ChatMessage, ToolCall
from creator_agents.log import get_logger

logger = get_logger(__name__)

WEB_SEARCH_TOOL = {"type": "web_search_20250305", "name": "web_search", "max_uses": 3}


@dataclass
class ModelRequest:
    """Everything the backend needs for one model round."""

    model: str
    instructions: str
    transcript: list[ChatMessage]
    temperature: float = 0.7
    tools: list[dict[str, Any]] = field(default_factory=list)
    max_tokens: int = 4096


@dataclass
class ModelReply:
    """Either final text or a batch of tool calls, never both."""

    text: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    input_tokens: int = 0
    output_tokens: int = 0
    raw: Any = None

    @property
    def is_final(self) -> bool:
        return not self.tool_calls


class ModelBackend(ABC):
    """Abstract base class for language model backends."""

    @abstractmethod
    async def generate(self, request: ModelRequest) -> ModelReply:
        """Run one model round over the request's transcript."""
        ...

    @abstractmethod
    async def search(self, prompt: str, model: str) -> str:
        """Answer *prompt* with web search grounding and return plain text."""
        ...


class AnthropicBackend(ModelBackend):
    """Anthropic Messages API backend using the official SDK."""

    def __init__(self, config: AnthropicConfig):
        import anthropic

        self._client = anthropic.AsyncAnthropic(
            api_key=config.api_key,
            base_url=config.base_url,
            max_retries=config.max_retries,
            timeout=config.timeout,
        )

    async def generate(self, request: ModelRequest) -> ModelReply:
        kwargs: dict[str, Any] = {
            "model": request.model,
            "max_tokens": request.max_tokens,
            "system": request.instructions,
            "messages": build_messages(request.transcript),
            "temperature": request.temperature,
        }
        if request.tools:
            kwargs["tools"] = request.tools

        logger.debug("api_request", model=request.model, message_count=len(kwargs["messages"]))
        response = await self._client.messages.create(**kwargs)
        logger.debug(
            "api_response",
            model=request.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            stop_reason=response.stop_reason,
        )
        return self._to_reply(response)

    async def search(self, prompt: str, model: str) -> str:
        response = await self._client.messages.create(
            model=model,
            max_tokens=1024,
            messages=[{"role": "user", "content": prompt}],
            tools=[WEB_SEARCH_TOOL],
        )
        return "\n".join(b.text for b in response.content if b.type == "text").strip()

    @staticmethod
    def _to_reply(response: Any) -> ModelReply:
        tool_calls = [
            ToolCall(id=b.id, name=b.name, args=dict(b.input or {}))
            for b in response.content
            if b.type == "tool_use"
        ]
        text = "\n".join(b.text for b in response.content if b.type == "text")
        if not tool_calls and not text.strip():
            raise ValueError(f"Empty model response (stop_reason={response.stop_reason})")
        return ModelReply(
            text="" if tool_calls else text,
            tool_calls=tool_calls,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            raw=response,
        )
