"""Tool registry: maps model-requested tool names to local tools and runs them."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from creator_agents.ai.tools.base import Tool
from creator_agents.log import get_logger

if TYPE_CHECKING:
    from creator_agents.ai.client import ModelBackend
    from creator_agents.config import ModelsConfig

logger = get_logger(__name__)


def unknown_tool_result(name: str) -> str:
    return f'Error: Tool "{name}" not found.'


class ToolRegistry:
    """Registry of all available tools."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        self._tools[tool.name] = tool
        logger.info("tool_registered", tool_name=tool.name)

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def get_tools_by_names(self, names: list[str] | tuple[str, ...]) -> list[Tool]:
        """Get a subset of tools by name list."""
        return [self._tools[n] for n in names if n in self._tools]

    async def invoke(self, name: str, args: dict[str, Any] | None = None) -> str:
        """Run a tool and return its result text.

        Unknown tools and tool failures come back as error strings so the
        caller can hand them to the model like any other result.
        """
        tool = self._tools.get(name)
        if tool is None:
            logger.warning("tool_unknown", tool=name)
            return unknown_tool_result(name)
        logger.info("tool_invoked", tool=name)
        try:
            return await tool.execute(**(args or {}))
        except Exception as e:
            logger.error("tool_execution_error", tool=name, error=str(e))
            return f"Error executing {name}: {e}"

    def discover_and_register(self, backend: ModelBackend, models: ModelsConfig) -> None:
        """Import and register all built-in tools."""
        from creator_agents.ai.tools.youtube_search import YouTubeSearchTool

        self.register(YouTubeSearchTool(backend, model=models.search_model))
