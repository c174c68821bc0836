"""YouTube video search grounded in web search results."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from creator_agents.ai.tools.base import Tool
from creator_agents.log import get_logger

if TYPE_CHECKING:
    from creator_agents.ai.client import ModelBackend

logger = get_logger(__name__)

SEARCH_PROMPT = (
    'Use web search to find YouTube videos about "{query}". Return a summary of the top 3 '
    "results including title, channel, and a brief description. Format the response as a "
    "single, readable string."
)


class YouTubeSearchTool(Tool):
    """Finds existing YouTube videos on a topic so agents can ground their ideas."""

    def __init__(self, backend: ModelBackend, model: str):
        self._backend = backend
        self._model = model

    @property
    def name(self) -> str:
        return "youtubeSearch"

    @property
    def description(self) -> str:
        return (
            "Search YouTube for videos about a topic. Returns the top 3 results with "
            "title, channel and a short description."
        )

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The topic or search phrase, e.g. 'cooking channel ideas'",
                },
            },
            "required": ["query"],
        }

    async def execute(self, **kwargs: Any) -> str:
        query = str(kwargs.get("query", "")).strip()
        if not query:
            return "Error: query is required"

        try:
            text = await self._backend.search(SEARCH_PROMPT.format(query=query), model=self._model)
        except Exception as e:
            logger.error("youtube_search_failed", query=query, error=str(e))
            return "Sorry, I was unable to perform the search."

        return text or "I couldn't find any information on that topic."
