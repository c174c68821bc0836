"""Convert a stored transcript to Anthropic API message format."""

from __future__ import annotations

import json
from typing import Any

from creator_agents.core.models import ChatMessage
from creator_agents.core.types import Role


def build_messages(transcript: list[ChatMessage]) -> list[dict[str, Any]]:
    """Convert transcript messages into Anthropic API messages format.

    The API conversation must open with a user turn, so model messages before
    the first user message (the synthesized greeting) are dropped. Consecutive
    tool messages of the same batch become one assistant message of tool_use
    blocks followed by one user message of tool_result blocks, so every round
    the model asked for is replayed as its own exchange. Pending tool messages
    are skipped.
    """
    messages: list[dict[str, Any]] = []
    start = next((i for i, m in enumerate(transcript) if m.role == Role.USER), len(transcript))
    history = transcript[start:]
    i = 0

    while i < len(history):
        msg = history[i]

        if msg.role == Role.USER:
            messages.append({"role": "user", "content": msg.content})
            i += 1

        elif msg.role == Role.MODEL:
            messages.append({"role": "assistant", "content": msg.content})
            i += 1

        else:
            use_blocks: list[dict[str, Any]] = []
            result_blocks: list[dict[str, Any]] = []
            batch = msg.batch
            while i < len(history) and history[i].role == Role.TOOL and history[i].batch == batch:
                tool_msg = history[i]
                i += 1
                if tool_msg.tool_call is None or tool_msg.tool_result is None:
                    continue
                use_blocks.append(
                    {
                        "type": "tool_use",
                        "id": tool_msg.tool_call.id,
                        "name": tool_msg.tool_call.name,
                        "input": tool_msg.tool_call.args,
                    }
                )
                result_blocks.append(
                    {
                        "type": "tool_result",
                        "tool_use_id": tool_msg.tool_call.id,
                        "content": _result_text(tool_msg.tool_result),
                    }
                )
            if use_blocks:
                messages.append({"role": "assistant", "content": use_blocks})
                messages.append({"role": "user", "content": result_blocks})

    return messages


def _result_text(result: Any) -> str:
    if isinstance(result, str):
        return result
    return json.dumps(result, ensure_ascii=False)
