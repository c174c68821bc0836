"""Extract ACTION and HANDOFF directives from final model replies.

Directives are sentinel-tagged substrings embedded in free-form model text:

    ACTION:[EMAIL,"Hi Acme team, ..."]
    HANDOFF:[writer,"write a script about X"]

Each recognised directive is removed from the displayed text and turned into
an affordance the user can activate. Payloads may span multiple lines.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional, Union

from creator_agents.core.types import Role

if TYPE_CHECKING:
    from creator_agents.agents.registry import AgentRegistry
    from creator_agents.core.models import ChatMessage

SERVICE_LABELS: dict[str, str] = {
    "SOCIAL_POST": "Social Post",
    "EMAIL": "Email",
    "CLOUD_DRIVE": "Cloud Drive",
    "TEAM_CHAT": "Team Chat",
}

ACTION_PATTERN = re.compile(
    r'ACTION:\[\s*(' + "|".join(SERVICE_LABELS) + r')\s*,\s*"(.*?)"\]',
    re.DOTALL,
)
HANDOFF_PATTERN = re.compile(
    r'HANDOFF:\[\s*([\w-]+)\s*,\s*"(.*?)"\]',
    re.DOTALL,
)

_BLANK_RUN = re.compile(r"\n{3,}")


@dataclass(frozen=True)
class ExternalAction:
    service: str
    payload: str
    span: tuple[int, int]

    @property
    def service_label(self) -> str:
        return SERVICE_LABELS[self.service]

    @property
    def label(self) -> str:
        return f"Send to {self.service_label}"

    def completion_notice(self) -> str:
        """Notice shown when the action is activated. No external call is made."""
        preview = self.payload if len(self.payload) <= 40 else self.payload[:40] + "..."
        return f'{self.service_label} action completed (simulated): "{preview}"'


@dataclass(frozen=True)
class HandOff:
    agent_id: str
    agent_name: str
    prompt: str
    span: tuple[int, int]

    @property
    def label(self) -> str:
        return f"Ask {self.agent_name}"


Affordance = Union[ExternalAction, HandOff]


@dataclass(frozen=True)
class ParsedReply:
    display_text: str
    affordances: tuple[Affordance, ...] = ()


def _action_rule(match: re.Match, registry: AgentRegistry) -> Optional[Affordance]:
    return ExternalAction(service=match.group(1), payload=match.group(2).strip(), span=match.span())


def _handoff_rule(match: re.Match, registry: AgentRegistry) -> Optional[Affordance]:
    agent = registry.find_agent(match.group(1))
    if agent is None:
        # Unresolvable target: the directive is still stripped, just not offered.
        return None
    return HandOff(agent_id=agent.id, agent_name=agent.name, prompt=match.group(2).strip(), span=match.span())


_RULES: tuple[tuple[re.Pattern, Callable[[re.Match, "AgentRegistry"], Optional[Affordance]]], ...] = (
    (ACTION_PATTERN, _action_rule),
    (HANDOFF_PATTERN, _handoff_rule),
)


def parse_reply(text: str, registry: AgentRegistry) -> ParsedReply:
    """Strip every directive from *text* and collect affordances in source order."""
    matches: list[tuple[re.Match, Callable]] = []
    for pattern, extractor in _RULES:
        matches.extend((m, extractor) for m in pattern.finditer(text))
    matches.sort(key=lambda item: item[0].start())

    pieces: list[str] = []
    affordances: list[Affordance] = []
    cursor = 0
    for match, extractor in matches:
        start, end = match.span()
        if start < cursor:
            # Nested inside an earlier directive's payload; already removed.
            continue
        pieces.append(text[cursor:start])
        cursor = end
        affordance = extractor(match, registry)
        if affordance is not None:
            affordances.append(affordance)
    pieces.append(text[cursor:])

    display = _BLANK_RUN.sub("\n\n", "".join(pieces)).strip()
    return ParsedReply(display_text=display, affordances=tuple(affordances))


def render_message(message: ChatMessage, registry: AgentRegistry) -> ParsedReply:
    """Parse final model messages; every other role is displayed verbatim."""
    if message.role != Role.MODEL:
        return ParsedReply(display_text=message.content)
    return parse_reply(message.content, registry)
