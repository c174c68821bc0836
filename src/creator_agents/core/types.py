"""Shared types and enumerations."""

from __future__ import annotations

from enum import StrEnum


class Role(StrEnum):
    USER = "user"
    MODEL = "model"
    TOOL = "tool"


class Plan(StrEnum):
    FREE = "free"
    STARTER = "starter"
    PRO = "pro"


class TurnState(StrEnum):
    IDLE = "idle"
    AWAITING_MODEL = "awaiting_model"
    RESOLVING_TOOLS = "resolving_tools"


class HandoffOutcome(StrEnum):
    UNAVAILABLE = "unavailable"
    SWITCHED = "switched"
    SEEDED = "seeded"
    SEED_DROPPED = "seed_dropped"
