"""Exception types raised by creator-agents."""

from __future__ import annotations


class CreatorAgentsError(Exception):
    """Base class for all creator-agents errors."""


class ConfigError(CreatorAgentsError):
    """Configuration is present but invalid."""


class EntitlementError(CreatorAgentsError):
    """The user's plan does not allow the requested change."""

    def __init__(self, message: str, *, plan: str, model: str):
        super().__init__(message)
        self.plan = plan
        self.model = model


class UnknownModelError(CreatorAgentsError):
    """The requested model is not one of the configured tiers."""

    def __init__(self, message: str, *, model: str, allowed: list[str]):
        super().__init__(message)
        self.model = model
        self.allowed = allowed
