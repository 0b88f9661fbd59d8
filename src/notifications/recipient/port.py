"""Recipient directory port — resolves a user to the devices that can receive pushes."""

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field


class NotificationTarget(BaseModel):
    """A user's push registrations.

    ``push_token`` is the most recently registered device; ``device_tokens``
    holds every other device the user signed in from.
    """

    user_id: str
    push_token: str | None = None
    device_tokens: list[str] = Field(default_factory=list)

    def tokens(self) -> list[str]:
        """Every usable token, de-duplicated, in registration order."""
        seen: list[str] = []
        for token in [self.push_token, *self.device_tokens]:
            if token and token not in seen:
                seen.append(token)
        return seen

    @property
    def is_reachable(self) -> bool:
        return bool(self.tokens())


class RecipientDirectory(ABC):
    """Abstract interface for recipient directory adapters."""

    @abstractmethod
    async def get_target(self, user_id: str) -> NotificationTarget | None:
        """Return the user's registrations, or None for an unknown user."""
        ...

    @abstractmethod
    async def prune_tokens(self, user_id: str, tokens: list[str]) -> None:
        """Forget tokens the push service reported as unregistered."""
        ...
