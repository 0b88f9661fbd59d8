"""Chat session store port."""

from abc import ABC, abstractmethod

from chat.session import ChatSession


class ChatSessionStore(ABC):
    """Abstract interface for chat session store adapters."""

    @abstractmethod
    async def create_if_absent(self, session: ChatSession) -> tuple[ChatSession, bool]:
        """Store ``session`` unless one with the same id exists.

        Returns:
            The stored session and whether this call created it.
        """
        ...

    @abstractmethod
    async def get(self, session_id: str) -> ChatSession | None: ...
