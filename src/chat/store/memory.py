"""In-memory chat session store for tests and development."""

import asyncio

from chat.session import ChatSession
from chat.store.port import ChatSessionStore


class InMemoryChatSessionStore(ChatSessionStore):
    def __init__(self):
        self._sessions: dict[str, ChatSession] = {}
        self._lock: asyncio.Lock | None = None

    async def create_if_absent(self, session: ChatSession) -> tuple[ChatSession, bool]:
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            existing = self._sessions.get(session.id)
            if existing is not None:
                return existing, False
            self._sessions[session.id] = session
            return session, True

    async def get(self, session_id: str) -> ChatSession | None:
        return self._sessions.get(session_id)

    def reset(self):
        self._sessions.clear()
        self._lock = None
