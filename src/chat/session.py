"""Chat session lookup between a buyer and a store.

The session id is derived from the participant pair alone, sorted, so both
sides compute the same id without coordinating. Two first contacts racing
each other both land on the store's create-if-absent and end up with one
session.

Ids may not contain the separator, nor start or end with an underscore, so
the separator occurs exactly once in a session id and two different pairs
can never share one.
"""

from datetime import UTC, datetime

import structlog
from pydantic import BaseModel, Field

from shared.exceptions import ChatSessionInvalid

logger = structlog.get_logger(__name__)

_PREFIX = "chat_"
_SEPARATOR = "__"


class ChatSession(BaseModel):
    id: str
    participants: tuple[str, str]
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


def chat_session_id(first_id: str, second_id: str) -> str:
    """Deterministic session id for a pair of users, in either order."""
    if not first_id or not second_id:
        raise ChatSessionInvalid("Both participants are required")
    if first_id == second_id:
        raise ChatSessionInvalid("A chat needs two different participants", participant_id=first_id)
    for participant_id in (first_id, second_id):
        if _SEPARATOR in participant_id or participant_id.startswith("_") or participant_id.endswith("_"):
            raise ChatSessionInvalid(
                f"Participant ids may not contain {_SEPARATOR!r} or start or end with '_'",
                participant_id=participant_id,
            )
    low, high = sorted((first_id, second_id))
    return f"{_PREFIX}{low}{_SEPARATOR}{high}"


async def get_or_create_session(buyer_id: str, store_id: str, store=None) -> ChatSession:
    from chat.store import get_chat_store

    store = store or get_chat_store()
    session_id = chat_session_id(buyer_id, store_id)
    session, created = await store.create_if_absent(
        ChatSession(id=session_id, participants=tuple(sorted((buyer_id, store_id))))
    )
    if created:
        logger.info("Chat session opened", session_id=session_id)
    return session
