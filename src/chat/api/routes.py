"""FastAPI routes for chat sessions."""

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from chat.session import get_or_create_session
from ordering.api.dependencies import current_actor
from ordering.order.order import Actor

router = APIRouter(prefix="/chats", tags=["chats"])


class OpenChatRequest(BaseModel):
    participant_id: str = Field(min_length=1, description="The store (or buyer) to chat with")


class ChatSessionResponse(BaseModel):
    chat_id: str
    participants: list[str]
    created_at: datetime


@router.post("", response_model=ChatSessionResponse)
async def open_chat(body: OpenChatRequest, actor: Actor = Depends(current_actor)) -> ChatSessionResponse:
    session = await get_or_create_session(actor.actor_id, body.participant_id)
    return ChatSessionResponse(
        chat_id=session.id,
        participants=list(session.participants),
        created_at=session.created_at,
    )
