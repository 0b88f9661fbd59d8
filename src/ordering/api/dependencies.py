"""Request-scoped dependencies shared by the HTTP routers.

Authentication is handled upstream; the gateway forwards the caller's id and
role in headers.
"""

from fastapi import Header, HTTPException

from ordering.order.order import Actor, ActorRole


async def current_actor(
    x_actor_id: str = Header(...),
    x_actor_role: str = Header(...),
) -> Actor:
    if not x_actor_id.strip():
        raise HTTPException(status_code=422, detail="X-Actor-Id must not be empty")
    try:
        role = ActorRole(x_actor_role.lower())
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown actor role: {x_actor_role}") from None
    if role == ActorRole.SYSTEM:
        # Only in-process callers act as the system
        raise HTTPException(status_code=403, detail="The system role cannot be used over HTTP")
    return Actor(actor_id=x_actor_id, role=role)
