"""In-memory recipient directory for tests and development."""

import structlog

from notifications.recipient.port import NotificationTarget, RecipientDirectory

logger = structlog.get_logger(__name__)


class InMemoryRecipientDirectory(RecipientDirectory):
    def __init__(self):
        self._targets: dict[str, NotificationTarget] = {}

    def register(
        self,
        user_id: str,
        push_token: str | None = None,
        device_tokens: list[str] | tuple[str, ...] = (),
    ) -> NotificationTarget:
        target = NotificationTarget(user_id=user_id, push_token=push_token, device_tokens=list(device_tokens))
        self._targets[user_id] = target
        return target

    async def get_target(self, user_id: str) -> NotificationTarget | None:
        target = self._targets.get(user_id)
        return target.model_copy(deep=True) if target else None

    async def prune_tokens(self, user_id: str, tokens: list[str]) -> None:
        target = self._targets.get(user_id)
        if target is None:
            return
        stale = set(tokens)
        self._targets[user_id] = NotificationTarget(
            user_id=user_id,
            push_token=None if target.push_token in stale else target.push_token,
            device_tokens=[t for t in target.device_tokens if t not in stale],
        )
        logger.info("Pruned unregistered push tokens", user_id=user_id, count=len(stale))

    def reset(self):
        self._targets.clear()
