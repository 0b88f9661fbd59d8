"""Fake push notification adapter — records sent pushes for testing."""

from uuid import uuid4

from notifications.channel.push_port import UNREGISTERED, PushMessage, PushPort


class FakePushAdapter(PushPort):
    """Push adapter that records notifications in memory for test assertions."""

    def __init__(self):
        self.sent_pushes: list[dict] = []
        self.attempts = 0
        self.should_succeed = True
        self.failure_reason = "Push delivery failed"
        self.unregistered_tokens: set[str] = set()

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Push delivery failed",
        unregistered_tokens: tuple[str, ...] = (),
    ):
        """Configure the fake adapter behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.unregistered_tokens = set(unregistered_tokens)

    async def send(self, device_token: str, message: PushMessage) -> dict:
        self.attempts += 1
        if device_token in self.unregistered_tokens:
            return {
                "message_id": None,
                "status": "failed",
                "error": "Registration token is not registered",
                "code": UNREGISTERED,
            }
        if not self.should_succeed:
            return {
                "message_id": None,
                "status": "failed",
                "error": self.failure_reason,
            }

        message_id = f"push-{uuid4().hex[:12]}"
        record = {
            "message_id": message_id,
            "device_token": device_token,
            "title": message.title,
            "body": message.body,
            "deep_link": message.deep_link,
            "data": dict(message.data),
        }
        self.sent_pushes.append(record)

        return {"message_id": message_id, "status": "sent"}

    def pushes_to(self, device_token: str) -> list[dict]:
        return [p for p in self.sent_pushes if p["device_token"] == device_token]

    def reset(self):
        """Clear sent pushes (useful between tests)."""
        self.sent_pushes.clear()
        self.attempts = 0
        self.should_succeed = True
        self.failure_reason = "Push delivery failed"
        self.unregistered_tokens = set()
