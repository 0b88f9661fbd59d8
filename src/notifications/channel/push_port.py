"""Push notification channel port — abstract interface for push dispatch."""

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

# Result code for a token the push service no longer recognises
UNREGISTERED = "unregistered"


class PushMessage(BaseModel):
    """One message, sent unchanged to every device of the recipient.

    ``data`` is read by the background notification handler on the device,
    which opens ``data["url"]`` when the notification is clicked.
    """

    title: str
    body: str
    deep_link: str
    icon: str | None = None
    badge: str | None = None
    data: dict[str, str] = Field(default_factory=dict)


class PushPort(ABC):
    """Abstract interface for push notification dispatch adapters."""

    @abstractmethod
    async def send(self, device_token: str, message: PushMessage) -> dict:
        """Send a push notification to one device.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"),
            error (optional), code (optional, ``UNREGISTERED`` when the
            token should be forgotten)
        """
        ...
