"""Tests for the fake push adapter and the channel registry."""

import pytest
from notifications.channel import get_push_channel, reset_channels
from notifications.channel.fake_push import FakePushAdapter
from notifications.channel.push_port import UNREGISTERED, PushMessage


def _message(**overrides):
    fields = {"title": "Hola", "body": "Cuerpo", "deep_link": "https://app.example/orders/o1"}
    fields.update(overrides)
    return PushMessage(**fields)


class TestFakePushAdapter:
    def setup_method(self):
        self.adapter = FakePushAdapter()

    async def test_send_records_push(self):
        result = await self.adapter.send("tok-1", _message(data={"url": "https://app.example/orders/o1"}))

        assert result["status"] == "sent"
        assert result["message_id"].startswith("push-")
        [sent] = self.adapter.pushes_to("tok-1")
        assert sent["title"] == "Hola"
        assert sent["data"] == {"url": "https://app.example/orders/o1"}

    async def test_send_failure(self):
        self.adapter.configure(should_succeed=False, failure_reason="FCM error")

        result = await self.adapter.send("tok-1", _message())

        assert result["status"] == "failed"
        assert result["error"] == "FCM error"
        assert self.adapter.sent_pushes == []
        assert self.adapter.attempts == 1

    async def test_unregistered_token(self):
        self.adapter.configure(unregistered_tokens=("tok-old",))

        result = await self.adapter.send("tok-old", _message())

        assert result["status"] == "failed"
        assert result["code"] == UNREGISTERED

    async def test_reset(self):
        await self.adapter.send("tok-1", _message())
        self.adapter.configure(should_succeed=False)
        self.adapter.reset()

        assert self.adapter.sent_pushes == []
        assert self.adapter.attempts == 0
        assert self.adapter.should_succeed is True


class TestChannelRegistry:
    def test_default_is_fake(self):
        assert isinstance(get_push_channel(), FakePushAdapter)

    def test_singleton_until_reset(self):
        first = get_push_channel()
        assert get_push_channel() is first
        reset_channels()
        assert get_push_channel() is not first

    def test_unknown_adapter(self, monkeypatch):
        monkeypatch.setenv("PUSH_ADAPTER", "carrier-pigeon")
        reset_channels()
        with pytest.raises(ValueError, match="Unknown push adapter"):
            get_push_channel()
