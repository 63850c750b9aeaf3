"""Tests for handler helpers that do not need a live Telegram session."""

import pytest

from conftest import GROUP_ID
from bot import messages
from bot.error_handler import handle_bot_errors
from bot.handlers.admin import publish_giveaway


class FakeMessage:
    def __init__(self) -> None:
        self.replies = []

    async def answer(self, text, **kwargs):
        self.replies.append(text)


@pytest.mark.asyncio
async def test_publish_giveaway_reports_id(service, gateway):
    reply_to = FakeMessage()
    await publish_giveaway(service, reply_to, GROUP_ID, 2, service.clock() + 600, "Prize", "@s")

    [giveaway] = await service.history()
    assert reply_to.replies == [messages.created(giveaway, service.timezone)]
    assert f"#{giveaway.id}" in reply_to.replies[0]


@pytest.mark.asyncio
async def test_publish_giveaway_reports_delivery_failure(service, gateway):
    gateway.fail_public = 1
    reply_to = FakeMessage()
    await publish_giveaway(service, reply_to, GROUP_ID, 2, service.clock() + 600, "Prize", "@s")

    assert reply_to.replies == [messages.DELIVERY_FAILED]
    assert await service.history() == []


class Handlers:
    def __init__(self) -> None:
        self.calls = []

    @handle_bot_errors("boom")
    async def only_message(self, message):
        self.calls.append(message)

    @handle_bot_errors("boom")
    async def failing(self, message, state):
        raise RuntimeError("broken")


@pytest.mark.asyncio
async def test_decorator_drops_unused_context():
    handlers = Handlers()
    await handlers.only_message("event", state="ignored", bot="ignored")
    assert handlers.calls == ["event"]


@pytest.mark.asyncio
async def test_decorator_swallows_and_logs(caplog):
    handlers = Handlers()
    assert await handlers.failing("event", state=None) is None
    assert "Error in failing" in caplog.text
