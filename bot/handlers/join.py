"""Join button on the group post."""

from __future__ import annotations

from aiogram import F, Router, types

from bot import messages
from bot.error_handler import handle_bot_errors
from bot.keyboards import JOIN_PLACEHOLDER, JOIN_PREFIX
from core import ValidationError, get_logger
from services.lifecycle import GiveawayService, JoinResult
from utils.validators import parse_giveaway_id

logger = get_logger(__name__)


def display_name(user: types.User) -> str:
    return user.first_name or user.username or "User"


class JoinHandlers:
    def __init__(self, service: GiveawayService) -> None:
        self.service = service
        self.router = Router(name="join")
        self._register()

    def setup(self, dispatcher) -> None:
        dispatcher.include_router(self.router)

    def _register(self) -> None:
        self.router.callback_query.register(self.pending, F.data == JOIN_PLACEHOLDER)
        self.router.callback_query.register(self.join, F.data.startswith(JOIN_PREFIX))

    async def pending(self, callback: types.CallbackQuery) -> None:
        await callback.answer(messages.JOIN_PENDING, show_alert=True)

    @handle_bot_errors("Không tham gia được giveaway")
    async def join(self, callback: types.CallbackQuery) -> None:
        try:
            giveaway_id = parse_giveaway_id(callback.data[len(JOIN_PREFIX):])
        except ValidationError:
            await callback.answer(messages.JOIN_ANSWERS[JoinResult.NOT_FOUND.value], show_alert=True)
            return

        user = callback.from_user
        result = await self.service.join(giveaway_id, user.id, display_name(user))
        if result is JoinResult.JOINED:
            logger.info(f"User {user.id} joined giveaway #{giveaway_id}")
        await callback.answer(
            messages.JOIN_ANSWERS[result.value],
            show_alert=result is not JoinResult.JOINED,
        )


def setup_join_handlers(dispatcher, *, service: GiveawayService) -> JoinHandlers:
    handler = JoinHandlers(service)
    handler.setup(dispatcher)
    return handler
