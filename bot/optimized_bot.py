"""Telegram bot wrapper around aiogram."""

from __future__ import annotations

from contextlib import suppress

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.types import LinkPreviewOptions


class OptimizedBot:
    """Owns the aiogram Bot and Dispatcher; form state is kept in memory."""

    def __init__(self, token: str) -> None:
        self.bot = Bot(
            token=token,
            default=DefaultBotProperties(
                parse_mode=ParseMode.HTML,
                link_preview=LinkPreviewOptions(is_disabled=True),
            ),
        )
        self.storage = MemoryStorage()
        self.dispatcher = Dispatcher(storage=self.storage)

    async def start(self) -> None:
        await self.dispatcher.start_polling(self.bot)

    async def stop(self) -> None:
        # Raises when polling already ended through a signal
        with suppress(RuntimeError):
            await self.dispatcher.stop_polling()
        await self.dispatcher.storage.close()
        await self.bot.session.close()
