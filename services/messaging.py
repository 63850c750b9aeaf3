"""Outbound messaging gateway used by the giveaway engine."""

from __future__ import annotations

from typing import Optional, Protocol

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError, TelegramBadRequest
from aiogram.types import InlineKeyboardMarkup, LinkPreviewOptions
from asyncio_throttle import Throttler

from core import get_logger
from core.constants import MEMBER_STATUSES

logger = get_logger(__name__)

_NO_PREVIEW = LinkPreviewOptions(is_disabled=True)


class MessagingGateway(Protocol):
    """What the engine needs from the chat platform.

    Every call reports failure through its return value instead of raising.
    """

    async def send_public(
        self, chat_id: int, text: str, reply_markup: Optional[InlineKeyboardMarkup] = None
    ) -> Optional[int]:
        """Send to a group; returns the message id or None on failure."""
        ...

    async def edit_public(
        self,
        chat_id: int,
        message_id: int,
        text: str,
        reply_markup: Optional[InlineKeyboardMarkup] = None,
    ) -> bool: ...

    async def edit_markup(
        self, chat_id: int, message_id: int, reply_markup: InlineKeyboardMarkup
    ) -> bool: ...

    async def send_private(self, user_id: int, text: str) -> bool: ...

    async def check_membership(self, chat_id: int, user_id: int) -> bool: ...


class TelegramGateway:
    """MessagingGateway over the Telegram Bot API with outbound throttling."""

    def __init__(self, bot: Bot, rate_limit: int = 20) -> None:
        self.bot = bot
        self.throttler = Throttler(rate_limit=rate_limit, period=1.0)

    async def send_public(
        self, chat_id: int, text: str, reply_markup: Optional[InlineKeyboardMarkup] = None
    ) -> Optional[int]:
        try:
            async with self.throttler:
                message = await self.bot.send_message(
                    chat_id,
                    text,
                    reply_markup=reply_markup,
                    link_preview_options=_NO_PREVIEW,
                )
            return message.message_id
        except TelegramAPIError as e:
            logger.warning(f"send_public to {chat_id} failed: {e}")
            return None

    async def edit_public(
        self,
        chat_id: int,
        message_id: int,
        text: str,
        reply_markup: Optional[InlineKeyboardMarkup] = None,
    ) -> bool:
        try:
            async with self.throttler:
                await self.bot.edit_message_text(
                    text=text,
                    chat_id=chat_id,
                    message_id=message_id,
                    reply_markup=reply_markup,
                    link_preview_options=_NO_PREVIEW,
                )
            return True
        except TelegramBadRequest as e:
            if "message is not modified" in str(e):
                return True
            logger.debug(f"edit_public {chat_id}/{message_id} rejected: {e}")
            return False
        except TelegramAPIError as e:
            logger.debug(f"edit_public {chat_id}/{message_id} failed: {e}")
            return False

    async def edit_markup(
        self, chat_id: int, message_id: int, reply_markup: InlineKeyboardMarkup
    ) -> bool:
        try:
            async with self.throttler:
                await self.bot.edit_message_reply_markup(
                    chat_id=chat_id,
                    message_id=message_id,
                    reply_markup=reply_markup,
                )
            return True
        except TelegramAPIError as e:
            logger.warning(f"edit_markup {chat_id}/{message_id} failed: {e}")
            return False

    async def send_private(self, user_id: int, text: str) -> bool:
        try:
            async with self.throttler:
                await self.bot.send_message(user_id, text, link_preview_options=_NO_PREVIEW)
            return True
        except TelegramAPIError as e:
            logger.warning(f"send_private to {user_id} failed: {e}")
            return False

    async def check_membership(self, chat_id: int, user_id: int) -> bool:
        try:
            member = await self.bot.get_chat_member(chat_id, user_id)
        except TelegramAPIError as e:
            logger.debug(f"get_chat_member {chat_id}/{user_id} failed: {e}")
            return False
        if member.status in MEMBER_STATUSES:
            return True
        return bool(getattr(member, "is_member", False))
