"""Centralized error handling for bot handlers."""

from __future__ import annotations

import inspect
from functools import wraps
from typing import Any, Callable

from aiogram import types
from aiogram.exceptions import TelegramAPIError

from core import get_logger
from core.constants import TelegramLimits

logger = get_logger(__name__)


def handle_bot_errors(error_message: str = "Thao tác không thành công"):
    """Decorator for handler methods: log the failure and tell the operator.

    Anything raised past this point did not change the stored state in a
    way the operator can rely on, so the reply says the action did not
    take effect.

    Usage:
        @handle_bot_errors("Không tạo được giveaway")
        async def quick_create(self, message):
            ...
    """
    def decorator(func: Callable) -> Callable:
        # aiogram hands every context value to a **kwargs handler
        params = inspect.signature(func).parameters
        takes_any = any(p.kind is p.VAR_KEYWORD for p in params.values())

        @wraps(func)
        async def wrapper(self, event: Any, *args, **kwargs):
            if not takes_any:
                kwargs = {k: v for k, v in kwargs.items() if k in params}
            try:
                return await func(self, event, *args, **kwargs)
            except Exception as e:
                user_id = getattr(getattr(event, "from_user", None), "id", None)
                logger.error(f"Error in {func.__name__} (user {user_id}): {e}", exc_info=True)
                await _notify_failure(event, error_message)

        return wrapper
    return decorator


async def _notify_failure(event: Any, error_message: str) -> None:
    text = f"❌ {error_message}. Thao tác chưa được thực hiện, hãy thử lại."
    try:
        if isinstance(event, types.CallbackQuery):
            await event.answer(text[: TelegramLimits.CALLBACK_ALERT_MAX_LENGTH], show_alert=True)
        elif isinstance(event, types.Message):
            await event.answer(text)
    except TelegramAPIError as send_error:
        logger.error(f"Failed to send error message: {send_error}")
