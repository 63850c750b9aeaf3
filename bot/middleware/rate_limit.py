"""Per-user rate limiting for join button spam."""

from __future__ import annotations

import time
from collections import defaultdict, deque
from typing import Any, Awaitable, Callable, Deque, Dict

from aiogram import BaseMiddleware
from aiogram.exceptions import TelegramAPIError
from aiogram.types import CallbackQuery, TelegramObject

from core import RateLimitDefaults, get_logger

logger = get_logger(__name__)


class RateLimitMiddleware(BaseMiddleware):
    """Drops callback queries from a user who clicks faster than the window allows."""

    def __init__(
        self,
        max_callbacks: int = RateLimitDefaults.MAX_CALLBACKS,
        window_seconds: float = RateLimitDefaults.WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__()
        self.max_callbacks = max_callbacks
        self.window = window_seconds
        self.clock = clock
        self._events: Dict[int, Deque[float]] = defaultdict(lambda: deque(maxlen=max_callbacks))
        self._last_sweep = clock()

    @property
    def tracked_users(self) -> int:
        return len(self._events)

    def allow(self, user_id: int) -> bool:
        now = self.clock()
        self._sweep(now)
        bucket = self._events[user_id]
        # Evict old timestamps
        while bucket and now - bucket[0] > self.window:
            bucket.popleft()
        if len(bucket) >= self.max_callbacks:
            return False
        bucket.append(now)
        return True

    def _sweep(self, now: float) -> None:
        """Forget users whose newest click is older than the window."""
        if now - self._last_sweep <= self.window:
            return
        self._last_sweep = now
        idle = [user_id for user_id, bucket in self._events.items() if not bucket or now - bucket[-1] > self.window]
        for user_id in idle:
            del self._events[user_id]

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        if not isinstance(event, CallbackQuery) or event.from_user is None:
            return await handler(event, data)

        if not self.allow(event.from_user.id):
            logger.debug(f"Rate limited callback from {event.from_user.id}")
            try:
                await event.answer("⏱️ Thao tác quá nhanh, thử lại sau vài giây.")
            except TelegramAPIError as e:
                logger.debug(f"Rate limit notice not delivered: {e}")
            return None

        return await handler(event, data)


def setup_rate_limit_middleware(
    dispatcher,
    *,
    max_callbacks: int = RateLimitDefaults.MAX_CALLBACKS,
    window_seconds: float = RateLimitDefaults.WINDOW_SECONDS,
) -> RateLimitMiddleware:
    limiter = RateLimitMiddleware(max_callbacks=max_callbacks, window_seconds=window_seconds)
    dispatcher.callback_query.middleware(limiter)
    return limiter
