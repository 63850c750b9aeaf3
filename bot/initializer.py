"""Bot initialization module."""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.logger import get_logger

if TYPE_CHECKING:
    from config import Config
    from services.lifecycle import GiveawayService
    from services.scheduler import DrawScheduler

logger = get_logger(__name__)


class BotInitializer:
    """Registers handlers and middleware on an already created bot."""

    def __init__(self, config: Config, service: GiveawayService, scheduler: DrawScheduler):
        self.config = config
        self.service = service
        self.scheduler = scheduler

    def register(self, bot) -> None:
        from bot.handlers import (
            setup_admin_handlers,
            setup_common_handlers,
            setup_form_handlers,
            setup_join_handlers,
        )
        from bot.middleware import setup_rate_limit_middleware

        dispatcher = bot.dispatcher

        # Routers registered earlier see updates first
        setup_common_handlers(dispatcher, config=self.config)
        setup_join_handlers(dispatcher, service=self.service)
        setup_form_handlers(dispatcher, config=self.config, service=self.service)
        setup_admin_handlers(
            dispatcher, config=self.config, service=self.service, scheduler=self.scheduler
        )
        logger.info("✅ Handlers registered")

        setup_rate_limit_middleware(dispatcher)
        logger.info("✅ Middleware configured")
