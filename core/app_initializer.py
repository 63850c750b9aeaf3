"""Application initialization orchestrator."""

from __future__ import annotations

from contextlib import suppress
from typing import Optional

from config import Config, load_config
from core.exceptions import ConfigurationError
from core.logger import get_logger
from database import close_db_pool, init_db_pool, run_migrations

logger = get_logger(__name__)


class ApplicationInitializer:
    """Orchestrates application initialization and lifecycle."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or load_config()
        self.db_pool = None
        self.bot = None
        self.gateway = None
        self.service = None
        self.scheduler = None

    async def initialize(self) -> None:
        """Initialize all application components."""
        if not self.config.bot_token:
            raise ConfigurationError("BOT_TOKEN is not set")
        if not self.config.admin_ids:
            logger.warning("ADMIN_IDS is empty: nobody can create giveaways")

        await self._init_database()
        self._init_bot()
        self._init_services()
        self._register_handlers()

    async def run(self) -> None:
        """Run the scheduler and long polling until polling stops."""
        await self.scheduler.start()
        logger.info("🤖 Telegram bot started")
        try:
            await self.bot.start()
        finally:
            await self.cleanup()

    async def cleanup(self) -> None:
        """Cleanup resources."""
        with suppress(Exception):
            if self.scheduler:
                await self.scheduler.stop()
        with suppress(Exception):
            if self.bot:
                await self.bot.stop()
        with suppress(Exception):
            if self.db_pool:
                await close_db_pool()
                self.db_pool = None
        logger.info("Shutdown complete")

    async def _init_database(self) -> None:
        """Initialize database pool and run migrations."""
        self.db_pool = await init_db_pool(
            database_path=self.config.database_path,
            pool_size=self.config.db_pool_size,
            busy_timeout_ms=self.config.db_busy_timeout,
        )
        await run_migrations(self.db_pool)
        logger.info("✅ Database initialized")

    def _init_bot(self) -> None:
        from bot.optimized_bot import OptimizedBot

        self.bot = OptimizedBot(token=self.config.bot_token)

    def _init_services(self) -> None:
        from services.lifecycle import GiveawayService
        from services.messaging import TelegramGateway
        from services.scheduler import DrawScheduler

        self.gateway = TelegramGateway(self.bot.bot, rate_limit=self.config.bot_rate_limit)
        self.service = GiveawayService(self.gateway, timezone=self.config.timezone)
        self.scheduler = DrawScheduler(
            self.service,
            admin_ids=self.config.admin_ids,
            interval=self.config.tick_seconds,
            publish_timeout=self.config.publish_timeout,
        )
        logger.info("✅ Services initialized")

    def _register_handlers(self) -> None:
        from bot.initializer import BotInitializer

        BotInitializer(self.config, self.service, self.scheduler).register(self.bot)
