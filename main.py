"""Application entry point."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from config import load_config
from core import setup_logger
from core.app_initializer import ApplicationInitializer


async def main() -> None:
    """Main application entry point."""
    config = load_config()
    level = logging.DEBUG if config.debug else getattr(logging, config.log_level, logging.INFO)
    setup_logger(
        level=level,
        log_file=str(Path(config.log_folder) / "app.log"),
        colored=True,
    )

    app = ApplicationInitializer(config)
    try:
        await app.initialize()
    except Exception:
        await app.cleanup()
        raise
    await app.run()


def run() -> None:
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logging.getLogger("app").info("Application stopped by user")
    except Exception as e:
        logging.getLogger("app").error(f"Application failed: {e}", exc_info=True)
        raise SystemExit(1)


if __name__ == "__main__":
    run()
