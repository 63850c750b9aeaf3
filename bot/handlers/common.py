"""Commands available to everyone."""

from aiogram import Router, types
from aiogram.filters import Command, CommandStart

from bot import messages
from config import Config


class CommonHandlers:
    def __init__(self, config: Config) -> None:
        self.config = config
        self.router = Router(name="common")
        self._register()

    def setup(self, dispatcher) -> None:
        dispatcher.include_router(self.router)

    def _register(self) -> None:
        self.router.message.register(self.start, CommandStart())
        self.router.message.register(self.help, Command("help"))

    async def start(self, message: types.Message) -> None:
        await message.answer(messages.welcome(self.config.start_link))

    async def help(self, message: types.Message) -> None:
        is_admin = message.from_user is not None and self.config.is_admin(message.from_user.id)
        await message.answer(messages.help_text(is_admin))


def setup_common_handlers(dispatcher, *, config: Config) -> CommonHandlers:
    handler = CommonHandlers(config)
    handler.setup(dispatcher)
    return handler
