"""Operator commands: default group, quick create, history, proof, cancel, announce."""

from __future__ import annotations

from typing import Optional

from aiogram import F, Router, types
from aiogram.enums import ChatType
from aiogram.filters import Command, CommandObject

from bot import messages
from bot.error_handler import handle_bot_errors
from config import Config
from core import DeliveryError, GiveawayNotFoundError, ValidationError, get_logger
from services.lifecycle import GiveawayService
from services.scheduler import DrawScheduler
from utils.validators import parse_giveaway_args, parse_giveaway_id

logger = get_logger(__name__)


async def publish_giveaway(
    service: GiveawayService,
    reply_to: types.Message,
    chat_id: int,
    winners: int,
    end_time: int,
    prize: str,
    sponsor: str,
) -> None:
    """Create a giveaway in ``chat_id`` and report the outcome to the operator."""
    try:
        giveaway = await service.create_giveaway(chat_id, winners, end_time, prize, sponsor)
    except DeliveryError as e:
        logger.warning(f"Giveaway post failed: {e}")
        await reply_to.answer(messages.DELIVERY_FAILED)
        return
    await reply_to.answer(messages.created(giveaway, service.timezone))


def _first_arg(command: CommandObject) -> Optional[str]:
    return command.args.split()[0] if command.args else None


def _is_private(message: types.Message) -> bool:
    return message.chat.type == ChatType.PRIVATE


class AdminHandlers:
    def __init__(self, config: Config, service: GiveawayService, scheduler: DrawScheduler) -> None:
        self.config = config
        self.service = service
        self.scheduler = scheduler
        self.router = Router(name="admin")
        self.router.message.filter(F.from_user.id.in_(set(config.admin_ids)))
        self._register()

    def setup(self, dispatcher) -> None:
        dispatcher.include_router(self.router)

    def _register(self) -> None:
        self.router.message.register(self.set_group, Command("setgroup"))
        self.router.message.register(self.show_group, Command("group"))
        self.router.message.register(self.quick_create, Command("giveaway"))
        self.router.message.register(self.history, Command("history"))
        self.router.message.register(self.info, Command("ginfo"))
        self.router.message.register(self.proof, Command("proof"))
        self.router.message.register(self.cancel, Command("cancel"))
        self.router.message.register(self.announce, Command("announce"))

    # --- Default group ------------------------------------------------------

    @handle_bot_errors("Không lưu được group mặc định")
    async def set_group(self, message: types.Message) -> None:
        if _is_private(message):
            await message.answer("Vào group muốn bot đăng giveaway và gõ: /setgroup")
            return
        await self.service.set_default_group(message.chat.id)
        await message.answer(f"✅ Đã set group mặc định: <code>{message.chat.id}</code>")

    @handle_bot_errors("Không đọc được group mặc định")
    async def show_group(self, message: types.Message) -> None:
        group_id = await self.service.default_group()
        if group_id is None:
            await message.answer("⚠️ Chưa set group. Vào group và gõ /setgroup")
            return
        await message.answer(f"📌 Group mặc định: <code>{group_id}</code>")

    # --- Creation -------------------------------------------------------------

    @handle_bot_errors("Không tạo được giveaway")
    async def quick_create(self, message: types.Message) -> None:
        if not _is_private(message):
            await message.answer("ℹ️ Tạo giveaway bằng DM hoặc dùng /newgiveaway.")
            return

        group_id = await self.service.default_group()
        if group_id is None:
            await message.answer(messages.NO_GROUP)
            return

        try:
            args = parse_giveaway_args(message.text or "", self.config.timezone)
            if args.end_time <= self.service.clock():
                raise ValidationError("BAD_TIME", "Close time must be in the future")
        except ValidationError as e:
            logger.debug(f"Rejected /giveaway from {message.from_user.id}: {e.code}")
            await message.answer(messages.usage())
            return

        await publish_giveaway(
            self.service, message, group_id, args.winners, args.end_time, args.prize, args.sponsor
        )

    # --- Read paths -----------------------------------------------------------

    @handle_bot_errors("Không đọc được lịch sử")
    async def history(self, message: types.Message) -> None:
        giveaways = await self.service.history()
        await message.answer(messages.history(giveaways, self.config.timezone))

    @handle_bot_errors("Không đọc được giveaway")
    async def info(self, message: types.Message, command: CommandObject) -> None:
        try:
            giveaway = await self.service.get(parse_giveaway_id(_first_arg(command)))
        except ValidationError:
            await message.answer("Dùng: /ginfo &lt;id&gt;")
            return
        except GiveawayNotFoundError:
            await message.answer(messages.NOT_FOUND)
            return

        private = _is_private(message)
        count = await self.service.participant_count(giveaway.id)
        winners = await self.service.winners(giveaway.id)
        await message.answer(
            messages.giveaway_info(
                giveaway,
                count,
                winners,
                self.config.timezone,
                include_proof=private,
                state=await self.service.state_of(giveaway),
                verified=await self.service.verify_draw(giveaway) if private else None,
            )
        )

    @handle_bot_errors("Không đọc được proof")
    async def proof(self, message: types.Message, command: CommandObject) -> None:
        if not _is_private(message):
            await message.answer(messages.PRIVATE_ONLY.format(command="/proof"))
            return
        try:
            giveaway = await self.service.get(parse_giveaway_id(_first_arg(command)))
        except ValidationError:
            await message.answer("Dùng: /proof &lt;id&gt;")
            return
        except GiveawayNotFoundError:
            await message.answer(messages.NOT_FOUND)
            return
        verified = await self.service.verify_draw(giveaway)
        await message.answer(messages.proof(giveaway, self.config.timezone, verified))

    # --- Transitions ------------------------------------------------------------

    @handle_bot_errors("Không hủy được giveaway")
    async def cancel(self, message: types.Message, command: CommandObject) -> None:
        parts = (command.args or "").split(maxsplit=1)
        try:
            giveaway_id = parse_giveaway_id(parts[0] if parts else None)
        except ValidationError:
            await message.answer("Dùng: /cancel &lt;id&gt; [lý do]")
            return

        reason = parts[1].strip() if len(parts) > 1 else ""
        result = await self.service.cancel(giveaway_id, reason or "Không có")
        logger.info(f"Cancel #{giveaway_id} by {message.from_user.id}: {result.value}")
        await message.answer(messages.CANCEL_REPLIES[result.value].format(id=giveaway_id))

    @handle_bot_errors("Không gửi được kết quả")
    async def announce(self, message: types.Message, command: CommandObject) -> None:
        if not _is_private(message):
            await message.answer(messages.PRIVATE_ONLY.format(command="/announce"))
            return
        try:
            giveaway_id = parse_giveaway_id(_first_arg(command))
        except ValidationError:
            await message.answer("Dùng: /announce &lt;id&gt;")
            return

        result = await self.scheduler.announce(giveaway_id)
        logger.info(f"Manual announce #{giveaway_id} by {message.from_user.id}: {result.value}")
        await message.answer(messages.ANNOUNCE_REPLIES[result.value].format(id=giveaway_id))


def setup_admin_handlers(
    dispatcher, *, config: Config, service: GiveawayService, scheduler: DrawScheduler
) -> AdminHandlers:
    handler = AdminHandlers(config, service, scheduler)
    handler.setup(dispatcher)
    return handler
