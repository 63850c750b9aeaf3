"""Step-by-step giveaway creation in a private chat (/newgiveaway)."""

from __future__ import annotations

from aiogram import F, Router, types
from aiogram.enums import ChatType
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext

from bot import messages
from bot.error_handler import handle_bot_errors
from bot.handlers.admin import publish_giveaway
from bot.keyboards import (
    FORM_ABORT,
    FORM_CONFIRM,
    FORM_WINNERS_CUSTOM,
    FORM_WINNERS_PREFIX,
    confirm_keyboard,
    winners_keyboard,
)
from bot.states import GiveawayFormStates
from config import Config
from core import ValidationError, get_logger
from services.lifecycle import GiveawayService
from utils.validators import parse_close_time, parse_winner_count, validate_text_field

logger = get_logger(__name__)

# Plain text only; commands typed mid-form go to their own handlers
FORM_INPUT = F.text & ~F.text.startswith("/")


class FormHandlers:
    def __init__(self, config: Config, service: GiveawayService) -> None:
        self.config = config
        self.service = service
        self.router = Router(name="giveaway_form")
        admins = set(config.admin_ids)
        self.router.message.filter(F.from_user.id.in_(admins))
        self.router.callback_query.filter(F.from_user.id.in_(admins))
        self._register()

    def setup(self, dispatcher) -> None:
        dispatcher.include_router(self.router)

    def _register(self) -> None:
        self.router.message.register(self.start_form, Command("newgiveaway"))
        self.router.message.register(self.abort, Command("abort"))

        self.router.callback_query.register(self.abort_callback, F.data == FORM_ABORT)
        self.router.callback_query.register(
            self.choose_custom, GiveawayFormStates.winners, F.data == FORM_WINNERS_CUSTOM
        )
        self.router.callback_query.register(
            self.choose_preset,
            GiveawayFormStates.winners,
            F.data.regexp(rf"^{FORM_WINNERS_PREFIX}\d+$"),
        )
        self.router.callback_query.register(self.confirm, GiveawayFormStates.confirm, F.data == FORM_CONFIRM)
        # Buttons of a form that was finished, aborted or lost on restart
        self.router.callback_query.register(self.expired, F.data.startswith("fw_"))

        self.router.message.register(self.enter_custom_winners, GiveawayFormStates.custom_winners, FORM_INPUT)
        self.router.message.register(self.enter_close_time, GiveawayFormStates.close_time, FORM_INPUT)
        self.router.message.register(self.enter_prize, GiveawayFormStates.prize, FORM_INPUT)
        self.router.message.register(self.enter_sponsor, GiveawayFormStates.sponsor, FORM_INPUT)

    # --- Entry / exit -----------------------------------------------------------

    async def start_form(self, message: types.Message, state: FSMContext) -> None:
        if message.chat.type != ChatType.PRIVATE:
            await message.answer(messages.PRIVATE_ONLY.format(command="/newgiveaway"))
            return
        if await self.service.default_group() is None:
            await message.answer(messages.NO_GROUP)
            return
        await state.clear()
        await state.set_state(GiveawayFormStates.winners)
        await message.answer(messages.FORM_START, reply_markup=winners_keyboard())

    async def abort(self, message: types.Message, state: FSMContext) -> None:
        await state.clear()
        await message.answer(messages.FORM_ABORTED)

    async def abort_callback(self, callback: types.CallbackQuery, state: FSMContext) -> None:
        await state.clear()
        if callback.message:
            await callback.message.edit_text(messages.FORM_ABORTED)
        await callback.answer("Đã hủy")

    async def expired(self, callback: types.CallbackQuery) -> None:
        await callback.answer(messages.FORM_EXPIRED, show_alert=True)

    # --- Step 1: winners ----------------------------------------------------------

    async def choose_preset(self, callback: types.CallbackQuery, state: FSMContext) -> None:
        winners = int(callback.data[len(FORM_WINNERS_PREFIX):])
        await state.update_data(winners=winners)
        await state.set_state(GiveawayFormStates.close_time)
        if callback.message:
            await callback.message.edit_text(messages.FORM_ASK_TIME)
        await callback.answer("OK")

    async def choose_custom(self, callback: types.CallbackQuery, state: FSMContext) -> None:
        await state.set_state(GiveawayFormStates.custom_winners)
        if callback.message:
            await callback.message.edit_text(messages.FORM_ASK_CUSTOM_WINNERS)
        await callback.answer("Nhập số")

    async def enter_custom_winners(self, message: types.Message, state: FSMContext) -> None:
        try:
            winners = parse_winner_count(message.text)
        except ValidationError:
            await message.answer(messages.FORM_BAD_WINNERS)
            return
        await state.update_data(winners=winners)
        await state.set_state(GiveawayFormStates.close_time)
        await message.answer(messages.form_winners_chosen(winners))

    # --- Steps 2-4: text fields -----------------------------------------------------

    async def enter_close_time(self, message: types.Message, state: FSMContext) -> None:
        try:
            end_time = parse_close_time(message.text, self.config.timezone)
        except ValidationError:
            await message.answer(messages.FORM_BAD_TIME)
            return
        if end_time <= self.service.clock():
            await message.answer(messages.FORM_PAST_TIME)
            return
        await state.update_data(end_time=end_time)
        await state.set_state(GiveawayFormStates.prize)
        await message.answer(messages.FORM_ASK_PRIZE)

    async def enter_prize(self, message: types.Message, state: FSMContext) -> None:
        try:
            prize = validate_text_field(message.text, "BAD_PRIZE")
        except ValidationError:
            await message.answer(messages.FORM_SHORT_PRIZE)
            return
        await state.update_data(prize=prize)
        await state.set_state(GiveawayFormStates.sponsor)
        await message.answer(messages.FORM_ASK_SPONSOR)

    async def enter_sponsor(self, message: types.Message, state: FSMContext) -> None:
        try:
            sponsor = validate_text_field(message.text, "BAD_SPONSOR")
        except ValidationError:
            await message.answer(messages.FORM_SHORT_SPONSOR)
            return
        data = await state.update_data(sponsor=sponsor)
        await state.set_state(GiveawayFormStates.confirm)
        await message.answer(
            messages.form_preview(
                data["winners"], data["end_time"], data["prize"], sponsor, self.config.timezone
            ),
            reply_markup=confirm_keyboard(),
        )

    # --- Step 5: confirm --------------------------------------------------------------

    @handle_bot_errors("Không tạo được giveaway")
    async def confirm(self, callback: types.CallbackQuery, state: FSMContext) -> None:
        data = await state.get_data()
        group_id = await self.service.default_group()
        if group_id is None:
            await state.clear()
            await callback.answer("Chưa set group (/setgroup).", show_alert=True)
            return
        if not all(data.get(key) for key in ("winners", "end_time", "prize", "sponsor")):
            await callback.answer("Thiếu dữ liệu form.", show_alert=True)
            return

        await state.clear()
        await callback.answer("Đang tạo")
        if callback.message is None:
            return
        await callback.message.edit_text(messages.FORM_CREATING)
        await publish_giveaway(
            self.service,
            callback.message,
            group_id,
            data["winners"],
            data["end_time"],
            data["prize"],
            data["sponsor"],
        )


def setup_form_handlers(dispatcher, *, config: Config, service: GiveawayService) -> FormHandlers:
    handler = FormHandlers(config, service)
    handler.setup(dispatcher)
    return handler
