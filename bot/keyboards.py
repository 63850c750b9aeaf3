"""Inline keyboards for the giveaway post and the creation form."""

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from core.constants import GiveawayDefaults

JOIN_PREFIX = "join_"
JOIN_PLACEHOLDER = "join_pending"

FORM_WINNERS_PREFIX = "fw_w_"
FORM_WINNERS_CUSTOM = "fw_w_custom"
FORM_ABORT = "fw_abort"
FORM_CONFIRM = "fw_confirm"


def join_keyboard(giveaway_id: int | None = None) -> InlineKeyboardMarkup:
    """Join button; without an id the button is a placeholder until the record exists."""
    data = f"{JOIN_PREFIX}{giveaway_id}" if giveaway_id is not None else JOIN_PLACEHOLDER
    return InlineKeyboardMarkup(
        inline_keyboard=[[InlineKeyboardButton(text="🎉 Tham gia", callback_data=data)]]
    )


def winners_keyboard() -> InlineKeyboardMarkup:
    presets = [
        InlineKeyboardButton(text=str(n), callback_data=f"{FORM_WINNERS_PREFIX}{n}")
        for n in GiveawayDefaults.WINNER_PRESETS
    ]
    return InlineKeyboardMarkup(
        inline_keyboard=[
            presets[:3],
            presets[3:] + [InlineKeyboardButton(text="Nhập khác", callback_data=FORM_WINNERS_CUSTOM)],
            [InlineKeyboardButton(text="❌ Hủy form", callback_data=FORM_ABORT)],
        ]
    )


def confirm_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text="✅ Tạo giveaway", callback_data=FORM_CONFIRM),
                InlineKeyboardButton(text="❌ Hủy", callback_data=FORM_ABORT),
            ]
        ]
    )
