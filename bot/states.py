"""Finite-state machine definitions for the giveaway creation form."""

from aiogram.fsm.state import State, StatesGroup


class GiveawayFormStates(StatesGroup):
    winners = State()
    custom_winners = State()  # "Nhập khác" chosen, waiting for a typed number
    close_time = State()
    prize = State()
    sponsor = State()
    confirm = State()
