"""Telegram surface of the giveaway bot."""
