"""Giveaway engine services: commitment, selection, lifecycle, scheduling."""
