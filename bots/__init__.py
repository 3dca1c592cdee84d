"""Simulated players for HitReveal competitions."""

from .base import GuesserBot, PerfectGuesser
from .random_bot import RandomGuesser

__all__ = ["GuesserBot", "PerfectGuesser", "RandomGuesser"]
