"""Core competition engine package for HitReveal."""

__all__ = [
    "songs",
    "scoring",
    "settings",
    "turn",
    "roster",
    "modes",
    "playback",
    "game",
    "service",
    "logging",
]
