"""Kibitz: chess analysis sessions with game state, history browsing and a UCI engine."""

__version__ = "0.1.0"
