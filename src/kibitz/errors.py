"""Exception taxonomy shared by the game and engine layers.

None of these is fatal to the process: the game layer turns
:class:`IllegalMove` and :class:`PromotionCanceled` into rejected or
abandoned moves, and the engine layer logs the protocol errors at its
``receive`` boundary.
"""

from __future__ import annotations


class KibitzError(Exception):
    """Base class for all library errors."""


class IllegalMove(KibitzError, ValueError):
    """The rules backend refused a move. Game state is unchanged."""


class InvalidPgn(KibitzError, ValueError):
    """PGN text could not be parsed into a complete move list."""


class PromotionCanceled(KibitzError):
    """The pending promotion choice was dismissed; the move is abandoned."""


class EngineCommunicationError(KibitzError):
    """Worker-level failure or an engine line that could not be decoded."""


class ProtocolOutOfOrder(KibitzError):
    """An engine message arrived with no search it could belong to."""
