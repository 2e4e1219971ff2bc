"""Core enumerations for the chess domain."""

from __future__ import annotations

from enum import IntEnum, StrEnum, auto

import chess


class Color(StrEnum):
    """Side color, spelled the way board widgets expect it."""

    WHITE = "white"
    BLACK = "black"

    @property
    def opposite(self) -> Color:
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def as_chess(self) -> chess.Color:
        return self is Color.WHITE

    @classmethod
    def from_chess(cls, color: chess.Color) -> Color:
        return cls.WHITE if color else cls.BLACK


class PromotionPiece(StrEnum):
    """Pieces a pawn may promote to, keyed by their UCI letter."""

    QUEEN = "q"
    ROOK = "r"
    KNIGHT = "n"
    BISHOP = "b"

    @property
    def piece_type(self) -> chess.PieceType:
        return _PROMOTION_TYPES[self]


_PROMOTION_TYPES: dict[PromotionPiece, chess.PieceType] = {
    PromotionPiece.QUEEN: chess.QUEEN,
    PromotionPiece.ROOK: chess.ROOK,
    PromotionPiece.KNIGHT: chess.KNIGHT,
    PromotionPiece.BISHOP: chess.BISHOP,
}


class GameEndReason(IntEnum):
    """Why a game ended.

    The first four are derived from the position after a move; the rest
    can only be supplied by the caller.
    """

    CHECKMATE = auto()
    THREEFOLD_REPETITION = auto()
    INSUFFICIENT_MATERIAL = auto()
    STALEMATE = auto()
    FIFTY_MOVES = auto()
    DRAW_AGREED = auto()
    RESIGNATION = auto()
    TIME_FORFEIT = auto()

    @property
    def is_draw(self) -> bool:
        return self in _DRAW_REASONS


_DRAW_REASONS = frozenset(
    {
        GameEndReason.THREEFOLD_REPETITION,
        GameEndReason.INSUFFICIENT_MATERIAL,
        GameEndReason.STALEMATE,
        GameEndReason.FIFTY_MOVES,
        GameEndReason.DRAW_AGREED,
    }
)
