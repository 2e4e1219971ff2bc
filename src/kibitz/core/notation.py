"""Ply arithmetic and notation constants."""

from __future__ import annotations

import chess

from kibitz.core.enums import Color

STARTING_FEN = chess.STARTING_FEN


def fullmoves_to_ply(turn: Color, move_number: int) -> int:
    """Convert a PGN move number plus side to move into an absolute ply.

    Ply 0 is the initial position before White's first move.
    """
    return max(2 * (move_number - 1), 0) + int(turn is Color.BLACK)


def ply_turn(ply: int) -> Color:
    """Side to move at *ply*."""
    return Color.BLACK if ply % 2 else Color.WHITE


def fen_ply(fen: str) -> int:
    """Absolute ply encoded in the last two fields of *fen*."""
    board = chess.Board(fen)
    return fullmoves_to_ply(Color.from_chess(board.turn), board.fullmove_number)
