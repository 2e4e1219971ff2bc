"""Chess domain primitives: colors, moves, ply arithmetic and the rules backend."""

from kibitz.core.enums import Color, GameEndReason, PromotionPiece
from kibitz.core.move import Move, MoveRecord
from kibitz.core.notation import STARTING_FEN, fen_ply, fullmoves_to_ply, ply_turn
from kibitz.core.rules import ChessRules, MaterialInfo, RulesAdapter

__all__ = [
    "STARTING_FEN",
    "ChessRules",
    "Color",
    "GameEndReason",
    "MaterialInfo",
    "Move",
    "MoveRecord",
    "PromotionPiece",
    "RulesAdapter",
    "fen_ply",
    "fullmoves_to_ply",
    "ply_turn",
]
