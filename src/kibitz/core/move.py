"""Move value objects (UCI-style representation)."""

from __future__ import annotations

from dataclasses import dataclass

import chess

from kibitz.core.enums import Color, PromotionPiece


@dataclass(frozen=True, slots=True)
class Move:
    """Immutable move request: origin, destination and optional promotion.

    Squares are algebraic names (``"e2"``). This is what the board layer
    submits and what the engine streams back in principal variations.
    """

    from_square: str
    to_square: str
    promotion: PromotionPiece | None = None

    def __post_init__(self) -> None:
        for name in (self.from_square, self.to_square):
            if name not in chess.SQUARE_NAMES:
                raise ValueError(f"Invalid square name: {name!r}")

    # ── Conversions ──────────────────────────────────────────────────────

    @classmethod
    def from_uci(cls, token: str) -> Move:
        """Parse a 4-5 character UCI token such as ``e7e8q``."""
        if len(token) not in (4, 5):
            raise ValueError(f"Invalid UCI move: {token!r}")
        promotion = PromotionPiece(token[4]) if len(token) == 5 else None
        return cls(token[0:2], token[2:4], promotion)

    @classmethod
    def from_chess(cls, move: chess.Move) -> Move:
        promotion = (
            PromotionPiece(chess.piece_symbol(move.promotion))
            if move.promotion is not None
            else None
        )
        return cls(
            chess.square_name(move.from_square),
            chess.square_name(move.to_square),
            promotion,
        )

    def to_chess(self) -> chess.Move:
        return chess.Move(
            chess.parse_square(self.from_square),
            chess.parse_square(self.to_square),
            self.promotion.piece_type if self.promotion is not None else None,
        )

    def with_promotion(self, promotion: PromotionPiece) -> Move:
        return Move(self.from_square, self.to_square, promotion)

    @property
    def uci(self) -> str:
        """UCI long-algebraic notation."""
        return str(self)

    def __str__(self) -> str:
        suffix = self.promotion.value if self.promotion is not None else ""
        return f"{self.from_square}{self.to_square}{suffix}"


@dataclass(frozen=True, slots=True)
class MoveRecord:
    """A single committed ply in the game history."""

    move: Move
    san: str
    color: Color
    piece: str
    fen_before: str
    fen_after: str
    captured: str | None = None

    @property
    def uci(self) -> str:
        return self.move.uci

    @property
    def promotion(self) -> PromotionPiece | None:
        return self.move.promotion

    @property
    def gives_check(self) -> bool:
        return self.san.endswith(("+", "#"))
