"""Game state records: where the game started, where it is, what is shown.

``GameState`` is plain data. All mutation goes through
:class:`kibitz.game.controller.GameController`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from kibitz.core.enums import Color, GameEndReason
from kibitz.game.promotion import PROMOTION_DISABLED, PromotionDialog

if TYPE_CHECKING:
    from kibitz.core.move import Move, MoveRecord
    from kibitz.core.rules import MaterialInfo, RulesAdapter


@dataclass(slots=True, frozen=True)
class GameResult:
    """Decided outcome. ``winner`` is None for draws."""

    winner: Color | None
    reason: GameEndReason

    @classmethod
    def win(cls, winner: Color, reason: GameEndReason) -> GameResult:
        return cls(winner, reason)

    @classmethod
    def draw(cls, reason: GameEndReason) -> GameResult:
        return cls(None, reason)

    @property
    def is_draw(self) -> bool:
        return self.winner is None

    @property
    def pgn_token(self) -> str:
        if self.winner is None:
            return "1/2-1/2"
        return "1-0" if self.winner is Color.WHITE else "0-1"


@dataclass(slots=True, frozen=True)
class Shape:
    """Board annotation: a circle on ``orig`` or an arrow to ``dest``."""

    orig: str
    dest: str | None = None
    brush: str = "green"


@dataclass(slots=True)
class StartInfo:
    fen: str
    ply: int


@dataclass(slots=True)
class CurrentGame:
    """The live, authoritative game."""

    fen: str
    pgn: str
    ply: int
    history: list[MoveRecord]
    turn_color: Color
    player_color: Color | None = None
    game_result: GameResult | None = None


@dataclass(slots=True)
class ViewingState:
    """Read projection handed to the board layer.

    Mirrors :class:`CurrentGame` while ``ply`` equals the current ply,
    otherwise describes a detached historical position.
    """

    fen: str
    ply: int
    turn_color: Color
    legal_moves: dict[str, list[str]]
    check: str | None = None
    last_move: Move | None = None
    material: MaterialInfo | None = None
    auto_shapes: list[Shape] = field(default_factory=list)
    promotion_dialog: PromotionDialog = PROMOTION_DISABLED
    orientation: Color = Color.WHITE


@dataclass(slots=True)
class GameState:
    start: StartInfo
    current: CurrentGame
    viewing: ViewingState

    @property
    def is_viewing_history(self) -> bool:
        return self.viewing.ply != self.current.ply

    @property
    def is_read_only(self) -> bool:
        """Browsing the past of a game where the player's side is pinned."""
        return self.is_viewing_history and self.current.player_color is not None

    @property
    def history_index(self) -> int:
        """Index into ``current.history`` of the move played from the viewed ply."""
        return self.viewing.ply - self.start.ply


def detect_result(rules: RulesAdapter) -> GameResult | None:
    """Classify the position after a move; first matching condition wins."""
    if rules.is_checkmate():
        return GameResult.win(rules.turn().opposite, GameEndReason.CHECKMATE)
    if rules.is_threefold_repetition():
        return GameResult.draw(GameEndReason.THREEFOLD_REPETITION)
    if rules.is_insufficient_material():
        return GameResult.draw(GameEndReason.INSUFFICIENT_MATERIAL)
    if rules.is_stalemate():
        return GameResult.draw(GameEndReason.STALEMATE)
    return None
