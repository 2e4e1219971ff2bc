"""Ply-indexed browsing over the committed move history.

The navigator only rewrites ``GameState.viewing``. Historical plies are
shown through a detached rules object built from the stored pre-move FEN,
so the live game is never touched while browsing.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from kibitz.core.rules import ChessRules

if TYPE_CHECKING:
    from kibitz.core.rules import RulesAdapter
    from kibitz.game.promotion import PromotionCoordinator
    from kibitz.game.state import GameState

RulesFactory = Callable[[str], "RulesAdapter"]


def mirror_live(state: GameState, rules: RulesAdapter) -> None:
    """Point ``state.viewing`` at the live position held by *rules*."""
    viewing = state.viewing
    history = state.current.history
    viewing.ply = state.current.ply
    viewing.fen = rules.fen()
    viewing.turn_color = rules.turn()
    viewing.legal_moves = rules.legal_destinations()
    viewing.check = rules.check_square()
    viewing.material = rules.material()
    viewing.last_move = history[-1].move if history else None


class HistoryNavigator:
    """Moves the viewing projection between ``start.ply`` and ``current.ply``."""

    __slots__ = ("_state", "_rules", "_promotion", "_detached")

    def __init__(
        self,
        state: GameState,
        rules: RulesAdapter,
        promotion: PromotionCoordinator,
        detached: RulesFactory = ChessRules.from_fen,
    ) -> None:
        self._state = state
        self._rules = rules
        self._promotion = promotion
        self._detached = detached

    def view_game_ply(self, ply: int) -> bool:
        """Show the position at *ply*. Returns False when nothing changed."""
        state = self._state
        if ply < state.start.ply or ply > state.current.ply:
            return False

        was_live = not state.is_viewing_history
        if ply == state.current.ply:
            if was_live:
                return False
            self._promotion.cancel("resumed the live position")
            mirror_live(state, self._rules)
            return True

        if was_live:
            self._promotion.cancel("left the live position")
        elif ply == state.viewing.ply:
            return False

        index = ply - state.start.ply
        history = state.current.history
        record = history[index]
        position = self._detached(record.fen_before)

        viewing = state.viewing
        viewing.ply = ply
        viewing.fen = record.fen_before
        viewing.turn_color = record.color
        viewing.legal_moves = position.legal_destinations()
        viewing.check = position.check_square()
        viewing.material = position.material()
        viewing.last_move = history[index - 1].move if index > 0 else None
        return True

    def view_start(self) -> bool:
        return self.view_game_ply(self._state.start.ply)

    def view_current(self) -> bool:
        return self.view_game_ply(self._state.current.ply)

    def view_next(self) -> bool:
        state = self._state
        return self.view_game_ply(min(state.viewing.ply + 1, state.current.ply))

    def view_previous(self) -> bool:
        state = self._state
        return self.view_game_ply(max(state.viewing.ply - 1, state.start.ply))
