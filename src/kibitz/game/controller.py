"""GameController: the single integration point that mutates game state.

Coordinates: RulesAdapter, GameState, HistoryNavigator, PromotionCoordinator.
Emits events via simple callbacks so the board layer / tests can subscribe.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import IntEnum, auto

from kibitz.core.enums import Color, PromotionPiece
from kibitz.core.move import Move, MoveRecord
from kibitz.core.notation import STARTING_FEN
from kibitz.core.rules import ChessRules, RulesAdapter
from kibitz.errors import IllegalMove, KibitzError, PromotionCanceled
from kibitz.game.history import HistoryNavigator, mirror_live
from kibitz.game.promotion import PromotionCoordinator, PromotionDialog
from kibitz.game.state import (
    CurrentGame,
    GameResult,
    GameState,
    Shape,
    StartInfo,
    ViewingState,
    detect_result,
)

_LOGGER = logging.getLogger(__name__)

# ── Event definitions ────────────────────────────────────────────────────────

MoveCallback = Callable[[MoveRecord, GameState], None]
MoveRejectedCallback = Callable[[Move, KibitzError], None]
GameOverCallback = Callable[[GameResult], None]
ViewCallback = Callable[[ViewingState], None]
ResetCallback = Callable[[GameState], None]


@dataclass
class GameEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_move: list[MoveCallback] = field(default_factory=list)
    on_move_rejected: list[MoveRejectedCallback] = field(default_factory=list)
    on_game_over: list[GameOverCallback] = field(default_factory=list)
    on_view_changed: list[ViewCallback] = field(default_factory=list)
    on_reset: list[ResetCallback] = field(default_factory=list)


class MoveStatus(IntEnum):
    """What happened to a submitted move."""

    APPLIED = auto()
    AWAITING_PROMOTION = auto()
    REJECTED = auto()


# ── Controller ───────────────────────────────────────────────────────────────


class GameController:
    """Owns the authoritative game and every operation that changes it.

    Thread-safety: all methods are meant to be called from a single thread
    (the main/UI thread). Engine results reach the game through the caller,
    never directly from a worker.
    """

    __slots__ = ("_rules", "_state", "_promotion", "_navigator", "events")

    def __init__(
        self,
        rules: RulesAdapter | None = None,
        *,
        player_color: Color | None = None,
        orientation: Color = Color.WHITE,
    ) -> None:
        self._rules: RulesAdapter = rules if rules is not None else ChessRules()
        self._promotion = PromotionCoordinator(on_change=self._on_promotion_changed)
        self._state = self._build_state(player_color, orientation)
        self._navigator = HistoryNavigator(self._state, self._rules, self._promotion)
        self.events = GameEvents()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def promotion(self) -> PromotionDialog:
        return self._promotion.dialog

    # ── Loading ──────────────────────────────────────────────────────────

    def new_game(self, fen: str | None = None) -> None:
        """Start over from *fen* (the standard start position by default)."""
        self.set_position(fen or STARTING_FEN)

    def set_position(self, fen: str) -> None:
        """Replace the game with a bare position and empty history."""
        self._promotion.cancel("position replaced")
        self._rules.load(fen)
        self._reset()

    def load_pgn(self, pgn: str) -> None:
        """Replace the whole game with *pgn*.

        Raises :class:`~kibitz.errors.InvalidPgn` and keeps the previous
        game when the text cannot be parsed.
        """
        self._promotion.cancel("new game loaded")
        self._rules.load_pgn(pgn)
        self._reset()

    # ── Settings ─────────────────────────────────────────────────────────

    def set_player_color(self, color: Color | None) -> None:
        """Pin the human side, or None for free analysis of both sides."""
        self._state.current.player_color = color

    def toggle_orientation(self) -> None:
        viewing = self._state.viewing
        viewing.orientation = viewing.orientation.opposite
        self._emit_view_changed()

    def set_auto_shapes(self, shapes: list[Shape]) -> None:
        self._state.viewing.auto_shapes = list(shapes)
        self._emit_view_changed()

    # ── Moves ────────────────────────────────────────────────────────────

    def move(self, move: Move) -> MoveStatus:
        """Submit a move from the board layer.

        While browsing history the move either discards the unplayed
        future (free analysis) or snaps back to the live position first
        (player color pinned). A pawn reaching its last rank without a
        promotion letter parks the move until the promotion choice is
        resolved.
        """
        self._promotion.cancel("superseded by another move")

        state = self._state
        if state.is_viewing_history:
            if state.current.player_color is None:
                self.trim_moves()
            else:
                self.view_current()

        decided = state.current.game_result is not None
        if decided and state.current.player_color is not None:
            return self._reject(move, IllegalMove("The game is already decided"))

        if move.promotion is None and self._rules.is_promotion(move):
            targets = state.viewing.legal_moves.get(move.from_square, [])
            if move.to_square not in targets:
                return self._reject(move, IllegalMove(f"Illegal move: {move}"))
            self._promotion.request(
                self._rules.turn(),
                move.to_square,
                on_selected=lambda piece: self._commit(move.with_promotion(piece)),
                on_canceled=lambda reason: self._abandon(move, reason),
            )
            return MoveStatus.AWAITING_PROMOTION

        return self._commit(move)

    def promotion_selected(self, piece: PromotionPiece | str) -> bool:
        """Resolve the pending promotion. No-op when none is pending."""
        return self._promotion.select(piece)

    def promotion_canceled(self) -> bool:
        """Abandon the pending promotion move. No-op when none is pending."""
        return self._promotion.cancel()

    def trim_moves(self) -> None:
        """Drop committed moves after the viewed ply, one ply at a time."""
        state = self._state
        to_trim = state.current.ply - state.viewing.ply
        if to_trim <= 0:
            return

        self._promotion.cancel("history trimmed")
        for _ in range(to_trim):
            self._rules.undo()
        state.current.game_result = detect_result(self._rules)
        self._sync_current()
        mirror_live(state, self._rules)
        self._emit_view_changed()

    def declare_result(self, result: GameResult) -> None:
        """Record a result the position cannot show (resignation, agreed draw, flag)."""
        self._promotion.cancel("game decided")
        self._state.current.game_result = result
        self._sync_current()
        self._emit_game_over(result)

    # ── Navigation ───────────────────────────────────────────────────────

    def view_game_ply(self, ply: int) -> None:
        if self._navigator.view_game_ply(ply):
            self._emit_view_changed()

    def view_start(self) -> None:
        if self._navigator.view_start():
            self._emit_view_changed()

    def view_next(self) -> None:
        if self._navigator.view_next():
            self._emit_view_changed()

    def view_previous(self) -> None:
        if self._navigator.view_previous():
            self._emit_view_changed()

    def view_current(self) -> None:
        if self._navigator.view_current():
            self._emit_view_changed()

    # ── Internal helpers ─────────────────────────────────────────────────

    def _commit(self, move: Move) -> MoveStatus:
        try:
            record = self._rules.move(move)
        except IllegalMove as exc:
            return self._reject(move, exc)

        state = self._state
        state.current.game_result = detect_result(self._rules)
        self._sync_current()
        mirror_live(state, self._rules)

        self._emit_move(record)
        if state.current.game_result is not None:
            self._emit_game_over(state.current.game_result)
        return MoveStatus.APPLIED

    def _abandon(self, move: Move, reason: PromotionCanceled) -> None:
        _LOGGER.info("Move %s abandoned: %s", move, reason)
        for cb in self.events.on_move_rejected:
            cb(move, reason)

    def _reject(self, move: Move, error: KibitzError) -> MoveStatus:
        _LOGGER.info("Move %s rejected: %s", move, error)
        for cb in self.events.on_move_rejected:
            cb(move, error)
        return MoveStatus.REJECTED

    def _build_state(self, player_color: Color | None, orientation: Color) -> GameState:
        rules = self._rules
        history = rules.history()
        ply = rules.ply()
        start_ply = ply - len(history)
        fen = rules.fen()
        start_fen = history[0].fen_before if history else fen
        result = detect_result(rules) if history else None

        state = GameState(
            start=StartInfo(fen=start_fen, ply=start_ply),
            current=CurrentGame(
                fen=fen,
                pgn="",
                ply=ply,
                history=history,
                turn_color=rules.turn(),
                player_color=player_color,
                game_result=result,
            ),
            viewing=ViewingState(
                fen=fen,
                ply=ply,
                turn_color=rules.turn(),
                legal_moves={},
                promotion_dialog=self._promotion.dialog,
                orientation=orientation,
            ),
        )
        state.current.pgn = rules.pgn(result.pgn_token if result else None)
        mirror_live(state, rules)
        return state

    def _reset(self) -> None:
        """Rebuild start/current/viewing from the rules backend in place."""
        state = self._state
        fresh = self._build_state(state.current.player_color, state.viewing.orientation)
        state.start = fresh.start
        state.current = fresh.current
        state.viewing = fresh.viewing
        for cb in self.events.on_reset:
            cb(state)

    def _sync_current(self) -> None:
        rules = self._rules
        current = self._state.current
        result = current.game_result
        current.fen = rules.fen()
        current.pgn = rules.pgn(result.pgn_token if result else None)
        current.history = rules.history()
        current.turn_color = rules.turn()
        current.ply = rules.ply()

    def _on_promotion_changed(self, dialog: PromotionDialog) -> None:
        self._state.viewing.promotion_dialog = dialog

    def _emit_move(self, record: MoveRecord) -> None:
        for cb in self.events.on_move:
            cb(record, self._state)

    def _emit_game_over(self, result: GameResult) -> None:
        for cb in self.events.on_game_over:
            cb(result)

    def _emit_view_changed(self) -> None:
        for cb in self.events.on_view_changed:
            cb(self._state.viewing)
