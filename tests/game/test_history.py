"""Tests for HistoryNavigator."""

from kibitz.core.enums import Color
from kibitz.core.move import Move
from kibitz.core.notation import STARTING_FEN
from kibitz.core.rules import ChessRules
from kibitz.game.history import HistoryNavigator, mirror_live
from kibitz.game.promotion import PromotionCoordinator
from kibitz.game.state import CurrentGame, GameState, StartInfo, ViewingState


def _state_after(rules: ChessRules, *ucis: str) -> GameState:
    for uci in ucis:
        rules.move(Move.from_uci(uci))
    state = GameState(
        start=StartInfo(fen=STARTING_FEN, ply=0),
        current=CurrentGame(
            fen=rules.fen(),
            pgn="",
            ply=rules.ply(),
            history=rules.history(),
            turn_color=rules.turn(),
        ),
        viewing=ViewingState(fen="", ply=0, turn_color=Color.WHITE, legal_moves={}),
    )
    mirror_live(state, rules)
    return state


class TestMirrorLive:
    def test_copies_live_position(self) -> None:
        rules = ChessRules()
        state = _state_after(rules, "e2e4")
        assert state.viewing.ply == 1
        assert state.viewing.fen == rules.fen()
        assert state.viewing.turn_color == Color.BLACK
        assert state.viewing.last_move == Move("e2", "e4")
        assert "e7" in state.viewing.legal_moves


class TestNavigator:
    def _navigator(self, *ucis: str) -> tuple[HistoryNavigator, GameState, ChessRules]:
        rules = ChessRules()
        state = _state_after(rules, *ucis)
        return HistoryNavigator(state, rules, PromotionCoordinator()), state, rules

    def test_view_start(self) -> None:
        nav, state, _ = self._navigator("e2e4", "e7e5")
        assert nav.view_start()
        assert state.viewing.ply == 0
        assert state.viewing.fen == STARTING_FEN
        assert state.viewing.last_move is None
        assert state.viewing.turn_color == Color.WHITE

    def test_out_of_range_is_ignored(self) -> None:
        nav, state, _ = self._navigator("e2e4")
        assert not nav.view_game_ply(-1)
        assert not nav.view_game_ply(2)
        assert state.viewing.ply == 1

    def test_step_clamps_at_ends(self) -> None:
        nav, state, _ = self._navigator("e2e4", "e7e5")
        assert not nav.view_next()
        assert nav.view_previous()
        assert nav.view_previous()
        assert not nav.view_previous()
        assert state.viewing.ply == 0
        assert nav.view_next()
        assert state.viewing.ply == 1

    def test_return_to_live(self) -> None:
        nav, state, rules = self._navigator("e2e4", "e7e5")
        nav.view_start()
        assert nav.view_current()
        assert not nav.view_current()
        assert state.viewing.fen == rules.fen()
        assert not state.is_viewing_history

    def test_historical_legal_moves(self) -> None:
        nav, state, _ = self._navigator("e2e4", "e7e5")
        nav.view_game_ply(1)
        # Black to move after 1. e4.
        assert "e7" in state.viewing.legal_moves
        assert "e2" not in state.viewing.legal_moves

    def test_live_game_untouched(self) -> None:
        nav, state, rules = self._navigator("e2e4", "e7e5")
        fen = rules.fen()
        nav.view_start()
        assert rules.fen() == fen
        assert state.current.fen == fen

    def test_uses_detached_factory(self) -> None:
        rules = ChessRules()
        state = _state_after(rules, "e2e4")
        built: list[str] = []

        def factory(fen: str) -> ChessRules:
            built.append(fen)
            return ChessRules(fen)

        nav = HistoryNavigator(state, rules, PromotionCoordinator(), detached=factory)
        nav.view_start()
        assert built == [STARTING_FEN]

    def test_leaving_live_cancels_promotion(self) -> None:
        rules = ChessRules()
        state = _state_after(rules, "e2e4")
        promotion = PromotionCoordinator()
        canceled: list[Exception] = []
        promotion.request(
            Color.WHITE, "e8", on_selected=lambda piece: None, on_canceled=canceled.append
        )

        HistoryNavigator(state, rules, promotion).view_start()

        assert not promotion.is_pending
        assert len(canceled) == 1
