"""Tests for search requests and evaluation records."""

from kibitz.core.move import Move
from kibitz.core.notation import STARTING_FEN
from kibitz.engine.search import Eval, ScoreKind, Search, shapes_for_eval
from kibitz.game.controller import GameController
from kibitz.game.state import Shape


def _controller(*ucis: str) -> GameController:
    ctrl = GameController()
    for uci in ucis:
        ctrl.move(Move.from_uci(uci))
    return ctrl


class TestSearch:
    def test_commands_from_start(self) -> None:
        search = Search(ply=0, start_pos=STARTING_FEN, current_fen=STARTING_FEN)
        assert search.position_command == f"position fen {STARTING_FEN}"
        assert search.go_command == "go infinite"
        assert not search.should_stop

    def test_commands_with_moves(self) -> None:
        search = Search(
            ply=2,
            start_pos=STARTING_FEN,
            current_fen="unused",
            moves=["e2e4", "e7e5"],
            search_ms=750,
        )
        assert search.position_command == f"position fen {STARTING_FEN} moves e2e4 e7e5"
        assert search.go_command == "go movetime 750"

    def test_for_live_position(self) -> None:
        ctrl = _controller("e2e4", "e7e5", "g1f3")
        search = Search.for_game(ctrl.state, search_ms=100)
        assert search.ply == 3
        assert search.start_pos == STARTING_FEN
        assert search.current_fen == ctrl.state.current.fen
        assert search.moves == ["e2e4", "e7e5", "g1f3"]
        assert search.search_ms == 100

    def test_for_viewed_history_ply(self) -> None:
        ctrl = _controller("e2e4", "e7e5", "g1f3")
        ctrl.view_game_ply(1)
        search = Search.for_game(ctrl.state)
        assert search.ply == 1
        assert search.moves == ["e2e4"]
        assert search.current_fen == ctrl.state.viewing.fen

    def test_for_game_from_custom_start(self) -> None:
        fen = "8/8/8/8/8/k7/8/K7 b - - 3 40"
        ctrl = GameController()
        ctrl.new_game(fen)
        ctrl.move(Move.from_uci("a3b3"))
        search = Search.for_game(ctrl.state)
        assert search.ply == 80
        assert search.start_pos == fen
        assert search.moves == ["a3b3"]

    def test_callbacks_are_wired(self) -> None:
        seen: list[Eval] = []
        search = Search.for_game(_controller().state, on_best_move=seen.append)
        ev = Eval(fen=STARTING_FEN, depth=1, kind=ScoreKind.CP, value=0)
        search.emit_best_move(ev)
        search.emit_current_move(ev)
        assert seen == [ev]


class TestEval:
    def test_best_move(self) -> None:
        ev = Eval(STARTING_FEN, 10, ScoreKind.CP, 20, (Move("d2", "d4"), Move("d7", "d5")))
        assert ev.best_move == Move("d2", "d4")
        assert Eval(STARTING_FEN, 0, ScoreKind.MATE, 0).best_move is None

    def test_shapes_for_eval(self) -> None:
        ev = Eval(STARTING_FEN, 10, ScoreKind.CP, 20, (Move("g1", "f3"),))
        assert shapes_for_eval(ev) == [Shape("g1", "f3", "blue")]
        assert shapes_for_eval(ev, brush="paleGreen") == [Shape("g1", "f3", "paleGreen")]
        assert shapes_for_eval(Eval(STARTING_FEN, 1, ScoreKind.CP, 0)) == []
