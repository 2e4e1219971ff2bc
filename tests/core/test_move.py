"""Tests for Move value objects and ply helpers."""

import pytest

from kibitz.core.enums import Color, PromotionPiece
from kibitz.core.move import Move
from kibitz.core.notation import fen_ply, fullmoves_to_ply, ply_turn
from kibitz.core.rules import ChessRules


class TestMove:
    def test_from_uci(self) -> None:
        move = Move.from_uci("e7e8q")
        assert move == Move("e7", "e8", PromotionPiece.QUEEN)
        assert move.uci == "e7e8q"

    def test_plain_uci(self) -> None:
        assert str(Move.from_uci("g1f3")) == "g1f3"

    @pytest.mark.parametrize("token", ["e2", "e2e4e5", "z9e4", "e7e8k"])
    def test_invalid_tokens(self, token: str) -> None:
        with pytest.raises(ValueError):
            Move.from_uci(token)

    def test_with_promotion(self) -> None:
        move = Move("b2", "b1").with_promotion(PromotionPiece.ROOK)
        assert move.uci == "b2b1r"


class TestPly:
    def test_fullmoves_to_ply(self) -> None:
        assert fullmoves_to_ply(Color.WHITE, 1) == 0
        assert fullmoves_to_ply(Color.BLACK, 1) == 1
        assert fullmoves_to_ply(Color.WHITE, 2) == 2
        assert fullmoves_to_ply(Color.BLACK, 10) == 19

    def test_ply_turn(self) -> None:
        assert ply_turn(0) == Color.WHITE
        assert ply_turn(7) == Color.BLACK

    def test_fen_ply(self) -> None:
        assert fen_ply("8/8/8/8/8/k7/8/K7 b - - 3 40") == 79


class TestMoveRecord:
    def test_record_fields(self) -> None:
        rules = ChessRules("k7/4P3/8/8/8/8/8/4K3 w - - 0 1")
        record = rules.move(Move.from_uci("e7e8q"))
        assert record.uci == "e7e8q"
        assert record.promotion is PromotionPiece.QUEEN
        assert record.piece == "p"
        assert record.color == Color.WHITE
        assert record.gives_check
        assert record.captured is None

    def test_capture_is_recorded(self) -> None:
        rules = ChessRules()
        for uci in ("e2e4", "d7d5"):
            rules.move(Move.from_uci(uci))
        record = rules.move(Move.from_uci("e4d5"))
        assert record.captured == "p"
        assert record.san == "exd5"
        assert not record.gives_check
