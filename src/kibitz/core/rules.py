"""Rules backend consumed by the game layer.

The game layer depends only on :class:`RulesAdapter`. :class:`ChessRules`
is the concrete implementation backed by python-chess; move legality,
FEN/PGN handling and draw detection all come from there.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Protocol

import chess
import chess.pgn

from kibitz.core.enums import Color
from kibitz.core.move import Move, MoveRecord
from kibitz.core.notation import STARTING_FEN, fullmoves_to_ply
from kibitz.errors import IllegalMove, InvalidPgn

_PIECE_POINTS: dict[chess.PieceType, int] = {
    chess.PAWN: 1,
    chess.KNIGHT: 3,
    chess.BISHOP: 3,
    chess.ROOK: 5,
    chess.QUEEN: 9,
}

# Headers regenerated from the board itself on export.
_DERIVED_HEADERS = frozenset({"FEN", "SetUp", "Result"})


@dataclass(slots=True, frozen=True)
class MaterialInfo:
    """Material balance of a position; positive numbers favor White."""

    imbalance: dict[str, int]
    score: int

    @classmethod
    def from_board(cls, board: chess.Board) -> MaterialInfo:
        imbalance: dict[str, int] = {}
        score = 0
        for piece_type, points in _PIECE_POINTS.items():
            diff = len(board.pieces(piece_type, chess.WHITE)) - len(
                board.pieces(piece_type, chess.BLACK)
            )
            if diff:
                imbalance[chess.piece_symbol(piece_type)] = diff
            score += diff * points
        return cls(imbalance=imbalance, score=score)


class RulesAdapter(Protocol):
    """Rules operations the game layer relies on."""

    def move(self, move: Move) -> MoveRecord: ...

    def undo(self) -> MoveRecord | None: ...

    def load(self, fen: str) -> None: ...

    def load_pgn(self, pgn: str) -> None: ...

    def fen(self) -> str: ...

    def pgn(self, result: str | None = None) -> str: ...

    def history(self) -> list[MoveRecord]: ...

    def turn(self) -> Color: ...

    def move_number(self) -> int: ...

    def ply(self) -> int: ...

    def piece_at(self, square: str) -> tuple[Color, str] | None: ...

    def is_promotion(self, move: Move) -> bool: ...

    def legal_destinations(self) -> dict[str, list[str]]: ...

    def check_square(self) -> str | None: ...

    def material(self) -> MaterialInfo: ...

    def is_check(self) -> bool: ...

    def is_checkmate(self) -> bool: ...

    def is_stalemate(self) -> bool: ...

    def is_insufficient_material(self) -> bool: ...

    def is_threefold_repetition(self) -> bool: ...

    def copy(self) -> RulesAdapter: ...


class ChessRules:
    """:class:`RulesAdapter` implementation on top of ``chess.Board``."""

    __slots__ = ("_board", "_records", "_headers")

    def __init__(self, fen: str = STARTING_FEN) -> None:
        self._board = chess.Board(fen)
        self._records: list[MoveRecord] = []
        self._headers: dict[str, str] = {}

    @classmethod
    def from_fen(cls, fen: str) -> ChessRules:
        return cls(fen)

    # ── Mutation ─────────────────────────────────────────────────────────

    def move(self, move: Move) -> MoveRecord:
        """Play *move* and return its history record.

        Raises :class:`IllegalMove` without touching the position when the
        move is not legal here.
        """
        board = self._board
        try:
            candidate = move.to_chess()
        except ValueError as exc:
            raise IllegalMove(f"Illegal move: {move}") from exc
        if candidate not in board.legal_moves:
            raise IllegalMove(f"Illegal move: {move}")

        record = self._record_for(board, candidate)
        board.push(candidate)
        self._records.append(record)
        return record

    def undo(self) -> MoveRecord | None:
        """Take back the last ply. Returns its record, or None if empty."""
        if not self._records:
            return None
        self._board.pop()
        return self._records.pop()

    def load(self, fen: str) -> None:
        self._board = chess.Board(fen)
        self._records = []
        self._headers = {}

    def load_pgn(self, pgn: str) -> None:
        """Replace the game with the main line of *pgn*.

        The current game is left untouched if parsing fails.
        """
        game = chess.pgn.read_game(io.StringIO(pgn))
        if game is None:
            raise InvalidPgn("No game found in PGN text")
        if game.errors:
            raise InvalidPgn(f"Invalid PGN: {game.errors[0]}")

        try:
            board = game.board()
        except ValueError as exc:
            raise InvalidPgn(f"Invalid PGN start position: {exc}") from exc

        records: list[MoveRecord] = []
        for candidate in game.mainline_moves():
            if candidate not in board.legal_moves:
                raise InvalidPgn(f"Illegal move in PGN: {candidate.uci()}")
            records.append(self._record_for(board, candidate))
            board.push(candidate)

        self._board = board
        self._records = records
        self._headers = dict(game.headers)

    # ── Queries ──────────────────────────────────────────────────────────

    def fen(self) -> str:
        return self._board.fen()

    def pgn(self, result: str | None = None) -> str:
        """Export the game as PGN text.

        Headers are written only when the game was loaded with some or
        starts from a non-standard position.
        """
        if not self._records and not self._headers:
            return ""
        game = chess.pgn.Game.from_board(self._board)
        for name, value in self._headers.items():
            if name not in _DERIVED_HEADERS:
                game.headers[name] = value
        if result is not None:
            game.headers["Result"] = result
        with_headers = bool(self._headers) or "FEN" in game.headers
        exporter = chess.pgn.StringExporter(
            headers=with_headers, variations=False, comments=False
        )
        return game.accept(exporter)

    def history(self) -> list[MoveRecord]:
        return list(self._records)

    def turn(self) -> Color:
        return Color.from_chess(self._board.turn)

    def move_number(self) -> int:
        return self._board.fullmove_number

    def ply(self) -> int:
        return fullmoves_to_ply(self.turn(), self.move_number())

    def piece_at(self, square: str) -> tuple[Color, str] | None:
        piece = self._board.piece_at(chess.parse_square(square))
        if piece is None:
            return None
        return Color.from_chess(piece.color), chess.piece_symbol(piece.piece_type)

    def is_promotion(self, move: Move) -> bool:
        """Whether *move* is a pawn stepping onto its last rank."""
        piece = self.piece_at(move.from_square)
        if piece is None:
            return False
        color, symbol = piece
        last_rank = "8" if color is Color.WHITE else "1"
        return symbol == "p" and move.to_square[1] == last_rank

    def legal_destinations(self) -> dict[str, list[str]]:
        """Legal destinations keyed by origin square."""
        dests: dict[str, list[str]] = {}
        for candidate in self._board.legal_moves:
            targets = dests.setdefault(chess.square_name(candidate.from_square), [])
            to_name = chess.square_name(candidate.to_square)
            if to_name not in targets:
                targets.append(to_name)
        return dests

    def check_square(self) -> str | None:
        """Square of the king in check, if the side to move is in check."""
        if not self._board.is_check():
            return None
        king = self._board.king(self._board.turn)
        return chess.square_name(king) if king is not None else None

    def material(self) -> MaterialInfo:
        return MaterialInfo.from_board(self._board)

    def is_check(self) -> bool:
        return self._board.is_check()

    def is_checkmate(self) -> bool:
        return self._board.is_checkmate()

    def is_stalemate(self) -> bool:
        return self._board.is_stalemate()

    def is_insufficient_material(self) -> bool:
        return self._board.is_insufficient_material()

    def is_threefold_repetition(self) -> bool:
        return self._board.is_repetition(3)

    def copy(self) -> ChessRules:
        clone = ChessRules.__new__(ChessRules)
        clone._board = self._board.copy()
        clone._records = list(self._records)
        clone._headers = dict(self._headers)
        return clone

    # ── Internal ─────────────────────────────────────────────────────────

    @staticmethod
    def _record_for(board: chess.Board, candidate: chess.Move) -> MoveRecord:
        piece = board.piece_at(candidate.from_square)
        if board.is_en_passant(candidate):
            captured: str | None = "p"
        else:
            target = board.piece_at(candidate.to_square)
            captured = chess.piece_symbol(target.piece_type) if target else None
        fen_before = board.fen()
        san = board.san(candidate)
        after = board.copy(stack=False)
        after.push(candidate)
        return MoveRecord(
            move=Move.from_chess(candidate),
            san=san,
            color=Color.from_chess(board.turn),
            piece=chess.piece_symbol(piece.piece_type) if piece else "",
            fen_before=fen_before,
            fen_after=after.fen(),
            captured=captured,
        )
