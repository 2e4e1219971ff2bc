"""Shared engine search models and protocol."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from kibitz.game.state import Shape

if TYPE_CHECKING:
    from kibitz.core.move import Move
    from kibitz.game.state import GameState


class ScoreKind(StrEnum):
    CP = "cp"
    MATE = "mate"


@dataclass(slots=True, frozen=True)
class Eval:
    """Engine evaluation; ``value`` is positive when White is better."""

    fen: str
    depth: int
    kind: ScoreKind
    value: int
    pv: tuple[Move, ...] = ()

    @property
    def best_move(self) -> Move | None:
        return self.pv[0] if self.pv else None


EvalCallback = Callable[[Eval], None]


def ignore_eval(_ev: Eval) -> None:
    return None


@dataclass(slots=True)
class Search:
    """One analysis request.

    ``ply`` is the absolute ply of the searched position. Engines report
    scores for the side to move there, so odd plies get their sign flipped.
    """

    ply: int
    start_pos: str
    current_fen: str
    moves: list[str] = field(default_factory=list)
    search_ms: int | None = None
    should_stop: bool = False
    emit_best_move: EvalCallback = field(default=ignore_eval, repr=False)
    emit_current_move: EvalCallback = field(default=ignore_eval, repr=False)

    @classmethod
    def for_game(
        cls,
        state: GameState,
        *,
        search_ms: int | None = None,
        on_best_move: EvalCallback = ignore_eval,
        on_current_move: EvalCallback = ignore_eval,
    ) -> Search:
        """Build a request for the position currently being viewed."""
        played = state.current.history[: state.history_index]
        return cls(
            ply=state.viewing.ply,
            start_pos=state.start.fen,
            current_fen=state.viewing.fen,
            moves=[record.uci for record in played],
            search_ms=search_ms,
            emit_best_move=on_best_move,
            emit_current_move=on_current_move,
        )

    @property
    def position_command(self) -> str:
        if not self.moves:
            return f"position fen {self.start_pos}"
        return f"position fen {self.start_pos} moves {' '.join(self.moves)}"

    @property
    def go_command(self) -> str:
        if self.search_ms:
            return f"go movetime {self.search_ms}"
        return "go infinite"


class IEngine(Protocol):
    """Start/stop/terminate contract shared by every engine transport."""

    @property
    def is_running(self) -> bool: ...

    def start(self, search: Search) -> None: ...

    def stop(self) -> None: ...

    def terminate(self) -> None: ...


def shapes_for_eval(ev: Eval, brush: str = "blue") -> list[Shape]:
    """Arrow for the head of the principal variation, if any."""
    move = ev.best_move
    if move is None:
        return []
    return [Shape(move.from_square, move.to_square, brush)]
