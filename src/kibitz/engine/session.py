"""Engine session: owns the one engine wired to the analysis caller."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from kibitz.engine.search import EvalCallback, IEngine, Search, ignore_eval

if TYPE_CHECKING:
    from kibitz.game.state import GameState

_LOGGER = logging.getLogger(__name__)


class EngineSession:
    """Owns engine lifecycle: start, swap and terminate.

    Only one engine is ever attached; swapping terminates the previous
    engine before the new one is installed.
    """

    __slots__ = ("__weakref__", "_engine")

    def __init__(self, engine: IEngine | None = None) -> None:
        self._engine = engine

    @property
    def engine(self) -> IEngine | None:
        return self._engine

    @property
    def is_running(self) -> bool:
        return self._engine is not None and self._engine.is_running

    def start(self, search: Search) -> None:
        """Run *search*, replacing whatever the engine was doing."""
        if self._engine is None:
            _LOGGER.warning("No engine attached; search for ply %d dropped", search.ply)
            return
        self._engine.start(search)

    def analyse(
        self,
        state: GameState,
        *,
        search_ms: int | None = None,
        on_best_move: EvalCallback = ignore_eval,
        on_current_move: EvalCallback = ignore_eval,
    ) -> Search:
        """Start a search on the position *state* is currently viewing."""
        search = Search.for_game(
            state,
            search_ms=search_ms,
            on_best_move=on_best_move,
            on_current_move=on_current_move,
        )
        self.start(search)
        return search

    def stop(self) -> None:
        if self._engine is not None:
            self._engine.stop()

    def swap(self, engine: IEngine | None) -> None:
        """Terminate the current engine, then attach *engine*."""
        previous = self._engine
        self._engine = None
        if previous is not None:
            previous.terminate()
        self._engine = engine

    def terminate(self) -> None:
        """Release the engine's worker/process. The engine can be restarted."""
        if self._engine is not None:
            self._engine.terminate()
