"""UCI conversation state machine.

Owns at most one active and one queued :class:`Search`. A new ``go`` is
only sent once the engine has acknowledged the previous one with
``bestmove``; until then the newest request waits in the queue and
replaces any older queued one.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from enum import IntEnum, auto

from kibitz.core.move import Move
from kibitz.engine.search import Eval, ScoreKind, Search
from kibitz.errors import EngineCommunicationError, ProtocolOutOfOrder

_LOGGER = logging.getLogger(__name__)

Send = Callable[[str], None]

ANALYSIS_OPTIONS: tuple[tuple[str, str], ...] = (
    ("UCI_AnalyseMode", "true"),
    ("Analysis Contempt", "Off"),
)


class ConnectionState(IntEnum):
    DISCONNECTED = auto()
    HANDSHAKING = auto()
    READY = auto()


class SearchPhase(IntEnum):
    IDLE = auto()  # no go outstanding
    SEARCHING = auto()
    STOPPING_TO_SWAP = auto()  # stop sent, waiting for bestmove


class SearchProtocol:
    """Serializes search requests to a UCI engine and decodes its replies."""

    __slots__ = (
        "_send",
        "_connection",
        "_phase",
        "_search",
        "_next_search",
        "_evaluation",
        "_options",
    )

    def __init__(self, options: Sequence[tuple[str, str]] = ANALYSIS_OPTIONS) -> None:
        self._send: Send | None = None
        self._connection = ConnectionState.DISCONNECTED
        self._phase = SearchPhase.IDLE
        self._search: Search | None = None
        self._next_search: Search | None = None
        self._evaluation: Eval | None = None
        self._options = tuple(options)

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def connection(self) -> ConnectionState:
        return self._connection

    @property
    def phase(self) -> SearchPhase:
        return self._phase

    @property
    def active_search(self) -> Search | None:
        return self._search

    @property
    def queued_search(self) -> Search | None:
        return self._next_search

    @property
    def current_evaluation(self) -> Eval | None:
        return self._evaluation

    # ── Lifecycle ────────────────────────────────────────────────────────

    def connect(self, send: Send) -> None:
        """Attach the outbound channel and start the identification exchange."""
        self._send = send
        self._connection = ConnectionState.HANDSHAKING
        self._write("uci")

    def disconnect(self) -> None:
        """Flush a partial result of the active search, then forget everything."""
        if self._search is not None and self._evaluation is not None:
            self._search.emit_current_move(self._evaluation)

        self._send = None
        self._connection = ConnectionState.DISCONNECTED
        self._phase = SearchPhase.IDLE
        self._search = None
        self._next_search = None
        self._evaluation = None

    def perform_search(self, next_search: Search | None) -> None:
        """Queue *next_search* (None clears the queue) and stop the active one."""
        self._next_search = next_search
        self._stop()
        self._swap_search()

    # ── Inbound ──────────────────────────────────────────────────────────

    def receive(self, line: str) -> None:
        """Handle one line of engine output."""
        parts = line.split()
        if not parts:
            return
        _LOGGER.debug("<-- %s", line.strip())
        cmd, rest = parts[0], parts[1:]

        try:
            if cmd == "uciok":
                self._on_uciok()
            elif cmd == "readyok":
                self._on_readyok()
            elif cmd == "bestmove":
                self._on_bestmove()
            elif cmd == "info":
                self._on_info(rest)
        except ProtocolOutOfOrder as exc:
            _LOGGER.debug("Ignoring engine line %r: %s", line, exc)
        except EngineCommunicationError as exc:
            _LOGGER.warning("Could not decode engine line %r: %s", line, exc)

    def _on_uciok(self) -> None:
        for name, value in self._options:
            self._write(f"setoption name {name} value {value}")
        self._write("ucinewgame")
        self._write("isready")

    def _on_readyok(self) -> None:
        if self._connection is ConnectionState.DISCONNECTED:
            raise ProtocolOutOfOrder("readyok while disconnected")
        self._connection = ConnectionState.READY
        self._swap_search()

    def _on_bestmove(self) -> None:
        if self._phase is SearchPhase.IDLE:
            raise ProtocolOutOfOrder("bestmove with no search outstanding")

        search = self._search
        if search is not None and self._evaluation is not None:
            search.emit_best_move(self._evaluation)
        self._search = None
        self._evaluation = None
        self._phase = SearchPhase.IDLE
        self._swap_search()

    def _on_info(self, rest: list[str]) -> None:
        search = self._search
        if search is None:
            raise ProtocolOutOfOrder("info with no active search")
        if search.should_stop:
            return

        depth, time_ms, is_mate, pov_score, pv_tokens = _parse_info(rest)

        if is_mate and not pov_score:
            # Mate already on the board: some engines never follow up with
            # bestmove until told to stop.
            if self._evaluation is not None:
                search.emit_best_move(self._evaluation)
            self._abandon()
            return

        if pov_score is None:
            return

        try:
            pv = tuple(Move.from_uci(token) for token in pv_tokens)
        except ValueError as exc:
            raise EngineCommunicationError(f"Bad move in pv: {exc}") from exc

        value = -pov_score if search.ply % 2 == 1 else pov_score
        self._evaluation = Eval(
            fen=search.current_fen,
            depth=depth,
            kind=ScoreKind.MATE if is_mate else ScoreKind.CP,
            value=value,
            pv=pv,
        )
        search.emit_current_move(self._evaluation)

        if time_ms is not None and search.search_ms and time_ms >= search.search_ms:
            self._stop()

    # ── Outbound ─────────────────────────────────────────────────────────

    def _stop(self) -> None:
        search = self._search
        if search is not None and not search.should_stop:
            search.should_stop = True
            self._phase = SearchPhase.STOPPING_TO_SWAP
            self._write("stop")

    def _abandon(self) -> None:
        """Drop the active search but keep waiting for its bestmove."""
        self._stop()
        self._search = None
        self._evaluation = None
        self._phase = SearchPhase.STOPPING_TO_SWAP

    def _swap_search(self) -> None:
        if self._send is None or self._connection is not ConnectionState.READY:
            return
        if self._phase is not SearchPhase.IDLE:
            return

        search = self._next_search
        self._next_search = None
        self._search = search
        if search is None:
            return

        self._evaluation = None
        self._phase = SearchPhase.SEARCHING
        self._write(search.position_command)
        self._write(search.go_command)

    def _write(self, command: str) -> None:
        if self._send is None:
            return
        _LOGGER.debug("--> %s", command)
        self._send(command)


def _parse_info(
    tokens: list[str],
) -> tuple[int, int | None, bool, int | None, list[str]]:
    """Pull depth, time, score and pv out of an ``info`` line.

    ``pv`` ends the scan; everything after it is the variation.
    """
    depth = 0
    time_ms: int | None = None
    is_mate = False
    score: int | None = None
    pv: list[str] = []

    i = 0
    try:
        while i < len(tokens):
            key = tokens[i]
            if key == "depth":
                i += 1
                depth = int(tokens[i])
            elif key == "time":
                i += 1
                time_ms = int(tokens[i])
            elif key == "score":
                is_mate = tokens[i + 1] == "mate"
                score = int(tokens[i + 2])
                i += 2
            elif key == "pv":
                pv = tokens[i + 1 :]
                break
            elif key == "string":
                break
            i += 1
    except (IndexError, ValueError) as exc:
        raise EngineCommunicationError(f"Malformed info line: {exc}") from exc

    return depth, time_ms, is_mate, score, pv
