"""Command-line entry point: analyse the final position of a game."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from kibitz.config import AppSettings, EngineSettings
from kibitz.engine import EngineSession, Eval, ProcessEngine, ScoreKind, SearchProtocol
from kibitz.errors import InvalidPgn
from kibitz.game import GameController

_LOGGER = logging.getLogger(__name__)

# Grace period after the search budget before giving up on bestmove.
_RESULT_GRACE_MS = 5000


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def format_eval(ev: Eval) -> str:
    """One-line human summary of an evaluation."""
    if ev.kind is ScoreKind.MATE:
        score = f"#{ev.value}"
    else:
        score = f"{ev.value / 100:+.2f}"
    pv = " ".join(move.uci for move in ev.pv)
    return f"depth {ev.depth:>2}  {score:>7}  {pv}"


def _parse_args(argv: list[str]) -> tuple[AppSettings, Path | None]:
    parser = argparse.ArgumentParser(prog="kibitz", description=__doc__)
    parser.add_argument("pgn", nargs="?", type=Path, help="PGN file to load")
    parser.add_argument("--engine", default=EngineSettings.command, help="UCI engine binary")
    parser.add_argument("--movetime", type=int, default=2000, help="search time in ms")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args(argv)
    if args.movetime <= 0:
        parser.error("--movetime must be positive")

    settings = AppSettings(
        engine=EngineSettings(command=args.engine, search_ms=args.movetime),
        log_level=args.log_level,
    )
    return settings, args.pgn


def run_analysis(argv: list[str] | None = None) -> int:
    """Load a game, analyse its final position and print the evaluations."""
    from PyQt6.QtCore import QCoreApplication, QTimer

    settings, pgn_path = _parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(settings.log_level)

    controller = GameController(orientation=settings.orientation)
    if pgn_path is not None:
        try:
            controller.load_pgn(pgn_path.read_text(encoding="utf-8"))
        except (OSError, InvalidPgn) as exc:
            print(f"Cannot load {pgn_path}: {exc}", file=sys.stderr)
            return 2
        _LOGGER.info("Loaded %d plies from %s", len(controller.state.current.history), pgn_path)

    result = controller.state.current.game_result
    if result is not None:
        # Nothing to search: engines answer a finished position with mate 0.
        print(controller.state.current.fen)
        print(f"no evaluation (game over: {result.reason.name.lower()}, {result.pgn_token})")
        return 0

    engine_settings = settings.engine
    command = engine_settings.resolve_command()
    if command is None:
        print(f"Engine not found on PATH: {engine_settings.command}", file=sys.stderr)
        return 2

    app = QCoreApplication.instance() or QCoreApplication([sys.argv[0]])
    session = EngineSession(
        ProcessEngine(
            command,
            engine_settings.arguments,
            terminate_timeout_ms=engine_settings.terminate_timeout_ms,
            protocol=SearchProtocol(engine_settings.options),
        )
    )

    def on_best_move(ev: Eval) -> None:
        print(f"final  {format_eval(ev)}")
        QTimer.singleShot(0, app.quit)

    def on_current_move(ev: Eval) -> None:
        print(f"       {format_eval(ev)}")

    print(controller.state.current.fen)
    session.analyse(
        controller.state,
        search_ms=engine_settings.search_ms,
        on_best_move=on_best_move,
        on_current_move=on_current_move,
    )
    QTimer.singleShot((engine_settings.search_ms or 0) + _RESULT_GRACE_MS, app.quit)

    try:
        return app.exec()
    finally:
        session.terminate()


def main() -> None:
    """Console-script entry point."""
    sys.exit(run_analysis())


if __name__ == "__main__":
    main()
