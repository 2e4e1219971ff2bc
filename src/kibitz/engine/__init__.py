"""Engine package: search models, UCI protocol, transports and session."""

from kibitz.engine.protocol import (
    ANALYSIS_OPTIONS,
    ConnectionState,
    SearchPhase,
    SearchProtocol,
)
from kibitz.engine.qt_bridge import EngineBackend, EngineWorker, ThreadedEngine
from kibitz.engine.search import Eval, IEngine, ScoreKind, Search, shapes_for_eval
from kibitz.engine.session import EngineSession
from kibitz.engine.uci_engine import ProcessEngine, UciEngine

__all__ = [
    "ANALYSIS_OPTIONS",
    "ConnectionState",
    "EngineBackend",
    "EngineSession",
    "EngineWorker",
    "Eval",
    "IEngine",
    "ProcessEngine",
    "ScoreKind",
    "Search",
    "SearchPhase",
    "SearchProtocol",
    "ThreadedEngine",
    "UciEngine",
    "shapes_for_eval",
]
