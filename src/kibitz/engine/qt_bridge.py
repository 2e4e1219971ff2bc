"""Qt bridge hosting an in-process UCI engine on a worker thread."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from PyQt6.QtCore import QObject, QThread, pyqtSignal, pyqtSlot

from kibitz.engine.protocol import SearchProtocol
from kibitz.engine.uci_engine import UciEngine
from kibitz.errors import EngineCommunicationError

_LOGGER = logging.getLogger(__name__)


class EngineBackend(Protocol):
    """In-process engine speaking UCI lines.

    ``receive_command`` runs on the worker thread and must return promptly;
    output goes through the callable handed to ``bind``.
    """

    def bind(self, output: Callable[[str], None]) -> None: ...

    def receive_command(self, command: str) -> None: ...


class EngineWorker(QObject):
    """Thread-affine host that feeds commands to an engine backend."""

    line_ready = pyqtSignal(str)
    failed = pyqtSignal(str)

    __slots__ = ("_backend",)

    def __init__(self, backend: EngineBackend) -> None:
        super().__init__()
        self._backend = backend
        backend.bind(self.line_ready.emit)

    @pyqtSlot(str)
    def post(self, command: str) -> None:
        """Hand one command line to the backend."""
        try:
            self._backend.receive_command(command)
        except Exception as exc:
            self.failed.emit(f"{command!r}: {exc}")


class _EngineCommandBus(QObject):
    """Signal bridge for issuing worker commands with queued delivery."""

    command_requested = pyqtSignal(str)


class ThreadedEngine(UciEngine):
    """Engine backend bound directly in this process, on its own QThread."""

    _THREAD_WAIT_MS = 2000

    __slots__ = ("_backend_factory", "_parent", "_thread", "_worker", "_command_bus")

    def __init__(
        self,
        backend_factory: Callable[[], EngineBackend],
        *,
        parent: QObject | None = None,
        protocol: SearchProtocol | None = None,
    ) -> None:
        super().__init__(protocol)
        self._backend_factory = backend_factory
        self._parent = parent
        self._thread: QThread | None = None
        self._worker: EngineWorker | None = None
        self._command_bus = _EngineCommandBus(parent)

    @property
    def is_running(self) -> bool:
        return self._worker is not None

    def _launch(self) -> None:
        thread = QThread(self._parent)
        worker = EngineWorker(self._backend_factory())
        worker.moveToThread(thread)
        self._command_bus.command_requested.connect(worker.post)
        worker.line_ready.connect(self._deliver)
        worker.failed.connect(self._on_worker_failed)
        thread.finished.connect(worker.deleteLater)
        self._thread = thread
        self._worker = worker
        thread.start()

    def _post(self, command: str) -> None:
        if self._worker is None:
            return
        self._command_bus.command_requested.emit(command)

    def _shutdown(self) -> None:
        worker = self._worker
        thread = self._thread
        self._worker = None
        self._thread = None
        if worker is None or thread is None:
            return

        self._command_bus.command_requested.emit("quit")
        self._command_bus.command_requested.disconnect(worker.post)
        worker.line_ready.disconnect(self._deliver)
        worker.failed.disconnect(self._on_worker_failed)
        thread.quit()
        thread.wait(self._THREAD_WAIT_MS)

    def _on_worker_failed(self, message: str) -> None:
        _LOGGER.warning("Engine worker error: %s", EngineCommunicationError(message))
