"""UCI engine transports sharing one start/stop/terminate contract."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence

from PyQt6.QtCore import QObject, QProcess

from kibitz.engine.protocol import SearchProtocol
from kibitz.engine.search import Search
from kibitz.errors import EngineCommunicationError

_LOGGER = logging.getLogger(__name__)


class UciEngine(ABC):
    """An engine reachable only through UCI text lines.

    Subclasses provide the channel (:meth:`_launch`, :meth:`_post`,
    :meth:`_shutdown`) and feed every line they read into :meth:`_deliver`.
    """

    __slots__ = ("__weakref__", "_protocol")

    def __init__(self, protocol: SearchProtocol | None = None) -> None:
        self._protocol = protocol if protocol is not None else SearchProtocol()

    @property
    def protocol(self) -> SearchProtocol:
        return self._protocol

    @property
    @abstractmethod
    def is_running(self) -> bool:
        """Whether a worker/process is currently attached."""

    def start(self, search: Search) -> None:
        """Queue *search*, spawning the worker only if none is running."""
        self._protocol.perform_search(search)
        if self.is_running:
            return
        self._launch()
        if self.is_running:
            self._protocol.connect(self._post)

    def stop(self) -> None:
        """Stop the active search and drop any queued one."""
        self._protocol.perform_search(None)

    def terminate(self) -> None:
        """Release the worker/process, whether or not a search is active."""
        self._protocol.disconnect()
        self._shutdown()

    def _deliver(self, line: str) -> None:
        if not self.is_running:
            _LOGGER.debug("Dropping line from terminated engine: %r", line)
            return
        self._protocol.receive(line)

    @abstractmethod
    def _launch(self) -> None: ...

    @abstractmethod
    def _post(self, command: str) -> None: ...

    @abstractmethod
    def _shutdown(self) -> None: ...


class ProcessEngine(UciEngine):
    """External engine binary driven over stdin/stdout through ``QProcess``."""

    __slots__ = (
        "_command",
        "_arguments",
        "_parent",
        "_terminate_timeout_ms",
        "_process",
        "_buffer",
    )

    def __init__(
        self,
        command: str,
        arguments: Sequence[str] = (),
        *,
        parent: QObject | None = None,
        terminate_timeout_ms: int = 2000,
        protocol: SearchProtocol | None = None,
    ) -> None:
        super().__init__(protocol)
        self._command = command
        self._arguments = list(arguments)
        self._parent = parent
        self._terminate_timeout_ms = terminate_timeout_ms
        self._process: QProcess | None = None
        self._buffer = bytearray()

    @property
    def is_running(self) -> bool:
        return self._process is not None

    @property
    def command(self) -> str:
        return self._command

    def _launch(self) -> None:
        process = QProcess(self._parent)
        process.setProgram(self._command)
        process.setArguments(self._arguments)
        process.readyReadStandardOutput.connect(self._on_ready_read)
        process.errorOccurred.connect(self._on_error)
        process.finished.connect(self._on_finished)
        self._buffer.clear()
        self._process = process
        _LOGGER.info("Starting engine process: %s", self._command)
        process.start()

    def _post(self, command: str) -> None:
        process = self._process
        if process is None:
            return
        process.write(f"{command}\n".encode())

    def _shutdown(self) -> None:
        process = self._process
        self._process = None
        self._buffer.clear()
        if process is None:
            return

        process.readyReadStandardOutput.disconnect(self._on_ready_read)
        process.errorOccurred.disconnect(self._on_error)
        process.finished.disconnect(self._on_finished)
        if process.state() != QProcess.ProcessState.NotRunning:
            process.write(b"quit\n")
            if not process.waitForFinished(self._terminate_timeout_ms):
                process.kill()
                process.waitForFinished(self._terminate_timeout_ms)
        process.deleteLater()
        _LOGGER.info("Engine process terminated: %s", self._command)

    def _on_ready_read(self) -> None:
        process = self._process
        if process is None:
            return
        self._buffer.extend(bytes(process.readAllStandardOutput()))
        while (end := self._buffer.find(b"\n")) >= 0:
            raw = bytes(self._buffer[:end])
            del self._buffer[: end + 1]
            self._deliver(raw.decode("utf-8", errors="replace").rstrip("\r"))

    def _on_error(self, error: QProcess.ProcessError) -> None:
        exc = EngineCommunicationError(f"{self._command}: {error.name}")
        _LOGGER.warning("Engine process error: %s", exc)
        # A process that never started will not report finished either.
        if error is QProcess.ProcessError.FailedToStart:
            self._detach()

    def _on_finished(self, exit_code: int, _status: QProcess.ExitStatus) -> None:
        _LOGGER.warning(
            "Engine process %s exited unexpectedly with code %d",
            self._command,
            exit_code,
        )
        self._detach()

    def _detach(self) -> None:
        """Forget a dead process so the next start() launches a fresh one."""
        process = self._process
        self._process = None
        self._buffer.clear()
        self._protocol.disconnect()
        if process is not None:
            process.deleteLater()
