"""User-configurable settings."""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field

from kibitz.core.enums import Color


@dataclass
class EngineSettings:
    """How to launch and drive the analysis engine."""

    command: str = "stockfish"
    arguments: list[str] = field(default_factory=list)
    search_ms: int | None = 2000  # None = go infinite
    analyse_mode: bool = True
    contempt: str = "Off"
    terminate_timeout_ms: int = 2000

    @property
    def options(self) -> tuple[tuple[str, str], ...]:
        """UCI options sent after the identification exchange."""
        return (
            ("UCI_AnalyseMode", "true" if self.analyse_mode else "false"),
            ("Analysis Contempt", self.contempt),
        )

    def resolve_command(self) -> str | None:
        """Absolute path of the engine binary, or None if it is not on PATH."""
        return shutil.which(self.command)


@dataclass
class AppSettings:
    """All settings for a command-line analysis session."""

    engine: EngineSettings = field(default_factory=EngineSettings)
    orientation: Color = Color.WHITE
    log_level: str = "WARNING"
