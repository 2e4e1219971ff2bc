"""The single in-flight promotion choice.

A move that needs a promotion piece is parked here until the board layer
calls ``resolve`` (or :meth:`PromotionCoordinator.select`) with a piece,
or ``cancel``. Each dialog carries a generation number, so continuations
held by a superseded dialog are rejected.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeAlias

from kibitz.core.enums import Color, PromotionPiece
from kibitz.errors import PromotionCanceled

SelectedCallback = Callable[[PromotionPiece], None]
CanceledCallback = Callable[[PromotionCanceled], None]


@dataclass(slots=True, frozen=True)
class PromotionDisabled:
    """No promotion choice is pending."""

    @property
    def is_enabled(self) -> bool:
        return False


@dataclass(slots=True, frozen=True)
class PromotionAwaiting:
    """A promotion choice is pending for the pawn landing on ``square``."""

    color: Color
    square: str
    generation: int
    resolve: Callable[[PromotionPiece | str], bool] = field(repr=False, compare=False)
    cancel: Callable[[], bool] = field(repr=False, compare=False)

    @property
    def is_enabled(self) -> bool:
        return True


PromotionDialog: TypeAlias = PromotionDisabled | PromotionAwaiting

PROMOTION_DISABLED = PromotionDisabled()


class PromotionCoordinator:
    """Holds at most one pending promotion and its two continuations."""

    __slots__ = ("_dialog", "_generation", "_on_selected", "_on_canceled", "_on_change")

    def __init__(
        self, on_change: Callable[[PromotionDialog], None] | None = None
    ) -> None:
        self._dialog: PromotionDialog = PROMOTION_DISABLED
        self._generation = 0
        self._on_selected: SelectedCallback | None = None
        self._on_canceled: CanceledCallback | None = None
        self._on_change = on_change

    @property
    def dialog(self) -> PromotionDialog:
        return self._dialog

    @property
    def is_pending(self) -> bool:
        return isinstance(self._dialog, PromotionAwaiting)

    def request(
        self,
        color: Color,
        square: str,
        *,
        on_selected: SelectedCallback,
        on_canceled: CanceledCallback,
    ) -> PromotionAwaiting:
        """Install a new pending choice, canceling any previous one first."""
        self._cancel_pending("superseded by a new promotion choice")

        self._generation += 1
        generation = self._generation
        dialog = PromotionAwaiting(
            color=color,
            square=square,
            generation=generation,
            resolve=lambda piece: self._resolve(generation, piece),
            cancel=lambda: self._cancel(generation, "promotion dismissed"),
        )
        self._on_selected = on_selected
        self._on_canceled = on_canceled
        self._set_dialog(dialog)
        return dialog

    def select(self, piece: PromotionPiece | str) -> bool:
        """Resolve the pending choice. No-op (False) when nothing is pending."""
        dialog = self._dialog
        if not isinstance(dialog, PromotionAwaiting):
            return False
        return self._resolve(dialog.generation, piece)

    def cancel(self, reason: str = "promotion dismissed") -> bool:
        """Cancel the pending choice. No-op (False) when nothing is pending."""
        return self._cancel_pending(reason)

    # ── Internal ─────────────────────────────────────────────────────────

    def _cancel_pending(self, reason: str) -> bool:
        dialog = self._dialog
        if not isinstance(dialog, PromotionAwaiting):
            return False
        return self._cancel(dialog.generation, reason)

    def _resolve(self, generation: int, piece: PromotionPiece | str) -> bool:
        if not self._is_live(generation):
            return False
        chosen = PromotionPiece(piece)
        callback = self._on_selected
        self._clear()
        if callback is not None:
            callback(chosen)
        return True

    def _cancel(self, generation: int, reason: str) -> bool:
        if not self._is_live(generation):
            return False
        callback = self._on_canceled
        self._clear()
        if callback is not None:
            callback(PromotionCanceled(reason))
        return True

    def _is_live(self, generation: int) -> bool:
        dialog = self._dialog
        return isinstance(dialog, PromotionAwaiting) and dialog.generation == generation

    def _clear(self) -> None:
        self._on_selected = None
        self._on_canceled = None
        self._set_dialog(PROMOTION_DISABLED)

    def _set_dialog(self, dialog: PromotionDialog) -> None:
        self._dialog = dialog
        if self._on_change is not None:
            self._on_change(dialog)
