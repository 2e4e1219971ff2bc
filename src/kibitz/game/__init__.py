"""Game management layer: controller, state records, history and promotion.

Quick start::

    from kibitz.core import Move
    from kibitz.game import GameController

    ctrl = GameController()
    ctrl.move(Move("e2", "e4"))
    ctrl.view_previous()
"""

from kibitz.game.controller import GameController, GameEvents, MoveStatus
from kibitz.game.history import HistoryNavigator
from kibitz.game.promotion import (
    PROMOTION_DISABLED,
    PromotionAwaiting,
    PromotionCoordinator,
    PromotionDialog,
    PromotionDisabled,
)
from kibitz.game.state import (
    CurrentGame,
    GameResult,
    GameState,
    Shape,
    StartInfo,
    ViewingState,
)

__all__ = [
    # State records
    "CurrentGame",
    "GameResult",
    "GameState",
    "Shape",
    "StartInfo",
    "ViewingState",
    # Promotion
    "PROMOTION_DISABLED",
    "PromotionAwaiting",
    "PromotionCoordinator",
    "PromotionDialog",
    "PromotionDisabled",
    # Orchestration
    "GameController",
    "GameEvents",
    "HistoryNavigator",
    "MoveStatus",
]
