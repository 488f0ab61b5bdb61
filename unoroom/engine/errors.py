"""Rejection kinds returned by engine operations."""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from unoroom.engine.game_state import GameState


class EngineError(str, Enum):
    """Why an action was refused. The state that comes back is the prior one."""

    PLAYER_NOT_FOUND = "player_not_found"
    TARGET_NOT_FOUND = "target_not_found"
    NOT_YOUR_TURN = "not_your_turn"
    CARD_NOT_IN_HAND = "card_not_in_hand"
    ILLEGAL_PLAY = "illegal_play"
    COLOR_REQUIRED = "color_required"
    ALREADY_CALLED = "already_called"
    GAME_NOT_IN_PROGRESS = "game_not_in_progress"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    EngineError.PLAYER_NOT_FOUND: "Player not found",
    EngineError.TARGET_NOT_FOUND: "Target player not found",
    EngineError.NOT_YOUR_TURN: "Not your turn",
    EngineError.CARD_NOT_IN_HAND: "Card not in hand",
    EngineError.ILLEGAL_PLAY: "Card cannot be played",
    EngineError.COLOR_REQUIRED: "Must choose a color for wild card",
    EngineError.ALREADY_CALLED: "Already called UNO",
    EngineError.GAME_NOT_IN_PROGRESS: "Game is not in progress",
}


@dataclass(frozen=True)
class ActionResult:
    """Outcome of an engine operation.

    Check ``error`` before trusting ``state``. ``penalized`` is only set by
    challenge_uno.
    """

    state: "GameState"
    error: Optional[EngineError] = None
    penalized: Optional[bool] = None

    @property
    def ok(self) -> bool:
        return self.error is None
