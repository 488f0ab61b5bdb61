"""Single game runner."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

from unoroom.engine import (
    Action,
    CallUno,
    ChallengeUno,
    DrawCard,
    GamePhase,
    GameState,
    PlayCard,
    apply_action,
    get_legal_actions,
    init_game,
)
from unoroom.engine.validation import should_have_called_uno

if TYPE_CHECKING:
    from unoroom.agent.protocol import AgentProtocol

logger = logging.getLogger(__name__)

# Called as (before, action, after) for every accepted action
StepHook = Callable[[GameState, Action, GameState], None]


@dataclass
class GameResult:
    """Result of a completed game."""

    winner: Optional[str]
    num_turns: int
    player_ids: tuple[str, ...]
    final_state: GameState


class GameRunner:
    """Runs a single UNO game to completion with in-process agents."""

    def __init__(
        self,
        agents: dict[str, "AgentProtocol"],
        seed: Optional[int] = None,
        max_turns: int = 1000,
        on_step: Optional[StepHook] = None,
    ):
        self._agents = agents
        self._rng = random.Random(seed)
        self._max_turns = max_turns
        self._on_step = on_step

    def _apply(self, state: GameState, action) -> GameState:
        result = apply_action(state, action, rng=self._rng)
        if result.error is not None:
            logger.warning("%s rejected: %s", type(action).__name__, result.error.message)
        elif self._on_step is not None:
            self._on_step(state, action, result.state)
        return result.state

    def _challenge_round(self, state: GameState) -> GameState:
        """The player now on turn catches anyone left on one card without UNO."""
        challenger = state.current_player().id
        for player in state.players:
            if state.phase is not GamePhase.PLAYING:
                break
            if player.id != challenger and should_have_called_uno(player.hand, state.called_uno, player.id):
                state = self._apply(state, ChallengeUno(challenger, player.id))
        return state

    def run(self) -> GameResult:
        """Run the game and return the result."""
        player_ids = list(self._agents.keys())
        state = init_game(player_ids, rng=self._rng)
        num_turns = 0

        while state.phase is GamePhase.PLAYING and num_turns < self._max_turns:
            pid = state.current_player().id
            agent = self._agents[pid]
            legal = get_legal_actions(state, pid)
            if not legal:
                break

            action = agent.get_action(state, legal, pid)
            if action is None:
                action = DrawCard(pid)

            hand_size = len(state.current_player().hand)
            if (
                isinstance(action, PlayCard)
                and hand_size == 2
                and pid not in state.called_uno
                and agent.wants_to_call_uno(state, pid)
            ):
                state = self._apply(state, CallUno(pid))

            new_state = self._apply(state, action)
            if new_state is state:
                # Rejected play; fall back to drawing so the game moves on
                new_state = self._apply(state, DrawCard(pid))
            state = self._challenge_round(new_state)
            num_turns += 1

        if state.winner is None:
            logger.info("Game stopped after %d turns without a winner", num_turns)

        return GameResult(
            winner=state.winner,
            num_turns=num_turns,
            player_ids=tuple(player_ids),
            final_state=state,
        )
