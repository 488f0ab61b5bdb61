"""Random agent - plays a random legal card, draws only when it must."""

import random
from typing import Optional

from unoroom.engine import Action, GameState, PlayCard


class RandomAgent:
    """Agent that picks uniformly among legal plays.

    It remembers to call UNO with probability ``uno_rate``, so simulated
    games also exercise challenges.
    """

    def __init__(self, name: str = "random", seed: Optional[int] = None, uno_rate: float = 0.8):
        self._name = name
        self._rng = random.Random(seed)
        self._uno_rate = uno_rate

    @property
    def name(self) -> str:
        return self._name

    def get_action(
        self,
        state: GameState,
        legal_actions: list[Action],
        player_id: str,
    ) -> Action | None:
        if not legal_actions:
            return None

        # Prefer playing over drawing to make game progress
        play_actions = [a for a in legal_actions if isinstance(a, PlayCard)]
        if play_actions:
            return self._rng.choice(play_actions)
        return None

    def wants_to_call_uno(self, state: GameState, player_id: str) -> bool:
        return self._rng.random() < self._uno_rate
