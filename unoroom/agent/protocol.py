"""Agent protocol - interface that bots and human agents implement."""

from typing import Protocol

from unoroom.engine import Action, GameState


class AgentProtocol(Protocol):
    """Interface for UNO-playing agents."""

    @property
    def name(self) -> str:
        """Display name for the agent."""
        ...

    def get_action(
        self,
        state: GameState,
        legal_actions: list[Action],
        player_id: str,
    ) -> Action | None:
        """Choose an action given the game state and legal actions.

        Args:
            state: Current game state.
            legal_actions: List of valid plays plus the draw.
            player_id: This agent's player ID.

        Returns:
            One of the legal actions, or None to draw.
        """
        ...

    def wants_to_call_uno(self, state: GameState, player_id: str) -> bool:
        """Asked right before this agent plays down from two cards to one."""
        ...
