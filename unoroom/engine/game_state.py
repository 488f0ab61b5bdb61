"""Game state for UNO."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, FrozenSet, Optional, Tuple

from unoroom.engine.card import Card, Color

if TYPE_CHECKING:
    from unoroom.engine.rules import Action


class GamePhase(str, Enum):
    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


class Direction(str, Enum):
    CLOCKWISE = "clockwise"
    COUNTERCLOCKWISE = "counterclockwise"

    @property
    def step(self) -> int:
        return 1 if self is Direction.CLOCKWISE else -1

    def reversed(self) -> "Direction":
        if self is Direction.CLOCKWISE:
            return Direction.COUNTERCLOCKWISE
        return Direction.CLOCKWISE


@dataclass(frozen=True)
class Player:
    """A seat at the table. Seat order in GameState.players is turn order."""

    id: str
    name: str
    hand: Tuple[Card, ...] = ()
    connected: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "hand": [c.to_dict() for c in self.hand],
            "isConnected": self.connected,
        }


@dataclass(frozen=True)
class GameState:
    """Immutable UNO game state. Every action yields a new instance."""

    players: Tuple[Player, ...]
    discard_pile: Tuple[Card, ...]  # top is last
    draw_pile: Tuple[Card, ...]  # dealt from the front
    current_color: Color
    phase: GamePhase = GamePhase.PLAYING
    current_player_index: int = 0
    direction: Direction = Direction.CLOCKWISE
    pending_draw_count: int = 0  # accumulated Draw Two/Four
    last_action: Optional["Action"] = None
    winner: Optional[str] = None
    called_uno: FrozenSet[str] = field(default_factory=frozenset)
    history: Tuple[str, ...] = ()  # Log of events

    def top_card(self) -> Card:
        """Return the top card on the discard pile."""
        return self.discard_pile[-1]

    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    def player_index(self, player_id: str) -> Optional[int]:
        for i, p in enumerate(self.players):
            if p.id == player_id:
                return i
        return None

    def get_player(self, player_id: str) -> Optional[Player]:
        index = self.player_index(player_id)
        return self.players[index] if index is not None else None

    def find_card(self, card_id: str) -> Optional[Card]:
        """Look a card id up in every hand and both piles."""
        for p in self.players:
            for c in p.hand:
                if c.id == card_id:
                    return c
        for c in self.discard_pile + self.draw_pile:
            if c.id == card_id:
                return c
        return None

    def card_count(self) -> int:
        """Total cards across both piles and every hand."""
        return (
            len(self.draw_pile)
            + len(self.discard_pile)
            + sum(len(p.hand) for p in self.players)
        )

    def to_dict(self) -> dict:
        """JSON-ready snapshot for broadcasting to clients."""
        return {
            "phase": self.phase.value,
            "players": [p.to_dict() for p in self.players],
            "currentPlayerIndex": self.current_player_index,
            "direction": self.direction.value,
            "drawPile": [c.to_dict() for c in self.draw_pile],
            "discardPile": [c.to_dict() for c in self.discard_pile],
            "currentColor": self.current_color.value,
            "pendingDrawCount": self.pending_draw_count,
            "lastAction": self.last_action.to_dict() if self.last_action else None,
            "winner": self.winner,
            "calledUno": sorted(self.called_uno),
            "history": list(self.history[-10:]),
        }
