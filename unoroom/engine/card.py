"""Card and Color types for UNO."""

import itertools
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Color(str, Enum):
    """Card colors."""

    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"


NUMBER_VALUES = ("0", "1", "2", "3", "4", "5", "6", "7", "8", "9")
ACTION_VALUES = ("skip", "reverse", "draw2")
WILD_VALUES = ("wild", "wild_draw4")

CARD_VALUES = NUMBER_VALUES + ACTION_VALUES + WILD_VALUES


@dataclass(frozen=True)
class Card:
    """A UNO card.

    For number/action cards: color is set, value is "0"-"9", "skip", "reverse", "draw2".
    For wild cards: color is None while in a hand or pile, and carries the
    chosen color once played. The id stays the same across that recolor.
    """

    id: str
    value: str
    color: Optional[Color] = None

    def __post_init__(self) -> None:
        if self.value not in CARD_VALUES:
            raise ValueError(f"Invalid card value: {self.value}")
        if self.value not in WILD_VALUES and self.color is None:
            raise ValueError("Non-wild cards must have a color")

    @property
    def is_wild(self) -> bool:
        return self.value in WILD_VALUES

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.value,
            "color": self.color.value if self.color is not None else None,
        }

    def __str__(self) -> str:
        if self.color is None:
            return self.value
        return f"{self.color.value}_{self.value}"


class CardIdGenerator:
    """Monotonic card ids scoped to one deck.

    Every generator gets its own random token, so two decks built in the
    same process never share an id.
    """

    def __init__(self) -> None:
        self._token = uuid.uuid4().hex[:12]
        self._counter = itertools.count()

    def __call__(self) -> str:
        return f"card-{self._token}-{next(self._counter)}"


def create_card(
    value: str,
    color: Optional[Color] = None,
    card_id: Optional[str] = None,
) -> Card:
    """Create a single card with a fresh unique id."""
    return Card(id=card_id or f"card-{uuid.uuid4().hex}", value=value, color=color)
