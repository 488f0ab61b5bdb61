"""Deck creation, shuffling and dealing."""

import random
from typing import List, Optional, Sequence, Tuple

from unoroom.engine.card import (
    ACTION_VALUES,
    NUMBER_VALUES,
    WILD_VALUES,
    Card,
    CardIdGenerator,
    Color,
    create_card,
)

DECK_SIZE = 108


def create_deck() -> List[Card]:
    """Create a standard 108-card UNO deck, unshuffled.

    - 4 colors x (one 0, two each of 1-9, Skip, Reverse, Draw Two): 100 cards
    - 4 Wild, 4 Wild Draw Four: 8 cards
    - Total: 108 cards
    """
    next_id = CardIdGenerator()
    cards: List[Card] = []

    for color in Color:
        # One zero per color
        cards.append(create_card("0", color, card_id=next_id()))
        # Two of each 1-9 and action cards per color
        for value in NUMBER_VALUES[1:] + ACTION_VALUES:
            cards.append(create_card(value, color, card_id=next_id()))
            cards.append(create_card(value, color, card_id=next_id()))

    for value in WILD_VALUES:
        for _ in range(4):
            cards.append(create_card(value, None, card_id=next_id()))

    return cards


def shuffle_deck(
    deck: Sequence[Card],
    rng: Optional[random.Random] = None,
) -> List[Card]:
    """Return a shuffled copy of the deck; the input is untouched."""
    rng = rng or random
    shuffled = list(deck)
    rng.shuffle(shuffled)
    return shuffled


def deal_cards(deck: Sequence[Card], num_cards: int) -> Tuple[List[Card], List[Card]]:
    """Split the front num_cards off the deck.

    Returns (dealt, remaining). Asking for more than the deck holds deals
    whatever is there; refilling is the caller's job.
    """
    if num_cards < 0:
        raise ValueError(f"Cannot deal a negative number of cards: {num_cards}")
    return list(deck[:num_cards]), list(deck[num_cards:])


def _is_starting_card(card: Card) -> bool:
    return card.color is not None and card.value in NUMBER_VALUES


def get_starting_card(deck: Sequence[Card]) -> Tuple[Card, List[Card]]:
    """Pick the first plain numbered card to open the discard pile.

    Returns the card and the deck without it, other cards keeping their
    order. Reshuffling never adds a numbered card, so a deck without one
    raises ValueError instead of retrying.
    """
    for index, card in enumerate(deck):
        if _is_starting_card(card):
            return card, list(deck[:index]) + list(deck[index + 1:])
    raise ValueError("Deck has no numbered card to start with")
