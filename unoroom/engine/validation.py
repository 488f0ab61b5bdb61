"""Pure predicates: is this move legal, whose turn is it."""

from typing import AbstractSet, Iterable, Optional

from unoroom.engine.card import Card, Color
from unoroom.engine.game_state import GameState


def can_play_card(card: Card, top_card: Card, current_color: Color) -> bool:
    """Check if a card can be played on the current discard pile."""
    # Wild can always be played
    if card.is_wild:
        return True
    # Match by color, or by value (same number or same action kind)
    return card.color == current_color or card.value == top_card.value


def has_playable_card(hand: Iterable[Card], top_card: Card, current_color: Color) -> bool:
    return any(can_play_card(c, top_card, current_color) for c in hand)


def can_call_uno(hand: Iterable[Card]) -> bool:
    """UNO is called with two cards in hand, before playing down to one."""
    return len(list(hand)) == 2


def should_have_called_uno(
    hand: Iterable[Card],
    called_uno: AbstractSet[str],
    player_id: str,
) -> bool:
    return len(list(hand)) == 1 and player_id not in called_uno


def is_player_turn(state: GameState, player_id: str) -> bool:
    return state.current_player().id == player_id


def find_card_in_hand(hand: Iterable[Card], card_id: str) -> Optional[Card]:
    """Look a card up by id; two cards may share value and color."""
    for card in hand:
        if card.id == card_id:
            return card
    return None
