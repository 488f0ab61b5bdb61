"""Game engine for UNO."""

from unoroom.engine.card import Card, Color, create_card
from unoroom.engine.deck import create_deck, deal_cards, get_starting_card, shuffle_deck
from unoroom.engine.errors import ActionResult, EngineError
from unoroom.engine.game_state import Direction, GamePhase, GameState, Player
from unoroom.engine.rules import (
    Action,
    CallUno,
    ChallengeUno,
    DrawCard,
    PlayCard,
    apply_action,
    call_uno,
    challenge_uno,
    draw_card,
    get_legal_actions,
    init_game,
    play_card,
    set_player_connected,
)

__all__ = [
    "Card",
    "Color",
    "create_card",
    "create_deck",
    "deal_cards",
    "get_starting_card",
    "shuffle_deck",
    "ActionResult",
    "EngineError",
    "Direction",
    "GamePhase",
    "GameState",
    "Player",
    "Action",
    "CallUno",
    "ChallengeUno",
    "DrawCard",
    "PlayCard",
    "apply_action",
    "call_uno",
    "challenge_uno",
    "draw_card",
    "get_legal_actions",
    "init_game",
    "play_card",
    "set_player_connected",
]
