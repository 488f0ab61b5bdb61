"""UNO rules: legal actions and state transitions.

Every operation takes a state and returns an ActionResult. Rejected actions
come back with the prior state untouched and an EngineError; nothing here
raises for a bad move.
"""

import logging
import random
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Tuple, Union

from unoroom.config import DEFAULT_GAME_CONFIG, GameConfig
from unoroom.engine.card import Card, Color
from unoroom.engine.deck import create_deck, deal_cards, get_starting_card, shuffle_deck
from unoroom.engine.errors import ActionResult, EngineError
from unoroom.engine.game_state import Direction, GamePhase, GameState, Player
from unoroom.engine.validation import (
    can_play_card,
    find_card_in_hand,
    has_playable_card,
    is_player_turn,
    should_have_called_uno,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlayCard:
    """Action: play a card. For wilds, chosen_color is required."""

    player_id: str
    card: Card
    chosen_color: Optional[Color] = None

    def to_dict(self) -> dict:
        return {
            "type": "play_card",
            "playerId": self.player_id,
            "card": self.card.to_dict(),
            "chosenColor": self.chosen_color.value if self.chosen_color else None,
        }


@dataclass(frozen=True)
class DrawCard:
    """Action: draw a card, or take the pending Draw Two/Four stack."""

    player_id: str

    def to_dict(self) -> dict:
        return {"type": "draw_card", "playerId": self.player_id}


@dataclass(frozen=True)
class CallUno:
    """Action: announce UNO."""

    player_id: str

    def to_dict(self) -> dict:
        return {"type": "call_uno", "playerId": self.player_id}


@dataclass(frozen=True)
class ChallengeUno:
    """Action: catch a player holding one card without having called UNO."""

    challenger_id: str
    target_player_id: str

    def to_dict(self) -> dict:
        return {
            "type": "challenge_uno",
            "challengerId": self.challenger_id,
            "targetPlayerId": self.target_player_id,
        }


Action = Union[PlayCard, DrawCard, CallUno, ChallengeUno]

Shuffler = Callable[[List[Card]], List[Card]]


def init_game(
    players: Sequence[Union[Player, str]],
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
    shuffle: Optional[Shuffler] = None,
    config: GameConfig = DEFAULT_GAME_CONFIG,
) -> GameState:
    """Create initial game state: deal 7 cards each, one card on discard.

    Players may be given as Player objects or bare ids. ``shuffle`` replaces
    the deck shuffle, which lets tests fix the deal order.
    """
    seats = [p if isinstance(p, Player) else Player(id=p, name=p) for p in players]
    if not config.min_players <= len(seats) <= config.max_players:
        raise ValueError(
            f"UNO needs {config.min_players}-{config.max_players} players, got {len(seats)}"
        )
    if len({p.id for p in seats}) != len(seats):
        raise ValueError("Player ids must be unique")

    if rng is None and seed is not None:
        rng = random.Random(seed)
    if shuffle is None:
        shuffle = lambda cards: shuffle_deck(cards, rng)

    deck = shuffle(create_deck())
    dealt_players = []
    for player in seats:
        hand, deck = deal_cards(deck, config.initial_hand_size)
        dealt_players.append(replace(player, hand=tuple(hand)))

    start_card, deck = get_starting_card(deck)
    logger.debug("Dealt %d players, starting card %s", len(seats), start_card)

    return GameState(
        players=tuple(dealt_players),
        discard_pile=(start_card,),
        draw_pile=tuple(deck),
        current_color=start_card.color,
        phase=GamePhase.PLAYING,
        current_player_index=0,
        direction=Direction.CLOCKWISE,
        pending_draw_count=0,
    )


def next_player_index(current_index: int, player_count: int, direction: Direction) -> int:
    return (current_index + direction.step) % player_count


def advance_turn(state: GameState) -> GameState:
    """Move the turn one seat in the current direction."""
    return replace(
        state,
        current_player_index=next_player_index(
            state.current_player_index, len(state.players), state.direction
        ),
    )


def _with_hand(players: Tuple[Player, ...], index: int, hand: Sequence[Card]) -> Tuple[Player, ...]:
    return players[:index] + (replace(players[index], hand=tuple(hand)),) + players[index + 1:]


def _take_cards(
    state: GameState,
    count: int,
    rng: Optional[random.Random],
) -> Tuple[List[Card], Tuple[Card, ...], Tuple[Card, ...]]:
    """Deal count cards off the draw pile, recycling the discard pile if short.

    Returns (dealt, draw_pile, discard_pile). When even the recycled pile
    cannot cover count, whatever remains is dealt and the draw comes up short.
    """
    draw_pile = list(state.draw_pile)
    discard_pile = state.discard_pile
    if len(draw_pile) < count and len(discard_pile) > 1:
        # Everything under the top card goes back in, shuffled, wilds uncolored
        recycled = [replace(c, color=None) if c.is_wild else c for c in discard_pile[:-1]]
        draw_pile += shuffle_deck(recycled, rng)
        discard_pile = discard_pile[-1:]
        logger.debug("Recycled discard pile, draw pile now %d cards", len(draw_pile))

    dealt, remaining = deal_cards(draw_pile, count)
    if len(dealt) < count:
        logger.warning("Out of cards: wanted %d, dealt %d", count, len(dealt))
    return dealt, tuple(remaining), discard_pile


def _not_in_progress(state: GameState) -> Optional[ActionResult]:
    if state.phase is not GamePhase.PLAYING:
        return ActionResult(state, EngineError.GAME_NOT_IN_PROGRESS)
    return None


def play_card(state: GameState, action: PlayCard) -> ActionResult:
    """Play a card from the acting player's hand."""
    rejected = _not_in_progress(state)
    if rejected:
        return rejected

    index = state.player_index(action.player_id)
    if index is None:
        return ActionResult(state, EngineError.PLAYER_NOT_FOUND)
    if not is_player_turn(state, action.player_id):
        return ActionResult(state, EngineError.NOT_YOUR_TURN)

    player = state.players[index]
    card = find_card_in_hand(player.hand, action.card.id)
    if card is None:
        return ActionResult(state, EngineError.CARD_NOT_IN_HAND)
    if not can_play_card(card, state.top_card(), state.current_color):
        return ActionResult(state, EngineError.ILLEGAL_PLAY)

    if card.is_wild:
        if action.chosen_color is None:
            return ActionResult(state, EngineError.COLOR_REQUIRED)
        # Only the copy on the discard pile carries the chosen color
        played = replace(card, color=action.chosen_color)
        new_color = action.chosen_color
    else:
        played = card
        new_color = card.color

    hand = [c for c in player.hand if c.id != card.id]
    history = list(state.history)
    desc = f"{player.name} played {card}"
    if card.is_wild:
        desc += f" (chose {new_color.value})"
    history.append(desc)

    won = len(hand) == 0
    if won:
        history.append(f"{player.name} won")

    new_state = replace(
        state,
        players=_with_hand(state.players, index, hand),
        discard_pile=state.discard_pile + (played,),
        current_color=new_color,
        last_action=replace(action, card=played),
        winner=player.id if won else None,
        phase=GamePhase.FINISHED if won else state.phase,
        history=tuple(history),
    )

    # Effects still apply on the winning card; the state is terminal anyway
    if card.value == "reverse":
        new_state = replace(new_state, direction=state.direction.reversed())
    elif card.value == "skip":
        return ActionResult(advance_turn(advance_turn(new_state)))
    elif card.value == "draw2":
        new_state = replace(new_state, pending_draw_count=state.pending_draw_count + 2)
    elif card.value == "wild_draw4":
        new_state = replace(new_state, pending_draw_count=state.pending_draw_count + 4)

    return ActionResult(advance_turn(new_state))


def draw_card(
    state: GameState,
    player_id: str,
    rng: Optional[random.Random] = None,
) -> ActionResult:
    """Draw one card, or the whole pending Draw Two/Four stack."""
    rejected = _not_in_progress(state)
    if rejected:
        return rejected

    index = state.player_index(player_id)
    if index is None:
        return ActionResult(state, EngineError.PLAYER_NOT_FOUND)
    if not is_player_turn(state, player_id):
        return ActionResult(state, EngineError.NOT_YOUR_TURN)

    voluntary = state.pending_draw_count == 0
    draw_count = 1 if voluntary else state.pending_draw_count

    dealt, draw_pile, discard_pile = _take_cards(state, draw_count, rng)
    player = state.players[index]
    hand = player.hand + tuple(dealt)

    history = list(state.history)
    if voluntary:
        history.append(f"{player.name} drew a card")
    else:
        history.append(f"{player.name} drew {len(dealt)} cards (penalty)")
    if len(dealt) < draw_count:
        history.append(f"Deck exhausted: {player.name} drew {len(dealt)} of {draw_count}")

    new_state = replace(
        state,
        players=_with_hand(state.players, index, hand),
        draw_pile=draw_pile,
        discard_pile=discard_pile,
        pending_draw_count=0,
        last_action=DrawCard(player_id),
        history=tuple(history),
    )

    # A voluntary draw that leaves a legal play keeps the turn
    can_play = voluntary and has_playable_card(hand, state.top_card(), state.current_color)
    if not can_play:
        new_state = advance_turn(new_state)
    return ActionResult(new_state)


def call_uno(state: GameState, player_id: str) -> ActionResult:
    """Record that a player called UNO. Allowed at any time, once per game."""
    rejected = _not_in_progress(state)
    if rejected:
        return rejected

    player = state.get_player(player_id)
    if player is None:
        return ActionResult(state, EngineError.PLAYER_NOT_FOUND)
    if player_id in state.called_uno:
        return ActionResult(state, EngineError.ALREADY_CALLED)

    return ActionResult(
        replace(
            state,
            called_uno=state.called_uno | {player_id},
            last_action=CallUno(player_id),
            history=state.history + (f"{player.name} called UNO",),
        )
    )


def challenge_uno(
    state: GameState,
    challenger_id: str,
    target_player_id: str,
    rng: Optional[random.Random] = None,
    config: GameConfig = DEFAULT_GAME_CONFIG,
) -> ActionResult:
    """Penalize a target holding one card who never called UNO.

    Anyone may challenge. A failed challenge returns the same state object
    with penalized=False.
    """
    rejected = _not_in_progress(state)
    if rejected:
        return rejected

    index = state.player_index(target_player_id)
    if index is None:
        return ActionResult(state, EngineError.TARGET_NOT_FOUND)

    target = state.players[index]
    if not should_have_called_uno(target.hand, state.called_uno, target_player_id):
        return ActionResult(state, penalized=False)

    dealt, draw_pile, discard_pile = _take_cards(state, config.uno_penalty, rng)
    logger.debug("%s challenged %s: penalty %d cards", challenger_id, target_player_id, len(dealt))
    new_state = replace(
        state,
        players=_with_hand(state.players, index, target.hand + tuple(dealt)),
        draw_pile=draw_pile,
        discard_pile=discard_pile,
        last_action=ChallengeUno(challenger_id, target_player_id),
        history=state.history
        + (f"{target.name} was caught without UNO and drew {len(dealt)} cards",),
    )
    return ActionResult(new_state, penalized=True)


def apply_action(
    state: GameState,
    action: Action,
    rng: Optional[random.Random] = None,
) -> ActionResult:
    """Dispatch an action to its handler."""
    if isinstance(action, PlayCard):
        return play_card(state, action)
    if isinstance(action, DrawCard):
        return draw_card(state, action.player_id, rng=rng)
    if isinstance(action, CallUno):
        return call_uno(state, action.player_id)
    if isinstance(action, ChallengeUno):
        return challenge_uno(state, action.challenger_id, action.target_player_id, rng=rng)
    raise TypeError(f"Unknown action type: {type(action).__name__}")


def get_legal_actions(state: GameState, player_id: str) -> List[Action]:
    """Return the plays and draw open to the current player.

    Wilds appear once per color. UNO calls and challenges are always open
    and are not listed.
    """
    if state.phase is not GamePhase.PLAYING:
        return []
    player = state.get_player(player_id)
    if player is None or not is_player_turn(state, player_id):
        return []

    top = state.top_card()
    actions: List[Action] = []
    for card in player.hand:
        if not can_play_card(card, top, state.current_color):
            continue
        if card.is_wild:
            for color in Color:
                actions.append(PlayCard(player_id, card, chosen_color=color))
        else:
            actions.append(PlayCard(player_id, card))

    # Can always draw
    actions.append(DrawCard(player_id))
    return actions


def set_player_connected(state: GameState, player_id: str, connected: bool) -> GameState:
    """Flag a seat as connected or not. Turn order and hands are unaffected."""
    index = state.player_index(player_id)
    if index is None:
        return state
    players = state.players
    updated = replace(players[index], connected=connected)
    return replace(state, players=players[:index] + (updated,) + players[index + 1:])
