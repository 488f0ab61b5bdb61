"""Invariant soak - many seeded bot games, checked after every accepted action."""

import logging
import random
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from unoroom.agents import RandomAgent
from unoroom.engine import Action, Card, DrawCard, GamePhase, GameState, PlayCard, create_deck
from unoroom.engine.deck import DECK_SIZE
from unoroom.engine.rules import next_player_index
from unoroom.engine.validation import has_playable_card
from unoroom.orchestration.game_runner import GameRunner

logger = logging.getLogger(__name__)


@dataclass
class SoakReport:
    """Totals over a soak run. Each violation names the game seed that produced it."""

    games: int = 0
    finished: int = 0
    actions: int = 0
    violations: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations


def card_kind(card: Card) -> tuple:
    # Wilds carry a chosen color on the discard pile only
    return card.value, None if card.is_wild else card.color


FULL_DECK_KINDS = Counter(card_kind(c) for c in create_deck())


def _expected_turn(before: GameState, action: Action, after: GameState) -> Optional[int]:
    """Seat that should be on turn after action, None when either outcome is legal."""
    n = len(before.players)
    current = before.current_player_index
    if isinstance(action, PlayCard):
        nxt = next_player_index(current, n, after.direction)
        if action.card.value == "skip":
            nxt = next_player_index(nxt, n, after.direction)
        return nxt
    if isinstance(action, DrawCard):
        hand = after.players[current].hand
        if before.pending_draw_count == 0 and has_playable_card(hand, before.top_card(), before.current_color):
            return current
        return next_player_index(current, n, before.direction)
    # UNO calls and challenges never move the turn
    return current


def check_invariants(before: GameState, action: Action, after: GameState) -> list[str]:
    """Return a description of every invariant the transition before -> after breaks."""
    problems = []
    cards = list(after.draw_pile) + list(after.discard_pile)
    for p in after.players:
        cards.extend(p.hand)

    if len(cards) != DECK_SIZE:
        problems.append(f"{len(cards)} cards in play, expected {DECK_SIZE}")
    if len({c.id for c in cards}) != len(cards):
        problems.append("duplicate card ids")
    if Counter(card_kind(c) for c in cards) != FULL_DECK_KINDS:
        problems.append("card types or colors changed")

    loose = list(after.draw_pile) + [c for p in after.players for c in p.hand]
    if any(c.is_wild and c.color is not None for c in loose):
        problems.append("colored wild outside the discard pile")

    if not 0 <= after.current_player_index < len(after.players):
        problems.append(f"turn index {after.current_player_index} out of range")
    elif after.current_player_index != _expected_turn(before, action, after):
        problems.append(
            f"turn moved {before.current_player_index} -> {after.current_player_index}"
        )

    if (after.winner is None) != (after.phase is GamePhase.PLAYING):
        problems.append(f"winner {after.winner!r} with phase {after.phase.value}")
    elif after.winner is not None and after.get_player(after.winner).hand:
        problems.append("winner still holds cards")
    return problems


def run_soak(
    num_games: int = 100,
    num_players: int = 4,
    seed: Optional[int] = None,
    max_turns: int = 1000,
    uno_rate: float = 0.5,
) -> SoakReport:
    """Play num_games bot games and check every transition.

    ``uno_rate`` below 1 makes bots forget UNO so challenges and the penalty
    draw get exercised too.
    """
    rng = random.Random(seed)
    report = SoakReport()

    for g in range(num_games):
        game_seed = rng.randint(0, 2**31 - 1)
        agents = {
            f"p{i}": RandomAgent(name=f"Bot{i}", seed=game_seed + i, uno_rate=uno_rate)
            for i in range(num_players)
        }

        def on_step(before: GameState, action: Action, after: GameState) -> None:
            report.actions += 1
            for problem in check_invariants(before, action, after):
                report.violations.append(f"game {g} (seed {game_seed}) {type(action).__name__}: {problem}")

        result = GameRunner(agents, seed=game_seed, max_turns=max_turns, on_step=on_step).run()
        report.games += 1
        if result.winner is not None:
            report.finished += 1

    logger.info(
        "Soak: %d games, %d finished, %d actions, %d violations",
        report.games, report.finished, report.actions, len(report.violations),
    )
    return report
