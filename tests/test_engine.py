"""Unit tests for the game engine."""

from collections import Counter
from dataclasses import replace

import pytest

from unoroom.engine import (
    CallUno,
    Card,
    ChallengeUno,
    Color,
    Direction,
    DrawCard,
    EngineError,
    GamePhase,
    GameState,
    PlayCard,
    Player,
    apply_action,
    call_uno,
    challenge_uno,
    create_card,
    create_deck,
    draw_card,
    get_legal_actions,
    init_game,
    play_card,
)


def card(value, color=Color.RED):
    return create_card(value, None if value in ("wild", "wild_draw4") else color)


def make_state(hands, top, draw_pile=None, color=None, **kwargs) -> GameState:
    players = tuple(
        Player(id=f"p{i}", name=f"P{i}", hand=tuple(hand)) for i, hand in enumerate(hands)
    )
    if draw_pile is None:
        draw_pile = [card("9", Color.BLUE) for _ in range(10)]
    return GameState(
        players=players,
        discard_pile=(top,),
        draw_pile=tuple(draw_pile),
        current_color=color or top.color,
        **kwargs,
    )


def identity(cards):
    return cards


def card_kind(c):
    # Wilds pick up a color on the discard pile, nothing else may change
    return c.value, None if c.is_wild else c.color


# ---------------------------------------------------------------------------
# init_game
# ---------------------------------------------------------------------------

def test_init_game() -> None:
    state = init_game(["p1", "p2", "p3"], seed=1)
    assert [len(p.hand) for p in state.players] == [7, 7, 7]
    assert len(state.discard_pile) == 1
    assert state.current_player().id == "p1"
    assert state.phase is GamePhase.PLAYING
    assert state.direction is Direction.CLOCKWISE
    assert state.winner is None
    assert state.pending_draw_count == 0
    assert state.called_uno == frozenset()
    assert len(state.draw_pile) == 108 - 7 * 3 - 1
    assert state.current_color == state.top_card().color


def test_init_game_reproducible() -> None:
    s1 = init_game(["p1", "p2"], seed=123)
    s2 = init_game(["p1", "p2"], seed=123)
    assert [str(c) for c in s1.players[0].hand] == [str(c) for c in s2.players[0].hand]


def test_init_game_deterministic_deal() -> None:
    state = init_game(["p1", "p2"], shuffle=identity)
    p1, p2 = state.players
    assert [c.value for c in p1.hand] == ["0", "1", "1", "2", "2", "3", "3"]
    assert [c.value for c in p2.hand] == ["4", "4", "5", "5", "6", "6", "7"]
    assert str(state.top_card()) == "red_7"
    assert len(state.draw_pile) == 93
    assert str(state.draw_pile[0]) == "red_8"
    assert state.current_color is Color.RED


def test_init_game_skips_action_cards_for_start() -> None:
    def actions_first(cards):
        return sorted(cards, key=lambda c: c.value.isdigit())

    state = init_game(["p1", "p2"], shuffle=actions_first)
    assert state.top_card().value.isdigit()
    assert state.card_count() == 108


def test_init_game_accepts_ids_or_players() -> None:
    state = init_game(["p1", Player(id="p2", name="Bea")], seed=2)
    assert [(p.id, p.name) for p in state.players] == [("p1", "p1"), ("p2", "Bea")]


@pytest.mark.parametrize("ids", [["solo"], ["a", "b", "c", "d", "e"], ["a", "a"]])
def test_init_game_rejects_bad_tables(ids) -> None:
    with pytest.raises(ValueError):
        init_game(ids)


# ---------------------------------------------------------------------------
# play_card
# ---------------------------------------------------------------------------

def test_play_number_card_advances_turn() -> None:
    five = card("5", Color.BLUE)
    state = make_state([[five, card("1")], [card("2")]], top=card("5"))
    result = play_card(state, PlayCard("p0", five))
    assert result.ok
    new = result.state
    assert new.current_player_index == 1
    assert new.top_card() == five
    assert new.current_color is Color.BLUE
    assert five not in new.players[0].hand
    assert new.last_action == PlayCard("p0", five)


def test_play_card_errors_leave_state_untouched() -> None:
    blue3 = card("3", Color.BLUE)
    red1 = card("1")
    state = make_state([[blue3, red1], [card("2")]], top=card("5"))

    cases = [
        (PlayCard("ghost", red1), EngineError.PLAYER_NOT_FOUND),
        (PlayCard("p1", state.players[1].hand[0]), EngineError.NOT_YOUR_TURN),
        (PlayCard("p0", state.players[1].hand[0]), EngineError.CARD_NOT_IN_HAND),
        (PlayCard("p0", blue3), EngineError.ILLEGAL_PLAY),
    ]
    for action, error in cases:
        result = play_card(state, action)
        assert result.error is error
        assert result.state is state


def test_card_lookup_is_by_id() -> None:
    first = card("5")
    second = card("5")
    state = make_state([[first, second], [card("2")]], top=card("5"))
    new = play_card(state, PlayCard("p0", second)).state
    assert new.players[0].hand == (first,)
    assert new.top_card().id == second.id


def test_wild_requires_color() -> None:
    wild = card("wild")
    state = make_state([[wild, card("1")], [card("2")]], top=card("5"))
    result = play_card(state, PlayCard("p0", wild))
    assert result.error is EngineError.COLOR_REQUIRED
    assert result.state is state


def test_wild_is_recolored_on_discard_only() -> None:
    wild = card("wild")
    state = make_state([[wild, card("1")], [card("2")]], top=card("5"))
    new = play_card(state, PlayCard("p0", wild, chosen_color=Color.GREEN)).state
    top = new.top_card()
    assert top.id == wild.id
    assert top.value == "wild"
    assert top.color is Color.GREEN
    assert new.current_color is Color.GREEN
    assert all(c.id != wild.id for c in new.players[0].hand)


def test_last_action_records_card_from_hand() -> None:
    wild = card("wild")
    state = make_state([[wild, card("1")], [card("2")]], top=card("5"))
    claimed = Card(id=wild.id, value="7", color=Color.YELLOW)
    new = play_card(state, PlayCard("p0", claimed, chosen_color=Color.GREEN)).state
    assert new.last_action == PlayCard("p0", replace(wild, color=Color.GREEN), chosen_color=Color.GREEN)
    assert new.to_dict()["lastAction"]["card"] == {"id": wild.id, "type": "wild", "color": "green"}


def test_reverse_flips_direction() -> None:
    rev = card("reverse")
    state = make_state([[rev, card("1")], [card("2")], [card("3")]], top=card("5"))
    new = play_card(state, PlayCard("p0", rev)).state
    assert new.direction is Direction.COUNTERCLOCKWISE
    assert new.current_player_index == 2


def test_skip_from_third_of_four_lands_on_first() -> None:
    skip = card("skip")
    hands = [[card("1")], [card("2")], [skip, card("3")], [card("4")]]
    state = make_state(hands, top=card("5"), current_player_index=2)
    new = play_card(state, PlayCard("p2", skip)).state
    assert new.current_player_index == 0


def test_draw2_then_forced_draw() -> None:
    d2 = card("draw2")
    state = make_state([[d2, card("1")], [card("3", Color.GREEN), card("4", Color.GREEN)]], top=card("5"))
    state = play_card(state, PlayCard("p0", d2)).state
    assert state.pending_draw_count == 2
    assert state.current_player_index == 1

    new = draw_card(state, "p1").state
    assert len(new.players[1].hand) == 4
    assert new.pending_draw_count == 0
    assert new.current_player_index == 0


def test_draw_stack_accumulates() -> None:
    d2 = card("draw2")
    wd4 = card("wild_draw4")
    state = make_state([[d2, card("1")], [wd4, card("2")]], top=card("5"))
    state = play_card(state, PlayCard("p0", d2)).state
    state = play_card(state, PlayCard("p1", wd4, chosen_color=Color.YELLOW)).state
    assert state.pending_draw_count == 6
    new = draw_card(state, "p0").state
    assert len(new.players[0].hand) == 1 + 6


def test_winning_play_finishes_game() -> None:
    last = card("3")
    state = make_state([[last], [card("2")]], top=card("5"))
    new = play_card(state, PlayCard("p0", last)).state
    assert new.winner == "p0"
    assert new.phase is GamePhase.FINISHED
    assert new.players[0].hand == ()
    # Turn still advances on the winning move
    assert new.current_player_index == 1


def test_finished_game_rejects_every_action() -> None:
    last = card("3")
    state = make_state([[last], [card("2")]], top=card("5"))
    done = play_card(state, PlayCard("p0", last)).state

    actions = [
        PlayCard("p1", done.players[1].hand[0]),
        DrawCard("p1"),
        CallUno("p1"),
        ChallengeUno("p1", "p0"),
    ]
    for action in actions:
        result = apply_action(done, action)
        assert result.error is EngineError.GAME_NOT_IN_PROGRESS
        assert result.state is done
        assert result.state.winner == "p0"


# ---------------------------------------------------------------------------
# draw_card
# ---------------------------------------------------------------------------

def test_voluntary_draw_keeps_turn_when_playable() -> None:
    state = make_state([[card("1", Color.BLUE)], [card("2")]], top=card("5"), draw_pile=[card("9")])
    new = draw_card(state, "p0").state
    assert len(new.players[0].hand) == 2
    assert new.current_player_index == 0


def test_voluntary_draw_passes_when_nothing_playable() -> None:
    state = make_state(
        [[card("1", Color.BLUE)], [card("2")]], top=card("5"), draw_pile=[card("2", Color.BLUE)]
    )
    new = draw_card(state, "p0").state
    assert new.current_player_index == 1
    assert new.last_action == DrawCard("p0")


def test_forced_draw_always_passes() -> None:
    state = make_state(
        [[card("1", Color.BLUE)], [card("2")]],
        top=card("draw2"),
        draw_pile=[card("9"), card("8")],
        pending_draw_count=2,
    )
    new = draw_card(state, "p0").state
    assert new.current_player_index == 1


def test_draw_errors() -> None:
    state = make_state([[card("1")], [card("2")]], top=card("5"))
    assert draw_card(state, "ghost").error is EngineError.PLAYER_NOT_FOUND
    assert draw_card(state, "p1").error is EngineError.NOT_YOUR_TURN


def test_draw_recycles_discard_pile() -> None:
    played_wild = Card(id="w1", value="wild", color=Color.BLUE)
    under = card("1")
    top = card("5")
    state = make_state([[card("1", Color.GREEN)], [card("2")]], top=top, draw_pile=[])
    state = replace(state, discard_pile=(under, played_wild, top))

    new = draw_card(state, "p0").state
    assert new.discard_pile == (top,)
    assert len(new.draw_pile) == 1
    assert new.card_count() == state.card_count()
    recycled = list(new.draw_pile) + list(new.players[0].hand[1:])
    assert {c.id for c in recycled} == {under.id, "w1"}
    assert all(c.color is None for c in recycled if c.is_wild)


def test_draw_when_cards_run_out() -> None:
    state = make_state(
        [[card("1", Color.GREEN)], [card("2")]], top=card("draw2"), draw_pile=[card("9")],
        pending_draw_count=4,
    )
    new = draw_card(state, "p0").state
    assert len(new.players[0].hand) == 2
    assert new.draw_pile == ()
    assert new.pending_draw_count == 0
    assert new.current_player_index == 1
    assert "Deck exhausted" in new.history[-1]


# ---------------------------------------------------------------------------
# call_uno / challenge_uno
# ---------------------------------------------------------------------------

def test_call_uno_anytime_once() -> None:
    state = make_state([[card("1")], [card("2"), card("3"), card("4")]], top=card("5"))
    called = call_uno(state, "p1")
    assert called.ok
    assert called.state.called_uno == frozenset({"p1"})

    again = call_uno(called.state, "p1")
    assert again.error is EngineError.ALREADY_CALLED
    assert again.state is called.state

    assert call_uno(state, "ghost").error is EngineError.PLAYER_NOT_FOUND


def test_challenge_penalizes_exactly_two() -> None:
    state = make_state([[card("1"), card("2")], [card("3")]], top=card("5"))
    result = challenge_uno(state, "p0", "p1")
    assert result.penalized is True
    assert len(result.state.players[1].hand) == 3
    assert len(result.state.draw_pile) == len(state.draw_pile) - 2
    assert result.state.current_player_index == state.current_player_index


def test_challenge_without_grounds_returns_same_state() -> None:
    state = make_state([[card("1"), card("2")], [card("3")]], top=card("5"))
    called = call_uno(state, "p1").state

    for target_state, target in ((called, "p1"), (state, "p0")):
        result = challenge_uno(target_state, "p0", target)
        assert result.penalized is False
        assert result.error is None
        assert result.state is target_state


def test_challenge_unknown_target() -> None:
    state = make_state([[card("1")], [card("3")]], top=card("5"))
    result = challenge_uno(state, "p0", "ghost")
    assert result.error is EngineError.TARGET_NOT_FOUND
    assert result.state is state


def test_anyone_may_challenge() -> None:
    state = make_state([[card("1"), card("2")], [card("3")]], top=card("5"))
    assert challenge_uno(state, "spectator", "p1").penalized is True


# ---------------------------------------------------------------------------
# Dispatch and legal actions
# ---------------------------------------------------------------------------

def test_apply_action_dispatch() -> None:
    state = make_state([[card("1"), card("2")], [card("3")]], top=card("5"))
    assert apply_action(state, CallUno("p0")).state.called_uno == {"p0"}
    assert apply_action(state, ChallengeUno("p0", "p1")).penalized is True
    assert apply_action(state, DrawCard("p0")).ok


def test_apply_unknown_action_raises() -> None:
    state = make_state([[card("1")], [card("3")]], top=card("5"))
    with pytest.raises(TypeError):
        apply_action(state, object())


def test_get_legal_actions() -> None:
    wild = card("wild")
    state = make_state([[wild, card("1"), card("2", Color.BLUE)], [card("3")]], top=card("5"))
    actions = get_legal_actions(state, "p0")
    plays = [a for a in actions if isinstance(a, PlayCard)]
    assert len(plays) == 4 + 1
    assert {a.chosen_color for a in plays if a.card.id == wild.id} == set(Color)
    assert actions[-1] == DrawCard("p0")
    assert get_legal_actions(state, "p1") == []


def test_conservation_and_turn_steps_over_many_moves() -> None:
    import random

    rng = random.Random(7)
    state = init_game(["a", "b", "c", "d"], rng=rng)
    initial = Counter(card_kind(c) for c in create_deck())

    for _ in range(400):
        if state.phase is not GamePhase.PLAYING:
            break
        pid = state.current_player().id
        actions = get_legal_actions(state, pid)
        plays = [a for a in actions if isinstance(a, PlayCard)]
        action = rng.choice(plays) if plays else DrawCard(pid)
        before = state
        state = apply_action(state, action, rng=rng).state

        assert state.card_count() == 108
        everything = list(state.draw_pile) + list(state.discard_pile)
        for p in state.players:
            everything.extend(p.hand)
        assert Counter(card_kind(c) for c in everything) == initial
        assert len({c.id for c in everything}) == 108
        assert 0 <= state.current_player_index < 4

        skipped = isinstance(action, PlayCard) and action.card.value == "skip"
        stayed = isinstance(action, DrawCard) and state.current_player_index == before.current_player_index
        if not skipped and not stayed:
            step = state.direction.step
            assert state.current_player_index == (before.current_player_index + step) % 4
