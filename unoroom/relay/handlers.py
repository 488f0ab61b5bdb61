"""Websocket message handlers for the UNO relay.

Each handler corresponds to one inbound message type. Handlers are
dispatched via the HANDLERS dict in server.py. Errors go back to the sending
connection only; broadcasts happen after a state was stored.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from unoroom.engine import (
    Action,
    CallUno,
    ChallengeUno,
    Color,
    DrawCard,
    EngineError,
    GameState,
    PlayCard,
    apply_action,
)
from unoroom.relay.room import Room, RelayError, RoomManager

logger = logging.getLogger(__name__)


@dataclass
class ConnectionContext:
    """State tracked per websocket connection."""

    websocket: Any
    connection_id: str
    player_id: Optional[str] = None
    current_room: Optional[Room] = None


async def send_error(ctx: ConnectionContext, message: str) -> None:
    await ctx.websocket.send_json({"type": "error", "message": message})


def parse_action(data: dict, state: GameState, default_player_id: Optional[str] = None) -> Action:
    """Decode a wire action into the engine's action union.

    ``playerId`` falls back to the sending connection's seat. A played card
    is named by ``card.id`` alone and resolved against ``state``; any type or
    color sent alongside it is ignored.

    Raises:
        RelayError: Unknown action type, an unknown card id, or a malformed
            payload.
    """
    if not isinstance(data, dict):
        raise RelayError("Invalid action payload")
    action_type = data.get("type")
    player_id = data.get("playerId") or default_player_id

    try:
        if action_type == "play_card":
            card = state.find_card(str(data["card"]["id"]))
            if card is None:
                raise RelayError(EngineError.CARD_NOT_IN_HAND.message)
            chosen = data.get("chosenColor")
            return PlayCard(
                player_id=player_id,
                card=card,
                chosen_color=Color(chosen) if chosen else None,
            )
        if action_type == "draw_card":
            return DrawCard(player_id=player_id)
        if action_type == "call_uno":
            return CallUno(player_id=player_id)
        if action_type == "challenge_uno":
            return ChallengeUno(
                challenger_id=data.get("challengerId") or default_player_id,
                target_player_id=data["targetPlayerId"],
            )
    except (KeyError, TypeError, ValueError) as e:
        raise RelayError(f"Invalid {action_type} payload: {e}") from e
    raise RelayError("Unknown action type")


def _winner_name(state: GameState) -> str:
    player = state.get_player(state.winner)
    return player.name if player else ""


# ---------------------------------------------------------------------------
# Lobby handlers
# ---------------------------------------------------------------------------

async def handle_join_game(data: dict, ctx: ConnectionContext, *, room_manager: RoomManager, **kw) -> None:
    room_id = data.get("roomId")
    player_name = (data.get("playerName") or "").strip()
    if not room_id or not player_name:
        await send_error(ctx, "roomId and playerName are required")
        return
    # One seat per connection; seat ids come from the connection id
    if ctx.current_room is not None:
        await send_error(ctx, "Already seated; leave the current game first")
        return

    try:
        room = room_manager.get_or_create(room_id)
    except RelayError as e:
        await send_error(ctx, str(e))
        return

    async with room.lock:
        try:
            seat, resumed = room.join(ctx.connection_id, player_name, ctx.websocket)
        except RelayError as e:
            await send_error(ctx, str(e))
            return

        ctx.player_id = seat.id
        ctx.current_room = room
        logger.info(
            "%s %s room (%d players)", player_name, "rejoined" if resumed else "joined",
            len(room.players), extra={"room_id": room_id, "player_id": seat.id},
        )

        if room.state is not None:
            await ctx.websocket.send_json({"type": "game_state", "state": room.state.to_dict()})
        await room.broadcast({"type": "player_joined", "player": seat.to_dict()})


async def handle_start_game(data: dict, ctx: ConnectionContext, *, room_manager: RoomManager, **kw) -> None:
    room = room_manager.get_room(data.get("roomId", ""))
    if room is None:
        await send_error(ctx, "Room not found")
        return

    async with room.lock:
        try:
            state = room.start()
        except RelayError as e:
            await send_error(ctx, str(e))
            return
        logger.info("Game started", extra={"room_id": room.room_id})
        await room.broadcast({"type": "game_started", "state": state.to_dict()})


async def handle_leave_game(data: dict, ctx: ConnectionContext, *, room_manager: RoomManager, **kw) -> None:
    await handle_disconnect(ctx, room_manager=room_manager)


async def handle_disconnect(ctx: ConnectionContext, *, room_manager: RoomManager) -> None:
    room = ctx.current_room
    if room is None or ctx.player_id is None:
        return

    async with room.lock:
        seat = room.get_player(ctx.player_id)
        # A newer connection may already have taken this seat over
        if seat is None or seat.websocket is not ctx.websocket:
            ctx.current_room = None
            return
        room.leave(ctx.player_id)
        logger.info("%s left", seat.name, extra={"room_id": room.room_id, "player_id": seat.id})

        if room.is_empty():
            room_manager.remove_room(room.room_id)
        else:
            await room.broadcast({"type": "player_left", "playerId": seat.id})
            if room.state is not None:
                await room.broadcast({"type": "game_state", "state": room.state.to_dict()})
    ctx.current_room = None


# ---------------------------------------------------------------------------
# Game action handler
# ---------------------------------------------------------------------------

async def handle_game_action(data: dict, ctx: ConnectionContext, *, room_manager: RoomManager, **kw) -> None:
    room = room_manager.get_room(data.get("roomId", ""))
    if room is None:
        await send_error(ctx, "Room not found")
        return

    async with room.lock:
        if room.state is None:
            await send_error(ctx, "Game not started")
            return

        try:
            action = parse_action(data.get("action"), room.state, default_player_id=ctx.player_id)
        except RelayError as e:
            await send_error(ctx, str(e))
            return

        result = apply_action(room.state, action)
        if result.error is not None:
            logger.debug(
                "Rejected %s: %s", type(action).__name__, result.error.value,
                extra={"room_id": room.room_id, "player_id": ctx.player_id},
            )
            await send_error(ctx, result.error.message)
            return

        room.state = result.state
        await room.broadcast({"type": "game_state", "state": result.state.to_dict()})

        if result.state.winner is not None:
            logger.info(
                "Game over, winner %s", _winner_name(result.state),
                extra={"room_id": room.room_id, "player_id": result.state.winner},
            )
            await room.broadcast({
                "type": "game_over",
                "winnerId": result.state.winner,
                "winnerName": _winner_name(result.state),
            })


HANDLERS = {
    "join_game": handle_join_game,
    "start_game": handle_start_game,
    "game_action": handle_game_action,
    "leave_game": handle_leave_game,
}
