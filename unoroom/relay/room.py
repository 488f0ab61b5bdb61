"""
Room management for multiplayer UNO games.

A Room holds the seats, the websocket of each seat and the room's single
authoritative GameState. Every read-compute-store-broadcast cycle on that
state runs under the room's lock, so actions are applied one at a time in
arrival order.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from unoroom.config import DEFAULT_GAME_CONFIG, GameConfig
from unoroom.engine import GameState, Player, init_game, set_player_connected

logger = logging.getLogger(__name__)


class RelayError(Exception):
    """A request the relay refuses; reported only to the sender."""


@dataclass
class RoomPlayer:
    """
    A seat in a room (lobby-level representation).

    Attributes:
        id: Stable seat id, also the player id inside GameState.
        name: Display name. Joining again with the same name resumes this seat.
        websocket: Current connection, None while disconnected.
    """

    id: str
    name: str
    websocket: Optional[Any] = None

    @property
    def connected(self) -> bool:
        return self.websocket is not None

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "isConnected": self.connected}


@dataclass
class Room:
    """
    A game room with one GameState once the game starts.

    Attributes:
        room_id: Code clients use to join.
        players: Seats in join order, which becomes turn order.
        state: Current GameState, None until start_game.
        lock: Serializes every state transition in this room.
    """

    room_id: str
    players: list[RoomPlayer] = field(default_factory=list)
    state: Optional[GameState] = None
    config: GameConfig = DEFAULT_GAME_CONFIG
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    @property
    def started(self) -> bool:
        return self.state is not None

    def get_player(self, player_id: str) -> Optional[RoomPlayer]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def find_by_name(self, name: str) -> Optional[RoomPlayer]:
        for p in self.players:
            if p.name == name:
                return p
        return None

    def join(self, player_id: str, name: str, websocket: Any) -> tuple[RoomPlayer, bool]:
        """
        Seat a player, or reattach a returning one by name.

        Returns:
            (seat, resumed) where resumed is True for a returning player.

        Raises:
            RelayError: The room is full, the id already holds another
                seat, or the game already started and the name holds no seat.
        """
        existing = self.find_by_name(name)
        if existing:
            existing.websocket = websocket
            if self.state is not None:
                self.state = set_player_connected(self.state, existing.id, True)
            return existing, True

        if self.started:
            raise RelayError("Game already started")
        if self.get_player(player_id) is not None:
            raise RelayError("Already seated in this room")
        if len(self.players) >= self.config.max_players:
            raise RelayError(f"Room is full ({self.config.max_players} players max)")

        seat = RoomPlayer(id=player_id, name=name, websocket=websocket)
        self.players.append(seat)
        return seat, False

    def leave(self, player_id: str) -> Optional[RoomPlayer]:
        """
        Drop a connection from its seat.

        Before the game starts the seat is removed. During a game the seat is
        kept (the hand stays in play) and only marked disconnected.
        """
        seat = self.get_player(player_id)
        if seat is None:
            return None
        if self.state is None:
            self.players.remove(seat)
        else:
            seat.websocket = None
            self.state = set_player_connected(self.state, player_id, False)
        return seat

    def start(self) -> GameState:
        """Deal a new game for the seated players.

        Raises:
            RelayError: Already started, too few seats, or the engine
                refused the table.
        """
        if self.started:
            raise RelayError("Game already started")
        if len(self.players) < self.config.min_players:
            raise RelayError(f"Need at least {self.config.min_players} players to start")
        players = [Player(id=p.id, name=p.name, connected=p.connected) for p in self.players]
        try:
            self.state = init_game(players, config=self.config)
        except ValueError as e:
            raise RelayError(str(e)) from e
        return self.state

    def is_empty(self) -> bool:
        return not any(p.connected for p in self.players)

    async def broadcast(self, message: dict, exclude: Optional[str] = None) -> None:
        """Send a message to every connected seat."""
        for player in self.players:
            if player.id != exclude and player.websocket is not None:
                try:
                    await player.websocket.send_json(message)
                except Exception as e:
                    logger.warning(
                        "Broadcast to %s failed: %s", player.name, e,
                        extra={"room_id": self.room_id, "player_id": player.id},
                    )

    async def send_to(self, player_id: str, message: dict) -> None:
        player = self.get_player(player_id)
        if player and player.websocket is not None:
            await player.websocket.send_json(message)


class RoomManager:
    """All active rooms. Rooms are created on first join."""

    def __init__(self, config: GameConfig = DEFAULT_GAME_CONFIG, max_rooms: int = 1000) -> None:
        self.rooms: dict[str, Room] = {}
        self.config = config
        self.max_rooms = max_rooms

    def get_room(self, room_id: str) -> Optional[Room]:
        return self.rooms.get(room_id)

    def get_or_create(self, room_id: str) -> Room:
        room = self.rooms.get(room_id)
        if room is None:
            if len(self.rooms) >= self.max_rooms:
                raise RelayError("Server is at its room limit")
            room = Room(room_id=room_id, config=self.config)
            self.rooms[room_id] = room
            logger.info("Room created", extra={"room_id": room_id})
        return room

    def remove_room(self, room_id: str) -> None:
        if self.rooms.pop(room_id, None) is not None:
            logger.info("Room removed", extra={"room_id": room_id})
