"""Room relay: one authoritative GameState per room, shared over websockets."""

from unoroom.relay.room import RelayError, Room, RoomManager, RoomPlayer

__all__ = ["RelayError", "Room", "RoomManager", "RoomPlayer"]
