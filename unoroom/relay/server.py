"""FastAPI app exposing the relay over a websocket."""

import json
import logging
import uuid
from typing import Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from unoroom.config import ServerConfig
from unoroom.relay.handlers import HANDLERS, ConnectionContext, handle_disconnect, send_error
from unoroom.relay.room import RoomManager

logger = logging.getLogger(__name__)


def create_app(config: Optional[ServerConfig] = None, room_manager: Optional[RoomManager] = None) -> FastAPI:
    config = config or ServerConfig.from_env()
    room_manager = room_manager or RoomManager(max_rooms=config.max_rooms)

    app = FastAPI(title="UNO relay")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.client_url],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.state.room_manager = room_manager

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok", "rooms": len(room_manager.rooms)}

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        await websocket.accept()
        ctx = ConnectionContext(websocket=websocket, connection_id=str(uuid.uuid4()))
        logger.debug("Client connected: %s", ctx.connection_id)

        try:
            while True:
                raw = await websocket.receive_text()
                try:
                    data = json.loads(raw)
                except ValueError:
                    await send_error(ctx, "Invalid JSON")
                    continue
                handler = HANDLERS.get(data.get("type")) if isinstance(data, dict) else None
                if handler is None:
                    await send_error(ctx, "Unknown message type")
                    continue
                await handler(data, ctx, room_manager=room_manager)
        except WebSocketDisconnect:
            logger.debug("Client disconnected: %s", ctx.connection_id)
            await handle_disconnect(ctx, room_manager=room_manager)

    return app
