"""WebSocket endpoint for chat clients.

Clients connect to ``ws://<host>:<port>/`` (or ``/ws``) and exchange one
JSON object per text frame.  The endpoint only moves bytes: every decision
is made by the :class:`~polyglot_chat.core.listener.ConnectionSession` it
opens for the socket.
"""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from polyglot_chat.core.connection import WebSocketConnection
from polyglot_chat.core.listener import ConnectionListener

logger = logging.getLogger(__name__)

WEBSOCKET_PATHS = ("/", "/ws")


def router(listener: ConnectionListener) -> APIRouter:
    """Build the relay router around a connection listener."""
    api = APIRouter()

    async def relay_socket(websocket: WebSocket):
        """Accept a client and pump its frames into a connection session."""
        await websocket.accept()
        session = listener.open(WebSocketConnection(websocket))
        reason = "closed"
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                raw = message.get("text")
                if raw is None:
                    raw = message.get("bytes")
                if raw is None:
                    continue
                await session.handle_frame(raw)
        except WebSocketDisconnect:
            pass
        except Exception:
            logger.exception("Socket error on %s", session.connection.connection_id)
            reason = "error"
        finally:
            await session.close(reason)

    for path in WEBSOCKET_PATHS:
        api.add_api_websocket_route(path, relay_socket)

    return api
