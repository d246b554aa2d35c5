"""Outbound connection handles.

The registry stores one ``ClientConnection`` per participant and the router
writes frames to it.  Connections are compared and hashed by identity, which
is what the registry's reverse index (connection → room, participant)
relies on.

``WebSocketConnection`` adapts a Starlette/FastAPI ``WebSocket``.  Tests use
their own subclass that records frames instead of sending them.
"""

from __future__ import annotations

import logging
import uuid

from starlette.websockets import WebSocket, WebSocketState

from polyglot_chat.core.events import OutboundFrame, encode_frame

logger = logging.getLogger(__name__)


class DeliveryError(Exception):
    """Raised when a frame cannot be written to a connection."""


class ClientConnection:
    """Base class for a writable client connection.

    Subclasses implement :meth:`_send_text`.  Once :meth:`mark_closed` has
    been called every :meth:`send` raises :class:`DeliveryError` without
    touching the transport.

    Attributes:
        connection_id: Short random id used in log lines.
    """

    def __init__(self) -> None:
        self.connection_id = uuid.uuid4().hex[:8]
        self._closed = False

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<{type(self).__name__} {self.connection_id} {state}>"

    @property
    def closed(self) -> bool:
        return self._closed

    def mark_closed(self) -> None:
        self._closed = True

    async def send(self, frame: OutboundFrame) -> None:
        """Encode and write one frame.

        Raises:
            DeliveryError: The connection is closed or the write failed.
        """
        if self._closed:
            raise DeliveryError(f"connection {self.connection_id} is closed")
        try:
            await self._send_text(encode_frame(frame))
        except DeliveryError:
            raise
        except Exception as exc:
            raise DeliveryError(f"write to {self.connection_id} failed: {exc}") from exc

    async def _send_text(self, text: str) -> None:
        raise NotImplementedError


class WebSocketConnection(ClientConnection):
    """A ``ClientConnection`` backed by a Starlette WebSocket."""

    def __init__(self, websocket: WebSocket) -> None:
        super().__init__()
        self._websocket = websocket

    async def _send_text(self, text: str) -> None:
        if self._websocket.application_state != WebSocketState.CONNECTED:
            raise DeliveryError(f"connection {self.connection_id} is not open")
        await self._websocket.send_text(text)
