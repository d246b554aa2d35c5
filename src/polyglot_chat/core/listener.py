"""
Connection listener: one state machine per transport connection.

The transport (the FastAPI WebSocket endpoint) reports three things: a
connection opened, a frame arrived, the connection went away.  The listener
turns those into typed events and a single :meth:`ConnectionSession.dispatch`
applies them to the registry and router.

=============================================================================
STATE MACHINE
=============================================================================

    CONNECTED ──join accepted──► JOINED
        │                          │
        └──────── disconnect ──────┴──► CLOSED   (terminal)

- ``join`` may arrive again while JOINED; the registry overwrites the entry.
- ``change-language`` and ``message`` act only on the (room, player) slot
  this connection currently holds; before a join, or after another
  connection took the slot over, they are ignored.
- After CLOSED every event is ignored; a second disconnect is a no-op.

Malformed frames are dropped with a warning and never close the connection.
=============================================================================
"""

from __future__ import annotations

import enum
import logging

from polyglot_chat.core.connection import ClientConnection
from polyglot_chat.core.events import (
    ChangeLanguageFrame,
    Disconnect,
    FrameDecodeError,
    JoinFrame,
    MessageFrame,
    RelayEvent,
    decode_frame,
)
from polyglot_chat.core.registry import SessionRegistry
from polyglot_chat.core.router import MessageRouter

logger = logging.getLogger(__name__)


class ConnectionState(enum.Enum):
    """Lifecycle of one transport connection."""

    CONNECTED = "connected"
    JOINED = "joined"
    CLOSED = "closed"


class ConnectionSession:
    """Per-connection dispatcher.  Created by :meth:`ConnectionListener.open`."""

    def __init__(
        self,
        connection: ClientConnection,
        registry: SessionRegistry,
        router: MessageRouter,
    ) -> None:
        self.connection = connection
        self.state = ConnectionState.CONNECTED
        self._registry = registry
        self._router = router

    def __repr__(self) -> str:
        return f"<ConnectionSession {self.connection.connection_id} {self.state.value}>"

    # =========================================================================
    # TRANSPORT ENTRY POINTS
    # =========================================================================

    async def handle_frame(self, raw: str | bytes) -> None:
        """Decode one inbound frame and dispatch it; drop it if malformed."""
        if self.state is ConnectionState.CLOSED:
            return
        try:
            event = decode_frame(raw)
        except FrameDecodeError as exc:
            logger.warning(
                "Dropped malformed frame from %s: %s", self.connection.connection_id, exc
            )
            return
        await self.dispatch(event)

    async def close(self, reason: str = "closed") -> None:
        """Report that the transport closed or failed."""
        await self.dispatch(Disconnect(reason=reason))

    # =========================================================================
    # DISPATCH
    # =========================================================================

    async def dispatch(self, event: RelayEvent) -> None:
        """Apply one event according to the state machine."""
        if self.state is ConnectionState.CLOSED:
            return

        if isinstance(event, Disconnect):
            self._on_disconnect(event)
        elif isinstance(event, JoinFrame):
            await self._on_join(event)
        elif isinstance(event, ChangeLanguageFrame):
            if self._owns(event.room_id, event.player_id):
                self._registry.change_language(event.room_id, event.player_id, event.language)
        elif isinstance(event, MessageFrame):
            if self._owns(event.room_id, event.player_id):
                await self._router.route(event.room_id, event.player_id, event.content)
        else:
            logger.warning("Unhandled event %r", event)

    def _owns(self, room_id: str, player_id: str) -> bool:
        """True when this connection holds the (room, player) slot a frame names."""
        if self.state is not ConnectionState.JOINED:
            logger.debug("Ignored frame from %s before join", self.connection.connection_id)
            return False
        location = self._registry.location_of(self.connection)
        if location != (room_id.strip(), player_id.strip()):
            logger.warning(
                "Ignored frame from %s for %s/%s it does not hold",
                self.connection.connection_id,
                room_id,
                player_id,
            )
            return False
        return True

    async def _on_join(self, event: JoinFrame) -> None:
        participant = self._registry.join(
            event.room_id,
            event.player_id,
            event.name,
            event.language,
            self.connection,
        )
        if participant is None:
            return
        self.state = ConnectionState.JOINED
        # The registry stores trimmed ids; announce to the room it actually used.
        location = self._registry.location_of(self.connection)
        if location is not None:
            await self._router.announce_join(location[0], participant.participant_id)

    def _on_disconnect(self, event: Disconnect) -> None:
        self.connection.mark_closed()
        removed = self._registry.remove(self.connection)
        self.state = ConnectionState.CLOSED
        logger.info(
            "Client %s disconnected (%s)%s",
            self.connection.connection_id,
            event.reason,
            f", removed player {removed.participant_id}" if removed else "",
        )


class ConnectionListener:
    """Creates a :class:`ConnectionSession` for every accepted connection."""

    def __init__(self, registry: SessionRegistry, router: MessageRouter) -> None:
        self.registry = registry
        self.router = router

    def open(self, connection: ClientConnection) -> ConnectionSession:
        logger.info("Client %s connected", connection.connection_id)
        return ConnectionSession(connection, self.registry, self.router)
