"""Relay core: registry, router, connection listener and events.

Nothing in this package knows about FastAPI; the transport is reached only
through :class:`~polyglot_chat.core.connection.ClientConnection`.
"""

from polyglot_chat.core.connection import ClientConnection, DeliveryError, WebSocketConnection
from polyglot_chat.core.listener import ConnectionListener, ConnectionSession, ConnectionState
from polyglot_chat.core.registry import Participant, SessionRegistry
from polyglot_chat.core.router import MessageRouter

__all__ = [
    "ClientConnection",
    "ConnectionListener",
    "ConnectionSession",
    "ConnectionState",
    "DeliveryError",
    "MessageRouter",
    "Participant",
    "SessionRegistry",
    "WebSocketConnection",
]
