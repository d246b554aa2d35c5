"""
FastAPI server for the chat relay.

This module assembles the relay and exposes it over HTTP/WebSocket:
- the session registry, translation gateway, message router and connection
  listener are built once per application by :func:`create_app`
- the WebSocket endpoint (``/`` and ``/ws``) and health endpoints are
  registered through :func:`polyglot_chat.api.routes.register_routes`
- the translation gateway's HTTP client is opened and closed with the
  application lifespan

The server runs on port 8080 by default and accepts connections from any
host.  If the configured port is taken, :func:`find_available_port` scans a
small range for a free one.
"""

from __future__ import annotations

import logging
import socket
from contextlib import asynccontextmanager

from fastapi import FastAPI

from polyglot_chat import __version__
from polyglot_chat.api.routes import register_routes
from polyglot_chat.config import RelayConfig, config
from polyglot_chat.core.listener import ConnectionListener
from polyglot_chat.core.registry import SessionRegistry
from polyglot_chat.core.router import MessageRouter
from polyglot_chat.translation import TranslationGatewayConfig, build_gateway

logger = logging.getLogger(__name__)

# ============================================================================
# PORT DISCOVERY
# ============================================================================

DEFAULT_PORT = 8080
PORT_RANGE_START = 8080
PORT_RANGE_END = 8179


def is_port_available(port: int, host: str = "0.0.0.0") -> bool:  # nosec B104
    """Return True if a TCP socket can bind ``host:port`` right now."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.bind((host, port))
            return True
    except OSError:
        return False


def find_available_port(
    preferred: int = DEFAULT_PORT,
    host: str = "0.0.0.0",  # nosec B104
    start: int = PORT_RANGE_START,
    end: int = PORT_RANGE_END,
) -> int | None:
    """
    Find a free port, trying ``preferred`` first.

    Returns:
        The preferred port if free, else the first free port in
        ``start..end`` (inclusive), else None.
    """
    if is_port_available(preferred, host):
        return preferred
    for port in range(start, end + 1):
        if port != preferred and is_port_available(port, host):
            return port
    return None


# ============================================================================
# APPLICATION FACTORY
# ============================================================================


def create_app(cfg: RelayConfig | None = None, *, gateway=None) -> FastAPI:
    """
    Build a FastAPI application with its own, empty relay state.

    Args:
        cfg: Configuration to use; defaults to the module-level ``config``.
        gateway: Translation gateway override (tests inject fakes here).
            Defaults to the gateway selected by ``cfg.translation``.

    Returns:
        The application.  ``app.state.listener`` holds the connection
        listener, whose ``registry`` and ``router`` are the live relay.
    """
    cfg = cfg or config
    if gateway is None:
        gateway = build_gateway(TranslationGatewayConfig.from_settings(cfg.translation))

    registry = SessionRegistry()
    router = MessageRouter(registry, gateway, echo_to_sender=cfg.relay.echo_to_sender)
    listener = ConnectionListener(registry, router)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        opener = getattr(gateway, "open", None)
        if opener is not None:
            await opener()
        logger.info("Relay ready (echo_to_sender=%s)", cfg.relay.echo_to_sender)
        try:
            yield
        finally:
            closer = getattr(gateway, "aclose", None)
            if closer is not None:
                await closer()
            logger.info("Relay stopped")

    app = FastAPI(title="Polyglot Chat", version=__version__, lifespan=lifespan)
    app.state.listener = listener
    register_routes(app, listener)
    return app


# ============================================================================
# SERVER STARTUP
# ============================================================================


def start_server(
    host: str | None = None,
    port: int | None = None,
    *,
    auto_discover: bool = True,
    cfg: RelayConfig | None = None,
) -> None:
    """
    Run the relay under uvicorn.

    Args:
        host: Interface to bind; defaults to ``cfg.server.host``.
        port: Port to bind; defaults to ``cfg.server.port``.
        auto_discover: Look for a free port in the range when ``port`` is
            taken.  When False the server binds exactly ``port`` or fails.
        cfg: Configuration to use; defaults to the module-level ``config``.

    Raises:
        OSError: No usable port was found.
    """
    import uvicorn

    cfg = cfg or config
    host = host or cfg.server.host
    port = port or cfg.server.port

    if auto_discover:
        actual = find_available_port(port, host)
        if actual is None:
            raise OSError(f"No available port in {PORT_RANGE_START}-{PORT_RANGE_END}")
        if actual != port:
            logger.warning("Port %d is in use. Using port %d instead.", port, actual)
        port = actual

    logger.info("Starting relay on %s:%d", host, port)
    uvicorn.run(create_app(cfg), host=host, port=port, log_config=None)
