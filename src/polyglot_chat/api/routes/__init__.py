"""API route registration."""

from fastapi import FastAPI

from polyglot_chat.api.routes import health, relay
from polyglot_chat.core.listener import ConnectionListener


def register_routes(app: FastAPI, listener: ConnectionListener) -> None:
    """Register all HTTP and WebSocket routes with the FastAPI app."""
    app.include_router(health.router(listener.registry))
    app.include_router(relay.router(listener))
