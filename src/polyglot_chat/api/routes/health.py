"""Health and root endpoints.

Provides the root ``/`` endpoint (service identity and version) and the
``/health`` endpoint (liveness check with room and participant counts).
"""

from fastapi import APIRouter

from polyglot_chat import __version__
from polyglot_chat.core.registry import SessionRegistry


def router(registry: SessionRegistry) -> APIRouter:
    """Build the health router with read access to the registry."""
    api = APIRouter()

    @api.get("/")
    async def root():
        """Root endpoint showing service identity and current version."""
        return {"message": "Polyglot Chat relay", "version": __version__}

    @api.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "ok",
            "rooms": registry.room_count,
            "participants": registry.participant_count,
        }

    return api
