"""FastAPI transport for the relay (WebSocket endpoint and health checks)."""
