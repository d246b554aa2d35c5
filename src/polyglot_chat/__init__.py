"""Polyglot Chat: a real-time relay that translates every message.

Participants join named rooms over a WebSocket, each with a preferred
language.  A message sent by one participant is translated once per
recipient into that recipient's language and delivered over their
connection.  The whole relay is a single process holding its rooms in
memory.

Version Management
------------------
``__version__`` is read from the installed package metadata at import time.
The single source of truth is the ``version`` field in ``pyproject.toml``.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# ---------------------------------------------------------------------------
# Package version, read from pyproject.toml via importlib.metadata.
#
# If the package is imported without being installed we fall back to the
# value below so the application can still start.
# ---------------------------------------------------------------------------
try:
    __version__: str = version("polyglot-chat")
except PackageNotFoundError:
    __version__ = "0.1.0"
