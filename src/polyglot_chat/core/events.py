"""
Relay events and the WebSocket wire protocol.

Every WebSocket text frame carries exactly one JSON object with a ``type``
discriminant.  Field names on the wire are camelCase (``roomId``,
``playerId`` ...); the models expose them as snake_case attributes.

Events are organized into three categories:
1. Inbound frames: sent FROM the client TO the relay (pydantic models)
2. Transport events: raised by the transport itself (``Disconnect``)
3. Outbound frames: sent FROM the relay TO the client (pydantic models)

Inbound frames are decoded with :func:`decode_frame`, which raises
:class:`FrameDecodeError` for anything that is not one of the known frames.
Extra fields are ignored.

Together, inbound frames and ``Disconnect`` form the closed set of events a
connection session dispatches on (``RelayEvent``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    """Shared config: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


# ============================================================================
# INBOUND FRAMES (Client → Relay)
# ============================================================================


class JoinFrame(_WireModel):
    """
    Register the sending connection as a participant of a room.

    Attributes:
        room_id: Room to join; created on first join
        player_id: Participant id, unique within the room
        name: Optional display name (defaults to player_id)
        language: Preferred language code, e.g. "en" or "pt-BR"
    """

    type: Literal["join"]
    room_id: str
    player_id: str
    name: str | None = None
    language: str


class ChangeLanguageFrame(_WireModel):
    """Change the preferred language of an existing participant."""

    type: Literal["change-language"]
    room_id: str
    player_id: str
    language: str


class MessageFrame(_WireModel):
    """Chat text to broadcast to the rest of the room."""

    type: Literal["message"]
    room_id: str
    player_id: str
    content: str


InboundFrame = Annotated[
    JoinFrame | ChangeLanguageFrame | MessageFrame,
    Field(discriminator="type"),
]

_inbound_adapter: TypeAdapter[JoinFrame | ChangeLanguageFrame | MessageFrame] = TypeAdapter(
    InboundFrame
)


class FrameDecodeError(ValueError):
    """Raised when an inbound frame is not a valid protocol message."""


def decode_frame(raw: str | bytes) -> JoinFrame | ChangeLanguageFrame | MessageFrame:
    """
    Decode one inbound frame.

    Args:
        raw: The WebSocket text (or binary) payload

    Returns:
        The typed frame selected by its ``type`` field

    Raises:
        FrameDecodeError: Bad JSON, unknown ``type``, or a missing/invalid field
    """
    try:
        return _inbound_adapter.validate_json(raw)
    except ValidationError as exc:
        # Keep the diagnostic short; the full error lists every field.
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ())) or "<frame>"
        raise FrameDecodeError(f"{location}: {first.get('msg', 'invalid frame')}") from exc


# ============================================================================
# TRANSPORT EVENTS
# ============================================================================


@dataclass(frozen=True)
class Disconnect:
    """The transport closed or failed.  ``reason`` is for logs only."""

    reason: str = "closed"


RelayEvent = JoinFrame | ChangeLanguageFrame | MessageFrame | Disconnect


# ============================================================================
# OUTBOUND FRAMES (Relay → Client)
# ============================================================================


class ChatDeliveryFrame(_WireModel):
    """
    One translated chat message delivered to one recipient.

    Attributes:
        from_id: Sender's participant id
        from_name: Sender's display name
        original_content: Text exactly as the sender typed it
        translated_content: Text in the recipient's language (or the
            original text when no translation was needed or possible)
        original_language: Sender's language at the time of sending
    """

    type: Literal["message"] = "message"
    from_id: str
    from_name: str
    original_content: str
    translated_content: str
    original_language: str


class InfoFrame(_WireModel):
    """A system notice, e.g. a join announcement."""

    type: Literal["info"] = "info"
    content: str


OutboundFrame = ChatDeliveryFrame | InfoFrame


def encode_frame(frame: OutboundFrame) -> str:
    """Serialize an outbound frame with its camelCase wire names."""
    return frame.model_dump_json(by_alias=True)
