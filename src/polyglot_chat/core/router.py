"""
Message router: fan-out with per-recipient translation.

``MessageRouter.route`` takes one chat message and delivers it to every
other participant of the sender's room, translated into each recipient's
language.

Pipeline for one message::

    registry snapshot ──► one task per recipient ──► gather
                              │
                              ├─ same language?  use text verbatim
                              ├─ else            gateway.translate(...)
                              └─ connection.send(ChatDeliveryFrame)

Failure isolation
-----------------
Each recipient task catches its own delivery failure.  The gateway never
raises (it degrades to the original text), so the only failure left is a
connection that closed between the snapshot and the write; that one
delivery is dropped and logged, and the siblings carry on.  ``gather`` is
called with ``return_exceptions=True`` as a backstop so one task can never
cancel another.

Ordering
--------
Recipients are processed concurrently.  Nothing about delivery order across
recipients is guaranteed.

Echo
----
``echo_to_sender`` decides whether the sender also receives its own
message.  The sender's language always equals itself, so an echo is never
translated.
"""

from __future__ import annotations

import asyncio
import logging

from polyglot_chat.core.connection import DeliveryError
from polyglot_chat.core.events import ChatDeliveryFrame, InfoFrame, OutboundFrame
from polyglot_chat.core.registry import Participant, SessionRegistry
from polyglot_chat.translation.gateway import TranslationGateway

logger = logging.getLogger(__name__)


class MessageRouter:
    """Routes chat text from one participant to the rest of the room.

    Attributes:
        _registry:        Source of room membership snapshots.
        _gateway:         Translation gateway, called once per recipient
                          whose language differs from the sender's.
        echo_to_sender:   Also deliver a message back to its sender.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        gateway: TranslationGateway,
        *,
        echo_to_sender: bool = False,
    ) -> None:
        self._registry = registry
        self._gateway = gateway
        self.echo_to_sender = echo_to_sender

    # =========================================================================
    # CHAT
    # =========================================================================

    async def route(self, room_id: str, sender_id: str, text: str) -> int:
        """
        Broadcast ``text`` from ``sender_id`` to the room.

        The sender's language and display name are captured before the first
        suspension point, so a language change that arrives mid-broadcast
        applies to the next message, not this one.

        Returns:
            The number of successful deliveries.  0 when the sender is not
            registered in the room.
        """
        sender = self._registry.lookup(room_id, sender_id)
        if sender is None:
            logger.debug("Dropped message from unknown player %s in room %s", sender_id, room_id)
            return 0

        sender_language = sender.language
        sender_name = sender.display_name
        sender_key = sender.participant_id

        recipients = [
            participant
            for pid, participant in self._registry.participants_of(room_id)
            if self.echo_to_sender or pid != sender_key
        ]
        logger.info(
            "Message from %s in %s to %d recipient(s)", sender_key, room_id, len(recipients)
        )
        if not recipients:
            return 0

        tasks = [
            self._deliver_chat(
                recipient,
                sender_id=sender_key,
                sender_name=sender_name,
                sender_language=sender_language,
                text=text,
            )
            for recipient in recipients
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)
        return self._count_delivered(results)

    async def _deliver_chat(
        self,
        recipient: Participant,
        *,
        sender_id: str,
        sender_name: str,
        sender_language: str,
        text: str,
    ) -> bool:
        """Translate for one recipient and write the frame.  Never raises."""
        target_language = recipient.language
        if target_language == sender_language:
            translated = text
        else:
            try:
                translated = await self._gateway.translate(text, sender_language, target_language)
            except Exception:
                # Gateways should not raise; if one does, relay the original.
                logger.exception("Translation gateway raised for %s", recipient.participant_id)
                translated = text

        frame = ChatDeliveryFrame(
            from_id=sender_id,
            from_name=sender_name,
            original_content=text,
            translated_content=translated,
            original_language=sender_language,
        )
        return await self._send(recipient, frame)

    # =========================================================================
    # NOTICES
    # =========================================================================

    async def announce(self, room_id: str, content: str, *, exclude: str | None = None) -> int:
        """
        Send an ``info`` notice to everyone in the room except ``exclude``.

        Returns:
            The number of successful deliveries.
        """
        frame = InfoFrame(content=content)
        recipients = [
            participant
            for pid, participant in self._registry.participants_of(room_id)
            if pid != exclude
        ]
        if not recipients:
            return 0
        results = await asyncio.gather(
            *(self._send(recipient, frame) for recipient in recipients),
            return_exceptions=True,
        )
        return self._count_delivered(results)

    async def announce_join(self, room_id: str, participant_id: str) -> int:
        """Tell the rest of the room that ``participant_id`` joined."""
        return await self.announce(
            room_id, f"{participant_id} joined the room.", exclude=participant_id
        )

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _send(self, recipient: Participant, frame: OutboundFrame) -> bool:
        try:
            await recipient.connection.send(frame)
        except DeliveryError as exc:
            logger.warning(
                "Dropped %s frame for %s: %s", frame.type, recipient.participant_id, exc
            )
            return False
        return True

    @staticmethod
    def _count_delivered(results: list) -> int:
        delivered = 0
        for result in results:
            if isinstance(result, BaseException):
                logger.error("Delivery task failed", exc_info=result)
            elif result:
                delivered += 1
        return delivered
