"""
Session registry: which participants are in which room.

The registry is the only owner of room state.  It keeps two indexes that are
updated together under one lock:

    rooms:      room_id -> {participant_id -> Participant}
    locations:  connection -> (room_id, participant_id)

The second index makes disconnect cleanup a single lookup and enforces that
a connection owns at most one participant entry at a time.

=============================================================================
INVARIANTS
=============================================================================

- A participant id is unique within its room, not globally.
- A connection maps to at most one (room, participant) entry.
- A room with no participants is not in ``rooms`` (removed together with
  its last participant, under the same lock acquisition).
- A stored language is never empty.

=============================================================================
CONCURRENCY
=============================================================================

Every method takes ``self._lock`` for the whole of its read or mutation and
never awaits while holding it, so callers on the event loop (and any worker
thread) see either the state before an operation or the state after it.
``participants_of`` returns a copied list: a broadcast iterating it is not
affected by joins or disconnects that happen while translations are in
flight.

=============================================================================
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from polyglot_chat.core.connection import ClientConnection

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Participant:
    """
    One connected client inside one room.

    ``language`` is the only field mutated after creation (by
    ``change_language``).  The connection is owned by this entry and never
    shared with another participant.

    Attributes:
        participant_id: Id supplied by the client, unique within the room.
        display_name: Name shown to others; the id when none was given.
        language: Preferred language code, never empty.
        connection: Outbound handle for frames addressed to this participant.
    """

    participant_id: str
    display_name: str
    language: str
    connection: ClientConnection


def _clean(value: str | None) -> str:
    return value.strip() if isinstance(value, str) else ""


class SessionRegistry:
    """In-memory room → participant registry with a reverse connection index."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rooms: dict[str, dict[str, Participant]] = {}
        self._locations: dict[ClientConnection, tuple[str, str]] = {}

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def join(
        self,
        room_id: str,
        participant_id: str,
        display_name: str | None,
        language: str,
        connection: ClientConnection,
    ) -> Participant | None:
        """
        Insert or overwrite a participant bound to ``connection``.

        Room id, participant id and language are trimmed; if any of them is
        empty the join is dropped and nothing changes.

        Overwrite rules:
        - If another connection held this (room, participant) slot, that
          connection loses its entry.
        - If ``connection`` already held a different entry, that entry is
          removed first (deleting its room if it empties).

        Returns:
            The stored Participant, or None if the join was rejected.
        """
        room_id = _clean(room_id)
        participant_id = _clean(participant_id)
        language = _clean(language)
        if not room_id or not participant_id or not language:
            logger.debug(
                "Rejected join (room=%r, player=%r, language=%r)",
                room_id,
                participant_id,
                language,
            )
            return None

        name = _clean(display_name) or participant_id
        participant = Participant(
            participant_id=participant_id,
            display_name=name,
            language=language,
            connection=connection,
        )

        with self._lock:
            previous = self._locations.get(connection)
            if previous is not None and previous != (room_id, participant_id):
                self._delete_entry(*previous)

            room = self._rooms.setdefault(room_id, {})
            displaced = room.get(participant_id)
            if displaced is not None and displaced.connection is not connection:
                self._locations.pop(displaced.connection, None)
                logger.info(
                    "Player %s in room %s re-joined from a new connection",
                    participant_id,
                    room_id,
                )

            room[participant_id] = participant
            self._locations[connection] = (room_id, participant_id)

        logger.info("Player %s joined room %s [%s]", participant_id, room_id, language)
        return participant

    def change_language(self, room_id: str, participant_id: str, new_language: str) -> bool:
        """
        Overwrite a participant's language preference.

        Silently ignored (returns False) when the room or participant does
        not exist or the new language is empty after trimming.
        """
        new_language = _clean(new_language)
        if not new_language:
            return False

        with self._lock:
            participant = self._rooms.get(_clean(room_id), {}).get(_clean(participant_id))
            if participant is None:
                logger.debug(
                    "Ignored language change for unknown player %s in room %s",
                    participant_id,
                    room_id,
                )
                return False
            old_language = participant.language
            participant.language = new_language

        logger.info(
            "Player %s changed language from %s to %s",
            participant.participant_id,
            old_language,
            new_language,
        )
        return True

    def remove(self, connection: ClientConnection) -> Participant | None:
        """
        Remove whatever entry ``connection`` owns.

        Deletes the room too when it becomes empty.  Calling this for a
        connection that owns nothing (never joined, or already removed) is a
        no-op.

        Returns:
            The removed Participant, or None.
        """
        with self._lock:
            location = self._locations.get(connection)
            if location is None:
                return None
            return self._delete_entry(*location)

    def _delete_entry(self, room_id: str, participant_id: str) -> Participant | None:
        """Delete one entry from both indexes.  Caller holds the lock."""
        room = self._rooms.get(room_id)
        if room is None:
            return None
        participant = room.pop(participant_id, None)
        if participant is None:
            return None
        self._locations.pop(participant.connection, None)
        logger.info("Player %s removed from room %s", participant_id, room_id)

        if not room:
            del self._rooms[room_id]
            logger.info("Room %s deleted (empty)", room_id)
        return participant

    # =========================================================================
    # READS
    # =========================================================================

    def lookup(self, room_id: str, participant_id: str) -> Participant | None:
        with self._lock:
            return self._rooms.get(_clean(room_id), {}).get(_clean(participant_id))

    def participants_of(self, room_id: str) -> list[tuple[str, Participant]]:
        """Snapshot of a room's members as ``(participant_id, Participant)``."""
        with self._lock:
            return list(self._rooms.get(_clean(room_id), {}).items())

    def location_of(self, connection: ClientConnection) -> tuple[str, str] | None:
        """The (room_id, participant_id) owned by ``connection``, if any."""
        with self._lock:
            return self._locations.get(connection)

    def rooms(self) -> list[str]:
        with self._lock:
            return list(self._rooms)

    def snapshot(self) -> dict[str, dict[str, tuple[str, str]]]:
        """
        Plain-data copy of the registry.

        Shape: ``{room_id: {participant_id: (display_name, language)}}``.
        Two snapshots compare equal exactly when membership, names and
        languages are the same.
        """
        with self._lock:
            return {
                room_id: {
                    pid: (p.display_name, p.language) for pid, p in members.items()
                }
                for room_id, members in self._rooms.items()
            }

    @property
    def room_count(self) -> int:
        with self._lock:
            return len(self._rooms)

    @property
    def participant_count(self) -> int:
        with self._lock:
            return len(self._locations)
