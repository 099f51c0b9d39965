import logging
from datetime import datetime
from typing import List, Union

from app.pydantic_models import ErrorKind, Failure, Participant
from app.services.clock import Clock, epoch_ms
from app.services.message_store import MessageStore
from app.services.sanitizer import sanitize
from app.storage import DuplicateKeyError, ParticipantCollection, StorageError

log = logging.getLogger("REGISTRY")

JOIN_TEXT = "entra na sala..."


class ParticipantRegistry:
    """
    who is in the room right now

    uniqueness of names is enforced by the collection (insert_unique), never by a
    find-then-insert here: two registrations can interleave at every await
    """

    def __init__(
        self,
        participants: ParticipantCollection,
        store: MessageStore,
        clock: Clock = datetime.now,
    ) -> None:
        self._participants = participants
        self._store = store
        self._clock = clock

    async def register(self, raw_name) -> Union[Participant, Failure]:
        name = sanitize(raw_name)
        if not name:
            return Failure(kind=ErrorKind.VALIDATION, detail="name must not be empty")
        if name == self._store.broadcast_target:
            return Failure(
                kind=ErrorKind.VALIDATION, detail=f"{name} is reserved for broadcasts"
            )

        participant = Participant(name=name, last_status=epoch_ms(self._clock()))
        try:
            await self._participants.insert_unique(participant)
        except DuplicateKeyError:
            return Failure(kind=ErrorKind.CONFLICT, detail=f"{name} is already in the room")

        # the join notice and the insert go together: undo the insert if the notice fails
        try:
            await self._store.announce(name, JOIN_TEXT)
        except StorageError:
            log.error(f"Join notice for {name} failed, rolling back", exc_info=True)
            await self._participants.delete(name)
            raise

        log.info(f"{name} joined")
        return participant

    async def list(self) -> List[Participant]:
        return await self._participants.find_all()

    async def heartbeat(self, raw_name) -> Union[Participant, Failure]:
        name = sanitize(raw_name)
        updated = await self._participants.touch(name, epoch_ms(self._clock()))
        if updated is None:
            return Failure(
                kind=ErrorKind.NOT_FOUND, detail=f"{name or '<empty>'} is not in the room"
            )
        log.debug(f"Heartbeat from {name}")
        return updated

    async def count(self) -> int:
        return await self._participants.count()

    async def find_stale(self, cutoff: int) -> List[Participant]:
        return await self._participants.find_stale(cutoff)

    async def remove_stale(self, names: List[str], cutoff: int) -> List[Participant]:
        """drop `names` that are still older than `cutoff` at delete time"""
        return await self._participants.delete_stale(names, cutoff)
