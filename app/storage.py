import asyncio
from typing import Dict, Iterable, List, Optional

from app.pydantic_models import Message, MessageType, Participant


class StorageError(Exception):
    """the persistence layer failed; the only fault that propagates out of the services"""


class DuplicateKeyError(StorageError):
    def __init__(self, key: str) -> None:
        super().__init__(f"duplicate key: {key!r}")
        self.key = key


class ParticipantCollection:
    """
    participants keyed by name, unique index on the name

    explicit Lock is provided, because between the yield and writing to some memory, another
    coroutine can work with the data, e.g. two registrations of the same name:
        exists = await find_one(name)
        *another coroutine inserts name*
        await insert(name)
    so the uniqueness check lives here, inside the lock, not in the caller
    """

    def __init__(self) -> None:
        self._by_name: Dict[str, Participant] = {}
        self._lock = asyncio.Lock()

    async def insert_unique(self, participant: Participant) -> None:
        async with self._lock:
            if participant.name in self._by_name:
                raise DuplicateKeyError(participant.name)
            self._by_name[participant.name] = participant

    async def find_one(self, name: str) -> Optional[Participant]:
        async with self._lock:
            return self._by_name.get(name)

    async def find_all(self) -> List[Participant]:
        async with self._lock:
            # dicts keep insertion order
            return list(self._by_name.values())

    async def touch(self, name: str, last_status: int) -> Optional[Participant]:
        async with self._lock:
            current = self._by_name.get(name)
            if current is None:
                return None
            updated = current.model_copy(update={"last_status": last_status})
            self._by_name[name] = updated
            return updated

    async def delete(self, name: str) -> bool:
        async with self._lock:
            return self._by_name.pop(name, None) is not None

    async def find_stale(self, cutoff: int) -> List[Participant]:
        async with self._lock:
            return [p for p in self._by_name.values() if p.last_status < cutoff]

    async def delete_stale(self, names: Iterable[str], cutoff: int) -> List[Participant]:
        """
        bulk delete, conditioned on last_status at delete time (not on what the caller read)

        a heartbeat landing between find_stale and here keeps the participant alive
        """
        removed = []
        async with self._lock:
            for name in names:
                current = self._by_name.get(name)
                if current is not None and current.last_status < cutoff:
                    removed.append(self._by_name.pop(name))
        return removed

    async def count(self) -> int:
        async with self._lock:
            return len(self._by_name)


class MessageCollection:
    """
    append-only log of messages keyed by id, in insertion order
    """

    def __init__(self) -> None:
        self._messages: Dict[str, Message] = {}
        self._lock = asyncio.Lock()

    async def insert(self, msg: Message) -> None:
        async with self._lock:
            if msg.id in self._messages:
                raise DuplicateKeyError(msg.id)
            self._messages[msg.id] = msg

    async def insert_many(self, msgs: List[Message]) -> None:
        async with self._lock:
            for msg in msgs:
                if msg.id in self._messages:
                    raise DuplicateKeyError(msg.id)
            for msg in msgs:
                self._messages[msg.id] = msg

    async def find_by_id(self, msg_id: str) -> Optional[Message]:
        async with self._lock:
            return self._messages.get(msg_id)

    async def update_by_id(self, msg_id: str, **fields) -> Optional[Message]:
        """replace fields in place, keeping the position in the log; None if the id is gone"""
        async with self._lock:
            current = self._messages.get(msg_id)
            if current is None:
                return None
            updated = current.model_copy(update=fields)
            self._messages[msg_id] = updated
            return updated

    async def delete_by_id(self, msg_id: str) -> bool:
        async with self._lock:
            return self._messages.pop(msg_id, None) is not None

    async def find_visible(
        self, user: str, public_types: Iterable[MessageType]
    ) -> List[Message]:
        public = frozenset(public_types)
        async with self._lock:
            return [
                m
                for m in self._messages.values()
                if m.type in public or m.to == user or m.from_ == user
            ]

    async def count(self) -> int:
        async with self._lock:
            return len(self._messages)
