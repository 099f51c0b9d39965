import logging
import uuid
from datetime import datetime
from typing import List, Optional, Union

from pydantic import ValidationError

from app.pydantic_models import (
    PUBLIC_TYPES,
    ErrorKind,
    Failure,
    HistoryQuery,
    Message,
    MessageIn,
    MessageType,
)
from app.services.clock import Clock, wall_time
from app.services.sanitizer import sanitize
from app.storage import MessageCollection, ParticipantCollection

log = logging.getLogger("MESSAGE_STORE")


def _validation_failure(e: ValidationError) -> Failure:
    fields = ", ".join(".".join(str(p) for p in err["loc"]) or "body" for err in e.errors())
    return Failure(kind=ErrorKind.VALIDATION, detail=f"invalid fields: {fields}")


class MessageStore:
    """
    owns the message log, enforces who sees what and who may change what

    visibility: `message` and `status` are public, `private_message` is shown only to its
    sender and its addressee. Broadcast is decided by type alone; a private message sent to the
    broadcast target is still private.
    """

    def __init__(
        self,
        messages: MessageCollection,
        participants: ParticipantCollection,
        broadcast_target: str = "Todos",
        clock: Clock = datetime.now,
        default_limit: Optional[int] = None,
    ) -> None:
        self._messages = messages
        self._participants = participants
        self.broadcast_target = broadcast_target
        self._clock = clock
        self._default_limit = default_limit

    @staticmethod
    def _clean(to, text, type_) -> Union[MessageIn, Failure]:
        try:
            return MessageIn(to=sanitize(to), text=sanitize(text), type=sanitize(type_))
        except ValidationError as e:
            return _validation_failure(e)

    def status_message(self, name: str, text: str) -> Message:
        """build a join/leave notice; the caller decides when to write it"""
        return Message(
            id=uuid.uuid4().hex,
            from_=name,
            to=self.broadcast_target,
            text=text,
            type=MessageType.STATUS,
            time=wall_time(self._clock()),
        )

    async def announce(self, name: str, text: str) -> Message:
        msg = self.status_message(name, text)
        await self._messages.insert(msg)
        return msg

    async def announce_many(self, msgs: List[Message]) -> None:
        await self._messages.insert_many(msgs)

    async def post(self, from_, to, text, type_) -> Union[Message, Failure]:
        cleaned = self._clean(to, text, type_)
        if isinstance(cleaned, Failure):
            return cleaned

        sender = sanitize(from_)
        if not sender or await self._participants.find_one(sender) is None:
            return Failure(
                kind=ErrorKind.UNKNOWN_SENDER,
                detail=f"{sender or '<empty>'} is not in the room",
            )

        msg = Message(
            id=uuid.uuid4().hex,
            from_=sender,
            to=cleaned.to,
            text=cleaned.text,
            type=MessageType(cleaned.type),
            time=wall_time(self._clock()),
        )
        await self._messages.insert(msg)
        log.debug(f"Posted id={msg.id} type={msg.type.value} from={msg.from_}")
        return msg

    async def list_visible_to(self, user, limit=None) -> Union[List[Message], Failure]:
        """
        messages `user` may read, most recent first

        `limit` may be an int or its string form (it usually comes from a query string) and has
        to be positive when given
        """
        try:
            query = HistoryQuery(limit=limit)
        except ValidationError as e:
            return _validation_failure(e)

        reader = sanitize(user)
        if not reader:
            return Failure(kind=ErrorKind.VALIDATION, detail="missing user")

        visible = await self._messages.find_visible(reader, PUBLIC_TYPES)
        visible.reverse()

        effective = query.limit or self._default_limit
        if effective is not None:
            visible = visible[:effective]
        return visible

    async def _authorize(self, msg_id: str, requester) -> Union[Message, Failure]:
        msg = await self._messages.find_by_id(msg_id)
        if msg is None:
            return Failure(kind=ErrorKind.NOT_FOUND, detail=f"no message with id {msg_id}")
        if msg.from_ != sanitize(requester):
            return Failure(
                kind=ErrorKind.FORBIDDEN, detail="only the author may change a message"
            )
        return msg

    async def delete(self, msg_id: str, requester) -> Union[Message, Failure]:
        found = await self._authorize(msg_id, requester)
        if isinstance(found, Failure):
            return found

        if not await self._messages.delete_by_id(msg_id):
            # someone else deleted it after our lookup
            return Failure(kind=ErrorKind.NOT_FOUND, detail=f"no message with id {msg_id}")
        log.debug(f"Deleted id={msg_id} by {found.from_}")
        return found

    async def edit(self, msg_id: str, requester, to, text, type_) -> Union[Message, Failure]:
        found = await self._authorize(msg_id, requester)
        if isinstance(found, Failure):
            return found

        cleaned = self._clean(to, text, type_)
        if isinstance(cleaned, Failure):
            return cleaned

        updated = await self._messages.update_by_id(
            msg_id,
            to=cleaned.to,
            text=cleaned.text,
            type=MessageType(cleaned.type),
            time=wall_time(self._clock()),
        )
        if updated is None:
            return Failure(kind=ErrorKind.NOT_FOUND, detail=f"no message with id {msg_id}")
        log.debug(f"Edited id={msg_id} by {updated.from_}")
        return updated

    async def count(self) -> int:
        return await self._messages.count()
