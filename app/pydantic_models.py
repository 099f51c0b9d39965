from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field, PositiveInt


class MessageType(str, Enum):
    MESSAGE = "message"
    PRIVATE_MESSAGE = "private_message"
    STATUS = "status"


# types everyone in the room can read, regardless of `to`
PUBLIC_TYPES = frozenset({MessageType.MESSAGE, MessageType.STATUS})


class Participant(BaseModel):
    name: str = Field(..., min_length=1)
    last_status: int = Field(
        ..., ge=0, serialization_alias="lastStatus"
    )  # ms since epoch


class Message(BaseModel):
    id: str
    from_: str = Field(..., min_length=1, serialization_alias="from")
    to: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)
    type: MessageType
    time: str  # HH:MM:SS, always server-assigned


class MessageIn(BaseModel):
    """
    what a client may write into a message, checked after sanitizing

    status messages are system generated, so they are not accepted here
    """

    to: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)
    type: Literal["message", "private_message"]


class MessageDraft(BaseModel):
    """
    raw request body for POST/PUT /messages

    everything is optional on purpose: the store sanitizes and then validates with MessageIn,
    so a bad body comes back as a VALIDATION failure instead of a framework error
    """

    to: Optional[str] = None
    text: Optional[str] = None
    type: Optional[str] = None


class ParticipantDraft(BaseModel):
    name: Optional[str] = None


class HistoryQuery(BaseModel):
    limit: Optional[PositiveInt] = None


class ErrorKind(str, Enum):
    VALIDATION = "validation_error"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    UNKNOWN_SENDER = "unknown_sender"


class Failure(BaseModel):
    """
    expected, caller-side outcome of an operation; returned, never raised
    """

    kind: ErrorKind
    detail: str


class HealthResponse(BaseModel):
    ok: bool
    participant_count: int
    message_count: int
    sweeper_running: bool
    absence_timeout_secs: float
    sweep_interval_secs: float
