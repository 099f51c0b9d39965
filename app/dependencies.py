from typing import Optional

from fastapi import Header, HTTPException, Request

from app.pydantic_models import ErrorKind, Failure
from app.services.message_store import MessageStore
from app.services.presence_sweeper import PresenceSweeper
from app.services.registry import ParticipantRegistry

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 422,
    ErrorKind.CONFLICT: 409,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.FORBIDDEN: 401,
    ErrorKind.UNKNOWN_SENDER: 422,
}


def get_registry(request: Request) -> ParticipantRegistry:
    return request.app.state.registry


def get_message_store(request: Request) -> MessageStore:
    return request.app.state.message_store


def get_sweeper(request: Request) -> PresenceSweeper:
    return request.app.state.sweeper


def caller(user: Optional[str] = Header(default=None)) -> str:
    """claimed identity from the `User` header, taken at face value"""
    if user is None or not user.strip():
        raise HTTPException(status_code=422, detail="missing User header")
    return user


def unwrap(result):
    """turn a Failure into the matching HTTP error, pass anything else through"""
    if isinstance(result, Failure):
        raise HTTPException(
            status_code=STATUS_BY_KIND[result.kind],
            detail={"error": result.kind.value, "message": result.detail},
        )
    return result
