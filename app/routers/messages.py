from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from app.dependencies import caller, get_message_store, unwrap
from app.pydantic_models import Message, MessageDraft
from app.services.message_store import MessageStore

router = APIRouter()


@router.get("/messages", response_model=List[Message])
async def get_messages(
    limit: Optional[str] = Query(default=None),
    user: str = Depends(caller),
    store: MessageStore = Depends(get_message_store),
):
    """
    messages visible to the caller, newest first

    limit stays a raw string here, the store decides whether it is a positive integer
    """
    return unwrap(await store.list_visible_to(user, limit))


@router.post(
    "/messages", response_model=Message, status_code=status.HTTP_201_CREATED
)
async def post_message(
    payload: MessageDraft,
    user: str = Depends(caller),
    store: MessageStore = Depends(get_message_store),
):
    return unwrap(await store.post(user, payload.to, payload.text, payload.type))


@router.put("/messages/{message_id}", response_model=Message)
async def edit_message(
    message_id: str,
    payload: MessageDraft,
    user: str = Depends(caller),
    store: MessageStore = Depends(get_message_store),
):
    return unwrap(
        await store.edit(message_id, user, payload.to, payload.text, payload.type)
    )


@router.delete("/messages/{message_id}", response_model=Message)
async def delete_message(
    message_id: str,
    user: str = Depends(caller),
    store: MessageStore = Depends(get_message_store),
):
    return unwrap(await store.delete(message_id, user))
