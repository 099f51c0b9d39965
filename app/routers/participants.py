from typing import List

from fastapi import APIRouter, Depends, status

from app.dependencies import caller, get_registry, unwrap
from app.pydantic_models import Participant, ParticipantDraft
from app.services.registry import ParticipantRegistry

router = APIRouter()


@router.post(
    "/participants", response_model=Participant, status_code=status.HTTP_201_CREATED
)
async def register(
    payload: ParticipantDraft, registry: ParticipantRegistry = Depends(get_registry)
):
    return unwrap(await registry.register(payload.name))


@router.get("/participants", response_model=List[Participant])
async def list_participants(registry: ParticipantRegistry = Depends(get_registry)):
    return await registry.list()


@router.post("/status", response_model=Participant)
async def heartbeat(
    user: str = Depends(caller), registry: ParticipantRegistry = Depends(get_registry)
):
    """
    liveness ping; clients call it every few seconds or get swept out of the room
    """
    return unwrap(await registry.heartbeat(user))
