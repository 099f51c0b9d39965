from fastapi import APIRouter, Depends, Request

from app.dependencies import get_message_store, get_registry, get_sweeper
from app.pydantic_models import HealthResponse
from app.services.message_store import MessageStore
from app.services.presence_sweeper import PresenceSweeper
from app.services.registry import ParticipantRegistry

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(
    request: Request,
    registry: ParticipantRegistry = Depends(get_registry),
    store: MessageStore = Depends(get_message_store),
    sweeper: PresenceSweeper = Depends(get_sweeper),
):
    settings = request.app.state.settings
    return HealthResponse(
        ok=True,
        participant_count=await registry.count(),
        message_count=await store.count(),
        sweeper_running=sweeper.running,
        absence_timeout_secs=settings.absence_timeout_secs,
        sweep_interval_secs=settings.sweep_interval_secs,
    )
