import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.routers import health, messages, participants
from app.services.message_store import MessageStore
from app.services.presence_sweeper import PresenceSweeper
from app.services.registry import ParticipantRegistry
from app.storage import MessageCollection, ParticipantCollection, StorageError
from settings import Settings, settings as default_settings

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)

log = logging.getLogger("API")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await app.state.sweeper.start()
    yield
    await app.state.sweeper.stop()


def create_app(
    settings: Optional[Settings] = None,
    participants_collection: Optional[ParticipantCollection] = None,
    messages_collection: Optional[MessageCollection] = None,
) -> FastAPI:
    """
    wire the collections, services and routers together

    nothing here is global: every app owns its own collections and sweeper, tests build as
    many as they like
    """
    settings = settings or default_settings
    participants_collection = participants_collection or ParticipantCollection()
    messages_collection = messages_collection or MessageCollection()

    store = MessageStore(
        messages_collection,
        participants_collection,
        broadcast_target=settings.broadcast_target,
        default_limit=settings.default_history_limit,
    )
    registry = ParticipantRegistry(participants_collection, store)
    sweeper = PresenceSweeper(
        registry,
        store,
        absence_timeout_secs=settings.absence_timeout_secs,
        interval_secs=settings.sweep_interval_secs,
    )

    app = FastAPI(
        title="Chat Room",
        description=(
            "Single chat room: join with a name, post and read messages, "
            "keep sending heartbeats or get dropped."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.registry = registry
    app.state.message_store = store
    app.state.sweeper = sweeper

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        log.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"error": "storage_error", "message": "storage unavailable"},
        )

    app.include_router(health.router)
    app.include_router(participants.router)
    app.include_router(messages.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=default_settings.host, port=default_settings.port)
