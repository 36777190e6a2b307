import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import Settings, get_settings
from app.infrastructure.database import engine, initialize_database
from app.infrastructure.realtime import (
    NotificationPublisher,
    RealtimeRoomRouter,
    RoomConnectionManager,
)
from app.infrastructure.security import decode_access_token
from app.interfaces.api.routes import register_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the schema on start-up and release the engine on shutdown."""

    initialize_database()
    yield
    engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application and its realtime collaborators."""

    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Fresh community API", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    room_router = RealtimeRoomRouter(RoomConnectionManager(), verify_token=decode_access_token)
    app.state.room_router = room_router
    app.state.notification_publisher = NotificationPublisher(room_router)

    register_routes(app)
    return app


app = create_app()
