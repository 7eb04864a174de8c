import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import hanumant.models  # noqa: F401
from hanumant.core.config import settings
from hanumant.routers import activities as activities_router
from hanumant.routers import attendance as attendance_router
from hanumant.routers import auth as auth_router
from hanumant.routers import chat as chat_router
from hanumant.routers import dashboard as dashboard_router
from hanumant.routers import dues as dues_router
from hanumant.routers import me as me_router
from hanumant.routers import members as members_router
from hanumant.routers import notifications as notifications_router
from hanumant.routers import realtime as realtime_router
from hanumant.routers import settings as settings_router
from hanumant.services.realtime import SnapshotHub

app = FastAPI(title="Shri Hanumant Library API", version="0.1.0")

logger = logging.getLogger(__name__)

app.state.hub = SnapshotHub()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router.router)
app.include_router(members_router.router)
app.include_router(me_router.router)
app.include_router(attendance_router.router)
app.include_router(dues_router.router)
app.include_router(activities_router.router)
app.include_router(chat_router.router)
app.include_router(notifications_router.router)
app.include_router(settings_router.router)
app.include_router(dashboard_router.router)
app.include_router(realtime_router.router)


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.on_event("startup")
def log_startup() -> None:
    logger.info(
        "library_api_started",
        extra={"environment": settings.ENVIRONMENT, "timezone": settings.LIBRARY_TIMEZONE},
    )
