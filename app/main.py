import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.events.router import router as events_router
from app.api.v1.mycsd.router import router as mycsd_router
from app.api.v1.notifications.router import router as notifications_router
from app.api.v1.reports.router import router as reports_router
from app.core.config import settings


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title="MyCSD Backend")

    # CORS: allow the Next.js frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(mycsd_router)
    app.include_router(events_router)
    app.include_router(reports_router)
    app.include_router(notifications_router)

    return app


app = create_app()
