"""FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from vetclinic.core.config import settings
from vetclinic.core.exceptions import register_exception_handlers
from vetclinic.core.logging import configure_logging
from vetclinic.modules.appointments.router import router as appointments_router
from vetclinic.modules.billing.router import router as billing_router
from vetclinic.modules.records.router import router as records_router
from vetclinic.modules.reminders.dispatcher import ReminderDispatcher, build_dispatcher
from vetclinic.modules.reminders.router import router as reminders_router
from vetclinic.modules.reminders.tasks import ReminderSweeper
from vetclinic.modules.users.router import router as users_router

logger = logging.getLogger(__name__)


def create_app(dispatcher: ReminderDispatcher | None = None) -> FastAPI:
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Application starting up...")
        sweeper = None
        if settings.reminder_sweep_enabled:
            sweeper = ReminderSweeper(app.state.reminder_dispatcher, settings.reminder_sweep_interval_seconds)
            sweeper.start()
        yield
        if sweeper is not None:
            sweeper.stop()
        logger.info("Application shutting down...")

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.reminder_dispatcher = dispatcher or build_dispatcher()
    register_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(users_router)
    app.include_router(records_router)
    app.include_router(appointments_router)
    app.include_router(billing_router)
    app.include_router(reminders_router)

    return app


app = create_app()
