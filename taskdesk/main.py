import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from taskdesk.api.v1.api import api_router
from taskdesk.core.config import Settings, get_settings
from taskdesk.core.errors import TaskDeskError
from taskdesk.core.logging import setup_logging
from taskdesk.db.session import create_db_engine, init_db
from taskdesk.services.reminders import run_reminder_loop

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API around an explicit settings object and its own engine.

    Nothing is built at import time; serve with
    `uvicorn taskdesk.main:create_app --factory`.
    """
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)
    engine = create_db_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("%s %s starting", settings.PROJECT_NAME, settings.VERSION)
        if settings.AUTO_CREATE_SCHEMA:
            init_db(engine)

        reminder_task = None
        if settings.REMINDER_INTERVAL_SECONDS > 0:
            reminder_task = asyncio.create_task(
                run_reminder_loop(engine, settings.REMINDER_INTERVAL_SECONDS)
            )
        try:
            yield
        finally:
            try:
                if reminder_task is not None:
                    reminder_task.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await reminder_task
            finally:
                engine.dispose()
                logger.info("%s stopped", settings.PROJECT_NAME)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine

    # Set up CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, specify actual origins
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TaskDeskError)
    async def service_error_handler(request: Request, exc: TaskDeskError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    app.include_router(api_router, prefix=settings.API_V1_STR)
    return app

