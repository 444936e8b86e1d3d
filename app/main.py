import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from app.settings import Settings, get_settings
from app.logging import configure_logging
from app.error_handlers import attach_error_handlers
from app.container import Services, build_services
from api.router import api_router

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, services: Optional[Services] = None) -> FastAPI:
    settings = settings or (services.settings if services else get_settings())
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        svc = services or build_services(settings)
        app.state.services = svc
        app.state.worker_task = None
        stop = asyncio.Event()
        if settings.WORKER_ENABLED:
            app.state.worker_task = asyncio.create_task(svc.worker.run(stop))
        try:
            yield
        finally:
            stop.set()
            task = app.state.worker_task
            if task is not None:
                # an in-flight job is allowed to finish
                await task
            if services is None:
                svc.engine.dispose()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    attach_error_handlers(app)
    app.include_router(api_router)
    return app


app = create_app()
