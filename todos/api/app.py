from contextlib import asynccontextmanager
from functools import partial
from typing import Callable
import logging

from fastapi import FastAPI

from todos.api.errors import install_error_handlers
from todos.api.routes import router as tasks_router
from todos.config import Settings, build_store
from todos.ports.task_store import TaskStore

logger = logging.getLogger(__name__)

API_TITLE = "ToDo REST API"
API_VERSION = "1.0.0"


def create_app(
    settings: Settings | None = None,
    store_factory: Callable[[], TaskStore] | None = None,
) -> FastAPI:
    """Builds the ASGI application.

    :param settings: Configuration; read from the environment when omitted.
    :param store_factory: Zero-argument callable returning an unconnected store;
        defaults to the store selected by `settings.store`.
    """
    settings = settings or Settings.from_env()
    store_factory = store_factory or partial(build_store, settings)
    per_request = settings.connection == "request"

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if per_request:
            logger.info("Store connections opened per request")
            yield
            return
        store = store_factory()
        await store.connect()
        app.state.store = store
        try:
            yield
        finally:
            await store.close()

    app = FastAPI(title=API_TITLE, version=API_VERSION, lifespan=lifespan)
    app.state.per_request = per_request
    app.state.store_factory = store_factory
    app.state.store = None

    @app.get("/")
    async def root() -> dict:
        return {
            "message": API_TITLE,
            "version": API_VERSION,
            "endpoints": {"tasks": tasks_router.prefix},
        }

    app.include_router(tasks_router)
    install_error_handlers(app)
    return app
