"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from foodlens.api.admin import router as admin_router
from foodlens.api.ai import router as ai_router
from foodlens.api.errors import register_exception_handlers
from foodlens.api.food import router as food_router
from foodlens.api.profile import router as profile_router
from foodlens.api.recipes import router as recipes_router
from foodlens.app_logging import configure_logging
from foodlens.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        if state_container.settings.run_startup_reconciliation:
            try:
                state_container.reconciliation_service.run()
            except Exception:
                logger.exception("Startup reconciliation failed")
        yield
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    register_exception_handlers(app)

    app.include_router(profile_router)
    app.include_router(food_router)
    app.include_router(ai_router)
    app.include_router(recipes_router)
    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
