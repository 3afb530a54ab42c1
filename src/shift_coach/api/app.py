"""FastAPI application factory."""

import logging

from fastapi import FastAPI

from shift_coach.api.admin import router as admin_router
from shift_coach.api.scores import router as scores_router
from shift_coach.app_logging import configure_logging
from shift_coach.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    app = FastAPI(title="Shift Coach")
    app.state.container = container

    app.include_router(scores_router)
    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    logger.info("Shift Coach API ready: environment=%s", container.settings.environment)
    return app
