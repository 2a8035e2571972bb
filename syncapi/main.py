"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.exceptions import RequestValidationError

from syncapi.core.problems import Problem, problem_exception_handler, validation_exception_handler
from syncapi.database import init_db
from syncapi.services.discovery import close_discoverer

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup ---
    logger.info("Initializing database...")
    await init_db()

    yield

    # --- Shutdown ---
    logger.info("Closing connector discoverer...")
    await close_discoverer()


def create_app() -> FastAPI:
    from syncapi.routers import connections, jobs
    from syncapi.routers.public import sources

    app = FastAPI(
        title="SyncControlService",
        description=(
            "Configuration API for data-synchronization sources and jobs, "
            "with a public API facade for source management."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(Problem, problem_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Public API
    public_router = APIRouter()
    public_router.include_router(sources.router)
    app.include_router(public_router, prefix="/api/public/v1", tags=["Public API"])

    # Internal configuration API
    app.include_router(jobs.router, prefix="/api/v1/jobs", tags=["Jobs"])
    app.include_router(connections.router, prefix="/api/v1/connections", tags=["Connections"])

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
