"""
FastAPI application entry point.

Run with: uvicorn src.main:app --reload
"""

from contextlib import asynccontextmanager
import uuid

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from src.core.config import PROVIDER_API_KEYS, settings
from src.core.logging import configure_logging, get_logger, bind_context, clear_context
from src.core.task_loader import load_task_catalog
from src.persistence.database import init_database, seed_tasks
from src.api.routes import health, study
from src.api.exception_handlers import setup_exception_handlers

# Configure logging before anything else
configure_logging()
log = get_logger(__name__)

APP_NAME = "Prompt Study Service"
APP_VERSION = "0.1.0"


# =============================================================================
# Correlation ID Middleware
# =============================================================================


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds a unique correlation ID to each request.

    - Generates a UUID4 request_id for each incoming request
    - Binds it to structlog context for all logs in that request
    - Adds X-Request-ID header to responses
    """

    async def dispatch(self, request: Request, call_next):
        """Process request and add correlation ID."""
        request_id = str(uuid.uuid4())

        bind_context(request_id=request_id)

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_context()


# =============================================================================
# Startup validation
# =============================================================================


def validate_configuration() -> None:
    """
    Validate that the configured LLM provider can be used.

    Raises:
        RuntimeError: Listing every missing or invalid value
    """
    errors = []

    provider = settings.llm_provider
    if provider not in PROVIDER_API_KEYS:
        errors.append(
            f"Unknown LLM provider '{provider}'. "
            f"Supported providers: {', '.join(PROVIDER_API_KEYS)}"
        )
    else:
        _, env_var = PROVIDER_API_KEYS[provider]
        if not settings.provider_api_key(provider):
            errors.append(
                f"LLM API key missing: {env_var} is required for {provider}. "
                "Set it in .env file."
            )

    if errors:
        error_msg = "Configuration Validation Failed:\n" + "\n".join(
            f"  - {e}" for e in errors
        )
        raise RuntimeError(error_msg)

    log.info("configuration_validated", llm_provider=provider)


async def seed_task_catalog() -> None:
    """Insert catalog tasks that are not yet in the store."""
    if not settings.tasks_file.exists():
        log.warning("task_catalog_missing", path=str(settings.tasks_file))
        return

    tasks = load_task_catalog(settings.tasks_file)
    inserted = await seed_tasks(tasks)
    log.info("task_catalog_seeded", task_count=len(tasks), inserted=inserted)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    log.info(
        "application_starting",
        debug=settings.debug,
        database_path=str(settings.database_path),
        llm_provider=settings.llm_provider,
    )

    # Fail fast if the LLM provider is misconfigured
    validate_configuration()

    await init_database()
    await seed_task_catalog()

    log.info("application_started")

    yield

    log.info("application_shutting_down")


app = FastAPI(
    title=APP_NAME,
    description="Collects multi-turn participant/LLM conversations across a fixed task sequence",
    version=APP_VERSION,
    lifespan=lifespan,
    debug=settings.debug,
)

# CORS middleware for development
if settings.debug:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.add_middleware(CorrelationIDMiddleware)

setup_exception_handlers(app)

app.include_router(health.router, tags=["system"])
app.include_router(study.router)


@app.get("/")
async def root():
    """Root endpoint with basic info."""
    return {"name": APP_NAME, "version": APP_VERSION, "status": "running"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
