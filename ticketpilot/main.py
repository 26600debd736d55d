"""
FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ticketpilot import __version__
from ticketpilot.api.deps import container
from ticketpilot.api.v1 import api_keys, documents, health, jira_credentials, jira_project_config, jira_tickets
from ticketpilot.core.config import settings
from ticketpilot.core.constants import API_PREFIX
from ticketpilot.core.exceptions import TicketPilotError
from ticketpilot.core.logging import bind_context, clear_context, get_logger, setup_logging
from ticketpilot.core.security import check_secret_key, generate_request_id

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info(
        "Starting TicketPilot",
        app_name=settings.app_name,
        env=settings.app_env,
        storage_backend=settings.storage_backend,
    )

    check_secret_key()
    await container.startup()
    logger.info("Service container initialized")

    yield

    logger.info("Shutting down TicketPilot")
    await container.shutdown()


# Create FastAPI application
app = FastAPI(
    title="TicketPilot API",
    description="Turn documents into reviewed Jira tickets using a language model",
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.security.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Tag every log line of a request with a request ID."""
    request_id = request.headers.get("X-Request-ID") or generate_request_id()
    clear_context()
    bind_context(request_id=request_id, path=request.url.path)

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# Exception handlers
@app.exception_handler(TicketPilotError)
async def ticketpilot_error_handler(
    request: Request,
    exc: TicketPilotError,
) -> JSONResponse:
    """Handle custom application errors."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "Application error",
        error_code=exc.code,
        error_message=exc.message,
        reason=getattr(exc, "reason", None),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Report malformed input as 400 with field-level detail."""
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]
    logger.info("Invalid input data", path=request.url.path, error_count=len(errors))
    return JSONResponse(
        status_code=400,
        content={
            "message": "Invalid input data",
            "code": "VALIDATION_ERROR",
            "errors": errors,
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle unexpected errors."""
    logger.exception(
        "Unexpected error",
        error=str(exc),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=500,
        content={
            "message": "Internal server error",
            "code": "INTERNAL_ERROR",
        },
    )


# Include routers
app.include_router(health.router, prefix=API_PREFIX, tags=["Health"])
app.include_router(documents.router, prefix=API_PREFIX, tags=["Documents"])
app.include_router(jira_tickets.router, prefix=API_PREFIX, tags=["Jira Tickets"])
app.include_router(api_keys.router, prefix=API_PREFIX, tags=["API Keys"])
app.include_router(jira_credentials.router, prefix=API_PREFIX, tags=["Jira Credentials"])
app.include_router(jira_project_config.router, prefix=API_PREFIX, tags=["Jira Project Config"])


# Root endpoint
@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs" if settings.debug else "Disabled in production",
    }


@app.get("/api")
async def api_info() -> dict[str, Any]:
    """API information endpoint."""
    return {
        "name": "TicketPilot API",
        "version": __version__,
        "prefix": API_PREFIX,
        "endpoints": {
            "health": f"{API_PREFIX}/health",
            "process_document": f"{API_PREFIX}/process-document",
            "jira_tickets": f"{API_PREFIX}/jira-tickets",
            "api_keys": f"{API_PREFIX}/api-keys",
            "jira_credentials": f"{API_PREFIX}/jira-credentials",
            "jira_project_config": f"{API_PREFIX}/jira-project-config",
        },
    }


def run() -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    uvicorn.run(
        "ticketpilot.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
    )


if __name__ == "__main__":
    run()
