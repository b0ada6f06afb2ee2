"""FastAPI application entry point for User Service."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from services.users.config import Settings, get_settings
from services.users.database import create_tables
from services.users.events.publisher import UserEventPublisher
from services.users.schemas import HealthResponse
from services.users.users import INTERNAL_ERROR_DETAIL
from services.users.users import router as users_router
from shared.events.connection import BrokerConnection
from shared.events.publisher import EventPublisher, InMemoryPublisher
from shared.events.rabbitmq_publisher import RabbitMQPublisher
from shared.logging_config import setup_logging

# Configure logging before creating logger
settings = get_settings()
setup_logging(debug=settings.debug, service_name="user-service")

logger = logging.getLogger(__name__)

SERVICE_VERSION = "0.1.0"


def build_event_publisher(settings: Settings) -> tuple[EventPublisher, BrokerConnection | None]:
    """
    Create the broker publisher selected by ``events_backend``.

    Returns:
        The publisher and, for RabbitMQ, the connection it owns
    """
    if settings.events_backend == "memory":
        return InMemoryPublisher(), None

    connection = BrokerConnection(
        settings.rabbitmq_url,
        connect_timeout=settings.broker_connect_timeout,
        max_retries=settings.broker_max_retries,
        backoff_base=settings.broker_backoff_base,
        backoff_max=settings.broker_backoff_max,
    )
    publisher = RabbitMQPublisher(
        connection,
        publish_timeout=settings.broker_publish_timeout,
    )
    return publisher, connection


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Handles startup and shutdown events.
    """
    # Startup
    create_tables()

    # The RabbitMQ publisher connects lazily on first publish, so the
    # service starts even while the broker is unavailable
    publisher, connection = build_event_publisher(settings)
    app.state.broker_publisher = publisher
    app.state.broker_connection = connection

    # Create the typed user event publisher facade
    app.state.event_publisher = UserEventPublisher(publisher)

    logger.info(f"User event publisher ready (backend: {settings.events_backend})")

    yield

    # Shutdown - disconnect publisher
    await app.state.broker_publisher.disconnect()
    logger.info("User event publisher disconnected")


app = FastAPI(
    title=settings.app_name,
    description="User accounts service publishing user events",
    version=SERVICE_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Reject invalid input with a 400 and the first validation message."""
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    # pydantic prefixes messages raised from validators
    message = message.removeprefix("Value error, ")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": message},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected errors and hide their detail from the caller."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": INTERNAL_ERROR_DETAIL},
    )


# Include routers
app.include_router(users_router)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
def health_check(request: Request) -> HealthResponse:
    """
    Health check endpoint.

    Returns service health status and the broker connection state.
    """
    connection: BrokerConnection | None = request.app.state.broker_connection
    return HealthResponse(
        status="healthy",
        service="user-service",
        version=SERVICE_VERSION,
        broker=connection.state.value if connection else "memory",
    )


@app.get("/", tags=["Root"])
def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": "User Service",
        "version": SERVICE_VERSION,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.users.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
