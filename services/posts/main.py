"""FastAPI application entry point for Post Service."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from services.posts.config import Settings, get_settings
from services.posts.database import SessionLocal, create_tables
from services.posts.events.user_handlers import UserDeleteHandler, UserSignupHandler
from services.posts.posts import router as posts_router
from services.posts.schemas import HealthResponse
from services.posts.shadow_store import ShadowUserStore
from shared.events.connection import BrokerConnection
from shared.events.rabbitmq_subscriber import RabbitMQSubscriber
from shared.events.subscriber import EventSubscriber, InMemorySubscriber
from shared.logging_config import setup_logging

# Configure logging before creating logger
settings = get_settings()
setup_logging(debug=settings.debug, service_name="post-service")

logger = logging.getLogger(__name__)

SERVICE_VERSION = "0.1.0"


def build_user_event_subscriber(
    settings: Settings,
    store: ShadowUserStore,
) -> tuple[EventSubscriber, BrokerConnection | None]:
    """Create the user event subscriber selected by ``events_backend``.

    Both user event handlers are registered on the returned subscriber.

    Args:
        settings: Application settings
        store: Shadow user store the handlers write to

    Returns:
        The subscriber and, for RabbitMQ, the connection it owns
    """
    connection: BrokerConnection | None = None
    subscriber: EventSubscriber
    if settings.events_backend == "memory":
        subscriber = InMemorySubscriber()
    else:
        connection = BrokerConnection(
            settings.rabbitmq_url,
            connect_timeout=settings.broker_connect_timeout,
            max_retries=settings.broker_max_retries,
            backoff_base=settings.broker_backoff_base,
            backoff_max=settings.broker_backoff_max,
            prefetch_count=settings.broker_prefetch_count,
        )
        subscriber = RabbitMQSubscriber(connection)

    # Register event handlers
    subscriber.register_handler(UserSignupHandler(store))
    subscriber.register_handler(UserDeleteHandler(store))

    return subscriber, connection


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Handles startup and shutdown events.
    """
    # Startup
    create_tables()

    store = ShadowUserStore(SessionLocal)
    subscriber, connection = build_user_event_subscriber(settings, store)
    app.state.shadow_store = store
    app.state.broker_connection = connection

    # Start consuming events
    await subscriber.connect()
    await subscriber.start()
    app.state.user_subscriber = subscriber

    logger.info("Post service started - listening for user events")

    yield

    # Shutdown - stop the subscriber gracefully
    await app.state.user_subscriber.stop()
    await app.state.user_subscriber.disconnect()
    logger.info("User event subscriber stopped")


app = FastAPI(
    title=settings.app_name,
    description="Posts service keeping a replicated copy of users",
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
        content={"detail": "Something went wrong"},
    )


# Include routers
app.include_router(posts_router)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
def health_check(request: Request) -> HealthResponse:
    """
    Health check endpoint.

    Returns service health status and the state of the user event consumer.
    """
    connection: BrokerConnection | None = request.app.state.broker_connection
    subscriber: EventSubscriber = request.app.state.user_subscriber
    return HealthResponse(
        status="healthy",
        service="post-service",
        version=SERVICE_VERSION,
        broker=connection.state.value if connection else "memory",
        consuming=subscriber.is_consuming,
    )


@app.get("/", tags=["Root"])
def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": "Post Service",
        "version": SERVICE_VERSION,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.posts.main:app",
        host="0.0.0.0",
        port=8001,
        reload=settings.debug,
    )
