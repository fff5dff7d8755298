"""
FastAPI application entry point.
Assembles the app with routers, middleware, lifespan handlers, and exception handlers.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from contact_directory.api.v1.router import api_router
from contact_directory.core.config import settings
from contact_directory.core.exceptions import setup_exception_handlers
from contact_directory.core.logging import setup_logging
from contact_directory.core.rate_limit import limiter
from contact_directory.core.integrations.observability import setup_observability
from contact_directory.db.session import init_db, close_db
from contact_directory.deps.di_container import build_container, set_container


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    Initializes logging, DB and the DI container.
    """
    # Startup
    setup_logging()
    setup_observability()

    await init_db()

    container = build_container()
    app.state.container = container
    set_container(container)

    yield

    # Shutdown
    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="Contact directory pages with ordered member rosters",
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Include API router
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    from contact_directory.api.v1.endpoints.health import get_health

    @app.get("/health", response_model=None, include_in_schema=False)
    async def root_health():
        """Root-level health check endpoint."""
        return await get_health()

    setup_exception_handlers(app)

    return app


app = create_app()
