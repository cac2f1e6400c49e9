"""Main FastAPI application."""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from resource_query.config.settings import get_settings
from resource_query.core.error_handlers import domain_error_handler
from resource_query.core.exceptions import DomainError
from resource_query.core.logging import configure_logging, get_logger
from resource_query.middleware import RequestIDMiddleware

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    yield
    # Shutdown: close database connections
    from resource_query.db.database import close_engine
    await close_engine()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_logging()

    app = FastAPI(
        title=settings.app_name,
        description="Filterable, sortable, paginated list endpoints",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(RequestIDMiddleware)
    app.add_exception_handler(DomainError, domain_error_handler)

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "app": settings.app_name}

    from resource_query.api.routes import users_router

    app.include_router(users_router, prefix="/users", tags=["Users"])

    logger.info("app_created", app=settings.app_name)
    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("resource_query.main:app", host="0.0.0.0", port=8000, reload=True)
