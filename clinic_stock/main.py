"""
FastAPI application for the clinic stock ledger.

To run: uvicorn clinic_stock.main:app --reload
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from clinic_stock.core.config import settings
from clinic_stock.core.database import init_db, close_db, check_db_connection
from clinic_stock.api.v1 import api_router
from clinic_stock.error_handlers import (
    AppException,
    app_exception_handler,
    validation_exception_handler,
    sqlalchemy_exception_handler,
    generic_exception_handler
)
from clinic_stock.logging_config import setup_logging, get_logger
from clinic_stock.middleware import (
    limiter,
    RequestLoggingMiddleware,
    rate_limit_exceeded_handler,
    http_exception_handler
)
from clinic_stock.schemas.dashboard import HealthCheck
from clinic_stock.utils import utcnow

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {'Development' if settings.debug else 'Production'}")

    # Create missing tables; schema changes go through Alembic
    init_db()
    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application...")
    close_db()


def create_app() -> FastAPI:
    setup_logging(settings.log_level, settings.log_dir)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Clinic stock ledger: issuance, returns, restock and reconciliation",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan
    )

    app.state.limiter = limiter

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(api_router)

    @app.get("/health", response_model=HealthCheck)
    def health_check():
        """Health check endpoint (public)."""
        db_healthy = check_db_connection()
        return HealthCheck(
            status="healthy" if db_healthy else "unhealthy",
            version=settings.app_version,
            database=db_healthy,
            timestamp=utcnow()
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "clinic_stock.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
