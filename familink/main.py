import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from familink.config import settings
from familink.database import engine
from familink.errors import FamilyError
from familink.logging_config import setup_logging
from familink.routers import auth, families, invitations, users

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI):
    setup_logging(settings.log_level)
    logger.info("Familink API started")
    yield
    logger.info("Familink API shutting down")


def register_error_handlers(application: FastAPI) -> None:
    @application.exception_handler(FamilyError)
    async def family_error_handler(request: Request, exc: FamilyError):
        logger.warning(
            "%s %s rejected: %s (%s)",
            request.method,
            request.url.path,
            exc.message,
            exc.code,
        )
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    @application.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error", "code": "internal"},
        )


def create_app() -> FastAPI:
    application = FastAPI(title="Familink API", lifespan=lifespan)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(application)

    application.include_router(auth.router)
    application.include_router(users.router)
    application.include_router(families.router)
    application.include_router(invitations.router)

    @application.get("/health")
    def health():
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return {"status": "healthy"}
        except Exception:
            logger.exception("Health check failed")
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "unhealthy"},
            )

    return application


app = create_app()
