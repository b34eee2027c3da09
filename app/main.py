import logging
from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from app.api.v1.api import api_router
from app.admin import setup_admin
from app.core.config import settings
from app.core.exception_handlers import register_exception_handlers
from app.core.rate_limit import limiter
from app.db.session import engine
from app.schemas.response import AppErrorResponse, ValidationErrorResponse, HTTPErrorResponse

from contextlib import asynccontextmanager

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables on startup
    from sqlmodel import SQLModel
    from app import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    logger.info("Application running at http://localhost:8000")
    logger.info("Swagger UI: http://localhost:8000/docs")
    yield
    await engine.dispose()

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
    responses={
        400: {"model": ValidationErrorResponse, "description": "Validation Error"},
        401: {"model": HTTPErrorResponse, "description": "Unauthorized"},
        403: {"model": HTTPErrorResponse, "description": "Forbidden"},
        404: {"model": AppErrorResponse, "description": "Not Found"},
        409: {"model": AppErrorResponse, "description": "Month already assigned"},
        503: {"model": AppErrorResponse, "description": "Storage unavailable"},
    }
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
register_exception_handlers(app)

# Set all CORS enabled origins
if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(api_router, prefix=settings.API_V1_STR)
setup_admin(app, engine)
