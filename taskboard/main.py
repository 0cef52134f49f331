"""FastAPI application entrypoint. No business logic; only wiring, error mapping and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from taskboard.api.v1 import router as v1_router
from taskboard.core.config import APP_VERSION, settings
from taskboard.core.database import session_scope
from taskboard.core.errors import AccessDeniedError, SystemFailureError, TaskboardError
from taskboard.services.roles import seed_default_roles

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Seed the default global roles on startup when the table is empty."""
    if settings.SEED_ROLES_ON_STARTUP:
        try:
            with session_scope() as db:
                seed_default_roles(db)
        except SQLAlchemyError:
            logger.exception("Role seeding failed; continuing without it")
    yield


app = FastAPI(
    title="Taskboard API",
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TaskboardError)
async def handle_taskboard_error(request: Request, exc: TaskboardError) -> JSONResponse:
    """Render domain errors as {"detail", "code"} (plus "reason" for access denials)."""
    if isinstance(exc, SystemFailureError):
        logger.error("System failure on %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": "Internal server error", "code": exc.code},
        )
    content = {"detail": exc.message, "code": exc.code}
    if isinstance(exc, AccessDeniedError):
        content["reason"] = exc.reason.value
        logger.info(
            "Access denied",
            extra={"path": request.url.path, "reason": exc.reason.value},
        )
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(SQLAlchemyError)
async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "code": SystemFailureError.code},
    )


app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "Taskboard API"}
