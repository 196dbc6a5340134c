"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from app.config import settings
from app.database import Base, engine
from app.logging_config import setup_logging

# Import routers
from app.routers import applications, events, participation, users, webhooks

# Import all models so Base.metadata knows about them
from app.models.user import User                                   # noqa: F401
from app.models.event import Event                                 # noqa: F401
from app.models.participation import Participation                 # noqa: F401
from app.models.status_change import ParticipationStatusChange     # noqa: F401

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(
    title="Maly RSVP",
    description="Event participation lifecycle — applications, host approval, capacity and paid tickets",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers (applications before events: /api/events/applications is a literal path)
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(applications.router, prefix="/api/events", tags=["Applications"])
app.include_router(participation.router, prefix="/api/events", tags=["Participation"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(webhooks.router, prefix="/api/webhooks", tags=["Webhooks"])


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed JSON and bodies of the wrong shape are client errors (400)."""
    errors = exc.errors()
    logger.info("Rejected request body on %s %s: %d error(s)", request.method, request.url.path, len(errors))
    if any(error.get("type") == "json_invalid" for error in errors):
        return JSONResponse(status_code=400, content={"detail": "Invalid JSON format"})
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(errors)})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
