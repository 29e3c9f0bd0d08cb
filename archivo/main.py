import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from archivo.config import settings
from archivo.core.errors import ArchivoError
from archivo.database import Base, engine

# Import models so SQLAlchemy registers tables
import archivo.models  # noqa: F401

# Routers
from archivo.routers import (
    auth_router,
    users_router,
    family_router,
    media_router,
    album_router,
    memory_router,
)

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# -----------------------
# AUTO-CREATE MEDIA FOLDER
# -----------------------
def ensure_media_folders():
    """
    Create the local upload directory on startup (StaticFiles
    refuses to mount a missing directory).
    """
    os.makedirs(settings.LOCAL_MEDIA_PATH, exist_ok=True)


# -----------------------
# CREATE APP
# -----------------------
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Backend API for Archivo, the family media-sharing application.",
    version="1.0.0",
)
logger.info("Database URL: %s", settings.DATABASE_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------
# DATABASE TABLES
# -----------------------
Base.metadata.create_all(bind=engine)

# -----------------------
# UPLOADED FILES
# -----------------------
ensure_media_folders()
app.mount("/uploads", StaticFiles(directory=settings.LOCAL_MEDIA_PATH), name="uploads")


# -----------------------
# ERRORS (plain-text bodies)
# -----------------------
@app.exception_handler(ArchivoError)
def handle_archivo_error(request: Request, exc: ArchivoError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return PlainTextResponse(exc.message, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
def handle_request_validation_error(request: Request, exc: RequestValidationError):
    problems = [
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    ]
    return PlainTextResponse("Invalid request: " + "; ".join(problems), status_code=400)


@app.exception_handler(StarletteHTTPException)
def handle_http_exception(request: Request, exc: StarletteHTTPException):
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(SQLAlchemyError)
def handle_database_error(request: Request, exc: SQLAlchemyError):
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return PlainTextResponse("Storage error", status_code=500)


# -----------------------
# ROUTES
# -----------------------
app.include_router(auth_router.router)
app.include_router(users_router.router)
app.include_router(family_router.router)
app.include_router(media_router.router)
app.include_router(album_router.router)
app.include_router(memory_router.router)


# -----------------------
# HEALTH CHECK
# -----------------------
@app.get("/")
def root():
    return {"message": "Archivo API is running!"}
