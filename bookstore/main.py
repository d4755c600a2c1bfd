"""FastAPI application factory and entry point for the bookstore API."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bookstore.api.routes.authors import router as authors_router
from bookstore.api.routes.books import router as books_router
from bookstore.api.routes.users import router as users_router
from bookstore.config import settings
from bookstore.database import async_session_factory, engine, init_models
from bookstore.seed import seed

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown events."""
    logger.info("Bookstore API starting up...")
    logger.info("JWT issuer: %s, token lifetime: %d min", settings.jwt_issuer, settings.jwt_expire_minutes)
    if settings.database_auto_create:
        await init_models()
    async with async_session_factory() as session:
        await seed(session, settings)
    yield
    await engine.dispose()
    logger.info("Bookstore API shutting down...")


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed path parameters and bodies are client errors (400), not 422."""
    logger.warning("%s %s: invalid request (%d errors)", request.method, request.url.path, len(exc.errors()))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": [{"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]} for e in exc.errors()]},
    )


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="Bookstore API",
        description="Authors and books catalog with JWT login",
        version="1.0.0",
        lifespan=lifespan,
    )

    # ── Middleware ──────────────────────────────────
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(RequestValidationError, validation_exception_handler)

    # ── Routes ─────────────────────────────────────
    application.include_router(authors_router)
    application.include_router(books_router)
    application.include_router(users_router)

    # ── Health Check ───────────────────────────────
    @application.get("/health", tags=["System"])
    async def health() -> dict[str, str]:
        return {"status": "healthy", "service": "bookstore"}

    return application


app = create_app()


def run() -> None:
    """Console entry point."""
    uvicorn.run("bookstore.main:app", host=settings.host, port=settings.port)
