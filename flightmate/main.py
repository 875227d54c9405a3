"""
FlightMate - FastAPI Application
Conversational flight search with a personal assistant on the side.
LLM Provider:
- If OPENAI_API_KEY is set: use OpenAI
- If no OPENAI_API_KEY: use Ollama
"""

import sys
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from .config import settings
from .api import auth, chat, health, users
from .api.deps import AppServices, build_services
from .interfaces.mongo import close_mongo_connection, get_mongo_connection


def configure_logging(level: Optional[str] = None):
    """Single stderr sink at LOG_LEVEL"""
    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or settings.LOG_LEVEL).upper(),
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
               "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    )


def create_app(services: Optional[AppServices] = None) -> FastAPI:
    """
    Build the application.

    Tests pass ready-made services; otherwise MongoDB is connected at startup
    and the stores fall back to memory if it is unreachable.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("=" * 50)
        logger.info("Starting FlightMate")
        logger.info("=" * 50)
        logger.info(f"Environment: {settings.API_ENV}")

        owns_mongo = getattr(app.state, "services", None) is None
        if owns_mongo:
            mongo = get_mongo_connection()
            app.state.services = build_services(db=mongo.db, mongo=mongo)

        logger.info(f"LLM Provider: {app.state.services.text_generator.provider}")
        yield

        if owns_mongo:
            close_mongo_connection()
        logger.info("FlightMate shutdown complete")

    app = FastAPI(
        title="FlightMate",
        description="Routes each chat message to a flight-search assistant or a personal assistant.",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.services = services

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.0f}ms)")
        return response

    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(chat.router)
    app.include_router(health.router)

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "service": "FlightMate",
            "version": "1.0.0",
            "status": "running",
            "docs": "/docs",
            "endpoints": [
                "/api/auth/register",
                "/api/auth/login",
                "/api/user/profile",
                "/api/chat/generate",
                "/api/chat/sessions",
                "/api/health",
            ]
        }

    return app


configure_logging()
app = create_app()


# ============================================
# Main
# ============================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "flightmate.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.is_development
    )
