"""
Account Service - signup, login, JWT issuance and password reset by email
"""
from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from .config import Settings, load_settings
from .db import Database
from .exceptions import register_exception_handlers
from .mailer import Mailer, create_mailer
from .rate_limit import configure_limiter
from .routes import users
from .utils.event_logger import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the schema on startup; release the engine and mailer on shutdown"""
    app.state.db.init()
    logger.info("Account service started (environment=%s)", app.state.settings.ENVIRONMENT)
    yield
    app.state.mailer.close()
    app.state.db.dispose()


def create_app(
    settings: Optional[Settings] = None,
    mailer: Optional[Mailer] = None,
) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Account Service",
        description="User-account authentication: signup, login, JWT and password reset",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db = Database(settings.database_url)
    app.state.mailer = mailer or create_mailer(settings)

    app.state.limiter = configure_limiter(settings)

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        """Add security headers to all responses."""
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cross-Origin-Opener-Policy"] = "same-origin"
        if not settings.is_development:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Authorization"],
    )

    register_exception_handlers(app)
    app.include_router(users.router)
    return app


def run() -> None:
    settings = load_settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
