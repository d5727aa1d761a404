"""
RideHail - FastAPI Application Entrypoint

This module initializes the FastAPI application with:
- CORS and security middleware
- User and captain account routes
- Token issuer/verifier and session cookie policy, built once at startup
- Database lifecycle management
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from ridehail import __version__
from ridehail.accounts.kinds import ACCOUNT_KINDS
from ridehail.accounts.routes import build_account_router
from ridehail.accounts.service import AccountService
from ridehail.accounts.store import AccountStore
from ridehail.auth.cookies import SessionCookiePolicy
from ridehail.auth.tokens import (
    TokenIssuer,
    TokenVerifier,
    access_token_config,
    refresh_token_config,
)
from ridehail.config import Settings, get_settings
from ridehail.database import get_engine, get_session_factory, init_db
from ridehail.errors import register_exception_handlers
from ridehail.gateway.middleware import SecurityMiddleware


def configure_state(app: FastAPI, settings: Settings) -> None:
    """
    Build the process-wide auth components and account services.

    Raises:
        ConfigurationError: If a signing secret is missing
    """
    access_config = access_token_config(settings)
    refresh_config = refresh_token_config(settings)

    app.state.access_issuer = TokenIssuer(access_config)
    app.state.access_verifier = TokenVerifier(access_config)
    app.state.refresh_issuer = TokenIssuer(refresh_config)
    app.state.cookie_policy = SessionCookiePolicy.from_settings(
        settings, max_age=access_config.ttl_seconds
    )

    engine = get_engine(settings.DATABASE_URL)
    init_db(engine)
    app.state.db_engine = engine
    app.state.db_session_factory = get_session_factory(engine)

    app.state.account_services = {
        name: AccountService(
            kind=kind,
            store=AccountStore(kind.model, app.state.db_session_factory),
            issuer=app.state.access_issuer,
            work_factor=settings.BCRYPT_WORK_FACTOR,
        )
        for name, kind in ACCOUNT_KINDS.items()
    }


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Startup:
            - Load signing secrets into immutable token configs
            - Initialize SQLModel database (users, captains)
        Shutdown:
            - Dispose the engine
        """
        configure_state(app, settings)
        logger.info(
            "RideHail {} started (environment={}, secure cookies={})",
            __version__, settings.ENVIRONMENT, app.state.cookie_policy.secure,
        )

        yield

        app.state.db_engine.dispose()

    app = FastAPI(
        title="RideHail",
        description="Ride-hailing backend: rider and captain accounts",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )
    app.add_middleware(SecurityMiddleware)
    register_exception_handlers(app)

    for kind in ACCOUNT_KINDS.values():
        app.include_router(build_account_router(kind), prefix="/api/v1")

    @app.get("/")
    async def root():
        return "RideHail server is running"

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "version": __version__}

    return app
