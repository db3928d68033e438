import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from dishdash import database
from dishdash.api import admin, auth, dashboard, db_test, pages
from dishdash.core.config import Settings, get_settings
from dishdash.core.errors import StorageError
from dishdash.middleware.route_gate import RouteGateMiddleware
from dishdash.services.auth import AuthService
from dishdash.services.magic_link import MagicLinkIssuer
from dishdash.services.mailer import Mailer, SmtpMailer

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[Engine] = None,
    mailer: Optional[Mailer] = None,
) -> FastAPI:
    settings = settings or get_settings()
    settings.validate()
    configure_logging(settings.log_level)

    engine = engine or database.engine
    mailer = mailer or SmtpMailer.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.create_db_and_tables(engine)
        yield

    app = FastAPI(title="DishDash", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.auth = AuthService(engine, settings)
    app.state.issuer = MagicLinkIssuer(engine, settings, mailer)

    # CORS is outermost, preflight requests never reach the gate
    app.add_middleware(RouteGateMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error("Storage error on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Something went wrong. Please try again."})

    app.include_router(pages.router)
    app.include_router(auth.router)
    app.include_router(dashboard.router)
    app.include_router(admin.router)
    app.include_router(db_test.router)

    logger.info("DishDash started, admin address %s", "configured" if settings.admin_email else "not set")
    return app


app = create_app()
