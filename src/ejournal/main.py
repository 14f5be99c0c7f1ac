# src/ejournal/main.py
from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute
from starlette.middleware.sessions import SessionMiddleware

from ejournal.api.routers import all_routers
from ejournal.app_logger import get_logger, setup_logging
from ejournal.core.config import Settings, get_settings
from ejournal.db.base import Base
from ejournal.db.health import DatabaseMonitor
from ejournal.db.retry import RetryPolicy, wait_for_database
from ejournal.db.session import build_engine, build_sessionmaker
from ejournal.errors import register_exception_handlers

log = get_logger("main")


def generate_unique_id(route: APIRoute) -> str:
    methods = "_".join(sorted((route.methods or []), key=str.lower)).lower()
    path = route.path_format.replace("/", "_").replace("{", "").replace("}", "").strip("_")
    tag = (route.tags[0] if route.tags else "default").lower().replace(" ", "_")
    return f"{tag}__{methods}__{path}"


async def create_schema(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Startup: build the engine on this loop, wait for the database within the
        retry budget, then start the periodic health check. If the database never
        answers, the app still starts with limited functionality.
        """
        # ---------------- STARTUP ----------------
        engine = build_engine(settings)
        app.state.db_engine = engine
        app.state.async_sessionmaker = build_sessionmaker(engine)
        app.state.retry_policy = RetryPolicy(
            attempts=settings.DB_CONNECT_ATTEMPTS,
            interval=settings.DB_CONNECT_INTERVAL_SECONDS,
        )
        monitor = DatabaseMonitor(
            engine,
            interval=settings.DB_HEALTH_CHECK_SECONDS,
            recheck_delay=settings.DB_RECHECK_DELAY_SECONDS,
        )
        app.state.db_monitor = monitor

        connected = await wait_for_database(engine, app.state.retry_policy)
        monitor.mark(connected)
        if connected:
            if settings.DB_CREATE_ALL:
                await create_schema(engine)
                log.info("database schema ensured")
        else:
            log.error("starting with limited functionality: database is unreachable")
        monitor.start()

        log.info(
            "%s %s ready, %d routes mounted",
            settings.APP_NAME, settings.APP_VERSION,
            len([r for r in app.routes if isinstance(r, APIRoute)]),
        )

        yield

        # ---------------- SHUTDOWN ----------------
        await monitor.stop()
        # Close the engine before the loop closes (avoids asyncpg 'loop is closed')
        await engine.dispose()

    setup_logging(settings.LOG_LEVEL, settings.LOG_JSON)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        generate_unique_id_function=generate_unique_id,
        lifespan=lifespan,
    )
    app.state.settings = settings

    register_exception_handlers(app)

    # -----------------------------
    # Middleware: API request log
    # -----------------------------
    @app.middleware("http")
    async def log_api_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        if request.url.path.startswith("/api"):
            elapsed_ms = (time.perf_counter() - started) * 1000
            log.info("%s %s %s in %.0fms", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    # Sessions (added after the logger so it wraps it and every handler sees request.session)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET,
        max_age=settings.SESSION_MAX_AGE,
        session_cookie=settings.SESSION_COOKIE_NAME,
        same_site=settings.SESSION_SAMESITE,
        https_only=settings.SESSION_HTTPS_ONLY,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for router in all_routers():
        app.include_router(router)

    return app
