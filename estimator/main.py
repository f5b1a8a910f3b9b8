"""Application factory.

Run with:
    uvicorn estimator.main:create_app --factory
"""

from __future__ import annotations

import asyncio
import time
import uuid
from contextlib import asynccontextmanager

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from fastapi import FastAPI, Request
from loguru import logger

from estimator.api.audit import router as audit_router
from estimator.api.auth import router as auth_router
from estimator.api.company_head import router as company_head_router
from estimator.api.config import router as config_router
from estimator.api.diagnostics import router as diagnostics_router
from estimator.api.estimate import router as estimate_router
from estimator.api.otp import router as otp_router
from estimator.api.projects import router as projects_router
from estimator.api.users import router as users_router
from estimator.config.settings import Settings, settings
from estimator.config_store import ConfigRevisionStore
from estimator.core.logger import setup_logger
from estimator.db.session import Database
from estimator.otp.mailer import SmtpMailer
from estimator.otp.service import purge_expired

REQUEST_ID_HEADER = "X-Request-Id"


def _start_scheduler(database: Database, config: Settings) -> BackgroundScheduler:
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        purge_expired,
        args=[database],
        trigger=IntervalTrigger(minutes=config.otp_purge_interval_minutes),
        id="otp_purge",
        name="Expired OTP purge",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(f"[SCHEDULER] Started OTP purge (runs every {config.otp_purge_interval_minutes} minutes)")
    return scheduler


def create_app(
    database: Database | None = None,
    *,
    config: Settings = settings,
    mailer: SmtpMailer | None = None,
    start_scheduler: bool | None = None,
) -> FastAPI:
    """Build the application and its per-instance services.

    Args:
        database: Storage to use; created from DATABASE_URL when omitted
        config: Settings instance
        mailer: OTP mailer; an SMTP mailer built from settings when omitted
        start_scheduler: Override SCHEDULER_ENABLED
    """
    setup_logger(level=config.log_level, log_file=config.log_file)

    if database is None:
        database = Database(config.database_url)
    logger.info("Ensuring database tables exist")
    database.create_all()

    store = ConfigRevisionStore(database)
    store.ensure_heads()

    run_scheduler = config.scheduler_enabled if start_scheduler is None else start_scheduler

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        """Start the OTP purge scheduler on startup and stop it on shutdown.

        Note: FastAPI requires async for lifespan context manager,
        even if no await operations are used.
        """
        scheduler = _start_scheduler(database, config) if run_scheduler else None
        await asyncio.sleep(0)
        yield
        if scheduler is not None:
            scheduler.shutdown()
            logger.info("[SCHEDULER] Stopped OTP purge scheduler")

    app = FastAPI(title="Project Estimator", lifespan=lifespan)
    app.state.settings = config
    app.state.database = database
    app.state.config_store = store
    app.state.mailer = mailer or SmtpMailer(config)

    app.include_router(auth_router)
    app.include_router(config_router)
    app.include_router(estimate_router)
    app.include_router(projects_router)
    app.include_router(company_head_router)
    app.include_router(users_router)
    app.include_router(audit_router)
    app.include_router(otp_router)
    app.include_router(diagnostics_router)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all HTTP requests under a request id, echoed back in X-Request-Id."""
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        request.state.request_id = request_id
        start = time.perf_counter()
        with logger.contextualize(request_id=request_id):
            logger.debug(f"Request: {request.method} {request.url.path}")
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.debug(f"Response: {response.status_code} for {request.method} {request.url.path} in {elapsed_ms:.1f}ms")
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    logger.info("FastAPI application initialized")
    return app
