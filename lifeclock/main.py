import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from lifeclock.core.config import settings
from lifeclock.routers import choices as choices_router
from lifeclock.routers import config as config_router
from lifeclock.routers import parameters as parameters_router
from lifeclock.routers import predictions as predictions_router
from lifeclock.routers import transfer as transfer_router
from lifeclock.core.errors import (
    LifeClockException,
    lifeclock_exception_handler,
    validation_exception_handler,
    unhandled_exception_handler,
)
from lifeclock.services.session import LifeClockSession

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # A session may be injected beforehand (tests); otherwise build one.
    session = getattr(app.state, "session", None)
    if session is None:
        session = LifeClockSession.from_settings(settings)
        app.state.session = session
    if not session.initialized:
        session.initialize()
    elif session.parameters is not None:
        session.timer.start()
    try:
        yield
    finally:
        session.shutdown()


app = FastAPI(
    title="LifeClock API",
    description=(
        "**Choice log → behavioral scores → outcome and lifespan projections**\n\n"
        "Scores the last 30 days of categorical choices, projects the aggregate "
        "onto four life-outcome domains and drives a live three-scenario countdown.\n\n"
        "All error responses follow the `{code, message, details}` envelope."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Exception handlers (most specific first) ---
app.add_exception_handler(LifeClockException, lifeclock_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Routers ---
app.include_router(choices_router.router)
app.include_router(parameters_router.router)
app.include_router(predictions_router.router)
app.include_router(transfer_router.router)
app.include_router(config_router.router)


@app.get("/health", tags=["health"], summary="Health check")
async def health(request: Request):
    """
    Always 200: the app stays usable without its database.
    `store` reports "durable" or "in-memory" so degraded mode is visible.
    """
    session: LifeClockSession = request.app.state.session
    return {
        "status": "ok",
        "store": "durable" if session.store.available else "in-memory",
        "env": settings.APP_ENV,
    }
