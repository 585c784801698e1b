import logging
import traceback
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from multiprompt import __version__
from multiprompt.api.router import api_router, auth_router
from multiprompt.core.config import settings, validate_settings_for_production
from multiprompt.core.logging import setup_logging
from multiprompt.core.metrics import PrometheusMiddleware, metrics_response
from multiprompt.core.middleware import RequestLoggingMiddleware
from multiprompt.core.rate_limit import limiter
from multiprompt.core.sentry import init_sentry
from multiprompt.db.session import async_session_factory, db_health_check, engine, init_db
from multiprompt.services.users import ensure_admin

# Configure logging before anything else
setup_logging()
init_sentry()

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    validate_settings_for_production()
    logger.info("Starting multiprompt %s (env=%s)...", __version__, settings.app_env)

    await init_db()
    async with async_session_factory() as db:
        await ensure_admin(db)
        await db.commit()

    yield

    # Shutdown
    await engine.dispose()
    logger.info("multiprompt shut down")


app = FastAPI(
    title="multiprompt",
    description="Broadcast one prompt to several LLM provider accounts and collect every answer",
    version=__version__,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.app_debug else None,
    redoc_url="/api/redoc" if settings.app_debug else None,
)


# Log unhandled exceptions with a full traceback
@app.exception_handler(Exception)
async def _unhandled_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled %s on %s %s:\n%s", type(exc).__name__, request.method, request.url.path, "".join(tb))
    return JSONResponse(status_code=500, content={"detail": f"{type(exc).__name__}: {exc}"})


# Malformed request bodies are caller errors: 400, not FastAPI's default 422
@app.exception_handler(RequestValidationError)
async def _validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid request")
    detail = f"{location}: {message}" if location else message
    return JSONResponse(status_code=400, content={"detail": detail})


# Rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Request logging + metrics middleware
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(PrometheusMiddleware)

# CORS: parse allowed_origins from settings (comma-separated)
_origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
async def health():
    db_ok = await db_health_check()
    return {"status": "ok", "database": db_ok}


@app.get("/metrics", include_in_schema=False)
async def metrics():
    return metrics_response()


# Routes
app.include_router(auth_router)
app.include_router(api_router)

# Single-page UI; mounted last so it never shadows API routes
app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")
