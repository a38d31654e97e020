"""
University Community API — entry point.

Startup sequence:
  1. Configure OTel tracing (→ Jaeger via OTLP) + SQLAlchemy query spans
  2. Create tables if not present
  3. Expose Prometheus /metrics endpoint

Service-layer errors (app.errors.CoreError) are translated to HTTP here:
  NOT_FOUND → 404, ORPHANED_REFERENCE → 409, VALIDATION → 422,
  STORE_UNAVAILABLE → 503
"""
import logging

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from app.config import settings
from app.database import engine, init_db
from app.errors import CoreError, ErrorKind
from app.telemetry import setup_tracing, instrument_app
from app.routers import careers, feed, posts, saved, users

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)

# Set up tracing before the app is created so all imports are instrumented
setup_tracing(engine)

ERROR_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.ORPHANED_REFERENCE: 409,
    ErrorKind.VALIDATION: 422,
    ErrorKind.STORE_UNAVAILABLE: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Community API (env=%s)", settings.environment)
    await init_db()
    logger.info("Database ready. API ready.")
    yield
    logger.info("Shutting down...")
    await engine.dispose()


app = FastAPI(
    title="University Community API",
    description=(
        "Career testimonies and questions feed, user profiles and "
        "saved careers / posts."
    ),
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(CoreError)
async def core_error_handler(request: Request, exc: CoreError):
    status_code = ERROR_STATUS.get(exc.kind, 500)
    if status_code >= 500:
        logger.error("%s %s failed: %r", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content={"kind": exc.kind.value, "code": exc.code, "detail": exc.details},
    )


# ── Routers ────────────────────────────────────────────────────────────────
app.include_router(users.router, prefix="/users", tags=["Users"])
app.include_router(saved.router, prefix="/users", tags=["Saved"])
app.include_router(posts.router, prefix="/posts", tags=["Posts"])
app.include_router(feed.router, prefix="/feed", tags=["Feed"])
app.include_router(careers.router, prefix="/careers", tags=["Careers"])

# ── Prometheus metrics endpoint ────────────────────────────────────────────
# Mounted at /metrics — scraped by Prometheus
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

# ── OTel FastAPI instrumentation ──────────────────────────────────────────
instrument_app(app)


@app.get("/health", tags=["Health"])
async def health():
    return {"status": "ok", "service": settings.service_name}
