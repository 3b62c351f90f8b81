"""FastAPI application entry point."""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from parts_inventory.api.routes import api_router
from parts_inventory.core.config import settings
from parts_inventory.core.errors import InventoryValidationError, PersistenceError
from parts_inventory.core.rate_limit import limiter
from parts_inventory.db.base import Base
from parts_inventory.db.session import SessionLocal, engine
from parts_inventory.services.ledger import get_ledger_store

# Configure logging - use JSON format in production, human-readable in dev
root_logger = logging.getLogger()
root_logger.setLevel(getattr(logging, settings.log_level))
root_logger.handlers.clear()

if settings.debug:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
else:
    import json as _json
    import sys

    class JSONFormatter(logging.Formatter):
        def format(self, record):
            return _json.dumps({
                "ts": self.formatTime(record, self.datefmt),
                "level": record.levelname,
                "logger": record.name,
                "msg": record.getMessage(),
                "module": record.module,
                "line": record.lineno,
            }, ensure_ascii=False)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())

root_logger.addHandler(handler)
logger = logging.getLogger(__name__)
request_logger = logging.getLogger("requests")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One log line per API call: method, path, status and latency."""

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(settings.api_v1_prefix):
            return await call_next(request)

        start_time = time.time()
        response = await call_next(request)
        log_level = logging.WARNING if response.status_code >= 400 else logging.INFO
        request_logger.log(
            log_level,
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({time.time() - start_time:.3f}s)"
        )
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting Parts Inventory Service")

    # Local fallback store lives in the app database
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        store = get_ledger_store(db)
        await store.initialize()
        logger.info(f"Ledger store: {store.store_name}")
    finally:
        db.close()

    yield

    logger.info("Shutting down Parts Inventory Service")


app = FastAPI(
    title="Parts Inventory Service",
    description="Production ledger, derived stock and dispatch board for the door shop",
    version="1.0.0",
    lifespan=lifespan,
    redirect_slashes=True,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# Rate limiting setup
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(InventoryValidationError)
async def validation_error_handler(request: Request, exc: InventoryValidationError):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error(f"Persistence failure on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=502, content={"detail": exc.message})


# Security headers middleware
app.add_middleware(SecurityHeadersMiddleware)

# Request logging middleware
app.add_middleware(RequestLoggingMiddleware)

# CORS middleware - added last so it runs first (Starlette LIFO order)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Accept", "Origin", "X-Requested-With"],
    max_age=600,  # Cache preflight for 10 minutes
)

# Include API routes
app.include_router(api_router, prefix=settings.api_v1_prefix)


@app.get("/health")
def health_check():
    """Basic liveness check endpoint."""
    return {
        "status": "healthy",
        "version": "1.0.0",
        "ledger_mode": "local" if settings.is_local_mode else "remote",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "message": "Parts Inventory Service API",
        "docs": "/docs",
        "health": "/health",
    }
