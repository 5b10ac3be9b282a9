"""WaterWise — FastAPI Application Entry Point.

Personal water-usage tracking: usage and bill records, analytics, and
rule-based conservation advice.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from waterwise.database import check_connection, init_db
from waterwise.scheduler.jobs import start_scheduler, stop_scheduler
from waterwise.api.record_routes import router as record_router
from waterwise.api.analysis_routes import router as analysis_router
from waterwise.api.external_routes import router as external_router
from waterwise.api.data_routes import router as data_router
from waterwise.api.preference_routes import router as preference_router
from waterwise.core.logging import get_logger

logger = get_logger("main")
request_logger = get_logger("http")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info("🚀 WaterWise starting up...")
    if check_connection():
        try:
            init_db()
        except Exception as e:
            logger.error(f"❌ Table creation failed: {e}")
    else:
        logger.error("❌ Database NOT connected — endpoints will fail")
    start_scheduler()
    yield
    stop_scheduler()
    logger.info("WaterWise shut down")


app = FastAPI(
    title="WaterWise",
    description="Track water usage and bills, analyse consumption, and get conservation advice.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """One structured log line per request."""
    started = time.perf_counter()
    response = await call_next(request)
    request_logger.info(
        f"{request.method} {request.url.path} -> {response.status_code}",
        extra={
            "endpoint": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 1),
        },
    )
    return response


app.include_router(record_router)
app.include_router(analysis_router)
app.include_router(external_router)
app.include_router(data_router)
app.include_router(preference_router)


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "waterwise",
        "version": "1.0.0",
    }
