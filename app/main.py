"""
app/main.py

Purpose: Application entry point

- Builds the FastAPI app, middleware and exception handlers
- Mounts applicant routes under {API_PREFIX}/users and admin routes under {API_PREFIX}/admin
- Lifespan: config check, MongoDB + indexes, notification worker
- No business logic should be written here
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from contextlib import asynccontextmanager
import time

from app.core.config import settings, validate_settings
from app.core.errors import add_exception_handlers
from app.core.logging import setup_logging, get_logger
from app.db.mongo import connect_to_mongo, close_mongo_connection, check_database_health
from app.db.indexes import create_indexes
from app.services.notification_service import notification_service
from app.api import admin, users
from utils.constants import SERVICE_BANNER, SERVICE_NAME, SERVICE_VERSION

setup_logging()
logger = get_logger(__name__)

SLOW_REQUEST_SECONDS = 5.0


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"🚀 Starting {SERVICE_NAME} ({settings.ENVIRONMENT})")

    try:
        validate_settings()
        await connect_to_mongo()
        await create_indexes()
        await notification_service.start()
    except Exception as e:
        logger.critical(f"Failed to start application: {str(e)}", exc_info=True)
        raise

    logger.info(f"🎉 {SERVICE_NAME} ready")

    yield

    logger.info(f"🛑 Shutting down {SERVICE_NAME}")
    try:
        await notification_service.stop()
    finally:
        await close_mongo_connection()


app = FastAPI(
    title=SERVICE_NAME,
    description="Applicant onboarding with admin-approved steps",
    version=SERVICE_VERSION,
    lifespan=lifespan,
    debug=settings.DEBUG,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started
    response.headers["X-Process-Time"] = f"{elapsed:.4f}"

    if elapsed > SLOW_REQUEST_SECONDS:
        logger.warning(f"Slow request: {request.method} {request.url.path} took {elapsed:.2f}s")

    return response


add_exception_handlers(app)

app.include_router(users.router, prefix=f"{settings.API_PREFIX}/users", tags=["Applicant"])
app.include_router(admin.router, prefix=f"{settings.API_PREFIX}/admin", tags=["Admin"])


@app.get("/", tags=["Health"], response_class=PlainTextResponse)
async def root():
    return SERVICE_BANNER


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Database reachability plus notification worker counters.
    503 when the database is down; "degraded" when only the worker is stopped.
    """
    db_healthy = await check_database_health()
    worker = notification_service

    if not db_healthy:
        status = "unhealthy"
    elif not worker.running:
        status = "degraded"
    else:
        status = "healthy"

    body = {
        "status": status,
        "timestamp": time.time(),
        "environment": settings.ENVIRONMENT,
        "version": SERVICE_VERSION,
        "checks": {
            "database": "healthy" if db_healthy else "unhealthy",
            "notifications": {
                "running": worker.running,
                "delivered": worker.delivered,
                "failed": worker.failed,
                "dropped": worker.dropped,
            },
        },
    }
    return JSONResponse(content=body, status_code=503 if status == "unhealthy" else 200)


@app.get("/ready", tags=["Health"])
async def readiness_check():
    if await check_database_health():
        return {"status": "ready"}
    return JSONResponse(
        status_code=503,
        content={"status": "not_ready", "reason": "database_unavailable"}
    )


@app.get("/live", tags=["Health"])
async def liveness_check():
    return {"status": "alive"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
