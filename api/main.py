
"""
FastAPI application initialization
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from api.routes import health, databases, check, lists
from api.dependencies import connector
from api.middleware import RequestContextMiddleware, get_request_id
from core.config import settings
from core.exceptions import (
    EligibilityException,
    TrackedDatabaseNotFoundError,
    TrackedDatabaseConnectionError,
    DuplicateEntryError,
    EntryNotFoundError,
)
from core.logging import setup_logging
from schemas.api import ErrorResponse
import logging

setup_logging()

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Address Eligibility API",
    description="Blacklist, whitelist and status list eligibility checks for tracked databases",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestContextMiddleware)


# Include routers
app.include_router(health.router)
app.include_router(databases.router)
app.include_router(check.router)
app.include_router(lists.router)


ERROR_STATUS_CODES = {
    TrackedDatabaseNotFoundError: 404,
    EntryNotFoundError: 404,
    DuplicateEntryError: 409,
    TrackedDatabaseConnectionError: 503,
}


@app.exception_handler(EligibilityException)
async def eligibility_exception_handler(request: Request, exc: EligibilityException):
    """Map service errors to HTTP responses"""
    status_code = next(
        (code for error_type, code in ERROR_STATUS_CODES.items() if isinstance(exc, error_type)),
        500
    )
    request_id = get_request_id(request)
    logger.error(f"[{request_id}] {request.method} {request.url.path} -> {status_code}: {exc}")

    body = ErrorResponse(
        error=exc.__class__.__name__,
        detail=exc.message,
        context={k: str(v) for k, v in exc.context.items()},
        request_id=request_id,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info("Starting Address Eligibility API")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else 'configured'}")
    logger.info(
        f"Occupancy limit: {settings.DEFAULT_OCCUPANCY_LIMIT}, "
        f"lookup failure policy: {settings.LOOKUP_FAILURE_POLICY}"
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("Shutting down Address Eligibility API")
    await connector.dispose()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Address Eligibility API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "tracked_databases": "/tracked-databases",
            "check_address": "/tracked-databases/{id}/check-address"
        }
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
