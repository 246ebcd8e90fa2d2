# ABOUTME: FastAPI application entry point
# ABOUTME: Configures logging, registers routers, middleware and domain error handling

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from classlog.api import health, state, data, log, bathroom
from classlog.config import get_settings
from classlog.middleware.logging import RequestLoggingMiddleware
from classlog.models.errors import ClasslogError

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Classroom Log API",
    description="Issue logging, per-period counts and bathroom check-in/out for a classroom",
    version="0.1.0",
)

# Add middleware
app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(ClasslogError)
async def classlog_error_handler(request: Request, exc: ClasslogError):
    """Render domain errors in the standard error format."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "message": exc.message}
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Custom exception handler to format error responses."""
    # If detail is a dict, use it directly (for our custom error format)
    if isinstance(exc.detail, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.detail
        )
    # Otherwise, wrap it in standard format
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": "ERROR", "message": exc.detail}
    )


# Register routers
app.include_router(health.router)
app.include_router(state.router)
app.include_router(data.router)
app.include_router(log.router)
app.include_router(bathroom.router)
