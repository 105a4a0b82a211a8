"""FastAPI application main module.

This module defines the FastAPI application instance, the health and status
endpoints, and the handler that renders BookRec errors as JSON.
"""

import logging
from typing import Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from bookrec import __version__
from bookrec.api.logging_config import RequestLoggingMiddleware, setup_logging
from bookrec.api.metrics import metrics_service
from bookrec.api.routes import recommend
from bookrec.api.state import get_status
from bookrec.config import load_settings
from bookrec.exceptions import BookRecException

setup_logging(load_settings().log_level)

logger = logging.getLogger(__name__)

# Create FastAPI application instance
app = FastAPI(
    title="BookRec API",
    description="Personalized book recommendations from purchase history",
    version=__version__,
)

app.add_middleware(RequestLoggingMiddleware)

# Include routers
app.include_router(recommend.router)


@app.exception_handler(BookRecException)
async def bookrec_exception_handler(request: Request, exc: BookRecException) -> JSONResponse:
    """Render BookRec errors with their status code and details."""
    logger.warning(
        "Request rejected",
        extra={
            "path": str(request.url.path),
            "status_code": exc.status_code,
            "error_type": type(exc).__name__,
            "error": exc.message,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": type(exc).__name__,
            "message": exc.message,
            "details": exc.details,
        },
    )


@app.get("/ping")
def ping() -> Dict[str, str]:
    """Health check endpoint.

    Returns:
        Dictionary with status key set to "ok".
    """
    return {"status": "ok"}


@app.get("/status")
def status() -> Dict:
    """Report whether data is loaded and how large it is."""
    return get_status()


@app.get("/metrics")
def metrics() -> Dict:
    """Recommendation request counts and latency."""
    return metrics_service.get_metrics()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "bookrec.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
