"""
Application factory and FastAPI app configuration.

Every response carries an ``X-Process-Time`` header (seconds); unhandled
errors escaping the routes become a plain 500.
"""

import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from proforma_engine import MODELS
from proforma_service.api.router import router as api_router
from proforma_service.config import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("proforma_service")


def create_app() -> FastAPI:
    """Build the projection API with its routes, request timing and health endpoint."""
    application = FastAPI(
        title="Pro Forma Projection API",
        version="0.1.0",
        description="Multi-segment subscription projections, pro forma exports and runway planning",
    )
    application.include_router(api_router)

    @application.middleware("http")
    async def time_requests(request: Request, call_next):
        route = f"{request.method} {request.url.path}"
        logger.info(f"Incoming request: {route}")
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"Request failed: {route} Error: {e}")
            return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})

        elapsed = time.perf_counter() - started
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        logger.info(f"Request completed: {route} Status: {response.status_code} Time: {elapsed:.4f}s")
        return response

    @application.get("/")
    def read_root():
        return {"message": "Pro Forma Projection API is running"}

    @application.get("/health", summary="Service Health")
    def health():
        return {
            "status": "ok",
            "snapshot_store": settings.snapshot_store,
            "default_months": settings.default_months,
            "models": sorted(MODELS),
        }

    return application


# Module-level app instance for uvicorn
app = create_app()
