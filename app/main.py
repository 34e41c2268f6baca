"""FastAPI application entry point."""
import time
from fastapi import FastAPI, Request
from contextlib import asynccontextmanager
from app.api.routes import router as webhook_router
from app.models import HealthResponse
from app.services import BridgeServices, build_services
from core.config import settings
from core.logging import configure_logging, get_logger

# Configure logging
configure_logging()
logger = get_logger(__name__)

_started_at = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info("Starting Chatwoot-OneUptime integration", version=settings.app_version)

    # Tests install their own services before entering the lifespan
    if getattr(app.state, "services", None) is None:
        app.state.services = build_services(settings)
    services: BridgeServices = app.state.services
    await services.start()

    yield

    # Shutdown
    try:
        await services.stop()
    except Exception as e:
        logger.warning("Error stopping background services", error=str(e))
    logger.info("Shutting down Chatwoot-OneUptime integration")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Creates OneUptime incidents from Chatwoot `/oncall` notes and syncs their status back.",
    lifespan=lifespan
)

# Include webhook router
app.include_router(webhook_router)


@app.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint."""
    services: BridgeServices = request.app.state.services

    oneuptime_connected = False
    try:
        await services.config_provider.get_config()
        oneuptime_connected = True
    except Exception as e:
        logger.warning("OneUptime config unavailable", error=str(e))

    return HealthResponse(
        status="ok",
        oneuptime_connected=oneuptime_connected,
        tracked_incidents=services.tracker.size(),
        uptime=time.monotonic() - _started_at
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug
    )
