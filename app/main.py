"""
FastAPI application entry point.
"""

from fastapi import Depends, FastAPI

from app.config import settings
from app.middleware.logging import RequestLoggingMiddleware
from app.api import auth, webhooks
from app.api.dependencies import get_forge_client, get_oauth_session
from app.models.api_response import HealthResponse
from app.services.oauth_session import OAuthSession
from app.utils.logging import setup_logging, get_logger

VERSION = "0.1.0"

# Configure structured logging
setup_logging(settings.log_level)

logger = get_logger(__name__)

# Create FastAPI application
app = FastAPI(
    title="PR Ticket Linker",
    description="Links GitHub pull requests to JIRA tickets named in their titles",
    version=VERSION
)

# Add request logging middleware
app.add_middleware(RequestLoggingMiddleware)


@app.get("/health", response_model=HealthResponse)
def health_check(oauth_session: OAuthSession = Depends(get_oauth_session)) -> HealthResponse:
    """Health check endpoint for container orchestration."""
    return HealthResponse(
        status="healthy",
        version=VERSION,
        authenticated=oauth_session.is_authenticated(),
    )


# Include API routers
app.include_router(auth.router)
app.include_router(webhooks.router)


@app.on_event("startup")
async def startup_event():
    """Build the shared clients so a stored OAUTH_TOKEN is restored at boot."""
    logger.info("Starting PR Ticket Linker")
    oauth_session = get_oauth_session()
    get_forge_client()
    if not settings.client_id or not settings.client_secret:
        logger.warning("CLIENT_ID or CLIENT_SECRET is not set, /login will fail")
    logger.info(
        "OAuth session ready",
        extra={"authenticated": oauth_session.is_authenticated()},
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Close outbound HTTP clients."""
    logger.info("Shutting down PR Ticket Linker")
    if get_oauth_session.cache_info().currsize:
        get_oauth_session().close()
    if get_forge_client.cache_info().currsize:
        get_forge_client().close()


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Started running on http://{settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)
