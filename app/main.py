"""
Hello Socks - Main Application Entry Point

This module assembles the storefront: magic-link authentication routes,
the product category pages, a health check, and a last-resort handler
that turns unexpected failures into the error page.

Authentication is passwordless. Stytch emails the magic links and owns
the session tokens; the app only keeps the current token in a signed
cookie and checks it with Stytch on every request.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.responses import HTMLResponse

from app import pages
from app.auth.magic_link_router import router as magic_link_router
from app.core.config import get_settings
from app.products import router as products_router

settings = get_settings()
logger = logging.getLogger(__name__)

logging.basicConfig(
    level=settings.log_level.value,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info("Navigate to %s to see the Hello Socks app!", settings.full_address)
    if settings.use_whitelist:
        logger.info("Allow-list mode is on: only existing Stytch users can log in")
    if settings.magic_link_token_override is not None:
        logger.warning("Magic link token override is set; the token query parameter is ignored")
    yield


app = FastAPI(title="Hello Socks", lifespan=lifespan)


@app.get("/health", tags=["meta"])
def health_check():
    """Simple health check endpoint returning application status."""
    return {
        "status": "ok",
        "environment": settings.environment.value,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> HTMLResponse:
    logger.exception("Unhandled exception on %s %s: %s", request.method, request.url.path, exc)

    # Don't expose internal error details
    return HTMLResponse(
        pages.error(),
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


# Include magic-link authentication routes
app.include_router(magic_link_router, tags=["auth"])
app.include_router(products_router, tags=["products"])


def run() -> None:
    """Serve the app on the configured ADDRESS."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.value.lower(),
    )


if __name__ == "__main__":
    run()
