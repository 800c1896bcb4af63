"""FastAPI application entry point.

Run with ``uvicorn real_ip.app:app``.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from real_ip.api.ip import router as ip_router
from real_ip.configs.config import get_logging_config, get_trusted_proxies
from real_ip.infra.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Parse the trusted proxies up front so bad config fails at startup."""
    trusted_proxies = get_trusted_proxies()
    if not trusted_proxies:
        logger.warning("No trusted proxies configured - forwarding headers are ignored")
    else:
        logger.info(
            "Loaded trusted proxies",
            extra={"trusted_proxies": [str(net) for net in trusted_proxies]},
        )

    yield


def get_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    setup_logging(get_logging_config())

    app = FastAPI(
        title="real-ip",
        description="Real client IP resolution behind trusted reverse proxies",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(ip_router)

    return app


app = get_app()
