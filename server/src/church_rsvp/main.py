#!/usr/bin/env python3
"""Church RSVP - Registration workflow server"""

import logging

import uvicorn
from fastapi import FastAPI
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from church_rsvp.config import config
from church_rsvp.logging_config import setup_logging
from church_rsvp.routers.health import health
from church_rsvp.routers.registration import router as registration_router
from church_rsvp.routers.subjects import router as subjects_router

# Configure logging (INFO -> stdout, WARNING/ERROR -> stderr)
setup_logging()
logger = logging.getLogger(__name__)


# Create FastAPI app
app = FastAPI(
    title="Church RSVP",
    description="Event RSVPs, home group registrations and serving sign-ups with operator review and email notifications",
    version="1.0.0",
)

# Trust proxy headers so request.url.scheme reflects the original protocol
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

# Include routers
app.include_router(health)
app.include_router(subjects_router)
app.include_router(registration_router)


if __name__ == "__main__":
    port = config["app_port"]
    logger.info(f"Starting Church RSVP on 0.0.0.0:{port}")
    logger.info("Health check available at /health")

    try:
        uvicorn.run(
            app, host="0.0.0.0", port=port, log_level=config["log_level"].lower()
        )
    except Exception as e:
        logger.error(f"Failed to start server: {e}")
        raise
