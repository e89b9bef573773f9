import os
import sys
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from config.settings import Settings, get_settings
from core.infrastructure.http_client import close_http_client, init_http_client
from core.metadata import SERVICE_NAME, VERSION
from exceptions.custom_exceptions import ConfigurationException

logger = structlog.get_logger(__name__)

STARTUP_BANNER = """
╔══════════════════════════════════════════════╗
║  {service} v{version}
║  Python {python} | env: {env} | {log_level}
║  Pipedream {pipedream_env} | Google Ads {api_version}
╚══════════════════════════════════════════════╝"""

SHUTDOWN_BANNER = """
╔══════════════════════════════════════════════╗
║  {service} v{version} shutting down
╚══════════════════════════════════════════════╝"""


def check_configuration(settings: Settings) -> None:
    """Refuse to start without Pipedream credentials."""
    try:
        settings.validate()
    except ConfigurationException as e:
        logger.error("Invalid configuration", component="config", **e.details)
        raise


def announce_startup(settings: Settings) -> None:
    environment = os.getenv("ENVIRONMENT", "local")
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    python_version = sys.version.split()[0]

    print(
        STARTUP_BANNER.format(
            service=SERVICE_NAME,
            version=VERSION,
            python=python_version,
            env=environment,
            log_level=log_level,
            pipedream_env=settings.pipedream_environment,
            api_version=settings.google_ads_api_version,
        )
    )
    logger.info(
        "Service started",
        version=VERSION,
        python=python_version,
        log_level=log_level,
        pipedream_environment=settings.pipedream_environment,
        google_ads_api_version=settings.google_ads_api_version,
        poll_interval_ms=settings.batch_job_poll_interval_ms,
        max_poll_attempts=settings.batch_job_max_poll_attempts,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    check_configuration(settings)

    init_http_client()
    logger.info("HTTP client initialized", component="http")
    try:
        announce_startup(settings)
        yield
    finally:
        print(SHUTDOWN_BANNER.format(service=SERVICE_NAME, version=VERSION))
        logger.info("Service shutting down", version=VERSION)
        await close_http_client()
        logger.info("HTTP client closed", component="http")
