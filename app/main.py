from __future__ import annotations

import logging

from fastapi import FastAPI

from app.config import get_log_level, get_report_settings


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    logging.basicConfig(
        level=getattr(logging, get_log_level(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _configure_logging()

    settings = get_report_settings()
    logger = logging.getLogger(__name__)
    if settings.csv_path is None:
        logger.info("REPORT_CSV_PATH not set; GET report endpoints will return 404")
    else:
        logger.info("Serving reports from %s (timezone=%s)", settings.csv_path, settings.timezone)

    application = FastAPI(
        title="Offer Pulse API",
        version="1.0.0",
    )

    from app.api.routers import reports_router

    application.include_router(reports_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
