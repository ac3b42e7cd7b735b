"""Application entry point for the EduPortal API."""

from __future__ import annotations

from eduportal.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from eduportal.core.portal_manager import PortalManager
from eduportal.server.api_server import run_api_server
from eduportal.utils.logging_config import configure_logging


def main() -> None:
    """Initialize logging, load demo data and serve the API."""
    logger = configure_logging()
    logger.info("Starting EduPortal API…")

    portal_manager = PortalManager()
    portal_manager.seed_demo_data()
    logger.info("Serving on http://%s:%d/", DEFAULT_HOST, DEFAULT_PORT)
    run_api_server(portal_manager=portal_manager, host=DEFAULT_HOST, port=DEFAULT_PORT)


if __name__ == "__main__":
    main()
