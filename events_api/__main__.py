"""Main entry point for the Events API."""

import argparse
import logging
import os
import sys

import uvicorn
from dotenv import load_dotenv

from events_api.models.config import EventsApiConfig


logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging for the service."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )
    # Reduce verbosity of the driver's own logging
    logging.getLogger("pymongo").setLevel(logging.WARNING)


def main(argv=None):
    """Run the HTTP server."""
    load_dotenv()

    config = EventsApiConfig()

    parser = argparse.ArgumentParser(description="Events API - HTTP service for event records")
    parser.add_argument("--host", default=config.http_host, help="Interface to bind (default: %(default)s)")
    parser.add_argument("--port", type=int, default=config.http_port, help="Port to listen on (default: %(default)s)")
    parser.add_argument("--reload", action="store_true",
                        default=os.getenv("DEBUG", "false").lower() == "true",
                        help="Reload on code changes")
    args = parser.parse_args(argv)

    configure_logging(config.log_level)

    if not config.mongodb_url:
        logger.error("MONGODB_URL environment variable is required")
        sys.exit(1)

    logger.info(f"Starting HTTP server on http://{args.host}:{args.port}")

    uvicorn.run(
        "events_api.http_server:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
