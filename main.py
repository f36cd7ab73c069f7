"""
Hello Insights API Entry Point

  python main.py

Loads configuration, decides telemetry once, then serves on
server-host:server-port (default 0.0.0.0:8080).
"""

import logging
import sys

import uvicorn

from hello_insights.application import create_app
from hello_insights.config import load_settings
from hello_insights.errors import ConfigError
from hello_insights.logging_config import configure_logging

logger = logging.getLogger("hello_insights.main")


def main() -> int:
    configure_logging()
    try:
        settings = load_settings()
    except ConfigError as e:
        logger.error(f"Error loading configuration: {e}")
        return 1
    configure_logging(settings.logging.level, settings.logging.format)

    app = create_app(settings)

    address = f"{settings.server.host}:{settings.server.port}"
    state = "enabled" if app.state.telemetry.enabled else "disabled"
    logger.info(f"Server starting on {address} with Application Insights {state}")
    uvicorn.run(app, host=settings.server.host, port=settings.server.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
