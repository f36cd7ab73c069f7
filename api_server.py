"""
Hello Insights API Server

Module-level ASGI app for deployment:
  uvicorn api_server:app --host 0.0.0.0 --port $PORT

Reads ./config.yml (or $HELLO_INSIGHTS_CONFIG) at import time.
"""

from hello_insights.application import create_app
from hello_insights.config import load_settings
from hello_insights.logging_config import configure_logging

# ============================================
# App Configuration
# ============================================
configure_logging()
settings = load_settings()
configure_logging(settings.logging.level, settings.logging.format)

app = create_app(settings)
