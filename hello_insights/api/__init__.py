"""Hello Insights API v1"""

from .router import router as api_router, get_settings

__all__ = ["api_router", "get_settings"]
