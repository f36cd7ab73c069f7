"""Hello Insights API - FastAPI demo service with Application Insights telemetry"""

__version__ = "1.0.0"
