"""Market widget API - cached aggregation proxy for the dashboard client."""

__version__ = "0.1.0"
