"""
Dependencies for market data endpoints.
"""

from fastapi import Request

from ...services.data_manager.manager import MarketDataManager


def get_data_manager(request: Request) -> MarketDataManager:
    """Get the process-wide MarketDataManager from app state."""
    data_manager: MarketDataManager = request.app.state.data_manager
    return data_manager
