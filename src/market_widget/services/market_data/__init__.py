"""
Upstream market data providers.

This module is organized into the following components:
- base: HTTP client, API key check and error translation for REST providers
- metals: metals-api gold/silver spot prices
- yahoo: Yahoo Finance index quotes and monthly history (yfinance)
- news: NewsAPI feeds and their definitions
"""

from .base import RESTProviderBase
from .metals import MetalsAPIClient
from .news import NewsAPIClient, NewsFeed
from .yahoo import YahooFinanceClient

__all__ = [
    "RESTProviderBase",
    "MetalsAPIClient",
    "NewsAPIClient",
    "NewsFeed",
    "YahooFinanceClient",
]
