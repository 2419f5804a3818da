#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HTTP client for the dashboard's own /api/news endpoint.

This is what the infinite scroll controller talks to. Unlike the proxy it
does not hide failures: transport and HTTP errors are raised and the
controller decides what they mean.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional

import requests

from .config import (
    get_config_value,
    DEFAULT_CLIENT_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)

NEWS_PATH = "/api/news"


class DashboardClient:
    """Thin requests wrapper around GET /api/news."""

    def __init__(self, base_url: str = DEFAULT_CLIENT_BASE_URL, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: Dict) -> "DashboardClient":
        return cls(
            base_url=get_config_value(config, 'client.base_url', DEFAULT_CLIENT_BASE_URL),
            timeout=get_config_value(config, 'client.timeout_seconds', DEFAULT_TIMEOUT_SECONDS),
        )

    def get_news(self, category: str, country: str, page: int, search: str = "") -> Dict:
        """Fetch one page. Raises requests.RequestException or ValueError on failure."""
        params = {
            "category": category,
            "country": country,
            "page": page,
            "search": search,
        }
        logger.debug(f"GET {self.base_url}{NEWS_PATH} params={params}")
        response = requests.get(f"{self.base_url}{NEWS_PATH}", params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()


def make_page_fetcher(client: DashboardClient, category: str, country: str,
                      search: str = "") -> Callable[[int], Awaitable[Optional[Dict]]]:
    """
    Bind a client and a selection into the async fetch_page(page) callable
    used by InfiniteScrollController. The blocking request runs in a worker
    thread so the event loop keeps handling scroll events.
    """
    async def fetch_page(page: int) -> Optional[Dict]:
        return await asyncio.to_thread(client.get_news, category, country, page, search)

    return fetch_page
