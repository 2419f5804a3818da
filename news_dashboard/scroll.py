#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Infinite scroll controller.

Keeps the list of displayed articles and pulls further pages from /api/news
as the reader nears the bottom of the page:

    IDLE --trigger--> FETCHING --non-empty page--> IDLE
                               --empty page or error--> EXHAUSTED

EXHAUSTED is terminal. Triggers while FETCHING or EXHAUSTED are ignored,
so at most one fetch is ever outstanding and pages are requested strictly
in order. Articles are appended as received, duplicates included.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

from .config import (
    get_config_value,
    DEFAULT_SCROLL_DEBOUNCE_MS,
    DEFAULT_SCROLL_THRESHOLD_PX,
    DEFAULT_INITIAL_NEXT_PAGE,
)
from .proxy import extract_articles

logger = logging.getLogger(__name__)

MSG_ERROR_LOAD = "Load error"
MSG_INFO_EXHAUSTED = "No articles on page {page}, stopping infinite scroll"
MSG_INFO_APPENDED = "Appended {count} articles from page {page} ({total} total)"
MSG_DEBUG_LATE_RESPONSE = "Ignoring response for page {page}: controller closed"

FetchPage = Callable[[int], Awaitable[Optional[Dict]]]


class ScrollPhase(Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    EXHAUSTED = "exhausted"


@dataclass
class ScrollState:
    """Per-view scroll state. items only grows; EXHAUSTED is never left."""

    items: List[Dict] = field(default_factory=list)
    next_page: int = DEFAULT_INITIAL_NEXT_PAGE
    phase: ScrollPhase = ScrollPhase.IDLE

    @property
    def exhausted(self) -> bool:
        return self.phase is ScrollPhase.EXHAUSTED

    @property
    def in_flight(self) -> bool:
        return self.phase is ScrollPhase.FETCHING


@dataclass(frozen=True)
class Viewport:
    """Scroll geometry at the time of a scroll event, in pixels."""

    inner_height: float
    scroll_y: float
    document_height: float


@dataclass(frozen=True)
class PageResult:
    articles: List[Dict]
    failed: bool = False


def to_page_result(data: Optional[Dict], error: Optional[BaseException] = None) -> PageResult:
    """
    Map a fetch outcome onto a page result.

    A failed fetch and an empty page both produce no articles, and the
    controller treats them the same way. `failed` keeps the distinction
    available without changing that.
    """
    if error is not None:
        return PageResult(articles=[], failed=True)
    return PageResult(articles=extract_articles(data))


def is_near_bottom(viewport: Viewport, threshold_px: float = DEFAULT_SCROLL_THRESHOLD_PX) -> bool:
    """True when the bottom of the viewport is within threshold_px of the document end."""
    return viewport.inner_height + viewport.scroll_y >= viewport.document_height - threshold_px


class InfiniteScrollController:
    """
    Drives a ScrollState from debounced scroll events.

    fetch_page(page) is an async callable returning the /api/news body for
    that page; it may raise. Must be used from within a running event loop.
    """

    def __init__(self, initial_articles: Iterable[Dict], fetch_page: FetchPage, config: Optional[Dict] = None):
        config = config or {}
        self.fetch_page = fetch_page
        self.state = ScrollState(
            items=list(initial_articles),
            next_page=get_config_value(config, 'scroll.initial_next_page', DEFAULT_INITIAL_NEXT_PAGE),
        )
        self.debounce_seconds = get_config_value(config, 'scroll.debounce_ms', DEFAULT_SCROLL_DEBOUNCE_MS) / 1000.0
        self.threshold_px = get_config_value(config, 'scroll.threshold_px', DEFAULT_SCROLL_THRESHOLD_PX)
        self.closed = False
        self._timer: Optional[asyncio.TimerHandle] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def items(self) -> List[Dict]:
        return self.state.items

    async def load_more(self) -> bool:
        """
        Fetch the next page if IDLE. Returns True when articles were appended.
        """
        if self.closed or self.state.phase is not ScrollPhase.IDLE:
            return False

        self.state.phase = ScrollPhase.FETCHING
        page = self.state.next_page
        data, error = None, None
        try:
            data = await self.fetch_page(page)
        except Exception as e:
            logger.error(f"{MSG_ERROR_LOAD}: {e}")
            error = e

        if self.closed:
            logger.debug(MSG_DEBUG_LATE_RESPONSE.format(page=page))
            return False

        result = to_page_result(data, error)
        if not result.articles:
            logger.info(MSG_INFO_EXHAUSTED.format(page=page))
            self.state.phase = ScrollPhase.EXHAUSTED
            return False

        self.state.items.extend(result.articles)
        self.state.next_page += 1
        self.state.phase = ScrollPhase.IDLE
        logger.info(MSG_INFO_APPENDED.format(count=len(result.articles), page=page, total=len(self.state.items)))
        return True

    def request_load(self) -> Optional[asyncio.Task]:
        """Schedule load_more unless a fetch is pending or the list is exhausted."""
        if self.closed or self.state.phase is not ScrollPhase.IDLE:
            return None
        if self._task is not None and not self._task.done():
            return self._task
        self._task = asyncio.get_running_loop().create_task(self.load_more())
        return self._task

    def on_scroll(self, viewport: Viewport) -> None:
        """Restart the debounce timer; only the last event of a burst is evaluated."""
        if self.closed:
            return
        if self._timer is not None:
            self._timer.cancel()
        self._timer = asyncio.get_running_loop().call_later(self.debounce_seconds, self._evaluate, viewport)

    def _evaluate(self, viewport: Viewport) -> None:
        self._timer = None
        if is_near_bottom(viewport, self.threshold_px):
            self.request_load()

    async def drain(self) -> None:
        """Wait for the outstanding fetch, if any."""
        if self._task is not None:
            await self._task

    def close(self) -> None:
        """Stop reacting to scroll events and drop any response still in flight."""
        self.closed = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
