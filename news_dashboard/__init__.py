#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
News dashboard: a filterable, paginated front end for NewsAPI.

Serves a JSON proxy (/api/news) and a server-rendered page (/news/<category>)
with infinite scroll. Can be run with: python -m news_dashboard
"""

import sys
import logging
import traceback

from .config import (
    setup_logging,
    load_config,
    get_config_value,
    get_api_key,
    DEFAULT_SERVER_HOST,
    DEFAULT_SERVER_PORT,
    DEFAULT_SERVER_DEBUG,
    MSG_WARNING_NO_KEY_ENV,
    MSG_INFO_SET_KEY,
    MSG_INFO_GET_KEY,
)
from .app import create_app
from .client import DashboardClient, make_page_fetcher
from .scroll import (
    InfiniteScrollController,
    PageResult,
    ScrollPhase,
    ScrollState,
    Viewport,
    is_near_bottom,
    to_page_result,
)

__version__ = "1.0.0"

__all__ = [
    "create_app",
    "main",
    "run_cli",
    "DashboardClient",
    "make_page_fetcher",
    "InfiniteScrollController",
    "PageResult",
    "ScrollPhase",
    "ScrollState",
    "Viewport",
    "is_near_bottom",
    "to_page_result",
]

logger = logging.getLogger(__name__)

MSG_INFO_STARTING = "Starting news dashboard on http://{host}:{port}"
MSG_INFO_INTERRUPTED = "Interrupted by user"
MSG_FATAL_ERROR = "FATAL ERROR"
MSG_ERROR_UNEXPECTED_MAIN = "Unexpected error in main"


def main():
    """Load configuration and serve the dashboard."""
    setup_logging()
    config = load_config()

    if not get_api_key():
        logger.warning(MSG_WARNING_NO_KEY_ENV)
        logger.info(MSG_INFO_SET_KEY)
        logger.info(MSG_INFO_GET_KEY)

    host = get_config_value(config, 'server.host', DEFAULT_SERVER_HOST)
    port = get_config_value(config, 'server.port', DEFAULT_SERVER_PORT)
    debug = get_config_value(config, 'server.debug', DEFAULT_SERVER_DEBUG)

    app = create_app(config)
    logger.info(MSG_INFO_STARTING.format(host=host, port=port))
    app.run(host=host, port=port, debug=debug)


def run_cli():
    """Entry point wrapper that handles CLI execution and exit codes."""
    try:
        main()
        sys.exit(0)
    except KeyboardInterrupt:
        logger.info(f"\n{MSG_INFO_INTERRUPTED}")
        sys.exit(1)
    except Exception as e:
        logger.critical(f"\n{MSG_FATAL_ERROR}: {MSG_ERROR_UNEXPECTED_MAIN}: {e}")
        logger.critical(traceback.format_exc())
        sys.exit(1)

