#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration, constants and logging setup for the news dashboard.

Settings are read from a YAML file with fallback to the DEFAULT_* constants
below. The NewsAPI key is only ever read from the environment.
"""

import os
import sys
import logging
from typing import Dict, Optional

import yaml

# ============================================================================
# LOGGING SETUP
# ============================================================================

LOG_FORMAT = '[%(levelname)s] %(message)s'


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging with appropriate format and level."""
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    return logging.getLogger('news_dashboard')


logger = logging.getLogger(__name__)

# ============================================================================
# CONSTANTS
# ============================================================================

# File paths
CONFIG_FILE = "_data/dashboard_config.yml"

# Upstream API
NEWSAPI_BASE_URL = "https://newsapi.org/v2"
ENDPOINT_EVERYTHING = "everything"
ENDPOINT_TOP_HEADLINES = "top-headlines"
ENV_VAR_NEWS_API_KEY = "NEWS_API_KEY"

# Default values (used if config file is missing)
DEFAULT_TIMEOUT_SECONDS = 15
DEFAULT_PAGE_SIZE = 20
DEFAULT_LANGUAGE = "en"
DEFAULT_CATEGORY = "technology"
DEFAULT_COUNTRY = "in"
DEFAULT_PAGE = 1

DEFAULT_CATEGORIES = [
    "technology",
    "business",
    "sports",
    "health",
    "science",
    "entertainment",
]

DEFAULT_COUNTRIES = [
    {"code": "in", "name": "India"},
    {"code": "us", "name": "United States"},
    {"code": "gb", "name": "United Kingdom"},
    {"code": "au", "name": "Australia"},
    {"code": "ca", "name": "Canada"},
]

# Keyword expansion used when top-headlines comes back empty
DEFAULT_CATEGORY_QUERIES = {
    "technology": "(technology OR AI OR gadgets OR programming)",
    "sports": "(cricket OR football OR olympics OR tennis OR IPL)",
    "business": "(business OR finance OR startup OR stock market)",
    "health": "(health OR doctor OR medicine OR fitness)",
    "science": "(science OR space OR NASA OR research)",
    "entertainment": "(movies OR bollywood OR hollywood OR netflix)",
}

# Infinite scroll
DEFAULT_SCROLL_DEBOUNCE_MS = 250
DEFAULT_SCROLL_THRESHOLD_PX = 300
DEFAULT_INITIAL_NEXT_PAGE = 2

# Server / client
DEFAULT_SERVER_HOST = "127.0.0.1"
DEFAULT_SERVER_PORT = 8080
DEFAULT_SERVER_DEBUG = False
DEFAULT_CLIENT_BASE_URL = "http://127.0.0.1:8080"

# Display placeholders
MSG_DEFAULT_DESCRIPTION = "No description"
MSG_EMPTY_TITLE = "No news found or API limit exceeded"
MSG_EMPTY_HINT = "Try changing search, category, or country. Please try again later."
MSG_NO_MORE_ARTICLES = "No more articles available for this selection."

# Log messages
MSG_INFO_LOADED_CONFIG = "Loaded configuration from {path}"
MSG_WARNING_CONFIG_NOT_FOUND = "Config file {path} not found, using defaults"
MSG_WARNING_CONFIG_ERROR = "Error loading config file: {error}, using defaults"
MSG_WARNING_NO_KEY_ENV = "No NEWS_API_KEY found in environment variables"
MSG_INFO_SET_KEY = "Set it with: export NEWS_API_KEY='your-key' (Linux/Mac)"
MSG_INFO_GET_KEY = "Get a free key at: https://newsapi.org/"

# ============================================================================
# CONFIGURATION LOADING
# ============================================================================


def load_config(path: Optional[str] = None) -> Dict:
    """Load configuration from YAML file with fallback to defaults."""
    config_path = path or CONFIG_FILE
    try:
        if os.path.exists(config_path):
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f) or {}
            if not isinstance(config, dict):
                logger.warning(MSG_WARNING_CONFIG_ERROR.format(error="top level is not a mapping"))
                return {}
            logger.info(MSG_INFO_LOADED_CONFIG.format(path=config_path))
            return config
        else:
            logger.warning(MSG_WARNING_CONFIG_NOT_FOUND.format(path=config_path))
            return {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(MSG_WARNING_CONFIG_ERROR.format(error=e))
        return {}


def get_config_value(config: Dict, path: str, default):
    """Safely get nested config value using dot notation (e.g., 'api.timeout_seconds')."""
    keys = path.split('.')
    value = config
    for key in keys:
        if isinstance(value, dict):
            value = value.get(key)
            if value is None:
                return default
        else:
            return default
    return value if value is not None else default


def get_api_key() -> str:
    """Read the NewsAPI key from the environment ('' when unset)."""
    return os.environ.get(ENV_VAR_NEWS_API_KEY, "").strip()


def get_category_queries(config: Dict) -> Dict[str, str]:
    """Keyword expansion table, with config entries overriding the defaults."""
    queries = dict(DEFAULT_CATEGORY_QUERIES)
    overrides = get_config_value(config, 'category_queries', {})
    if isinstance(overrides, dict):
        queries.update({str(k).lower(): str(v) for k, v in overrides.items()})
    return queries
