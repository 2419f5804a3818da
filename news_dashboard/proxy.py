#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Paginated fetch proxy in front of NewsAPI.

Given category/country/page/search, builds either a full-text "everything"
query or a "top-headlines" query (with a category keyword fallback when the
headlines come back empty) and returns the upstream JSON unmodified.

Any failure is reported to the caller as an empty article list, so
"upstream had nothing" and "upstream errored" look the same from outside.
"""

import time
import logging
from typing import Dict, List, Optional, Tuple

import requests

from .config import (
    get_config_value,
    get_category_queries,
    NEWSAPI_BASE_URL,
    ENDPOINT_EVERYTHING,
    ENDPOINT_TOP_HEADLINES,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_PAGE_SIZE,
    DEFAULT_LANGUAGE,
)

logger = logging.getLogger(__name__)

MSG_ERROR_HTTP = "HTTP error in request"
MSG_ERROR_STATUS_CODE = "Status code"
MSG_ERROR_REQUEST = "Request error"
MSG_ERROR_INVALID_JSON = "Upstream returned a body that is not valid JSON"
MSG_ERROR_API_RESPONSE = "API error response"
MSG_WARNING_RATE_LIMIT = "Rate limit detected (HTTP {status_code}), returning no articles"
MSG_WARNING_NO_API_KEY = "No API key provided. Skipping NewsAPI fetch"
MSG_INFO_FALLBACK = "No headlines for category '{category}' in '{country}', falling back to query {query}"
MSG_DEBUG_FETCHING = "Fetching {endpoint} page {page} with params: {params}"
MSG_INFO_FETCHED = "{endpoint} page {page}: {count} articles in {ms:.0f}ms"

RATE_LIMIT_CODES = ('ratelimited', 'ratelimitexceeded', 'toomanyrequests', 'quotaexceeded')

# ============================================================================
# QUERY CONSTRUCTION
# ============================================================================


def build_search_params(search: str, page: int, api_key: str, config: Dict) -> Dict:
    """Parameters for a full-text query against the everything endpoint."""
    return {
        "q": search,
        "language": get_config_value(config, 'api.language', DEFAULT_LANGUAGE),
        "pageSize": get_config_value(config, 'api.page_size', DEFAULT_PAGE_SIZE),
        "page": page,
        "apiKey": api_key,
    }


def build_headlines_params(category: str, country: str, page: int, api_key: str, config: Dict) -> Dict:
    """Parameters for a top-headlines query filtered by country and category."""
    return {
        "country": country,
        "category": category,
        "pageSize": get_config_value(config, 'api.page_size', DEFAULT_PAGE_SIZE),
        "page": page,
        "apiKey": api_key,
    }


def get_fallback_query(category: str, config: Dict) -> str:
    """
    Keyword expression used when top-headlines is empty.
    Categories without an expansion are searched for literally.
    """
    return get_category_queries(config).get(category, category)


def endpoint_url(endpoint: str, config: Dict) -> str:
    base_url = get_config_value(config, 'api.base_url', NEWSAPI_BASE_URL)
    return f"{base_url.rstrip('/')}/{endpoint}"


def extract_articles(data: Optional[Dict]) -> List[Dict]:
    """Article list of a response, [] for anything that is not a usable list."""
    if not isinstance(data, dict):
        return []
    articles = data.get("articles")
    return articles if isinstance(articles, list) else []

# ============================================================================
# API REQUEST HANDLING
# ============================================================================


def _error_body(http_err: requests.exceptions.HTTPError) -> Optional[Dict]:
    """JSON object carried by a non-2xx response, None when there is none."""
    if http_err.response is None:
        return None
    try:
        error_data = http_err.response.json()
    except ValueError:
        return None
    return error_data if isinstance(error_data, dict) else None


def _is_rate_limit_error(status_code: Optional[int], error_data: Optional[Dict]) -> bool:
    """Check whether an HTTP error is NewsAPI telling us the quota is used up."""
    if status_code == 429:
        return True
    if not error_data:
        return False
    return str(error_data.get('code', '')).lower() in RATE_LIMIT_CODES


def make_api_request(url: str, params: Dict, config: Dict) -> Tuple[Optional[Dict], float, bool, bool]:
    """
    Make a single upstream request.
    Returns (response_data, response_time_ms, success, responded).
    response_data is None whenever success is False. responded is True when
    the upstream answered with a readable JSON body, even a non-2xx one;
    it is False for transport errors and unparseable bodies.
    """
    timeout = get_config_value(config, 'api.timeout_seconds', DEFAULT_TIMEOUT_SECONDS)
    start_time = time.time()

    try:
        response = requests.get(url, params=params, timeout=timeout)
        response_time_ms = (time.time() - start_time) * 1000
        response.raise_for_status()
        return response.json(), response_time_ms, True, True
    except requests.exceptions.HTTPError as http_err:
        response_time_ms = (time.time() - start_time) * 1000
        status_code = http_err.response.status_code if http_err.response is not None else None
        error_data = _error_body(http_err)

        if _is_rate_limit_error(status_code, error_data):
            logger.warning(MSG_WARNING_RATE_LIMIT.format(status_code=status_code))
        else:
            logger.error(f"{MSG_ERROR_HTTP}: {http_err}")
            if status_code:
                logger.error(f"{MSG_ERROR_STATUS_CODE}: {status_code}")
        if error_data is not None:
            logger.error(f"{MSG_ERROR_API_RESPONSE}: {error_data}")
        return None, response_time_ms, False, error_data is not None
    except requests.exceptions.RequestException as req_err:
        response_time_ms = (time.time() - start_time) * 1000
        logger.error(f"{MSG_ERROR_REQUEST}: {req_err}")
        return None, response_time_ms, False, False
    except ValueError as json_err:
        response_time_ms = (time.time() - start_time) * 1000
        logger.error(f"{MSG_ERROR_INVALID_JSON}: {json_err}")
        return None, response_time_ms, False, False


def _fetch_endpoint(endpoint: str, params: Dict, config: Dict) -> Tuple[Optional[Dict], bool]:
    """Returns (data, responded); see make_api_request."""
    safe_params = {k: v for k, v in params.items() if k != "apiKey"}
    logger.debug(MSG_DEBUG_FETCHING.format(endpoint=endpoint, page=params.get("page"), params=safe_params))

    data, response_time_ms, success, responded = make_api_request(endpoint_url(endpoint, config), params, config)
    if not success:
        return None, responded

    logger.info(MSG_INFO_FETCHED.format(
        endpoint=endpoint,
        page=params.get("page"),
        count=len(extract_articles(data)),
        ms=response_time_ms,
    ))
    return data, True



# ============================================================================
# PROXY ENTRY POINT
# ============================================================================


def fetch_news(category: str, country: str, page: int, search: str, config: Dict, api_key: str) -> Dict:
    """
    Fetch one page of news.

    A non-empty search always goes to the everything endpoint. Otherwise
    top-headlines is tried first and, when it yields no articles, the
    everything endpoint is queried with the category's keyword expansion.
    A headlines call that fails outright (transport error, unreadable body)
    ends the request without a fallback; a non-2xx JSON error body counts as
    a page with no articles.
    The upstream body is returned verbatim; failures become {"articles": []}.
    """
    if not api_key:
        logger.warning(MSG_WARNING_NO_API_KEY)
        return {"articles": []}

    if search:
        data, _ = _fetch_endpoint(ENDPOINT_EVERYTHING, build_search_params(search, page, api_key, config), config)
        return data if isinstance(data, dict) else {"articles": []}

    data, responded = _fetch_endpoint(
        ENDPOINT_TOP_HEADLINES,
        build_headlines_params(category, country, page, api_key, config),
        config,
    )
    if not responded:
        return {"articles": []}

    if not extract_articles(data):
        query = get_fallback_query(category, config)
        logger.info(MSG_INFO_FALLBACK.format(category=category, country=country, query=query))
        data, _ = _fetch_endpoint(ENDPOINT_EVERYTHING, build_search_params(query, page, api_key, config), config)

    return data if isinstance(data, dict) else {"articles": []}
