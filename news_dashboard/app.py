#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Flask application: JSON proxy endpoint and the server-rendered dashboard.

  GET /                   -> redirect to /news/<default category>
  GET /api/news           -> upstream body for category/country/page/search
  GET /news/<category>    -> paginated page with filters and search
"""

import logging
from typing import Dict, Optional

from flask import Flask, jsonify, redirect, render_template, request, url_for

from .config import (
    get_config_value,
    get_api_key,
    load_config,
    DEFAULT_CATEGORY,
    DEFAULT_COUNTRY,
    DEFAULT_PAGE,
    DEFAULT_CATEGORIES,
    DEFAULT_COUNTRIES,
    DEFAULT_SCROLL_DEBOUNCE_MS,
    DEFAULT_SCROLL_THRESHOLD_PX,
    DEFAULT_INITIAL_NEXT_PAGE,
    MSG_DEFAULT_DESCRIPTION,
    MSG_EMPTY_TITLE,
    MSG_EMPTY_HINT,
    MSG_NO_MORE_ARTICLES,
)
from .proxy import fetch_news, extract_articles

logger = logging.getLogger(__name__)

PAGE_TITLE = "SSR News Dashboard"
PAGE_DESCRIPTION = "Server-side rendered news dashboard with category, country filters and search."

MSG_INFO_REQUEST = "{path}: category={category} country={country} page={page} search='{search}'"


def parse_page(value: Optional[str]) -> int:
    """Page number from a query string value; anything unusable becomes 1."""
    try:
        page = int(value) if value is not None else DEFAULT_PAGE
    except (TypeError, ValueError):
        return DEFAULT_PAGE
    return max(page, 1)


def _selection(config: Dict, category: Optional[str] = None) -> Dict:
    """Read country/page/search (and category when not in the path) from the query string."""
    default_category = get_config_value(config, 'defaults.category', DEFAULT_CATEGORY)
    default_country = get_config_value(config, 'defaults.country', DEFAULT_COUNTRY)
    if category is None:
        category = request.args.get("category") or default_category
    sel = {
        "category": category,
        "country": request.args.get("country") or default_country,
        "page": parse_page(request.args.get("page")),
        "search": request.args.get("search", "").strip(),
    }
    logger.info(MSG_INFO_REQUEST.format(path=request.path, **sel))
    return sel


def create_app(config: Optional[Dict] = None) -> Flask:
    """Application factory. Loads the YAML config when none is given."""
    app = Flask(__name__, template_folder="templates", static_folder="static")
    app.config["DASHBOARD"] = load_config() if config is None else config

    @app.route("/")
    def index():
        category = get_config_value(app.config["DASHBOARD"], 'defaults.category', DEFAULT_CATEGORY)
        return redirect(url_for("news_page", category=category))

    @app.route("/api/news")
    def api_news():
        cfg = app.config["DASHBOARD"]
        sel = _selection(cfg)
        data = fetch_news(sel["category"], sel["country"], sel["page"], sel["search"], cfg, get_api_key())
        return jsonify(data)

    @app.route("/news/<category>")
    def news_page(category: str):
        cfg = app.config["DASHBOARD"]
        sel = _selection(cfg, category=category.lower())
        data = fetch_news(sel["category"], sel["country"], sel["page"], sel["search"], cfg, get_api_key())

        return render_template(
            "news.html",
            title=PAGE_TITLE,
            description=PAGE_DESCRIPTION,
            articles=extract_articles(data),
            categories=get_config_value(cfg, 'categories', DEFAULT_CATEGORIES),
            countries=get_config_value(cfg, 'countries', DEFAULT_COUNTRIES),
            scroll={
                "debounceMs": get_config_value(cfg, 'scroll.debounce_ms', DEFAULT_SCROLL_DEBOUNCE_MS),
                "thresholdPx": get_config_value(cfg, 'scroll.threshold_px', DEFAULT_SCROLL_THRESHOLD_PX),
                "nextPage": get_config_value(cfg, 'scroll.initial_next_page', DEFAULT_INITIAL_NEXT_PAGE),
                "category": sel["category"],
                "country": sel["country"],
                "search": sel["search"],
                "defaultDescription": MSG_DEFAULT_DESCRIPTION,
            },
            default_description=MSG_DEFAULT_DESCRIPTION,
            empty_title=MSG_EMPTY_TITLE,
            empty_hint=MSG_EMPTY_HINT,
            no_more=MSG_NO_MORE_ARTICLES,
            **sel,
        )

    return app
