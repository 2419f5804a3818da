"""
Tests for the Flask routes.
"""
import os
import sys
import logging
import pytest
from unittest.mock import Mock, patch

# Add parent directory to path to import news_dashboard
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from news_dashboard.app import create_app, parse_page


def _ok(data):
    mock_response = Mock()
    mock_response.json.return_value = data
    mock_response.raise_for_status = Mock()
    return mock_response


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("NEWS_API_KEY", "test-key")
    app = create_app({})
    app.config["TESTING"] = True
    return app.test_client()


class TestParsePage:
    """Test page parameter parsing."""

    @pytest.mark.parametrize("value,expected", [
        (None, 1), ("1", 1), ("7", 7), ("0", 1), ("-3", 1), ("abc", 1), ("", 1),
    ])
    def test_parse_page(self, value, expected):
        """Test invalid and out of range pages become 1."""
        assert parse_page(value) == expected


class TestApiNews:
    """Test the JSON proxy endpoint."""

    @patch('news_dashboard.proxy.requests.get')
    def test_defaults(self, mock_get, client):
        """Test defaults technology/in/1/empty and verbatim passthrough."""
        body = {"status": "ok", "totalResults": 1, "articles": [{"title": "t"}]}
        mock_get.return_value = _ok(body)

        response = client.get("/api/news")

        assert response.status_code == 200
        assert response.get_json() == body
        params = mock_get.call_args[1]["params"]
        assert params["category"] == "technology"
        assert params["country"] == "in"
        assert params["page"] == 1
        assert mock_get.call_args[0][0].endswith("/top-headlines")

    @patch('news_dashboard.proxy.requests.get')
    def test_search_param(self, mock_get, client):
        """Test a search parameter routes to the everything endpoint."""
        mock_get.return_value = _ok({"articles": []})

        client.get("/api/news?category=science&country=us&page=2&search=cricket")

        assert mock_get.call_count == 1
        assert mock_get.call_args[0][0].endswith("/everything")
        params = mock_get.call_args[1]["params"]
        assert params["q"] == "cricket"
        assert params["page"] == 2

    @patch('news_dashboard.proxy.requests.get')
    def test_failure_is_empty_list(self, mock_get, client):
        """Test upstream failure surfaces as an empty article list."""
        import requests
        mock_get.side_effect = requests.exceptions.ConnectionError("down")

        response = client.get("/api/news?page=3")

        assert response.status_code == 200
        assert response.get_json() == {"articles": []}

    @patch('news_dashboard.proxy.requests.get')
    def test_missing_key(self, mock_get, monkeypatch):
        """Test no upstream call is made without NEWS_API_KEY."""
        monkeypatch.delenv("NEWS_API_KEY", raising=False)
        app = create_app({})

        response = app.test_client().get("/api/news")

        assert response.get_json() == {"articles": []}
        mock_get.assert_not_called()


class TestNewsPage:
    """Test the server-rendered page."""

    @patch('news_dashboard.proxy.requests.get')
    def test_renders_articles(self, mock_get, client):
        """Test article cards, placeholders and head metadata."""
        mock_get.return_value = _ok({"articles": [
            {"title": "Rover lands", "description": "It landed.", "url": "https://example.com/rover",
             "urlToImage": "https://example.com/rover.jpg"},
            {"title": "Untitled description"},
        ]})

        response = client.get("/news/science")
        html = response.get_data(as_text=True)

        assert response.status_code == 200
        assert "<title>SSR News Dashboard</title>" in html
        assert "Rover lands" in html
        assert "It landed." in html
        assert "https://example.com/rover.jpg" in html
        assert "No description" in html
        assert "infinite_scroll.js" in html
        assert "← Previous" not in html
        assert "Next →" in html

    @patch('news_dashboard.proxy.requests.get')
    def test_category_is_lowercased(self, mock_get, client):
        """Test the path category is normalised before querying."""
        mock_get.return_value = _ok({"articles": [{"title": "x"}]})

        client.get("/news/Science?country=gb")

        params = mock_get.call_args[1]["params"]
        assert params["category"] == "science"
        assert params["country"] == "gb"

    @patch('news_dashboard.proxy.requests.get')
    def test_empty_state(self, mock_get, client):
        """Test the generic empty message when nothing comes back."""
        mock_get.return_value = _ok({"articles": []})

        html = client.get("/news/technology").get_data(as_text=True)

        assert "No news found or API limit exceeded" in html
        assert "infinite_scroll.js" not in html
        # Headlines empty, so the keyword fallback was queried too.
        assert mock_get.call_count == 2

    @patch('news_dashboard.proxy.requests.get')
    def test_pagination_links(self, mock_get, client):
        """Test Previous appears past page 1 and links carry the selection."""
        mock_get.return_value = _ok({"articles": [{"title": "x"}]})

        html = client.get("/news/business?page=3&country=us").get_data(as_text=True)

        assert "← Previous" in html
        assert "page=2" in html
        assert "page=4" in html
        assert "Page: <b>3</b>" in html
        assert '"nextPage": 2' in html
        assert '"nextPage": 4' not in html

    def test_index_redirects(self, client):
        """Test / redirects to the default category."""
        response = client.get("/")

        assert response.status_code == 302
        assert response.headers["Location"].endswith("/news/technology")

    @patch('news_dashboard.proxy.requests.get')
    def test_scroll_start_page_from_config(self, mock_get, monkeypatch):
        """Test the browser controller starts at scroll.initial_next_page."""
        monkeypatch.setenv("NEWS_API_KEY", "test-key")
        mock_get.return_value = _ok({"articles": [{"title": "x"}]})
        app = create_app({"scroll": {"initial_next_page": 5}})

        html = app.test_client().get("/news/technology?page=2").get_data(as_text=True)

        assert '"nextPage": 5' in html


class TestSelection:
    """Test query string handling and request logging."""

    @patch('news_dashboard.proxy.requests.get')
    def test_empty_params_use_defaults(self, mock_get, client):
        """Test explicit empty category/country fall back to the defaults."""
        mock_get.return_value = _ok({"articles": [{"title": "x"}]})

        client.get("/api/news?category=&country=&search=")

        params = mock_get.call_args[1]["params"]
        assert params["category"] == "technology"
        assert params["country"] == "in"

    @patch('news_dashboard.proxy.requests.get')
    def test_request_selection_is_logged(self, mock_get, client, caplog):
        """Test each request logs its resolved selection."""
        mock_get.return_value = _ok({"articles": [{"title": "x"}]})

        with caplog.at_level(logging.INFO, logger="news_dashboard.app"):
            client.get("/api/news?category=sports&country=us&page=3&search=cricket")

        assert "/api/news: category=sports country=us page=3 search='cricket'" in caplog.text
