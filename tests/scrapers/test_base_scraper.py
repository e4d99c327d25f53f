"""
Coupon Scraper - Unit Tests for BaseScraper

Tests for the abstract base scraper class functionality including:
- Initialization and configuration
- Session management
- Request handling and fetch errors
- The fetch -> parse -> dedupe -> active filter pipeline
- Statistics tracking

Run with: pytest tests/scrapers/test_base_scraper.py -v
"""

import pytest
import requests
from unittest.mock import Mock, patch
from bs4 import BeautifulSoup

import sys

sys.path.insert(0, "src")

from coupon_scraper.config import GENSHIN
from coupon_scraper.schema import CouponRecord, CouponStatus
from coupon_scraper.scrapers.base_scraper import BaseScraper, PageFetchError


class ConcreteScraper(BaseScraper):
    """Concrete implementation of BaseScraper for testing purposes."""

    SOURCE = GENSHIN

    def __init__(self, parsed=None, **kwargs):
        super().__init__(**kwargs)
        self.parsed = parsed or []

    def get_source_name(self):
        return "TestSource"

    def parse_coupons(self, soup):
        return list(self.parsed)


@pytest.fixture
def scraper():
    """Provides a basic scraper instance with default settings."""
    return ConcreteScraper()


@pytest.fixture
def mock_successful_response():
    """Provides a mock successful HTTP response."""
    mock = Mock()
    mock.status_code = 200
    mock.content = b"<html><body><h1>Test Page</h1></body></html>"
    mock.raise_for_status = Mock()
    return mock


@pytest.fixture
def mock_failed_response():
    """Provides a mock 503 HTTP response."""
    mock = Mock()
    mock.status_code = 503
    mock.raise_for_status = Mock(side_effect=requests.exceptions.HTTPError("503"))
    return mock


class TestBaseScraperInitialization:
    """Tests for BaseScraper initialization."""

    def test_init_with_default_values(self):
        """
        Given: No custom configuration
        When: BaseScraper is initialized
        Then: A 10s timeout, no retries and a desktop user agent are used
        """
        # Given / When
        scraper = ConcreteScraper()

        # Then
        assert scraper.timeout == 10
        assert scraper.max_retries == 0
        assert scraper.user_agent.startswith("Mozilla/5.0 (Windows NT 10.0; Win64; x64)")
        assert scraper.session.headers["User-Agent"] == scraper.user_agent

    def test_init_with_custom_values(self):
        """
        Given: Custom timeout and user agent
        When: BaseScraper is initialized
        Then: Both should be kept
        """
        # Given / When
        scraper = ConcreteScraper(timeout=3, user_agent="CustomBot/2.0")

        # Then
        assert scraper.timeout == 3
        assert scraper.session.headers["User-Agent"] == "CustomBot/2.0"

    def test_page_url_comes_from_source(self, scraper):
        assert scraper.get_page_url() == GENSHIN.url


class TestFetchPage:
    """Tests for the static page fetch."""

    def test_fetch_page_returns_soup(self, scraper, mock_successful_response):
        """
        Given: A server answering 200
        When: fetch_page is called
        Then: A parsed document is returned and the timeout is passed through
        """
        # Given
        with patch.object(
            scraper.session, "get", return_value=mock_successful_response
        ) as mock_get:
            # When
            soup = scraper.fetch_page("https://example.com")

        # Then
        assert isinstance(soup, BeautifulSoup)
        assert soup.find("h1").get_text() == "Test Page"
        mock_get.assert_called_once_with("https://example.com", timeout=10)
        assert scraper.stats["requests_made"] == 1

    def test_fetch_page_http_error_raises(self, scraper, mock_failed_response):
        """
        Given: A server answering 503
        When: fetch_page is called
        Then: PageFetchError is raised and the failure is counted
        """
        with patch.object(scraper.session, "get", return_value=mock_failed_response):
            with pytest.raises(PageFetchError):
                scraper.fetch_page("https://example.com")

        assert scraper.stats["requests_failed"] == 1

    def test_fetch_page_timeout_raises(self, scraper):
        """
        Given: A request that times out
        When: fetch_page is called
        Then: PageFetchError is raised with the URL in the message
        """
        with patch.object(
            scraper.session, "get", side_effect=requests.exceptions.Timeout("slow")
        ):
            with pytest.raises(PageFetchError) as exc_info:
                scraper.fetch_page("https://example.com/slow")

        assert "https://example.com/slow" in str(exc_info.value)


class TestScrapeActiveCoupons:
    """Tests for the shared scrape pipeline."""

    def test_fetch_failure_returns_empty_list(self, scraper):
        """
        Given: The page cannot be fetched
        When: scrape_active_coupons is called
        Then: An empty list is returned instead of raising
        """
        with patch.object(scraper, "fetch_page", side_effect=PageFetchError("down")):
            coupons = scraper.scrape_active_coupons()

        assert coupons == []
        assert scraper.get_stats()["end_time"] is not None

    def test_duplicates_and_expired_codes_are_removed(self):
        """
        Given: A parser yielding a duplicate and an expired code
        When: scrape_active_coupons is called
        Then: Only the first copy of each live code is returned, in order
        """
        # Given
        scraper = ConcreteScraper(
            parsed=[
                CouponRecord(code="FIRST1234", reward="a"),
                CouponRecord(code="GONE1234", status=CouponStatus.EXPIRED),
                CouponRecord(code="FIRST1234", reward="b"),
                CouponRecord(code="SECOND123", status=CouponStatus.ACTIVE_INDEFINITE),
            ]
        )

        # When
        with patch.object(scraper, "fetch_page", return_value=BeautifulSoup("", "lxml")):
            coupons = scraper.scrape_active_coupons()

        # Then
        assert [c.code for c in coupons] == ["FIRST1234", "SECOND123"]
        assert coupons[0].reward == "a"
        assert scraper.get_stats()["coupons_scraped"] == 2
        assert "duration_seconds" in scraper.get_stats()


class TestContextManager:
    """Tests for session lifecycle."""

    def test_exit_closes_session(self):
        scraper = ConcreteScraper()
        with patch.object(scraper.session, "close") as mock_close:
            with scraper as entered:
                assert entered is scraper
        mock_close.assert_called_once()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
