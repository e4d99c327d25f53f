"""
Coupon Scraper - Base Scraper Module

Abstract base class for all redemption code scrapers.
Provides the shared fetch -> parse -> dedupe -> filter pipeline,
session handling, statistics and logging.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

import requests
from bs4 import BeautifulSoup
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import DESKTOP_USER_AGENT, STATIC_TIMEOUT_SEC, SourceConfig
from ..normalizer import dedupe_coupons, filter_active
from ..schema import CouponRecord

logger = logging.getLogger(__name__)


class ScraperError(RuntimeError):
    """Base error for scraper failures."""


class PageFetchError(ScraperError):
    """Raised when a page cannot be fetched (DNS, connect, TLS, HTTP >= 400, timeout)."""


class BaseScraper(ABC):
    """
    Abstract base class for redemption code scrapers.

    Subclasses set SOURCE and implement parse_coupons() for their page
    layout. Everything else (fetching, deduplication, dropping expired
    codes) happens here.
    """

    SOURCE: SourceConfig

    def __init__(
        self,
        timeout: float = STATIC_TIMEOUT_SEC,
        max_retries: int = 0,
        user_agent: Optional[str] = None,
    ) -> None:
        """
        Initialize the base scraper.

        Args:
            timeout: Request timeout in seconds (default: 10)
            max_retries: Retry attempts for 429/5xx responses (default: 0, a single GET)
            user_agent: Custom user agent string (default: desktop browser)
        """
        self.timeout = timeout
        self.max_retries = max_retries
        self.user_agent = user_agent or DESKTOP_USER_AGENT

        self.session = self._create_session()

        self.stats: Dict[str, Union[int, Optional[datetime]]] = {
            "requests_made": 0,
            "requests_failed": 0,
            "coupons_scraped": 0,
            "start_time": None,
            "end_time": None,
        }

    def _create_session(self) -> requests.Session:
        """Create a requests session with retry configuration."""
        session = requests.Session()

        retry_strategy = Retry(
            total=self.max_retries,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "OPTIONS"],
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update(
            {
                "User-Agent": self.user_agent,
                "Accept": (
                    "text/html,application/xhtml+xml," "application/xml;q=0.9,*/*;q=0.8"
                ),
                "Accept-Language": "en-US,en;q=0.5",
            }
        )

        return session

    def _count(self, key: str) -> None:
        value = self.stats[key]
        if isinstance(value, int):
            self.stats[key] = value + 1

    def fetch_page(self, url: str) -> BeautifulSoup:
        """
        Fetch a page and return parsed BeautifulSoup object.

        Args:
            url: URL to fetch

        Returns:
            BeautifulSoup object

        Raises:
            PageFetchError: If the request fails or returns HTTP >= 400
        """
        self._count("requests_made")

        try:
            logger.info(f"Fetching: {url}")
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            self._count("requests_failed")
            raise PageFetchError(f"Failed to fetch {url}: {e}") from e

        return BeautifulSoup(response.content, "lxml")

    @abstractmethod
    def get_source_name(self) -> str:
        """Return the name of the data source (e.g., 'Genshin Impact')."""
        pass

    @abstractmethod
    def parse_coupons(self, soup: BeautifulSoup) -> List[CouponRecord]:
        """
        Parse a fetched page into coupon records.

        Must return an empty list when the expected region is missing.

        Args:
            soup: BeautifulSoup object of the source page

        Returns:
            List of coupon records, expired ones included
        """
        pass

    def get_page_url(self) -> str:
        return self.SOURCE.url

    def scrape_active_coupons(self) -> List[CouponRecord]:
        """
        Main method to scrape currently valid codes from this source.

        Transport failures are logged and yield an empty list.

        Returns:
            Unique, non-expired coupon records in page order
        """
        self.stats["start_time"] = datetime.now()
        url = self.get_page_url()

        logger.info(f"Fetching {self.get_source_name()} codes from: {url}")

        try:
            soup = self.fetch_page(url)
        except PageFetchError as e:
            logger.error(f"Failed to fetch {self.get_source_name()} coupons: {e}")
            self.stats["end_time"] = datetime.now()
            return []

        coupons = filter_active(dedupe_coupons(self.parse_coupons(soup)))

        self.stats["coupons_scraped"] = len(coupons)
        self.stats["end_time"] = datetime.now()

        logger.info(
            f"Successfully scraped {len(coupons)} active "
            f"{self.get_source_name()} coupons"
        )

        return coupons

    def get_stats(self) -> Dict[str, Any]:
        """Return scraping statistics."""
        stats: Dict[str, Any] = dict(self.stats)
        start_time = stats.get("start_time")
        end_time = stats.get("end_time")
        if isinstance(start_time, datetime) and isinstance(end_time, datetime):
            stats["duration_seconds"] = (end_time - start_time).total_seconds()
        return stats

    def __enter__(self) -> "BaseScraper":
        """Context manager entry."""
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[Any],
    ) -> None:
        """Context manager exit - close session."""
        self.session.close()
