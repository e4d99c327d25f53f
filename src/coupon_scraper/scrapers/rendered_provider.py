"""
Coupon Scraper - Rendered Page Provider

Selenium-driven headless Chrome for pages whose content is built by
JavaScript. The rendered DOM is handed back as a BeautifulSoup document
so scrapers parse it exactly like a static page.
"""

import logging
from typing import Optional

from bs4 import BeautifulSoup
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.support.ui import WebDriverWait

from ..config import MOBILE_USER_AGENT, RENDERED_SCRIPT_WAIT_SEC, RENDERED_TIMEOUT_SEC
from .base_scraper import PageFetchError

logger = logging.getLogger(__name__)

# Chrome content settings: 2 = block
BLOCKED_CONTENT_PREFS = {
    "profile.managed_default_content_settings.images": 2,
    "profile.managed_default_content_settings.stylesheets": 2,
}

BODY_LENGTH_SCRIPT = "return document.body ? document.body.innerHTML.length : 0"


class _BodySettled:
    """WebDriverWait condition: body markup is non-empty and unchanged since the last poll."""

    def __init__(self) -> None:
        self.last_length: Optional[int] = None

    def __call__(self, driver) -> bool:
        length = driver.execute_script(BODY_LENGTH_SCRIPT)
        settled = bool(length) and length == self.last_length
        self.last_length = length
        return settled


class RenderedPageProvider:
    """
    Fetches a page through headless Chrome.

    A fresh driver is started for every fetch and always quit afterwards,
    so nothing is shared between requests.
    """

    def __init__(
        self,
        timeout: float = RENDERED_TIMEOUT_SEC,
        script_wait: float = RENDERED_SCRIPT_WAIT_SEC,
        user_agent: Optional[str] = None,
        headless: bool = True,
        poll_interval: float = 0.5,
    ) -> None:
        self.timeout = timeout
        self.script_wait = script_wait
        self.user_agent = user_agent or MOBILE_USER_AGENT
        self.headless = headless
        self.poll_interval = poll_interval

    def _init_driver(self):
        """Initialize Selenium WebDriver."""
        from selenium import webdriver
        from selenium.webdriver.chrome.options import Options

        options = Options()
        if self.headless:
            options.add_argument("--headless=new")
        options.add_argument("--no-sandbox")
        options.add_argument("--disable-dev-shm-usage")
        options.add_argument("--ignore-certificate-errors")
        options.add_argument(f"user-agent={self.user_agent}")
        options.add_experimental_option("prefs", BLOCKED_CONTENT_PREFS)
        options.accept_insecure_certs = True

        driver = webdriver.Chrome(options=options)
        driver.set_page_load_timeout(self.timeout)
        return driver

    def _wait_for_scripts(self, driver) -> None:
        """
        Give background scripts up to script_wait seconds to settle.

        The page counts as settled once the body markup length is the same
        on two consecutive polls.
        """
        try:
            wait = WebDriverWait(
                driver, self.script_wait, poll_frequency=self.poll_interval
            )
            wait.until(_BodySettled())
        except TimeoutException:
            logger.debug(
                f"Scripts still running after {self.script_wait}s, capturing DOM anyway"
            )

    def fetch_page(self, url: str) -> BeautifulSoup:
        """
        Render a page and return the serialized DOM as BeautifulSoup.

        Raises:
            PageFetchError: If the browser cannot start or navigation fails
        """
        try:
            driver = self._init_driver()
        except WebDriverException as e:
            raise PageFetchError(f"Could not start headless browser: {e}") from e

        try:
            logger.info(f"Rendering: {url}")
            driver.get(url)
            self._wait_for_scripts(driver)
            return BeautifulSoup(driver.page_source, "lxml")
        except WebDriverException as e:
            raise PageFetchError(f"Failed to render {url}: {e}") from e
        finally:
            driver.quit()
