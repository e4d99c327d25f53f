"""
Coupon Scraper - FC Mobile Scraper

The FC Mobile forum builds its code list with JavaScript and shows each
code as a run of text ("Reward: 100 Gems 3rd October ABCD1234 COPY")
rather than a table. Codes are lifted from the page text with three
complementary strategies and merged.
"""

import re
import time
import logging
from datetime import date, datetime
from functools import cmp_to_key
from typing import List, Optional

from bs4 import BeautifulSoup

from ..config import FC_MOBILE
from ..normalizer import (
    collapse_whitespace,
    dedupe_coupons,
    filter_active,
    is_valid_code,
    parse_day_month,
)
from ..schema import UNKNOWN_DATE, UNKNOWN_REWARD, CouponRecord, CouponStatus
from .base_scraper import BaseScraper, PageFetchError
from .rendered_provider import RenderedPageProvider

logger = logging.getLogger(__name__)

# "[Reward: ...] 3rd October ABCD1234 COPY" - the COPY button only sits next to live codes
# The reward group never runs past another "reward:" label into a neighbouring block
COPY_BLOCK_PATTERN = re.compile(
    r"(?:reward:\s*((?:(?!reward:)[^\n])*?)\s*)?"
    r"(\b\d{1,2}(?:st|nd|rd|th)?\s+\w+)\s+"
    r"([A-Z0-9]{6,20})\s+"
    r"COPY",
    re.IGNORECASE,
)
# Dates must start on a word boundary so "ABCD1234 COPY" never splits at "34 COPY"
SECTION_START_PATTERN = re.compile(r"(?=\b\d{1,2}(?:st|nd|rd|th)?\s+\w+)", re.IGNORECASE)
REWARD_BLOCK_PATTERN = re.compile(
    r"reward:\s*((?:(?!reward:)[^\n])*?)\s*(\b\d{1,2}(?:st|nd|rd|th)?\s+\w+)", re.IGNORECASE
)
DATE_PATTERN = re.compile(r"\b(\d{1,2})(?:st|nd|rd|th)?\s+(\w+)", re.IGNORECASE)
CODE_TOKEN_PATTERN = re.compile(r"\b([A-Z0-9]{6,20})\b")

LOOKAHEAD_CHARS = 100
NON_CONTENT_TAGS = ["script", "style", "noscript", "template"]


def page_text(soup: BeautifulSoup) -> str:
    """Flat, whitespace-normalized text of a document without script bodies."""
    for tag in soup(NON_CONTENT_TAGS):
        tag.decompose()
    return collapse_whitespace(soup.get_text(" "))


def _active_coupon(code: str, reward: Optional[str], found_date: Optional[str]) -> CouponRecord:
    return CouponRecord(
        code=code,
        reward=reward.strip() if reward and reward.strip() else UNKNOWN_REWARD,
        date=found_date or UNKNOWN_DATE,
        status=CouponStatus.ACTIVE,
        server="Global",
    )


def _codes_next_to_copy_buttons(text: str) -> List[CouponRecord]:
    coupons = []
    for match in COPY_BLOCK_PATTERN.finditer(text):
        reward, found_date, code = match.group(1), match.group(2), match.group(3)
        if not is_valid_code(code, FC_MOBILE):
            continue
        coupon = _active_coupon(code, reward, found_date)
        logger.debug(
            f"Found active code with COPY: {code} | Reward: {coupon.reward} | Date: {found_date}"
        )
        coupons.append(coupon)
    return coupons


def _extract_reward_from_section(section: str, code: str) -> str:
    lowered = section.lower()
    reward_index = lowered.find("reward")

    if reward_index >= 0:
        after_reward = section[reward_index:]
        colon_index = after_reward.find(":")
        if colon_index >= 0:
            reward_text = after_reward[colon_index + 1 :]
            reward_text = re.sub(rf"\b{re.escape(code)}\b", "", reward_text)
            reward_text = collapse_whitespace(reward_text)
            if reward_text and len(reward_text) < LOOKAHEAD_CHARS:
                return reward_text

    # No labelled reward; keep the words that look like one
    if "gems" in lowered or "pack" in lowered:
        words = [
            word
            for word in section.split()
            if word.isdigit()
            or any(hint in word.lower() for hint in ("gem", "pack", "point"))
        ]
        if words:
            return " ".join(words)

    return UNKNOWN_REWARD


def _extract_date_from_section(section: str) -> str:
    match = DATE_PATTERN.search(section)
    return match.group(0) if match else UNKNOWN_DATE


def _codes_in_unexpired_sections(text: str, known: set) -> List[CouponRecord]:
    coupons = []
    for section in SECTION_START_PATTERN.split(text):
        if not section.strip() or "expired" in section.lower():
            continue

        for match in CODE_TOKEN_PATTERN.finditer(section):
            code = match.group(1)
            if code in known or not is_valid_code(code, FC_MOBILE):
                continue

            coupon = _active_coupon(
                code,
                _extract_reward_from_section(section, code),
                _extract_date_from_section(section),
            )
            logger.debug(
                f"Found active code in section: {code} | Reward: {coupon.reward} | Date: {coupon.date}"
            )
            known.add(code)
            coupons.append(coupon)
    return coupons


def _codes_after_reward_blocks(text: str, known: set) -> List[CouponRecord]:
    coupons = []
    for match in REWARD_BLOCK_PATTERN.finditer(text):
        reward, found_date = match.group(1).strip(), match.group(2)
        following = text[match.end() : match.end() + LOOKAHEAD_CHARS]

        if "expired" in following.lower():
            continue

        code = next(
            (
                m.group(1)
                for m in CODE_TOKEN_PATTERN.finditer(following)
                if is_valid_code(m.group(1), FC_MOBILE)
            ),
            None,
        )
        if code is None or code in known:
            continue

        logger.debug(
            f"Found code after reward block: {code} | Reward: {reward} | Date: {found_date}"
        )
        known.add(code)
        coupons.append(_active_coupon(code, reward, found_date))
    return coupons


def _newest_first(year: int):
    def compare(a: CouponRecord, b: CouponRecord) -> int:
        date_a = parse_day_month(a.date, year)
        date_b = parse_day_month(b.date, year)
        if date_a is None or date_b is None:
            return 0
        return (date_b > date_a) - (date_b < date_a)

    return cmp_to_key(compare)


def extract_codes_from_text(text: str, year: Optional[int] = None) -> List[CouponRecord]:
    """
    Extract active FC Mobile codes from the flat page text.

    Strategies, merged in this order (first sighting of a code wins):
        1. "<date> <CODE> COPY" blocks, optionally preceded by "Reward: ..."
        2. Date-delimited sections that never mention "expired"
        3. "Reward: ... <date>" blocks followed by a code within 100 chars

    Args:
        text: Whitespace-normalized page text
        year: Year used to order "<day> <month>" dates (default: current year)

    Returns:
        Unique codes, newest first; undated codes keep their relative order
    """
    coupons = dedupe_coupons(_codes_next_to_copy_buttons(text))
    known = {c.code for c in coupons}

    coupons.extend(_codes_in_unexpired_sections(text, known))
    coupons.extend(_codes_after_reward_blocks(text, known))

    logger.info(f"Found {len(coupons)} unique active codes")

    return sorted(coupons, key=_newest_first(year or date.today().year))


class FCMobileScraper(BaseScraper):
    """
    Scraper for FC Mobile redeem codes.

    Tries the JavaScript-rendered page first and falls back to a plain
    GET when rendering yields nothing. The whole attempt is retried once.
    """

    SOURCE = FC_MOBILE

    MAX_ATTEMPTS = 2
    RETRY_DELAY_SEC = 1.0

    def __init__(
        self,
        rendered_provider: Optional[RenderedPageProvider] = None,
        use_rendered: bool = True,
        **kwargs,
    ):
        """
        Initialize FC Mobile scraper.

        Args:
            rendered_provider: Headless browser provider (default: RenderedPageProvider())
            use_rendered: Whether to try the rendered page before the static one
            **kwargs: Arguments passed to BaseScraper
        """
        super().__init__(**kwargs)
        self.use_rendered = use_rendered
        self.rendered_provider = rendered_provider or RenderedPageProvider()

    def get_source_name(self) -> str:
        return "FC Mobile"

    def parse_coupons(self, soup: BeautifulSoup) -> List[CouponRecord]:
        logger.debug("Parsing document for active codes...")
        return extract_codes_from_text(page_text(soup))

    def _scrape_rendered(self) -> List[CouponRecord]:
        try:
            soup = self.rendered_provider.fetch_page(self.get_page_url())
        except PageFetchError as e:
            logger.warning(f"Rendered scraping failed: {e}")
            return []
        return self.parse_coupons(soup)

    def _scrape_static(self) -> List[CouponRecord]:
        try:
            soup = self.fetch_page(self.get_page_url())
        except PageFetchError as e:
            logger.warning(f"Static scraping failed: {e}")
            return []
        return self.parse_coupons(soup)

    def _attempt(self) -> List[CouponRecord]:
        if self.use_rendered:
            coupons = self._scrape_rendered()
            if coupons:
                return coupons
            logger.info("Rendered page returned no codes, trying static fallback...")

        return self._scrape_static()

    def scrape_active_coupons(self) -> List[CouponRecord]:
        self.stats["start_time"] = datetime.now()
        logger.info(f"Fetching FC Mobile codes from: {self.get_page_url()}")

        coupons: List[CouponRecord] = []
        for attempt in range(1, self.MAX_ATTEMPTS + 1):
            logger.info(f"Attempt {attempt} of {self.MAX_ATTEMPTS}")

            coupons = filter_active(dedupe_coupons(self._attempt()))
            if coupons:
                logger.info(f"Successfully fetched {len(coupons)} FC Mobile codes")
                break

            if attempt < self.MAX_ATTEMPTS:
                time.sleep(self.RETRY_DELAY_SEC)
        else:
            logger.error(f"Failed to fetch FC Mobile codes after {self.MAX_ATTEMPTS} attempts")

        self.stats["coupons_scraped"] = len(coupons)
        self.stats["end_time"] = datetime.now()
        return coupons
