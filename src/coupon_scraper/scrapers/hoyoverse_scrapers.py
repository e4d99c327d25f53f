"""
Coupon Scraper - HoYoverse Wiki Scrapers

Scrapers for the Fandom wiki code tables of HoYoverse games.
Both pages share the same column layout:

    Code | Server | Rewards | Date / Status
"""

import re
import logging
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from ..config import GENSHIN, HONKAI_STAR_RAIL
from ..normalizer import (
    classify_status,
    clean_reward,
    collapse_whitespace,
    is_valid_code,
    normalize_date,
)
from ..schema import UNKNOWN_DATE, CouponRecord
from .base_scraper import BaseScraper

logger = logging.getLogger(__name__)

# First match of the alternation wins, e.g. "October 5, 2025",
# "5th October 2025", "October 5th", "5th October"
DATE_PATTERN = re.compile(
    r"(\w+\s+\d{1,2},?\s+\d{4}|\d{1,2}\w{2}\s+\w+\s+\d{4}|\w+\s+\d{1,2}\w{2}|\d{1,2}\w{2}\s+\w+)"
)
CODE_IN_TEXT_PATTERN = re.compile(r"[A-Z0-9]{8,}")

ROW_ERRORS = (AttributeError, IndexError, KeyError, TypeError, ValueError)


class HoyoWikiScraper(BaseScraper):
    """
    Shared table walker for HoYoverse wiki code pages.

    Subclasses pick the table selector and which cells hold the rewards
    and the date/status text.
    """

    TABLE_SELECTOR = "table.wikitable"
    MIN_CELLS = 4

    def get_source_name(self) -> str:
        return self.SOURCE.name

    def parse_coupons(self, soup: BeautifulSoup) -> List[CouponRecord]:
        coupons = []

        tables = soup.select(self.TABLE_SELECTOR)
        if not tables:
            logger.info(f"No code tables found on {self.get_source_name()} page")
            return coupons

        for table in tables:
            for row in table.find_all("tr"):
                cells = row.find_all("td", recursive=False)
                if len(cells) < self.MIN_CELLS:
                    continue

                try:
                    coupon = self._parse_coupon_row(cells)
                except ROW_ERRORS as e:
                    logger.warning(
                        f"Error parsing {self.get_source_name()} coupon row: {e}"
                    )
                    continue

                if coupon is not None:
                    logger.debug(f"Parsed coupon: {coupon}")
                    coupons.append(coupon)

        return coupons

    def _parse_coupon_row(self, cells: List[Tag]) -> Optional[CouponRecord]:
        code = self._extract_code(cells[0])
        if not code:
            logger.debug(f"No valid code in cell: {cells[0].get_text(strip=True)}")
            return None

        date_status = collapse_whitespace(self._date_status_cell(cells).get_text())

        return CouponRecord(
            code=code,
            server=self._extract_server(cells),
            reward=self._extract_rewards(self._reward_cell(cells)),
            date=self._extract_date(date_status),
            status=classify_status(date_status),
        )

    def _reward_cell(self, cells: List[Tag]) -> Tag:
        return cells[2]

    def _date_status_cell(self, cells: List[Tag]) -> Tag:
        return cells[3]

    def _extract_server(self, cells: List[Tag]) -> str:
        return collapse_whitespace(cells[1].get_text())

    def _extract_code(self, code_cell: Tag) -> Optional[str]:
        """Bold/code element first, then link text, then any long token in the cell."""
        emphasized = code_cell.select_one("b, code")
        if emphasized is not None:
            code = emphasized.get_text(strip=True)
            if is_valid_code(code, self.SOURCE):
                return code

        for link in code_cell.find_all("a"):
            code = link.get_text(strip=True)
            if is_valid_code(code, self.SOURCE):
                return code

        match = CODE_IN_TEXT_PATTERN.search(code_cell.get_text(" ", strip=True))
        if match and is_valid_code(match.group(0), self.SOURCE):
            return match.group(0)

        return None

    def _extract_rewards(self, reward_cell: Tag) -> str:
        items = reward_cell.select(".item-text")
        if not items:
            return clean_reward(reward_cell.get_text())

        return clean_reward(", ".join(collapse_whitespace(i.get_text()) for i in items))

    def _extract_date(self, date_status: str) -> str:
        match = DATE_PATTERN.search(date_status)
        if match:
            return normalize_date(match.group(1))

        keyword = self.SOURCE.date_keyword
        if keyword and keyword in date_status:
            segment = date_status.split(keyword, 1)[1].split("Valid", 1)[0]
            return normalize_date(segment)

        return UNKNOWN_DATE


class GenshinImpactScraper(HoyoWikiScraper):
    """
    Scraper for the Genshin Impact promotional code table.

    Only the sortable tables carry codes; the rest of the page is
    navigation and history.
    """

    SOURCE = GENSHIN
    TABLE_SELECTOR = "table.wikitable.sortable"


class HonkaiStarRailScraper(HoyoWikiScraper):
    """Scraper for the Honkai: Star Rail redemption code tables."""

    SOURCE = HONKAI_STAR_RAIL

    def _reward_cell(self, cells: List[Tag]) -> Tag:
        return cells[2] if len(cells) >= 3 else cells[1]

    def _date_status_cell(self, cells: List[Tag]) -> Tag:
        return cells[-1]

    def _extract_server(self, cells: List[Tag]) -> str:
        if len(cells) < 2:
            return "Global"
        return collapse_whitespace(cells[1].get_text()) or "Global"
