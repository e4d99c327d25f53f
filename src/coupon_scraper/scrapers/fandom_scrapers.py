"""
Coupon Scraper - Fandom Wiki Scrapers

Scrapers for single-table Fandom code pages:
    Blox Fruits   - [Checkbox] | Code | Reward | Release Date
    Play Together - Code | Valid Until | Reward
"""

import re
import logging
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from ..config import BLOX_FRUITS, PLAY_TOGETHER
from ..normalizer import clean_reward, collapse_whitespace, is_valid_code, normalize_date
from ..schema import UNKNOWN_REWARD, CouponRecord, CouponStatus
from .base_scraper import BaseScraper

logger = logging.getLogger(__name__)

ROW_ERRORS = (AttributeError, IndexError, KeyError, TypeError, ValueError)

LINE_BREAK_PATTERN = re.compile(r"<br\s*/?>", re.IGNORECASE)
# "a, , b" -> "a, b"
COMMA_RUN_PATTERN = re.compile(r"(?:\s*,)+\s*")
EDGE_COMMA_PATTERN = re.compile(r"^[\s,]+|[\s,]+$")


class BloxFruitsScraper(BaseScraper):
    """
    Scraper for the Blox Fruits codes page.

    Every row of the "Working Codes" table (id tpt-1) is active; when the
    id is missing we fall back to any progress-tracking table.
    """

    SOURCE = BLOX_FRUITS

    CODE_COLUMN = 1
    REWARD_COLUMN = 2
    DATE_COLUMN = 3

    def get_source_name(self) -> str:
        return "Blox Fruits"

    def parse_coupons(self, soup: BeautifulSoup) -> List[CouponRecord]:
        working_table = soup.select_one("table#tpt-1")

        if working_table is not None:
            logger.info("Found Working Codes table")
            tables = [working_table]
        else:
            logger.warning(
                "Working Codes table not found, falling back to general table search"
            )
            tables = soup.select("table.table-progress-tracking")
            logger.info(f"Found {len(tables)} progress tracking tables")

        coupons = []
        for table in tables:
            for row_index, row in enumerate(table.find_all("tr")):
                try:
                    coupon = self._parse_working_code_row(row)
                except ROW_ERRORS as e:
                    logger.warning(f"Error parsing working code row {row_index}: {e}")
                    continue

                if coupon is not None:
                    logger.debug(f"Added working Blox Fruits code: {coupon.code}")
                    coupons.append(coupon)

        return coupons

    def _parse_working_code_row(self, row: Tag) -> Optional[CouponRecord]:
        cells = row.find_all("td", recursive=False)
        if len(cells) < 4:
            return None

        code = self._extract_code(cells[self.CODE_COLUMN])
        if not code:
            logger.debug(
                f"No valid code found in cell: {cells[self.CODE_COLUMN].get_text(strip=True)}"
            )
            return None

        reward = self._parse_reward_cell(cells[self.REWARD_COLUMN])
        if not reward:
            return None

        return CouponRecord(
            code=code,
            reward=reward,
            date=normalize_date(cells[self.DATE_COLUMN].get_text()),
            status=CouponStatus.ACTIVE,
            server="Global",
        )

    def _extract_code(self, code_cell: Tag) -> Optional[str]:
        code_tag = code_cell.find("code")
        if code_tag is not None:
            code = code_tag.get_text(strip=True)
            if is_valid_code(code, self.SOURCE):
                return code

        text = code_cell.get_text(strip=True)
        if "code" not in text.lower() and is_valid_code(text, self.SOURCE):
            return text

        return None

    def _parse_reward_cell(self, reward_cell: Tag) -> str:
        """
        Money rewards are rendered as an icon plus "$20000"; reduce them to
        "20000 Money". Returns an empty string for header-like cells.
        """
        money = reward_cell.find("span", class_="color-currency(Money)")
        if money is not None:
            amount = re.sub(r"[^0-9]", "", money.get_text())
            reward_text = f"{amount} Money" if amount else ""
        else:
            reward_text = collapse_whitespace(reward_cell.get_text())

        if not reward_text or "reward" in reward_text.lower():
            return ""

        return clean_reward(reward_text)


class PlayTogetherScraper(BaseScraper):
    """
    Scraper for the Play Together coupon code page.

    The first article table lists the current codes; later tables are
    the expired archive.
    """

    SOURCE = PLAY_TOGETHER

    def get_source_name(self) -> str:
        return "Play Together"

    def parse_coupons(self, soup: BeautifulSoup) -> List[CouponRecord]:
        active_table = soup.select_one("table.article-table")
        if active_table is None:
            logger.info("No article table found on Play Together page")
            return []

        coupons = []
        # Skip header row
        for row in active_table.find_all("tr")[1:]:
            cells = row.find_all("td", recursive=False)
            if len(cells) < 3:
                continue

            try:
                coupon = self._parse_coupon_row(cells)
            except ROW_ERRORS as e:
                logger.warning(f"Error parsing Play Together coupon row: {e}")
                continue

            if coupon is not None:
                logger.debug(f"Parsed Play Together coupon: {coupon}")
                coupons.append(coupon)

        return coupons

    def _parse_coupon_row(self, cells: List[Tag]) -> Optional[CouponRecord]:
        code = re.sub(r"\s+", "", cells[0].get_text())
        if not is_valid_code(code, self.SOURCE):
            return None

        return CouponRecord(
            code=code,
            reward=self._extract_reward(cells[2]),
            date=collapse_whitespace(cells[1].get_text()),
            status=CouponStatus.ACTIVE,
            server="Global",
        )

    def _extract_reward(self, reward_cell: Tag) -> str:
        """Turn line breaks into comma separators and drop the remaining markup."""
        reward_html = LINE_BREAK_PATTERN.sub(", ", reward_cell.decode_contents())
        reward = BeautifulSoup(reward_html, "lxml").get_text()

        reward = COMMA_RUN_PATTERN.sub(", ", collapse_whitespace(reward))
        reward = EDGE_COMMA_PATTERN.sub("", reward).strip()

        return reward or UNKNOWN_REWARD
