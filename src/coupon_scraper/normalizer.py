from __future__ import annotations

import logging
import re
from datetime import date
from typing import Iterable, List, Optional

from .config import SourceConfig
from .schema import UNKNOWN_DATE, UNKNOWN_REWARD, CouponRecord, CouponStatus

logger = logging.getLogger(__name__)

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June", "July",
    "August", "September", "October", "November", "December",
)

# Full names and three-letter abbreviations, lowercase -> month number
_MONTHS = {name.lower(): i for i, name in enumerate(MONTH_NAMES, start=1)}
_MONTHS.update({name[:3].lower(): i for i, name in enumerate(MONTH_NAMES, start=1)})
_MONTHS["sept"] = 9

_WHITESPACE = re.compile(r"\s+")
_WIKI_LINK = re.compile(r"\[\[([^\]]+)\]\]")
_WIKI_TEMPLATE = re.compile(r"\{\{[^}]*\}\}")

_MONTH_DAY_YEAR = re.compile(r"^([A-Za-z]+)\.?\s+(\d{1,2}),\s*(\d{4})$")
_SLASHED = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_ISO = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_DAY_MONTH = re.compile(r"^(\d{1,2})(?:st|nd|rd|th)?\s+([A-Za-z]+)$", re.IGNORECASE)


def collapse_whitespace(text: Optional[str]) -> str:
    """Collapse runs of whitespace to a single space and trim."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


def ordinal_suffix(day: int) -> str:
    if 11 <= day <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def month_number(name: str) -> Optional[int]:
    return _MONTHS.get(name.strip().lower())


def format_day_month(value: date) -> str:
    """Render a date as '<day-ordinal> <Month>', e.g. '3rd September'."""
    return f"{value.day}{ordinal_suffix(value.day)} {MONTH_NAMES[value.month - 1]}"


def _parse_full_date(text: str) -> Optional[date]:
    match = _MONTH_DAY_YEAR.match(text)
    if match:
        month = month_number(match.group(1))
        if month is None:
            return None
        return date(int(match.group(3)), month, int(match.group(2)))

    match = _SLASHED.match(text)
    if match:
        return date(int(match.group(3)), int(match.group(1)), int(match.group(2)))

    match = _ISO.match(text)
    if match:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    return None


def normalize_date(raw: Optional[str]) -> str:
    """
    Normalize a free-form date string.

    'September 3, 2025', '9/3/2025' and '2025-09-03' all become
    '3rd September' (the year is dropped). Strings already shaped like
    '3rd September' are returned trimmed, anything unrecognised is
    returned as-is, and blanks or header text collapse to 'Unknown'.
    """
    text = collapse_whitespace(raw)
    if not text or "date" in text.lower():
        return UNKNOWN_DATE

    try:
        parsed = _parse_full_date(text)
    except ValueError:
        logger.debug(f"Could not parse date: {text}")
        parsed = None

    if parsed is not None:
        return format_day_month(parsed)

    return text


def parse_day_month(text: Optional[str], year: Optional[int] = None) -> Optional[date]:
    """
    Parse a '<day>[suffix] <Month>' string into a date in the given year.

    Returns None for 'Unknown', blanks and anything that does not name a
    real calendar day.
    """
    text = collapse_whitespace(text)
    if not text or text == UNKNOWN_DATE:
        return None

    match = _DAY_MONTH.match(text)
    if not match:
        return None

    month = month_number(match.group(2))
    if month is None:
        return None

    try:
        return date(year or date.today().year, month, int(match.group(1)))
    except ValueError:
        return None


def clean_reward(text: Optional[str]) -> str:
    """Strip wiki markup, normalize '×' counts and collapse whitespace."""
    if not text:
        return UNKNOWN_REWARD

    text = _WIKI_LINK.sub(r"\1", text)
    text = _WIKI_TEMPLATE.sub("", text)
    text = text.replace("×", " x")
    text = collapse_whitespace(text)

    if not text or text.lower() == "reward":
        return UNKNOWN_REWARD
    return text


def classify_status(text: Optional[str]) -> CouponStatus:
    lowered = (text or "").lower()
    if any(cue in lowered for cue in ("expired", "invalid", "hit max usage")):
        return CouponStatus.EXPIRED
    if "indefinite" in lowered:
        return CouponStatus.ACTIVE_INDEFINITE
    return CouponStatus.ACTIVE


def _squash(text: str) -> str:
    return _WHITESPACE.sub("", text).upper()


def is_valid_code(code: Optional[str], source: SourceConfig) -> bool:
    """Check a candidate token against the source's code shape and blocklist."""
    if not code:
        return False

    code = code.strip()
    if not code:
        return False

    if len(code) < source.min_length:
        return False
    if source.max_length is not None and len(code) > source.max_length:
        return False

    if not source.code_pattern.match(code):
        return False

    upper = code.upper()
    if any(_squash(code) == _squash(header) for header in source.header_literals):
        return False
    if upper in source.blocklist:
        return False
    if source.blocked_prefixes and upper.startswith(source.blocked_prefixes):
        return False

    if source.min_letters:
        if code.isdigit():
            return False
        if sum(1 for ch in code if ch.isalpha()) < source.min_letters:
            return False

    return True


def dedupe_coupons(coupons: Iterable[CouponRecord]) -> List[CouponRecord]:
    """Drop repeated codes, keeping the first occurrence."""
    seen = set()
    unique = []
    for coupon in coupons:
        if coupon.code in seen:
            continue
        seen.add(coupon.code)
        unique.append(coupon)
    return unique


def filter_active(coupons: Iterable[CouponRecord]) -> List[CouponRecord]:
    return [c for c in coupons if c.is_active]
