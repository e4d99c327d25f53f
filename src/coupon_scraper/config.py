"""
Configuration for the coupon scrapers.

Per-source constants (URL, code shape, blocklist, date keyword) and the
process-level settings read from the environment.
"""

import os
import re
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Pattern, Tuple

# ---------------------------------------------------------------------------
# Upstream HTTP
# ---------------------------------------------------------------------------
DESKTOP_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
MOBILE_USER_AGENT = (
    "Mozilla/5.0 (Linux; Android 10; K) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/114.0.0.0 Mobile Safari/537.36"
)

STATIC_TIMEOUT_SEC = 10
RENDERED_TIMEOUT_SEC = 20
RENDERED_SCRIPT_WAIT_SEC = 3

UPPER_ALNUM = re.compile(r"^[A-Z0-9]+$")
MIXED_ALNUM = re.compile(r"^[A-Za-z0-9]+$")
# Blox Fruits codes are case-sensitive and may carry any punctuation; only length is checked
ANY_TOKEN = re.compile(r"^\S+$")


@dataclass(frozen=True)
class SourceConfig:
    """Everything that varies between upstream pages."""

    name: str
    url: str
    code_pattern: Pattern[str]
    min_length: int
    max_length: Optional[int] = None
    blocklist: FrozenSet[str] = field(default_factory=frozenset)
    header_literals: Tuple[str, ...] = ("CODE",)
    blocked_prefixes: Tuple[str, ...] = ()
    min_letters: int = 0
    date_keyword: Optional[str] = None


# ---------------------------------------------------------------------------
# Source definitions
# ---------------------------------------------------------------------------
GENSHIN = SourceConfig(
    name="Genshin Impact",
    url="https://genshin-impact.fandom.com/wiki/Promotional_Code",
    code_pattern=UPPER_ALNUM,
    min_length=4,
    date_keyword="Discovered:",
)

HONKAI_STAR_RAIL = SourceConfig(
    name="Honkai Star Rail",
    url="https://honkai-star-rail.fandom.com/wiki/Redemption_Code",
    code_pattern=UPPER_ALNUM,
    min_length=4,
    date_keyword="Released:",
)

BLOX_FRUITS = SourceConfig(
    name="Blox Fruits",
    url="https://blox-fruits.fandom.com/wiki/Codes",
    code_pattern=ANY_TOKEN,
    min_length=3,
)

PLAY_TOGETHER = SourceConfig(
    name="Play Together",
    url="https://playtogether.fandom.com/wiki/Coupon_Code",
    code_pattern=MIXED_ALNUM,
    min_length=3,
    header_literals=("Coupon Code",),
)

FC_MOBILE_BLOCKLIST = frozenset(
    [
        "REWARD", "REWARDS", "PACK", "PACKS", "GEMS", "COIN", "COINS",
        "PLAYER", "PLAYERS", "STANDARD", "ANNIVERSARY", "LIMITED", "ITEM",
        "ITEMS", "CARD", "CARDS", "ACTIVE", "EXPIRED", "CODE", "CODES",
        "REDEEM", "BUTTON", "HOME", "MORE", "CLOSE", "MOBILE", "TRUE",
        "FALSE", "LABEL", "PAGE", "SECTION", "NAVBAR", "MENU", "FOOTER",
        "HEADER", "COPY", "HERE", "OCTOBER", "SEPTEMBER", "AUGUST",
        "JANUARY", "MARCH", "MAY", "POINTS", "RANK", "ICONS", "FESTIVAL",
        "SHANGHAI", "TICKETS",
    ]
)

FC_MOBILE = SourceConfig(
    name="FC Mobile",
    url="https://www.fcmobileforum.com/fcmobile-redeem-codes",
    code_pattern=UPPER_ALNUM,
    min_length=6,
    max_length=20,
    blocklist=FC_MOBILE_BLOCKLIST,
    blocked_prefixes=("COPY", "HERE", "MORE", "PAGE", "HOME", "MENU", "EXPIRED"),
    min_letters=2,
)


# ---------------------------------------------------------------------------
# Process settings
# ---------------------------------------------------------------------------
class ConfigError(RuntimeError):
    """Raised when environment configuration is invalid."""


@dataclass
class Settings:
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from COUPON_SCRAPER_* environment variables.

        Raises:
            ConfigError: If COUPON_SCRAPER_PORT is not an integer
        """
        port_raw = os.getenv("COUPON_SCRAPER_PORT", "8080").strip()
        try:
            port = int(port_raw)
        except ValueError as e:
            raise ConfigError(
                f"COUPON_SCRAPER_PORT must be an integer, got '{port_raw}'."
            ) from e

        return cls(
            host=os.getenv("COUPON_SCRAPER_HOST", "0.0.0.0"),
            port=port,
            log_level=os.getenv("COUPON_SCRAPER_LOG_LEVEL", "INFO").upper(),
        )
