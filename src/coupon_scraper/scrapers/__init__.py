"""
Coupon Scraper - Scrapers Module

This module provides scrapers that collect currently valid redemption
codes from community wiki pages (Genshin Impact, Honkai: Star Rail,
Blox Fruits, Play Together) and the FC Mobile forum.

Usage:
    from coupon_scraper.scrapers import GenshinImpactScraper, get_scraper

    # Scrape Genshin Impact
    with GenshinImpactScraper() as scraper:
        coupons = scraper.scrape_active_coupons()

    # Or by name
    with get_scraper("honkai-star-rail") as scraper:
        hsr_coupons = scraper.scrape_active_coupons()
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Type

from .base_scraper import BaseScraper, PageFetchError, ScraperError
from .fandom_scrapers import BloxFruitsScraper, PlayTogetherScraper
from .fc_mobile_scraper import FCMobileScraper, extract_codes_from_text
from .hoyoverse_scrapers import GenshinImpactScraper, HonkaiStarRailScraper
from .rendered_provider import RenderedPageProvider

logger = logging.getLogger(__name__)

__all__ = [
    "BaseScraper",
    "ScraperError",
    "PageFetchError",
    "RenderedPageProvider",
    "GenshinImpactScraper",
    "HonkaiStarRailScraper",
    "BloxFruitsScraper",
    "PlayTogetherScraper",
    "FCMobileScraper",
    "extract_codes_from_text",
    "SCRAPERS",
    "get_scraper",
    "scrape_all_sources",
]

DEFAULT_CONFIG_PATH = Path(__file__).parent / "scraper_config.yaml"

SCRAPERS: Dict[str, Type[BaseScraper]] = {
    "genshin": GenshinImpactScraper,
    "genshin_impact": GenshinImpactScraper,
    "honkai_star_rail": HonkaiStarRailScraper,
    "hsr": HonkaiStarRailScraper,
    "blox_fruits": BloxFruitsScraper,
    "play_together": PlayTogetherScraper,
    "fc_mobile": FCMobileScraper,
    "fcmobile": FCMobileScraper,
}


def get_scraper(source_name: str, **kwargs) -> BaseScraper:
    """
    Factory function to get a scraper by source name.

    Args:
        source_name: Name of the source (e.g., 'genshin', 'honkai-star-rail')
        **kwargs: Arguments to pass to the scraper

    Returns:
        Scraper instance

    Raises:
        ValueError: If source name is not recognized
    """
    source_key = source_name.strip().lower().replace(" ", "_").replace("-", "_")

    if source_key not in SCRAPERS:
        raise ValueError(
            f"Unknown source: {source_name}. "
            f"Available sources: {list(SCRAPERS.keys())}"
        )

    return SCRAPERS[source_key](**kwargs)


def scrape_all_sources(config_path: Optional[str] = None) -> Dict[str, List[dict]]:
    """
    Scrape all enabled sources based on configuration.

    Args:
        config_path: Path to a scraper_config.yaml (default: packaged config)

    Returns:
        Dictionary mapping source names to lists of serialized coupons
    """
    import yaml

    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    with open(config_path, encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    global_settings = config.get("global") or {}
    sources = config.get("sources") or {}

    scraper_kwargs = {}
    if global_settings.get("timeout") is not None:
        scraper_kwargs["timeout"] = global_settings["timeout"]
    if global_settings.get("user_agent"):
        scraper_kwargs["user_agent"] = global_settings["user_agent"]

    all_coupons: Dict[str, List[dict]] = {}

    for source_name, source_config in sources.items():
        if not (source_config or {}).get("enabled", False):
            continue

        try:
            with get_scraper(source_name, **scraper_kwargs) as scraper:
                coupons = scraper.scrape_active_coupons()
            all_coupons[source_name] = [c.model_dump() for c in coupons]
        except Exception as e:
            logger.error(f"Error scraping {source_name}: {e}")
            all_coupons[source_name] = []

    return all_coupons
