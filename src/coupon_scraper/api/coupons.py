import logging
from typing import List

from fastapi import APIRouter

from ..schema import CouponRecord
from ..scrapers import get_scraper
from .responses import UTF8JSONResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["coupons"],
)


def _scrape(source_name: str, label: str):
    """Run one scraper for this request; any escaping error becomes a 500 envelope."""
    logger.info(f"Received request for {label}")

    try:
        with get_scraper(source_name) as scraper:
            coupons = scraper.scrape_active_coupons()
    except Exception as e:
        logger.error(f"Error fetching {label}: {e}", exc_info=True)
        return UTF8JSONResponse(
            status_code=500,
            content={"error": f"Failed to fetch {label}", "message": str(e)},
        )

    logger.info(f"Returning {len(coupons)} {label}")
    return [coupon.model_dump() for coupon in coupons]


@router.get("/genshin", response_model=List[CouponRecord])
def genshin_coupons():
    return _scrape("genshin", "Genshin Impact coupons")


@router.get("/honkai-star-rail", response_model=List[CouponRecord])
def honkai_star_rail_coupons():
    return _scrape("honkai_star_rail", "Honkai Star Rail coupons")


@router.get("/blox-fruits", response_model=List[CouponRecord])
def blox_fruits_coupons():
    return _scrape("blox_fruits", "Blox Fruits codes")


@router.get("/play-together", response_model=List[CouponRecord])
def play_together_coupons():
    return _scrape("play_together", "Play Together coupons")


@router.get("/fc-mobile", response_model=List[CouponRecord])
def fc_mobile_coupons():
    return _scrape("fc_mobile", "FC Mobile codes")
