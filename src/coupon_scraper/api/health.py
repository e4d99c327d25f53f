import logging
import time

from fastapi import APIRouter
from pydantic import BaseModel

logger = logging.getLogger(__name__)

SERVICE_NAME = "HoYoverse Games Coupon Scraper"

router = APIRouter(
    prefix="/health",
    tags=["health"],
)


class Health(BaseModel):
    status: str
    service: str
    timestamp: str


@router.get("", response_model=Health)
def health():
    return Health(
        status="UP",
        service=SERVICE_NAME,
        timestamp=str(int(time.time() * 1000)),
    )
