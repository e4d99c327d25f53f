from fastapi import APIRouter

from . import coupons, health
from .responses import UTF8JSONResponse

router = APIRouter(
    prefix="/craw",
    default_response_class=UTF8JSONResponse,
)

router.include_router(coupons.router)
router.include_router(health.router)
