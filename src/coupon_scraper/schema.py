from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNKNOWN_REWARD = "Unknown reward"
UNKNOWN_DATE = "Unknown"
DEFAULT_SERVER = "Global"


class CouponStatus(str, Enum):
    ACTIVE = "Active"
    ACTIVE_INDEFINITE = "Active (Indefinite)"
    EXPIRED = "Expired"


class CouponRecord(BaseModel):
    """
    Normalized record for a single redemption code, regardless of source.

    Every scraper projects its rows or text fragments into this shape so
    downstream consumers never deal with wiki-specific HTML.
    """

    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    code: str = Field(..., min_length=1, description="The redeemable token")
    reward: str = Field(UNKNOWN_REWARD, description="Concatenated list of rewards")
    date: str = Field(UNKNOWN_DATE, description="Release/discovery/validity date")
    status: CouponStatus = Field(CouponStatus.ACTIVE, description="Derived status")
    server: str = Field(DEFAULT_SERVER, description="Regional scope")

    # Reserved for debugging; no scraper fills it in today
    raw: Optional[str] = Field(None, description="Unparsed source fragment")

    @field_validator("code", mode="before")
    @classmethod
    def strip_code(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("reward", mode="before")
    @classmethod
    def default_reward(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return UNKNOWN_REWARD
        return v

    @field_validator("date", mode="before")
    @classmethod
    def default_date(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return UNKNOWN_DATE
        return v

    @field_validator("server", mode="before")
    @classmethod
    def default_server(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_SERVER
        return v.strip() if isinstance(v, str) else v

    @property
    def is_active(self) -> bool:
        return self.status != CouponStatus.EXPIRED.value
