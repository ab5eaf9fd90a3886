from typing import Literal

from pydantic import BaseModel

PriceLevel = Literal["low", "medium", "high", "premium"]
MarketPosition = Literal["lokal", "national", "global"]


class DescriptionContext(BaseModel):
    name: str
    industry: str | None = None
    website: str | None = None
    brand_tone: str | None = None
    scraped_text: str = ""


class BusinessModelContext(BaseModel):
    name: str
    industry: str | None = None
    description: str | None = None
    scraped_text: str = ""


class NarrativeResult(BaseModel):
    description: str
    short_pitch: str
    usp: list[str]
    positioning: str


class BusinessModelResult(BaseModel):
    business_model: str
    target_market: str
    price_level: PriceLevel
    market_position: MarketPosition
