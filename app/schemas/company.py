from pydantic import BaseModel, ConfigDict

from app.schemas.website import TechStackProfile


class CompanyProfile(BaseModel):
    """Read model of the company aggregate with JSON columns decoded."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    website: str | None = None
    industry: str | None = None
    brand_tone: str | None = None
    description: str | None = None
    short_pitch: str | None = None
    usp: list[str] = []
    positioning: str | None = None
    business_model: str | None = None
    target_market: str | None = None
    price_level: str | None = None
    market_position: str | None = None
    website_system: str | None = None
    tech_stack: TechStackProfile | None = None
    website_reachable: bool | None = None
    ssl_enabled: bool | None = None
