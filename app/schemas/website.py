from pydantic import BaseModel, ConfigDict, Field


class ScrapedDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    source_url: str
    raw_html: str
    plain_text: str = ""
    title: str = ""
    meta_description: str = ""
    outbound_links: list[str] = []  # absolute, page order, max 150
    meta_tags: dict[str, str] = {}


class ContactCandidate(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    linkedin_url: str | None = None

    def is_empty(self) -> bool:
        return not (self.name or self.email or self.phone or self.linkedin_url)


class ServiceCandidate(BaseModel):
    category: str = "Allgemein"
    title: str = Field(min_length=3)
    description: str | None = None
    keywords: list[str] = []


class TechStackProfile(BaseModel):
    # Persisted blob keys are camelCase: seoBasics.
    model_config = ConfigDict(populate_by_name=True)

    cms: str | None = None
    hosting: str | None = None
    cdn: str | None = None
    tracking: list[str] = []
    seo_basics: str | None = Field(default=None, alias="seoBasics")
