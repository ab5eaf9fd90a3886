from typing import Any

from app.mappers.serializers import to_json_string
from app.schemas.narrative import BusinessModelResult, NarrativeResult
from app.schemas.website import ContactCandidate, ServiceCandidate, TechStackProfile

MAX_CONTACTS = 5
MAX_SERVICES = 10

CONTACT_NOTE = "Automatisch aus Website extrahiert"
DEFAULT_CONTACT_NAME = "Kontakt"
DEFAULT_SERVICE_CATEGORY = "Allgemein"


def narrative_fields(narrative: NarrativeResult) -> dict[str, Any]:
    return {
        "description": narrative.description,
        "short_pitch": narrative.short_pitch,
        "usp": to_json_string(narrative.usp),
        "positioning": narrative.positioning,
    }


def business_model_fields(business: BusinessModelResult) -> dict[str, Any]:
    return {
        "business_model": business.business_model,
        "target_market": business.target_market,
        "price_level": business.price_level,
        "market_position": business.market_position,
    }


def tech_stack_fields(
    tech: TechStackProfile, current_website_system: str | None
) -> dict[str, Any]:
    """Tech profile overwrites fully; websiteSystem keeps the old value when no CMS matched."""
    return {
        "website_system": tech.cms or current_website_system,
        "tech_stack": to_json_string(tech.model_dump(by_alias=True, exclude_none=True)),
    }


def reachability_fields(website: str) -> dict[str, Any]:
    # SSL is inferred from the scheme only, no TLS handshake is made.
    return {
        "website_reachable": True,
        "ssl_enabled": website.lower().startswith("https://"),
    }


def contact_row(company_id: str, contact: ContactCandidate) -> dict[str, Any]:
    return {
        "company_id": company_id,
        "name": contact.name or contact.email or contact.phone or DEFAULT_CONTACT_NAME,
        "email": contact.email,
        "phone": contact.phone,
        "linkedin": contact.linkedin_url,
        "role": None,
        "responsibilities": None,
        "is_decision_maker": False,
        "notes": CONTACT_NOTE,
    }


def service_row(company_id: str, service: ServiceCandidate) -> dict[str, Any]:
    return {
        "company_id": company_id,
        "category": service.category or DEFAULT_SERVICE_CATEGORY,
        "title": service.title,
        "description": service.description,
        "keywords": to_json_string(service.keywords or []),
        "relevance_score": None,
    }
