"""Heuristic extraction of contacts and services from raw HTML.

Both extractors are pure and total: bad markup yields an empty list.
"""

import logging
import re

from bs4 import BeautifulSoup

from app.schemas.website import ContactCandidate, ServiceCandidate
from app.services.fetcher import body_text, clean_text

logger = logging.getLogger(__name__)

MAX_PER_FIELD = 5
MAX_HEADINGS = 12
MIN_TITLE_LENGTH = 3
GENERIC_CATEGORY = "Allgemein"

# Order matters: the first contained keyword becomes the category.
SERVICE_KEYWORDS = (
    "beratung",
    "entwicklung",
    "marketing",
    "seo",
    "design",
    "automation",
    "strategie",
    "crm",
)

_EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}")

# optional "+", a digit, at least 6 digits/separators, a closing digit
_PHONE_RE = re.compile(r"\+?\d[\d\s\-()]{6,}\d")


def _unique(values: list[str], limit: int) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for value in values:
        value = value.strip()
        if not value or value in seen:
            continue
        seen.add(value)
        out.append(value)
        if len(out) >= limit:
            break
    return out


def extract_contacts(html: str) -> list[ContactCandidate]:
    """Collect emails, phones and LinkedIn links and zip them by position.

    The i-th email, i-th phone and i-th LinkedIn link form one candidate.
    This is positional, not associative: they need not belong to the same
    person on the page.
    """
    try:
        soup = BeautifulSoup(html or "", "html.parser")
    except Exception:
        logger.exception("Could not parse HTML for contact extraction")
        return []

    text = body_text(soup)
    emails = _unique(_EMAIL_RE.findall(text), MAX_PER_FIELD)
    phones = _unique(_PHONE_RE.findall(text), MAX_PER_FIELD)
    linkedin = _unique(
        [a.get("href", "") for a in soup.select("a[href*='linkedin.com']")],
        MAX_PER_FIELD,
    )

    count = max(len(emails), len(phones), len(linkedin))
    contacts: list[ContactCandidate] = []
    for i in range(count):
        candidate = ContactCandidate(
            email=emails[i] if i < len(emails) else None,
            phone=phones[i] if i < len(phones) else None,
            linkedin_url=linkedin[i] if i < len(linkedin) else None,
        )
        if not candidate.is_empty():
            contacts.append(candidate)
    return contacts


def extract_services(html: str) -> list[ServiceCandidate]:
    """Turn h1-h3 headings into service candidates labelled by seed keyword."""
    try:
        soup = BeautifulSoup(html or "", "html.parser")
    except Exception:
        logger.exception("Could not parse HTML for service extraction")
        return []

    services: list[ServiceCandidate] = []
    for heading in soup.find_all(["h1", "h2", "h3"]):
        title = clean_text(heading.get_text(separator=" "))
        if len(title) < MIN_TITLE_LENGTH:
            continue

        lower = title.lower()
        keywords = [kw for kw in SERVICE_KEYWORDS if kw in lower]
        services.append(
            ServiceCandidate(
                category=keywords[0] if keywords else GENERIC_CATEGORY,
                title=title,
                description=title,
                keywords=keywords,
            )
        )
        if len(services) >= MAX_HEADINGS:
            break
    return services
