import logging

import httpx

from app.schemas.website import TechStackProfile
from app.services.fetcher import WebsiteFetcher

logger = logging.getLogger(__name__)

# Checked in order against the lower-cased HTML; first hit wins.
CMS_SIGNATURES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("WordPress", ("wp-content", "wp-json")),
    ("Shopify", ("cdn.shopify.com", "shopify")),
    ("Webflow", ("webflow",)),
    ("Wix", ("wixstatic", "wixsite", "wix.com")),
    ("Custom React/Next.js", ("/_next/", "__next")),
)

# Every matching label is appended; labels are disjoint.
TRACKING_SIGNATURES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Google Analytics", ("gtag(", "google-analytics")),
    ("Meta Pixel", ("facebook pixel", "connect.facebook.net")),
    ("Google Tag Manager", ("googletagmanager.com",)),
)

CDN_HEADERS = ("server", "x-served-by", "cf-ray", "x-cache")

SEO_META_PRESENT = "Meta Description erkannt"
SEO_META_MISSING = "Meta Description fehlt"


def _header(headers: httpx.Headers | dict[str, str], name: str) -> str | None:
    if isinstance(headers, httpx.Headers):
        values = headers.get_list(name)
    else:
        lowered = {k.lower(): v for k, v in headers.items()}
        raw = lowered.get(name)
        values = raw if isinstance(raw, list) else [raw] if raw else []
    return ", ".join(values) if values else None


def _matches(html: str, markers: tuple[str, ...]) -> bool:
    return any(marker in html for marker in markers)


def classify(html: str, headers: httpx.Headers | dict[str, str]) -> TechStackProfile:
    """Pure signature matching over page HTML and response headers."""
    lower = (html or "").lower()

    cms = next((name for name, markers in CMS_SIGNATURES if _matches(lower, markers)), None)
    tracking = [label for label, markers in TRACKING_SIGNATURES if _matches(lower, markers)]

    cdn = None
    for name in CDN_HEADERS:
        cdn = _header(headers, name)
        if cdn:
            break

    return TechStackProfile(
        cms=cms,
        hosting=_header(headers, "server"),
        cdn=cdn,
        tracking=tracking,
        seo_basics=SEO_META_PRESENT if 'meta name="description"' in lower else SEO_META_MISSING,
    )


class TechStackDetector:
    def __init__(self, fetcher: WebsiteFetcher):
        self._fetcher = fetcher

    async def detect(self, url: str) -> TechStackProfile:
        """Fetch ``url`` and fingerprint it. Raises FetchError like the fetcher."""
        resp = await self._fetcher.fetch_response(url)
        profile = classify(resp.text, resp.headers)
        logger.info(
            "Detected tech for %s: cms=%s tracking=%s", url, profile.cms, profile.tracking
        )
        return profile
