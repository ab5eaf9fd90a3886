import logging
import re
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from app.exceptions.custom import FetchError
from app.schemas.website import ScrapedDocument

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; CompanyIntelBot/1.0)"

MAX_BODY_BYTES = 2 * 1024 * 1024  # 2 MB

_MAX_LINKS = 150
_WS_RE = re.compile(r"\s+")


def clean_text(text: str) -> str:
    """Collapse whitespace runs into single spaces."""
    return _WS_RE.sub(" ", text).strip()


def body_text(soup: BeautifulSoup) -> str:
    root = soup.body or soup
    return clean_text(root.get_text(separator=" "))


class WebsiteFetcher:
    """Single-attempt page retrieval. Redirect cap is set on the shared client."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self._client = client
        self._timeout = timeout
        self._user_agent = user_agent

    async def fetch_response(self, url: str) -> httpx.Response:
        try:
            resp = await self._client.get(
                url,
                follow_redirects=True,
                timeout=self._timeout,
                headers={"User-Agent": self._user_agent},
            )
        except httpx.TimeoutException as exc:
            logger.warning("Timeout fetching %s", url)
            raise FetchError(f"Timeout nach {self._timeout:g}s: {url}", url) from exc
        except httpx.TooManyRedirects as exc:
            logger.warning("Too many redirects for %s", url)
            raise FetchError(f"Zu viele Weiterleitungen: {url}", url) from exc
        except httpx.HTTPError as exc:
            logger.warning("Failed to fetch %s: %s", url, exc)
            raise FetchError(f"Abruf fehlgeschlagen: {exc}", url) from exc

        if not resp.is_success:
            logger.warning("Fetching %s returned HTTP %d", url, resp.status_code)
            raise FetchError(
                f"HTTP {resp.status_code} für {url}", url, status_code=resp.status_code
            )

        if len(resp.content) > MAX_BODY_BYTES:
            logger.warning("Rejecting oversized page %s (%d bytes)", url, len(resp.content))
            raise FetchError(
                f"Seite zu groß ({len(resp.content)} Bytes): {url}", url, status_code=resp.status_code
            )
        return resp

    async def fetch(self, url: str) -> ScrapedDocument:
        resp = await self.fetch_response(url)
        document = parse_document(url, resp.text)
        logger.info(
            "Fetched %s (%d chars text, %d links)",
            url, len(document.plain_text), len(document.outbound_links),
        )
        return document


def parse_document(url: str, html: str) -> ScrapedDocument:
    soup = BeautifulSoup(html, "html.parser")

    title_tag = soup.find("title")
    title = clean_text(title_tag.get_text()) if title_tag else ""

    description_tag = soup.find("meta", attrs={"name": "description"})
    meta_description = clean_text(description_tag.get("content", "")) if description_tag else ""

    links: list[str] = []
    for a in soup.find_all("a", href=True):
        href = a["href"].strip()
        if not href:
            continue
        links.append(urljoin(url, href))
        if len(links) >= _MAX_LINKS:
            break

    meta: dict[str, str] = {}
    for tag in soup.find_all("meta"):
        name = tag.get("name") or tag.get("property")
        content = tag.get("content")
        if name and content:
            meta[name] = content

    return ScrapedDocument(
        source_url=url,
        raw_html=html,
        plain_text=body_text(soup),
        title=title,
        meta_description=meta_description,
        outbound_links=links,
        meta_tags=meta,
    )
