"""Tests for CompanyIntelService pipeline variants with mocked collaborators."""

from unittest.mock import AsyncMock

import pytest

from app.exceptions.custom import (
    CompanyNotFoundError,
    FetchError,
    MissingWebsiteError,
    PipelineError,
)
from app.schemas.company import CompanyProfile
from app.schemas.narrative import BusinessModelResult, NarrativeResult
from app.schemas.website import ScrapedDocument, ServiceCandidate, TechStackProfile
from app.services.company_generator import CompanyGenerator
from app.services.company_intel import RULE_DESCRIPTION_SERVICES, CompanyIntelService
from app.services.company_repository import CompanyRepository
from app.services.fetcher import WebsiteFetcher
from app.services.tech_stack import TechStackDetector

_HTML = """
<html><body>
  <h1>Marketing Beratung</h1>
  <h2>SEO</h2>
  <p>info@acme.de +49 30 1234567</p>
</body></html>
"""

_NARRATIVE = NarrativeResult(
    description="Acme ist toll.", short_pitch="Pitch", usp=["a", "b", "c"], positioning="Pos"
)
_BUSINESS = BusinessModelResult(
    business_model="Agentur", target_market="KMU", price_level="high", market_position="national"
)


def _company(**kwargs) -> CompanyProfile:
    defaults = {"id": "C1", "name": "Acme", "website": "https://acme.de", "industry": "Marketing"}
    defaults.update(kwargs)
    return CompanyProfile(**defaults)


@pytest.fixture
def repo():
    mock = AsyncMock(spec=CompanyRepository)
    mock.get_company.return_value = _company()
    mock.update_company.side_effect = lambda cid, fields: _company(**{
        k: v for k, v in fields.items() if k not in ("usp", "tech_stack")
    })
    mock.add_services.side_effect = lambda cid, services: len(services)
    mock.add_contacts.side_effect = lambda cid, contacts: len(contacts)
    return mock


@pytest.fixture
def fetcher():
    mock = AsyncMock(spec=WebsiteFetcher)
    mock.fetch.return_value = ScrapedDocument(
        source_url="https://acme.de", raw_html=_HTML, plain_text="Marketing Beratung SEO"
    )
    return mock


@pytest.fixture
def tech():
    mock = AsyncMock(spec=TechStackDetector)
    mock.detect.return_value = TechStackProfile(cms="WordPress", tracking=["Meta Pixel"])
    return mock


@pytest.fixture
def generator():
    mock = AsyncMock(spec=CompanyGenerator)
    mock.generate_description.return_value = _NARRATIVE
    mock.analyze_business_model.return_value = _BUSINESS
    mock.generate_services.return_value = []
    return mock


@pytest.fixture
def service(repo, fetcher, tech, generator):
    return CompanyIntelService(repo, fetcher, tech, generator)


def _audit_summaries(repo) -> list[str]:
    return [c.args[1] for c in repo.create_audit_log.call_args_list]


# --- preconditions ---


@pytest.mark.parametrize(
    "method", ["analyze_website", "detect_tech", "extract_services", "generate_description"]
)
async def test_unknown_company(service, repo, method):
    repo.get_company.return_value = None
    with pytest.raises(CompanyNotFoundError):
        await getattr(service, method)("C404")
    repo.update_company.assert_not_called()


@pytest.mark.parametrize(
    "method", ["analyze_website", "detect_tech", "extract_services", "generate_description"]
)
async def test_missing_website(service, repo, fetcher, method):
    repo.get_company.return_value = _company(website=None)
    with pytest.raises(MissingWebsiteError):
        await getattr(service, method)("C1")
    fetcher.fetch.assert_not_called()
    repo.update_company.assert_not_called()
    repo.create_audit_log.assert_not_called()


# --- analyze_website ---


async def test_analyze_website_single_update(service, repo):
    result = await service.analyze_website("C1")

    repo.update_company.assert_awaited_once()
    fields = repo.update_company.call_args.args[1]
    assert fields["description"] == "Acme ist toll."
    assert fields["usp"] == '["a", "b", "c"]'
    assert fields["business_model"] == "Agentur"
    assert fields["price_level"] == "high"
    assert fields["website_system"] == "WordPress"
    assert '"cms": "WordPress"' in fields["tech_stack"]
    assert fields["website_reachable"] is True
    assert fields["ssl_enabled"] is True

    assert result.website_system == "WordPress"
    assert result.contacts_added == 1
    assert _audit_summaries(repo) == ["Website analysiert für Acme"]


async def test_analyze_website_heading_services_when_ai_empty(service, repo):
    result = await service.analyze_website("C1")

    services = repo.add_services.call_args.args[1]
    assert [s.title for s in services] == ["Marketing Beratung", "SEO"]
    assert result.services_added == 2


async def test_analyze_website_prefers_ai_services(service, repo, generator):
    generator.generate_services.return_value = [ServiceCandidate(title="KI Leistung")]
    await service.analyze_website("C1")

    services = repo.add_services.call_args.args[1]
    assert [s.title for s in services] == ["KI Leistung"]


async def test_analyze_website_caps_services(service, repo, generator):
    generator.generate_services.return_value = [
        ServiceCandidate(title=f"Leistung {i}") for i in range(15)
    ]
    result = await service.analyze_website("C1")
    assert len(repo.add_services.call_args.args[1]) == 10
    assert result.services_added == 10


async def test_analyze_website_http_site_no_ssl(service, repo):
    repo.get_company.return_value = _company(website="http://acme.de")
    await service.analyze_website("C1")
    assert repo.update_company.call_args.args[1]["ssl_enabled"] is False


async def test_analyze_website_keeps_existing_system(service, repo, tech):
    repo.get_company.return_value = _company(website_system="Typo3")
    tech.detect.return_value = TechStackProfile()
    await service.analyze_website("C1")
    assert repo.update_company.call_args.args[1]["website_system"] == "Typo3"


async def test_analyze_website_passes_context_to_generator(service, generator):
    await service.analyze_website("C1")

    ctx = generator.generate_description.call_args.args[0]
    assert ctx.name == "Acme"
    assert ctx.industry == "Marketing"
    assert ctx.scraped_text == "Marketing Beratung SEO"
    bm_ctx = generator.analyze_business_model.call_args.args[0]
    assert bm_ctx.description == "Acme ist toll."


async def test_analyze_website_fetch_error_no_mutation(service, repo, fetcher):
    fetcher.fetch.side_effect = FetchError("HTTP 500", "https://acme.de", status_code=500)
    with pytest.raises(PipelineError) as exc_info:
        await service.analyze_website("C1")

    assert exc_info.value.message == "Website-Analyse fehlgeschlagen"
    assert exc_info.value.details == "HTTP 500"
    repo.update_company.assert_not_called()
    repo.add_services.assert_not_called()
    repo.add_contacts.assert_not_called()


async def test_analyze_website_db_error_wrapped(service, repo):
    repo.update_company.side_effect = RuntimeError("database is locked")
    with pytest.raises(PipelineError, match="Website-Analyse fehlgeschlagen"):
        await service.analyze_website("C1")
    repo.add_services.assert_not_called()


# --- detect_tech ---


async def test_detect_tech_only_tech_fields(service, repo, fetcher, generator):
    result = await service.detect_tech("C1")

    fields = repo.update_company.call_args.args[1]
    assert set(fields) == {"website_system", "tech_stack"}
    assert result.website_system == "WordPress"
    fetcher.fetch.assert_not_called()
    generator.generate_description.assert_not_called()
    assert _audit_summaries(repo) == ["Tech-Stack analysiert für Acme"]


async def test_detect_tech_error(service, tech):
    tech.detect.side_effect = FetchError("Timeout", "https://acme.de")
    with pytest.raises(PipelineError, match="Tech-Analyse fehlgeschlagen"):
        await service.detect_tech("C1")


# --- extract_services ---


async def test_extract_services_ai_first(service, repo, generator):
    generator.generate_services.return_value = [ServiceCandidate(title="Webdesign")]
    result = await service.extract_services("C1")

    assert result.services_added == 1
    repo.update_company.assert_not_called()
    assert _audit_summaries(repo) == ["1 Leistungen aus Website extrahiert"]


async def test_extract_services_heading_fallback(service, repo):
    result = await service.extract_services("C1")
    assert result.services_added == 2
    repo.update_company.assert_not_called()


async def test_extract_services_nothing_found(service, repo, fetcher):
    fetcher.fetch.return_value = ScrapedDocument(source_url="https://acme.de", raw_html="<p>leer</p>")
    result = await service.extract_services("C1")

    assert result.services_added == 0
    repo.add_services.assert_not_called()
    repo.create_audit_log.assert_not_called()


# --- generate_description ---


async def test_generate_description_narrative_only(service, repo):
    result = await service.generate_description("C1")

    fields = repo.update_company.call_args.args[1]
    assert set(fields) == {
        "description", "short_pitch", "usp", "positioning",
        "business_model", "target_market", "price_level", "market_position",
    }
    assert result.services_added == 0
    repo.add_services.assert_not_called()
    assert _audit_summaries(repo) == ["Beschreibung neu generiert für Acme"]


async def test_generate_description_rule_fires(service, repo, generator):
    generator.generate_services.return_value = [
        ServiceCandidate(title=f"Leistung {i}") for i in range(8)
    ]
    result = await service.generate_description("C1")

    assert result.services_added == 6
    assert len(repo.add_services.call_args.args[1]) == 6
    assert len(repo.create_audit_log.call_args_list) == 2
    rule_call = repo.create_audit_log.call_args_list[1]
    assert rule_call.kwargs["payload"] == {"rule": RULE_DESCRIPTION_SERVICES, "added": 6}


async def test_generate_description_no_heading_fallback(service, repo):
    await service.generate_description("C1")
    repo.add_services.assert_not_called()
