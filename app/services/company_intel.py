import logging

from app.exceptions.custom import CompanyNotFoundError, MissingWebsiteError, PipelineError
from app.mappers.company_fields import (
    MAX_CONTACTS,
    MAX_SERVICES,
    business_model_fields,
    narrative_fields,
    reachability_fields,
    tech_stack_fields,
)
from app.schemas.company import CompanyProfile
from app.schemas.narrative import BusinessModelContext, DescriptionContext
from app.schemas.responses import PipelineResult
from app.schemas.website import ServiceCandidate
from app.services.company_generator import CompanyGenerator
from app.services.company_repository import CompanyRepository
from app.services.extractor import extract_contacts, extract_services
from app.services.fetcher import WebsiteFetcher
from app.services.tech_stack import TechStackDetector

logger = logging.getLogger(__name__)

# Services inserted by the description-changed rule.
RULE_MAX_SERVICES = 6
RULE_DESCRIPTION_SERVICES = "description_generated_extract_services"


class CompanyIntelService:
    """Website intelligence pipelines for one company per call.

    Every variant: load company, check website, run its steps, persist the
    top-level fields in one update, append child rows, write an audit entry.
    Failures after the precondition checks surface as PipelineError.
    """

    def __init__(
        self,
        repository: CompanyRepository,
        fetcher: WebsiteFetcher,
        tech_detector: TechStackDetector,
        generator: CompanyGenerator,
    ):
        self._repo = repository
        self._fetcher = fetcher
        self._tech = tech_detector
        self._generator = generator

    async def _load(self, company_id: str) -> CompanyProfile:
        company = await self._repo.get_company(company_id)
        if company is None:
            raise CompanyNotFoundError(company_id)
        if not company.website:
            raise MissingWebsiteError(company_id)
        return company

    async def analyze_website(self, company_id: str) -> PipelineResult:
        company = await self._load(company_id)
        website = company.website
        try:
            scraped = await self._fetcher.fetch(website)
            contacts = extract_contacts(scraped.raw_html)
            scraped_services = extract_services(scraped.raw_html)
            tech = await self._tech.detect(website)

            narrative = await self._generator.generate_description(
                DescriptionContext(
                    name=company.name,
                    industry=company.industry,
                    website=website,
                    brand_tone=company.brand_tone,
                    scraped_text=scraped.plain_text,
                )
            )
            business = await self._generator.analyze_business_model(
                BusinessModelContext(
                    name=company.name,
                    industry=company.industry,
                    description=narrative.description,
                    scraped_text=scraped.plain_text,
                )
            )
            ai_services = await self._generator.generate_services(
                scraped.plain_text, company.industry
            )
            services = ai_services or scraped_services

            fields = {
                **narrative_fields(narrative),
                **business_model_fields(business),
                **tech_stack_fields(tech, company.website_system),
                **reachability_fields(website),
            }
            updated = await self._repo.update_company(company_id, fields)

            services_added = await self._repo.add_services(company_id, services[:MAX_SERVICES])
            contacts_added = await self._repo.add_contacts(company_id, contacts[:MAX_CONTACTS])

            await self._repo.create_audit_log(
                company_id,
                f"Website analysiert für {company.name}",
                payload={"website": website},
            )
        except Exception as exc:
            logger.exception("Website analysis failed for company %s", company_id)
            raise PipelineError("Website-Analyse fehlgeschlagen", str(exc)) from exc

        logger.info(
            "Analyzed %s: %d services (%s), %d contacts",
            website,
            services_added,
            "ai" if ai_services else "headings",
            contacts_added,
        )
        return PipelineResult(
            company=updated,
            contacts_added=contacts_added,
            services_added=services_added,
            website_system=tech.cms,
        )

    async def detect_tech(self, company_id: str) -> PipelineResult:
        company = await self._load(company_id)
        try:
            tech = await self._tech.detect(company.website)
            updated = await self._repo.update_company(
                company_id, tech_stack_fields(tech, company.website_system)
            )
            await self._repo.create_audit_log(
                company_id, f"Tech-Stack analysiert für {company.name}"
            )
        except Exception as exc:
            logger.exception("Tech detection failed for company %s", company_id)
            raise PipelineError("Tech-Analyse fehlgeschlagen", str(exc)) from exc

        return PipelineResult(company=updated, website_system=tech.cms)

    async def extract_services(self, company_id: str) -> PipelineResult:
        company = await self._load(company_id)
        try:
            scraped = await self._fetcher.fetch(company.website)
            services = await self._generator.generate_services(
                scraped.plain_text, company.industry
            )
            if not services:
                services = extract_services(scraped.raw_html)

            if not services:
                logger.info("No services found on %s", company.website)
                return PipelineResult(company=company, website_system=company.website_system)

            services_added = await self._repo.add_services(company_id, services[:MAX_SERVICES])
            await self._repo.create_audit_log(
                company_id, f"{services_added} Leistungen aus Website extrahiert"
            )
        except Exception as exc:
            logger.exception("Service extraction failed for company %s", company_id)
            raise PipelineError("Leistungen konnten nicht extrahiert werden", str(exc)) from exc

        return PipelineResult(
            company=company,
            services_added=services_added,
            website_system=company.website_system,
        )

    async def generate_description(self, company_id: str) -> PipelineResult:
        company = await self._load(company_id)
        try:
            scraped = await self._fetcher.fetch(company.website)
            narrative = await self._generator.generate_description(
                DescriptionContext(
                    name=company.name,
                    industry=company.industry,
                    website=company.website,
                    brand_tone=company.brand_tone,
                    scraped_text=scraped.plain_text,
                )
            )
            business = await self._generator.analyze_business_model(
                BusinessModelContext(
                    name=company.name,
                    industry=company.industry,
                    description=narrative.description,
                    scraped_text=scraped.plain_text,
                )
            )
            services = await self._generator.generate_services(
                scraped.plain_text, company.industry
            )

            updated = await self._repo.update_company(
                company_id, {**narrative_fields(narrative), **business_model_fields(business)}
            )
            await self._repo.create_audit_log(
                company_id, f"Beschreibung neu generiert für {company.name}"
            )

            services_added = await self._apply_description_rule(company_id, services)
        except Exception as exc:
            logger.exception("Description generation failed for company %s", company_id)
            raise PipelineError("Beschreibung konnte nicht generiert werden", str(exc)) from exc

        return PipelineResult(
            company=updated,
            services_added=services_added,
            website_system=updated.website_system,
        )

    async def _apply_description_rule(
        self, company_id: str, services: list[ServiceCandidate]
    ) -> int:
        """Automation rule: a regenerated description also refreshes services."""
        if not services:
            return 0
        added = await self._repo.add_services(company_id, services[:RULE_MAX_SERVICES])
        await self._repo.create_audit_log(
            company_id,
            "Automatisierungsregel: Leistungen nach Beschreibung aktualisiert",
            payload={"rule": RULE_DESCRIPTION_SERVICES, "added": added},
        )
        logger.info(
            "Rule %s fired for company %s (%d services)",
            RULE_DESCRIPTION_SERVICES, company_id, added,
        )
        return added
