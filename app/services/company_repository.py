import logging
from typing import Any

from sqlalchemy import insert, update
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.db.models import AuditLog, Company, CompanyContact, CompanyService
from app.mappers.company_fields import contact_row, service_row
from app.mappers.serializers import parse_json_array, parse_json_object, to_json_string
from app.schemas.company import CompanyProfile
from app.schemas.website import ContactCandidate, ServiceCandidate, TechStackProfile

logger = logging.getLogger(__name__)


def _to_profile(company: Company) -> CompanyProfile:
    tech = parse_json_object(company.tech_stack)
    return CompanyProfile(
        id=company.id,
        name=company.name,
        website=company.website,
        industry=company.industry,
        brand_tone=company.brand_tone,
        description=company.description,
        short_pitch=company.short_pitch,
        usp=parse_json_array(company.usp),
        positioning=company.positioning,
        business_model=company.business_model,
        target_market=company.target_market,
        price_level=company.price_level,
        market_position=company.market_position,
        website_system=company.website_system,
        tech_stack=TechStackProfile.model_validate(tech) if tech is not None else None,
        website_reachable=company.website_reachable,
        ssl_enabled=company.ssl_enabled,
    )


class CompanyRepository:
    """Read/update companies and append child rows and audit entries.

    Each public method runs in its own transaction. Child inserts are
    unconditional appends: running a pipeline twice duplicates rows.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self._sessions = session_factory

    async def get_company(self, company_id: str) -> CompanyProfile | None:
        async with self._sessions() as session:
            company = await session.get(Company, company_id)
            if company is None:
                return None
            return _to_profile(company)

    async def update_company(
        self, company_id: str, fields: dict[str, Any]
    ) -> CompanyProfile:
        """Apply all top-level field changes in one UPDATE statement."""
        async with self._sessions() as session:
            async with session.begin():
                await session.execute(
                    update(Company).where(Company.id == company_id).values(**fields)
                )
            company = await session.get(Company, company_id, populate_existing=True)
        logger.info("Updated company %s (%s)", company_id, ", ".join(sorted(fields)))
        return _to_profile(company)

    async def add_contacts(
        self, company_id: str, contacts: list[ContactCandidate]
    ) -> int:
        if not contacts:
            return 0
        rows = [contact_row(company_id, c) for c in contacts]
        async with self._sessions() as session:
            async with session.begin():
                await session.execute(insert(CompanyContact), rows)
        logger.info("Inserted %d contacts for company %s", len(rows), company_id)
        return len(rows)

    async def add_services(
        self, company_id: str, services: list[ServiceCandidate]
    ) -> int:
        if not services:
            return 0
        rows = [service_row(company_id, s) for s in services]
        async with self._sessions() as session:
            async with session.begin():
                await session.execute(insert(CompanyService), rows)
        logger.info("Inserted %d services for company %s", len(rows), company_id)
        return len(rows)

    async def create_audit_log(
        self,
        entity_id: str,
        summary: str,
        action: str = "sync",
        entity_type: str = "Company",
        payload: dict | None = None,
        actor: str = "admin",
    ) -> None:
        async with self._sessions() as session:
            async with session.begin():
                session.add(
                    AuditLog(
                        actor=actor,
                        entity_type=entity_type,
                        entity_id=entity_id,
                        action=action,
                        payload=to_json_string(payload) if payload else None,
                        summary=summary,
                    )
                )
