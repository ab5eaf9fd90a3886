import httpx
import pytest
from httpx import ASGITransport
from sqlalchemy import select

from app.db.engine import build_engine, build_session_factory, create_tables
from app.db.models import AuditLog, Company, CompanyContact, CompanyService
from app.services.company_repository import CompanyRepository


@pytest.fixture
def mock_env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("CREATE_TABLES", "true")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)


@pytest.fixture
async def session_factory():
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await create_tables(engine)
    yield build_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def repository(session_factory):
    return CompanyRepository(session_factory)


class StoredRows:
    """Reads child rows and audit entries back for assertions."""

    def __init__(self, session_factory):
        self._sessions = session_factory

    async def _all(self, stmt):
        async with self._sessions() as session:
            return list((await session.execute(stmt)).scalars())

    async def contacts(self, company_id: str) -> list[CompanyContact]:
        return await self._all(
            select(CompanyContact).where(CompanyContact.company_id == company_id)
        )

    async def services(self, company_id: str) -> list[CompanyService]:
        return await self._all(
            select(CompanyService).where(CompanyService.company_id == company_id)
        )

    async def audit_logs(self, entity_id: str) -> list[AuditLog]:
        return await self._all(
            select(AuditLog).where(AuditLog.entity_id == entity_id).order_by(AuditLog.created_at)
        )


@pytest.fixture
def stored(session_factory):
    return StoredRows(session_factory)


async def _insert_company(session_factory, **fields) -> str:
    # The pipeline only updates companies, so tests create them directly.
    fields.setdefault("name", "Acme GmbH")
    async with session_factory() as session:
        async with session.begin():
            company = Company(**fields)
            session.add(company)
            await session.flush()
            company_id = company.id
    return company_id


@pytest.fixture
def seed_company(session_factory):
    async def _seed(**fields) -> str:
        return await _insert_company(session_factory, **fields)

    return _seed


@pytest.fixture
async def app_state(mock_env):
    from app.main import app, lifespan

    async with lifespan(app):
        yield app.state


@pytest.fixture
def app_stored(app_state):
    return StoredRows(app_state.session_factory)


@pytest.fixture
def seed_app_company(app_state):
    async def _seed(**fields) -> str:
        return await _insert_company(app_state.session_factory, **fields)

    return _seed


@pytest.fixture
async def client(app_state):
    from app.main import app

    async with httpx.AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c
